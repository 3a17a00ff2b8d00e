"""
Circuit breaker around remote execution.

Client-side rejections never reach the breaker; only driver failures and
timeouts against the remote engine count towards opening it.
"""
import pybreaker
from typing import Optional, List, Type

from bricksql.common.logger import get_logger
from bricksql.common.settings import settings

logger = get_logger("resilience")


class ObservabilityListener(pybreaker.CircuitBreakerListener):
    """Logs breaker transitions and every failure it records."""

    def state_change(self, cb, old_state, new_state):
        old_name = old_state.name if old_state else None
        logger.warning(
            f"Circuit Breaker '{cb.name}' changed state: {old_name} -> {new_state.name}"
        )

    def failure(self, cb, exc):
        logger.error(
            f"Circuit Breaker '{cb.name}' recorded failure "
            f"{cb.fail_counter}/{cb.fail_max}: {type(exc).__name__}: {exc}"
        )


def create_breaker(
    name: str,
    fail_max: int = 5,
    reset_timeout: float = 30,
    exclude: Optional[List[Type[Exception]]] = None
) -> pybreaker.CircuitBreaker:
    """Builds a breaker that reports through ObservabilityListener."""
    return pybreaker.CircuitBreaker(
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        name=name,
        listeners=[ObservabilityListener()],
        exclude=exclude or []
    )


def breaker_state(breaker: Optional[pybreaker.CircuitBreaker] = None) -> str:
    """Current state name of `breaker` (default DB_BREAKER): closed, open or half-open."""
    return (breaker or DB_BREAKER).current_state


# Shared by every connection handle in the process
DB_BREAKER = create_breaker(
    name="DB_BREAKER",
    fail_max=settings.breaker_fail_max,
    reset_timeout=settings.breaker_reset_sec
)
