from bricksql.common.errors import BricksError
from bricksql.common.logger import get_logger
from bricksql.common.resilience import breaker_state
from bricksql.connection.protocol import ConnectionHandle
from bricksql.api.models.response import HealthResponse, HealthStatus

logger = get_logger("health")


class HealthService:
    def __init__(self, handle: ConnectionHandle, timeout: float):
        self.handle = handle
        self.timeout = timeout

    def check_health(self) -> HealthResponse:
        """Pings the remote engine; never raises."""
        try:
            self.handle.ping(self.timeout)
        except BricksError as e:
            logger.warning(f"Health check failed: {e.get_safe_message()}")
            return HealthResponse(
                status=HealthStatus.ERROR,
                message=f"Connection failed: {e.get_safe_message()}",
                breaker=breaker_state(),
            )
        return HealthResponse(
            status=HealthStatus.OK,
            message="Connection to the SQL warehouse is working",
            breaker=breaker_state(),
        )
