from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Iterator, List, Optional, Sequence

import pybreaker
from sqlalchemy import create_engine, Engine
from sqlalchemy.engine import Connection, CursorResult
from sqlalchemy.exc import SQLAlchemyError

from bricksql.common.errors import (
    BricksError,
    RemoteQueryFailure,
    ServiceUnavailable,
    StatementTimeout,
)
from bricksql.common.logger import get_logger
from bricksql.common.resilience import DB_BREAKER
from .config import ConnectionConfig

logger = get_logger("connection")

FETCH_BATCH_SIZE = 1000


class Deadline:
    """Absolute point in time derived from a relative timeout."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        self.expires_at = time.monotonic() + timeout

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return self.remaining() <= 0


class SqlAlchemyCursor:
    """RowCursor over a SQLAlchemy result; owns the borrowed connection."""

    def __init__(self, connection: Connection, result: CursorResult, deadline: Deadline,
                 batch_size: int = FETCH_BATCH_SIZE):
        self._connection = connection
        self._result = result
        self._deadline = deadline
        self._batch_size = batch_size
        self._closed = False

    def columns(self) -> List[str]:
        if not self._result.returns_rows:
            return []
        return list(self._result.keys())

    def __iter__(self) -> Iterator[Sequence[Any]]:
        if not self._result.returns_rows:
            return
        while True:
            if self._deadline.expired():
                raise StatementTimeout(
                    f"Statement exceeded {self._deadline.timeout}s deadline while fetching rows"
                )
            batch = self._result.fetchmany(self._batch_size)
            if not batch:
                return
            for row in batch:
                yield tuple(row)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._result.close()
        finally:
            self._connection.close()

    def __enter__(self) -> "SqlAlchemyCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _close_late_cursor(future: Future) -> None:
    """Releases a cursor that finished opening after its caller gave up."""
    if future.cancelled() or future.exception() is not None:
        return
    logger.warning("Closing cursor that opened after its deadline")
    future.result().close()


class SqlAlchemyConnectionHandle:
    """
    Connection handle backed by a pooled SQLAlchemy engine.
    Statements are sent verbatim; opening a cursor runs on a worker thread so
    the caller's deadline bounds it.
    """

    def __init__(self, config: ConnectionConfig, workers: int = 4, engine: Optional[Engine] = None):
        self.config = config
        if engine is None:
            try:
                engine = create_engine(config.build_url(), pool_pre_ping=True)
            except Exception as e:
                logger.error(f"Failed to create engine for {config}: {e}")
                raise
        self.engine = engine
        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bricksql-exec")

    def __str__(self):
        return f"SqlAlchemyConnectionHandle({self.config})"

    def _acquire(self, deadline: Deadline) -> Connection:
        attempts = max(1, self.config.retry_count)
        budget = Deadline(self.config.retry_timeout) if self.config.retry_timeout > 0 else None
        pause = self.config.retry_pause
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                return self.engine.connect()
            except SQLAlchemyError as e:
                last_error = e
                logger.warning(f"Connection attempt {attempt}/{attempts} failed: {e}")
                if attempt == attempts:
                    break
                if budget is not None and budget.remaining() <= pause:
                    break
                if deadline.remaining() <= pause:
                    break
                if pause > 0:
                    time.sleep(pause)

        raise RemoteQueryFailure(f"Failed to connect to {self.config}: {last_error}", cause=last_error)

    def _open(self, sql: str, deadline: Deadline) -> SqlAlchemyCursor:
        conn = self._acquire(deadline)
        try:
            result = conn.exec_driver_sql(sql)
        except Exception:
            conn.close()
            raise
        return SqlAlchemyCursor(conn, result, deadline)

    def _open_bounded(self, sql: str, deadline: Deadline) -> SqlAlchemyCursor:
        future = self._pool.submit(self._open, sql, deadline)
        try:
            return future.result(timeout=deadline.remaining())
        except FutureTimeoutError:
            if not future.cancel():
                future.add_done_callback(_close_late_cursor)
            raise StatementTimeout(f"Statement exceeded {deadline.timeout}s deadline")

    def execute(self, sql: str, timeout: float) -> SqlAlchemyCursor:
        deadline = Deadline(timeout)
        try:
            return DB_BREAKER.call(self._open_bounded, sql, deadline)
        except pybreaker.CircuitBreakerError as e:
            raise ServiceUnavailable("Remote engine unavailable: circuit breaker is open", cause=e) from e
        except BricksError:
            raise
        except Exception as e:
            logger.error(f"Statement execution failed on {self.config}: {e}")
            raise RemoteQueryFailure(f"Failed to execute query: {e}", cause=e) from e

    def ping(self, timeout: float) -> None:
        with self.execute("SELECT 1", timeout) as cursor:
            try:
                for _ in cursor:
                    pass
            except BricksError:
                raise
            except Exception as e:
                logger.error(f"Ping fetch failed on {self.config}: {e}")
                raise RemoteQueryFailure(f"Ping failed while fetching: {e}", cause=e) from e

    def dispose(self) -> None:
        self._pool.shutdown(wait=False, cancel_futures=True)
        self.engine.dispose()
