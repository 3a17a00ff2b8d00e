from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from bricksql.common.resilience import DB_BREAKER
from bricksql.connection import ConnectionConfig


class FakeCursor:
    """In-memory RowCursor; `fail_at` raises while reading that row index."""

    def __init__(self, columns: Sequence[str], rows: List[Sequence[Any]], fail_at: Optional[int] = None):
        self._columns = list(columns)
        self._rows = rows
        self.fail_at = fail_at
        self.closed = False

    def columns(self) -> List[str]:
        return list(self._columns)

    def __iter__(self):
        for i, row in enumerate(self._rows):
            if self.fail_at is not None and i == self.fail_at:
                raise RuntimeError("connection reset by peer")
            yield row

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class FakeHandle:
    """ConnectionHandle double that records every statement it receives."""

    def __init__(
        self,
        results: Optional[Dict[str, Tuple[Sequence[str], List[Sequence[Any]]]]] = None,
        default: Tuple[Sequence[str], List[Sequence[Any]]] = ((), []),
        error: Optional[Exception] = None,
        ping_error: Optional[Exception] = None,
        fail_at: Optional[int] = None,
    ):
        self.results = results or {}
        self.default = default
        self.error = error
        self.ping_error = ping_error
        self.fail_at = fail_at
        self.executed: List[Tuple[str, float]] = []
        self.cursors: List[FakeCursor] = []
        self.disposed = False

    def execute(self, sql: str, timeout: float) -> FakeCursor:
        self.executed.append((sql, timeout))
        if self.error is not None:
            raise self.error
        columns, rows = self.results.get(sql, self.default)
        cursor = FakeCursor(columns, rows, fail_at=self.fail_at)
        self.cursors.append(cursor)
        return cursor

    def ping(self, timeout: float) -> None:
        if self.ping_error is not None:
            raise self.ping_error

    def dispose(self) -> None:
        self.disposed = True


@pytest.fixture()
def make_handle():
    """Returns the FakeHandle constructor."""
    return FakeHandle


@pytest.fixture()
def make_cursor():
    """Returns the FakeCursor constructor."""
    return FakeCursor


@pytest.fixture()
def connection_config():
    return ConnectionConfig(
        host="dummy.host",
        http_path="dummy/path",
        catalog="my_catalog",
        credential="dummy",
        row_cap=0,
        statement_timeout=5,
    )


@pytest.fixture(autouse=True)
def reset_breaker():
    DB_BREAKER.close()
    yield
    DB_BREAKER.close()
