import sqlite3
import threading
import time
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError

from bricksql.common.resilience import DB_BREAKER, breaker_state
from bricksql.common.errors import RemoteQueryFailure, ServiceUnavailable, StatementTimeout
from bricksql.connection import ConnectionConfig, SqlAlchemyConnectionHandle
from bricksql.namespace import NamespaceResolver
from bricksql.api.services import HealthService
from bricksql.query import QueryRequest, QueryService


@pytest.fixture()
def sqlite_db_path(tmp_path):
    db_path = tmp_path / "test.db"
    conn = sqlite3.connect(db_path)
    try:
        conn.execute(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, age INTEGER, joined_at TIMESTAMP)"
        )
        conn.executemany(
            "INSERT INTO users (name, age, joined_at) VALUES (?, ?, ?)",
            [("Ada", 30, "2024-01-01 10:00:00"), ("Linus", None, "2024-01-02 11:00:00"), ("Grace", 50, None)],
        )
        conn.commit()
    finally:
        conn.close()
    return db_path


def _handle(url: str, **overrides) -> SqlAlchemyConnectionHandle:
    config = ConnectionConfig(sqlalchemy_url=url, **overrides)
    engine = create_engine(url, connect_args={"check_same_thread": False})
    return SqlAlchemyConnectionHandle(config, engine=engine)


@pytest.fixture()
def sqlite_handle(sqlite_db_path):
    # sqlite exposes the opened file as catalog "main"
    handle = _handle(f"sqlite:///{sqlite_db_path}", catalog="main", row_cap=2, statement_timeout=10)
    yield handle
    handle.dispose()


def test_execute_returns_rows(sqlite_handle):
    # Validates real execution because statements are sent verbatim through the driver.
    # Act
    with sqlite_handle.execute("SELECT id, name FROM users ORDER BY id", timeout=5) as cursor:
        columns = cursor.columns()
        rows = list(cursor)

    # Assert
    assert columns == ["id", "name"]
    assert rows == [(1, "Ada"), (2, "Linus"), (3, "Grace")]


def test_query_service_against_sqlite(sqlite_handle):
    # Validates the whole query path because qualification and capping must produce runnable SQL.
    # Arrange
    service = QueryService(sqlite_handle, sqlite_handle.config)
    request = QueryRequest(raw_statement="SELECT id, name, age FROM users ORDER BY id")

    # Act
    frame = service.execute_query(request)

    # Assert
    assert frame.row_count == 2
    assert frame.column("name").values == ["Ada", "Linus"]
    assert frame.column("age").values == ["30", ""]


def test_query_service_respects_declared_limit(sqlite_handle):
    service = QueryService(sqlite_handle, sqlite_handle.config)

    frame = service.execute_query(QueryRequest(raw_statement="SELECT id FROM users ORDER BY id LIMIT 3"))

    assert frame.column("id").values == ["1", "2", "3"]


def test_timeseries_shape_against_sqlite(sqlite_handle):
    service = QueryService(sqlite_handle, sqlite_handle.config)
    request = QueryRequest.model_validate({
        "queryText": "SELECT joined_at AS event_timestamp, age FROM users ORDER BY id",
        "format": "timeseries",
    })

    frame = service.execute_query(request)

    assert frame.column("event_timestamp").values == ["2024-01-01 10:00:00", "2024-01-02 11:00:00"]


def test_engine_error_is_remote_failure(sqlite_handle):
    with pytest.raises(RemoteQueryFailure) as excinfo:
        sqlite_handle.execute("SELECT missing_column FROM users", timeout=5)

    assert excinfo.value.status_code == 500
    assert excinfo.value.cause is not None


def test_ping_and_health(sqlite_handle):
    sqlite_handle.ping(timeout=5)

    assert HealthService(sqlite_handle, timeout=5).check_health().healthy


def _unreachable_engine() -> MagicMock:
    engine = MagicMock()
    engine.connect.side_effect = OperationalError("connect", {}, Exception("unable to open database file"))
    return engine


def test_connection_retries_then_fails():
    # Validates the retry budget because an unreachable engine must fail with a remote error, not hang.
    # Arrange
    engine = _unreachable_engine()
    handle = SqlAlchemyConnectionHandle(ConnectionConfig(retry_count=3, retry_pause=0), engine=engine)

    # Act / Assert
    with pytest.raises(RemoteQueryFailure) as excinfo:
        handle.execute("SELECT 1", timeout=5)
    assert "Failed to connect" in excinfo.value.message
    assert engine.connect.call_count == 3
    handle.dispose()


def test_breaker_opens_after_repeated_failures():
    # Validates the circuit breaker because a failing engine must be short-circuited.
    # Arrange
    engine = _unreachable_engine()
    handle = SqlAlchemyConnectionHandle(ConnectionConfig(retry_count=1), engine=engine)
    errors = []

    # Act
    for _ in range(DB_BREAKER.fail_max + 1):
        try:
            handle.execute("SELECT 1", timeout=5)
        except RemoteQueryFailure as e:
            errors.append(e)

    # Assert
    assert len(errors) == DB_BREAKER.fail_max + 1
    assert isinstance(errors[-1], ServiceUnavailable)
    assert errors[-1].status_code == 500
    assert engine.connect.call_count == DB_BREAKER.fail_max
    assert breaker_state() == "open"
    health = HealthService(handle, timeout=5).check_health()
    assert not health.healthy
    assert health.breaker == "open"
    handle.dispose()


def test_slow_open_times_out_and_late_cursor_is_closed():
    # Validates deadline handling because a statement that outlives its deadline must be released later.
    # Arrange
    release = threading.Event()
    connection = MagicMock()
    engine = MagicMock()

    def slow_connect():
        release.wait(5)
        return connection

    engine.connect.side_effect = slow_connect
    handle = SqlAlchemyConnectionHandle(ConnectionConfig(catalog="main"), engine=engine)

    # Act
    with pytest.raises(StatementTimeout):
        handle.execute("SELECT 1", timeout=0.05)
    release.set()

    # Assert
    deadline = time.monotonic() + 5
    while not connection.close.called and time.monotonic() < deadline:
        time.sleep(0.01)
    assert connection.close.called
    handle.dispose()


def test_resolver_reports_driver_errors(sqlite_handle):
    # sqlite has no SHOW statements, so the driver rejects them
    resolver = NamespaceResolver(sqlite_handle, timeout=5)

    with pytest.raises(RemoteQueryFailure):
        resolver.list_schemas("main")


def test_fetch_error_during_ping_is_reported_as_unhealthy():
    # Validates the health check never raises because fetch errors surface after the cursor opened.
    # Arrange
    result = MagicMock()
    result.returns_rows = True
    result.fetchmany.side_effect = OperationalError("SELECT 1", {}, Exception("connection reset"))
    connection = MagicMock()
    connection.exec_driver_sql.return_value = result
    engine = MagicMock()
    engine.connect.return_value = connection
    handle = SqlAlchemyConnectionHandle(ConnectionConfig(catalog="main"), engine=engine)

    # Act
    with pytest.raises(RemoteQueryFailure) as excinfo:
        handle.ping(timeout=5)
    health = HealthService(handle, timeout=5).check_health()

    # Assert
    assert isinstance(excinfo.value.cause, OperationalError)
    assert not health.healthy
    assert "connection reset" in health.message
    assert connection.close.called
    handle.dispose()
