from typing import Any, Iterator, List, Protocol, Sequence, runtime_checkable


@runtime_checkable
class RowCursor(Protocol):
    """
    An open result set on the remote engine.
    Must be released on every exit path; use it as a context manager.
    """

    def columns(self) -> List[str]:
        """Column names in engine order."""
        ...

    def __iter__(self) -> Iterator[Sequence[Any]]:
        """Yields one sequence of cell values per row."""
        ...

    def close(self) -> None:
        ...

    def __enter__(self) -> "RowCursor":
        ...

    def __exit__(self, exc_type, exc, tb) -> None:
        ...


@runtime_checkable
class ConnectionHandle(Protocol):
    """
    Structural definition of the shared connection to the remote engine.
    Implementations own their pool; callers only borrow cursors.
    """

    def execute(self, sql: str, timeout: float) -> RowCursor:
        """Send `sql` verbatim and return an open cursor.

        Raises RemoteQueryFailure (or StatementTimeout) on failure.
        """
        ...

    def ping(self, timeout: float) -> None:
        """Raise RemoteQueryFailure unless the engine answers within `timeout`."""
        ...

    def dispose(self) -> None:
        """Release the pool and any worker threads."""
        ...
