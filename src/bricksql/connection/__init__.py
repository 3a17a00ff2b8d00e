from .protocol import ConnectionHandle, RowCursor
from .config import ConnectionConfig, load_plugin_settings
from .sqlalchemy_handle import SqlAlchemyConnectionHandle, SqlAlchemyCursor, Deadline

__all__ = [
    "ConnectionHandle",
    "RowCursor",
    "ConnectionConfig",
    "load_plugin_settings",
    "SqlAlchemyConnectionHandle",
    "SqlAlchemyCursor",
    "Deadline",
]
