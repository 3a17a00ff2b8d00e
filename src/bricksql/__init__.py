# bricksql package

from .query import QueryService, QueryRequest, ResultFrame, OutputShape
from .namespace import NamespaceResolver
from .connection import ConnectionConfig, SqlAlchemyConnectionHandle, load_plugin_settings

# Also expose error types
from .common.errors import ErrorCode, BricksError

__all__ = [
    "QueryService",
    "QueryRequest",
    "ResultFrame",
    "OutputShape",
    "NamespaceResolver",
    "ConnectionConfig",
    "SqlAlchemyConnectionHandle",
    "load_plugin_settings",
    "ErrorCode",
    "BricksError",
]
