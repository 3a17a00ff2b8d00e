from .models import (
    OutputShape,
    QueryRequest,
    AdaptedStatement,
    ResultColumn,
    ResultFrame,
    VisualQuery,
    FieldSelection,
    FilterCondition,
    QueryResponse,
    BatchQueryRequest,
    BatchQueryResponse,
)
from .validator import StatementValidator, DEFAULT_DIALECT
from .rewriter import StatementRewriter, TextualStatementRewriter, inject_catalog, apply_row_limit
from .shape import require_time_column
from .materializer import format_cell, materialize
from .builder import VisualQueryBuilder, build_visual_query
from .service import QueryService

__all__ = [
    "OutputShape",
    "QueryRequest",
    "AdaptedStatement",
    "ResultColumn",
    "ResultFrame",
    "VisualQuery",
    "FieldSelection",
    "FilterCondition",
    "QueryResponse",
    "BatchQueryRequest",
    "BatchQueryResponse",
    "StatementValidator",
    "DEFAULT_DIALECT",
    "StatementRewriter",
    "TextualStatementRewriter",
    "inject_catalog",
    "apply_row_limit",
    "require_time_column",
    "format_cell",
    "materialize",
    "VisualQueryBuilder",
    "build_visual_query",
    "QueryService",
]
