from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from bricksql.common.errors import BricksError, InvalidPayload
from bricksql.common.logger import get_logger
from bricksql.connection.config import ConnectionConfig
from bricksql.connection.protocol import ConnectionHandle
from .builder import VisualQueryBuilder
from .materializer import NULL_TEXT, materialize, read_columns
from .models import BatchQueryResponse, QueryRequest, QueryResponse, ResultFrame
from .rewriter import StatementRewriter, TextualStatementRewriter
from .shape import require_time_column
from .validator import StatementValidator

logger = get_logger("query_service")


class QueryService:
    """
    Runs the query path: validate -> rewrite -> execute -> shape-check -> materialize.
    Each stage only sees the complete output of the previous one.
    """

    def __init__(
        self,
        handle: ConnectionHandle,
        config: ConnectionConfig,
        validator: Optional[StatementValidator] = None,
        rewriter: Optional[StatementRewriter] = None,
        builder: Optional[VisualQueryBuilder] = None,
        null_text: str = NULL_TEXT,
    ):
        self.handle = handle
        self.config = config
        self.validator = validator or StatementValidator()
        self.rewriter = rewriter or TextualStatementRewriter()
        self.builder = builder or VisualQueryBuilder(dialect=self.validator.dialect)
        self.null_text = null_text

    def resolve_statement(self, request: QueryRequest) -> str:
        if request.raw_statement and request.raw_statement.strip():
            return request.raw_statement
        if request.visual is not None:
            return self.builder.build(request.visual)
        raise InvalidPayload("queryText is required")

    def execute_query(self, request: QueryRequest) -> ResultFrame:
        """Executes one caller query and returns its frame.

        Raises:
            BricksError: The first failing stage's error; later stages never run.
        """
        statement = self.resolve_statement(request)
        self.validator.validate(statement)

        adapted = self.rewriter.rewrite(statement, self.config.catalog, self.config.row_cap)
        logger.info(f"Adapted statement [{request.ref_id}]: {adapted.text}")

        with self.handle.execute(adapted.text, timeout=self.config.statement_timeout) as cursor:
            columns = read_columns(cursor)
            require_time_column(request.output_shape, columns)
            frame = materialize(cursor, null_text=self.null_text, columns=columns)

        logger.info(f"Query {request.ref_id} returned {frame.row_count} rows")
        return frame

    def query_data(self, queries: List[Dict[str, Any]]) -> BatchQueryResponse:
        """Runs several queries independently, keyed by refId.

        Queries with neither a statement nor a visual definition are skipped.
        A failing query yields an error entry and never affects the others.
        """
        logger.debug(f"query_data called with {len(queries)} queries")
        response = BatchQueryResponse()

        for index, raw in enumerate(queries):
            ref_id = str(raw.get("refId") or index) if isinstance(raw, dict) else str(index)
            try:
                request = QueryRequest.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Invalid payload for query {ref_id}: {e.errors()[0].get('msg')}")
                err = InvalidPayload(f"json unmarshal: {e.errors()[0].get('msg', e)}")
                response.results[ref_id] = QueryResponse(error=err.get_safe_message(), status=err.status_code)
                continue

            if not (request.raw_statement and request.raw_statement.strip()) and request.visual is None:
                continue

            try:
                frame = self.execute_query(request)
                response.results[ref_id] = QueryResponse(frames=[frame])
            except BricksError as e:
                logger.warning(f"Query {ref_id} failed ({e.error_code.value}): {e.get_safe_message()}")
                response.results[ref_id] = QueryResponse(error=e.get_safe_message(), status=e.status_code)
            except Exception as e:
                logger.exception(f"Query {ref_id} crashed: {e}")
                response.results[ref_id] = QueryResponse(error=f"Internal error: {e}", status=500)

        return response
