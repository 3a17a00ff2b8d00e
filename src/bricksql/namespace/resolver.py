from __future__ import annotations

from typing import List, Sequence

from sqlglot import expressions as exp

from bricksql.common.errors import (
    BricksError,
    CatalogRequired,
    RemoteQueryFailure,
    SchemaRequired,
    TableRequired,
)
from bricksql.common.logger import get_logger
from bricksql.connection.protocol import ConnectionHandle, RowCursor
from bricksql.query.validator import DEFAULT_DIALECT

logger = get_logger("namespace_resolver")

TABLE_NAME_COLUMNS = ("tablename", "table_name", "name")


class NamespaceResolver:
    """
    Read-only discovery of schemas, tables and columns under a catalog.
    Every operation checks its required arguments before touching the engine.
    """

    def __init__(self, handle: ConnectionHandle, timeout: float, dialect: str = DEFAULT_DIALECT):
        self.handle = handle
        self.timeout = timeout
        self.dialect = dialect

    def _ident(self, *parts: str) -> str:
        return ".".join(exp.to_identifier(p).sql(dialect=self.dialect) for p in parts)

    def _fetch(self, sql: str, pick) -> List[str]:
        logger.debug(f"Namespace query: {sql}")
        try:
            with self.handle.execute(sql, timeout=self.timeout) as cursor:
                return pick(cursor)
        except BricksError:
            raise
        except Exception as e:
            logger.error(f"Namespace query failed: {e}")
            raise RemoteQueryFailure(f"Failed to run '{sql}': {e}", cause=e) from e

    def list_schemas(self, catalog: str) -> List[str]:
        """Lists the schemas (databases) inside `catalog`."""
        if not catalog:
            raise CatalogRequired()
        sql = f"SHOW SCHEMAS IN {self._ident(catalog)}"
        return self._fetch(sql, lambda cursor: [str(row[0]) for row in cursor])

    def list_tables(self, catalog: str, schema: str) -> List[str]:
        """Lists table names in `catalog.schema`.

        The engine answers with (database, tableName, isTemporary); only the
        table name is kept.
        """
        if not catalog:
            raise CatalogRequired()
        if not schema:
            raise SchemaRequired()
        sql = f"SHOW TABLES IN {self._ident(catalog, schema)}"
        return self._fetch(sql, self._pick_table_names)

    def list_columns(self, catalog: str, schema: str, table: str) -> List[str]:
        """Lists column names of `catalog.schema.table`.

        Rows are (col_name, data_type, comment); comment may be NULL. Reading
        stops at the first blank or '#' row, where the engine starts its
        partition-information section.
        """
        if not catalog:
            raise CatalogRequired()
        if not schema:
            raise SchemaRequired()
        if not table:
            raise TableRequired()
        sql = f"DESCRIBE TABLE {self._ident(catalog, schema, table)}"
        return self._fetch(sql, self._pick_column_names)

    @staticmethod
    def _pick_table_names(cursor: RowCursor) -> List[str]:
        columns: Sequence[str] = [c.lower() for c in cursor.columns()]
        index = next((columns.index(c) for c in TABLE_NAME_COLUMNS if c in columns), None)
        if index is None:
            index = 1 if len(columns) > 1 else 0
        return [str(row[index]) for row in cursor]

    @staticmethod
    def _pick_column_names(cursor: RowCursor) -> List[str]:
        names = []
        for row in cursor:
            name = row[0]
            if name is None or not str(name).strip() or str(name).startswith("#"):
                break
            names.append(str(name))
        return names
