from typing import List, Mapping

from bricksql.common.errors import NotFound
from bricksql.common.logger import get_logger
from bricksql.namespace.resolver import NamespaceResolver

logger = get_logger("resources")

SCHEMA_PATHS = ("schemas", "databases")


class ResourceService:
    """
    Dispatches discovery lookups by resource path.

    Args arrive as a flat key-value mapping: `catalog` (defaults to the
    configured catalog), `schema` or `database`, and `table`.
    """

    def __init__(self, resolver: NamespaceResolver, default_catalog: str):
        self.resolver = resolver
        self.default_catalog = default_catalog

    def call_resource(self, path: str, params: Mapping[str, str]) -> List[str]:
        path = path.strip("/").lower()
        catalog = params.get("catalog") or self.default_catalog
        schema = params.get("schema") or params.get("database") or ""
        table = params.get("table") or ""

        if path in SCHEMA_PATHS:
            return self.resolver.list_schemas(catalog)

        if path == "tables":
            tables = self.resolver.list_tables(catalog, schema)
            if not tables:
                raise NotFound(f"No tables found in {catalog}.{schema}")
            return tables

        if path == "columns":
            return self.resolver.list_columns(catalog, schema, table)

        logger.warning(f"Unknown resource path: {path}")
        raise NotFound("Invalid endpoint")
