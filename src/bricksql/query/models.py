from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OutputShape(str, Enum):
    """Output contract requested by the caller."""
    TABLE = "table"
    TIME_SERIES = "timeseries"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower().replace("_", "").replace("-", ""):
                    return member
        return None


class FieldSelection(BaseModel):
    """One projected column of a visual query."""
    column: Optional[str] = None
    aggregation: Optional[str] = None
    alias: Optional[str] = None


class FilterCondition(BaseModel):
    """One WHERE predicate of a visual query."""
    column: Optional[str] = None
    operator: Optional[str] = None
    value: Optional[str] = None
    condition: Optional[str] = Field(default=None, description="AND / OR joining this predicate to the previous one.")


class VisualQuery(BaseModel):
    """Structured SELECT definition produced by the query editor's visual mode."""

    database: Optional[str] = None
    table: Optional[str] = None
    fields: List[FieldSelection] = Field(default_factory=list)
    filters: List[FilterCondition] = Field(default_factory=list)
    group_by: List[str] = Field(default_factory=list, alias="groupBy")
    order_by: Optional[str] = Field(default=None, alias="orderBy")
    order_direction: Optional[str] = Field(default=None, alias="orderDirection")
    limit: Optional[int] = Field(default=None, ge=0)
    enable_filter: bool = Field(default=False, alias="enableFilter")
    enable_group: bool = Field(default=False, alias="enableGroup")
    enable_order: bool = Field(default=False, alias="enableOrder")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class QueryRequest(BaseModel):
    """A single caller-issued query."""

    ref_id: str = Field(default="A", alias="refId")
    raw_statement: Optional[str] = Field(default=None, alias="queryText")
    output_shape: OutputShape = Field(default=OutputShape.TABLE, alias="format")
    visual: Optional[VisualQuery] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("output_shape", mode="before")
    @classmethod
    def _default_shape(cls, value: Any) -> Any:
        if value is None or value == "":
            return OutputShape.TABLE
        return value


class AdaptedStatement(BaseModel):
    """Validated, catalog-qualified, row-capped statement text."""
    text: str

    model_config = ConfigDict(frozen=True)


class ResultColumn(BaseModel):
    """One column of a ResultFrame; every value is display text."""
    name: str
    values: List[str] = Field(default_factory=list)


class ResultFrame(BaseModel):
    """Column-oriented, string-valued materialization of a query result."""

    name: str = Field(default="response")
    columns: List[ResultColumn] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.columns[0].values) if self.columns else 0

    def column(self, name: str) -> ResultColumn:
        for col in self.columns:
            if col.name == name:
                return col
        raise KeyError(name)


class QueryResponse(BaseModel):
    """Per-query outcome of a batch request."""
    frames: List[ResultFrame] = Field(default_factory=list)
    error: Optional[str] = None
    status: int = 200


class BatchQueryRequest(BaseModel):
    queries: List[Dict[str, Any]] = Field(default_factory=list)


class BatchQueryResponse(BaseModel):
    results: Dict[str, QueryResponse] = Field(default_factory=dict)
