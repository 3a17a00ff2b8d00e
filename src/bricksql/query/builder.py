"""Builds SELECT text from the query editor's visual definition."""
from __future__ import annotations

from typing import List, Optional

from sqlglot import expressions as exp

from bricksql.common.errors import InvalidPayload
from .models import FilterCondition, VisualQuery
from .validator import DEFAULT_DIALECT

AGGREGATIONS = {
    "COUNT": exp.Count,
    "SUM": exp.Sum,
    "AVG": exp.Avg,
    "MIN": exp.Min,
    "MAX": exp.Max,
}

COMPARISONS = {
    "=": exp.EQ,
    "!=": exp.NEQ,
    "<>": exp.NEQ,
    ">": exp.GT,
    "<": exp.LT,
    ">=": exp.GTE,
    "<=": exp.LTE,
}

PATTERN_MATCHES = {
    "LIKE": exp.Like,
    "ILIKE": exp.ILike,
    "RLIKE": exp.RegexpLike,
    "REGEXP": exp.RegexpLike,
}


def _column(name: str) -> exp.Expression:
    if name == "*":
        return exp.Star()
    return exp.column(name)


def _literal(value: object) -> exp.Expression:
    if isinstance(value, bool):
        return exp.Boolean(this=value)
    if isinstance(value, (int, float)):
        return exp.Literal.number(value)
    return exp.Literal.string(str(value).strip().strip("'").strip('"'))


class VisualQueryBuilder:
    """
    Composes a SELECT with sqlglot expressions, so identifiers are quoted
    when needed and every filter value is a literal.
    """

    def __init__(self, dialect: str = DEFAULT_DIALECT):
        self.dialect = dialect

    def build(self, query: VisualQuery) -> str:
        if not query.database or not query.table:
            raise InvalidPayload("Visual query requires database and table")
        if not query.fields:
            raise InvalidPayload("Visual query requires at least one field")

        select = exp.select()
        select = self._build_select(select, query)
        select = select.from_(exp.table_(query.table, db=query.database))
        if query.enable_filter:
            select = self._build_where(select, query.filters)
        if query.enable_group:
            for column in query.group_by:
                select = select.group_by(_column(column))
        if query.enable_order and query.order_by:
            desc = (query.order_direction or "ASC").upper() == "DESC"
            select = select.order_by(exp.Ordered(this=_column(query.order_by), desc=desc))
        if query.limit:
            select = select.limit(query.limit)

        return select.sql(dialect=self.dialect)

    def _build_select(self, select: exp.Select, query: VisualQuery) -> exp.Select:
        for field in query.fields:
            if not field.column:
                continue
            expr = _column(field.column)
            if field.aggregation:
                agg = AGGREGATIONS.get(field.aggregation.upper())
                if agg is None:
                    raise InvalidPayload(f"Unsupported aggregation: {field.aggregation}")
                expr = agg(this=expr)
            elif field.column == "*":
                select = select.select(expr)
                continue
            if field.alias:
                expr = exp.alias_(expr, field.alias)
            select = select.select(expr)
        if not select.expressions:
            raise InvalidPayload("Visual query requires at least one field")
        return select

    def _build_where(self, select: exp.Select, filters: List[FilterCondition]) -> exp.Select:
        cond: Optional[exp.Expression] = None
        for flt in filters:
            if not flt.column or not flt.operator:
                continue
            expr = self._predicate(flt)
            if cond is None:
                cond = expr
            elif (flt.condition or "AND").upper() == "OR":
                cond = exp.Or(this=cond, expression=expr)
            else:
                cond = exp.And(this=cond, expression=expr)
        return select.where(cond) if cond is not None else select

    def _predicate(self, flt: FilterCondition) -> exp.Expression:
        left = _column(flt.column)
        op = " ".join(flt.operator.upper().split())
        value = flt.value or ""

        negate = False
        if op.startswith("NOT ") and op not in ("NOT IN",):
            negate = True
            op = op[4:]

        if op in COMPARISONS:
            expr = COMPARISONS[op](this=left, expression=_literal(value))
        elif op in PATTERN_MATCHES:
            expr = PATTERN_MATCHES[op](this=left, expression=_literal(value))
        elif op == "IS NULL":
            expr = exp.Is(this=left, expression=exp.Null())
        elif op == "IS NOT NULL":
            expr = exp.not_(exp.Is(this=left, expression=exp.Null()))
        elif op in ("IN", "NOT IN"):
            items = [_literal(v) for v in value.split(",") if v.strip()]
            if not items:
                raise InvalidPayload(f"{op} filter on {flt.column} requires at least one value")
            expr = exp.In(this=left, expressions=items)
            if op == "NOT IN":
                expr = exp.not_(expr)
        elif op == "BETWEEN":
            upper = value.upper()
            if upper.count(" AND ") != 1:
                raise InvalidPayload(f"BETWEEN filter on {flt.column} requires 'low AND high'")
            split_at = upper.index(" AND ")
            low, high = value[:split_at], value[split_at + len(" AND "):]
            expr = exp.Between(this=left, low=_literal(low), high=_literal(high))
        else:
            raise InvalidPayload(f"Unsupported filter operator: {flt.operator}")

        return exp.not_(expr) if negate else expr


def build_visual_query(query: VisualQuery, dialect: str = DEFAULT_DIALECT) -> str:
    return VisualQueryBuilder(dialect=dialect).build(query)
