"""
Textual statement rewriting: catalog qualification and row capping.

Only the first FROM clause is qualified. Sub-selects and joins that carry
their own FROM keep their original target; qualifying them blindly could
change what a correlated subquery refers to.

Both rules work on raw text, not on a parse tree. A `FROM ` or `LIMIT`
that only appears inside a string literal or a comment is still taken at
face value: the catalog lands there, or the row cap is skipped.
"""
import re
from typing import Protocol, runtime_checkable

from .models import AdaptedStatement

_FROM_RE = re.compile(r"FROM ", re.IGNORECASE)

_LIMIT_RE = re.compile(r"\bLIMIT\b", re.IGNORECASE)


def inject_catalog(catalog: str, raw_query: str) -> str:
    """Prefixes the target of the first FROM with `catalog.`.

    Example: SELECT COUNT(c) FROM schema.table -> SELECT COUNT(c) FROM catalog.schema.table

    Statements without a FROM (e.g. `SELECT 1`) are returned unchanged.
    """
    match = _FROM_RE.search(raw_query)
    if match is None:
        return raw_query
    cut = match.end()
    return raw_query[:cut] + catalog + "." + raw_query[cut:]


def apply_row_limit(query: str, cap: int) -> str:
    """Appends `LIMIT cap;` unless the statement already declares a LIMIT.

    A caller-declared LIMIT always wins, even when larger than `cap`.
    A cap of 0 disables the rule and leaves the text untouched. When the last
    line holds a `--` comment, the appended text starts on a new line so it
    stays outside the comment.
    """
    if cap <= 0:
        return query
    trimmed = query.rstrip()
    if trimmed.endswith(";"):
        trimmed = trimmed[:-1].rstrip()
    in_comment = "--" in trimmed.rsplit("\n", 1)[-1]
    separator = "\n" if in_comment else " "
    if _LIMIT_RE.search(trimmed):
        return trimmed + ("\n;" if in_comment else ";")
    return f"{trimmed}{separator}LIMIT {cap};"


@runtime_checkable
class StatementRewriter(Protocol):
    """Turns a validated statement into the text sent to the engine."""

    def rewrite(self, statement: str, catalog: str, row_cap: int) -> AdaptedStatement:
        ...


class TextualStatementRewriter:
    """Substring-based rewriter over already-validated statement text."""

    def rewrite(self, statement: str, catalog: str, row_cap: int) -> AdaptedStatement:
        text = inject_catalog(catalog, statement) if catalog else statement
        return AdaptedStatement(text=apply_row_limit(text, row_cap))
