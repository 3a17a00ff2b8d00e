"""Read-only policy for caller-supplied SQL."""
import re
from typing import Iterable, Optional

import sqlglot
from sqlglot import expressions as exp
from sqlglot.errors import ParseError, TokenError

from bricksql.common.errors import DangerousKeyword, NotSelect, StatementParseError
from bricksql.common.logger import get_logger

logger = get_logger("validator")

DEFAULT_DIALECT = "databricks"

DENIED_KEYWORDS = (
    "DROP", "DELETE", "UPDATE", "INSERT", "ALTER", "TRUNCATE",
    "MERGE", "CREATE", "GRANT", "REVOKE",
)

SELECT_ROOTS = (exp.Select, exp.Union, exp.Intersect, exp.Except, exp.Subquery)

FORBIDDEN_NODES = (
    exp.Insert, exp.Update, exp.Delete, exp.Drop,
    exp.Create, exp.Merge, exp.Command,
)


class StatementValidator:
    """Enforces a single, read-only SELECT statement.

    Two independent checks run on every statement: a lexical scan of the raw
    text against a keyword denylist, then a sqlglot parse whose root must be a
    query. The lexical scan is a case-insensitive substring match over the
    whole text, string literals, comments and identifiers included, so
    `updated_at` or `'dropped'` are rejected too. It fires even where the
    parser would have been fooled.

    Args:
        dialect (str): sqlglot dialect used for parsing.
        denied_keywords (Iterable[str]): Keywords that reject a statement outright.
    """

    def __init__(self, dialect: str = DEFAULT_DIALECT, denied_keywords: Iterable[str] = DENIED_KEYWORDS):
        self.dialect = dialect
        self.denied_keywords = tuple(k.upper() for k in denied_keywords)
        self._keyword_re = re.compile(
            "|".join(re.escape(k) for k in self.denied_keywords),
            re.IGNORECASE,
        ) if self.denied_keywords else None

    def find_denied_keyword(self, sql: str) -> Optional[str]:
        if self._keyword_re is None:
            return None
        match = self._keyword_re.search(sql)
        return match.group(0).upper() if match else None

    def validate(self, sql: str) -> None:
        """Raises a RejectedStatement subclass unless `sql` is a lone SELECT.

        Args:
            sql (str): The raw statement text.

        Raises:
            DangerousKeyword: A denylisted keyword occurs anywhere in the text.
            StatementParseError: The text is not valid SQL for the dialect.
            NotSelect: The root is not a query, or there is more than one statement.
        """
        keyword = self.find_denied_keyword(sql)
        if keyword:
            logger.warning(f"Rejected statement containing keyword {keyword}")
            raise DangerousKeyword(keyword)

        try:
            statements = [s for s in sqlglot.parse(sql, read=self.dialect) if s is not None]
        except (ParseError, TokenError) as e:
            raise StatementParseError(f"Invalid SQL: {e}") from e

        if not statements:
            raise StatementParseError("Empty statement")

        if len(statements) > 1:
            raise NotSelect("Only a single statement is allowed")

        statement = statements[0]
        if not isinstance(statement, SELECT_ROOTS):
            raise NotSelect(f"Only SELECT statements are allowed, got {statement.key.upper()}")

        if statement.find(*FORBIDDEN_NODES):
            raise NotSelect("Statement contains a non-SELECT clause")
