"""Row-to-column transposition of a cursor into a ResultFrame."""
import datetime
import decimal
import json
from typing import Any, List, Optional, Sequence

from bricksql.common.errors import BricksError, RemoteQueryFailure, ScanFailure
from bricksql.common.logger import get_logger
from bricksql.connection.protocol import RowCursor
from .models import ResultColumn, ResultFrame

logger = get_logger("materializer")

NULL_TEXT = ""


def format_cell(value: Any, null_text: str = NULL_TEXT) -> str:
    """Renders one driver value as display text.

    None becomes `null_text`. Booleans are lower-case, temporal values are
    ISO-8601, and complex engine types (arrays, maps, structs) are JSON.
    """
    if value is None:
        return null_text
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, decimal.Decimal):
        return format(value, "f")
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, datetime.timedelta):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, default=str)
    return str(value)


def read_columns(cursor: RowCursor) -> List[str]:
    """Column names of `cursor`; any driver error becomes RemoteQueryFailure."""
    try:
        return list(cursor.columns())
    except BricksError:
        raise
    except Exception as e:
        raise RemoteQueryFailure(f"Failed to read column metadata: {e}", cause=e) from e


def materialize(
    cursor: RowCursor,
    null_text: str = NULL_TEXT,
    name: str = "response",
    columns: Optional[Sequence[str]] = None,
) -> ResultFrame:
    """Reads every row of `cursor` into one string column per cursor column.

    Pass `columns` when the caller already read the cursor's column list;
    it is then not read again.

    Raises:
        RemoteQueryFailure: Column metadata could not be read.
        ScanFailure: A row could not be read completely. No partial frame is returned.
    """
    if columns is not None:
        names = list(columns)
    else:
        names = read_columns(cursor)

    values: List[List[str]] = [[] for _ in names]
    row_index = 0
    try:
        for row in cursor:
            if len(row) != len(names):
                raise ScanFailure(
                    f"Row {row_index} has {len(row)} values, expected {len(names)}"
                )
            for i, cell in enumerate(row):
                values[i].append(format_cell(cell, null_text))
            row_index += 1
    except BricksError:
        raise
    except Exception as e:
        raise ScanFailure(f"Failed to scan row {row_index}: {e}") from e

    logger.debug(f"Materialized {row_index} rows x {len(names)} columns")
    return ResultFrame(
        name=name,
        columns=[ResultColumn(name=n, values=v) for n, v in zip(names, values)],
    )
