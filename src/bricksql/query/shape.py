from typing import Sequence

from bricksql.common.errors import MissingTimeColumn
from .models import OutputShape


def is_time_column(name: str) -> bool:
    lowered = name.lower()
    return lowered == "time" or "timestamp" in lowered


def require_time_column(shape: OutputShape, column_names: Sequence[str]) -> None:
    """Raises MissingTimeColumn when a timeseries result has no time axis."""
    if shape != OutputShape.TIME_SERIES:
        return
    if not any(is_time_column(name) for name in column_names):
        raise MissingTimeColumn(
            "Timeseries format requires a 'time' or '*timestamp*' column, "
            f"got: {', '.join(column_names) or '(none)'}"
        )
