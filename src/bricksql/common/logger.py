import logging
import json
import contextvars
from contextlib import contextmanager
from typing import Optional

_request_id_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)


class TraceContextFilter(logging.Filter):
    """Injects request_id from contextvar into the log record."""
    def filter(self, record):
        record.request_id = _request_id_ctx.get()
        return True


@contextmanager
def trace_context(request_id: str):
    """Context manager to set the request_id for the current context."""
    token = _request_id_ctx.set(request_id)
    try:
        yield
    finally:
        _request_id_ctx.reset(token)


class JsonFormatter(logging.Formatter):
    """Formatter that outputs JSON strings after parsing the LogRecord."""

    def format(self, record: logging.LogRecord) -> str:
        """Formats the log record as a JSON string.

        Args:
           record (logging.LogRecord): The log record to format.

        Returns:
            str: The JSON-formatted log string.
        """
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "request_id", None):
            log_record["request_id"] = record.request_id

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        standard_attrs = {
            "args", "asctime", "created", "exc_info", "exc_text", "filename",
            "funcName", "levelname", "levelno", "lineno", "module",
            "msecs", "message", "msg", "name", "pathname", "process",
            "processName", "relativeCreated", "stack_info", "thread", "threadName",
            "taskName", "request_id"
        }

        for key, value in record.__dict__.items():
            if key not in standard_attrs and not key.startswith("_"):
                log_record[key] = value

        return json.dumps(log_record, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False):
    """Configures the root logger.

    Args:
        level (str): The logging level (default: INFO).
        json_format (bool): Whether to use JSON formatting (default: False).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.addFilter(TraceContextFilter())

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        formatter = logging.Formatter(
            "%(asctime)s - [%(request_id)s] - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)

    root_logger.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("databricks.sql").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Gets a named logger.

    Args:
        name (str): The name of the logger.

    Returns:
        logging.Logger: The logger instance.
    """
    return logging.getLogger(name)
