from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for query adaptation and discovery."""
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    PARSE_ERROR = "PARSE_ERROR"
    NOT_SELECT = "NOT_SELECT"
    DANGEROUS_KEYWORD = "DANGEROUS_KEYWORD"
    MISSING_TIME_COLUMN = "MISSING_TIME_COLUMN"
    CATALOG_REQUIRED = "CATALOG_REQUIRED"
    SCHEMA_REQUIRED = "SCHEMA_REQUIRED"
    TABLE_REQUIRED = "TABLE_REQUIRED"
    NOT_FOUND = "NOT_FOUND"
    REMOTE_QUERY_FAILURE = "REMOTE_QUERY_FAILURE"
    STATEMENT_TIMEOUT = "STATEMENT_TIMEOUT"
    SCAN_FAILURE = "SCAN_FAILURE"
    SERIALIZATION_FAILURE = "SERIALIZATION_FAILURE"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


CLIENT_ERRORS = {
    ErrorCode.INVALID_PAYLOAD,
    ErrorCode.PARSE_ERROR,
    ErrorCode.NOT_SELECT,
    ErrorCode.DANGEROUS_KEYWORD,
    ErrorCode.MISSING_TIME_COLUMN,
    ErrorCode.CATALOG_REQUIRED,
    ErrorCode.SCHEMA_REQUIRED,
    ErrorCode.TABLE_REQUIRED,
}

NOT_FOUND_ERRORS = {
    ErrorCode.NOT_FOUND,
}


def status_for(code: ErrorCode) -> int:
    """Maps an error code to its HTTP-style status class."""
    if code in CLIENT_ERRORS:
        return 400
    if code in NOT_FOUND_ERRORS:
        return 404
    return 500


class BricksError(Exception):
    """Base class for every failure surfaced to a caller.

    Attributes:
        message (str): Human-readable description.
        error_code (ErrorCode): The standardized error code.
    """

    error_code: ErrorCode = ErrorCode.REMOTE_QUERY_FAILURE

    def __init__(self, message: str, error_code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code

    @property
    def status_code(self) -> int:
        return status_for(self.error_code)

    def get_safe_message(self) -> str:
        """Returns the message collapsed onto a single line."""
        return " ".join(str(self.message).split())


class InvalidPayload(BricksError):
    error_code = ErrorCode.INVALID_PAYLOAD


class RejectedStatement(BricksError):
    """Raised when a statement fails the read-only policy."""
    error_code = ErrorCode.NOT_SELECT


class StatementParseError(RejectedStatement):
    error_code = ErrorCode.PARSE_ERROR


class NotSelect(RejectedStatement):
    error_code = ErrorCode.NOT_SELECT


class DangerousKeyword(RejectedStatement):
    error_code = ErrorCode.DANGEROUS_KEYWORD

    def __init__(self, keyword: str):
        super().__init__(f"Statement contains forbidden keyword: {keyword}")
        self.keyword = keyword


class MissingTimeColumn(BricksError):
    error_code = ErrorCode.MISSING_TIME_COLUMN


class MissingArgument(BricksError):
    """A required discovery argument was empty."""
    error_code = ErrorCode.INVALID_PAYLOAD


class CatalogRequired(MissingArgument):
    error_code = ErrorCode.CATALOG_REQUIRED

    def __init__(self, message: str = "Catalog name is required"):
        super().__init__(message)


class SchemaRequired(MissingArgument):
    error_code = ErrorCode.SCHEMA_REQUIRED

    def __init__(self, message: str = "Database is required"):
        super().__init__(message)


class TableRequired(MissingArgument):
    error_code = ErrorCode.TABLE_REQUIRED

    def __init__(self, message: str = "Table is required"):
        super().__init__(message)


class NotFound(BricksError):
    error_code = ErrorCode.NOT_FOUND


class RemoteQueryFailure(BricksError):
    """The remote engine rejected or failed a statement.

    Attributes:
        cause (Optional[BaseException]): The driver-level exception, if any.
    """
    error_code = ErrorCode.REMOTE_QUERY_FAILURE

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class StatementTimeout(RemoteQueryFailure):
    error_code = ErrorCode.STATEMENT_TIMEOUT


class ServiceUnavailable(RemoteQueryFailure):
    error_code = ErrorCode.SERVICE_UNAVAILABLE


class ScanFailure(BricksError):
    error_code = ErrorCode.SCAN_FAILURE


class SerializationFailure(BricksError):
    error_code = ErrorCode.SERIALIZATION_FAILURE


class ErrorResponse(BaseModel):
    """Wire shape of every error body."""
    error: str
