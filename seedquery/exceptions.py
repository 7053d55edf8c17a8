"""Application exception hierarchy.

All custom exceptions inherit from SeedQueryError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "SQ-1000"
    CONFIGURATION_ERROR = "SQ-1001"
    VALIDATION_ERROR = "SQ-1002"
    REQUEST_TIMEOUT = "SQ-1003"

    # Connection errors (2xxx)
    CONNECTION_FAILED = "SQ-2000"

    # Schema errors (3xxx)
    SCHEMA_ERROR = "SQ-3000"
    COLLECTION_DELETE_FAILED = "SQ-3001"
    COLLECTION_CREATE_FAILED = "SQ-3002"

    # Batch errors (4xxx)
    BATCH_FAILED = "SQ-4000"
    BATCH_PARTIAL_FAILURE = "SQ-4001"

    # Query errors (5xxx)
    QUERY_FAILED = "SQ-5000"
    INVALID_PAYLOAD = "SQ-5001"
    DECODE_FAILED = "SQ-5002"


class SeedQueryError(Exception):
    """Base exception for all seedquery errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured log output."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(SeedQueryError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(SeedQueryError):
    """Input validation error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class ServiceConnectionError(SeedQueryError):
    """The vector database could not be reached."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONNECTION_FAILED, details)


class SchemaError(SeedQueryError):
    """Collection schema operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SCHEMA_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class BatchError(SeedQueryError):
    """Batch insert error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.BATCH_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class QueryError(SeedQueryError):
    """Query rejected by the service or failed in transit.

    Attributes:
        errors: Query-level errors reported in the response envelope.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.QUERY_FAILED,
        details: dict[str, Any] | None = None,
        errors: list[Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
        self.errors = errors or []


class DecodeError(SeedQueryError):
    """Response payload could not be converted into typed records."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.DECODE_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
