"""HTTP-facing errors and their codes.

Subclasses pin the status code, error code and client-facing message as class
attributes; the underlying cause, if any, stays in the logs.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    CONTEXT_NOT_FOUND = "CONTEXT_NOT_FOUND"
    METRICS_UNAVAILABLE = "METRICS_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorType(str, Enum):
    CONTEXT = "context"
    INTERNAL = "internal"


class APIException(Exception):
    """Base for errors rendered through the JSON error envelope."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR
    error_type: ErrorType = ErrorType.INTERNAL
    default_message: str = "An internal server error occurred"
    retryable: bool = False

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class ContextNotFoundError(APIException):
    """A handler expected an active execution context and found none."""

    error_code = ErrorCode.CONTEXT_NOT_FOUND
    error_type = ErrorType.CONTEXT
    default_message = "Execution ID not found in context"


class MetricsUnavailableError(APIException):
    """Process metrics or context state could not be read."""

    error_code = ErrorCode.METRICS_UNAVAILABLE
    default_message = "Health check failed"
    retryable = True
