"""Exception handlers rendering the JSON error envelope.

Every envelope carries the execution ID of the failing request, taken from
``request.state`` where the execution context middleware stored it.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse, Response

from app.api.exceptions import APIException, ErrorCode, ErrorType
from app.api.models.responses import ErrorDetail, error_response, make_error

logger = logging.getLogger(__name__)


def _request_execution_id(request: Request) -> str | None:
    return getattr(request.state, "execution_id", None)


def _envelope(request: Request, status_code: int, detail: ErrorDetail) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(detail, execution_id=_request_execution_id(request)),
    )


async def api_exception_handler(request: Request, exc: Exception) -> Response:
    """Render an :class:`APIException` with its own status code and message."""
    if not isinstance(exc, APIException):
        return await global_exception_handler(request, exc)

    logger.error(
        "api_error",
        extra={
            "execution_id": _request_execution_id(request),
            "error_code": exc.error_code.value,
            "status_code": exc.status_code,
            "path": request.url.path,
        },
    )
    return _envelope(
        request,
        exc.status_code,
        make_error(
            code=exc.error_code,
            message=exc.message,
            error_type=exc.error_type,
            retryable=exc.retryable,
            details=exc.details or None,
        ),
    )


async def global_exception_handler(request: Request, exc: Exception) -> Response:
    """Render anything unexpected as a 500; the real message only at debug level."""
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={"execution_id": _request_execution_id(request), "path": request.url.path},
    )

    config = getattr(request.app.state, "config", None)
    if config is not None and config.logging.level == "debug":
        message = str(exc)
    else:
        message = "An internal server error occurred"

    return _envelope(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        make_error(code=ErrorCode.INTERNAL_ERROR, message=message, error_type=ErrorType.INTERNAL),
    )
