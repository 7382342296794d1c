"""Exception handlers for the bookmark API.

Each handler turns its exception into an :class:`APIException` and renders it
with :func:`_render`, so every failure leaves in the same error envelope.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError as PydanticValidationError

from myfc.api.exceptions import APIException, ErrorCode, ValidationError
from myfc.api.models.responses import error_response, make_error

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred"


def _context(request: Request, **extra: Any) -> dict[str, Any]:
    return {
        "correlation_id": getattr(request.state, "correlation_id", None),
        "path": request.url.path,
        **extra,
    }


def _render(request: Request, exc: APIException) -> JSONResponse:
    detail = make_error(
        code=exc.error_code,
        message=exc.message,
        error_type=exc.error_type,
        retryable=exc.retryable,
        details=exc.details or None,
    )
    correlation_id = getattr(request.state, "correlation_id", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(detail, correlation_id=correlation_id),
    )


async def api_exception_handler(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, APIException):
        raise exc
    logger.warning(
        "api_error",
        extra=_context(request, error_code=exc.error_code.value, status_code=exc.status_code),
    )
    return _render(request, exc)


async def validation_exception_handler(request: Request, exc: Exception) -> Response:
    """422 with one entry per invalid field."""
    if not isinstance(exc, RequestValidationError | PydanticValidationError):
        raise exc
    fields = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning("request_validation_failed", extra=_context(request, errors=fields))
    return _render(request, ValidationError("Request validation failed", {"fields": fields}))


async def database_exception_handler(request: Request, exc: Exception) -> Response:
    """503 for storage failures and lock timeouts; clients may retry."""
    logger.error("database_error", exc_info=exc, extra=_context(request, error=str(exc)))
    return _render(
        request,
        APIException(
            "Database temporarily unavailable", ErrorCode.DATABASE_ERROR, status_code=503
        ),
    )


async def global_exception_handler(request: Request, exc: Exception) -> Response:
    """500; the exception text is only exposed when the server logs at DEBUG."""
    logger.error("unhandled_exception", exc_info=exc, extra=_context(request))
    cfg = getattr(request.app.state, "cfg", None)
    debug = cfg is not None and cfg.runtime.log_level == "DEBUG"
    message = str(exc) if debug else INTERNAL_ERROR_MESSAGE
    return _render(request, APIException(message, ErrorCode.INTERNAL_ERROR, status_code=500))
