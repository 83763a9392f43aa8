"""Conversion of core failures into HTTP errors at the handler boundary."""

import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..errors import InvalidArgumentError, MoodtrackError, UpstreamProtocolError
from ..models import ErrorDetail, ErrorResponse
from ..telemetry import TelemetryEvents, track_event, track_exception

logger = logging.getLogger(__name__)

# Failure statuses documented on every operation router
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: {"model": ErrorResponse} for status in (400, 401, 404, 500, 502, 503)
}


def operation_failed(operation: str, message: str, exc: Exception, **context: Any) -> HTTPException:
    """Log a failed operation and build the HTTPException returned to the caller.

    Clients get the error ``code`` and the operation's generic ``message``. Missing
    input is the exception: its message names the missing fields.

    Args:
        operation: Operation name used in logs and telemetry
        message: Generic message for this operation
        exc: The failure
        **context: Key identifiers to log (already masked)
    """
    if isinstance(exc, MoodtrackError):
        status_code, code = exc.status_code, exc.code
        if isinstance(exc, InvalidArgumentError):
            logger.info(f"{operation} rejected: {exc.message} {context}")
            message = exc.message
        elif isinstance(exc, UpstreamProtocolError):
            logger.error(
                f"{operation} failed [{code}]: {exc.message} {context} payload={exc.payload!r}"
            )
        else:
            logger.error(f"{operation} failed [{code}]: {exc.message} {context}")
    else:
        status_code, code = 500, "internal_error"
        logger.error(f"{operation} failed unexpectedly: {exc} {context}", exc_info=True)

    level = "WARNING" if status_code < 500 else "ERROR"
    track_exception(exc, {"operation": operation, "code": code}, level=level)
    track_event(TelemetryEvents.OPERATION_FAILED, {"operation": operation, "code": code})
    detail = ErrorDetail(code=code, message=message)
    return HTTPException(status_code=status_code, detail=detail.model_dump())


async def moodtrack_error_handler(request: Request, exc: MoodtrackError) -> JSONResponse:
    """Answer failures raised outside a route body, e.g. while resolving dependencies."""
    logger.error(f"{request.url.path} failed [{exc.code}]: {exc.message}")
    return error_response(exc.status_code, exc.code, exc.message)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Answer bodies that fail model validation as ``invalid_argument`` (400).

    The message lists each offending field by its wire name, e.g.
    ``Invalid request: limit: Input should be less than or equal to 200``.
    """
    problems = "; ".join(_describe(error) for error in exc.errors())
    message = f"Invalid request: {problems}" if problems else "Invalid request"

    logger.info(f"{request.method} {request.url.path} rejected: {message}")
    track_event(
        TelemetryEvents.OPERATION_FAILED,
        {"operation": request.url.path, "code": "invalid_argument"},
    )
    return error_response(400, "invalid_argument", message)


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ErrorResponse(detail=ErrorDetail(code=code, message=message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _describe(error: dict[str, Any]) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{field}: {error.get('msg')}" if field else str(error.get("msg"))
