"""
Telemetry Middleware for FastAPI

Times every request, tags it with its route group and a correlation ID, and reports
the outcome as telemetry events plus one access log line.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .context import clear_request_context, generate_correlation_id, set_request_context
from .events import TelemetryEvents
from .tracker import track_event, track_exception

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SESSION_KEY_HEADER = "X-Session-Key"


def route_group(path: str) -> str:
    """First path segment ("emotions" for /emotions/store), or "root"."""
    segment = path.strip("/").split("/", 1)[0]
    return segment or "root"


class TelemetryMiddleware(BaseHTTPMiddleware):
    """
    Request telemetry middleware.

    A caller-supplied ``X-Request-ID`` is reused as the correlation ID, otherwise one is
    generated; either way it is echoed on the response. Session keys travel in request
    bodies, so the context only carries one when the client also sends
    ``X-Session-Key``, and then only in masked form.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process the request and track telemetry."""
        start_time = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_correlation_id()

        set_request_context(
            request_id=request_id,
            session_key=request.headers.get(SESSION_KEY_HEADER),
            route_group=route_group(request.url.path),
        )
        request.state.request_id = request_id
        properties: dict[str, Any] = {"endpoint": request.url.path, "method": request.method}

        try:
            track_event(TelemetryEvents.REQUEST_RECEIVED, properties)
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_exception(e, {**properties, "duration_ms": duration_ms})
            track_event(
                TelemetryEvents.REQUEST_FAILED,
                {**properties, "duration_ms": duration_ms, "error_type": type(e).__name__},
            )
            logger.error(f"{request.method} {request.url.path} crashed after {duration_ms:.1f}ms")
            raise
        else:
            duration_ms = (time.perf_counter() - start_time) * 1000
            track_event(
                TelemetryEvents.REQUEST_COMPLETED,
                {**properties, "status_code": response.status_code, "duration_ms": duration_ms},
            )
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"({duration_ms:.1f}ms, request {request_id})"
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_context()
