"""
Request Context and Correlation IDs

Request-scoped context kept in a ContextVar so every event emitted while handling a
request carries the same correlation ID.
"""

import uuid
from contextvars import ContextVar
from typing import Any

from ..errors import mask_key

_request_context: ContextVar[dict[str, Any]] = ContextVar("request_context", default={})


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracing."""
    return str(uuid.uuid4())


def set_request_context(
    request_id: str,
    session_key: str | None = None,
    **kwargs: Any,
) -> None:
    """
    Set the request context for the current async context.

    Args:
        request_id: Correlation ID for request tracing
        session_key: Caller's Last.fm session key, stored masked
        **kwargs: Additional context properties
    """
    _request_context.set(
        {
            "request_id": request_id,
            "session": mask_key(session_key) if session_key else None,
            **kwargs,
        }
    )


def get_request_context() -> dict[str, Any]:
    """Get the current request context."""
    return _request_context.get()


def clear_request_context() -> None:
    """Clear the request context for the current async context."""
    _request_context.set({})
