"""Typed failures raised by the core managers.

Each error carries a stable ``code`` that is exposed to clients and the HTTP status
the API layer answers with. Routers translate these into ``HTTPException`` at the
handler boundary; nothing below the routers knows about HTTP.
"""

from typing import Any


class MoodtrackError(Exception):
    """Base class for all expected failures."""

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str, *, payload: Any = None):
        super().__init__(message)
        self.message = message
        # Raw upstream payload kept for diagnostics, never sent to clients
        self.payload = payload


class InvalidArgumentError(MoodtrackError):
    """A required input was missing or empty."""

    code = "invalid_argument"
    status_code = 400


class UpstreamError(MoodtrackError):
    """Last.fm answered with an error envelope or could not be reached."""

    code = "upstream_error"
    status_code = 502


class UpstreamAuthFailedError(UpstreamError):
    """Last.fm rejected the credentials during the mobile session handshake."""

    code = "upstream_auth_failed"
    status_code = 401


class UpstreamProtocolError(UpstreamError):
    """Last.fm answered with a success envelope that lacks the expected fields."""

    code = "upstream_protocol_error"
    status_code = 502


class NoMatchingRecordsError(MoodtrackError):
    """A query came back empty where emptiness is meaningful."""

    code = "no_matching_records"
    status_code = 404


class StoreError(MoodtrackError):
    """The document store failed (connection, permission or query fault)."""

    code = "store_error"
    status_code = 503


def require(**fields: Any) -> None:
    """Raise InvalidArgumentError naming every missing or empty field."""
    missing = [name for name, value in fields.items() if value is None or value in ("", [])]
    if missing:
        raise InvalidArgumentError(f"Missing required fields: {', '.join(missing)}")


def mask_key(key: str | None) -> str:
    """Shorten a session key for log output."""
    if not key:
        return "<none>"
    if len(key) <= 8:
        return key[:2] + "***"
    return f"{key[:4]}...{key[-4:]}"
