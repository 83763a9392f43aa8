"""Response models for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from .base import CamelModel
from .emotion import EmotionRecord
from .playlist import PlaylistSummary


class SuccessResponse(CamelModel):
    """Acknowledgement for operations without a payload."""

    success: bool = True


class ProfileResponse(SuccessResponse):
    """Response for first-login enrichment."""

    already_exists: bool = False
    realname: str | None = None
    message: str | None = None


class RealnameResponse(CamelModel):
    """Stored real name lookup."""

    found: bool
    realname: str | None = None
    message: str | None = None


class EmotionListResponse(CamelModel):
    """All emotion records of a session, most recent first."""

    emotions: list[EmotionRecord]


class DeleteHistoryResponse(SuccessResponse):
    """Response for a full emotion history wipe."""

    deleted: int = 0


class PlaylistCreateResponse(SuccessResponse):
    """Response carrying the new playlist's identity."""

    playlist_id: str
    song_count: int = 0


class PlaylistListResponse(SuccessResponse):
    """Playlist summaries for a session."""

    playlists: list[PlaylistSummary] = Field(default_factory=list)


class RecentTracksResponse(BaseModel):
    """Recent tracks payload passed through from Last.fm."""

    recenttracks: dict[str, Any]


class ErrorDetail(BaseModel):
    """Stable error code plus a generic, client-safe message."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    """Body of every failure response."""

    detail: ErrorDetail


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    uptime: str
    database_connected: bool
    lastfm_configured: bool


class VersionResponse(BaseModel):
    """Version information response."""

    service_version: str
    lastfm_api_url: str
