"""Request models for API endpoints.

Fields are optional at this layer; the managers own required-field checks so that a
missing value surfaces through the same error contract as every other failure.
"""

from pydantic import Field

from .base import CamelModel


class AuthRequest(CamelModel):
    """Credentials for the Last.fm mobile session handshake."""

    username: str | None = None
    password: str | None = None


class SessionKeyRequest(CamelModel):
    """Request carrying only the bearer session key."""

    session_key: str | None = Field(default=None, examples=["d580d57f32848f5dcf574d1ce18d78b2"])


class RecentTracksRequest(SessionKeyRequest):
    """Request for a page of recently scrobbled tracks."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=200)


class SearchRequest(CamelModel):
    """Free-text track search."""

    query: str | None = Field(default=None, examples=["Teardrop"])


class FirstLoginRequest(SessionKeyRequest):
    """First-login enrichment; ``uid`` is the document to enrich."""

    uid: str | None = None


class StoreEmotionRequest(SessionKeyRequest):
    """Tag a track with an emotion."""

    track_id: str | None = None
    track_title: str | None = None
    artist: str | None = None
    emotion: str | None = Field(default=None, examples=["happy"])
    group: str | None = None
    broadgroup: str | None = None


class DeleteEmotionRequest(SessionKeyRequest):
    """Remove one emotion record by identity."""

    emotion_id: str | None = None


class CreatePlaylistRequest(SessionKeyRequest):
    """Build a playlist from records whose group is in ``emotions``."""

    group: str | None = None
    name: str | None = None
    emotions: list[str] | None = Field(default=None, examples=[["joyful", "calm"]])
