"""Emotion record data models."""

from pydantic import Field

from .base import CamelModel


class EmotionRecord(CamelModel):
    """A user's emotional label attached to one track.

    ``track_id`` is the natural key: a session holds at most one record per track.
    """

    id: str = Field(..., description="Store-generated record identity")
    track_id: str
    track_title: str
    artist: str
    emotion: str
    group: str | None = Field(default=None, description="Secondary label used by playlists")
    broadgroup: str | None = Field(default=None, description="Coarse category above group")
    timestamp: int = Field(..., description="Write time in milliseconds since the epoch")
