"""Playlist data models."""

from pydantic import Field

from .base import CamelModel


class PlaylistSong(CamelModel):
    """Snapshot of an emotion record taken when the playlist was built."""

    track_id: str
    track_title: str
    artist: str
    emotion: str | None = None


class Playlist(CamelModel):
    """Playlist derived from stored emotion records. Immutable once created."""

    id: str = Field(..., description="Store-generated playlist identity")
    name: str
    group: str
    emotions: list[str] = Field(default_factory=list, description="Group labels used as filter")
    songs: list[PlaylistSong] = Field(default_factory=list)
    created_at: int = Field(..., description="Creation time in milliseconds since the epoch")


class PlaylistSummary(CamelModel):
    """Playlist identity and display name."""

    id: str
    name: str
