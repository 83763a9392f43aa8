"""Last.fm payload models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EnrichmentStatus(str, Enum):
    """Outcome of the per-track artwork lookup during search."""

    OK = "ok"
    NO_ARTWORK = "no_artwork"
    UNAVAILABLE = "unavailable"


class TrackImage(BaseModel):
    """Image entry as Last.fm sends it."""

    model_config = ConfigDict(populate_by_name=True)

    url: str = Field(default="", alias="#text")
    size: str | None = None

    @field_validator("url", mode="before")
    @classmethod
    def _null_url(cls, value):
        # Last.fm sends null instead of "" for some missing images
        return "" if value is None else value


class SearchTrack(BaseModel):
    """A single track.search match, with artwork from track.getInfo when available."""

    model_config = {"use_enum_values": True}

    name: str
    artist: str
    url: str | None = None
    listeners: str | None = None
    mbid: str | None = None
    image: list[TrackImage] = Field(default_factory=list)
    enrichment: EnrichmentStatus = EnrichmentStatus.UNAVAILABLE


class TrackSearchResult(BaseModel):
    """Search results in upstream order."""

    query: str
    total_results: int | None = None
    tracks: list[SearchTrack] = Field(default_factory=list)
