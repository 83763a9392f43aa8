"""Track lookups passed through to Last.fm."""

import logging
from typing import Any

from ..errors import require
from ..models import TrackSearchResult
from ..telemetry import TelemetryEvents, track_event
from .lastfm_client import LastFMClient

logger = logging.getLogger(__name__)


class TrackCatalog:
    """Validates track queries before they reach Last.fm."""

    def __init__(self, lastfm: LastFMClient):
        self.lastfm = lastfm

    async def recent_tracks(
        self, session_key: str | None, page: int = 1, limit: int = 20
    ) -> dict[str, Any]:
        """Return one page of the session's recent scrobbles as Last.fm sends it."""
        require(session_key=session_key)
        return await self.lastfm.get_recent_tracks(session_key, page=page, limit=limit)

    async def search(self, query: str | None) -> TrackSearchResult:
        """Search tracks with best-effort artwork enrichment."""
        require(query=query)

        result = await self.lastfm.search_tracks(query)
        unavailable = sum(1 for t in result.tracks if t.enrichment == "unavailable")
        if unavailable:
            logger.warning(f"Artwork unavailable for {unavailable}/{len(result.tracks)} tracks")
            track_event(TelemetryEvents.TRACK_ENRICHMENT_FAILED, {"count": unavailable})
        track_event(TelemetryEvents.TRACK_SEARCH_COMPLETED, {"results": len(result.tracks)})
        return result
