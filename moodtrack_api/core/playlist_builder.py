"""Playlist builder."""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..errors import NoMatchingRecordsError, mask_key, require
from ..models import EmotionRecord, Playlist, PlaylistSong, PlaylistSummary
from ..telemetry import TelemetryEvents, track_event
from .emotion_manager import now_ms

if TYPE_CHECKING:
    from ..storage import Database

logger = logging.getLogger(__name__)


class PlaylistBuilder:
    """Derives playlists from the emotion records of a session."""

    def __init__(self, db: "Database", clock: Callable[[], int] = now_ms):
        """Initialize playlist builder.

        Args:
            db: Database instance
            clock: Returns the current time in epoch milliseconds; stamps createdAt
        """
        self.db = db
        self.clock = clock

    async def build_playlist(
        self,
        session_key: str | None,
        group: str | None,
        name: str | None,
        emotions: list[str] | None,
    ) -> Playlist:
        """Snapshot every record whose group is in ``emotions`` into a new playlist.

        Songs keep the store's order (most recent first). The playlist is not a live
        view: later tagging does not change it.

        Raises:
            InvalidArgumentError: If session_key, group or emotions is missing
            NoMatchingRecordsError: If no record matches the filter
        """
        labels = [label for label in dict.fromkeys(emotions or []) if label]
        require(session_key=session_key, group=group, emotions=labels)
        name = name or group

        rows = await self.db.find_emotions_by_groups(session_key, labels)
        if not rows:
            raise NoMatchingRecordsError("No songs found with that grouping")

        songs = [_snapshot(EmotionRecord(**row)) for row in rows]
        created_at = self.clock()

        playlist_id = await self.db.create_playlist(
            user_key=session_key,
            name=name,
            group=group,
            emotions=labels,
            songs=[song.model_dump(by_alias=True) for song in songs],
            created_at=created_at,
        )

        logger.info(
            f"Created playlist {playlist_id} with {len(songs)} songs ({mask_key(session_key)})"
        )
        track_event(TelemetryEvents.PLAYLIST_CREATED, {"group": group, "song_count": len(songs)})
        return Playlist(
            id=playlist_id,
            name=name,
            group=group,
            emotions=labels,
            songs=songs,
            created_at=created_at,
        )

    async def list_playlists(self, session_key: str | None) -> list[PlaylistSummary]:
        """List playlist identities and names for the session, newest first."""
        require(session_key=session_key)
        rows = await self.db.list_playlists(session_key)
        return [PlaylistSummary(id=row["id"], name=row["name"]) for row in rows]


def _snapshot(record: EmotionRecord) -> PlaylistSong:
    # The song's emotion is the record's group label, which is what the filter matched
    return PlaylistSong(
        track_id=record.track_id,
        track_title=record.track_title,
        artist=record.artist,
        emotion=record.group,
    )
