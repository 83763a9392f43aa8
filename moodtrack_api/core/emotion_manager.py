"""Emotion record manager."""

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..errors import mask_key, require
from ..models import EmotionRecord
from ..telemetry import TelemetryEvents, track_event

if TYPE_CHECKING:
    from ..storage import Database

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class EmotionManager:
    """Stores, lists and deletes the emotion tags of a session."""

    def __init__(self, db: "Database", clock: Callable[[], int] = now_ms):
        """Initialize emotion manager.

        Args:
            db: Database instance
            clock: Millisecond timestamp source
        """
        self.db = db
        self.clock = clock

    async def tag_track(
        self,
        session_key: str | None,
        track_id: str | None,
        track_title: str | None,
        artist: str | None,
        emotion: str | None,
        group: str | None = None,
        broadgroup: str | None = None,
    ) -> EmotionRecord:
        """Tag a track, replacing any earlier tag of the same track in this session.

        Re-tagging keeps the stored record's identity and overwrites title, artist,
        emotion, group, broadgroup and timestamp.
        """
        require(
            session_key=session_key,
            track_id=track_id,
            track_title=track_title,
            artist=artist,
            emotion=emotion,
        )

        row = await self.db.upsert_emotion(
            user_key=session_key,
            track_id=track_id,
            track_title=track_title,
            artist=artist,
            emotion=emotion,
            group=group or None,
            broadgroup=broadgroup or None,
            timestamp=self.clock(),
        )
        record = EmotionRecord(**row)

        logger.info(f"Stored emotion '{emotion}' for track {track_id} ({mask_key(session_key)})")
        track_event(TelemetryEvents.EMOTION_STORED, {"emotion": emotion, "group": group})
        return record

    async def list_emotions(self, session_key: str | None) -> list[EmotionRecord]:
        """List every emotion record of the session, most recent first.

        Creates the user document if this key has never been seen, which covers
        clients resuming a Last.fm session that never authenticated here.
        """
        require(session_key=session_key)

        if await self.db.ensure_user(session_key):
            logger.info(f"User document not found, created one for {mask_key(session_key)}")
            track_event(TelemetryEvents.USER_MATERIALIZED)

        rows = await self.db.list_emotions(session_key)
        return [EmotionRecord(**row) for row in rows]

    async def delete_emotion(self, session_key: str | None, emotion_id: str | None) -> bool:
        """Delete one record by identity. A missing record counts as deleted."""
        require(session_key=session_key, emotion_id=emotion_id)

        deleted = await self.db.delete_emotion(session_key, emotion_id)
        if not deleted:
            logger.debug(f"Emotion {emotion_id} was already absent")
        track_event(TelemetryEvents.EMOTION_DELETED, {"existed": deleted})
        return deleted

    async def delete_history(self, session_key: str | None) -> int:
        """Delete every record of the session atomically and return how many were removed."""
        require(session_key=session_key)

        deleted = await self.db.delete_emotions(session_key)
        logger.info(f"Deleted {deleted} emotions for {mask_key(session_key)}")
        track_event(TelemetryEvents.EMOTION_HISTORY_DELETED, {"deleted": deleted})
        return deleted
