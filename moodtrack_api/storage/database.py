"""Document storage on PostgreSQL via asyncpg.

Users, emotion records and playlists are stored as rows keyed by the owning
``user_key`` (a Last.fm session key or a client uid). Document-shaped fields live in
JSONB columns so profile writes can merge instead of overwrite.
"""

import asyncio
import json
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from ..config import settings
from ..errors import StoreError, mask_key

logger = logging.getLogger(__name__)

_STORE_FAILURES = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


def _load_json(value: Any) -> Any:
    return json.loads(value) if isinstance(value, str) else value


def _emotion_from_row(row: asyncpg.Record) -> dict[str, Any]:
    return {
        "id": row["emotion_id"],
        "track_id": row["track_id"],
        "track_title": row["track_title"],
        "artist": row["artist"],
        "emotion": row["emotion"],
        "group": row["emotion_group"],
        "broadgroup": row["broadgroup"],
        "timestamp": row["timestamp"],
    }


class Database:
    """Async PostgreSQL document store using an asyncpg pool."""

    def __init__(
        self,
        db_url: str,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 30.0,
    ):
        """Initialize database with connection URL and pool limits."""
        self.db_url = db_url
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """Establish database connection pool and initialize schema."""
        if self._pool is not None:
            return

        try:
            self._pool = await asyncpg.create_pool(
                self.db_url,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout,
            )

            from .schema import INIT_SCHEMA

            async with self._pool.acquire() as conn:
                await conn.execute(INIT_SCHEMA)
        except _STORE_FAILURES as e:
            logger.error(f"Database connection failed: {e}")
            raise StoreError("Database connection failed") from e

        logger.info(f"Database connected: {self.db_url.split('@')[-1]}")  # Don't log password

    async def disconnect(self) -> None:
        """Close database connection pool."""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database disconnected")

    @asynccontextmanager
    async def _acquire(self, operation: str) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a pooled connection, converting driver failures into StoreError."""
        if not self._pool:
            raise StoreError("Database not connected")

        try:
            async with self._pool.acquire() as conn:
                yield conn
        except _STORE_FAILURES as e:
            logger.error(f"Database operation '{operation}' failed: {e}")
            raise StoreError(f"Database operation '{operation}' failed") from e

    async def ping(self) -> bool:
        """Run a trivial query to check connectivity."""
        async with self._acquire("ping") as conn:
            return await conn.fetchval("SELECT 1") == 1

    # User document operations
    async def get_user(self, user_key: str) -> dict[str, Any] | None:
        """Get a user document by key."""
        async with self._acquire("get_user") as conn:
            row = await conn.fetchrow("SELECT * FROM users WHERE user_key = $1", user_key)

        if row:
            return {
                "user_key": row["user_key"],
                "data": _load_json(row["data"]) or {},
                "created_at": row["created_at"],
                "last_login": row["last_login"],
            }
        return None

    async def upsert_user(self, user_key: str, fields: dict[str, Any]) -> None:
        """Create or merge a user document and refresh its last login.

        Top-level keys in ``fields`` overwrite existing ones; other keys are kept.
        ``last_login`` never moves backwards.
        """
        async with self._acquire("upsert_user") as conn:
            await conn.execute(
                """
                INSERT INTO users (user_key, data)
                VALUES ($1, $2::jsonb)
                ON CONFLICT (user_key) DO UPDATE
                SET data = users.data || EXCLUDED.data,
                    last_login = GREATEST(users.last_login, NOW())
                """,
                user_key,
                json.dumps(fields),
            )

        logger.debug(f"Upserted user: {mask_key(user_key)}")

    async def ensure_user(self, user_key: str) -> bool:
        """Create an empty user document if none exists.

        Returns:
            True if a document was created
        """
        async with self._acquire("ensure_user") as conn:
            result = await conn.execute(
                "INSERT INTO users (user_key) VALUES ($1) ON CONFLICT (user_key) DO NOTHING",
                user_key,
            )

        # Result string is "INSERT 0 N"
        created = result.split()[-1] != "0" if result else False
        if created:
            logger.debug(f"Materialized user: {mask_key(user_key)}")
        return created

    async def merge_user_info(self, user_key: str, realname: str | None) -> None:
        """Merge ``{realname, createdAt}`` into the document's ``userInfo`` sub-object."""
        async with self._acquire("merge_user_info") as conn:
            await conn.execute(
                """
                INSERT INTO users (user_key, data)
                VALUES (
                    $1,
                    jsonb_build_object(
                        'userInfo',
                        jsonb_build_object('realname', $2::text, 'createdAt', to_jsonb(NOW()))
                    )
                )
                ON CONFLICT (user_key) DO UPDATE
                SET data = users.data || jsonb_build_object(
                    'userInfo',
                    COALESCE(users.data -> 'userInfo', '{}'::jsonb)
                        || jsonb_build_object('realname', $2::text, 'createdAt', to_jsonb(NOW()))
                )
                """,
                user_key,
                realname,
            )

        logger.debug(f"Merged user info: {mask_key(user_key)}")

    async def delete_user(self, user_key: str) -> dict[str, int]:
        """Delete a user document together with its emotions and playlists."""
        async with self._acquire("delete_user") as conn:
            async with conn.transaction():
                emotions = await conn.execute("DELETE FROM emotions WHERE user_key = $1", user_key)
                playlists = await conn.execute(
                    "DELETE FROM playlists WHERE user_key = $1", user_key
                )
                users = await conn.execute("DELETE FROM users WHERE user_key = $1", user_key)

        counts = {
            "users": int(users.split()[-1]),
            "emotions": int(emotions.split()[-1]),
            "playlists": int(playlists.split()[-1]),
        }
        logger.debug(f"Deleted user {mask_key(user_key)}: {counts}")
        return counts

    # Emotion operations
    async def upsert_emotion(
        self,
        user_key: str,
        track_id: str,
        track_title: str,
        artist: str,
        emotion: str,
        group: str | None,
        broadgroup: str | None,
        timestamp: int,
    ) -> dict[str, Any]:
        """Insert an emotion record, or update the one already stored for the track.

        An existing record keeps its identity; every mutable field is overwritten.
        """
        async with self._acquire("upsert_emotion") as conn:
            row = await conn.fetchrow(
                """
                INSERT INTO emotions (
                    emotion_id, user_key, track_id, track_title, artist,
                    emotion, emotion_group, broadgroup, timestamp
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                ON CONFLICT (user_key, track_id) DO UPDATE
                SET track_title = EXCLUDED.track_title,
                    artist = EXCLUDED.artist,
                    emotion = EXCLUDED.emotion,
                    emotion_group = EXCLUDED.emotion_group,
                    broadgroup = EXCLUDED.broadgroup,
                    timestamp = EXCLUDED.timestamp
                RETURNING *
                """,
                str(uuid.uuid4()),
                user_key,
                track_id,
                track_title,
                artist,
                emotion,
                group,
                broadgroup,
                timestamp,
            )

        logger.debug(f"Upserted emotion {row['emotion_id']} for track {track_id}")
        return _emotion_from_row(row)

    async def list_emotions(self, user_key: str) -> list[dict[str, Any]]:
        """List a user's emotion records, most recent first."""
        async with self._acquire("list_emotions") as conn:
            rows = await conn.fetch(
                """
                SELECT * FROM emotions
                WHERE user_key = $1
                ORDER BY timestamp DESC, emotion_id
                """,
                user_key,
            )

        return [_emotion_from_row(row) for row in rows]

    async def find_emotions_by_groups(
        self, user_key: str, groups: list[str]
    ) -> list[dict[str, Any]]:
        """List a user's emotion records whose group is one of ``groups``."""
        async with self._acquire("find_emotions_by_groups") as conn:
            rows = await conn.fetch(
                """
                SELECT * FROM emotions
                WHERE user_key = $1 AND emotion_group = ANY($2::text[])
                ORDER BY timestamp DESC, emotion_id
                """,
                user_key,
                groups,
            )

        return [_emotion_from_row(row) for row in rows]

    async def delete_emotion(self, user_key: str, emotion_id: str) -> bool:
        """Delete one emotion record. Deleting a missing record is not an error."""
        async with self._acquire("delete_emotion") as conn:
            result = await conn.execute(
                "DELETE FROM emotions WHERE user_key = $1 AND emotion_id = $2",
                user_key,
                emotion_id,
            )

        deleted = result.split()[-1] != "0" if result else False
        if deleted:
            logger.debug(f"Deleted emotion: {emotion_id}")
        return deleted

    async def delete_emotions(self, user_key: str) -> int:
        """Delete every emotion record of a user in one transaction."""
        async with self._acquire("delete_emotions") as conn:
            async with conn.transaction():
                result = await conn.execute("DELETE FROM emotions WHERE user_key = $1", user_key)

        deleted = int(result.split()[-1]) if result else 0
        logger.debug(f"Deleted {deleted} emotions for {mask_key(user_key)}")
        return deleted

    # Playlist operations
    async def create_playlist(
        self,
        user_key: str,
        name: str,
        group: str,
        emotions: list[str],
        songs: list[dict[str, Any]],
        created_at: int,
    ) -> str:
        """Insert a playlist and return its generated identity."""
        playlist_id = str(uuid.uuid4())

        async with self._acquire("create_playlist") as conn:
            await conn.execute(
                """
                INSERT INTO playlists (
                    playlist_id, user_key, name, playlist_group, emotions, songs, created_at
                )
                VALUES ($1, $2, $3, $4, $5::jsonb, $6::jsonb, $7)
                """,
                playlist_id,
                user_key,
                name,
                group,
                json.dumps(emotions),
                json.dumps(songs),
                created_at,
            )

        logger.debug(f"Created playlist: {playlist_id}")
        return playlist_id

    async def list_playlists(self, user_key: str) -> list[dict[str, Any]]:
        """List a user's playlists, newest first."""
        async with self._acquire("list_playlists") as conn:
            rows = await conn.fetch(
                """
                SELECT playlist_id, name, playlist_group, emotions, songs, created_at
                FROM playlists
                WHERE user_key = $1
                ORDER BY created_at DESC
                """,
                user_key,
            )

        return [
            {
                "id": row["playlist_id"],
                "name": row["name"],
                "group": row["playlist_group"],
                "emotions": _load_json(row["emotions"]),
                "songs": _load_json(row["songs"]),
                "created_at": row["created_at"],
            }
            for row in rows
        ]


# Global database instance
_db: Database | None = None


async def init_database() -> Database:
    """Initialize and return global database instance."""
    global _db
    if _db is None:
        db = Database(
            settings.get_database_url(),
            min_size=settings.database_pool_min_size,
            max_size=settings.database_pool_max_size,
            command_timeout=settings.database_command_timeout,
        )
        await db.connect()
        _db = db

    return _db


async def get_db() -> Database:
    """Get database instance (dependency injection).

    Auto-initializes if not already initialized.
    """
    global _db
    if _db is None:
        _db = await init_database()
    return _db
