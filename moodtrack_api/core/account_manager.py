"""Account manager: user-document operations that never call Last.fm."""

import logging
from typing import TYPE_CHECKING

from ..errors import mask_key, require
from ..telemetry import TelemetryEvents, track_event

if TYPE_CHECKING:
    from ..storage import Database

logger = logging.getLogger(__name__)


class AccountManager:
    """Reads and deletes stored account data keyed by session key."""

    def __init__(self, db: "Database"):
        """Initialize account manager.

        Args:
            db: Database instance
        """
        self.db = db

    async def get_stored_realname(self, session_key: str | None) -> str | None:
        """Read the real name saved by first-login enrichment."""
        require(session_key=session_key)
        return stored_realname(await self.db.get_user(session_key))

    async def delete_account(self, session_key: str | None) -> dict[str, int]:
        """Delete the user document and everything it owns."""
        require(session_key=session_key)

        counts = await self.db.delete_user(session_key)
        logger.info(f"Deleted account {mask_key(session_key)}: {counts}")
        track_event(TelemetryEvents.ACCOUNT_DELETED, counts)
        return counts


def stored_realname(user: dict | None) -> str | None:
    """``userInfo.realname`` from a user row, or None when absent or blank."""
    if not user:
        return None
    user_info = user.get("data", {}).get("userInfo")
    if not isinstance(user_info, dict):
        return None
    return user_info.get("realname") or None
