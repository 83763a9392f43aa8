"""Session manager: Last.fm authentication and profile enrichment."""

import logging
from typing import TYPE_CHECKING

from ..errors import mask_key, require
from ..models import ProfileStatus, UserInfo, UserSession
from ..telemetry import TelemetryEvents, track_event
from .account_manager import stored_realname
from .lastfm_client import LastFMClient

if TYPE_CHECKING:
    from ..storage import Database

logger = logging.getLogger(__name__)


class SessionManager:
    """Creates Last.fm sessions and keeps the per-user document in sync.

    A session key, once issued by Last.fm, is the only credential the other
    operations accept. It is not re-validated upstream on each call.
    """

    def __init__(self, db: "Database", lastfm: LastFMClient):
        """Initialize session manager.

        Args:
            db: Database instance
            lastfm: Last.fm client used for the handshake and profile lookups
        """
        self.db = db
        self.lastfm = lastfm

    async def authenticate(self, username: str | None, password: str | None) -> UserSession:
        """Run the mobile session handshake and record the login.

        Raises:
            InvalidArgumentError: If username or password is missing
            UpstreamAuthFailedError: If Last.fm rejects the credentials
            UpstreamProtocolError: If the response carries no session key
            StoreError: If the login could not be recorded
        """
        require(username=username, password=password)

        session = await self.lastfm.get_mobile_session(username, password)

        # Only answer once the user document is written
        await self.db.upsert_user(session.session_key, {"username": session.username})

        logger.info(f"Authenticated {session.username} ({mask_key(session.session_key)})")
        track_event(TelemetryEvents.USER_AUTHENTICATED, {"username": session.username})
        return session

    async def fetch_user_info(self, session_key: str | None) -> UserInfo:
        """Refresh the profile from Last.fm and store username and real name."""
        require(session_key=session_key)

        info = await self.lastfm.get_user_info(session_key)
        fields = {"realname": info.realname}
        if info.username:
            fields["username"] = info.username
        await self.db.upsert_user(session_key, fields)

        logger.info(f"Refreshed user info for {mask_key(session_key)}")
        track_event(
            TelemetryEvents.USER_INFO_REFRESHED, {"has_realname": info.realname is not None}
        )
        return info

    async def ensure_profile(self, session_key: str | None, uid: str | None) -> ProfileStatus:
        """Populate ``userInfo`` on the ``uid`` document on first login.

        The lookup and the write target the ``uid`` document while Last.fm is called
        with ``session_key``; the two are allowed to differ.
        """
        require(session_key=session_key, uid=uid)

        user = await self.db.get_user(uid)
        stored = stored_realname(user)
        if stored:
            logger.debug(f"Profile already enriched for {mask_key(uid)}")
            return ProfileStatus(already_exists=True, realname=stored)

        info = await self.fetch_user_info(session_key)
        await self.db.merge_user_info(uid, info.realname)

        logger.info(f"Enriched profile for {mask_key(uid)}")
        track_event(TelemetryEvents.PROFILE_ENRICHED, {"has_realname": info.realname is not None})
        return ProfileStatus(already_exists=False, realname=info.realname)
