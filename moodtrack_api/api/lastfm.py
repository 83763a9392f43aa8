"""Last.fm pass-through endpoints: authentication, profile and tracks."""

import logging

from fastapi import APIRouter, Depends

from ..core import LastFMClient, SessionManager, TrackCatalog
from ..errors import mask_key
from ..models import (
    AuthRequest,
    RecentTracksRequest,
    RecentTracksResponse,
    SearchRequest,
    SessionKeyRequest,
    TrackSearchResult,
    UserInfo,
    UserSession,
)
from ..storage import Database, get_db
from .dependencies import get_lastfm_client
from .errors import ERROR_RESPONSES, operation_failed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lastfm", tags=["lastfm"], responses=ERROR_RESPONSES)


async def get_session_manager(
    db: Database = Depends(get_db),
    lastfm: LastFMClient = Depends(get_lastfm_client),
) -> SessionManager:
    """Dependency to get session manager."""
    return SessionManager(db, lastfm)


async def get_track_catalog(lastfm: LastFMClient = Depends(get_lastfm_client)) -> TrackCatalog:
    """Dependency to get track catalog."""
    return TrackCatalog(lastfm)


@router.post(
    "/auth",
    response_model=UserSession,
    summary="Create a Last.fm mobile session",
    description="""
Exchange Last.fm credentials for a session key (auth.getMobileSession).

The returned `sessionKey` is the credential for every other endpoint. The login is
recorded on the user document keyed by that session key before the response is sent.
""",
)
async def lastfm_auth(
    request: AuthRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> UserSession:
    """Authenticate against Last.fm."""
    try:
        return await manager.authenticate(request.username, request.password)
    except Exception as e:
        raise operation_failed(
            "lastfm_auth", "Authentication failed", e, username=request.username
        ) from e


@router.post("/user-info", response_model=UserInfo)
async def lastfm_get_user_info(
    request: SessionKeyRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> UserInfo:
    """Refresh username and real name from Last.fm."""
    try:
        return await manager.fetch_user_info(request.session_key)
    except Exception as e:
        raise operation_failed(
            "lastfm_get_user_info",
            "Failed to fetch user info",
            e,
            session=mask_key(request.session_key),
        ) from e


@router.post("/recent-tracks", response_model=RecentTracksResponse)
async def lastfm_get_recent_tracks(
    request: RecentTracksRequest,
    catalog: TrackCatalog = Depends(get_track_catalog),
) -> RecentTracksResponse:
    """Return a page of recently scrobbled tracks as Last.fm sends them."""
    try:
        recent = await catalog.recent_tracks(
            request.session_key, page=request.page, limit=request.limit
        )
        return RecentTracksResponse(recenttracks=recent)
    except Exception as e:
        raise operation_failed(
            "lastfm_get_recent_tracks",
            "Failed to fetch recent tracks",
            e,
            session=mask_key(request.session_key),
        ) from e


@router.post(
    "/search",
    response_model=TrackSearchResult,
    summary="Search tracks",
    description="""
Search Last.fm tracks by title. Each match is looked up with track.getInfo for album
artwork; the `enrichment` field reports `ok`, `no_artwork` or `unavailable` per track.
A failed lookup never fails the search.
""",
)
async def lastfm_search_tracks(
    request: SearchRequest,
    catalog: TrackCatalog = Depends(get_track_catalog),
) -> TrackSearchResult:
    """Search tracks with artwork enrichment."""
    try:
        return await catalog.search(request.query)
    except Exception as e:
        raise operation_failed("lastfm_search_tracks", "Failed to search tracks", e) from e
