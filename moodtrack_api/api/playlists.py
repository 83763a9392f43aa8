"""Playlist endpoints."""

import logging

from fastapi import APIRouter, Depends

from ..core import PlaylistBuilder
from ..errors import mask_key
from ..models import (
    CreatePlaylistRequest,
    PlaylistCreateResponse,
    PlaylistListResponse,
    SessionKeyRequest,
)
from ..storage import Database, get_db
from .errors import ERROR_RESPONSES, operation_failed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/playlists", tags=["playlists"], responses=ERROR_RESPONSES)


async def get_playlist_builder(db: Database = Depends(get_db)) -> PlaylistBuilder:
    """Dependency to get playlist builder."""
    return PlaylistBuilder(db)


@router.post(
    "/create",
    response_model=PlaylistCreateResponse,
    status_code=201,
    summary="Build a playlist from tagged tracks",
    description="""
Collect every emotion record whose `group` is one of `emotions` into a new playlist.
The songs are copied at creation time. Answers 404 with code `no_matching_records`
when nothing matches.

Returns the `playlistId` generated by the store.
""",
)
async def create_playlist(
    request: CreatePlaylistRequest,
    builder: PlaylistBuilder = Depends(get_playlist_builder),
) -> PlaylistCreateResponse:
    """Build and store a playlist."""
    try:
        playlist = await builder.build_playlist(
            request.session_key, request.group, request.name, request.emotions
        )
        return PlaylistCreateResponse(playlist_id=playlist.id, song_count=len(playlist.songs))
    except Exception as e:
        raise operation_failed(
            "create_playlist",
            "Failed to create the playlist",
            e,
            session=mask_key(request.session_key),
            group=request.group,
        ) from e


@router.post("/list", response_model=PlaylistListResponse)
async def fetch_playlist_names(
    request: SessionKeyRequest,
    builder: PlaylistBuilder = Depends(get_playlist_builder),
) -> PlaylistListResponse:
    """List playlist ids and names; an empty list is a valid answer."""
    try:
        playlists = await builder.list_playlists(request.session_key)
        return PlaylistListResponse(playlists=playlists)
    except Exception as e:
        raise operation_failed(
            "fetch_playlist_names",
            "Failed to fetch playlist names",
            e,
            session=mask_key(request.session_key),
        ) from e
