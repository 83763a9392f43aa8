"""API endpoints for the MoodTrack service."""

from .emotions import router as emotions_router
from .health import router as health_router
from .lastfm import router as lastfm_router
from .playlists import router as playlists_router
from .users import router as users_router

__all__ = [
    "lastfm_router",
    "users_router",
    "emotions_router",
    "playlists_router",
    "health_router",
]
