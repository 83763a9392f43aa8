"""Health check and version endpoints."""

import logging
import time
from typing import Any

from fastapi import APIRouter, Depends

from .. import __version__
from ..config import settings
from ..models import HealthResponse, VersionResponse
from ..storage import Database, get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

# Track service start time
_start_time = time.time()


def format_uptime(seconds_total: float) -> str:
    """Render an uptime in seconds as days, hours, minutes and seconds."""
    days, seconds_remaining = divmod(int(seconds_total), 86400)
    hours, seconds_remaining = divmod(seconds_remaining, 3600)
    minutes, seconds = divmod(seconds_remaining, 60)
    return f"Days: {days}, Hours: {hours}, Minutes: {minutes}, Seconds: {seconds}"


@router.get("/health", response_model=HealthResponse)
async def health_check(db: Database = Depends(get_db)) -> HealthResponse:
    """Health check endpoint."""
    db_connected = False
    try:
        db_connected = await db.ping()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")

    try:
        settings.get_lastfm_credentials()
        lastfm_configured = True
    except RuntimeError:
        lastfm_configured = False

    return HealthResponse(
        status="healthy" if db_connected and lastfm_configured else "degraded",
        version=__version__,
        uptime=format_uptime(time.time() - _start_time),
        database_connected=db_connected,
        lastfm_configured=lastfm_configured,
    )


@router.get("/version", response_model=VersionResponse)
async def get_version() -> VersionResponse:
    """Get version information."""
    return VersionResponse(service_version=__version__, lastfm_api_url=settings.lastfm_api_url)


@router.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with service information."""
    return {
        "service": "MoodTrack API",
        "version": __version__,
        "description": "Emotion tagging and playlists on top of Last.fm",
        "docs": "/docs",
        "health": "/health",
    }
