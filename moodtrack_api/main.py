"""Main FastAPI application for the MoodTrack service."""

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import (
    emotions_router,
    health_router,
    lastfm_router,
    playlists_router,
    users_router,
)
from .api.dependencies import close_lastfm_client
from .api.errors import moodtrack_error_handler, request_validation_handler
from .config import settings
from .errors import MoodtrackError
from .storage import init_database
from .telemetry import (
    TelemetryEvents,
    TelemetryMiddleware,
    flush_telemetry,
    initialize_telemetry,
    set_debug,
    track_event,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup and shutdown."""
    # Startup
    logger.info("Starting MoodTrack service...")
    logger.info(f"Service version: {app.version}")
    logger.info(f"Host: {settings.service_host}:{settings.service_port}")

    initialize_telemetry()
    set_debug(settings.log_level == "debug")
    logger.info("Telemetry initialized")

    db = await init_database()
    logger.info("Database initialized")

    if not (settings.lastfm_api_key and settings.lastfm_api_secret):
        logger.warning("Last.fm credentials are not set; Last.fm endpoints will answer 503")

    track_event(TelemetryEvents.APP_STARTED, {"version": app.version})
    logger.info("MoodTrack service started successfully")

    yield

    # Shutdown
    logger.info("Shutting down MoodTrack service...")
    await close_lastfm_client()

    track_event(TelemetryEvents.APP_STOPPED)
    flush_telemetry()
    logger.info("Telemetry flushed")

    await db.disconnect()
    logger.info("MoodTrack service stopped")


app = FastAPI(
    title="MoodTrack API",
    description="""
Backend for a music-emotion app built on Last.fm.

## Identity

Every operation except authentication takes the Last.fm `sessionKey` returned by
`POST /lastfm/auth`. The session key is also the key of the caller's user document.

## API Endpoints

### Last.fm
- `POST /lastfm/auth` - Create a mobile session
- `POST /lastfm/user-info` - Refresh username and real name
- `POST /lastfm/recent-tracks` - Recently scrobbled tracks
- `POST /lastfm/search` - Track search with album artwork

### Users
- `POST /users/first-login` - Store the real name on first login
- `POST /users/realname` - Stored real name
- `POST /users/delete` - Delete the account and everything it owns

### Emotions
- `POST /emotions/store` - Tag a track (one record per track)
- `POST /emotions/list` - Records, most recent first
- `POST /emotions/delete` - Delete one record
- `POST /emotions/delete-history` - Delete all records

### Playlists
- `POST /playlists/create` - Build a playlist from emotion groups
- `POST /playlists/list` - Playlist ids and names

## Errors

Failures answer `{"detail": {"code": ..., "message": ...}}` with a stable `code`.
""",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Telemetry middleware (first, to capture all requests)
app.add_middleware(TelemetryMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(MoodtrackError, moodtrack_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# Register routers
app.include_router(health_router)
app.include_router(lastfm_router)
app.include_router(users_router)
app.include_router(emotions_router)
app.include_router(playlists_router)


def main() -> None:
    """Main entry point for running the service."""
    import uvicorn

    uvicorn.run(
        "moodtrack_api.main:app",
        host=settings.service_host,
        port=settings.service_port,
        workers=settings.service_workers,
        log_level=settings.log_level,
        reload=False,
    )


if __name__ == "__main__":
    main()
