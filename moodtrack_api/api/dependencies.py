"""Shared FastAPI dependencies."""

import logging

from fastapi import HTTPException

from ..config import settings
from ..core import LastFMClient
from ..models import ErrorDetail

logger = logging.getLogger(__name__)

# Global Last.fm client, one connection pool per process
_lastfm: LastFMClient | None = None


def get_lastfm_client() -> LastFMClient:
    """Get the Last.fm client configured from settings (dependency injection)."""
    global _lastfm
    if _lastfm is None:
        try:
            api_key, api_secret = settings.get_lastfm_credentials()
        except RuntimeError as e:
            logger.error(f"Last.fm client unavailable: {e}")
            raise HTTPException(
                status_code=503,
                detail=ErrorDetail(
                    code="not_configured", message="Last.fm service unavailable"
                ).model_dump(),
            ) from e
        _lastfm = LastFMClient(
            api_key=api_key,
            api_secret=api_secret,
            base_url=settings.lastfm_api_url,
            timeout=settings.lastfm_timeout_seconds,
            enrichment_concurrency=settings.lastfm_enrichment_concurrency,
        )
    return _lastfm


async def close_lastfm_client() -> None:
    """Close the global Last.fm client if one was created."""
    global _lastfm
    if _lastfm is not None:
        await _lastfm.close()
        _lastfm = None
