"""Emotion record endpoints."""

import logging

from fastapi import APIRouter, Depends

from ..core import EmotionManager
from ..errors import mask_key
from ..models import (
    DeleteEmotionRequest,
    DeleteHistoryResponse,
    EmotionListResponse,
    SessionKeyRequest,
    StoreEmotionRequest,
    SuccessResponse,
)
from ..storage import Database, get_db
from .errors import ERROR_RESPONSES, operation_failed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/emotions", tags=["emotions"], responses=ERROR_RESPONSES)


async def get_emotion_manager(db: Database = Depends(get_db)) -> EmotionManager:
    """Dependency to get emotion manager."""
    return EmotionManager(db)


@router.post(
    "/store",
    response_model=SuccessResponse,
    summary="Tag a track with an emotion",
    description="""
Store the caller's emotion for a track. A session holds one record per `trackId`:
tagging the same track again updates that record in place.

Required: `sessionKey`, `trackId`, `trackTitle`, `artist`, `emotion`.
Optional: `group`, `broadgroup`.
""",
)
async def store_emotion(
    request: StoreEmotionRequest,
    manager: EmotionManager = Depends(get_emotion_manager),
) -> SuccessResponse:
    """Insert or update the emotion record for a track."""
    try:
        await manager.tag_track(
            session_key=request.session_key,
            track_id=request.track_id,
            track_title=request.track_title,
            artist=request.artist,
            emotion=request.emotion,
            group=request.group,
            broadgroup=request.broadgroup,
        )
        return SuccessResponse()
    except Exception as e:
        raise operation_failed(
            "store_emotion",
            "Failed to store emotion",
            e,
            session=mask_key(request.session_key),
            track_id=request.track_id,
        ) from e


@router.post("/list", response_model=EmotionListResponse)
async def get_emotions(
    request: SessionKeyRequest,
    manager: EmotionManager = Depends(get_emotion_manager),
) -> EmotionListResponse:
    """List emotion records, most recent first."""
    try:
        emotions = await manager.list_emotions(request.session_key)
        return EmotionListResponse(emotions=emotions)
    except Exception as e:
        raise operation_failed(
            "get_emotions",
            "Failed to fetch emotions",
            e,
            session=mask_key(request.session_key),
        ) from e


@router.post("/delete", response_model=SuccessResponse)
async def delete_emotion(
    request: DeleteEmotionRequest,
    manager: EmotionManager = Depends(get_emotion_manager),
) -> SuccessResponse:
    """Delete one emotion record; deleting an unknown id succeeds."""
    try:
        await manager.delete_emotion(request.session_key, request.emotion_id)
        return SuccessResponse()
    except Exception as e:
        raise operation_failed(
            "delete_emotion",
            "Failed to delete emotion",
            e,
            session=mask_key(request.session_key),
            emotion_id=request.emotion_id,
        ) from e


@router.post("/delete-history", response_model=DeleteHistoryResponse)
async def delete_emotion_history(
    request: SessionKeyRequest,
    manager: EmotionManager = Depends(get_emotion_manager),
) -> DeleteHistoryResponse:
    """Delete every emotion record of the session in one transaction."""
    try:
        deleted = await manager.delete_history(request.session_key)
        return DeleteHistoryResponse(deleted=deleted)
    except Exception as e:
        raise operation_failed(
            "delete_emotion_history",
            "Failed to delete emotion history",
            e,
            session=mask_key(request.session_key),
        ) from e
