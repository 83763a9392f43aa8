"""User document endpoints: first-login enrichment, stored real name, account deletion."""

import logging

from fastapi import APIRouter, Depends

from ..core import AccountManager, SessionManager
from ..errors import mask_key
from ..models import (
    FirstLoginRequest,
    ProfileResponse,
    RealnameResponse,
    SessionKeyRequest,
    SuccessResponse,
)
from ..storage import Database, get_db
from .errors import ERROR_RESPONSES, operation_failed
from .lastfm import get_session_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"], responses=ERROR_RESPONSES)


async def get_account_manager(db: Database = Depends(get_db)) -> AccountManager:
    """Dependency to get account manager; needs only the store."""
    return AccountManager(db)


@router.post("/first-login", response_model=ProfileResponse)
async def first_login(
    request: FirstLoginRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> ProfileResponse:
    """Store the Last.fm real name on the ``uid`` document unless it is already there."""
    try:
        status = await manager.ensure_profile(request.session_key, request.uid)
    except Exception as e:
        raise operation_failed(
            "first_login",
            "Failed to fetch real name",
            e,
            session=mask_key(request.session_key),
            uid=mask_key(request.uid),
        ) from e

    if status.already_exists:
        return ProfileResponse(
            already_exists=True, realname=status.realname, message="User info already exists"
        )
    return ProfileResponse(already_exists=False, realname=status.realname)


@router.post("/realname", response_model=RealnameResponse)
async def fetch_realname(
    request: SessionKeyRequest,
    manager: AccountManager = Depends(get_account_manager),
) -> RealnameResponse:
    """Return the stored real name. An absent name is a valid answer, not an error."""
    try:
        realname = await manager.get_stored_realname(request.session_key)
    except Exception as e:
        raise operation_failed(
            "fetch_realname",
            "Failed to fetch real name",
            e,
            session=mask_key(request.session_key),
        ) from e

    if realname is None:
        return RealnameResponse(found=False, message="User info not found")
    return RealnameResponse(found=True, realname=realname)


@router.post("/delete", response_model=SuccessResponse)
async def delete_account(
    request: SessionKeyRequest,
    manager: AccountManager = Depends(get_account_manager),
) -> SuccessResponse:
    """Delete the account together with its emotion records and playlists."""
    try:
        await manager.delete_account(request.session_key)
        return SuccessResponse()
    except Exception as e:
        raise operation_failed(
            "delete_account",
            "Failed to delete account",
            e,
            session=mask_key(request.session_key),
        ) from e
