"""
User API endpoints.

Profile, preferences and read history for the authenticated user.
Every endpoint requires a valid bearer token.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_profile_service
from api.middleware.auth import get_current_user
from shared.models import Principal

from .exceptions import InvalidPreferenceError, UserNotFoundError
from .models import (
    HistoryEntryRequest,
    Preferences,
    PreferencesInput,
    PreferencesPatch,
    ProfileResponse,
    ProfileUpdate,
    ReadHistoryEntry,
)
from .service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    user: Principal = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """
    Get the current user's profile.

    Creates a minimal record on first access.
    """
    return await service.get_profile(user)


@router.post("/profile", response_model=ProfileResponse)
async def update_profile(
    update: ProfileUpdate,
    user: Principal = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Update display name and/or photo URL."""
    return await service.update_profile(user, update)


@router.get("/preferences", response_model=Preferences)
async def get_preferences(
    user: Principal = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> Preferences:
    return await service.get_preferences(user)


@router.post("/preferences", response_model=Preferences)
async def replace_preferences(
    body: PreferencesInput,
    user: Principal = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> Preferences:
    """
    Replace all preferences.

    Omitted fields are reset to their defaults.
    """
    return await service.replace_preferences(user, body)


@router.patch("/preferences", response_model=Preferences)
async def patch_preferences(
    patch: PreferencesPatch,
    user: Principal = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> Preferences:
    """
    Update only the supplied preference fields.

    The user record must already exist.
    """
    try:
        return await service.patch_preferences(user, patch)
    except InvalidPreferenceError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")


@router.get("/history", response_model=list[ReadHistoryEntry])
async def get_history(
    user: Principal = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> list[ReadHistoryEntry]:
    return await service.get_history(user)


@router.post("/history", response_model=list[ReadHistoryEntry])
async def add_history(
    body: HistoryEntryRequest,
    user: Principal = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> list[ReadHistoryEntry]:
    """Mark a digest as read and return the updated history."""
    return await service.add_history(user, body.digest_id)


@router.get("/debug")
async def debug_user(
    user: Principal = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> dict:
    """Report store reachability for the current user."""
    try:
        user_count = await service.count_users()
        store_status = "connected"
    except Exception as e:
        logger.error(f"User store check failed: {e}")
        user_count = None
        store_status = "error"

    return {
        "status": store_status,
        "userCount": user_count,
        "user": {"uid": user.id, "email": user.email},
    }
