# =============================================================================
# app/routers/profiles.py - Profile Endpoints
# =============================================================================
# Users read any member's public profile and edit only their own.
# =============================================================================

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path

from app.auth import get_current_user, AuthUser
from core.models.profile import ProfileResponse
from core.services.profile_service import ProfileService

router = APIRouter()


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(user: AuthUser = Depends(get_current_user)):
    """Get the authenticated user's profile."""
    return ProfileService.get_profile(user.id)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    updates: Annotated[dict[str, Any], Body(example={"full_name": "Ada L.", "major": "Mathematics"})],
    user: AuthUser = Depends(get_current_user),
):
    """
    Edit your own profile.

    Only the fields sent are changed. Unknown fields are rejected.
    """
    return ProfileService.update_profile(user.id, caller_id=user.id, updates=updates)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: Annotated[UUID, Path(description="User UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Get another member's profile."""
    return ProfileService.get_profile(user_id)
