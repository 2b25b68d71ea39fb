# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Signup and login happen in the browser against Supabase Auth. These
# routes only report who the bearer token belongs to.
# =============================================================================

import logging
from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the current user with their profile fields.

    Raises:
        401: If not authenticated
    """
    profile = None
    try:
        profile = SupabaseClient.fetch_profile(user.id)
    except SupabaseClientError as e:
        logger.warning(f"Could not fetch profile for {user.id}: {e}")

    if not profile:
        # Signed up but the profile trigger hasn't written the row yet
        return UserResponse(id=user.id, email=user.email)

    return UserResponse(
        id=user.id,
        email=profile.get("email") or user.email,
        full_name=profile.get("full_name"),
        avatar_url=profile.get("avatar_url"),
        institution=profile.get("institution"),
        created_at=profile.get("created_at"),
    )


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
