# =============================================================================
# core/services/profile_service.py - Profile Business Logic
# =============================================================================
# Reads profiles for display and lets users edit their own.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import same_user
from core.models.profile import ProfileUpdate
from app.exceptions import (
    ForbiddenError,
    PersistenceError,
    ProfileNotFoundError,
    ValidationError,
    validation_error_from_pydantic,
)

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for profile operations."""

    @staticmethod
    def get_profile(user_id: str | UUID) -> dict[str, Any]:
        """
        Get a profile by user ID.

        Raises:
            ProfileNotFoundError: If the user has no profile
            PersistenceError: If the lookup fails
        """
        try:
            profile = SupabaseClient.fetch_profile(user_id)
        except SupabaseClientError as e:
            raise PersistenceError(e.message, details=e.details)

        if not profile:
            raise ProfileNotFoundError(str(user_id))

        return profile

    @staticmethod
    def update_profile(
        user_id: str | UUID,
        caller_id: str | UUID,
        updates: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Update editable profile fields.

        Args:
            user_id: Profile being edited
            caller_id: Authenticated user; must be the same user
            updates: Field -> new value (see ProfileUpdate)

        Raises:
            ForbiddenError: If caller edits someone else's profile
            ValidationError: If fields are unknown/invalid or nothing changes
            ProfileNotFoundError: If the profile doesn't exist
            PersistenceError: If the update fails
        """
        if not same_user(user_id, caller_id):
            raise ForbiddenError(
                "You can only edit your own profile",
                details={"user_id": str(user_id)},
            )

        try:
            profile_in = ProfileUpdate(**updates)
        except PydanticValidationError as e:
            raise validation_error_from_pydantic(e)

        changes = profile_in.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")

        try:
            rows = SupabaseClient.update_profile(user_id, changes)
        except SupabaseClientError as e:
            logger.error(f"Failed to update profile {user_id}: {e}")
            raise PersistenceError(e.message, details=e.details)

        if not rows:
            raise ProfileNotFoundError(str(user_id))

        logger.info(f"Updated profile {user_id}: {sorted(changes)}")
        return rows[0]
