# =============================================================================
# core/services/research_service.py - Research Sharing
# =============================================================================
# Members share research posts and ask authors to collaborate.
#
# Rules:
# - the board lists active posts only, newest first
# - authors can't send a collaboration request to themselves
# - requests go only to active posts and need a message
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import same_user
from core.models.research import (
    CollaborationRequestCreate,
    CollaborationStatus,
    ResearchCreate,
    ResearchStatus,
)
from app.config import settings
from app.exceptions import (
    ForbiddenError,
    InvalidStateError,
    PersistenceError,
    ResearchNotFoundError,
    ValidationError,
    validation_error_from_pydantic,
)

logger = logging.getLogger(__name__)


class ResearchService:
    """Service for research posts and collaboration requests."""

    @staticmethod
    def list_research(
        field: str | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        List active research posts, newest first.

        Args:
            field: Exact discipline to filter by
            search: Case-insensitive text matched against title and abstract

        Raises:
            PersistenceError: If the query fails
        """
        try:
            posts = SupabaseClient.list_research(
                status=ResearchStatus.ACTIVE.value,
                field=field or None,
                limit=settings.RESEARCH_LIST_LIMIT,
            )
        except SupabaseClientError as e:
            logger.error(f"Failed to list research: {e}")
            raise PersistenceError(e.message, details=e.details)

        needle = (search or "").strip().lower()
        if not needle:
            return posts

        return [
            post for post in posts
            if needle in (post.get("title") or "").lower()
            or needle in (post.get("abstract") or "").lower()
        ]

    @staticmethod
    def create_research(
        user_id: str | UUID,
        title: str,
        abstract: str,
        field: str,
        tags: list[str] | str | None = None,
        document_url: str | None = None,
    ) -> dict[str, Any]:
        """
        Share a research post as the given user.

        Returns:
            Created research dict (status "active")

        Raises:
            ValidationError: If a field is missing or invalid (nothing written)
            PersistenceError: If the insert fails
        """
        if not user_id:
            raise ValidationError("user_id is required", field="user_id")

        try:
            research_in = ResearchCreate(
                title=title,
                abstract=abstract,
                field=field,
                tags=tags,
                document_url=document_url,
            )
        except PydanticValidationError as e:
            raise validation_error_from_pydantic(e)

        data = {
            **research_in.model_dump(),
            "user_id": str(user_id),
            "status": ResearchStatus.ACTIVE.value,
        }

        try:
            research = SupabaseClient.insert_research(data)
        except SupabaseClientError as e:
            logger.error(f"Failed to create research: {e}")
            raise PersistenceError(e.message, details=e.details)

        logger.info(f"Created research {research['id']} by user {user_id}")
        return research

    @staticmethod
    def get_research(research_id: str | UUID) -> dict[str, Any]:
        """
        Get a research post by ID.

        Raises:
            ResearchNotFoundError: If the post doesn't exist
            PersistenceError: If the lookup fails
        """
        try:
            research = SupabaseClient.fetch_research(research_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to fetch research {research_id}: {e}")
            raise PersistenceError(e.message, details=e.details)

        if not research:
            raise ResearchNotFoundError(str(research_id))

        return research

    @staticmethod
    def request_collaboration(
        research_id: str | UUID,
        requester_id: str | UUID,
        message: str,
    ) -> dict[str, Any]:
        """
        Send the author of a research post a collaboration request.

        Raises:
            ResearchNotFoundError: If the post doesn't exist
            ForbiddenError: If the requester is the author
            InvalidStateError: If the post is no longer active
            ValidationError: If the message is empty
            PersistenceError: If the insert fails
        """
        try:
            request_in = CollaborationRequestCreate(message=message)
        except PydanticValidationError as e:
            raise validation_error_from_pydantic(e)

        research = ResearchService.get_research(research_id)
        research_id_str = str(research["id"])

        if same_user(research.get("user_id"), requester_id):
            logger.warning(f"User {requester_id} tried to request collaboration on own research {research_id_str}")
            raise ForbiddenError(
                "You cannot request collaboration on your own research",
                details={"research_id": research_id_str},
            )

        if research.get("status") != ResearchStatus.ACTIVE.value:
            raise InvalidStateError(
                "Research is not open for collaboration",
                details={"research_id": research_id_str, "status": research.get("status")},
            )

        data = {
            "research_id": research_id_str,
            "requester_id": str(requester_id),
            "message": request_in.message,
            "status": CollaborationStatus.PENDING.value,
        }

        try:
            request = SupabaseClient.insert_collaboration_request(data)
        except SupabaseClientError as e:
            logger.error(f"Failed to send collaboration request: {e}")
            raise PersistenceError(e.message, details=e.details)

        logger.info(f"User {requester_id} requested collaboration on research {research_id_str}")
        return request
