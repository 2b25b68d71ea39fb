# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized methods for:
# - Tasks (task board, task detail, conditional status transitions)
# - Bids (per-task listing, insert, conditional status updates)
# - Profiles (display names and profile editing)
# - Research (shared research posts and collaboration requests)
#
# Every failure is raised as SupabaseClientError with a machine-readable code.
# The service layer decides what a failure means for the workflow.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   task = SupabaseClient.fetch_task(task_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import to_db_value, utcnow

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code for "no rows" on .single()
NO_ROWS_CODE = "PGRST116"

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION_CODE = "23505"

# Postgres SQLSTATE for invalid_text_representation (e.g. "abc" as a uuid)
INVALID_TEXT_CODE = "22P02"

TASK_SELECT = "*, client:profiles!tasks_client_id_fkey(full_name, email)"
BID_SELECT = "*, freelancer:profiles!bids_freelancer_id_fkey(full_name)"
RESEARCH_SELECT = "*, author:profiles!research_user_id_fkey(full_name, institution, email)"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def _is_no_rows(error: Exception) -> bool:
    """True for "no row matched" and for ids that can't name any row."""
    code = getattr(error, "code", None)
    if code in (NO_ROWS_CODE, INVALID_TEXT_CODE):
        return True
    return NO_ROWS_CODE in str(error)


def _is_unique_violation(error: Exception) -> bool:
    return getattr(error, "code", None) == UNIQUE_VIOLATION_CODE


def _prepare(data: dict[str, Any]) -> dict[str, Any]:
    return {key: to_db_value(value) for key, value in data.items()}


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        # Newest open tasks for the board
        tasks = SupabaseClient.list_tasks(status="open")

        # Move a task to in_progress only if nobody else did first
        rows = SupabaseClient.update_task(
            task_id,
            {"status": "in_progress", "freelancer_id": freelancer_id},
            expected_status="open",
        )
        won_race = bool(rows)
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Authorization is checked explicitly in the service layer instead.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_task(cls, task_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a task by ID, joined with the client's name and email.

        Returns:
            Task dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        task_id_str = cls._normalize_uuid(task_id)

        try:
            response = (
                client.table("tasks")
                .select(TASK_SELECT)
                .eq("id", task_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if _is_no_rows(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch task: {e}",
                code="FETCH_TASK_FAILED",
                suggestion="Check that the task_id exists",
                details={"task_id": task_id_str}
            )

    @classmethod
    def list_tasks(
        cls,
        status: str | None = None,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """
        List tasks newest first.

        Args:
            status: Exact status to filter by, or None for every status
            limit: Maximum number of rows

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = client.table("tasks").select(TASK_SELECT)
            if status:
                query = query.eq("status", status)
            response = query.order("created_at", desc=True).limit(limit).execute()

            tasks = response.data or []
            logger.debug(f"Fetched {len(tasks)} tasks (status={status or 'all'})")
            return tasks

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list tasks: {e}",
                code="LIST_TASKS_FAILED",
                details={"status": status}
            )

    @classmethod
    def insert_task(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a new task row.

        Returns:
            Inserted task dict with generated id and timestamps

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = client.table("tasks").insert(_prepare(data)).execute()

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert task: {e}",
                code="INSERT_TASK_FAILED",
                details={"client_id": str(data.get("client_id"))}
            )

    @classmethod
    def update_task(
        cls,
        task_id: str | UUID,
        updates: dict[str, Any],
        expected_status: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Update a task by ID.

        When expected_status is given the update is conditional: it only
        applies while the stored status still equals expected_status.

        Returns:
            The updated rows (empty if the condition matched nothing)

        Raises:
            SupabaseClientError: If the update fails
        """
        client = cls.get_client()
        task_id_str = cls._normalize_uuid(task_id)
        data = _prepare({**updates, "updated_at": utcnow()})

        try:
            query = client.table("tasks").update(data).eq("id", task_id_str)
            if expected_status:
                query = query.eq("status", expected_status)
            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update task: {e}",
                code="UPDATE_TASK_FAILED",
                details={"task_id": task_id_str, "expected_status": expected_status}
            )

    # -------------------------------------------------------------------------
    # Bids
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_bid(cls, bid_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a bid by ID, joined with the bidder's name.

        Returns:
            Bid dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        bid_id_str = cls._normalize_uuid(bid_id)

        try:
            response = (
                client.table("bids")
                .select(BID_SELECT)
                .eq("id", bid_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if _is_no_rows(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch bid: {e}",
                code="FETCH_BID_FAILED",
                details={"bid_id": bid_id_str}
            )

    @classmethod
    def list_bids(cls, task_id: str | UUID) -> list[dict[str, Any]]:
        """
        List every bid on a task, newest first.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        task_id_str = cls._normalize_uuid(task_id)

        try:
            response = (
                client.table("bids")
                .select(BID_SELECT)
                .eq("task_id", task_id_str)
                .order("created_at", desc=True)
                .execute()
            )

            bids = response.data or []
            logger.debug(f"Fetched {len(bids)} bids for task {task_id_str}")
            return bids

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list bids: {e}",
                code="LIST_BIDS_FAILED",
                details={"task_id": task_id_str}
            )

    @classmethod
    def find_bid(
        cls,
        task_id: str | UUID,
        freelancer_id: str | UUID,
    ) -> dict[str, Any] | None:
        """
        Find the bid a user placed on a task, if any.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        task_id_str = cls._normalize_uuid(task_id)
        freelancer_id_str = cls._normalize_uuid(freelancer_id)

        try:
            response = (
                client.table("bids")
                .select("id, status")
                .eq("task_id", task_id_str)
                .eq("freelancer_id", freelancer_id_str)
                .limit(1)
                .execute()
            )

            rows = response.data or []
            return rows[0] if rows else None

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to look up existing bid: {e}",
                code="FIND_BID_FAILED",
                details={"task_id": task_id_str, "freelancer_id": freelancer_id_str}
            )

    @classmethod
    def insert_bid(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a new bid row.

        Raises:
            SupabaseClientError: If insert fails. A duplicate (task_id,
                freelancer_id) pair raises with code UNIQUE_VIOLATION.
        """
        client = cls.get_client()

        try:
            response = client.table("bids").insert(_prepare(data)).execute()

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert bid: {e}",
                code="UNIQUE_VIOLATION" if _is_unique_violation(e) else "INSERT_BID_FAILED",
                details={
                    "task_id": str(data.get("task_id")),
                    "freelancer_id": str(data.get("freelancer_id")),
                }
            )

    @classmethod
    def update_bid(
        cls,
        bid_id: str | UUID,
        updates: dict[str, Any],
        expected_status: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Update a single bid, optionally only while it has expected_status.

        Returns:
            The updated rows (empty if the condition matched nothing)

        Raises:
            SupabaseClientError: If the update fails
        """
        client = cls.get_client()
        bid_id_str = cls._normalize_uuid(bid_id)
        data = _prepare({**updates, "updated_at": utcnow()})

        try:
            query = client.table("bids").update(data).eq("id", bid_id_str)
            if expected_status:
                query = query.eq("status", expected_status)
            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update bid: {e}",
                code="UPDATE_BID_FAILED",
                details={"bid_id": bid_id_str}
            )

    @classmethod
    def update_task_bids(
        cls,
        task_id: str | UUID,
        updates: dict[str, Any],
        exclude_bid_id: str | UUID | None = None,
    ) -> list[dict[str, Any]]:
        """
        Update every bid on a task, optionally skipping one bid.

        Raises:
            SupabaseClientError: If the update fails
        """
        client = cls.get_client()
        task_id_str = cls._normalize_uuid(task_id)
        data = _prepare({**updates, "updated_at": utcnow()})

        try:
            query = client.table("bids").update(data).eq("task_id", task_id_str)
            if exclude_bid_id:
                query = query.neq("id", cls._normalize_uuid(exclude_bid_id))
            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update bids for task: {e}",
                code="UPDATE_TASK_BIDS_FAILED",
                details={"task_id": task_id_str}
            )

    @classmethod
    def delete_bid(
        cls,
        bid_id: str | UUID,
        expected_status: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Delete a bid by ID, optionally only while it has expected_status.

        Returns:
            The deleted rows (empty if the condition matched nothing)

        Raises:
            SupabaseClientError: If the delete fails
        """
        client = cls.get_client()
        bid_id_str = cls._normalize_uuid(bid_id)

        try:
            query = client.table("bids").delete().eq("id", bid_id_str)
            if expected_status:
                query = query.eq("status", expected_status)
            response = query.execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete bid: {e}",
                code="DELETE_BID_FAILED",
                details={"bid_id": bid_id_str, "expected_status": expected_status}
            )

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a profile by user ID.

        Returns:
            Profile dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("profiles")
                .select("*")
                .eq("id", user_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if _is_no_rows(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch profile: {e}",
                code="FETCH_PROFILE_FAILED",
                details={"user_id": user_id_str}
            )

    @classmethod
    def update_profile(
        cls,
        user_id: str | UUID,
        updates: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """
        Update a profile by user ID.

        Raises:
            SupabaseClientError: If the update fails
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)
        data = _prepare({**updates, "updated_at": utcnow()})

        try:
            response = (
                client.table("profiles")
                .update(data)
                .eq("id", user_id_str)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update profile: {e}",
                code="UPDATE_PROFILE_FAILED",
                details={"user_id": user_id_str}
            )

    # -------------------------------------------------------------------------
    # Research
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_research(cls, research_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a research post by ID, joined with the author's profile.

        Returns:
            Research dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        research_id_str = cls._normalize_uuid(research_id)

        try:
            response = (
                client.table("research")
                .select(RESEARCH_SELECT)
                .eq("id", research_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if _is_no_rows(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch research: {e}",
                code="FETCH_RESEARCH_FAILED",
                details={"research_id": research_id_str}
            )

    @classmethod
    def list_research(
        cls,
        status: str | None = None,
        field: str | None = None,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """
        List research posts newest first.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()

        try:
            query = client.table("research").select(RESEARCH_SELECT)
            if status:
                query = query.eq("status", status)
            if field:
                query = query.eq("field", field)
            response = query.order("created_at", desc=True).limit(limit).execute()

            posts = response.data or []
            logger.debug(f"Fetched {len(posts)} research posts (field={field or 'any'})")
            return posts

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list research: {e}",
                code="LIST_RESEARCH_FAILED",
                details={"status": status, "field": field}
            )

    @classmethod
    def insert_research(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a new research post.

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = client.table("research").insert(_prepare(data)).execute()

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert research: {e}",
                code="INSERT_RESEARCH_FAILED",
                details={"user_id": str(data.get("user_id"))}
            )

    @classmethod
    def insert_collaboration_request(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a row into research_collaborations.

        Raises:
            SupabaseClientError: If insert fails
        """
        client = cls.get_client()

        try:
            response = client.table("research_collaborations").insert(_prepare(data)).execute()

            if response.data:
                return response.data[0]
            raise SupabaseClientError(
                message="Insert returned no data",
                code="INSERT_NO_DATA"
            )

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert collaboration request: {e}",
                code="INSERT_COLLABORATION_FAILED",
                details={
                    "research_id": str(data.get("research_id")),
                    "requester_id": str(data.get("requester_id")),
                }
            )
