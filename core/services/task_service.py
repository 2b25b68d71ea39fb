# =============================================================================
# core/services/task_service.py - Task Lifecycle
# =============================================================================
# Creates tasks, reads them back for the board and detail pages, and owns
# the conditional open -> in_progress transition used when a bid is accepted.
# =============================================================================

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.models.task import TaskCreate, TaskStatus
from app.config import settings
from app.exceptions import (
    InvalidStateError,
    PersistenceError,
    TaskNotFoundError,
    ValidationError,
    validation_error_from_pydantic,
)

logger = logging.getLogger(__name__)

ALL_STATUSES = "all"


class TaskService:
    """
    Service for task lifecycle operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create_task(
        title: str,
        description: str,
        budget: Decimal | float | str,
        deadline: datetime | str,
        client_id: UUID | str,
    ) -> dict[str, Any]:
        """
        Post a new task in status "open".

        Args:
            title: Task title (non-empty)
            description: Task description (non-empty)
            budget: Positive amount
            deadline: Due date, now or later
            client_id: The posting user

        Returns:
            Created task dict

        Raises:
            ValidationError: If any field is missing or invalid (nothing written)
            PersistenceError: If the insert fails
        """
        if not client_id:
            raise ValidationError("client_id is required", field="client_id")

        try:
            task_in = TaskCreate(
                title=title,
                description=description,
                budget=budget,
                deadline=deadline,
            )
        except PydanticValidationError as e:
            raise validation_error_from_pydantic(e)

        data = {
            **task_in.model_dump(),
            "client_id": str(client_id),
            "status": TaskStatus.OPEN.value,
            "freelancer_id": None,
        }

        try:
            task = SupabaseClient.insert_task(data)
        except SupabaseClientError as e:
            logger.error(f"Failed to create task: {e}")
            raise PersistenceError(e.message, details=e.details)

        logger.info(f"Created task: {task['id']} for client: {client_id}")
        return task

    @staticmethod
    def get_task(task_id: str | UUID) -> dict[str, Any]:
        """
        Get a task by ID.

        Raises:
            TaskNotFoundError: If the task doesn't exist
            PersistenceError: If the lookup fails
        """
        try:
            task = SupabaseClient.fetch_task(task_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to fetch task {task_id}: {e}")
            raise PersistenceError(e.message, details=e.details)

        if not task:
            raise TaskNotFoundError(str(task_id))

        return task

    @staticmethod
    def list_tasks(status_filter: str | TaskStatus | None = None) -> list[dict[str, Any]]:
        """
        List tasks, newest first.

        Args:
            status_filter: "all" or None for every status, otherwise one
                exact TaskStatus value

        Raises:
            ValidationError: If status_filter is not a known status
            PersistenceError: If the query fails
        """
        status = None
        if isinstance(status_filter, TaskStatus):
            status = status_filter.value
        elif status_filter and status_filter != ALL_STATUSES:
            try:
                status = TaskStatus(status_filter).value
            except ValueError:
                allowed = ", ".join([ALL_STATUSES] + [s.value for s in TaskStatus])
                raise ValidationError(
                    f"Unknown status filter: {status_filter}",
                    field="status",
                    suggestion=f"Use one of: {allowed}",
                )

        try:
            return SupabaseClient.list_tasks(status=status, limit=settings.TASK_LIST_LIMIT)
        except SupabaseClientError as e:
            logger.error(f"Failed to list tasks: {e}")
            raise PersistenceError(e.message, details=e.details)

    @staticmethod
    def assign_freelancer(
        task_id: str | UUID,
        freelancer_id: str | UUID,
    ) -> dict[str, Any]:
        """
        Move a task from open to in_progress and record the freelancer.

        The update only applies while the stored status is still "open", so
        two concurrent accepts can't both win.

        Returns:
            Updated task dict

        Raises:
            InvalidStateError: If the task was no longer open
            PersistenceError: If the update fails (nothing committed)
        """
        try:
            rows = SupabaseClient.update_task(
                task_id,
                {
                    "status": TaskStatus.IN_PROGRESS.value,
                    "freelancer_id": str(freelancer_id),
                },
                expected_status=TaskStatus.OPEN.value,
            )
        except SupabaseClientError as e:
            logger.error(f"Failed to assign task {task_id}: {e}")
            raise PersistenceError(e.message, details=e.details)

        if not rows:
            logger.warning(f"Task {task_id} was no longer open when assigning {freelancer_id}")
            raise InvalidStateError(
                "Task is no longer open",
                details={"task_id": str(task_id)},
            )

        logger.info(f"Assigned task {task_id} to freelancer {freelancer_id}")
        return rows[0]
