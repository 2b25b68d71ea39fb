# =============================================================================
# core/models/task.py - Task Schemas
# =============================================================================
# These models define the API contract for task operations:
# - TaskStatus: Enum for task states
# - TaskCreate: Input for posting a new task
# - TaskResponse: Output when returning a task to clients
# - TaskList: Output for the task board
#
# A task is a unit of paid work posted by a client user. Other users bid on
# it while it is open; the client accepts one bid to assign it.
# =============================================================================

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

# Deadlines a few seconds in the past are treated as "now" (clock skew,
# form submit latency).
DEADLINE_GRACE = timedelta(minutes=1)


class TaskStatus(str, Enum):
    """
    Possible states for a task.

    - open: Accepting bids
    - in_progress: A bid was accepted, freelancer assigned
    - completed: Work delivered (set outside the bidding workflow)
    - cancelled: Withdrawn by the client (set outside the bidding workflow)

    Flow: open -> in_progress -> completed
    """
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def requires_freelancer(self) -> bool:
        """freelancer_id is set iff the task is in one of these states."""
        return self in (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED)


class TaskCreate(BaseModel):
    """
    Schema for posting a new task.

    The client id comes from the authenticated user, never from the body.

    Example:
        {
            "title": "Essay",
            "description": "1500 words on renewable energy policy",
            "budget": "2000.00",
            "deadline": "2026-10-25T17:00:00Z"
        }
    """

    model_config = {"str_strip_whitespace": True}

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Short task title shown on the board"
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=10_000,
        description="What needs to be done"
    )

    budget: Decimal = Field(
        ...,
        gt=0,
        max_digits=12,
        decimal_places=2,
        description="Budget in the platform currency"
    )

    deadline: datetime = Field(
        ...,
        description="When the work is due"
    )

    @field_validator("deadline")
    @classmethod
    def deadline_not_in_past(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value < datetime.now(timezone.utc) - DEADLINE_GRACE:
            raise ValueError("deadline must not be in the past")
        return value


class TaskResponse(BaseModel):
    """
    Schema for returning a task to clients.

    Returned by:
    - POST /tasks
    - GET /tasks/{id}
    - GET /tasks (inside TaskList)
    """

    id: UUID
    title: str
    description: str
    budget: Decimal
    deadline: datetime
    status: TaskStatus
    client_id: UUID
    freelancer_id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Joined from profiles (tasks_client_id_fkey)
    client_name: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "TaskResponse":
        """Build from a Supabase row, flattening the client profile join."""
        data = dict(row)
        client = data.pop("client", None) or {}
        data.setdefault("client_name", client.get("full_name"))
        return cls(**data)


class TaskList(BaseModel):
    """
    Schema for the task board.

    Example:
        {
            "tasks": [...],
            "total": 12,
            "status": "open"
        }
    """

    tasks: list[TaskResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    status: str = Field(default="all", description="Filter that was applied")
