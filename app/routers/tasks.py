# =============================================================================
# app/routers/tasks.py - Task and Bid Endpoints
# =============================================================================
# The marketplace workflow:
#   POST /tasks                               - post a task (status open)
#   GET  /tasks                               - task board, newest first
#   GET  /tasks/{id}                          - task detail
#   GET  /tasks/{id}/bids                     - bids on a task
#   POST /tasks/{id}/bids                     - place a bid
#   POST /tasks/{id}/bids/{bid_id}/accept     - accept one bid, reject the rest
#
# All endpoints require authentication. Realtime events are published only
# after the change has been written.
# =============================================================================

import logging
from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query, status
from pydantic import BaseModel, Field

from app.auth import get_current_user, AuthUser
from app.exceptions import PartialFailureError
from app.websocket.broadcast import (
    publish_task_created,
    publish_bid_submitted,
    publish_bid_accepted,
    publish_task_assigned,
)
from core.models.bid import AcceptBidRequest, AcceptBidResponse, BidResponse
from core.models.task import TaskList, TaskResponse
from core.services.bid_resolution_service import BidResolutionService
from core.services.bid_service import BidService
from core.services.task_service import ALL_STATUSES, TaskService

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request Models
# =============================================================================
# Field checks happen in the service layer so that a bad value comes back
# with the same VALIDATION_ERROR shape whether it arrives over HTTP or not.

class TaskCreateRequest(BaseModel):
    """Body for posting a task. The client is the authenticated user."""
    title: str = Field(..., example="Essay")
    description: str = Field(..., example="1500 words on renewable energy policy")
    budget: Decimal = Field(..., example="2000.00")
    deadline: datetime = Field(..., example="2026-10-25T17:00:00Z")


class BidCreateRequest(BaseModel):
    """Body for placing a bid. The bidder is the authenticated user."""
    amount: Decimal = Field(..., example="1800.00")
    proposal: str = Field(..., example="I have written three policy essays this term.")


# =============================================================================
# Task Endpoints
# =============================================================================

@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    request: TaskCreateRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Post a new task.

    The task starts in status "open" with no freelancer.
    """
    task = TaskService.create_task(
        title=request.title,
        description=request.description,
        budget=request.budget,
        deadline=request.deadline,
        client_id=user.id,
    )

    publish_task_created(str(task["id"]), task["title"], task["budget"])

    return TaskResponse.from_row(task)


@router.get("", response_model=TaskList)
async def list_tasks(
    user: AuthUser = Depends(get_current_user),
    status_filter: Annotated[
        str,
        Query(alias="status", description="all, open, in_progress, completed or cancelled"),
    ] = ALL_STATUSES,
):
    """
    List tasks for the board, newest first.

    Use status=open to show only tasks accepting bids.
    """
    tasks = TaskService.list_tasks(status_filter)

    return TaskList(
        tasks=[TaskResponse.from_row(t) for t in tasks],
        total=len(tasks),
        status=status_filter,
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: Annotated[UUID, Path(description="Task UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """Get one task with the client's display name."""
    return TaskResponse.from_row(TaskService.get_task(task_id))


# =============================================================================
# Bid Endpoints
# =============================================================================

@router.get("/{task_id}/bids", response_model=list[BidResponse])
async def list_bids(
    task_id: Annotated[UUID, Path(description="Task UUID")],
    user: AuthUser = Depends(get_current_user),
):
    """List the bids on a task, newest first, with bidder names."""
    return [BidResponse.from_row(b) for b in BidService.list_bids(task_id)]


@router.post(
    "/{task_id}/bids",
    response_model=BidResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_bid(
    task_id: Annotated[UUID, Path(description="Task UUID")],
    request: BidCreateRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Place a bid on an open task.

    You cannot bid on your own task, and you can bid on each task once.
    """
    bid = BidService.submit_bid(
        task_id=task_id,
        freelancer_id=user.id,
        amount=request.amount,
        proposal=request.proposal,
    )

    publish_bid_submitted(str(task_id), str(bid["id"]), bid["amount"])

    return BidResponse.from_row(bid)


@router.post("/{task_id}/bids/{bid_id}/accept", response_model=AcceptBidResponse)
async def accept_bid(
    task_id: Annotated[UUID, Path(description="Task UUID")],
    bid_id: Annotated[UUID, Path(description="Bid UUID")],
    user: AuthUser = Depends(get_current_user),
    request: Annotated[AcceptBidRequest | None, Body()] = None,
):
    """
    Accept a bid.

    Only the task's client can accept. The task moves to in_progress with
    the bidder as freelancer, and every other bid on the task is rejected.
    """
    try:
        result = BidResolutionService.accept_bid(
            task_id=task_id,
            bid_id=bid_id,
            caller_id=user.id,
            freelancer_id=request.freelancer_id if request else None,
        )
    except PartialFailureError as e:
        # The task itself is committed as in_progress
        logger.warning(f"Publishing assignment of task {e.task_id} after partial failure at {e.failed_step}")
        publish_task_assigned(e.task_id, e.freelancer_id)
        raise

    accepted = result["accepted_bid"]
    rejected_ids = [str(b["id"]) for b in result["rejected_bids"]]

    publish_bid_accepted(
        str(task_id),
        str(accepted["id"]),
        str(accepted["freelancer_id"]),
        rejected_ids,
    )

    return AcceptBidResponse(
        task=TaskResponse.from_row(result["task"]),
        accepted_bid=BidResponse.from_row(accepted),
        rejected_bid_ids=rejected_ids,
    )
