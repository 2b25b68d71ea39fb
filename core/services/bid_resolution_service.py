# =============================================================================
# core/services/bid_resolution_service.py - Bid Acceptance
# =============================================================================
# Resolves a task's bid set: the client accepts one bid, the task moves to
# in_progress with that freelancer, every other bid is rejected.
#
#   Open (task open, bids pending) --accept_bid--> Resolved (task in_progress)
#
# PostgREST has no client-side transaction, so the writes are ordered with
# the conditional task update first. That update is the commit point: once
# it succeeds no other accept or bid can proceed, and any later failure is
# reported as a PartialFailureError naming the steps that did go through.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import same_user
from core.models.bid import BidStatus
from core.models.task import TaskStatus
from core.services.bid_service import BidService
from core.services.task_service import TaskService
from app.exceptions import (
    BidNotFoundError,
    ForbiddenError,
    InvalidStateError,
    PartialFailureError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STEP_ASSIGN_TASK = "task_assigned"
STEP_ACCEPT_BID = "bid_accepted"
STEP_REJECT_OTHERS = "other_bids_rejected"


class BidResolutionService:
    """Service for accepting a bid on a task."""

    @staticmethod
    def accept_bid(
        task_id: str | UUID,
        bid_id: str | UUID,
        caller_id: str | UUID,
        freelancer_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Accept one bid and reject the rest.

        Args:
            task_id: The task being resolved
            bid_id: The winning bid
            caller_id: The authenticated user; must be the task's client
            freelancer_id: Optional expected bidder, checked against the bid

        Returns:
            Dict with "task" (updated), "accepted_bid" and "rejected_bids"

        Raises:
            TaskNotFoundError / BidNotFoundError: If task or bid is missing,
                or the bid belongs to another task
            ForbiddenError: If caller is not the task's client
            InvalidStateError: If the task is not open or the bid not pending,
                including when a concurrent accept got there first
            ValidationError: If freelancer_id doesn't match the bid
            PersistenceError: If the gateway fails before anything committed
            PartialFailureError: If a write failed after the task was assigned
        """
        task = TaskService.get_task(task_id)
        task_id_str = str(task["id"])

        if not same_user(task.get("client_id"), caller_id):
            logger.warning(f"User {caller_id} tried to accept a bid on task {task_id_str} they don't own")
            raise ForbiddenError(
                "Only the task owner can accept bids",
                details={"task_id": task_id_str},
            )

        if task.get("status") != TaskStatus.OPEN.value:
            raise InvalidStateError(
                "Task is not open; a bid has already been accepted or the task was closed",
                details={"task_id": task_id_str, "status": task.get("status")},
            )

        bid = BidService.get_bid(bid_id)
        bid_id_str = str(bid["id"])

        if str(bid.get("task_id")) != task_id_str:
            raise BidNotFoundError(bid_id_str, task_id=task_id_str)

        if bid.get("status") != BidStatus.PENDING.value:
            raise InvalidStateError(
                "Bid is not pending",
                details={"bid_id": bid_id_str, "status": bid.get("status")},
            )

        if freelancer_id is not None and not same_user(bid.get("freelancer_id"), freelancer_id):
            raise ValidationError(
                "freelancer_id does not match the bid's bidder",
                field="freelancer_id",
                suggestion="Reload the task and accept the bid again",
            )

        winner_id = str(bid["freelancer_id"])

        # Commit point: raises InvalidStateError if someone else won the race
        updated_task = TaskService.assign_freelancer(task_id_str, winner_id)
        completed = [STEP_ASSIGN_TASK]

        try:
            accepted_rows = SupabaseClient.update_bid(
                bid_id_str,
                {"status": BidStatus.ACCEPTED.value},
                expected_status=BidStatus.PENDING.value,
            )
        except SupabaseClientError as e:
            raise BidResolutionService._partial_failure(
                task_id_str, bid_id_str, winner_id, completed, STEP_ACCEPT_BID, e.message
            )

        if not accepted_rows:
            raise BidResolutionService._partial_failure(
                task_id_str, bid_id_str, winner_id, completed, STEP_ACCEPT_BID,
                "bid was no longer pending"
            )
        completed.append(STEP_ACCEPT_BID)

        try:
            rejected_rows = SupabaseClient.update_task_bids(
                task_id_str,
                {"status": BidStatus.REJECTED.value},
                exclude_bid_id=bid_id_str,
            )
        except SupabaseClientError as e:
            raise BidResolutionService._partial_failure(
                task_id_str, bid_id_str, winner_id, completed, STEP_REJECT_OTHERS, e.message
            )

        logger.info(
            f"Accepted bid {bid_id_str} on task {task_id_str}; "
            f"freelancer {winner_id}, rejected {len(rejected_rows)} other bids"
        )

        return {
            "task": {**task, **updated_task},
            "accepted_bid": {**bid, **accepted_rows[0]},
            "rejected_bids": rejected_rows,
        }

    @staticmethod
    def _partial_failure(
        task_id: str,
        bid_id: str,
        freelancer_id: str,
        completed: list[str],
        failed_step: str,
        error: str,
    ) -> PartialFailureError:
        logger.error(
            f"Bid acceptance for task {task_id} (bid {bid_id}) failed at {failed_step} "
            f"after {completed}: {error}. Manual reconciliation needed."
        )
        return PartialFailureError(
            task_id=task_id,
            bid_id=bid_id,
            completed_steps=list(completed),
            failed_step=failed_step,
            error=error,
            freelancer_id=freelancer_id,
        )
