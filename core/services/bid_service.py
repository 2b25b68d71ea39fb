# =============================================================================
# core/services/bid_service.py - Bid Submission
# =============================================================================
# Handles placing bids on open tasks and listing a task's bids.
#
# Rules checked before anything is written:
# - the task exists and is open
# - the bidder is not the task's client
# - amount > 0, proposal non-empty
# - one bid per user per task
# =============================================================================

import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import same_user
from core.models.bid import BidCreate, BidStatus
from core.models.task import TaskStatus
from core.services.task_service import TaskService
from app.exceptions import (
    BidNotFoundError,
    DuplicateBidError,
    ForbiddenError,
    InvalidStateError,
    PersistenceError,
    ValidationError,
    validation_error_from_pydantic,
)

logger = logging.getLogger(__name__)


class BidService:
    """
    Service for bid submission and listing.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def submit_bid(
        task_id: str | UUID,
        freelancer_id: str | UUID,
        amount: Decimal | float | str,
        proposal: str,
    ) -> dict[str, Any]:
        """
        Place a pending bid on an open task.

        Args:
            task_id: The task being bid on
            freelancer_id: The bidding user (from the token)
            amount: Positive price
            proposal: Non-empty pitch

        Returns:
            Created bid dict

        Raises:
            TaskNotFoundError: If the task doesn't exist
            InvalidStateError: If the task is not open
            ForbiddenError: If the bidder owns the task
            ValidationError: If amount/proposal are malformed
            DuplicateBidError: If the bidder already bid on this task
            PersistenceError: If the gateway fails
        """
        if not freelancer_id:
            raise ValidationError("freelancer_id is required", field="freelancer_id")

        try:
            bid_in = BidCreate(amount=amount, proposal=proposal)
        except PydanticValidationError as e:
            raise validation_error_from_pydantic(e)

        task = TaskService.get_task(task_id)
        task_id_str = str(task["id"])

        if task.get("status") != TaskStatus.OPEN.value:
            logger.warning(f"Rejected bid on task {task_id_str} in status {task.get('status')}")
            raise InvalidStateError(
                "Task is not open for bids",
                details={"task_id": task_id_str, "status": task.get("status")},
            )

        if same_user(task.get("client_id"), freelancer_id):
            logger.warning(f"User {freelancer_id} tried to bid on own task {task_id_str}")
            raise ForbiddenError(
                "You cannot bid on your own task",
                details={"task_id": task_id_str},
            )

        try:
            existing = SupabaseClient.find_bid(task_id_str, freelancer_id)
        except SupabaseClientError as e:
            raise PersistenceError(e.message, details=e.details)

        if existing:
            raise DuplicateBidError(task_id_str, str(freelancer_id))

        data = {
            **bid_in.model_dump(),
            "task_id": task_id_str,
            "freelancer_id": str(freelancer_id),
            "status": BidStatus.PENDING.value,
        }

        try:
            bid = SupabaseClient.insert_bid(data)
        except SupabaseClientError as e:
            if e.code == "UNIQUE_VIOLATION":
                raise DuplicateBidError(task_id_str, str(freelancer_id))
            logger.error(f"Failed to submit bid: {e}")
            raise PersistenceError(e.message, details=e.details)

        bid = BidService._withdraw_if_task_closed(task_id_str, bid)

        logger.info(f"Bid {bid['id']} submitted on task {task_id_str} by {freelancer_id}")
        return bid

    @staticmethod
    def _withdraw_if_task_closed(task_id: str, bid: dict[str, Any]) -> dict[str, Any]:
        """
        Re-read the task after inserting a bid.

        If a concurrent accept resolved the task between our status check and
        the insert, the new bid would stay pending on a resolved task. Remove
        it and report the task as closed.

        The delete only matches a still-pending bid. If the client accepted
        this very bid in the meantime, the accepted bid is kept and returned.
        """
        task = TaskService.get_task(task_id)
        if task.get("status") == TaskStatus.OPEN.value:
            return bid

        try:
            deleted = SupabaseClient.delete_bid(bid["id"], expected_status=BidStatus.PENDING.value)
        except SupabaseClientError as e:
            logger.error(f"Failed to remove late bid {bid['id']}: {e}")
            raise PersistenceError(e.message, details=e.details)

        if deleted:
            logger.warning(f"Task {task_id} closed while bid {bid['id']} was being placed; removed it")
        else:
            current = BidService.get_bid(bid["id"])
            if current.get("status") == BidStatus.ACCEPTED.value:
                logger.info(f"Bid {bid['id']} was accepted while it was being placed; keeping it")
                return current
            logger.warning(f"Task {task_id} closed while bid {bid['id']} was being placed; it is {current.get('status')}")

        raise InvalidStateError(
            "Task is not open for bids",
            details={"task_id": task_id, "status": task.get("status")},
        )

    @staticmethod
    def list_bids(task_id: str | UUID) -> list[dict[str, Any]]:
        """
        List all bids on a task, newest first, with bidder names.

        Raises:
            TaskNotFoundError: If the task doesn't exist
            PersistenceError: If the query fails
        """
        task = TaskService.get_task(task_id)

        try:
            return SupabaseClient.list_bids(task["id"])
        except SupabaseClientError as e:
            logger.error(f"Failed to list bids for task {task_id}: {e}")
            raise PersistenceError(e.message, details=e.details)

    @staticmethod
    def get_bid(bid_id: str | UUID) -> dict[str, Any]:
        """
        Get a bid by ID.

        Raises:
            BidNotFoundError: If the bid doesn't exist
            PersistenceError: If the lookup fails
        """
        try:
            bid = SupabaseClient.fetch_bid(bid_id)
        except SupabaseClientError as e:
            raise PersistenceError(e.message, details=e.details)

        if not bid:
            raise BidNotFoundError(str(bid_id))

        return bid
