# =============================================================================
# core/models/bid.py - Bid Schemas
# =============================================================================
# These models define the API contract for bidding:
# - BidStatus: Enum for bid states
# - BidCreate: Input for submitting a bid
# - BidResponse: Output for a single bid (with bidder name)
# - AcceptBidResponse: Output of resolving a task's bids
#
# For one task at most one bid is ever accepted; accepting it rejects all
# the others.
# =============================================================================

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from .task import TaskResponse


class BidStatus(str, Enum):
    """
    Possible states for a bid.

    Flow: pending -> accepted
          pending -> rejected
    """
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class BidCreate(BaseModel):
    """
    Schema for submitting a bid.

    Task and bidder come from the URL and the token.

    Example:
        {
            "amount": "1800.00",
            "proposal": "I have written three policy essays this term..."
        }
    """

    model_config = {"str_strip_whitespace": True}

    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=12,
        decimal_places=2,
        description="Price the freelancer asks for"
    )

    proposal: str = Field(
        ...,
        min_length=1,
        max_length=5000,
        description="Why the freelancer is a good fit"
    )


class BidResponse(BaseModel):
    """Schema for returning a bid to clients."""

    id: UUID
    task_id: UUID
    freelancer_id: UUID
    amount: Decimal
    proposal: str
    status: BidStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Joined from profiles (bids_freelancer_id_fkey)
    freelancer_name: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "BidResponse":
        """Build from a Supabase row, flattening the bidder profile join."""
        data = dict(row)
        freelancer = data.pop("freelancer", None) or {}
        data.setdefault("freelancer_name", freelancer.get("full_name"))
        return cls(**data)


class AcceptBidRequest(BaseModel):
    """
    Optional body for accepting a bid.

    If freelancer_id is sent it must match the bid's bidder; this guards
    against accepting a bid that changed hands in a stale UI.
    """

    freelancer_id: UUID | None = None


class AcceptBidResponse(BaseModel):
    """
    Result of accepting a bid.

    Example:
        {
            "task": {"id": "...", "status": "in_progress", "freelancer_id": "..."},
            "accepted_bid": {"id": "...", "status": "accepted", ...},
            "rejected_bid_ids": ["..."]
        }
    """

    task: TaskResponse
    accepted_bid: BidResponse
    rejected_bid_ids: list[UUID] = Field(default_factory=list)
