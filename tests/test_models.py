# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the request/response models:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - Supabase rows with profile joins flatten into response models
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError

from core.models import (
    AcceptBidResponse,
    AssistantRequest,
    AssistantRequestType,
    BidCreate,
    BidResponse,
    BidStatus,
    ProfileResponse,
    ProfileUpdate,
    TaskCreate,
    TaskList,
    TaskResponse,
    TaskStatus,
)


def _task_row(**overrides):
    row = {
        "id": str(uuid4()),
        "title": "Essay",
        "description": "1500 words",
        "budget": "2000.00",
        "deadline": "2026-12-01T17:00:00+00:00",
        "status": "open",
        "client_id": str(uuid4()),
        "freelancer_id": None,
        "created_at": "2026-10-18T10:00:00+00:00",
        "updated_at": "2026-10-18T10:00:00+00:00",
    }
    row.update(overrides)
    return row


def _bid_row(**overrides):
    row = {
        "id": str(uuid4()),
        "task_id": str(uuid4()),
        "freelancer_id": str(uuid4()),
        "amount": "1800",
        "proposal": "I can do it",
        "status": "pending",
        "created_at": "2026-10-18T11:00:00+00:00",
        "updated_at": None,
    }
    row.update(overrides)
    return row


# =============================================================================
# Task Model Tests
# =============================================================================

class TestTaskStatus:
    """Tests for TaskStatus enum."""

    def test_values(self):
        assert {s.value for s in TaskStatus} == {"open", "in_progress", "completed", "cancelled"}

    def test_requires_freelancer(self):
        assert TaskStatus.IN_PROGRESS.requires_freelancer
        assert TaskStatus.COMPLETED.requires_freelancer
        assert not TaskStatus.OPEN.requires_freelancer
        assert not TaskStatus.CANCELLED.requires_freelancer


class TestTaskCreate:
    """Tests for TaskCreate model."""

    def test_valid_task(self):
        deadline = datetime.now(timezone.utc) + timedelta(days=7)
        task = TaskCreate(title="  Essay ", description="Write it", budget="2000", deadline=deadline)

        assert task.title == "Essay"
        assert task.budget == Decimal("2000")
        assert task.deadline == deadline

    def test_naive_deadline_treated_as_utc(self):
        naive = datetime.utcnow() + timedelta(days=1)
        task = TaskCreate(title="Essay", description="Write it", budget=10, deadline=naive)

        assert task.deadline.tzinfo is not None

    def test_deadline_now_is_allowed(self):
        task = TaskCreate(
            title="Essay",
            description="Write it",
            budget=10,
            deadline=datetime.now(timezone.utc),
        )

        assert task.deadline is not None

    def test_past_deadline_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            TaskCreate(
                title="Essay",
                description="Write it",
                budget=10,
                deadline=datetime.now(timezone.utc) - timedelta(days=1),
            )

        assert "deadline" in str(exc_info.value)

    @pytest.mark.parametrize("budget", [0, -5, "-0.01"])
    def test_non_positive_budget_rejected(self, budget):
        with pytest.raises(ValidationError):
            TaskCreate(
                title="Essay",
                description="Write it",
                budget=budget,
                deadline=datetime.now(timezone.utc) + timedelta(days=1),
            )

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate(
                title="   ",
                description="Write it",
                budget=10,
                deadline=datetime.now(timezone.utc) + timedelta(days=1),
            )

    def test_unparseable_deadline_rejected(self):
        with pytest.raises(ValidationError):
            TaskCreate(title="Essay", description="Write it", budget=10, deadline="next friday")


class TestTaskResponse:
    """Tests for TaskResponse model."""

    def test_from_row_flattens_client_join(self):
        row = _task_row(client={"full_name": "Clara Client", "email": "c@campus.test"})

        task = TaskResponse.from_row(row)

        assert task.client_name == "Clara Client"
        assert task.budget == Decimal("2000.00")
        assert task.status == TaskStatus.OPEN
        assert isinstance(task.id, UUID)

    def test_from_row_without_join(self):
        task = TaskResponse.from_row(_task_row(client=None))

        assert task.client_name is None

    def test_from_row_does_not_mutate_input(self):
        row = _task_row(client={"full_name": "Clara"})
        TaskResponse.from_row(row)

        assert "client" in row

    def test_task_list_defaults(self):
        board = TaskList()

        assert board.tasks == []
        assert board.total == 0
        assert board.status == "all"


# =============================================================================
# Bid Model Tests
# =============================================================================

class TestBidCreate:
    """Tests for BidCreate model."""

    def test_valid_bid(self):
        bid = BidCreate(amount="1800.50", proposal=" I can do it ")

        assert bid.amount == Decimal("1800.50")
        assert bid.proposal == "I can do it"

    def test_zero_amount_rejected(self):
        with pytest.raises(ValidationError):
            BidCreate(amount=0, proposal="I can do it")

    def test_empty_proposal_rejected(self):
        with pytest.raises(ValidationError):
            BidCreate(amount=10, proposal="   ")

    def test_too_many_decimal_places_rejected(self):
        with pytest.raises(ValidationError):
            BidCreate(amount="10.001", proposal="I can do it")


class TestBidResponse:
    """Tests for BidResponse and AcceptBidResponse."""

    def test_from_row_flattens_freelancer_join(self):
        bid = BidResponse.from_row(_bid_row(freelancer={"full_name": "Fred"}))

        assert bid.freelancer_name == "Fred"
        assert bid.status == BidStatus.PENDING
        assert bid.amount == Decimal("1800")

    def test_accept_response_serializes(self):
        freelancer_id = str(uuid4())
        task = TaskResponse.from_row(_task_row(status="in_progress", freelancer_id=freelancer_id))
        bid = BidResponse.from_row(_bid_row(status="accepted", freelancer_id=freelancer_id))
        rejected = [uuid4(), uuid4()]

        response = AcceptBidResponse(task=task, accepted_bid=bid, rejected_bid_ids=rejected)
        data = response.model_dump(mode="json")

        assert data["task"]["status"] == "in_progress"
        assert data["accepted_bid"]["status"] == "accepted"
        assert data["rejected_bid_ids"] == [str(r) for r in rejected]


# =============================================================================
# Profile Model Tests
# =============================================================================

class TestProfileModels:
    """Tests for ProfileResponse and ProfileUpdate."""

    def test_profile_response_minimal(self):
        profile = ProfileResponse(id=uuid4())

        assert profile.full_name is None

    def test_update_only_sets_given_fields(self):
        update = ProfileUpdate(major="Mathematics")

        assert update.model_dump(exclude_unset=True) == {"major": "Mathematics"}

    def test_update_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            ProfileUpdate(verified=True)

    @pytest.mark.parametrize("year", [0, 11])
    def test_update_year_of_study_bounds(self, year):
        with pytest.raises(ValidationError):
            ProfileUpdate(year_of_study=year)


# =============================================================================
# Assistant Model Tests
# =============================================================================

class TestAssistantRequest:
    """Tests for AssistantRequest."""

    def test_valid_request(self):
        request = AssistantRequest(type="summarize", data={"text": "Hello"})

        assert request.type == AssistantRequestType.SUMMARIZE

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            AssistantRequest(type="write_my_essay", data={})
