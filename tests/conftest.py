# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - InMemoryGateway: a stand-in for SupabaseClient backed by dicts
# - Fixtures that patch the gateway into every service module
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-for-hs256")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import copy
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from jose import jwt

from app.config import settings
from lib.supabase_client import SupabaseClientError
from lib.utils import to_db_value


# =============================================================================
# In-Memory Persistence Gateway
# =============================================================================

GATEWAY_MODULES = [
    "core.services.task_service.SupabaseClient",
    "core.services.bid_service.SupabaseClient",
    "core.services.bid_resolution_service.SupabaseClient",
    "core.services.profile_service.SupabaseClient",
    "core.services.research_service.SupabaseClient",
    "app.auth.routes.SupabaseClient",
    "app.websocket.routes.SupabaseClient",
]


class InMemoryGateway:
    """
    Dict-backed double with the same methods as lib.supabase_client.SupabaseClient.

    Rows are stored the way PostgREST returns them (ids, amounts and
    timestamps as strings). Two test hooks:

    - fail(method, code): the next calls to `method` raise SupabaseClientError
    - before(method, fn): run fn() right before `method` does its work,
      to interleave a concurrent request
    """

    def __init__(self):
        self.tasks: dict[str, dict] = {}
        self.bids: dict[str, dict] = {}
        self.profiles: dict[str, dict] = {}
        self.research: dict[str, dict] = {}
        self.collaborations: dict[str, dict] = {}
        self.calls: list[str] = []
        self._failures: dict[str, str] = {}
        self._hooks: dict[str, list] = {}
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    # -------------------------------------------------------------------------
    # Test hooks
    # -------------------------------------------------------------------------

    def fail(self, method: str, code: str = "GATEWAY_DOWN") -> None:
        self._failures[method] = code

    def before(self, method: str, fn) -> None:
        self._hooks.setdefault(method, []).append(fn)

    def _enter(self, method: str) -> None:
        self.calls.append(method)
        for fn in self._hooks.pop(method, []):
            fn()
        if method in self._failures:
            raise SupabaseClientError(
                message=f"{method} failed",
                code=self._failures[method],
            )

    def _tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def get_client(self):
        return MagicMock()

    # -------------------------------------------------------------------------
    # Seeding helpers
    # -------------------------------------------------------------------------

    def add_profile(self, user_id=None, full_name="Test User", **fields) -> dict:
        user_id = str(user_id or uuid4())
        row = {
            "id": user_id,
            "email": f"{user_id[:8]}@campus.test",
            "full_name": full_name,
            "created_at": self._tick(),
            "updated_at": None,
            **fields,
        }
        self.profiles[user_id] = row
        return copy.deepcopy(row)

    def add_task(self, client_id, status="open", freelancer_id=None, **fields) -> dict:
        now = self._tick()
        row = {
            "id": str(uuid4()),
            "title": "Essay",
            "description": "1500 words on renewable energy policy",
            "budget": "2000",
            "deadline": (datetime.now(timezone.utc) + timedelta(days=7)).isoformat(),
            "status": status,
            "client_id": str(client_id),
            "freelancer_id": str(freelancer_id) if freelancer_id else None,
            "created_at": now,
            "updated_at": now,
            **fields,
        }
        self.tasks[row["id"]] = row
        return copy.deepcopy(row)

    def add_bid(self, task_id, freelancer_id, amount="1800", status="pending", **fields) -> dict:
        now = self._tick()
        row = {
            "id": str(uuid4()),
            "task_id": str(task_id),
            "freelancer_id": str(freelancer_id),
            "amount": amount,
            "proposal": "I can deliver this by Friday",
            "status": status,
            "created_at": now,
            "updated_at": now,
            **fields,
        }
        self.bids[row["id"]] = row
        return copy.deepcopy(row)

    def add_research(self, user_id, status="active", **fields) -> dict:
        now = self._tick()
        row = {
            "id": str(uuid4()),
            "user_id": str(user_id),
            "title": "Sparse attention for low-resource translation",
            "abstract": "We compare three sparse attention variants on Swahili",
            "field": "Computer Science",
            "tags": ["nlp"],
            "document_url": None,
            "status": status,
            "created_at": now,
            "updated_at": now,
            **fields,
        }
        self.research[row["id"]] = row
        return copy.deepcopy(row)

    def bids_for(self, task_id) -> list[dict]:
        return [b for b in self.bids.values() if b["task_id"] == str(task_id)]

    # -------------------------------------------------------------------------
    # Joins
    # -------------------------------------------------------------------------

    def _task_view(self, row: dict) -> dict:
        view = copy.deepcopy(row)
        profile = self.profiles.get(row["client_id"])
        view["client"] = (
            {"full_name": profile.get("full_name"), "email": profile.get("email")}
            if profile else None
        )
        return view

    def _research_view(self, row: dict) -> dict:
        view = copy.deepcopy(row)
        profile = self.profiles.get(row["user_id"])
        view["author"] = (
            {key: profile.get(key) for key in ("full_name", "institution", "email")}
            if profile else None
        )
        return view

    def _bid_view(self, row: dict) -> dict:
        view = copy.deepcopy(row)
        profile = self.profiles.get(row["freelancer_id"])
        view["freelancer"] = {"full_name": profile.get("full_name")} if profile else None
        return view

    def _prepare(self, data: dict) -> dict:
        return {key: to_db_value(value) for key, value in data.items()}

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    def fetch_task(self, task_id):
        self._enter("fetch_task")
        row = self.tasks.get(str(task_id))
        return self._task_view(row) if row else None

    def list_tasks(self, status=None, limit=100):
        self._enter("list_tasks")
        rows = [t for t in self.tasks.values() if status is None or t["status"] == status]
        rows.sort(key=lambda t: t["created_at"], reverse=True)
        return [self._task_view(t) for t in rows[:limit]]

    def insert_task(self, data):
        self._enter("insert_task")
        now = self._tick()
        row = {"id": str(uuid4()), "created_at": now, "updated_at": now, **self._prepare(data)}
        self.tasks[row["id"]] = row
        return copy.deepcopy(row)

    def update_task(self, task_id, updates, expected_status=None):
        self._enter("update_task")
        row = self.tasks.get(str(task_id))
        if row is None or (expected_status and row["status"] != expected_status):
            return []
        row.update(self._prepare(updates), updated_at=self._tick())
        return [copy.deepcopy(row)]

    # -------------------------------------------------------------------------
    # Bids
    # -------------------------------------------------------------------------

    def fetch_bid(self, bid_id):
        self._enter("fetch_bid")
        row = self.bids.get(str(bid_id))
        return self._bid_view(row) if row else None

    def list_bids(self, task_id):
        self._enter("list_bids")
        rows = sorted(self.bids_for(task_id), key=lambda b: b["created_at"], reverse=True)
        return [self._bid_view(b) for b in rows]

    def find_bid(self, task_id, freelancer_id):
        self._enter("find_bid")
        for bid in self.bids_for(task_id):
            if bid["freelancer_id"] == str(freelancer_id):
                return {"id": bid["id"], "status": bid["status"]}
        return None

    def insert_bid(self, data):
        self._enter("insert_bid")
        prepared = self._prepare(data)
        for bid in self.bids_for(prepared["task_id"]):
            if bid["freelancer_id"] == prepared["freelancer_id"]:
                raise SupabaseClientError(
                    message="duplicate key value violates unique constraint",
                    code="UNIQUE_VIOLATION",
                )
        now = self._tick()
        row = {"id": str(uuid4()), "created_at": now, "updated_at": now, **prepared}
        self.bids[row["id"]] = row
        return copy.deepcopy(row)

    def update_bid(self, bid_id, updates, expected_status=None):
        self._enter("update_bid")
        row = self.bids.get(str(bid_id))
        if row is None or (expected_status and row["status"] != expected_status):
            return []
        row.update(self._prepare(updates), updated_at=self._tick())
        return [copy.deepcopy(row)]

    def update_task_bids(self, task_id, updates, exclude_bid_id=None):
        self._enter("update_task_bids")
        updated = []
        for row in self.bids_for(task_id):
            if exclude_bid_id and row["id"] == str(exclude_bid_id):
                continue
            row.update(self._prepare(updates), updated_at=self._tick())
            updated.append(copy.deepcopy(row))
        return updated

    def delete_bid(self, bid_id, expected_status=None):
        self._enter("delete_bid")
        row = self.bids.get(str(bid_id))
        if row is None or (expected_status and row["status"] != expected_status):
            return []
        return [self.bids.pop(str(bid_id))]

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    def fetch_profile(self, user_id):
        self._enter("fetch_profile")
        row = self.profiles.get(str(user_id))
        return copy.deepcopy(row) if row else None

    def update_profile(self, user_id, updates):
        self._enter("update_profile")
        row = self.profiles.get(str(user_id))
        if row is None:
            return []
        row.update(self._prepare(updates), updated_at=self._tick())
        return [copy.deepcopy(row)]

    # -------------------------------------------------------------------------
    # Research
    # -------------------------------------------------------------------------

    def fetch_research(self, research_id):
        self._enter("fetch_research")
        row = self.research.get(str(research_id))
        return self._research_view(row) if row else None

    def list_research(self, status=None, field=None, limit=100):
        self._enter("list_research")
        rows = [
            r for r in self.research.values()
            if (status is None or r["status"] == status) and (field is None or r["field"] == field)
        ]
        rows.sort(key=lambda r: r["created_at"], reverse=True)
        return [self._research_view(r) for r in rows[:limit]]

    def insert_research(self, data):
        self._enter("insert_research")
        now = self._tick()
        row = {"id": str(uuid4()), "created_at": now, "updated_at": now, **self._prepare(data)}
        self.research[row["id"]] = row
        return copy.deepcopy(row)

    def insert_collaboration_request(self, data):
        self._enter("insert_collaboration_request")
        now = self._tick()
        row = {"id": str(uuid4()), "created_at": now, "updated_at": now, **self._prepare(data)}
        self.collaborations[row["id"]] = row
        return copy.deepcopy(row)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def gateway():
    """In-memory gateway patched into every module that talks to Supabase."""
    fake = InMemoryGateway()
    patchers = [patch(target, fake) for target in GATEWAY_MODULES]
    for p in patchers:
        p.start()
    yield fake
    for p in patchers:
        p.stop()


@pytest.fixture
def client_user(gateway):
    """The user who posts tasks."""
    return gateway.add_profile(full_name="Clara Client")


@pytest.fixture
def freelancer(gateway):
    """A user who bids."""
    return gateway.add_profile(full_name="Fred Freelancer")


@pytest.fixture
def other_freelancer(gateway):
    """A second bidder."""
    return gateway.add_profile(full_name="Olive Other")


@pytest.fixture
def open_task(gateway, client_user):
    """An open task owned by client_user."""
    return gateway.add_task(client_user["id"])


@pytest.fixture
def future_deadline():
    return datetime.now(timezone.utc) + timedelta(days=7)


@pytest.fixture
def budget():
    return Decimal("2000")


@pytest.fixture
def make_token():
    """Factory for Supabase-style HS256 access tokens."""
    def _make(sub=None, email="ada@campus.test", expires_in=3600, aud="authenticated", secret=None):
        now = int(time.time())
        claims = {
            "aud": aud,
            "exp": now + expires_in,
            "iat": now,
            "email": email,
            "role": "authenticated",
        }
        if sub is not None:
            claims["sub"] = sub
        return jwt.encode(claims, secret or settings.SUPABASE_JWT_SECRET, algorithm="HS256")

    return _make
