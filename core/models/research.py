# =============================================================================
# core/models/research.py - Research Sharing Schemas
# =============================================================================
# These models define the API contract for shared research:
# - ResearchStatus: Enum for research post states
# - ResearchCreate: Input for sharing a research post
# - ResearchResponse: Output for the research board and detail page
# - CollaborationRequestCreate / CollaborationResponse: asking to join
#
# A research post is a student's project summary; other members browse the
# board and send the author a collaboration request with a short message.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class ResearchStatus(str, Enum):
    """
    Possible states for a research post.

    Only active posts are listed on the board or accept requests.
    """
    ACTIVE = "active"
    ARCHIVED = "archived"


class CollaborationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class ResearchCreate(BaseModel):
    """
    Schema for sharing a research post.

    Tags may be sent as a list or as one comma-separated string.

    Example:
        {
            "title": "Sparse attention for low-resource translation",
            "abstract": "We compare three sparse attention variants...",
            "field": "Computer Science",
            "tags": "machine learning, nlp",
            "document_url": "https://arxiv.org/abs/2401.00001"
        }
    """

    model_config = {"str_strip_whitespace": True}

    title: str = Field(..., min_length=1, max_length=300)
    abstract: str = Field(..., min_length=1, max_length=10_000)
    field: str = Field(..., min_length=1, max_length=120, description="Discipline, e.g. Biology")
    tags: list[str] = Field(default_factory=list)
    document_url: str | None = Field(default=None, max_length=1000)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [tag.strip() for tag in value if isinstance(tag, str) and tag.strip()]

    @field_validator("document_url")
    @classmethod
    def http_url(cls, value: str | None) -> str | None:
        if not value:
            return None
        if not value.startswith(("http://", "https://")):
            raise ValueError("document_url must be an http(s) URL")
        return value


class ResearchResponse(BaseModel):
    """Schema for returning a research post."""

    id: UUID
    user_id: UUID
    title: str
    abstract: str
    field: str
    tags: list[str] = Field(default_factory=list)
    document_url: str | None = None
    status: str = ResearchStatus.ACTIVE.value
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Joined from profiles (research_user_id_fkey)
    author_name: str | None = None
    author_institution: str | None = None
    author_email: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ResearchResponse":
        """Build from a Supabase row, flattening the author profile join."""
        data = dict(row)
        author = data.pop("author", None) or {}
        data.setdefault("author_name", author.get("full_name"))
        data.setdefault("author_institution", author.get("institution"))
        data.setdefault("author_email", author.get("email"))
        if data.get("tags") is None:
            data["tags"] = []
        return cls(**data)


class CollaborationRequestCreate(BaseModel):
    """Body for asking the author to collaborate."""

    model_config = {"str_strip_whitespace": True}

    message: str = Field(..., min_length=1, max_length=2000)


class CollaborationResponse(BaseModel):
    id: UUID
    research_id: UUID
    requester_id: UUID
    message: str | None = None
    status: str = CollaborationStatus.PENDING.value
    created_at: datetime | None = None
