# =============================================================================
# core/models/profile.py - User Profile Schemas
# =============================================================================
# A profile row exists for every signed-up user (created by a Supabase Auth
# trigger). Its full_name is the display name shown next to tasks and bids.
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    """Schema for returning a profile."""

    id: UUID
    email: str | None = None
    full_name: str | None = None
    bio: str | None = None
    institution: str | None = None
    major: str | None = None
    year_of_study: int | None = None
    avatar_url: str | None = None
    github: str | None = None
    linkedin: str | None = None
    twitter: str | None = None
    website: str | None = None
    verified: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProfileUpdate(BaseModel):
    """
    Fields a user may edit on their own profile.

    Unset fields are left untouched. Example:
        {"full_name": "Ada L.", "major": "Mathematics", "year_of_study": 2}
    """

    model_config = {"str_strip_whitespace": True, "extra": "forbid"}

    full_name: str | None = Field(default=None, min_length=1, max_length=120)
    bio: str | None = Field(default=None, max_length=2000)
    institution: str | None = Field(default=None, max_length=200)
    major: str | None = Field(default=None, max_length=200)
    year_of_study: int | None = Field(default=None, ge=1, le=10)
    avatar_url: str | None = Field(default=None, max_length=500)
    github: str | None = Field(default=None, max_length=200)
    linkedin: str | None = Field(default=None, max_length=200)
    twitter: str | None = Field(default=None, max_length=200)
    website: str | None = Field(default=None, max_length=500)
