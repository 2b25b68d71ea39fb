# =============================================================================
# app/routers/research.py - Research Sharing Endpoints
# =============================================================================
#   GET  /research                          - active posts, newest first
#   POST /research                          - share a post
#   GET  /research/{id}                     - post detail with author info
#   POST /research/{id}/collaborations      - ask the author to collaborate
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from pydantic import BaseModel, Field

from app.auth import get_current_user, AuthUser
from core.models.research import CollaborationResponse, ResearchResponse
from core.services.research_service import ResearchService

router = APIRouter()


# =============================================================================
# Request Models
# =============================================================================

class ResearchCreateRequest(BaseModel):
    """Body for sharing research. The author is the authenticated user."""
    title: str = Field(..., example="Sparse attention for low-resource translation")
    abstract: str = Field(..., example="We compare three sparse attention variants...")
    field: str = Field(..., example="Computer Science")
    tags: list[str] | str | None = Field(default=None, example="machine learning, nlp")
    document_url: str | None = Field(default=None, example="https://arxiv.org/abs/2401.00001")


class CollaborationCreateRequest(BaseModel):
    message: str = Field(..., example="I work on tokenizers for Swahili and would love to help.")


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=list[ResearchResponse])
async def list_research(
    field: Annotated[str | None, Query(description="Exact field, e.g. Biology")] = None,
    q: Annotated[str | None, Query(description="Search title and abstract")] = None,
    user: AuthUser = Depends(get_current_user),
):
    """Browse shared research."""
    posts = ResearchService.list_research(field=field, search=q)
    return [ResearchResponse.from_row(post) for post in posts]


@router.post("", response_model=ResearchResponse, status_code=status.HTTP_201_CREATED)
async def create_research(
    request: ResearchCreateRequest,
    user: AuthUser = Depends(get_current_user),
):
    """Share a research post."""
    research = ResearchService.create_research(
        user_id=user.id,
        title=request.title,
        abstract=request.abstract,
        field=request.field,
        tags=request.tags,
        document_url=request.document_url,
    )
    return ResearchResponse.from_row(research)


@router.get("/{research_id}", response_model=ResearchResponse)
async def get_research(
    research_id: Annotated[UUID, Path(description="Research UUID")],
    user: AuthUser = Depends(get_current_user),
):
    return ResearchResponse.from_row(ResearchService.get_research(research_id))


@router.post(
    "/{research_id}/collaborations",
    response_model=CollaborationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_collaboration(
    research_id: Annotated[UUID, Path(description="Research UUID")],
    request: CollaborationCreateRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Ask the author to collaborate.

    Authors can't send requests to their own posts.
    """
    return ResearchService.request_collaboration(
        research_id=research_id,
        requester_id=user.id,
        message=request.message,
    )
