# =============================================================================
# core/models/assistant.py - AI Assistant Schemas
# =============================================================================
# Request/response for the writing and matching assistant. Each request type
# needs its own keys in `data`:
#   suggest_freelancers   -> taskTitle, taskDescription, skills (optional)
#   suggest_collaborators -> researchTitle, field
#   grammar_check         -> text
#   summarize             -> text
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AssistantRequestType(str, Enum):
    """What the assistant should do."""
    SUGGEST_FREELANCERS = "suggest_freelancers"
    SUGGEST_COLLABORATORS = "suggest_collaborators"
    GRAMMAR_CHECK = "grammar_check"
    SUMMARIZE = "summarize"


class AssistantRequest(BaseModel):
    """
    Schema for an assistant call.

    Example:
        {
            "type": "summarize",
            "data": {"text": "Long abstract ..."}
        }
    """

    type: AssistantRequestType
    data: dict[str, Any] = Field(default_factory=dict)


class AssistantResponse(BaseModel):
    """The model's reply as plain text."""

    result: str
