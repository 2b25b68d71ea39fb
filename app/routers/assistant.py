# =============================================================================
# app/routers/assistant.py - AI Assistant Endpoint
# =============================================================================
# POST /assistant proxies one request to the language model:
#   - suggest_freelancers / suggest_collaborators: matching criteria
#   - grammar_check: writing feedback
#   - summarize: 2-3 sentence summary
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import get_current_user, AuthUser
from core.models.assistant import AssistantRequest, AssistantResponse
from core.services.assistant_service import AssistantService

router = APIRouter()


def get_assistant_service() -> AssistantService:
    """Dependency that builds the assistant with settings defaults."""
    return AssistantService()


@router.post("", response_model=AssistantResponse)
async def run_assistant(
    request: AssistantRequest,
    user: AuthUser = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant_service),
):
    """
    Run an assistant request.

    Example:
        {"type": "grammar_check", "data": {"text": "Their going to the lab."}}
    """
    result = assistant.run(request.type, request.data)
    return AssistantResponse(result=result)
