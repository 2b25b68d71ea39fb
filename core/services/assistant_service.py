# =============================================================================
# core/services/assistant_service.py - AI Assistant
# =============================================================================
# Thin proxy to the chat completions API. Each request type has a fixed
# system prompt and a user prompt built from the caller's data.
#
# Usage:
#   assistant = AssistantService()
#   text = assistant.run(AssistantRequestType.SUMMARIZE, {"text": "..."})
# =============================================================================

import logging
from typing import Any

from openai import OpenAI

from app.config import settings
from app.exceptions import AssistantError, ValidationError
from core.models.assistant import AssistantRequestType

logger = logging.getLogger(__name__)


SYSTEM_PROMPTS: dict[AssistantRequestType, str] = {
    AssistantRequestType.SUGGEST_FREELANCERS: (
        "You are an AI assistant that matches tasks with the best freelancers "
        "based on skills and requirements."
    ),
    AssistantRequestType.SUGGEST_COLLABORATORS: (
        "You are an AI assistant that helps researchers find potential collaborators."
    ),
    AssistantRequestType.GRAMMAR_CHECK: (
        "You are an AI assistant that provides grammar and structure feedback "
        "for academic writing."
    ),
    AssistantRequestType.SUMMARIZE: (
        "You are an AI assistant that creates concise, academic summaries."
    ),
}

REQUIRED_KEYS: dict[AssistantRequestType, tuple[str, ...]] = {
    AssistantRequestType.SUGGEST_FREELANCERS: ("taskTitle", "taskDescription"),
    AssistantRequestType.SUGGEST_COLLABORATORS: ("researchTitle", "field"),
    AssistantRequestType.GRAMMAR_CHECK: ("text",),
    AssistantRequestType.SUMMARIZE: ("text",),
}


def build_user_prompt(request_type: AssistantRequestType, data: dict[str, Any]) -> str:
    """
    Build the user prompt for a request type.

    Raises:
        ValidationError: If a required key is missing or blank
    """
    for key in REQUIRED_KEYS[request_type]:
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"data.{key} is required for {request_type.value}", field=f"data.{key}")

    if request_type == AssistantRequestType.SUGGEST_FREELANCERS:
        skills = data.get("skills") or []
        if isinstance(skills, str):
            skills = [skills]
        return (
            f'Based on this task: "{data["taskTitle"]}" with description: '
            f'"{data["taskDescription"]}" and required skills: {", ".join(skills) or "none listed"}, '
            "suggest 3-5 key criteria to look for in a freelancer."
        )

    if request_type == AssistantRequestType.SUGGEST_COLLABORATORS:
        return (
            f'Based on this research topic: "{data["researchTitle"]}" in the field of '
            f'{data["field"]}, suggest 3-5 key areas of expertise to look for in '
            "potential collaborators."
        )

    text = data["text"]
    if len(text) > settings.ASSISTANT_MAX_INPUT_CHARS:
        raise ValidationError(
            f"Text is too long ({len(text)} characters, max {settings.ASSISTANT_MAX_INPUT_CHARS})",
            field="data.text",
        )

    if request_type == AssistantRequestType.GRAMMAR_CHECK:
        return f'Review this text and provide constructive feedback: "{text}"'

    return f'Summarize this text in 2-3 sentences: "{text}"'


class AssistantService:
    """
    Calls the language model for the writing and matching helpers.

    Attributes:
        model: Chat completions model (default from settings)
        temperature: Sampling temperature (default from settings)
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
    ):
        self.client = OpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.ASSISTANT_TEMPERATURE

    def run(self, request_type: AssistantRequestType | str, data: dict[str, Any]) -> str:
        """
        Run one assistant request and return the reply text.

        Raises:
            ValidationError: If the type is unknown or data is incomplete
            AssistantError: If the API call fails or returns nothing
        """
        try:
            request_type = AssistantRequestType(request_type)
        except ValueError:
            raise ValidationError(f"Invalid request type: {request_type}", field="type")

        messages = [
            {"role": "system", "content": SYSTEM_PROMPTS[request_type]},
            {"role": "user", "content": build_user_prompt(request_type, data)},
        ]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=messages,
            )
        except Exception as e:
            logger.error(f"Assistant {request_type.value} call failed: {e}")
            raise AssistantError(str(e), details={"model": self.model})

        result = response.choices[0].message.content if response.choices else None
        if not result:
            raise AssistantError("empty response", details={"model": self.model})

        logger.debug(f"Assistant {request_type.value} returned {len(result)} chars")
        return result
