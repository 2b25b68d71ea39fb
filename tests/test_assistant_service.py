# =============================================================================
# tests/test_assistant_service.py - AI Assistant Tests
# =============================================================================
# Tests for prompt building and the OpenAI call. The OpenAI client is
# mocked; no network calls are made.
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest

from app.exceptions import AssistantError, ValidationError
from core.models.assistant import AssistantRequestType
from core.services.assistant_service import (
    SYSTEM_PROMPTS,
    AssistantService,
    build_user_prompt,
)


def _completion(content):
    """Build a chat.completions response with one choice."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


@pytest.fixture
def openai_client():
    """Patch the OpenAI constructor and return the mocked client."""
    with patch("core.services.assistant_service.OpenAI") as mock_openai:
        client = MagicMock()
        mock_openai.return_value = client
        yield client


# =============================================================================
# Prompt Building
# =============================================================================

class TestBuildUserPrompt:
    """Tests for build_user_prompt."""

    def test_every_type_has_system_prompt(self):
        assert set(SYSTEM_PROMPTS) == set(AssistantRequestType)

    def test_suggest_freelancers(self):
        prompt = build_user_prompt(
            AssistantRequestType.SUGGEST_FREELANCERS,
            {"taskTitle": "Essay", "taskDescription": "1500 words", "skills": ["writing", "policy"]},
        )

        assert '"Essay"' in prompt
        assert "writing, policy" in prompt

    def test_suggest_freelancers_without_skills(self):
        prompt = build_user_prompt(
            AssistantRequestType.SUGGEST_FREELANCERS,
            {"taskTitle": "Essay", "taskDescription": "1500 words"},
        )

        assert "none listed" in prompt

    def test_suggest_collaborators(self):
        prompt = build_user_prompt(
            AssistantRequestType.SUGGEST_COLLABORATORS,
            {"researchTitle": "Soil microbes", "field": "Biology"},
        )

        assert "Soil microbes" in prompt
        assert "Biology" in prompt

    def test_summarize(self):
        prompt = build_user_prompt(AssistantRequestType.SUMMARIZE, {"text": "Long text"})

        assert prompt.startswith("Summarize")

    @pytest.mark.parametrize("request_type,data", [
        (AssistantRequestType.SUMMARIZE, {}),
        (AssistantRequestType.GRAMMAR_CHECK, {"text": "   "}),
        (AssistantRequestType.SUGGEST_FREELANCERS, {"taskTitle": "Essay"}),
        (AssistantRequestType.SUGGEST_COLLABORATORS, {"field": "Biology"}),
    ])
    def test_missing_data(self, request_type, data):
        with pytest.raises(ValidationError):
            build_user_prompt(request_type, data)

    def test_text_too_long(self):
        with patch("core.services.assistant_service.settings") as mock_settings:
            mock_settings.ASSISTANT_MAX_INPUT_CHARS = 10

            with pytest.raises(ValidationError):
                build_user_prompt(AssistantRequestType.GRAMMAR_CHECK, {"text": "x" * 11})


# =============================================================================
# AssistantService.run
# =============================================================================

class TestAssistantRun:
    """Tests for AssistantService.run."""

    def test_returns_reply(self, openai_client):
        openai_client.chat.completions.create.return_value = _completion("A short summary.")

        result = AssistantService(model="gpt-test").run("summarize", {"text": "Long text"})

        assert result == "A short summary."
        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["messages"][0]["role"] == "system"
        assert kwargs["messages"][0]["content"] == SYSTEM_PROMPTS[AssistantRequestType.SUMMARIZE]
        assert kwargs["messages"][1]["role"] == "user"

    def test_invalid_type(self, openai_client):
        with pytest.raises(ValidationError):
            AssistantService().run("write_my_essay", {"text": "Hi"})

        openai_client.chat.completions.create.assert_not_called()

    def test_api_failure(self, openai_client):
        openai_client.chat.completions.create.side_effect = RuntimeError("rate limited")

        with pytest.raises(AssistantError) as exc_info:
            AssistantService().run("grammar_check", {"text": "Their going"})

        assert exc_info.value.status_code == 502

    def test_empty_reply(self, openai_client):
        openai_client.chat.completions.create.return_value = _completion("")

        with pytest.raises(AssistantError):
            AssistantService().run("summarize", {"text": "Long text"})
