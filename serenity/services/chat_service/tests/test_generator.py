"""Tests for ResponseGenerator prompt assembly and button annotation."""
from unittest.mock import MagicMock

import pytest

from serenity.services.chat_service.generator import ResponseGenerator
from serenity.services.llm_service import LLMGenerationError, LLMResponse
from serenity.shared.models import Message, Role, UserContext


def llm_returning(text):
    llm = MagicMock()
    llm.generate.return_value = LLMResponse(text=text, model="gemini-2.5-flash", provider="gemini")
    return llm


class TestGenerate:

    def test_prompt_carries_context_and_history(self):
        llm = llm_returning("I hear you.")
        generator = ResponseGenerator(llm, temperature=0.8, max_tokens=512)
        context = UserContext(
            display_name="Sam",
            recent_moods=("2026-10-18: 4/10 - tired",),
            wellness_summary="Sam is juggling work and study.",
        )
        messages = [
            Message(Role.USER, "hi"),
            Message(Role.ASSISTANT, "hey"),
            Message(Role.USER, "long week"),
        ]

        reply = generator.generate(messages, context)

        assert reply.text == "I hear you."
        args, kwargs = llm.generate.call_args
        assert args[0] == "long week"
        assert kwargs["history"] == messages[:2]
        assert kwargs["temperature"] == 0.8
        assert kwargs["max_tokens"] == 512
        system_prompt = kwargs["system_prompt"]
        assert "Name: Sam" in system_prompt
        assert "2026-10-18: 4/10 - tired" in system_prompt
        assert "Sam is juggling work and study." in system_prompt
        assert "SAFETY OVERRIDE" in system_prompt

    def test_default_context_placeholders(self):
        llm = llm_returning("Hello!")
        ResponseGenerator(llm).generate([Message(Role.USER, "hi")], UserContext.default())
        system_prompt = llm.generate.call_args[1]["system_prompt"]
        assert "Name: Friend" in system_prompt
        assert "No recent data" in system_prompt
        assert "No historical context available" in system_prompt

    def test_must_end_with_user_turn(self):
        generator = ResponseGenerator(llm_returning("x"))
        with pytest.raises(ValueError):
            generator.generate([Message(Role.ASSISTANT, "hey")], UserContext.default())
        with pytest.raises(ValueError):
            generator.generate([], UserContext.default())

    def test_failure_surfaces_as_generation_error(self):
        llm = MagicMock()
        llm.generate.side_effect = LLMGenerationError()
        generator = ResponseGenerator(llm)
        with pytest.raises(LLMGenerationError, match="Failed to generate response"):
            generator.generate([Message(Role.USER, "hi")], UserContext.default())
        assert llm.generate.call_count == 1


class TestActivityButtons:

    @pytest.mark.parametrize("reply", [
        "Maybe a short breathing break would help?",
        "Writing in your Journal tonight could help.",
        "Want to try something small?",
        "A meditation might settle things.",
    ])
    def test_trigger_adds_button(self, reply):
        generator = ResponseGenerator(llm_returning(reply), activities_route="/wellness/activities")
        result = generator.generate([Message(Role.USER, "hi")], UserContext.default())
        assert result.buttons == [{
            "label": "Explore Activities",
            "url": "/wellness/activities",
            "icon": "🎯",
        }]

    def test_no_trigger_no_button(self):
        generator = ResponseGenerator(llm_returning("That sounds hard. How are you holding up?"))
        result = generator.generate([Message(Role.USER, "hi")], UserContext.default())
        assert result.buttons is None
