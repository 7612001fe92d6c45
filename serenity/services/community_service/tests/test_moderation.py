"""Tests for ContentModerator - fail-open moderation."""
from unittest.mock import MagicMock

import pytest

from serenity.services.community_service.moderation import ContentModerator, ModerationResult
from serenity.services.llm_service import LLMGenerationError, LLMResponse


def llm_returning(text):
    llm = MagicMock()
    llm.generate.return_value = LLMResponse(text=text, model="gemini-2.0-flash", provider="gemini")
    return llm


class TestModerate:

    def test_safe(self):
        moderator = ContentModerator(llm_returning('{"safe": true, "reason": "", "flaggedContent": ""}'))
        assert moderator.moderate("Feeling anxious about tomorrow").safe is True

    def test_unsafe_with_code_fence(self):
        reply = '```json\n{"safe": false, "reason": "Harassment", "flaggedContent": "you idiot"}\n```'
        result = ContentModerator(llm_returning(reply)).moderate("you idiot")
        assert result == ModerationResult(safe=False, reason="Harassment", flagged_content="you idiot")

    def test_low_temperature(self):
        llm = llm_returning('{"safe": true}')
        ContentModerator(llm).moderate("hello")
        kwargs = llm.generate.call_args[1]
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 200

    def test_service_failure_fails_open(self):
        llm = MagicMock()
        llm.generate.side_effect = LLMGenerationError()
        result = ContentModerator(llm).moderate("hello")
        assert result.safe is True
        assert result.error == "Moderation service temporarily unavailable"

    @pytest.mark.parametrize("reply", ["I think it is fine", "[true]"])
    def test_unparseable_reply_fails_open(self, reply):
        result = ContentModerator(llm_returning(reply)).moderate("hello")
        assert result.safe is True
        assert result.error == "Moderation response parsing failed"

    def test_non_boolean_safe_is_unsafe(self):
        result = ContentModerator(llm_returning('{"safe": "yes"}')).moderate("hello")
        assert result.safe is False

    def test_disabled(self):
        llm = MagicMock()
        assert ContentModerator(llm, enabled=False).moderate("anything").safe is True
        llm.generate.assert_not_called()

    def test_no_llm(self):
        assert ContentModerator(None).moderate("anything").safe is True


class TestRejectionPayload:

    def test_with_flagged_content(self):
        payload = ModerationResult(False, "Offensive language", "slur").rejection_payload("comment")
        assert payload["error"] == "Content not allowed"
        assert payload["flaggedContent"] == "slur"
        assert payload["message"] == (
            'Your comment contains content that violates our community guidelines: "slur". '
            "Offensive language"
        )

    def test_without_flagged_content(self):
        payload = ModerationResult(False, "Spam").rejection_payload()
        assert payload["message"].startswith("Your post contains content that violates our community guidelines.")
