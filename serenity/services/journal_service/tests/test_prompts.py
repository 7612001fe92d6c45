"""Tests for reflection prompt generation and its fallbacks."""
from unittest.mock import MagicMock

import pytest

from serenity.services.journal_service.prompts import FALLBACK_PROMPTS, ReflectionPromptGenerator
from serenity.services.llm_service import LLMGenerationError, LLMResponse
from serenity.shared.database import FirestoreConnection
from serenity.shared.utils import configure_pii_salt


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


@pytest.fixture
def db():
    db = MagicMock()
    mood = MagicMock(id="m1")
    mood.to_dict.return_value = {"mood": 3, "date": "2026-10-18", "note": "bad sleep", "sleep": 5}
    query = db.collection.return_value.where.return_value.order_by.return_value.limit.return_value
    query.stream.return_value = [mood]
    return db


def llm_returning(text):
    llm = MagicMock()
    llm.generate.return_value = LLMResponse(text=text, model="gemini-2.0-flash", provider="gemini")
    return llm


class TestReflectionPrompts:

    def test_generated(self, db):
        llm = llm_returning('```json\n["Why tired?", "What helps?", "Who can you lean on?"]\n```')
        result = ReflectionPromptGenerator(llm, FirestoreConnection.from_client(db)).generate("user_1")

        assert result.generated is True
        assert result.prompts == ["Why tired?", "What helps?", "Who can you lean on?"]
        assert result.mood_score == 3
        assert "Latest Mood: 3/10" in result.mood_context
        assert "Notes: bad sleep" in result.mood_context
        assert "Latest Mood: 3/10" in llm.generate.call_args[0][0]

    def test_no_llm(self, db):
        result = ReflectionPromptGenerator(None, FirestoreConnection.from_client(db)).generate("user_1")
        assert result.generated is False
        assert result.prompts == list(FALLBACK_PROMPTS)
        assert result.to_dict()["error"] == "AI not configured"

    def test_llm_failure(self, db):
        llm = MagicMock()
        llm.generate.side_effect = LLMGenerationError()
        result = ReflectionPromptGenerator(llm, FirestoreConnection.from_client(db)).generate("user_1")
        assert result.generated is False
        assert result.prompts == list(FALLBACK_PROMPTS)

    @pytest.mark.parametrize("reply", ['["only one?"]', "not json", '{"q": 1}', '["a", "b", 3]'])
    def test_malformed_reply(self, db, reply):
        result = ReflectionPromptGenerator(llm_returning(reply), FirestoreConnection.from_client(db)).generate("u")
        assert result.generated is False
        assert result.prompts == list(FALLBACK_PROMPTS)

    def test_store_failure(self, db):
        db.collection.return_value.where.side_effect = RuntimeError("down")
        llm = MagicMock()
        result = ReflectionPromptGenerator(llm, FirestoreConnection.from_client(db)).generate("user_1")
        assert result.to_dict() == {
            "prompts": list(FALLBACK_PROMPTS),
            "moodScore": None,
            "moodContext": "Unable to fetch mood data",
            "generated": False,
            "error": "AI generation failed, using fallback prompts",
        }
        llm.generate.assert_not_called()

    def test_no_mood_history(self, db):
        db.collection.return_value.where.return_value.order_by.return_value.limit.return_value.stream.return_value = []
        llm = llm_returning('["a?", "b?", "c?"]')
        result = ReflectionPromptGenerator(llm, FirestoreConnection.from_client(db)).generate("user_1")
        assert result.mood_score is None
        assert result.mood_context == "No recent mood data available."
        assert result.generated is True
