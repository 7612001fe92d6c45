"""Personalised journal reflection questions.

Generated by the LLM from the user's latest mood entry. Any failure
(store, model, malformed reply) falls back to three fixed questions;
the endpoint never errors because of this feature.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from serenity.services.llm_service import BaseLLM, parse_json_reply
from serenity.shared.database import BaseRepository, FirestoreConnection
from serenity.shared.utils import hash_pii

logger = logging.getLogger(__name__)

FALLBACK_PROMPTS = (
    "What emotions are you feeling most strongly right now?",
    "What's one thing that brought you peace or comfort recently?",
    "If you could tell your future self something about today, what would it be?",
)

NO_MOOD_CONTEXT = "No recent mood data available."
PROMPT_COUNT = 3

REFLECTION_PROMPT = """You are a compassionate mental wellness journal assistant. Based on the user's recent mood data, generate 3 thoughtful, personalized reflection questions that would help them explore their feelings deeper.

USER'S RECENT MOOD DATA:
{mood_context}

REQUIREMENTS:
1. Generate exactly 3 reflection questions
2. Make them personal and relevant to their mood score and notes
3. Questions should be open-ended and thought-provoking
4. Use a warm, supportive tone
5. If mood is low (1-4), focus on self-compassion and gentle exploration
6. If mood is medium (5-7), focus on understanding patterns and context
7. If mood is high (8-10), focus on gratitude and maintaining positive practices

Return ONLY a JSON array of 3 strings (the questions), nothing else.
Example format: ["Question 1?", "Question 2?", "Question 3?"]"""


@dataclass
class ReflectionPrompts:
    prompts: List[str] = field(default_factory=lambda: list(FALLBACK_PROMPTS))
    mood_score: Optional[int] = None
    mood_context: str = NO_MOOD_CONTEXT
    generated: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "prompts": self.prompts,
            "moodScore": self.mood_score,
            "moodContext": self.mood_context,
            "generated": self.generated,
        }
        if self.error:
            result["error"] = self.error
        return result


def describe_mood(entry: Dict[str, Any]) -> str:
    return (
        f"Latest Mood: {entry.get('mood')}/10\n"
        f"Date: {entry.get('date')}\n"
        f"Notes: {entry.get('note') or 'No additional notes'}\n"
        f"Energy: {entry.get('energy') or 'N/A'}\n"
        f"Stress: {entry.get('stress') or 'N/A'}\n"
        f"Sleep: {entry.get('sleep') or 'N/A'} hours"
    )


def _valid_questions(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) == PROMPT_COUNT
        and all(isinstance(q, str) and q.strip() for q in value)
    )


class ReflectionPromptGenerator:
    """Builds reflection questions from the latest mood entry."""

    def __init__(self, llm: Optional[BaseLLM], connection: FirestoreConnection):
        self.llm = llm
        self.moods = BaseRepository(connection, "moodEntries")

    def generate(self, user_id: str) -> ReflectionPrompts:
        """Never raises."""
        try:
            latest = self.moods.find_for_user(user_id, order_by="timestamp", limit=1)
        except Exception as e:
            logger.error(
                "REFLECTION_MOOD_FETCH_FAILED",
                extra={"user_id_hash": hash_pii(user_id), "error": str(e)}
            )
            return ReflectionPrompts(
                mood_context="Unable to fetch mood data",
                error="AI generation failed, using fallback prompts",
            )

        result = ReflectionPrompts()
        if latest:
            result.mood_score = latest[0].get("mood")
            result.mood_context = describe_mood(latest[0])

        if self.llm is None:
            result.error = "AI not configured"
            return result

        try:
            response = self.llm.generate(
                REFLECTION_PROMPT.format(mood_context=result.mood_context),
                temperature=0.8,
                max_tokens=300,
            )
            questions = parse_json_reply(response.text)
        except Exception as e:
            logger.error(
                "REFLECTION_PROMPTS_FAILED",
                extra={"user_id_hash": hash_pii(user_id), "error": str(e)}
            )
            result.error = "AI generation failed, using fallback prompts"
            return result

        if not _valid_questions(questions):
            logger.warning("REFLECTION_PROMPTS_MALFORMED", extra={"user_id_hash": hash_pii(user_id)})
            result.error = "AI generation failed, using fallback prompts"
            return result

        result.prompts = [q.strip() for q in questions]
        result.generated = True
        return result
