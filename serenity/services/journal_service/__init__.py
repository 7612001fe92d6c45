"""Journal Service: private journal entries and reflection prompts."""

from .handler import create_journal_blueprint
from .prompts import FALLBACK_PROMPTS, ReflectionPromptGenerator, ReflectionPrompts
from .repository import MOOD_BUCKETS, JournalRepository

__all__ = [
    "create_journal_blueprint",
    "FALLBACK_PROMPTS",
    "ReflectionPromptGenerator",
    "ReflectionPrompts",
    "MOOD_BUCKETS",
    "JournalRepository",
]
