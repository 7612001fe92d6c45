"""Mood Service: daily mood log feeding chat context and activity picks."""

from .handler import create_mood_blueprint, parse_mood_entry
from .repository import MoodRepository

__all__ = ["create_mood_blueprint", "parse_mood_entry", "MoodRepository"]
