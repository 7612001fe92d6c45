"""Context assembler: personalisation for the next LLM call.

Reads the user's profile document and their three most recent mood
entries. Context is an enhancement, never a requirement: every failure
degrades to UserContext.default().
"""
import logging

from serenity.shared.database import BaseRepository, FirestoreConnection
from serenity.shared.models import DEFAULT_DISPLAY_NAME, UserContext
from serenity.shared.utils import ANONYMOUS_USER, hash_pii

logger = logging.getLogger(__name__)

RECENT_MOOD_LIMIT = 3


def format_mood_entry(entry: dict) -> str:
    """One mood entry as a prompt line, e.g. "2026-10-18: 6/10 - tired"."""
    line = f"{entry.get('date', 'unknown date')}: {entry.get('mood', '?')}/10"
    note = entry.get("note")
    if note:
        line += f" - {note}"
    return line


class ContextAssembler:
    """Builds a UserContext from the users and moodEntries collections."""

    def __init__(self, connection: FirestoreConnection):
        self.users = BaseRepository(connection, "users")
        self.moods = BaseRepository(connection, "moodEntries")

    def assemble(self, user_id: str) -> UserContext:
        """Fetch context for user_id.

        Anonymous callers get the default context without a store read.
        Never raises.
        """
        if not user_id or user_id == ANONYMOUS_USER:
            return UserContext.default()

        try:
            profile = self.users.find_by_id(user_id) or {}
            mood_entries = self.moods.find_for_user(
                user_id, order_by="date", limit=RECENT_MOOD_LIMIT
            )
        except Exception as e:
            logger.error(
                "USER_CONTEXT_FETCH_FAILED",
                extra={"user_id_hash": hash_pii(user_id), "error": str(e)}
            )
            return UserContext.default()

        context = UserContext(
            display_name=profile.get("name") or DEFAULT_DISPLAY_NAME,
            recent_moods=tuple(format_mood_entry(m) for m in mood_entries[:RECENT_MOOD_LIMIT]),
            wellness_summary=profile.get("wellnessSummary") or "",
        )

        logger.info(
            "USER_CONTEXT_ASSEMBLED",
            extra={
                "user_id_hash": hash_pii(user_id),
                "mood_count": len(context.recent_moods),
                "has_summary": bool(context.wellness_summary),
            }
        )
        return context
