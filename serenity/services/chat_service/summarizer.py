"""Wellness summarizer: rolling long-term digest per user.

Runs detached from the request on the BackgroundTasks pool. Each job
reads the last few turns plus the previous summary and overwrites
users/{uid}.wellnessSummary. Concurrent jobs for one user race and the
last write wins.
"""
import logging
from concurrent.futures import Future
from typing import Optional, Sequence

from google.cloud import firestore

from serenity.services.llm_service import BaseLLM
from serenity.shared.database import BaseRepository, FirestoreConnection
from serenity.shared.models import Message
from serenity.shared.utils import ANONYMOUS_USER, BackgroundTasks, hash_pii
from .prompts import build_summary_prompt

logger = logging.getLogger(__name__)

SUMMARY_TURNS = 6
SUMMARY_TEMPERATURE = 0.3
SUMMARY_MAX_TOKENS = 300
# Per-turn and prior-summary caps keep the prompt under the model prompt limit
SUMMARY_TURN_CHARS = 1500
SUMMARY_EXISTING_CHARS = 2000


class WellnessSummarizer:
    """Schedules and performs wellness summary refreshes."""

    def __init__(
        self,
        llm: BaseLLM,
        connection: FirestoreConnection,
        tasks: BackgroundTasks,
        turns: int = SUMMARY_TURNS,
    ):
        self.llm = llm
        self.users = BaseRepository(connection, "users")
        self.tasks = tasks
        self.turns = turns

    def schedule(
        self,
        user_id: str,
        transcript: Sequence[Message],
        existing_summary: str,
    ) -> Optional[Future]:
        """Queue a refresh and return immediately.

        Anonymous users have no profile document and are skipped.

        Returns:
            The job's Future, or None if nothing was queued
        """
        if not user_id or user_id == ANONYMOUS_USER:
            return None

        try:
            return self.tasks.submit(
                "wellness_summary",
                self.refresh,
                user_id,
                list(transcript),
                existing_summary,
            )
        except RuntimeError as e:
            # Pool already shut down
            logger.error(
                "SUMMARY_SCHEDULE_FAILED",
                extra={"user_id_hash": hash_pii(user_id), "error": str(e)}
            )
            return None

    def refresh(self, user_id: str, transcript: Sequence[Message], existing_summary: str) -> str:
        """Regenerate and store the summary.

        Raises:
            LLMGenerationError: If the completion call fails
            Exception: Store errors propagate to the task pool, which logs them
        """
        recent = [
            Message(m.role, m.content[:SUMMARY_TURN_CHARS])
            for m in list(transcript)[-self.turns:]
        ]
        response = self.llm.generate(
            build_summary_prompt(recent, (existing_summary or "")[:SUMMARY_EXISTING_CHARS]),
            temperature=SUMMARY_TEMPERATURE,
            max_tokens=SUMMARY_MAX_TOKENS,
        )
        summary = response.text.strip()

        self.users.merge(user_id, {
            "wellnessSummary": summary,
            "wellnessSummaryUpdatedAt": firestore.SERVER_TIMESTAMP,
        })

        logger.info(
            "WELLNESS_SUMMARY_UPDATED",
            extra={
                "user_id_hash": hash_pii(user_id),
                "turns": len(recent),
                "word_count": len(summary.split()),
            }
        )
        return summary
