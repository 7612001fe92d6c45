"""Conversation logger: one append-only record per exchange.

Best-effort. A failed write is logged and dropped; it never changes the
reply the user receives.
"""
import logging

from serenity.shared.database import BaseRepository, FirestoreConnection
from serenity.shared.models import ConversationRecord
from serenity.shared.utils import hash_pii

logger = logging.getLogger(__name__)


class ConversationLogger:
    """Appends ConversationRecord documents to the conversations collection."""

    COLLECTION = "conversations"

    def __init__(self, connection: FirestoreConnection):
        self.repository = BaseRepository(connection, self.COLLECTION)

    def log(self, record: ConversationRecord) -> bool:
        """Persist one exchange.

        Returns:
            True if the record was written
        """
        try:
            doc_id = self.repository.add(record.to_document())
        except Exception as e:
            logger.error(
                "CONVERSATION_LOG_FAILED",
                extra={
                    "user_id_hash": hash_pii(record.user_id),
                    "crisis": record.crisis,
                    "error": str(e),
                }
            )
            return False

        logger.info(
            "CONVERSATION_LOGGED",
            extra={
                "doc_id": doc_id,
                "user_id_hash": hash_pii(record.user_id),
                "crisis": record.crisis,
            }
        )
        return True
