"""Repository for mood log entries."""
import logging
from typing import Any, Dict, List

from google.cloud import firestore

from serenity.shared.database import BaseRepository, Document, FirestoreConnection
from serenity.shared.utils import hash_pii

logger = logging.getLogger(__name__)


class MoodRepository(BaseRepository):
    """Data access for the moodEntries collection."""

    def __init__(self, connection: FirestoreConnection):
        super().__init__(connection, "moodEntries")

    def record(self, user_id: str, fields: Dict[str, Any]) -> str:
        entry_id = self.add({
            **fields,
            "userId": user_id,
            "timestamp": firestore.SERVER_TIMESTAMP,
        })
        logger.info(
            "MOOD_RECORDED",
            extra={"entry_id": entry_id, "user_id_hash": hash_pii(user_id)}
        )
        return entry_id

    def recent(self, user_id: str, limit: int) -> List[Document]:
        """Most recent entries first."""
        return self.find_for_user(user_id, order_by="timestamp", limit=limit)
