"""Repository for journal entries."""
import logging
from typing import Any, Dict, List, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from serenity.shared.database import BaseRepository, Document, FirestoreConnection, NotFoundError
from serenity.shared.utils import hash_pii, serialize_document

logger = logging.getLogger(__name__)

# Query value of ?mood= to the mood scores it covers
MOOD_BUCKETS: Dict[str, List[int]] = {
    "low": [1, 2, 3, 4],
    "medium": [5, 6, 7],
    "high": [8, 9, 10],
}


class JournalRepository(BaseRepository):
    """Data access for the journalEntries collection."""

    def __init__(self, connection: FirestoreConnection):
        super().__init__(connection, "journalEntries")

    def list_entries(
        self,
        user_id: str,
        limit: int = 10,
        tag: Optional[str] = None,
        mood: Optional[str] = None,
    ) -> List[Document]:
        """A user's entries, newest first.

        Args:
            user_id: Owner
            limit: Maximum entries returned
            tag: Only entries carrying this tag
            mood: low, medium or high; unknown values are ignored
        """
        query = self.query_for_user(user_id)
        if tag:
            query = query.where(filter=FieldFilter("tags", "array_contains", tag))
        bucket = MOOD_BUCKETS.get((mood or "").lower())
        if bucket:
            query = query.where(filter=FieldFilter("moodScore", "in", bucket))

        query = query.order_by("createdAt", direction=firestore.Query.DESCENDING).limit(limit)
        return [serialize_document(doc.to_dict(), doc.id) for doc in query.stream()]

    def create_entry(self, user_id: str, fields: Dict[str, Any]) -> str:
        entry_id = self.add({
            **fields,
            "userId": user_id,
            "createdAt": firestore.SERVER_TIMESTAMP,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        })
        logger.info(
            "JOURNAL_ENTRY_CREATED",
            extra={"entry_id": entry_id, "user_id_hash": hash_pii(user_id)}
        )
        return entry_id

    def update_entry(self, entry_id: str, user_id: str, updates: Dict[str, Any]) -> Document:
        """Apply updates after the ownership check.

        Raises:
            NotFoundError: If the entry does not exist
            OwnershipError: If it belongs to someone else
        """
        self.get_owned(entry_id, user_id)
        self.update(entry_id, {**updates, "updatedAt": firestore.SERVER_TIMESTAMP})

        updated = self.find_by_id(entry_id)
        if updated is None:
            raise NotFoundError("Journal entry not found")
        return updated

    def delete_entry(self, entry_id: str, user_id: str) -> None:
        self.get_owned(entry_id, user_id)
        self.delete(entry_id)
        logger.info(
            "JOURNAL_ENTRY_DELETED",
            extra={"entry_id": entry_id, "user_id_hash": hash_pii(user_id)}
        )
