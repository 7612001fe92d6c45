"""Repository for completed wellness activities."""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Set

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from serenity.shared.database import BaseRepository, Document, FirestoreConnection
from serenity.shared.utils import hash_pii, serialize_document

logger = logging.getLogger(__name__)

REPEAT_WINDOW_DAYS = 7


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


class ActivityRepository(BaseRepository):
    """Data access for the activities collection."""

    def __init__(self, connection: FirestoreConnection):
        super().__init__(connection, "activities")

    def ids_since(self, user_id: str, since: date) -> Set[str]:
        """Activity ids completed on or after since."""
        query = self.query_for_user(user_id).where(
            filter=FieldFilter("date", ">=", since.isoformat())
        )
        return {doc.to_dict().get("activityId") for doc in query.stream()}

    def ids_on(self, user_id: str, day: date) -> Set[str]:
        """Activity ids completed on day."""
        query = self.query_for_user(user_id).where(
            filter=FieldFilter("date", "==", day.isoformat())
        )
        return {doc.to_dict().get("activityId") for doc in query.stream()}

    def complete(self, user_id: str, activity_id: str, notes: str = "", day: Optional[date] = None) -> str:
        entry_id = self.add({
            "userId": user_id,
            "activityId": activity_id,
            "date": (day or today_utc()).isoformat(),
            "completedAt": firestore.SERVER_TIMESTAMP,
            "notes": notes,
            "createdAt": firestore.SERVER_TIMESTAMP,
        })
        logger.info(
            "ACTIVITY_COMPLETED",
            extra={"activity_id": activity_id, "user_id_hash": hash_pii(user_id)}
        )
        return entry_id

    def history(self, user_id: str, days: int) -> List[Document]:
        """Completions in the last days days, newest first."""
        start = datetime.now(timezone.utc) - timedelta(days=days)
        query = (
            self.query_for_user(user_id)
            .where(filter=FieldFilter("completedAt", ">=", start))
            .order_by("completedAt", direction=firestore.Query.DESCENDING)
        )
        return [serialize_document(doc.to_dict(), doc.id) for doc in query.stream()]
