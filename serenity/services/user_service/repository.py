"""Profile storage and whole-account data removal."""
import logging
from typing import Dict

from google.cloud import firestore

from serenity.services.auth_service import AuthUser, IdentityProvider
from serenity.shared.database import BaseRepository, Document, FirestoreConnection
from serenity.shared.utils import hash_pii

logger = logging.getLogger(__name__)

CHAT_CONVERSATIONS = "chatConversations"
JOURNAL_ENTRIES = "journalEntries"

# Deleted in this order before the profile document and the identity record
USER_DATA_COLLECTIONS = (
    CHAT_CONVERSATIONS,
    "conversations",
    JOURNAL_ENTRIES,
    "moodEntries",
    "activities",
)


class UserRepository(BaseRepository):
    """Profile documents, keyed by uid."""

    def __init__(self, connection: FirestoreConnection):
        super().__init__(connection, "users")

    def get_profile(self, user: AuthUser) -> Document:
        """Stored profile, or the identity provider's view of the user."""
        profile = self.find_by_id(user.uid)
        if profile is None:
            return {
                "uid": user.uid,
                "email": user.email,
                "name": user.name,
                "createdAt": None,
                "updatedAt": None,
            }
        profile.pop("id", None)
        profile.setdefault("createdAt", None)
        profile.setdefault("updatedAt", None)
        return profile

    def save_profile(self, user: AuthUser, updates: Document) -> Document:
        """Apply updates, creating the profile document on first write.

        Returns:
            The stored profile after the write
        """
        doc_ref = self.collection.document(user.uid)
        stamped = {**updates, "updatedAt": firestore.SERVER_TIMESTAMP}

        if doc_ref.get().exists:
            doc_ref.update(stamped)
        else:
            doc_ref.set({
                "uid": user.uid,
                "email": user.email,
                **stamped,
                "createdAt": firestore.SERVER_TIMESTAMP,
            })

        logger.info(
            "PROFILE_UPDATED",
            extra={"user_id_hash": hash_pii(user.uid), "fields": sorted(updates)}
        )
        return self.get_profile(user)


class AccountDataManager:
    """Bulk removal of everything stored for one user."""

    def __init__(
        self,
        connection: FirestoreConnection,
        users: UserRepository,
        identity: IdentityProvider,
    ):
        self.users = users
        self.identity = identity
        self.repositories: Dict[str, BaseRepository] = {
            name: BaseRepository(connection, name) for name in USER_DATA_COLLECTIONS
        }

    def delete_collection(self, user_id: str, collection_name: str) -> int:
        """Delete the user's documents in one collection.

        Raises:
            BulkDeleteError: If a delete batch failed
        """
        return self.repositories[collection_name].delete_all_for_user(user_id)

    def delete_account(self, user_id: str) -> Dict[str, int]:
        """Remove all user data, the profile and the identity record.

        A failure stops the deletion before the identity record is
        removed, so the user can sign in and retry.

        Returns:
            Deleted document count per collection
        """
        user_id_hash = hash_pii(user_id)
        logger.warning("ACCOUNT_DELETION_STARTED", extra={"user_id_hash": user_id_hash})

        counts = {
            name: self.delete_collection(user_id, name) for name in USER_DATA_COLLECTIONS
        }
        self.users.delete(user_id)
        self.identity.delete_user(user_id)

        logger.warning(
            "ACCOUNT_DELETED",
            extra={"user_id_hash": user_id_hash, "deleted_counts": counts}
        )
        return counts
