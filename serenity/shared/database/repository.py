"""Base repository over one document-store collection.

Provides the common lookups, owner checks and the batched bulk delete
shared by every user-data collection.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Tuple

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from serenity.shared.utils import hash_pii, serialize_document
from .connection import FirestoreConnection

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

# Store limit for operations in one write batch
MAX_BATCH_SIZE = 500


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


class NotFoundError(RepositoryError):
    """Document not found in the store."""
    pass


class OwnershipError(RepositoryError):
    """Caller does not own the document it is acting on."""
    pass


class BulkDeleteError(RepositoryError):
    """One or more delete batches failed; the others stay committed."""

    def __init__(self, message: str, deleted_count: int, failed_batches: int):
        super().__init__(message)
        self.deleted_count = deleted_count
        self.failed_batches = failed_batches


def chunked(items: List[Any], size: int) -> List[List[Any]]:
    """Split items into consecutive chunks of at most size elements."""
    if size <= 0:
        raise ValueError("Chunk size must be positive")
    return [items[i:i + size] for i in range(0, len(items), size)]


class BaseRepository:
    """Repository bound to a single collection.

    Subclasses add collection-specific queries while inheriting:
    - Connection handling
    - Owner-scoped lookups
    - Batched bulk deletes
    """

    def __init__(self, connection: FirestoreConnection, collection_name: str):
        """Initialize repository.

        Args:
            connection: Store connection handle
            collection_name: Name of the collection
        """
        self.connection = connection
        self.collection_name = collection_name

        logger.info(
            "REPOSITORY_INITIALIZED",
            extra={"collection": collection_name}
        )

    @property
    def collection(self):
        return self.connection.db.collection(self.collection_name)

    def find_by_id(self, doc_id: str) -> Optional[Document]:
        """Find a document by id.

        Returns:
            Serialized document with "id", or None if missing
        """
        snapshot = self.collection.document(doc_id).get()
        if not snapshot.exists:
            return None
        return serialize_document(snapshot.to_dict(), snapshot.id)

    def get_owned(self, doc_id: str, user_id: str) -> Document:
        """Fetch a document and verify it belongs to user_id.

        Raises:
            NotFoundError: If the document does not exist
            OwnershipError: If it belongs to someone else
        """
        document = self.find_by_id(doc_id)
        if document is None:
            raise NotFoundError(f"{self.collection_name}/{doc_id} not found")
        if document.get("userId") != user_id:
            logger.warning(
                "OWNERSHIP_CHECK_FAILED",
                extra={
                    "collection": self.collection_name,
                    "doc_id": doc_id,
                    "user_id_hash": hash_pii(user_id),
                }
            )
            raise OwnershipError(f"{self.collection_name}/{doc_id} is not owned by caller")
        return document

    def add(self, data: Document) -> str:
        """Insert a document with a generated id.

        Returns:
            The new document id
        """
        _, doc_ref = self.collection.add(data)
        return doc_ref.id

    def update(self, doc_id: str, updates: Document) -> None:
        self.collection.document(doc_id).update(updates)

    def merge(self, doc_id: str, data: Document) -> None:
        """Create or partially overwrite a document, keeping other fields."""
        self.collection.document(doc_id).set(data, merge=True)

    def delete(self, doc_id: str) -> None:
        self.collection.document(doc_id).delete()

    def query_for_user(self, user_id: str):
        """Base query restricted to one user's documents."""
        return self.collection.where(filter=FieldFilter("userId", "==", user_id))

    def find_for_user(
        self,
        user_id: str,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """List a user's documents, newest first when order_by is given."""
        query = self.query_for_user(user_id)
        if order_by:
            query = query.order_by(order_by, direction=firestore.Query.DESCENDING)
        if limit:
            query = query.limit(limit)
        return [serialize_document(doc.to_dict(), doc.id) for doc in query.stream()]

    def delete_all_for_user(self, user_id: str, batch_size: int = MAX_BATCH_SIZE) -> int:
        """Delete every document of user_id in this collection.

        Writes are chunked into batches of at most batch_size deletes.
        All batches are committed concurrently and awaited jointly; a
        failed batch does not roll back the others.

        Returns:
            Number of documents deleted

        Raises:
            BulkDeleteError: If any batch failed to commit
        """
        refs = [doc.reference for doc in self.query_for_user(user_id).stream()]
        if not refs:
            return 0

        chunks = chunked(refs, batch_size)
        batches: List[Tuple[Any, int]] = []
        for chunk in chunks:
            batch = self.connection.db.batch()
            for ref in chunk:
                batch.delete(ref)
            batches.append((batch, len(chunk)))

        with ThreadPoolExecutor(max_workers=min(len(batches), 8)) as executor:
            futures = {executor.submit(batch.commit): size for batch, size in batches}
            wait(futures)

        deleted = 0
        failed = 0
        for future, size in futures.items():
            if future.exception() is None:
                deleted += size
            else:
                failed += 1
                logger.error(
                    "BULK_DELETE_BATCH_FAILED",
                    extra={
                        "collection": self.collection_name,
                        "batch_size": size,
                        "error": str(future.exception()),
                    }
                )

        logger.info(
            "BULK_DELETE_COMPLETED",
            extra={
                "collection": self.collection_name,
                "user_id_hash": hash_pii(user_id),
                "deleted_count": deleted,
                "batch_count": len(batches),
                "failed_batches": failed,
            }
        )

        if failed:
            raise BulkDeleteError(
                f"{failed} of {len(batches)} delete batches failed",
                deleted_count=deleted,
                failed_batches=failed,
            )
        return deleted
