"""Document store access for serenity services.

Provides the Firestore connection handle and the repository base class
shared by every collection.
"""

from .connection import (
    FirestoreConnection,
    StoreUnavailableError,
)
from .repository import (
    BaseRepository,
    Document,
    RepositoryError,
    NotFoundError,
    OwnershipError,
    BulkDeleteError,
    MAX_BATCH_SIZE,
    chunked,
)

__all__ = [
    "FirestoreConnection",
    "StoreUnavailableError",
    "BaseRepository",
    "Document",
    "RepositoryError",
    "NotFoundError",
    "OwnershipError",
    "BulkDeleteError",
    "MAX_BATCH_SIZE",
    "chunked",
]
