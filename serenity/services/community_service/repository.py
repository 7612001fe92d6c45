"""Repository for community posts and their comment trees.

Likes are a transactional read-modify-write so concurrent likes are
never lost. Comment edits are plain read-modify-write on the post
document; concurrent comment edits on one post can lose updates.
"""
import logging
from typing import List, Optional

from google.cloud import firestore

from serenity.shared.database import (
    BaseRepository,
    Document,
    FirestoreConnection,
    NotFoundError,
    OwnershipError,
)
from serenity.shared.models import (
    Comment,
    comments_from_documents,
    comments_to_documents,
    find_comment,
    insert_reply,
    remove_comment,
)
from serenity.shared.utils import hash_pii, serialize_document

logger = logging.getLogger(__name__)


def apply_like(transaction, post_ref, user_id: str) -> bool:
    """Add user_id to the post's likes inside a transaction.

    Returns:
        True if the like was added, False if the user had already liked

    Raises:
        NotFoundError: If the post does not exist
    """
    snapshot = post_ref.get(transaction=transaction)
    if not snapshot.exists:
        raise NotFoundError("Post not found")

    likes = list((snapshot.to_dict() or {}).get("likes") or [])
    if user_id in likes:
        return False

    likes.append(user_id)
    transaction.update(post_ref, {"likes": likes})
    return True


class PostRepository(BaseRepository):
    """Data access for the posts collection."""

    def __init__(self, connection: FirestoreConnection):
        super().__init__(connection, "posts")

    def list_posts(self, limit: int, offset: int = 0) -> List[Document]:
        """Newest posts first."""
        query = (
            self.collection
            .order_by("timestamp", direction=firestore.Query.DESCENDING)
            .offset(offset)
            .limit(limit)
        )
        return [serialize_document(doc.to_dict(), doc.id) for doc in query.stream()]

    def get_post(self, post_id: str) -> Document:
        """Raises NotFoundError if the post does not exist."""
        post = self.find_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def like(self, post_id: str, user_id: str) -> bool:
        """Idempotently like a post.

        Returns:
            True if this call added the like
        """
        post_ref = self.collection.document(post_id)
        transaction = self.connection.db.transaction()
        added = firestore.transactional(apply_like)(transaction, post_ref, user_id)

        logger.info(
            "POST_LIKED",
            extra={"post_id": post_id, "user_id_hash": hash_pii(user_id), "added": added}
        )
        return added

    def add_comment(self, post_id: str, comment: Comment, parent_id: Optional[str] = None) -> Document:
        """Attach a comment at top level or under parent_id at any depth.

        Returns:
            The post with its updated comments

        Raises:
            NotFoundError: If the post or the parent comment is missing
        """
        post = self.get_post(post_id)
        comments, inserted = insert_reply(comments_from_documents(post.get("comments")), parent_id, comment)
        if not inserted:
            raise NotFoundError("Parent comment not found")

        return self._save_comments(post, comments)

    def delete_comment(self, post_id: str, comment_id: str, user_id: str) -> Document:
        """Remove a comment, at any depth, together with its replies.

        Raises:
            NotFoundError: If the post or comment is missing
            OwnershipError: If the caller did not write the comment
        """
        post = self.get_post(post_id)
        comments = comments_from_documents(post.get("comments"))

        target = find_comment(comments, comment_id)
        if target is None:
            raise NotFoundError("Comment not found")
        if target.user_id != user_id:
            self._log_denied(post_id, user_id)
            raise OwnershipError("Not your comment.")

        updated, _ = remove_comment(comments, comment_id)
        return self._save_comments(post, updated)

    def delete_reply(self, post_id: str, comment_id: str, reply_id: str, user_id: str) -> Document:
        """Remove a direct reply of comment_id.

        Raises:
            NotFoundError: If the post, comment or reply is missing
            OwnershipError: If the caller did not write the reply
        """
        post = self.get_post(post_id)
        comments = comments_from_documents(post.get("comments"))

        parent = find_comment(comments, comment_id)
        if parent is None:
            raise NotFoundError("Comment not found")
        reply = next((r for r in parent.replies if r.id == reply_id), None)
        if reply is None:
            raise NotFoundError("Reply not found")
        if reply.user_id != user_id:
            self._log_denied(post_id, user_id)
            raise OwnershipError("Not your reply.")

        updated, _ = remove_comment(comments, reply_id)
        return self._save_comments(post, updated)

    def delete_post(self, post_id: str, user_id: str) -> None:
        """Raises NotFoundError or OwnershipError as for comments."""
        post = self.get_post(post_id)
        if post.get("userId") != user_id:
            self._log_denied(post_id, user_id)
            raise OwnershipError("Not your post.")
        self.delete(post_id)

    def _save_comments(self, post: Document, comments: List[Comment]) -> Document:
        documents = comments_to_documents(comments)
        self.update(post["id"], {"comments": documents})
        return {**post, "comments": documents}

    def _log_denied(self, post_id: str, user_id: str) -> None:
        logger.warning(
            "POST_OWNERSHIP_DENIED",
            extra={"post_id": post_id, "user_id_hash": hash_pii(user_id)}
        )
