"""Community post comment trees.

Comments nest to any depth through their replies. All tree operations
are copy-on-write: they return new lists and leave their input intact,
so a rejected operation (e.g. ownership check) can never leave a
half-edited tree behind.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Comment:
    """A comment or reply on a community post."""
    id: str
    author: str
    content: str
    timestamp: str
    user_id: str
    is_anonymous: bool = False
    replies: Tuple["Comment", ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Comment":
        return cls(
            id=str(data.get("id", "")),
            author=data.get("author", "User"),
            content=data.get("content", ""),
            timestamp=data.get("timestamp", ""),
            user_id=data.get("userId", ""),
            is_anonymous=bool(data.get("isAnonymous", False)),
            replies=tuple(cls.from_dict(r) for r in (data.get("replies") or [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "author": self.author,
            "isAnonymous": self.is_anonymous,
            "content": self.content,
            "timestamp": self.timestamp,
            "userId": self.user_id,
            "replies": [r.to_dict() for r in self.replies],
        }


def comments_from_documents(items: Optional[List[Dict[str, Any]]]) -> List[Comment]:
    return [Comment.from_dict(item) for item in (items or [])]


def comments_to_documents(comments: List[Comment]) -> List[Dict[str, Any]]:
    return [c.to_dict() for c in comments]


def find_comment(comments: List[Comment], comment_id: str) -> Optional[Comment]:
    """Depth-first search for a comment by id."""
    for comment in comments:
        if comment.id == comment_id:
            return comment
        found = find_comment(list(comment.replies), comment_id)
        if found is not None:
            return found
    return None


def insert_reply(
    comments: List[Comment],
    parent_id: Optional[str],
    new_comment: Comment,
) -> Tuple[List[Comment], bool]:
    """Attach new_comment at top level, or under parent_id at any depth.

    Returns:
        (updated list, True if inserted). A missing parent leaves the
        list unchanged and returns False.
    """
    if not parent_id:
        return comments + [new_comment], True

    updated: List[Comment] = []
    inserted = False
    for comment in comments:
        if inserted:
            updated.append(comment)
        elif comment.id == parent_id:
            updated.append(replace(comment, replies=comment.replies + (new_comment,)))
            inserted = True
        else:
            children, inserted = insert_reply(list(comment.replies), parent_id, new_comment)
            updated.append(replace(comment, replies=tuple(children)) if inserted else comment)
    return updated, inserted


def remove_comment(comments: List[Comment], comment_id: str) -> Tuple[List[Comment], Optional[Comment]]:
    """Remove the comment with comment_id (and its replies) at any depth.

    Returns:
        (updated list, removed comment or None)
    """
    updated: List[Comment] = []
    removed: Optional[Comment] = None
    for comment in comments:
        if removed is not None:
            updated.append(comment)
        elif comment.id == comment_id:
            removed = comment
        else:
            children, removed = remove_comment(list(comment.replies), comment_id)
            updated.append(replace(comment, replies=tuple(children)) if removed else comment)
    return updated, removed
