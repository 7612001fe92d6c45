"""Shared domain models for the serenity backend."""
from .chat import (
    Role,
    Message,
    CrisisVerdict,
    ConversationRecord,
    UserContext,
    ChatRequest,
    ChatResult,
    DEFAULT_DISPLAY_NAME,
    NO_RECENT_MOODS,
)
from .community import (
    Comment,
    comments_from_documents,
    comments_to_documents,
    find_comment,
    insert_reply,
    remove_comment,
)

__all__ = [
    "Role",
    "Message",
    "CrisisVerdict",
    "ConversationRecord",
    "UserContext",
    "ChatRequest",
    "ChatResult",
    "DEFAULT_DISPLAY_NAME",
    "NO_RECENT_MOODS",
    "Comment",
    "comments_from_documents",
    "comments_to_documents",
    "find_comment",
    "insert_reply",
    "remove_comment",
]
