"""Community Service: moderated posts, likes and nested comments."""

from .handler import create_community_blueprint
from .moderation import ContentModerator, ModerationResult
from .repository import PostRepository, apply_like

__all__ = [
    "create_community_blueprint",
    "ContentModerator",
    "ModerationResult",
    "PostRepository",
    "apply_like",
]
