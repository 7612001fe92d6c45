"""User Service: profile management and user data deletion."""

from .handler import create_user_blueprint
from .repository import USER_DATA_COLLECTIONS, AccountDataManager, UserRepository

__all__ = [
    "create_user_blueprint",
    "USER_DATA_COLLECTIONS",
    "AccountDataManager",
    "UserRepository",
]
