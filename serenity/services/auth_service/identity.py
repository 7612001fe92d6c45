"""Identity provider access (Firebase Authentication).

Bound to the Firebase app owned by FirestoreConnection.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from firebase_admin import auth

from serenity.shared.database import FirestoreConnection
from serenity.shared.utils import hash_pii
from .tokens import TokenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthUser:
    """Authenticated caller bound to the request."""
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None


class IdentityProvider:
    """Thin wrapper over firebase_admin.auth for one app."""

    def __init__(self, connection: FirestoreConnection):
        self.connection = connection

    def verify_id_token(self, id_token: str) -> str:
        """Verify a provider-issued ID token.

        Returns:
            The uid the token was issued to

        Raises:
            TokenError: If the token is invalid, expired or revoked
        """
        try:
            decoded = auth.verify_id_token(id_token, app=self.connection.app)
        except (auth.InvalidIdTokenError, ValueError) as e:
            logger.warning("ID_TOKEN_REJECTED", extra={"error_type": type(e).__name__})
            raise TokenError("Invalid token") from e
        return decoded["uid"]

    def get_user(self, uid: str) -> Optional[AuthUser]:
        """Look up a user; None if the account no longer exists."""
        try:
            record = auth.get_user(uid, app=self.connection.app)
        except auth.UserNotFoundError:
            logger.warning("IDENTITY_USER_NOT_FOUND", extra={"user_id_hash": hash_pii(uid)})
            return None
        return AuthUser(uid=record.uid, email=record.email, name=record.display_name)

    def update_password(self, uid: str, password: str) -> None:
        auth.update_user(uid, password=password, app=self.connection.app)
        logger.info("IDENTITY_PASSWORD_UPDATED", extra={"user_id_hash": hash_pii(uid)})

    def update_display_name(self, uid: str, name: str) -> None:
        auth.update_user(uid, display_name=name, app=self.connection.app)

    def delete_user(self, uid: str) -> None:
        auth.delete_user(uid, app=self.connection.app)
        logger.info("IDENTITY_USER_DELETED", extra={"user_id_hash": hash_pii(uid)})
