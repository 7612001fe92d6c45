"""Signed session tokens.

Replaces the legacy base64 "{uid}:{millis}" token, which anyone could
forge. Tokens are HS256 JWTs carrying sub (uid), iat and exp; the
signature and expiry are checked on every request.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from serenity.shared.utils import hash_pii

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Session token is missing, malformed or fails verification."""
    pass


class TokenExpiredError(TokenError):
    """Session token signature is valid but exp has passed."""
    pass


@dataclass(frozen=True)
class SessionToken:
    """Issued token and its expiry."""
    token: str
    expires_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "expiresAt": self.expires_at.isoformat().replace("+00:00", "Z"),
        }


class SessionTokenIssuer:
    """Issues and verifies session JWTs."""

    ALGORITHM = "HS256"

    def __init__(self, secret: str, ttl_hours: int = 24):
        """Initialize issuer.

        Args:
            secret: HMAC key, at least 32 characters
            ttl_hours: Token lifetime
        """
        if not secret or len(secret) < 32:
            raise ValueError("Session token secret must be at least 32 characters")
        self._secret = secret
        self.ttl = timedelta(hours=ttl_hours)

    def issue(self, uid: str, now: Optional[datetime] = None) -> SessionToken:
        """Sign a token for uid."""
        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        expires_at = issued_at + self.ttl
        claims = {
            "sub": uid,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self._secret, algorithm=self.ALGORITHM)

        logger.info(
            "SESSION_TOKEN_ISSUED",
            extra={"user_id_hash": hash_pii(uid), "ttl_hours": self.ttl.total_seconds() / 3600}
        )
        return SessionToken(token=token, expires_at=expires_at)

    def verify(self, token: str) -> str:
        """Check signature and expiry.

        Returns:
            The uid in the sub claim

        Raises:
            TokenExpiredError: If the token has expired
            TokenError: If the token is malformed or the signature is wrong
        """
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self.ALGORITHM])
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token expired") from e
        except JWTError as e:
            raise TokenError("Invalid token") from e

        uid = claims.get("sub")
        if not isinstance(uid, str) or not uid:
            raise TokenError("Invalid token")
        return uid
