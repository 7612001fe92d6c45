"""PII handling utilities: user identifiers never reach the logs raw.

Every user id written to a log line goes through hash_pii(). Message
text is represented by its length or by hash_text_for_audit().
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)


_PII_SALT: Optional[str] = None

ANONYMOUS_USER = "anonymous"
MIN_SALT_LENGTH = 32


def configure_pii_salt(salt: str) -> None:
    """Set the process-wide salt (PII_HASH_SALT) at start-up.

    Raises:
        ValueError: If salt is shorter than MIN_SALT_LENGTH
    """
    global _PII_SALT
    if len(salt or "") < MIN_SALT_LENGTH:
        logger.critical("PII_SALT_REJECTED", extra={"min_length": MIN_SALT_LENGTH})
        raise ValueError(f"PII salt must be at least {MIN_SALT_LENGTH} characters")

    _PII_SALT = salt
    logger.info("PII_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def hash_pii(value: Optional[str]) -> str:
    """Salted SHA-256 of a user id, for log lines.

    Anonymous (or missing) ids come back as "anonymous" so anonymous
    traffic stays recognisable.

    Raises:
        RuntimeError: If configure_pii_salt() has not been called
    """
    if not value or value == ANONYMOUS_USER:
        return ANONYMOUS_USER

    if _PII_SALT is None:
        logger.critical("PII_SALT_MISSING")
        raise RuntimeError("PII salt not configured. Call configure_pii_salt() first.")

    return hashlib.sha256(f"{_PII_SALT}{value}".encode()).hexdigest()


def hash_text_for_audit(text: str) -> str:
    """Fingerprint message text without exposing its content."""
    return hashlib.sha256(text.encode()).hexdigest()
