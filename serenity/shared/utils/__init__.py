"""Shared utilities for the serenity backend."""
from .pii import ANONYMOUS_USER, hash_pii, hash_text_for_audit, configure_pii_salt
from .background import BackgroundTasks
from .serialization import serialize_document, utc_now_iso
from .validation import clean_tags, optional_text, parse_int_in_range

__all__ = [
    "ANONYMOUS_USER",
    "hash_pii",
    "hash_text_for_audit",
    "configure_pii_salt",
    "BackgroundTasks",
    "serialize_document",
    "utc_now_iso",
    "clean_tags",
    "optional_text",
    "parse_int_in_range",
]
