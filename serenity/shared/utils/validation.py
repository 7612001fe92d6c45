"""Request field validation helpers."""
from typing import Any, List, Optional


def parse_int_in_range(value: Any, low: int, high: int, field_name: str) -> int:
    """Coerce an integer or integer string and check low <= value <= high.

    Raises:
        ValueError: With a client-facing, field-specific message
    """
    message = f"{field_name} must be between {low} and {high}"
    if isinstance(value, bool):
        raise ValueError(message)
    if isinstance(value, str):
        value = value.strip()
        if not value.lstrip("-").isdigit():
            raise ValueError(message)
        value = int(value)
    elif isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not low <= value <= high:
        raise ValueError(message)
    return value


def clean_tags(tags: Any) -> List[str]:
    """Non-empty, stripped string tags; anything else becomes []."""
    if not isinstance(tags, list):
        return []
    return [t.strip() for t in tags if isinstance(t, str) and t.strip()]


def optional_text(value: Any, max_length: Optional[int] = None) -> Optional[str]:
    """Stripped string or None; over-long values are truncated."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if max_length is not None:
        value = value[:max_length]
    return value or None
