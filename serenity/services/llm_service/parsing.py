"""Helpers for LLM replies that are expected to carry JSON."""
import json
import re
from typing import Any

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences models like to wrap JSON in."""
    return _FENCE.sub("", text).strip()


def parse_json_reply(text: str) -> Any:
    """Decode a JSON reply.

    Raises:
        ValueError: If the text is not valid JSON after fence removal
    """
    return json.loads(strip_code_fences(text))
