"""Safety Service configuration: crisis phrases and the fixed crisis payload.

The phrase list is English-only and hard-coded. Missing a real crisis
costs far more than a false alarm, so the list stays broad.
"""
from dataclasses import dataclass, field
from typing import Dict, FrozenSet


# Phrases that divert a message to the crisis response.
# Matched case-insensitively, anchored on word boundaries.
CRISIS_PHRASES: FrozenSet[str] = frozenset({
    # Suicidal ideation
    "suicide",
    "kill myself",
    "end my life",
    "take my life",
    "want to die",
    "better off dead",
    "end it all",

    # Self-harm
    "self harm",
    "self-harm",
    "cut myself",
    "hurt myself",

    # Hopelessness
    "not worth living",
    "no point living",
    "give up on life",
    "can't go on",
    "cant go on",
})

CRISIS_REPLY = (
    "I'm really glad you told me. Your safety matters deeply, and you're not "
    "alone in this. Please reach out to someone you trust or call a crisis "
    "helpline immediately."
)

DEFAULT_HELPLINES: Dict[str, str] = {
    "india": "1800-599-0019",
    "international": "https://findahelpline.com",
}


@dataclass(frozen=True)
class CrisisResponseConfig:
    """Canned reply and helpline block returned on the crisis path."""
    reply: str = CRISIS_REPLY
    helplines: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HELPLINES))

    # Version tracking for log correlation
    pattern_version: str = "2026.10.19"
