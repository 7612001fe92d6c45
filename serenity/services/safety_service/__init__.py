"""Safety Service: deterministic crisis detection.

Every chat message is screened here BEFORE any LLM call. A positive
verdict diverts the turn to the fixed crisis response.

Usage:
    from serenity.services.safety_service import CrisisDetector
    detector = CrisisDetector()
    detector.is_crisis("I want to die")  # True
"""

from .detector import CrisisDetector, normalize_text
from .config import CRISIS_PHRASES, CRISIS_REPLY, DEFAULT_HELPLINES, CrisisResponseConfig

__all__ = [
    "CrisisDetector",
    "normalize_text",
    "CRISIS_PHRASES",
    "CRISIS_REPLY",
    "DEFAULT_HELPLINES",
    "CrisisResponseConfig",
]
