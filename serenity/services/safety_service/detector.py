"""Crisis detector: the deterministic gate in front of the LLM.

A single compiled, case-insensitive alternation of the crisis phrases,
anchored on word boundaries so that "cut myself" never fires inside a
longer word. Stateless: one message in, one verdict out, no scoring.
"""
import logging
import re
import unicodedata
from typing import Iterable, List, Optional, Pattern

from serenity.shared.models import CrisisVerdict
from .config import CRISIS_PHRASES

logger = logging.getLogger(__name__)

# Typographic apostrophes typed on phones
_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "ʼ": "'"})
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Fold unicode compatibility forms, apostrophes and runs of whitespace."""
    folded = unicodedata.normalize("NFKC", text).translate(_APOSTROPHES)
    return _WHITESPACE.sub(" ", folded).strip()


class CrisisDetector:
    """Boolean predicate over a single message."""

    def __init__(self, phrases: Optional[Iterable[str]] = None):
        """Compile the phrase disjunction.

        Args:
            phrases: Override for the default crisis phrase list
        """
        self.phrases: List[str] = sorted(
            {p.strip().lower() for p in (phrases if phrases is not None else CRISIS_PHRASES) if p.strip()},
            key=len,
            reverse=True,
        )
        if not self.phrases:
            raise ValueError("At least one crisis phrase is required")

        self._pattern = self._compile(self.phrases)

        logger.info(
            "CRISIS_DETECTOR_INITIALIZED",
            extra={"phrase_count": len(self.phrases)}
        )

    @staticmethod
    def _compile(phrases: List[str]) -> Pattern:
        # Longest first so overlapping phrases report the most specific match;
        # spaces inside a phrase tolerate any whitespace run.
        alternatives = "|".join(
            r"\s+".join(re.escape(word) for word in p.split()) for p in phrases
        )
        return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)

    def detect(self, text: str) -> CrisisVerdict:
        """Screen one message.

        Args:
            text: Raw user message; validated upstream as a non-empty string

        Returns:
            CrisisVerdict with the distinct phrases that matched
        """
        normalized = normalize_text(text)
        matches = []
        for match in self._pattern.finditer(normalized):
            phrase = _WHITESPACE.sub(" ", match.group(0).lower())
            if phrase not in matches:
                matches.append(phrase)
        return CrisisVerdict(is_crisis=bool(matches), matched_phrases=tuple(matches))

    def is_crisis(self, text: str) -> bool:
        return self.detect(text).is_crisis
