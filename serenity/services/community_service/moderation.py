"""AI content moderation for community posts and comments.

Fails open: if the moderation model is unreachable or answers with
something that is not the expected JSON, the content is allowed and
the failure is logged. Users are never blocked by a technical error.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from serenity.services.llm_service import BaseLLM, parse_json_reply
from serenity.shared.utils import hash_text_for_audit

logger = logging.getLogger(__name__)

MODERATION_TEMPERATURE = 0.1
MODERATION_MAX_TOKENS = 200

MODERATION_PROMPT = """You are a content moderation AI for a mental health support community. Analyze the following text and determine if it contains:

1. Sexual content or explicit material
2. Offensive language (hate speech, slurs, discrimination)
3. Harassment or bullying
4. Spam or promotional content
5. Graphic violence or gore descriptions
6. Content that violates community safety guidelines

IMPORTANT NOTES:
- Mental health discussions about trauma, abuse, depression, anxiety, etc. are ALLOWED and should NOT be flagged
- Mentions of suicide/self-harm in the context of seeking help are ALLOWED (this is a support community)
- Medical terminology related to mental health is ALLOWED
- Expressing negative emotions (anger, sadness, frustration) is ALLOWED
- Only flag content that is clearly inappropriate, offensive, or harmful to others

TEXT TO MODERATE:
"{content}"

RESPOND IN THIS EXACT JSON FORMAT (no other text):
{{
  "safe": true/false,
  "reason": "brief explanation if not safe, or empty string if safe",
  "flaggedContent": "the specific problematic phrase/word, or empty string if safe"
}}"""


@dataclass(frozen=True)
class ModerationResult:
    """Verdict for one piece of user content."""
    safe: bool
    reason: str = ""
    flagged_content: str = ""
    error: Optional[str] = None

    def rejection_payload(self, kind: str = "post") -> Dict[str, Any]:
        """400 body for rejected content."""
        flagged = f': "{self.flagged_content}"' if self.flagged_content else ""
        return {
            "error": "Content not allowed",
            "reason": self.reason,
            "flaggedContent": self.flagged_content,
            "message": (
                f"Your {kind} contains content that violates our community "
                f"guidelines{flagged}. {self.reason}"
            ).strip(),
        }


class ContentModerator:
    """Screens text with an LLM before it is published."""

    def __init__(self, llm: Optional[BaseLLM], enabled: bool = True):
        """Initialize moderator.

        Args:
            llm: Moderation model; None disables moderation
            enabled: Feature switch (MODERATION_ENABLED)
        """
        self.llm = llm
        self.enabled = enabled and llm is not None

        logger.info("CONTENT_MODERATOR_INITIALIZED", extra={"enabled": self.enabled})

    def moderate(self, content: str) -> ModerationResult:
        """Classify content. Never raises."""
        if not self.enabled:
            return ModerationResult(safe=True)

        content_hash = hash_text_for_audit(content)

        try:
            response = self.llm.generate(
                MODERATION_PROMPT.format(content=content),
                temperature=MODERATION_TEMPERATURE,
                max_tokens=MODERATION_MAX_TOKENS,
            )
        except Exception as e:
            logger.error(
                "MODERATION_UNAVAILABLE_ALLOWING",
                extra={"content_hash": content_hash, "error": str(e)}
            )
            return ModerationResult(safe=True, error="Moderation service temporarily unavailable")

        try:
            verdict = parse_json_reply(response.text)
            if not isinstance(verdict, dict):
                raise ValueError("Moderation reply is not an object")
        except ValueError as e:
            logger.error(
                "MODERATION_PARSE_FAILED_ALLOWING",
                extra={"content_hash": content_hash, "error": str(e)}
            )
            return ModerationResult(safe=True, error="Moderation response parsing failed")

        result = ModerationResult(
            safe=verdict.get("safe") is True,
            reason=str(verdict.get("reason") or ""),
            flagged_content=str(verdict.get("flaggedContent") or ""),
        )

        logger.info(
            "CONTENT_MODERATED",
            extra={
                "content_hash": content_hash,
                "content_length": len(content),
                "safe": result.safe,
            }
        )
        return result
