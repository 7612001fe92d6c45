"""Response generator: persona prompt plus history in, one reply out."""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from serenity.services.llm_service import BaseLLM
from serenity.shared.models import Message, Role, UserContext
from .prompts import build_system_prompt

logger = logging.getLogger(__name__)

# Substring match over the lowercased reply
ACTIVITY_TRIGGERS = (
    "breathing",
    "exercise",
    "activity",
    "journal",
    "relax",
    "meditation",
    "try",
    "coping",
)


@dataclass(frozen=True)
class GeneratedReply:
    text: str
    buttons: Optional[List[Dict[str, str]]] = None


class ResponseGenerator:
    """Builds the prompt, calls the LLM and annotates activity suggestions."""

    def __init__(
        self,
        llm: BaseLLM,
        activities_route: str = "/activities",
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        """Initialize generator.

        Args:
            llm: Completion backend
            activities_route: Link target of the "Explore Activities" button
            temperature: Decoding temperature, defaults to the LLM config
            max_tokens: Output cap, defaults to the LLM config
        """
        self.llm = llm
        self.activities_route = activities_route
        self.temperature = temperature
        self.max_tokens = max_tokens

    def generate(self, messages: Sequence[Message], context: UserContext) -> GeneratedReply:
        """Produce the assistant reply for the last user turn.

        Args:
            messages: Chronological history ending in the current user turn
            context: Personalisation for the system prompt

        Returns:
            GeneratedReply with optional activity buttons

        Raises:
            ValueError: If messages is empty or does not end in a user turn
            LLMGenerationError: If the completion call fails; not retried
        """
        if not messages or messages[-1].role != Role.USER:
            raise ValueError("Conversation must end with a user message")

        response = self.llm.generate(
            messages[-1].content,
            system_prompt=build_system_prompt(context),
            history=list(messages[:-1]),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        buttons = self.suggest_buttons(response.text)

        logger.info(
            "CHAT_REPLY_GENERATED",
            extra={
                "model": response.model,
                "latency_ms": response.latency_ms,
                "history_length": len(messages) - 1,
                "activity_button": buttons is not None,
            }
        )
        return GeneratedReply(text=response.text, buttons=buttons)

    def suggest_buttons(self, reply: str) -> Optional[List[Dict[str, str]]]:
        """Activity button when the reply mentions any trigger, else None."""
        lowered = reply.lower()
        if not any(trigger in lowered for trigger in ACTIVITY_TRIGGERS):
            return None
        return [{
            "label": "Explore Activities",
            "url": self.activities_route,
            "icon": "🎯",
        }]
