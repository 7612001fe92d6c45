"""Chat domain models.

Conversations are ordered sequences of Message; order is chronological
and meaningful. Each exchange is persisted once as a ConversationRecord.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Role(Enum):
    """Author of a conversation turn."""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single conversation turn."""
    role: Role
    content: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """Build a message from a client payload entry.

        Raises:
            ValueError: If role is unknown or content is not a non-empty string
        """
        if not isinstance(data, dict):
            raise ValueError("Each message must be an object")
        try:
            role = Role(data.get("role"))
        except ValueError:
            raise ValueError(f"Invalid message role: {data.get('role')!r}")
        content = data.get("content")
        if not isinstance(content, str) or not content.strip():
            raise ValueError("Message content must be a non-empty string")
        return cls(role=role, content=content)

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class CrisisVerdict:
    """Outcome of crisis screening for one message.

    Pure function output; never persisted on its own.
    """
    is_crisis: bool
    matched_phrases: Tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.is_crisis


@dataclass(frozen=True)
class ConversationRecord:
    """Append-only log entry, one per exchange."""
    user_id: str
    input_message: str
    output_response: str
    crisis: bool
    timestamp: str

    def to_document(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "inputMessage": self.input_message,
            "outputResponse": self.output_response,
            "crisis": self.crisis,
            "timestamp": self.timestamp,
        }


DEFAULT_DISPLAY_NAME = "Friend"
NO_RECENT_MOODS = "No recent data"


@dataclass(frozen=True)
class UserContext:
    """Per-request personalisation for the next LLM call.

    Derived, not authoritative: recomputed from the store on every turn.
    recent_moods is most-recent-first and holds at most three entries.
    """
    display_name: str = DEFAULT_DISPLAY_NAME
    recent_moods: Tuple[str, ...] = ()
    wellness_summary: str = ""

    @classmethod
    def default(cls) -> "UserContext":
        return cls()

    def moods_text(self) -> str:
        """Mood history as prompt text, or the placeholder when empty."""
        if not self.recent_moods:
            return NO_RECENT_MOODS
        return "\n".join(self.recent_moods)


@dataclass(frozen=True)
class ChatRequest:
    """Validated inbound chat turn."""
    message: str
    history: List[Message] = field(default_factory=list)
    user_id: str = "anonymous"
    facial_emotion: Optional[Dict[str, Any]] = None
    multimodal_data: Optional[List[Dict[str, Any]]] = None


@dataclass
class ChatResult:
    """Response payload for one chat turn."""
    reply: str
    crisis: bool
    timestamp: str
    helplines: Optional[Dict[str, str]] = None
    buttons: Optional[List[Dict[str, str]]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses; absent extras are omitted."""
        result: Dict[str, Any] = {
            "reply": self.reply,
            "crisis": self.crisis,
            "timestamp": self.timestamp,
        }
        if self.helplines is not None:
            result["helplines"] = self.helplines
        if self.buttons is not None:
            result["buttons"] = self.buttons
        return result
