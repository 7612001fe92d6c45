"""Chat Service: the safety-routed companion conversation.

Pipeline per turn: crisis screen, context, generation, conversation
log, detached summary refresh.
"""

from .context import ContextAssembler
from .conversation_logger import ConversationLogger
from .generator import ACTIVITY_TRIGGERS, GeneratedReply, ResponseGenerator
from .handler import create_chat_blueprint, parse_chat_request
from .router import SafetyRouter, enrich_message
from .summarizer import WellnessSummarizer

__all__ = [
    "ContextAssembler",
    "ConversationLogger",
    "ACTIVITY_TRIGGERS",
    "GeneratedReply",
    "ResponseGenerator",
    "create_chat_blueprint",
    "parse_chat_request",
    "SafetyRouter",
    "enrich_message",
    "WellnessSummarizer",
]
