"""LLM Service for Serenity.

Provider-agnostic text completion used by the chat pipeline, the
wellness summarizer, community moderation and journal prompts.
"""

from .base_llm import (
    BaseLLM,
    GeminiLLM,
    LLMConfig,
    LLMGenerationError,
    LLMProvider,
    LLMResponse,
    OpenAILLM,
    create_llm,
)
from .parsing import parse_json_reply, strip_code_fences

__version__ = "0.1.0"

__all__ = [
    "BaseLLM",
    "GeminiLLM",
    "LLMConfig",
    "LLMGenerationError",
    "LLMProvider",
    "LLMResponse",
    "OpenAILLM",
    "create_llm",
    "parse_json_reply",
    "strip_code_fences",
]
