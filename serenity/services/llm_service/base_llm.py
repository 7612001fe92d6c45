"""Base LLM interface and implementations.

Provides an abstract base class and concrete implementations for the
supported completion providers (Gemini, OpenAI). Views are synchronous,
so generation is a blocking call.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

import google.generativeai as genai
import openai

from serenity.shared.models import Message, Role

logger = logging.getLogger(__name__)

MAX_PROMPT_CHARS = 20000


class LLMProvider(Enum):
    """Supported LLM providers."""
    GEMINI = "gemini"
    OPENAI = "openai"


class LLMGenerationError(Exception):
    """The completion service failed or returned no usable text."""

    def __init__(self, message: str = "Failed to generate response"):
        super().__init__(message)


@dataclass
class LLMConfig:
    """Configuration for LLM inference."""
    provider: LLMProvider
    model_name: str
    api_key: Optional[str] = None
    max_tokens: int = 512
    temperature: float = 0.8
    top_p: float = 0.95
    timeout_seconds: int = 30


@dataclass
class LLMResponse:
    """Response from LLM inference."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None
    latency_ms: Optional[float] = None
    metadata: Optional[Dict] = None


class BaseLLM(ABC):
    """Abstract base class for LLM implementations."""

    def __init__(self, config: LLMConfig):
        """Initialize LLM with configuration.

        Args:
            config: LLM configuration
        """
        self.config = config
        logger.info(
            "LLM_INITIALIZED",
            extra={
                "provider": config.provider.value,
                "model": config.model_name
            }
        )

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        history: Optional[Sequence[Message]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            prompt: Current user turn
            system_prompt: Optional instruction block
            history: Earlier turns, oldest first
            temperature: Per-call override of config.temperature
            max_tokens: Per-call override of config.max_tokens

        Returns:
            LLMResponse object

        Raises:
            ValueError: If prompt is invalid
            LLMGenerationError: If the provider call fails
        """
        pass

    def validate_prompt(self, prompt: str) -> bool:
        """Validate prompt before sending to LLM."""
        if not prompt or not prompt.strip():
            logger.warning("LLM_PROMPT_EMPTY")
            return False

        if len(prompt) > MAX_PROMPT_CHARS:
            logger.warning(
                "LLM_PROMPT_TOO_LONG",
                extra={"length": len(prompt)}
            )
            return False

        return True

    def _elapsed_ms(self, start_time: float) -> float:
        return (time.time() - start_time) * 1000


class GeminiLLM(BaseLLM):
    """Google Gemini implementation."""

    ROLE_MAP = {Role.USER: "user", Role.ASSISTANT: "model"}

    def __init__(self, config: LLMConfig):
        super().__init__(config)

        if not config.api_key:
            raise ValueError("Gemini API key required")

        genai.configure(api_key=config.api_key)

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        history: Optional[Sequence[Message]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        if not self.validate_prompt(prompt):
            raise ValueError("Invalid prompt")

        contents: List[Dict] = [
            {"role": self.ROLE_MAP[m.role], "parts": [m.content]}
            for m in (history or [])
        ]
        contents.append({"role": "user", "parts": [prompt]})

        generation_config = genai.GenerationConfig(
            temperature=self.config.temperature if temperature is None else temperature,
            max_output_tokens=max_tokens or self.config.max_tokens,
            top_p=self.config.top_p,
        )

        start_time = time.time()

        try:
            model = genai.GenerativeModel(
                model_name=self.config.model_name,
                system_instruction=system_prompt,
            )
            response = model.generate_content(
                contents,
                generation_config=generation_config,
                request_options={"timeout": self.config.timeout_seconds},
            )
            generated_text = (response.text or "").strip()
        except Exception as e:
            logger.error(
                "GEMINI_GENERATION_FAILED",
                extra={
                    "model": self.config.model_name,
                    "error": str(e)
                }
            )
            raise LLMGenerationError() from e

        if not generated_text:
            logger.error("GEMINI_EMPTY_RESPONSE", extra={"model": self.config.model_name})
            raise LLMGenerationError()

        usage = getattr(response, "usage_metadata", None)
        latency_ms = self._elapsed_ms(start_time)

        logger.info(
            "GEMINI_GENERATION_SUCCESSFUL",
            extra={
                "model": self.config.model_name,
                "latency_ms": latency_ms
            }
        )

        return LLMResponse(
            text=generated_text,
            model=self.config.model_name,
            provider=self.config.provider.value,
            tokens_used=getattr(usage, "total_token_count", None),
            latency_ms=latency_ms,
        )


class OpenAILLM(BaseLLM):
    """OpenAI API implementation (GPT-4o, etc.)."""

    def __init__(self, config: LLMConfig):
        super().__init__(config)

        if not config.api_key:
            raise ValueError("OpenAI API key required")

        self.client = openai.OpenAI(api_key=config.api_key)

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        history: Optional[Sequence[Message]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        if not self.validate_prompt(prompt):
            raise ValueError("Invalid prompt")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.extend(m.to_dict() for m in (history or []))
        messages.append({"role": "user", "content": prompt})

        start_time = time.time()

        try:
            response = self.client.chat.completions.create(
                model=self.config.model_name,
                messages=messages,
                max_tokens=max_tokens or self.config.max_tokens,
                temperature=self.config.temperature if temperature is None else temperature,
                top_p=self.config.top_p,
                timeout=self.config.timeout_seconds
            )
            generated_text = (response.choices[0].message.content or "").strip()
        except Exception as e:
            logger.error(
                "OPENAI_GENERATION_FAILED",
                extra={
                    "model": self.config.model_name,
                    "error": str(e)
                }
            )
            raise LLMGenerationError() from e

        if not generated_text:
            logger.error("OPENAI_EMPTY_RESPONSE", extra={"model": self.config.model_name})
            raise LLMGenerationError()

        latency_ms = self._elapsed_ms(start_time)
        tokens_used = response.usage.total_tokens if response.usage else None

        logger.info(
            "OPENAI_GENERATION_SUCCESSFUL",
            extra={
                "model": self.config.model_name,
                "latency_ms": latency_ms,
                "tokens_used": tokens_used
            }
        )

        return LLMResponse(
            text=generated_text,
            model=self.config.model_name,
            provider=self.config.provider.value,
            tokens_used=tokens_used,
            latency_ms=latency_ms
        )


def create_llm(config: LLMConfig) -> BaseLLM:
    """Factory function to create LLM instance.

    Raises:
        ValueError: If provider not supported
    """
    if config.provider == LLMProvider.GEMINI:
        return GeminiLLM(config)
    elif config.provider == LLMProvider.OPENAI:
        return OpenAILLM(config)
    else:
        raise ValueError(f"Unsupported provider: {config.provider}")
