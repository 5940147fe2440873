"""
Base LLM Provider Interface.

This module defines the LLMClient interface that every provider implements,
so the inference service can swap Claude, OpenAI and Ollama without
changing the analysis code.

Architecture Context
--------------------
    ┌──────────────────────────┐
    │ ModelAssistedStrategy    │
    └────────────┬─────────────┘
                 │ InferenceProvider protocol
    ┌────────────┴─────────────┐
    │  LLMInferenceService     │  prompts, JSON parsing, asyncio.to_thread
    └────────────┬─────────────┘
                 │
    ┌────────────┴─────────────┐
    │       LLMClient          │  (abstract base, blocking calls)
    └────────────┬─────────────┘
         ┌───────┼────────┐
         ↓       ↓        ↓
      Claude   OpenAI   Ollama

Interface Contract
------------------
Implementations must provide:
- generate(): Basic text generation
- generate_with_context(): Generation with system prompt and context
- is_available(): Check if provider is ready
- model_name: The configured model

Provider errors surface as InferenceError subclasses from
issuescope.core.exceptions. Rate limits and timeouts are raised as
RateLimitError / InferenceTimeoutError so @llm_retry retries them:

    from issuescope.core.retry import llm_retry

    class MyClient(LLMClient):
        @llm_retry
        def generate_with_context(self, system_prompt, user_prompt, ...):
            ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from issuescope.core.exceptions import (
    ConfigurationError,
    InferenceError,
    InferenceTimeoutError,
    RateLimitError,
)

__all__ = [
    "ConfigurationError",
    "GenerationConfig",
    "InferenceError",
    "InferenceTimeoutError",
    "LLMClient",
    "RateLimitError",
    "join_context",
]


@dataclass
class GenerationConfig:
    """
    Configuration for text generation.

    Attributes:
        max_tokens: Maximum tokens to generate
        temperature: Creativity (0=deterministic, 1=creative)
        top_p: Nucleus sampling parameter
        stop_sequences: Strings that stop generation
        seed: Random seed for reproducibility (if supported)
        json_mode: Force JSON output (if supported by provider)
    """

    max_tokens: int = 1024
    temperature: float = 0.1
    top_p: float = 1.0
    stop_sequences: Optional[List[str]] = None
    seed: Optional[int] = None
    json_mode: bool = False


def join_context(user_prompt: str, context: Optional[str]) -> str:
    """Prefix the user prompt with context, if any."""
    if not context:
        return user_prompt
    return f"{context}\n\n{user_prompt}"


class LLMClient(ABC):
    """
    Abstract base class for LLM providers.

    All LLM providers must implement this interface.
    """

    def _get_usage(self) -> Dict[str, int]:
        """Get or initialize the usage accumulator."""
        if not hasattr(self, "_usage"):
            self._usage = {
                "prompt_tokens": 0,
                "completion_tokens": 0,
                "total_tokens": 0,
            }
        return self._usage

    def _record_usage(
        self,
        prompt_tokens: int = 0,
        completion_tokens: int = 0,
    ) -> None:
        """Record token usage from a generation call."""
        usage = self._get_usage()
        usage["prompt_tokens"] += prompt_tokens
        usage["completion_tokens"] += completion_tokens
        usage["total_tokens"] += prompt_tokens + completion_tokens

    def get_usage(self) -> Dict[str, int]:
        """
        Get cumulative token usage.

        Returns:
            Dict with prompt_tokens, completion_tokens, total_tokens
        """
        return dict(self._get_usage())

    def reset_usage(self) -> None:
        """Reset token usage counters to zero."""
        usage = self._get_usage()
        for key in usage:
            usage[key] = 0

    def generate(
        self,
        prompt: str,
        config: Optional[GenerationConfig] = None,
        **kwargs: Any,
    ) -> str:
        """Generate text from a bare prompt."""
        return self.generate_with_context(
            system_prompt="You are a helpful assistant.",
            user_prompt=prompt,
            config=config,
            **kwargs,
        )

    @abstractmethod
    def generate_with_context(
        self,
        system_prompt: str,
        user_prompt: str,
        context: Optional[str] = None,
        config: Optional[GenerationConfig] = None,
        **kwargs: Any,
    ) -> str:
        """
        Generate text with system prompt and context.

        Args:
            system_prompt: System instructions
            user_prompt: User query
            context: Additional context placed before the query
            config: Generation configuration

        Returns:
            Generated text

        Raises:
            InferenceError: On any provider failure
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is available and configured."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name."""

    @property
    def supports_json_mode(self) -> bool:
        """Whether this provider supports JSON mode output."""
        return False
