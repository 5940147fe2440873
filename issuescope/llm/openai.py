"""
OpenAI GPT LLM provider.

Uses the OpenAI SDK for API access.
"""

import os
from typing import Any, Optional

from issuescope.core.logging import get_logger
from issuescope.core.retry import llm_retry
from issuescope.llm.base import (
    ConfigurationError,
    GenerationConfig,
    InferenceError,
    InferenceTimeoutError,
    LLMClient,
    RateLimitError,
    join_context,
)
from issuescope.shared.lazy_imports import lazy_property

logger = get_logger(__name__)

RATE_LIMIT_TERMS = ("rate limit", "429", "quota")
TIMEOUT_TERMS = ("timed out", "timeout")


class OpenAIClient(LLMClient):
    """
    OpenAI API client.

    Requires OPENAI_API_KEY environment variable or an explicit key.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        timeout: int = 60,
    ):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY", "")
        self._model_name = model
        self.timeout = timeout

    @lazy_property
    def client(self) -> Any:
        """Lazy-load OpenAI client."""
        from openai import OpenAI

        if not self.api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY not set. Set it in environment or pass to constructor."
            )
        return OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    @property
    def model_name(self) -> str:
        return self._model_name

    def is_available(self) -> bool:
        """Check if OpenAI is configured."""
        return bool(self.api_key)

    @property
    def supports_json_mode(self) -> bool:
        return True

    def _build_request_params(self, config: GenerationConfig) -> dict[str, Any]:
        """Build request parameters from config."""
        params: dict[str, Any] = {
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
            "top_p": config.top_p,
        }
        if config.seed is not None:
            params["seed"] = config.seed
        if config.stop_sequences:
            params["stop"] = config.stop_sequences
        if config.json_mode:
            params["response_format"] = {"type": "json_object"}
        return params

    @llm_retry
    def generate_with_context(
        self,
        system_prompt: str,
        user_prompt: str,
        context: Optional[str] = None,
        config: Optional[GenerationConfig] = None,
        **kwargs: Any,
    ) -> str:
        """Generate with system prompt and context."""
        config = config or GenerationConfig()
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": join_context(user_prompt, context)},
        ]

        try:
            response = self.client.chat.completions.create(
                model=self._model_name,
                messages=messages,
                **self._build_request_params(config),
            )
        except InferenceError:
            raise
        except Exception as e:
            error_msg = str(e).lower()
            if any(term in error_msg for term in RATE_LIMIT_TERMS):
                raise RateLimitError(f"OpenAI rate limited: {e}") from e
            if any(term in error_msg for term in TIMEOUT_TERMS):
                raise InferenceTimeoutError(f"OpenAI request timed out: {e}") from e
            raise InferenceError(f"OpenAI generation failed: {e}") from e

        if not response.choices or not response.choices[0].message.content:
            raise InferenceError("Empty response from OpenAI")

        if response.usage:
            self._record_usage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
            )
        return response.choices[0].message.content.strip()
