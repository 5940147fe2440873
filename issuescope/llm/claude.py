"""
Anthropic Claude LLM provider.

Uses the Anthropic SDK for API access.
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

RATE_LIMIT_TERMS = ("rate limit", "overloaded", "429")
TIMEOUT_TERMS = ("timed out", "timeout")


class ClaudeClient(LLMClient):
    """
    Anthropic Claude API client.

    Requires ANTHROPIC_API_KEY environment variable or an explicit key.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-3-5-haiku-latest",
        timeout: int = 60,
    ):
        """
        Initialize Claude client.

        Args:
            api_key: API key (defaults to ANTHROPIC_API_KEY env var)
            model: Model name
            timeout: Request timeout in seconds
        """
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
        self._model_name = model
        self.timeout = timeout

    @lazy_property
    def client(self) -> Any:
        """Lazy-load Anthropic client."""
        from anthropic import Anthropic

        if not self.api_key:
            raise ConfigurationError(
                "ANTHROPIC_API_KEY not set. Set it in environment or pass to constructor."
            )
        return Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)

    @property
    def model_name(self) -> str:
        return self._model_name

    def is_available(self) -> bool:
        """Check if Claude is configured."""
        return bool(self.api_key)

    @llm_retry
    def generate_with_context(
        self,
        system_prompt: str,
        user_prompt: str,
        context: Optional[str] = None,
        config: Optional[GenerationConfig] = None,
        **kwargs: Any,
    ) -> str:
        """
        Generate with system prompt and context.

        Rate limits and timeouts are re-raised as retryable errors; anything
        else becomes a plain InferenceError.
        """
        config = config or GenerationConfig()
        user_message = join_context(user_prompt, context)

        try:
            params = self._build_params(system_prompt, user_message, config)
            response = self.client.messages.create(**params)
        except InferenceError:
            raise
        except Exception as e:
            error_msg = str(e).lower()
            if any(term in error_msg for term in RATE_LIMIT_TERMS):
                raise RateLimitError(f"Claude rate limited: {e}") from e
            if any(term in error_msg for term in TIMEOUT_TERMS):
                raise InferenceTimeoutError(f"Claude request timed out: {e}") from e
            raise InferenceError(f"Claude generation failed: {e}") from e

        return self._extract_and_record_response(response)

    def _build_params(
        self, system_prompt: str, user_message: str, config: GenerationConfig
    ) -> dict[str, Any]:
        """Build Claude API request parameters."""
        params: dict[str, Any] = {
            "model": self._model_name,
            "max_tokens": config.max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_message}],
        }
        if config.temperature is not None:
            params["temperature"] = config.temperature
        if config.stop_sequences:
            params["stop_sequences"] = config.stop_sequences
        return params

    def _extract_and_record_response(self, response: Any) -> str:
        """Extract text from response and record usage."""
        output = ""
        for block in response.content:
            if hasattr(block, "text"):
                output += block.text

        if not output:
            raise InferenceError("Empty response from Claude")

        if getattr(response, "usage", None):
            self._record_usage(
                prompt_tokens=getattr(response.usage, "input_tokens", 0) or 0,
                completion_tokens=getattr(response.usage, "output_tokens", 0) or 0,
            )
        return output.strip()
