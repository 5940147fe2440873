"""
Ollama local LLM provider.

Uses a local Ollama server for inference via the chat API, which applies the
right chat template for each model (Qwen, Llama, Mistral, etc.)
"""

import os
from typing import Any, Optional

import requests

from issuescope.core.logging import get_logger
from issuescope.core.retry import llm_retry
from issuescope.llm.base import (
    GenerationConfig,
    InferenceError,
    InferenceTimeoutError,
    LLMClient,
    RateLimitError,
    join_context,
)

logger = get_logger(__name__)


class OllamaClient(LLMClient):
    """
    Ollama local inference client.

    Requires Ollama server running locally or at specified URL.
    """

    def __init__(
        self,
        url: str = "",
        model: str = "qwen2.5:14b",
        timeout: int = 120,
    ):
        """
        Initialize Ollama client.

        Args:
            url: Ollama server URL (defaults to OLLAMA_HOST, then localhost)
            model: Model name
            timeout: Request timeout in seconds
        """
        self.url = (
            url or os.environ.get("OLLAMA_HOST", "http://localhost:11434")
        ).rstrip("/")
        self._model_name = model
        self.timeout = timeout

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def supports_json_mode(self) -> bool:
        return True

    def is_available(self) -> bool:
        """Check if Ollama server is reachable."""
        try:
            response = requests.get(f"{self.url}/api/tags", timeout=2)
            return response.status_code == 200
        except requests.RequestException as e:
            logger.debug("Ollama not reachable", url=self.url, error=str(e))
            return False

    def _build_chat_messages(
        self,
        system_prompt: str,
        user_prompt: str,
        context: Optional[str] = None,
    ) -> list[dict[str, str]]:
        """Build message list for chat API."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": join_context(user_prompt, context)})
        return messages

    def _build_options(self, config: GenerationConfig) -> dict[str, Any]:
        """Build Ollama options dictionary."""
        options: dict[str, Any] = {
            "temperature": config.temperature,
            "top_p": config.top_p,
            "num_predict": config.max_tokens,
        }
        if config.stop_sequences:
            options["stop"] = config.stop_sequences
        if config.seed is not None:
            options["seed"] = config.seed
        return options

    def _send_chat_request(self, payload: dict[str, Any]) -> str:
        """Send chat request and process response."""
        try:
            response = requests.post(
                f"{self.url}/api/chat", json=payload, timeout=self.timeout
            )
        except requests.Timeout as e:
            raise InferenceTimeoutError(f"Ollama request timed out: {e}") from e
        except requests.ConnectionError as e:
            raise InferenceError(
                f"Cannot connect to Ollama at {self.url}. Make sure Ollama is running."
            ) from e

        if response.status_code == 429:
            raise RateLimitError("Ollama returned status 429")
        if response.status_code != 200:
            raise InferenceError(f"Ollama returned status {response.status_code}")

        data = response.json()
        text = (data.get("message") or {}).get("content", "")
        if not text:
            raise InferenceError("Empty response from Ollama chat API")

        self._record_usage(
            prompt_tokens=data.get("prompt_eval_count", 0) or 0,
            completion_tokens=data.get("eval_count", 0) or 0,
        )
        return text.strip()

    @llm_retry
    def generate_with_context(
        self,
        system_prompt: str,
        user_prompt: str,
        context: Optional[str] = None,
        config: Optional[GenerationConfig] = None,
        **kwargs: Any,
    ) -> str:
        """Generate with system prompt and context using Ollama's chat API."""
        config = config or GenerationConfig()
        payload: dict[str, Any] = {
            "model": self._model_name,
            "messages": self._build_chat_messages(system_prompt, user_prompt, context),
            "stream": False,
            "options": self._build_options(config),
        }
        if config.json_mode:
            payload["format"] = "json"
        return self._send_chat_request(payload)
