"""
LLM provider factory.

Create and configure LLM clients based on configuration.
"""

from typing import Callable, Dict, Optional

from issuescope.core.config import Config
from issuescope.core.exceptions import ConfigurationError
from issuescope.core.logging import get_logger
from issuescope.llm.base import GenerationConfig, LLMClient

logger = get_logger(__name__)


def get_generation_config(config: Config, **overrides) -> GenerationConfig:
    """
    Build a GenerationConfig from the llm section of the configuration.

    Args:
        config: issuescope configuration
        **overrides: Additional overrides for GenerationConfig fields

    Returns:
        GenerationConfig with configured temperature and token limit
    """
    values = {
        "temperature": config.llm.temperature,
        "max_tokens": config.llm.max_tokens,
    }
    values.update(overrides)
    return GenerationConfig(**values)


def _create_claude_client(config: Config) -> LLMClient:
    from issuescope.llm.claude import ClaudeClient

    return ClaudeClient(
        api_key=config.llm.claude.api_key or None,
        model=config.llm.claude.model,
        timeout=config.llm.claude.timeout_seconds,
    )


def _create_openai_client(config: Config) -> LLMClient:
    from issuescope.llm.openai import OpenAIClient

    return OpenAIClient(
        api_key=config.llm.openai.api_key or None,
        model=config.llm.openai.model,
        timeout=config.llm.openai.timeout_seconds,
    )


def _create_ollama_client(config: Config) -> LLMClient:
    from issuescope.llm.ollama import OllamaClient

    return OllamaClient(
        url=config.llm.ollama.url,
        model=config.llm.ollama.model,
        timeout=config.llm.ollama.timeout_seconds,
    )


_PROVIDER_FACTORIES: Dict[str, Callable[[Config], LLMClient]] = {
    "claude": _create_claude_client,
    "openai": _create_openai_client,
    "ollama": _create_ollama_client,
}


def get_llm_client(config: Config, provider: Optional[str] = None) -> LLMClient:
    """
    Get an LLM client for the configured (or given) provider.

    The client is constructed without contacting the provider; use
    is_available() to probe it.

    Args:
        config: issuescope configuration
        provider: Provider name override (claude, openai, ollama)

    Returns:
        LLMClient instance

    Raises:
        ConfigurationError: If the provider name is unknown
    """
    name = (provider or config.llm.default_provider).lower()
    factory = _PROVIDER_FACTORIES.get(name)
    if factory is None:
        raise ConfigurationError(
            f"Unknown LLM provider: {name}. "
            f"Available: {', '.join(sorted(_PROVIDER_FACTORIES))}"
        )
    client = factory(config)
    logger.debug("Created LLM client", provider=name, model=client.model_name)
    return client
