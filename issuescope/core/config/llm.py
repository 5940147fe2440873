"""
LLM configuration.

Provider settings for the model-assisted strategy: Claude, OpenAI and a
local Ollama server.
"""

from dataclasses import dataclass, field

LLM_PROVIDERS = ("claude", "openai", "ollama")


@dataclass
class LLMProviderConfig:
    """Individual LLM provider configuration."""

    model: str = ""
    api_key: str = ""
    url: str = ""
    timeout_seconds: int = 60


@dataclass
class LLMConfig:
    """LLM providers configuration."""

    default_provider: str = "claude"
    temperature: float = 0.1  # relevance judgments favour determinism
    max_tokens: int = 1024
    claude: LLMProviderConfig = field(
        default_factory=lambda: LLMProviderConfig(model="claude-3-5-haiku-latest")
    )
    openai: LLMProviderConfig = field(
        default_factory=lambda: LLMProviderConfig(model="gpt-4o-mini")
    )
    ollama: LLMProviderConfig = field(
        default_factory=lambda: LLMProviderConfig(
            model="qwen2.5:14b", url="http://localhost:11434", timeout_seconds=120
        )
    )

    def provider_config(self, provider: str) -> LLMProviderConfig:
        """Return the settings block for a provider name."""
        if provider not in LLM_PROVIDERS:
            raise ValueError(f"Unknown LLM provider: {provider}")
        return getattr(self, provider)
