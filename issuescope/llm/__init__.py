"""
LLM Provider Integrations.

Provider clients used by the model-assisted analysis strategy, plus the
inference service that turns them into relevance judgments.

Supported Providers
-------------------
- ClaudeClient: Anthropic Claude models (anthropic SDK)
- OpenAIClient: OpenAI GPT models (openai SDK)
- OllamaClient: Ollama-served local models (HTTP via requests)

Provider Selection
------------------
    llm:
      default_provider: claude     # claude, openai, ollama
      claude:
        model: claude-3-5-haiku-latest
        api_key: ${ANTHROPIC_API_KEY}

Or programmatically:

    from issuescope.llm import LLMInferenceService, get_llm_client
    service = LLMInferenceService(get_llm_client(config))
"""

from issuescope.llm.base import GenerationConfig, LLMClient
from issuescope.llm.factory import get_generation_config, get_llm_client
from issuescope.llm.inference import (
    InferenceProvider,
    KeywordInference,
    LLMInferenceService,
    RelevanceJudgment,
    extract_json_object,
)

__all__ = [
    "GenerationConfig",
    "InferenceProvider",
    "KeywordInference",
    "LLMClient",
    "LLMInferenceService",
    "RelevanceJudgment",
    "extract_json_object",
    "get_generation_config",
    "get_llm_client",
]
