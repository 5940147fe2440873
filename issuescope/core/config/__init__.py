"""
Configuration Management for issuescope.

Dataclass hierarchy mapped to a YAML file, with ${VAR} expansion and
environment overrides applied by load_config():

    from issuescope.core.config import Config
    from issuescope.core.config_loaders import load_config

    config = load_config()
    batch = config.analysis.batch_size
"""

from issuescope.core.config.analysis import (
    STRATEGY_NAMES,
    AnalysisConfig,
    ScoringConfig,
)
from issuescope.core.config.config import Config, LoggingConfig
from issuescope.core.config.llm import LLM_PROVIDERS, LLMConfig, LLMProviderConfig

__all__ = [
    "Config",
    "LoggingConfig",
    "AnalysisConfig",
    "ScoringConfig",
    "STRATEGY_NAMES",
    "LLMConfig",
    "LLMProviderConfig",
    "LLM_PROVIDERS",
]
