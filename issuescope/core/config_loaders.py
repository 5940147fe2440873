"""
Configuration Loading Functions.

Loads issuescope configuration from YAML, expands environment variable
references, and applies environment overrides.

Precedence: 1. environment variables, 2. YAML file, 3. defaults.

Environment Overrides
---------------------
    ISSUESCOPE_STRATEGY              analysis.strategy
    ISSUESCOPE_BATCH_SIZE            analysis.batch_size
    ISSUESCOPE_MAX_FILES_TO_ANALYZE  analysis.max_files_to_analyze
    ISSUESCOPE_LLM_PROVIDER          llm.default_provider
    ISSUESCOPE_LLM_MODEL             model of the default provider
    ISSUESCOPE_LOG_LEVEL             logging.level
    ANTHROPIC_API_KEY / OPENAI_API_KEY / OLLAMA_HOST
"""

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import yaml

from issuescope.core.logging import get_logger

if TYPE_CHECKING:
    from issuescope.core.config import Config

logger = get_logger(__name__)

CONFIG_FILENAMES = ("issuescope.yaml", "config.yaml")


def expand_env_vars(value: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:default} references.

    Args:
        value: Configuration value (string, dict, list, or primitive)

    Returns:
        Value with all environment variables expanded
    """
    if isinstance(value, str):
        pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

        def replace_env_var(match: re.Match) -> str:
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(match.group(1), default_value)

        return re.sub(pattern, replace_env_var, value)
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    return value


def _get_env_int(name: str) -> Optional[int]:
    """Read a positive integer from the environment, ignoring bad values."""
    raw = os.environ.get(name)
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer environment value", variable=name)
        return None
    if value < 1:
        logger.warning("Ignoring non-positive environment value", variable=name)
        return None
    return value


def _apply_analysis_overrides(config: "Config") -> None:
    strategy = os.environ.get("ISSUESCOPE_STRATEGY")
    if strategy:
        config.analysis.strategy = strategy.strip().lower()

    batch_size = _get_env_int("ISSUESCOPE_BATCH_SIZE")
    if batch_size is not None:
        config.analysis.batch_size = batch_size

    max_files = _get_env_int("ISSUESCOPE_MAX_FILES_TO_ANALYZE")
    if max_files is not None:
        config.analysis.max_files_to_analyze = max_files


def _apply_llm_overrides(config: "Config") -> None:
    anthropic_key = os.environ.get("ANTHROPIC_API_KEY")
    if anthropic_key:
        config.llm.claude.api_key = anthropic_key

    openai_key = os.environ.get("OPENAI_API_KEY")
    if openai_key:
        config.llm.openai.api_key = openai_key

    ollama_host = os.environ.get("OLLAMA_HOST")
    if ollama_host:
        config.llm.ollama.url = ollama_host

    provider = os.environ.get("ISSUESCOPE_LLM_PROVIDER")
    if provider:
        config.llm.default_provider = provider.strip().lower()

    model = os.environ.get("ISSUESCOPE_LLM_MODEL")
    if model:
        # Unknown providers are rejected by validate() below
        provider_block = getattr(config.llm, config.llm.default_provider, None)
        if provider_block is not None:
            provider_block.model = model


def _apply_env_overrides(config: "Config") -> "Config":
    """Apply environment overrides, then re-validate the result."""
    _apply_analysis_overrides(config)
    _apply_llm_overrides(config)

    log_level = os.environ.get("ISSUESCOPE_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.strip().upper()

    config.validate()
    return config


def _find_config_file(base_path: Path) -> Optional[Path]:
    for filename in CONFIG_FILENAMES:
        candidate = base_path / filename
        if candidate.exists():
            return candidate
    return None


def load_config(
    config_path: Optional[Path] = None, base_path: Optional[Path] = None
) -> "Config":
    """
    Load configuration from YAML with environment variable overrides.

    A missing file yields the defaults. An unreadable or malformed file is
    logged and also yields the defaults. Out-of-range values, from the file
    or the environment, raise ConfigValidationError.

    Args:
        config_path: Path to config file. Defaults to issuescope.yaml or
            config.yaml in base_path.
        base_path: Base path for relative paths. Defaults to cwd.

    Returns:
        Config object with all settings.
    """
    from issuescope.core.config import Config

    base_path = base_path or Path.cwd()
    config_path = config_path or _find_config_file(base_path)

    if config_path is None or not config_path.exists():
        return _create_default_config(base_path)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        config = Config.from_dict(data, base_path)
    except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
        logger.warning(
            "Could not load config, using defaults",
            path=str(config_path),
            error=str(e),
        )
        return _create_default_config(base_path)

    return _apply_env_overrides(config)


def _create_default_config(base_path: Path) -> "Config":
    from issuescope.core.config import Config

    config = Config()
    config._base_path = base_path
    return _apply_env_overrides(config)


def save_config(config: "Config", config_path: Optional[Path] = None) -> Path:
    """
    Write configuration to YAML.

    Args:
        config: Configuration to save
        config_path: Destination. Defaults to issuescope.yaml in the base path.

    Returns:
        Path that was written
    """
    config_path = config_path or config.base_path / CONFIG_FILENAMES[0]
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    return config_path
