"""
Main configuration class for issuescope.

The Config dataclass aggregates the sub-configs, validates them, and builds
itself from a parsed YAML mapping.

Configuration Hierarchy
-----------------------
    Config
    ├── AnalysisConfig     # strategy, batch size, result caps
    ├── ScoringConfig      # path/content/symbol weights and thresholds
    ├── LLMConfig          # provider, model, API keys
    └── LoggingConfig      # level and optional log file

Environment Variables
---------------------
String values may use ${VAR_NAME} or ${VAR_NAME:default}:

    llm:
      claude:
        api_key: ${ANTHROPIC_API_KEY}
"""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from issuescope.core.config.analysis import (
    STRATEGY_NAMES,
    AnalysisConfig,
    ScoringConfig,
)
from issuescope.core.config.llm import LLM_PROVIDERS, LLMConfig, LLMProviderConfig
from issuescope.core.exceptions import ConfigValidationError

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class LoggingConfig:
    """Logging settings applied by configure_logging()."""

    level: str = "INFO"
    file: str = ""


@dataclass
class Config:
    """Main issuescope configuration."""

    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    _base_path: Path = field(default_factory=Path.cwd, repr=False)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check value ranges; raises ConfigValidationError on the first failure."""
        if self.analysis.strategy not in STRATEGY_NAMES:
            raise ConfigValidationError(
                f"analysis.strategy must be one of {STRATEGY_NAMES}, "
                f"got: {self.analysis.strategy}"
            )
        if self.analysis.batch_size < 1:
            raise ConfigValidationError("analysis.batch_size must be at least 1")
        if self.analysis.max_files_to_analyze < 1:
            raise ConfigValidationError(
                "analysis.max_files_to_analyze must be at least 1"
            )
        if self.llm.default_provider not in LLM_PROVIDERS:
            raise ConfigValidationError(
                f"llm.default_provider must be one of {LLM_PROVIDERS}, "
                f"got: {self.llm.default_provider}"
            )
        if self.logging.level.upper() not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                f"logging.level must be one of {sorted(VALID_LOG_LEVELS)}"
            )
        if not 0 < self.scoring.exclusion_penalty <= 1:
            raise ConfigValidationError(
                "scoring.exclusion_penalty must be in (0, 1]"
            )
        if self.scoring.normalization_divisor <= 0:
            raise ConfigValidationError(
                "scoring.normalization_divisor must be positive"
            )

    @property
    def base_path(self) -> Path:
        """Directory the configuration was loaded from."""
        return self._base_path

    @property
    def log_file_path(self) -> Optional[Path]:
        """Absolute log file path, if file logging is enabled."""
        if not self.logging.file:
            return None
        path = Path(self.logging.file)
        return path if path.is_absolute() else self._base_path / path

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a dictionary (private fields omitted)."""
        return {k: v for k, v in asdict(self).items() if not k.startswith("_")}

    @staticmethod
    def _filter_fields(cls_type: Any, data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Filter dict to only keys that match dataclass fields, handling None."""
        if not data:
            return {}
        valid_keys = {f.name for f in fields(cls_type)}
        return {k: v for k, v in data.items() if k in valid_keys}

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], base_path: Optional[Path] = None
    ) -> "Config":
        """Create Config from a parsed YAML mapping."""
        from issuescope.core.config_loaders import expand_env_vars

        data = expand_env_vars(data or {})

        config = cls(
            analysis=AnalysisConfig(
                **cls._filter_fields(AnalysisConfig, data.get("analysis"))
            ),
            scoring=cls._parse_scoring_config(data),
            llm=cls._parse_llm_config(data),
            logging=LoggingConfig(
                **cls._filter_fields(LoggingConfig, data.get("logging"))
            ),
        )
        if base_path:
            config._base_path = base_path
        return config

    @classmethod
    def _parse_scoring_config(cls, data: Dict[str, Any]) -> ScoringConfig:
        """Parse scoring config, merging partial tier weight overrides."""
        scoring_data = cls._filter_fields(ScoringConfig, data.get("scoring"))
        tier_overrides = scoring_data.pop("tier_weights", None) or {}
        scoring = ScoringConfig(**scoring_data)
        scoring.tier_weights.update(
            {k: float(v) for k, v in tier_overrides.items() if k in scoring.tier_weights}
        )
        return scoring

    @classmethod
    def _parse_llm_config(cls, data: Dict[str, Any]) -> LLMConfig:
        """Parse LLM config with nested provider blocks."""
        llm_data = data.get("llm") or {}
        defaults = LLMConfig()
        providers = {}
        for name in LLM_PROVIDERS:
            base = asdict(getattr(defaults, name))
            base.update(cls._filter_fields(LLMProviderConfig, llm_data.get(name)))
            providers[name] = LLMProviderConfig(**base)

        simple = {
            k: v
            for k, v in cls._filter_fields(LLMConfig, llm_data).items()
            if k not in LLM_PROVIDERS
        }
        return LLMConfig(**simple, **providers)
