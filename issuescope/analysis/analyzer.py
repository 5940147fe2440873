"""
Issue Analyzer.

Entry point that picks a strategy and runs it:

    analyzer = IssueAnalyzer.from_config_file()
    context = AnalysisContext(workspace_path="/repo", filtered_files=files)
    result = analyzer.analyze_sync(context, IssuePayload(title="Login fails"))
    print(result.to_dict())

Strategy selection follows ``analysis.strategy``:

    rule_based      -> RuleBasedStrategy
    model_assisted  -> ModelAssistedStrategy
    auto            -> ModelAssistedStrategy if its provider is available,
                       otherwise RuleBasedStrategy
"""

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

from issuescope.analysis.models import AnalysisContext, AnalysisResult, IssuePayload
from issuescope.analysis.strategies import (
    AnalysisStrategy,
    ModelAssistedStrategy,
    RuleBasedStrategy,
)
from issuescope.core.config import Config
from issuescope.core.exceptions import StrategyUnavailableError
from issuescope.core.logging import configure_logging, get_logger

if TYPE_CHECKING:
    from issuescope.llm.inference import InferenceProvider

logger = get_logger(__name__)


def _default_inference(config: Config) -> "InferenceProvider":
    """Inference service for the configured default provider."""
    from issuescope.llm import LLMInferenceService, get_generation_config, get_llm_client

    return LLMInferenceService(
        get_llm_client(config), get_generation_config(config, json_mode=True)
    )


def create_strategy(
    config: Config,
    inference: Optional["InferenceProvider"] = None,
    name: Optional[str] = None,
) -> AnalysisStrategy:
    """
    Build the strategy named by ``name`` or ``config.analysis.strategy``.

    "auto" builds the model-assisted strategy; IssueAnalyzer pairs it with a
    rule-based fallback. When no inference provider is given, one is built
    from the llm section of the config.

    Raises:
        ValueError: For an unknown strategy name
    """
    name = name or config.analysis.strategy
    if name == "rule_based":
        return RuleBasedStrategy(config)
    if name in ("model_assisted", "auto"):
        return ModelAssistedStrategy(inference or _default_inference(config), config)
    raise ValueError(f"Unknown analysis strategy: {name}")


async def select_strategy(strategies: Sequence[AnalysisStrategy]) -> AnalysisStrategy:
    """
    Return the first strategy whose availability probe succeeds.

    Raises:
        StrategyUnavailableError: If none is available
    """
    for strategy in strategies:
        try:
            available = await strategy.is_available()
        except Exception as e:
            logger.warning(
                "Availability check failed", strategy=strategy.name, error=str(e)
            )
            available = False
        if available:
            logger.debug("Selected strategy", strategy=strategy.name)
            return strategy
        logger.info("Strategy unavailable", strategy=strategy.name)

    names = ", ".join(s.name for s in strategies) or "none"
    raise StrategyUnavailableError(f"No analysis strategy is available (tried: {names})")


class IssueAnalyzer:
    """Selects a strategy per request and runs it."""

    def __init__(
        self,
        config: Optional[Config] = None,
        inference: Optional["InferenceProvider"] = None,
        strategies: Optional[Sequence[AnalysisStrategy]] = None,
    ):
        self.config = config or Config()
        self._inference = inference
        self._strategies: Optional[List[AnalysisStrategy]] = (
            list(strategies) if strategies is not None else None
        )

    @classmethod
    def from_config_file(
        cls,
        config_path: Optional[Path] = None,
        base_path: Optional[Path] = None,
        inference: Optional["InferenceProvider"] = None,
    ) -> "IssueAnalyzer":
        """Load configuration, apply its logging settings and build an analyzer."""
        from issuescope.core.config_loaders import load_config

        config = load_config(config_path, base_path)
        configure_logging(level=config.logging.level, log_file=config.log_file_path)
        return cls(config, inference=inference)

    @property
    def strategies(self) -> List[AnalysisStrategy]:
        """Strategies in preference order, built on first use."""
        if self._strategies is None:
            name = self.config.analysis.strategy
            primary = create_strategy(self.config, self._inference)
            self._strategies = [primary]
            if name == "auto":
                self._strategies.append(RuleBasedStrategy(self.config))
        return self._strategies

    async def analyze(
        self, context: AnalysisContext, issue: IssuePayload
    ) -> AnalysisResult:
        """Run the first available strategy."""
        strategy = await select_strategy(self.strategies)
        logger.info(
            "Analyzing issue",
            strategy=strategy.name,
            files=len(context.filtered_files),
        )
        return await strategy.analyze(context, issue)

    def analyze_sync(
        self, context: AnalysisContext, issue: IssuePayload
    ) -> AnalysisResult:
        """Blocking wrapper around analyze() for non-async callers."""
        return asyncio.run(self.analyze(context, issue))
