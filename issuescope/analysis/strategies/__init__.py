"""
Analysis strategies.

- RuleBasedStrategy: local heuristics only, always available
- ModelAssistedStrategy: heuristics refined by an inference provider
"""

from issuescope.analysis.strategies.base import AnalysisStrategy, BaseAnalysisStrategy
from issuescope.analysis.strategies.model_assisted import ModelAssistedStrategy
from issuescope.analysis.strategies.rule_based import RuleBasedStrategy

__all__ = [
    "AnalysisStrategy",
    "BaseAnalysisStrategy",
    "ModelAssistedStrategy",
    "RuleBasedStrategy",
]
