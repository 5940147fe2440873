"""
Analysis configuration.

Strategy selection, batching and output caps for the relevance engine, plus
the scoring constants used by the candidate filter and symbol scorers. The
scoring values are empirically tuned thresholds; nothing downstream assumes
more about them than their defaults' ordering.
"""

from dataclasses import dataclass, field
from typing import Dict

STRATEGY_NAMES = ("auto", "rule_based", "model_assisted")


@dataclass
class ScoringConfig:
    """Weights and thresholds shared by every scorer."""

    # Pass 1: path-only scoring
    primary_filename_weight: float = 3.0
    primary_directory_weight: float = 1.5
    secondary_filename_weight: float = 2.0
    secondary_directory_weight: float = 1.0
    technical_path_weight: float = 1.0
    contextual_path_weight: float = 0.5
    code_extension_bonus: float = 1.0
    important_filename_bonus: float = 1.5
    important_directory_bonus: float = 0.8
    exclusion_penalty: float = 0.1
    path_threshold: float = 0.3

    # Pass 2: content scoring
    content_hit_weight: float = 0.1
    content_keyword_cap: float = 2.0
    content_length_unit: int = 1000
    combined_threshold: float = 0.5
    normalization_divisor: float = 10.0
    max_content_chars: int = 4000

    # Symbol / API scoring
    tier_weights: Dict[str, float] = field(
        default_factory=lambda: {
            "primary": 1.0,
            "secondary": 0.7,
            "technical": 0.4,
            "contextual": 0.3,
        }
    )
    symbol_threshold: float = 0.5
    api_threshold: float = 0.3

    # Confidence
    reason_bonus: float = 0.2


@dataclass
class AnalysisConfig:
    """Strategy selection, batching and result caps."""

    strategy: str = "auto"  # auto, rule_based, model_assisted
    batch_size: int = 3
    max_files_to_analyze: int = 8  # model-assisted candidate cap
    rule_based_max_files: int = 10  # rule-based candidate cap
    fallback_file_count: int = 5
    max_files: int = 10
    max_symbols: int = 10
    max_apis: int = 8
    max_file_bytes: int = 2_000_000  # larger files are treated as unreadable
