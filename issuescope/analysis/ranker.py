"""
Result Ranker & Confidence Estimator.

Combines the file, symbol and API lists into one AnalysisResult. Each list
keeps the order its stage produced; the ranker only bounds the payload
(list caps, snippet length, score range) and estimates confidence.
"""

from typing import Iterable, List, Optional

from issuescope.analysis.models import (
    AnalysisResult,
    ApiMatch,
    FileMatch,
    SearchKeywords,
    SymbolMatch,
)
from issuescope.core.config import AnalysisConfig, ScoringConfig


def clamp_unit(value: float) -> float:
    """Clamp to [0, 1]; NaN becomes 0."""
    if value != value:
        return 0.0
    return max(0.0, min(1.0, value))


class ResultRanker:
    """Assembles bounded results and computes baseline confidence."""

    def __init__(
        self,
        analysis: Optional[AnalysisConfig] = None,
        scoring: Optional[ScoringConfig] = None,
    ):
        self.analysis = analysis or AnalysisConfig()
        self.scoring = scoring or ScoringConfig()

    def bound_files(self, files: Iterable[FileMatch]) -> List[FileMatch]:
        bounded = []
        for file in list(files)[: self.analysis.max_files]:
            content = file.content[: self.scoring.max_content_chars]
            score = clamp_unit(file.relevance_score)
            if content != file.content or score != file.relevance_score:
                file = FileMatch(file.path, content, score, file.reason)
            bounded.append(file)
        return bounded

    def assemble(
        self,
        files: Iterable[FileMatch],
        symbols: Iterable[SymbolMatch],
        apis: Iterable[ApiMatch],
        strategy: str = "",
        keywords: Optional[SearchKeywords] = None,
    ) -> AnalysisResult:
        """Build a result with capped lists and zero confidence."""
        return AnalysisResult(
            files=tuple(self.bound_files(files)),
            symbols=tuple(list(symbols)[: self.analysis.max_symbols]),
            apis=tuple(list(apis)[: self.analysis.max_apis]),
            confidence=0.0,
            strategy=strategy,
            keywords=keywords or SearchKeywords(),
        )

    def baseline_confidence(self, result: AnalysisResult) -> float:
        """
        Confidence from result coverage.

        0.6 x mean of the top three file scores, plus up to 0.2 for file
        count (saturating at 5), 0.1 for symbols (at 10) and 0.1 for APIs
        (at 8). An empty result scores 0.
        """
        if result.is_empty:
            return 0.0

        top_scores = sorted((f.relevance_score for f in result.files), reverse=True)[:3]
        mean_top = sum(top_scores) / len(top_scores) if top_scores else 0.0

        confidence = (
            0.6 * mean_top
            + 0.2 * min(len(result.files) / 5, 1.0)
            + 0.1 * min(len(result.symbols) / 10, 1.0)
            + 0.1 * min(len(result.apis) / 8, 1.0)
        )
        return clamp_unit(confidence)
