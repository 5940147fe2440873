"""
Model-assisted strategy.

Uses an external inference provider for two things:

- Keywords: the model proposes search terms, mapped onto the four tiers
  (primary <- primary keywords, secondary <- component names, technical <-
  technical terms, contextual <- error patterns + file patterns + search
  strategies).
- File relevance: the top candidates from the candidate filter are judged
  one by one, ``batch_size`` calls at a time.

Every model call has a heuristic fallback, so inference failures change
the ranking but never fail the analysis:

    keyword call fails       -> local KeywordExtractor
    one file judgment fails  -> that file keeps its candidate score
    nothing retained         -> top candidates, unmodified
"""

import asyncio
from typing import TYPE_CHECKING, List, Optional, Sequence

from issuescope.analysis.candidates import CandidateFilter
from issuescope.analysis.keywords import KeywordExtractor
from issuescope.analysis.models import (
    AnalysisContext,
    AnalysisResult,
    FileJudgmentOutcome,
    FileMatch,
    IssuePayload,
    KeywordOutcome,
    OutcomeStatus,
    SearchKeywords,
)
from issuescope.analysis.ranker import ResultRanker, clamp_unit
from issuescope.analysis.strategies.base import BaseAnalysisStrategy
from issuescope.core.config import Config
from issuescope.core.exceptions import InferenceResponseError
from issuescope.core.logging import get_logger

if TYPE_CHECKING:
    from issuescope.llm.inference import InferenceProvider

logger = get_logger(__name__)


class ModelAssistedStrategy(BaseAnalysisStrategy):
    """Analysis refined by language-model judgments."""

    name = "model_assisted"

    def __init__(
        self,
        inference: "InferenceProvider",
        config: Optional[Config] = None,
        candidate_filter: Optional[CandidateFilter] = None,
        extractor: Optional[KeywordExtractor] = None,
        ranker: Optional[ResultRanker] = None,
    ):
        super().__init__(config, candidate_filter, extractor, ranker)
        self.inference = inference

    # ------------------------------------------------------------------
    # Keywords
    # ------------------------------------------------------------------

    async def infer_keywords(self, issue: IssuePayload) -> KeywordOutcome:
        """Ask the model for keywords, falling back to local extraction."""
        try:
            inferred = await self.inference.analyze_issue_for_keywords(issue)
            keywords = SearchKeywords(
                primary=inferred.primary_keywords,
                secondary=inferred.component_names,
                technical=inferred.technical_terms,
                contextual=[
                    *inferred.error_patterns,
                    *inferred.file_patterns,
                    *inferred.search_strategies,
                ],
            )
        except Exception as e:
            logger.warning(
                "Keyword inference failed, using local extraction", error=str(e)
            )
            return KeywordOutcome(
                OutcomeStatus.FALLBACK, self.extractor.extract(issue), str(e)
            )

        if keywords.is_empty:
            logger.warning("Keyword inference returned no terms, using local extraction")
            return KeywordOutcome(
                OutcomeStatus.FALLBACK,
                self.extractor.extract(issue),
                "empty keyword inference",
            )
        return KeywordOutcome(OutcomeStatus.SUCCESS, keywords)

    async def generate_keywords(self, issue: IssuePayload) -> SearchKeywords:
        outcome = await self.infer_keywords(issue)
        return outcome.keywords

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def judge_file(
        self, issue: IssuePayload, file: FileMatch
    ) -> FileJudgmentOutcome:
        """Judge one candidate. Never raises for inference failures."""
        from issuescope.llm.inference import RelevanceJudgment

        try:
            judgment = await self.inference.analyze_code_relevance(
                issue, file.path, file.content
            )
            if not isinstance(judgment, RelevanceJudgment):
                raise InferenceResponseError(
                    f"expected a relevance judgment, got {type(judgment).__name__}"
                )
            logger.debug(
                "File judged",
                path=file.path,
                relevant=judgment.is_relevant,
                score=f"{judgment.relevance_score:.2f}",
            )
        except Exception as e:
            logger.warning("File judgment failed", path=file.path, error=str(e))
            return FileJudgmentOutcome(file, OutcomeStatus.FALLBACK, error=str(e))

        return FileJudgmentOutcome(file, OutcomeStatus.SUCCESS, judgment=judgment)

    async def judge_files(
        self, issue: IssuePayload, files: Sequence[FileMatch]
    ) -> List[FileJudgmentOutcome]:
        """
        Judge files in sequential batches of batch_size.

        Calls within a batch run concurrently; outcomes keep input order.
        """
        batch_size = self.config.analysis.batch_size
        total_batches = (len(files) + batch_size - 1) // batch_size
        outcomes: List[FileJudgmentOutcome] = []
        for start in range(0, len(files), batch_size):
            batch = files[start : start + batch_size]
            logger.debug(
                "Judging batch",
                batch=f"{start // batch_size + 1}/{total_batches}",
                paths=", ".join(f.path for f in batch),
            )
            outcomes.extend(
                await asyncio.gather(*(self.judge_file(issue, f) for f in batch))
            )
        return outcomes

    async def find_relevant_files(
        self, context: AnalysisContext, keywords: SearchKeywords
    ) -> List[FileMatch]:
        analysis = self.config.analysis
        candidates = await self.candidate_filter.filter(
            context, keywords, max_files_to_analyze=analysis.max_files_to_analyze
        )
        if context.issue is None:
            logger.warning("No issue bound to context, skipping file judgments")
            return candidates[: analysis.max_files]

        to_judge = candidates[: analysis.max_files_to_analyze]
        outcomes = await self.judge_files(context.issue, to_judge)

        retained = [
            outcome.retained_file
            for outcome in outcomes
            if outcome.retained_file is not None
        ]
        fallbacks = sum(1 for o in outcomes if o.status is OutcomeStatus.FALLBACK)
        logger.info(
            "File judgments complete",
            judged=len(outcomes),
            retained=len(retained),
            fallbacks=fallbacks,
        )

        if not retained:
            logger.info("No files retained, using top candidates")
            return candidates[: analysis.fallback_file_count]

        retained.sort(key=lambda f: f.relevance_score, reverse=True)
        return retained[: analysis.max_files]

    # ------------------------------------------------------------------
    # Confidence and availability
    # ------------------------------------------------------------------

    def calculate_confidence(self, result: AnalysisResult) -> float:
        """Baseline plus a bonus when any file carries a model reason."""
        confidence = super().calculate_confidence(result)
        if any(f.reason for f in result.files):
            confidence += self.config.scoring.reason_bonus
        return clamp_unit(confidence)

    async def is_available(self) -> bool:
        try:
            return bool(await self.inference.is_available())
        except Exception as e:
            logger.warning("Inference service not available", error=str(e))
            return False
