"""
Analysis Strategy Interface.

Every strategy turns (context, issue) into an AnalysisResult through the
same stages:

    generate_keywords -> find_relevant_files -> find_relevant_symbols
        -> find_relevant_apis -> ResultRanker.assemble -> calculate_confidence

AnalysisStrategy is the contract. BaseAnalysisStrategy implements the
stages that do not depend on the variant (symbol and API matching, baseline
confidence) and the analyze() driver; variants supply keywords, files and
availability.
"""

import os
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from issuescope.analysis.candidates import CandidateFilter
from issuescope.analysis.file_reader import FileContentReader
from issuescope.analysis.keywords import KeywordExtractor
from issuescope.analysis.models import (
    AnalysisContext,
    AnalysisResult,
    ApiMatch,
    FileMatch,
    IssuePayload,
    SearchKeywords,
    SymbolLocation,
    SymbolMatch,
)
from issuescope.analysis.ranker import ResultRanker, clamp_unit
from issuescope.analysis.symbols import HTTP_METHODS, SymbolInfo, extract_http_method
from issuescope.core.config import Config
from issuescope.core.logging import AnalysisLogger, get_logger

logger = get_logger(__name__)

API_TERMS: Tuple[str, ...] = (
    "controller",
    "route",
    "endpoint",
    "api",
    "handler",
    "service",
) + HTTP_METHODS

QUALIFIED_NAME_FACTOR = 0.8
COMMENT_FACTOR = 0.5


class AnalysisStrategy(ABC):
    """Contract shared by every analysis strategy."""

    name: str = "base"

    @abstractmethod
    async def generate_keywords(self, issue: IssuePayload) -> SearchKeywords:
        """Derive search keywords from the issue."""

    @abstractmethod
    async def find_relevant_files(
        self, context: AnalysisContext, keywords: SearchKeywords
    ) -> List[FileMatch]:
        """Ranked files, at most AnalysisConfig.max_files."""

    @abstractmethod
    async def find_relevant_symbols(
        self, context: AnalysisContext, keywords: SearchKeywords
    ) -> List[SymbolMatch]:
        """Ranked symbols, at most AnalysisConfig.max_symbols."""

    @abstractmethod
    async def find_relevant_apis(
        self, context: AnalysisContext, keywords: SearchKeywords
    ) -> List[ApiMatch]:
        """Ranked API surfaces, at most AnalysisConfig.max_apis."""

    @abstractmethod
    def calculate_confidence(self, result: AnalysisResult) -> float:
        """Confidence in [0, 1] for an assembled result."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Whether the strategy can run right now."""

    @abstractmethod
    async def analyze(
        self, context: AnalysisContext, issue: IssuePayload
    ) -> AnalysisResult:
        """Run every stage and return the ranked result."""


class BaseAnalysisStrategy(AnalysisStrategy):
    """
    Shared stages and the analyze() driver.

    Collaborators are injectable so tests can swap the file reader or the
    scoring constants.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        candidate_filter: Optional[CandidateFilter] = None,
        extractor: Optional[KeywordExtractor] = None,
        ranker: Optional[ResultRanker] = None,
    ):
        self.config = config or Config()
        self.candidate_filter = candidate_filter or CandidateFilter(
            self.config.scoring,
            FileContentReader(self.config.analysis.max_file_bytes),
        )
        self.extractor = extractor or KeywordExtractor()
        self.ranker = ranker or ResultRanker(self.config.analysis, self.config.scoring)

    # ------------------------------------------------------------------
    # Symbol and API matching
    # ------------------------------------------------------------------

    def keyword_match_score(self, symbol: SymbolInfo, keywords: SearchKeywords) -> float:
        """
        Weighted keyword match over name, qualified name and comment.

        Per keyword the best location counts: name (full tier weight),
        qualified name (0.8x) or comment (0.5x). The total is capped at 1.
        """
        weights = self.config.scoring.tier_weights
        name = symbol.name.lower()
        qualified = symbol.qualified_name.lower()
        comment = (symbol.comment or "").lower()

        score = 0.0
        for tier, tier_keywords in keywords.tiers():
            weight = weights.get(tier, 0.0)
            for keyword in tier_keywords:
                needle = keyword.lower()
                if needle in name:
                    score += weight
                elif needle in qualified:
                    score += weight * QUALIFIED_NAME_FACTOR
                elif needle in comment:
                    score += weight * COMMENT_FACTOR
                if score >= 1.0:
                    return 1.0
        return score

    @staticmethod
    def _relative_path(context: AnalysisContext, file_path: str) -> str:
        if os.path.isabs(file_path):
            return os.path.relpath(file_path, context.workspace_path)
        return file_path

    async def find_relevant_symbols(
        self, context: AnalysisContext, keywords: SearchKeywords
    ) -> List[SymbolMatch]:
        if context.symbol_analysis is None:
            return []

        threshold = self.config.scoring.symbol_threshold
        scored: List[Tuple[float, SymbolMatch]] = []
        for symbol in context.symbol_analysis.symbols:
            score = self.keyword_match_score(symbol, keywords)
            if score <= threshold:
                continue
            location = SymbolLocation(
                file=self._relative_path(context, symbol.file_path),
                line=symbol.line,
                column=symbol.column,
            )
            scored.append(
                (
                    score,
                    SymbolMatch(
                        name=symbol.name,
                        type=symbol.kind_name,
                        location=location,
                        description=symbol.description,
                    ),
                )
            )

        scored.sort(key=lambda item: item[0], reverse=True)
        return [match for _, match in scored[: self.config.analysis.max_symbols]]

    async def find_relevant_apis(
        self, context: AnalysisContext, keywords: SearchKeywords
    ) -> List[ApiMatch]:
        if context.symbol_analysis is None:
            return []

        threshold = self.config.scoring.api_threshold
        scored: List[Tuple[float, ApiMatch]] = []
        for symbol in context.symbol_analysis.symbols:
            text = symbol.search_text
            if not any(term in text for term in API_TERMS):
                continue
            score = self.keyword_match_score(symbol, keywords)
            if score <= threshold:
                continue
            scored.append(
                (
                    score,
                    ApiMatch(
                        path=self._relative_path(context, symbol.file_path),
                        method=extract_http_method(symbol),
                        description=symbol.description,
                    ),
                )
            )

        scored.sort(key=lambda item: item[0], reverse=True)
        return [match for _, match in scored[: self.config.analysis.max_apis]]

    def calculate_confidence(self, result: AnalysisResult) -> float:
        return self.ranker.baseline_confidence(result)

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------

    async def analyze(
        self, context: AnalysisContext, issue: IssuePayload
    ) -> AnalysisResult:
        """
        Run the stages in order and assemble the result.

        Errors from the file stage or any other top-level stage propagate;
        per-file and per-keyword inference failures are handled inside the
        stages themselves.
        """
        context = context.with_issue(issue)
        alog = AnalysisLogger(self.name)
        try:
            alog.start_stage("keywords")
            keywords = await self.generate_keywords(issue)

            alog.start_stage("files")
            files = await self.find_relevant_files(context, keywords)

            alog.start_stage("symbols")
            symbols = await self.find_relevant_symbols(context, keywords)

            alog.start_stage("apis")
            apis = await self.find_relevant_apis(context, keywords)
        except Exception as e:
            alog.finish(success=False, error=str(e))
            raise

        result = self.ranker.assemble(files, symbols, apis, self.name, keywords)
        result = result.with_confidence(clamp_unit(self.calculate_confidence(result)))
        alog.finish(
            success=True,
            files=len(result.files),
            symbols=len(result.symbols),
            apis=len(result.apis),
            confidence=f"{result.confidence:.2f}",
        )
        return result
