"""
Rule-based strategy.

Keywords come from the local extractor and files straight from the
candidate filter. Needs no external service, so it is always available and
its output is deterministic for a given workspace.
"""

from typing import List

from issuescope.analysis.models import (
    AnalysisContext,
    FileMatch,
    IssuePayload,
    SearchKeywords,
)
from issuescope.analysis.strategies.base import BaseAnalysisStrategy


class RuleBasedStrategy(BaseAnalysisStrategy):
    """Heuristic-only analysis."""

    name = "rule_based"

    async def generate_keywords(self, issue: IssuePayload) -> SearchKeywords:
        return self.extractor.extract(issue)

    async def find_relevant_files(
        self, context: AnalysisContext, keywords: SearchKeywords
    ) -> List[FileMatch]:
        analysis = self.config.analysis
        candidates = await self.candidate_filter.filter(
            context, keywords, max_files_to_analyze=analysis.rule_based_max_files
        )
        return candidates[: analysis.max_files]

    async def is_available(self) -> bool:
        return True
