"""
Code Relevance Analysis.

Finds the files, symbols and API surfaces in a workspace that relate to an
issue description.

Pipeline
--------
    issue text
      -> KeywordExtractor (or model inference)    SearchKeywords
      -> CandidateFilter (path pass, content pass) ranked files
      -> AnalysisStrategy (optional model judgments)
      -> ResultRanker                              AnalysisResult
"""

from issuescope.analysis.analyzer import IssueAnalyzer, create_strategy, select_strategy
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
from issuescope.analysis.ranker import ResultRanker
from issuescope.analysis.strategies import (
    AnalysisStrategy,
    BaseAnalysisStrategy,
    ModelAssistedStrategy,
    RuleBasedStrategy,
)
from issuescope.analysis.symbols import SymbolAnalysis, SymbolInfo

__all__ = [
    "AnalysisContext",
    "AnalysisResult",
    "AnalysisStrategy",
    "ApiMatch",
    "BaseAnalysisStrategy",
    "CandidateFilter",
    "FileContentReader",
    "FileMatch",
    "IssueAnalyzer",
    "IssuePayload",
    "KeywordExtractor",
    "ModelAssistedStrategy",
    "ResultRanker",
    "RuleBasedStrategy",
    "SearchKeywords",
    "SymbolAnalysis",
    "SymbolInfo",
    "SymbolLocation",
    "SymbolMatch",
    "create_strategy",
    "select_strategy",
]
