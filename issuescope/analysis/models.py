"""
Analysis data types.

Value objects passed between the engine stages. Everything here is frozen:
an AnalysisContext does not change during a call and an AnalysisResult is
never mutated after it is returned.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, Optional, Tuple

from issuescope.analysis.symbols import SymbolAnalysis

if TYPE_CHECKING:
    from issuescope.llm.inference import RelevanceJudgment

KEYWORD_TIERS = ("primary", "secondary", "technical", "contextual")


def _dedupe(values: Iterable[str]) -> Tuple[str, ...]:
    """Drop blanks and case-insensitive repeats, keeping first spelling and order."""
    seen = set()
    result = []
    for value in values:
        text = str(value).strip()
        key = text.lower()
        if not text or key in seen:
            continue
        seen.add(key)
        result.append(text)
    return tuple(result)


@dataclass(frozen=True)
class IssuePayload:
    """The problem report being analyzed."""

    title: str
    body: str = ""

    @property
    def text(self) -> str:
        return f"{self.title} {self.body or ''}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "body": self.body}


@dataclass(frozen=True)
class SearchKeywords:
    """
    Keyword tiers, weighted highest to lowest in field order.

    Any iterable is accepted for a tier; it is stored as a duplicate-free
    tuple.
    """

    primary: Tuple[str, ...] = ()
    secondary: Tuple[str, ...] = ()
    technical: Tuple[str, ...] = ()
    contextual: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for tier in KEYWORD_TIERS:
            object.__setattr__(self, tier, _dedupe(getattr(self, tier)))

    def tiers(self) -> Iterator[Tuple[str, Tuple[str, ...]]]:
        """Yield (tier name, keywords) from highest to lowest weight."""
        for tier in KEYWORD_TIERS:
            yield tier, getattr(self, tier)

    def all_keywords(self) -> Tuple[str, ...]:
        return (*self.primary, *self.secondary, *self.technical, *self.contextual)

    @property
    def is_empty(self) -> bool:
        return not self.all_keywords()

    def to_dict(self) -> Dict[str, Any]:
        return {tier: list(values) for tier, values in self.tiers()}


@dataclass(frozen=True)
class AnalysisContext:
    """
    Inputs for one analysis call.

    Attributes:
        workspace_path: Root of the workspace; file paths are relative to it
        filtered_files: Candidate file paths for this search
        symbol_analysis: Symbols from an external provider, if available
        issue: The report under analysis, bound by the strategy entry point
    """

    workspace_path: str
    filtered_files: Tuple[str, ...] = ()
    symbol_analysis: Optional[SymbolAnalysis] = None
    issue: Optional[IssuePayload] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "filtered_files", tuple(self.filtered_files))

    def with_issue(self, issue: IssuePayload) -> "AnalysisContext":
        return replace(self, issue=issue)


@dataclass(frozen=True)
class FileMatch:
    """A ranked file. Candidate filter output carries an empty reason."""

    path: str
    content: str
    relevance_score: float
    reason: str = ""

    def with_score(self, score: float, reason: str = "") -> "FileMatch":
        return replace(self, relevance_score=score, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "content": self.content,
            "relevance_score": self.relevance_score,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class SymbolLocation:
    file: str
    line: int
    column: int

    def to_dict(self) -> Dict[str, Any]:
        return {"file": self.file, "line": self.line, "column": self.column}


@dataclass(frozen=True)
class SymbolMatch:
    name: str
    type: str  # kind name, e.g. "Method"
    location: SymbolLocation
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "location": self.location.to_dict(),
            "description": self.description,
        }


@dataclass(frozen=True)
class ApiMatch:
    path: str
    method: str  # GET, POST, ... or UNKNOWN
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "method": self.method, "description": self.description}


@dataclass(frozen=True)
class AnalysisResult:
    """Complete ranked result of one analysis."""

    files: Tuple[FileMatch, ...] = ()
    symbols: Tuple[SymbolMatch, ...] = ()
    apis: Tuple[ApiMatch, ...] = ()
    confidence: float = 0.0
    strategy: str = ""
    keywords: SearchKeywords = field(default_factory=SearchKeywords)  # not serialized

    def __post_init__(self) -> None:
        object.__setattr__(self, "files", tuple(self.files))
        object.__setattr__(self, "symbols", tuple(self.symbols))
        object.__setattr__(self, "apis", tuple(self.apis))

    def with_confidence(self, confidence: float) -> "AnalysisResult":
        return replace(self, confidence=confidence)

    @property
    def is_empty(self) -> bool:
        return not (self.files or self.symbols or self.apis)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return {
            "files": [f.to_dict() for f in self.files],
            "symbols": [s.to_dict() for s in self.symbols],
            "apis": [a.to_dict() for a in self.apis],
            "confidence": self.confidence,
            "strategy": self.strategy,
        }


class OutcomeStatus(str, Enum):
    """Whether a step used the model's answer or fell back to heuristics."""

    SUCCESS = "success"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class KeywordOutcome:
    status: OutcomeStatus
    keywords: SearchKeywords
    error: Optional[str] = None


@dataclass(frozen=True)
class FileJudgmentOutcome:
    """
    Result of judging one candidate file.

    SUCCESS carries the model's judgment; FALLBACK carries the error and
    means the candidate keeps its heuristic score.
    """

    file: FileMatch
    status: OutcomeStatus
    judgment: Optional["RelevanceJudgment"] = None
    error: Optional[str] = None

    @property
    def retained_file(self) -> Optional[FileMatch]:
        """The file to keep, or None if the model judged it not relevant."""
        if self.status is OutcomeStatus.FALLBACK or self.judgment is None:
            return self.file
        if not self.judgment.is_relevant:
            return None
        return self.file.with_score(
            self.judgment.relevance_score, self.judgment.reason
        )
