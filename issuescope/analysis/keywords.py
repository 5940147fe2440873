"""
Keyword Extractor.

Turns a free-text problem report into four keyword tiers:

- primary: high-signal terms, ranked by frequency with bonuses for title
  hits, identifier shape and quoting
- secondary: camelCase, snake_case and PascalCase identifiers
- technical: recognized technology and framework vocabulary
- contextual: quoted strings, versions, ALL_CAPS constants and
  ``error:`` / ``failed:`` fragments

Extraction is pure text processing and never fails; text without matches
yields empty tiers.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Pattern, Tuple

from issuescope.analysis.models import IssuePayload, SearchKeywords
from issuescope.core.logging import get_logger

logger = get_logger(__name__)

STOP_WORDS = frozenset(
    """
    a about above after again against all also am an and any are as at be
    because been before being below between both but by can cannot could did
    do does doing done down during each even ever every few for from further
    get gets getting got had has have having he her here hers him his how i
    if in into is it its itself just like make makes may me might more most
    much must my need needs no nor not now of off on once only or other our
    out over own same see seems she should so some such than that the their
    them then there these they this those through to too under until up us
    use used using very via was we were what when where which while who why
    will with would you your yes still already really actually
    issue issues bug bugs problem problems error errors fix fixed fails
    failed failing work works working broken expected actual behavior
    behaviour steps reproduce result results happen happens occurs
    instead please thanks thank help wrong seem try tried trying
    """.split()
)

TECHNICAL_TERMS: Tuple[str, ...] = (
    # Languages
    "python", "javascript", "typescript", "java", "kotlin", "scala", "golang",
    "rust", "ruby", "php", "swift", "c++", "c#", "sql", "html", "css",
    # Frameworks and runtimes
    "react", "vue", "angular", "svelte", "next.js", "nuxt", "node.js", "node",
    "express", "nestjs", "django", "flask", "fastapi", "spring", "spring boot",
    "rails", "laravel", ".net", "asp.net", "electron", "jquery",
    # Data and infrastructure
    "postgres", "postgresql", "mysql", "sqlite", "mongodb", "redis", "kafka",
    "rabbitmq", "elasticsearch", "graphql", "grpc", "websocket",
    "docker", "kubernetes", "helm", "terraform", "aws", "gcp", "azure", "nginx",
    # Tooling and formats
    "webpack", "vite", "babel", "eslint", "jest", "pytest", "junit", "maven",
    "gradle", "npm", "yarn", "pip", "git", "json", "yaml", "xml", "protobuf",
    "oauth", "jwt", "http", "https", "api", "cli", "orm", "lsp", "regex",
)

PRIMARY_CAP = 12
SECONDARY_CAP = 15
TECHNICAL_CAP = 12
CONTEXTUAL_CAP = 10

_WORD_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*")
_EMPHASIS_PATTERN = re.compile(r'"([^"\n]+)"|`([^`\n]+)`')
_IDENTIFIER_SHAPE = re.compile(r"[a-z][A-Z]|[A-Z][a-z]+[A-Z]|_|\d")

_SECONDARY_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"\b[a-z][a-z0-9]*[A-Z][a-zA-Z0-9]*\b"),  # camelCase
    re.compile(r"\b[a-z][a-z0-9]*(?:_[a-z0-9]+)+\b"),  # snake_case
    re.compile(r"\b[A-Z][a-z0-9]+(?:[A-Z][a-z0-9]*)+\b"),  # PascalCase
)

_CONTEXTUAL_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r'"[^"\n]+"'),
    re.compile(r"(?<!\w)'[^'\n]+'(?!\w)"),
    re.compile(r"`[^`\n]+`"),
    re.compile(r"\b\d+\.\d+\.\d+\b"),
    re.compile(r"\b[A-Z][A-Z0-9_]{2,}\b"),
    re.compile(r"\berror\s*:\s*[^\n]+", re.IGNORECASE),
    re.compile(r"\bfailed\s*:\s*[^\n]+", re.IGNORECASE),
)
_QUOTE_TABLE = str.maketrans("", "", "\"'`")


def _technical_pattern(term: str) -> Pattern[str]:
    return re.compile(
        r"(?<![A-Za-z0-9])" + re.escape(term) + r"(?![A-Za-z0-9+#])", re.IGNORECASE
    )


_TECHNICAL_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = tuple(
    (term, _technical_pattern(term)) for term in TECHNICAL_TERMS
)


@dataclass
class _Candidate:
    """Running score for one primary keyword candidate."""

    text: str
    first_index: int
    score: float = 0.0


class KeywordExtractor:
    """
    Local, deterministic keyword extraction.

    Example:
        extractor = KeywordExtractor()
        keywords = extractor.extract(IssuePayload(title="Crash in UserService"))
        keywords.secondary  # ("UserService",)
    """

    def __init__(
        self,
        primary_cap: int = PRIMARY_CAP,
        secondary_cap: int = SECONDARY_CAP,
        technical_cap: int = TECHNICAL_CAP,
        contextual_cap: int = CONTEXTUAL_CAP,
    ):
        self.primary_cap = primary_cap
        self.secondary_cap = secondary_cap
        self.technical_cap = technical_cap
        self.contextual_cap = contextual_cap

    def extract(self, issue: IssuePayload) -> SearchKeywords:
        """Extract all four tiers from an issue's title and body."""
        text = issue.text
        keywords = SearchKeywords(
            primary=self.extract_primary(text, title=issue.title),
            secondary=self.extract_secondary(text),
            technical=self.extract_technical(text),
            contextual=self.extract_contextual(text),
        )
        logger.debug(
            "Extracted keywords",
            primary=len(keywords.primary),
            secondary=len(keywords.secondary),
            technical=len(keywords.technical),
            contextual=len(keywords.contextual),
        )
        return keywords

    def extract_primary(self, text: str, title: str = "") -> List[str]:
        """
        Rank candidate terms by signal.

        Score per term: occurrences, +2 when it appears in the title, +1 for
        identifier shape (camelCase, snake_case, digits), +1 when it appears
        inside double quotes or backticks. Ties keep first-occurrence order.
        """
        candidates: Dict[str, _Candidate] = {}
        counts: Counter = Counter()
        for index, term in enumerate(self._terms(text)):
            key = term.lower()
            counts[key] += 1
            if key not in candidates:
                candidates[key] = _Candidate(text=term, first_index=index)

        title_terms = {term.lower() for term in self._terms(title)}
        emphasized = {
            term.lower()
            for match in _EMPHASIS_PATTERN.finditer(text)
            for term in self._terms(match.group(1) or match.group(2) or "")
        }

        for key, candidate in candidates.items():
            candidate.score = float(counts[key])
            if key in title_terms:
                candidate.score += 2.0
            if _IDENTIFIER_SHAPE.search(candidate.text):
                candidate.score += 1.0
            if key in emphasized:
                candidate.score += 1.0

        ranked = sorted(
            candidates.values(), key=lambda c: (-c.score, c.first_index)
        )
        return [c.text for c in ranked[: self.primary_cap]]

    def extract_secondary(self, text: str) -> List[str]:
        """Identifier-shaped words in order of first occurrence."""
        found: List[Tuple[int, str]] = []
        for pattern in _SECONDARY_PATTERNS:
            found.extend((m.start(), m.group(0)) for m in pattern.finditer(text))
        found.sort(key=lambda item: item[0])
        return self._unique([word for _, word in found], self.secondary_cap)

    def extract_technical(self, text: str) -> List[str]:
        """Vocabulary terms present in the text, in order of first occurrence."""
        hits: List[Tuple[int, str]] = []
        for term, pattern in _TECHNICAL_PATTERNS:
            match = pattern.search(text)
            if match:
                hits.append((match.start(), term))
        hits.sort(key=lambda item: item[0])
        return self._unique([term for _, term in hits], self.technical_cap)

    def extract_contextual(self, text: str) -> List[str]:
        """Quoted strings, versions, constants and error/failure fragments."""
        matches: List[str] = []
        for pattern in _CONTEXTUAL_PATTERNS:
            for match in pattern.finditer(text):
                cleaned = match.group(0).translate(_QUOTE_TABLE).strip()
                if len(cleaned) > 2:
                    matches.append(cleaned)
        return self._unique(matches, self.contextual_cap)

    @staticmethod
    def _terms(text: str) -> List[str]:
        """Words worth keeping; dotted identifiers are split into parts."""
        terms: List[str] = []
        for match in _WORD_PATTERN.finditer(text or ""):
            for part in match.group(0).split("."):
                if len(part) >= 3 and part.lower() not in STOP_WORDS:
                    terms.append(part)
        return terms

    @staticmethod
    def _unique(values: List[str], cap: int) -> List[str]:
        seen = set()
        result = []
        for value in values:
            if value in seen:
                continue
            seen.add(value)
            result.append(value)
            if len(result) >= cap:
                break
        return result
