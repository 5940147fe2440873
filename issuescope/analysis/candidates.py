"""
Candidate Filter.

Two-pass file scoring that keeps I/O bounded on workspaces of any size:

1. Path pass (no I/O): every path is scored from keyword hits in its
   filename, directory and full path, plus structural bonuses. Paths above
   the path threshold are sorted and at most ``2 x max_files_to_analyze``
   survive.
2. Content pass: only the survivors are read. Keyword frequency, damped per
   keyword and normalized by length, is added to the path score; results
   above the combined threshold are normalized to [0, 1] and sorted.

All weights and thresholds come from ScoringConfig.
"""

import os
import posixpath
from typing import Iterable, List, Optional, Tuple

from issuescope.analysis.file_reader import FileContentReader
from issuescope.analysis.models import AnalysisContext, FileMatch, SearchKeywords
from issuescope.core.config import ScoringConfig
from issuescope.core.logging import get_logger

logger = get_logger(__name__)

CODE_EXTENSIONS = frozenset(
    """
    ts js tsx jsx mjs cjs vue svelte py java kt scala cpp hpp c h cs php rb go
    rs swift sql json yaml yml toml xml config ini cfg md txt rst
    """.split()
)

IMPORTANT_FILE_STEMS = frozenset(
    ["index", "main", "app", "server", "client", "api", "config", "setup", "init", "__init__"]
)

IMPORTANT_FILENAMES = frozenset(
    [
        "package.json",
        "pyproject.toml",
        "cargo.toml",
        "pom.xml",
        "build.gradle",
        "go.mod",
        "readme.md",
    ]
)

IMPORTANT_DIRECTORIES = frozenset(
    """
    src lib core api routes controllers services components utils helpers
    models types interfaces test tests spec specs config configs settings
    """.split()
)

EXCLUDED_DIRECTORIES = frozenset(
    """
    node_modules .git dist build coverage .next .nuxt vendor target bin obj
    .vscode .idea __pycache__ .venv venv .tox .mypy_cache .pytest_cache
    """.split()
)

EXCLUDED_EXTENSIONS = frozenset(
    """
    log tmp cache lock png jpg jpeg gif svg ico woff woff2 ttf eot pyc class
    so dll exe o
    """.split()
)


def _normalize(path: str) -> str:
    return path.replace("\\", "/").lower()


def _extension(filename: str) -> str:
    _, ext = posixpath.splitext(filename)
    return ext[1:]


class CandidateFilter:
    """
    Path-then-content scorer.

    Example:
        candidate_filter = CandidateFilter(config.scoring)
        files = await candidate_filter.filter(context, keywords, max_files_to_analyze=8)
    """

    def __init__(
        self,
        scoring: Optional[ScoringConfig] = None,
        reader: Optional[FileContentReader] = None,
    ):
        self.scoring = scoring or ScoringConfig()
        self.reader = reader or FileContentReader()

    # ------------------------------------------------------------------
    # Pass 1: path scoring
    # ------------------------------------------------------------------

    def is_excluded(self, path: str) -> bool:
        """True for build, dependency, VCS and cache paths and binary/media files."""
        normalized = _normalize(path)
        directory, filename = posixpath.split(normalized)
        if any(part in EXCLUDED_DIRECTORIES for part in directory.split("/")):
            return True
        return _extension(filename) in EXCLUDED_EXTENSIONS

    def score_path(
        self, path: str, keywords: SearchKeywords, apply_exclusions: bool = True
    ) -> float:
        """
        Score a path without reading it.

        Args:
            path: Workspace-relative path
            keywords: Search keywords
            apply_exclusions: Multiply by the exclusion penalty for excluded paths

        Returns:
            Unbounded, non-negative path score
        """
        s = self.scoring
        full_path = _normalize(path)
        directory, filename = posixpath.split(full_path)
        score = 0.0

        for keyword in keywords.primary:
            needle = keyword.lower()
            if needle in filename:
                score += s.primary_filename_weight
            elif needle in directory:
                score += s.primary_directory_weight

        for keyword in keywords.secondary:
            needle = keyword.lower()
            if needle in filename:
                score += s.secondary_filename_weight
            elif needle in directory:
                score += s.secondary_directory_weight

        for keyword in keywords.technical:
            if keyword.lower() in full_path:
                score += s.technical_path_weight

        for keyword in keywords.contextual:
            if keyword.lower() in full_path:
                score += s.contextual_path_weight

        if _extension(filename) in CODE_EXTENSIONS:
            score += s.code_extension_bonus
        if filename in IMPORTANT_FILENAMES or filename.split(".")[0] in IMPORTANT_FILE_STEMS:
            score += s.important_filename_bonus
        if any(part in IMPORTANT_DIRECTORIES for part in directory.split("/")):
            score += s.important_directory_bonus

        if apply_exclusions and self.is_excluded(path):
            score *= s.exclusion_penalty
        return score

    def rank_paths(
        self, paths: Iterable[str], keywords: SearchKeywords, max_files_to_analyze: int
    ) -> List[Tuple[str, float]]:
        """
        Pass 1: keep paths above the path threshold, best first.

        Returns:
            At most 2 x max_files_to_analyze (path, score) pairs
        """
        scored = []
        for path in paths:
            score = self.score_path(path, keywords)
            if score > self.scoring.path_threshold:
                scored.append((path, score))
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored[: 2 * max_files_to_analyze]

    # ------------------------------------------------------------------
    # Pass 2: content scoring
    # ------------------------------------------------------------------

    def score_content(self, content: str, keywords: SearchKeywords) -> float:
        """Damped keyword frequency, normalized by content length."""
        s = self.scoring
        lowered = content.lower()
        score = 0.0
        for keyword in keywords.all_keywords():
            occurrences = lowered.count(keyword.lower())
            score += min(occurrences * s.content_hit_weight, s.content_keyword_cap)
        return score / max(len(content) / s.content_length_unit, 1.0)

    async def filter(
        self,
        context: AnalysisContext,
        keywords: SearchKeywords,
        max_files_to_analyze: int,
    ) -> List[FileMatch]:
        """
        Run both passes over the context's file list.

        Files are read one at a time; unreadable files are skipped.

        Returns:
            Candidates sorted by relevance_score (descending), each with an
            empty reason and content truncated to max_content_chars
        """
        s = self.scoring
        ranked = self.rank_paths(context.filtered_files, keywords, max_files_to_analyze)
        logger.debug(
            "Path pass complete",
            total=len(context.filtered_files),
            kept=len(ranked),
        )

        candidates: List[FileMatch] = []
        for path, path_score in ranked:
            content = await self.reader.read(os.path.join(context.workspace_path, path))
            if content is None:
                continue
            raw_score = path_score + self.score_content(content, keywords)
            if raw_score <= s.combined_threshold:
                continue
            candidates.append(
                FileMatch(
                    path=path,
                    content=content[: s.max_content_chars],
                    relevance_score=min(raw_score / s.normalization_divisor, 1.0),
                )
            )

        candidates.sort(key=lambda f: f.relevance_score, reverse=True)
        logger.info(
            "Candidate files selected",
            loaded=len(ranked),
            kept=len(candidates),
        )
        return candidates
