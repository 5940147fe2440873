"""
Tests for analysis value objects.

Organization
------------
- TestSearchKeywords: tier normalization and helpers
- TestAnalysisContext: issue binding
- TestFileJudgmentOutcome: which file a judgment keeps
- TestAnalysisResult: serialization
"""

import dataclasses

import pytest

from issuescope.analysis.models import (
    AnalysisContext,
    AnalysisResult,
    ApiMatch,
    FileJudgmentOutcome,
    FileMatch,
    IssuePayload,
    OutcomeStatus,
    SearchKeywords,
    SymbolLocation,
    SymbolMatch,
)
from issuescope.llm.inference import RelevanceJudgment


class TestSearchKeywords:
    """Tests for SearchKeywords."""

    def test_tiers_are_deduplicated_case_insensitively(self):
        keywords = SearchKeywords(primary=["Login", "login", " ", "auth"])

        assert keywords.primary == ("Login", "auth")

    def test_duplicates_across_tiers_are_kept(self):
        keywords = SearchKeywords(primary=["token"], secondary=["token"])

        assert keywords.all_keywords() == ("token", "token")

    def test_tier_order(self):
        keywords = SearchKeywords(
            primary=["a1"], secondary=["b1"], technical=["c1"], contextual=["d1"]
        )

        assert [name for name, _ in keywords.tiers()] == [
            "primary",
            "secondary",
            "technical",
            "contextual",
        ]
        assert keywords.all_keywords() == ("a1", "b1", "c1", "d1")

    def test_is_empty(self):
        assert SearchKeywords().is_empty
        assert not SearchKeywords(contextual=["E_FAIL"]).is_empty

    def test_frozen(self):
        keywords = SearchKeywords(primary=["x"])

        with pytest.raises(dataclasses.FrozenInstanceError):
            keywords.primary = ("y",)

    def test_to_dict(self):
        keywords = SearchKeywords(primary=["login"], technical=["jwt"])

        assert keywords.to_dict() == {
            "primary": ["login"],
            "secondary": [],
            "technical": ["jwt"],
            "contextual": [],
        }


class TestAnalysisContext:
    """Tests for AnalysisContext."""

    def test_with_issue_returns_new_context(self):
        context = AnalysisContext(workspace_path="/repo", filtered_files=["a.py"])
        issue = IssuePayload(title="Crash")

        bound = context.with_issue(issue)

        assert bound.issue is issue
        assert context.issue is None
        assert bound.filtered_files == ("a.py",)

    def test_issue_text_joins_title_and_body(self):
        assert IssuePayload(title="Crash", body="on save").text == "Crash on save"
        assert IssuePayload(title="Crash").text == "Crash"


class TestFileJudgmentOutcome:
    """Tests for FileJudgmentOutcome.retained_file."""

    @pytest.fixture
    def candidate(self) -> FileMatch:
        return FileMatch(path="src/app.ts", content="code", relevance_score=0.4)

    def test_relevant_judgment_replaces_score_and_reason(self, candidate):
        judgment = RelevanceJudgment(
            is_relevant=True, relevance_score=0.9, reason="defines the handler"
        )

        kept = FileJudgmentOutcome(candidate, OutcomeStatus.SUCCESS, judgment).retained_file

        assert kept.relevance_score == 0.9
        assert kept.reason == "defines the handler"
        assert kept.content == "code"

    def test_irrelevant_judgment_drops_file(self, candidate):
        judgment = RelevanceJudgment(is_relevant=False, relevance_score=0.8)

        outcome = FileJudgmentOutcome(candidate, OutcomeStatus.SUCCESS, judgment)

        assert outcome.retained_file is None

    def test_fallback_keeps_original(self, candidate):
        outcome = FileJudgmentOutcome(
            candidate, OutcomeStatus.FALLBACK, error="timeout"
        )

        assert outcome.retained_file is candidate


class TestAnalysisResult:
    """Tests for AnalysisResult."""

    def test_is_empty(self):
        assert AnalysisResult().is_empty
        assert not AnalysisResult(apis=[ApiMatch("a.ts", "GET", "")]).is_empty

    def test_to_dict(self):
        result = AnalysisResult(
            files=[FileMatch("a.ts", "x", 0.5, "why")],
            symbols=[
                SymbolMatch("run", "Method", SymbolLocation("a.ts", 3, 4), "Runner.run")
            ],
            apis=[ApiMatch("a.ts", "POST", "create")],
            confidence=0.7,
            strategy="rule_based",
            keywords=SearchKeywords(primary=["run"]),
        )

        data = result.to_dict()

        assert data["files"][0] == {
            "path": "a.ts",
            "content": "x",
            "relevance_score": 0.5,
            "reason": "why",
        }
        assert data["symbols"][0]["location"] == {"file": "a.ts", "line": 3, "column": 4}
        assert data["apis"][0]["method"] == "POST"
        assert data["confidence"] == 0.7
        assert data["strategy"] == "rule_based"
        assert set(data) == {"files", "symbols", "apis", "confidence", "strategy"}
