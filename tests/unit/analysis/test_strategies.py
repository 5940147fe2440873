"""
Tests for the analysis strategies.

Test Strategy
-------------
- Run strategies against the on-disk sample workspace from conftest
- Replace the inference provider with FakeInference; no network calls
- Compare model-assisted output with what the candidate filter produces

Organization
------------
- TestRuleBasedStrategy: deterministic heuristic analysis
- TestSymbolAndApiMatching: shared symbol/API stages
- TestModelAssistedKeywords: keyword inference and fallback
- TestModelAssistedFiles: batched judgments and fallbacks
- TestModelAssistedConfidence: reason bonus and availability
"""

import pytest

from issuescope.analysis.candidates import CandidateFilter
from issuescope.analysis.keywords import KeywordExtractor
from issuescope.analysis.models import (
    AnalysisContext,
    AnalysisResult,
    FileMatch,
    OutcomeStatus,
    SearchKeywords,
)
from issuescope.analysis.strategies import ModelAssistedStrategy, RuleBasedStrategy
from issuescope.core.config import AnalysisConfig, Config
from issuescope.core.exceptions import InferenceError, InferenceTimeoutError
from issuescope.llm.inference import KeywordInference, RelevanceJudgment


async def filter_candidates(context, issue, max_files_to_analyze=8):
    """What the candidate filter returns for locally extracted keywords."""
    keywords = KeywordExtractor().extract(issue)
    return await CandidateFilter().filter(
        context.with_issue(issue), keywords, max_files_to_analyze
    )


# ============================================================================
# Rule-based
# ============================================================================


class TestRuleBasedStrategy:
    """Tests for RuleBasedStrategy."""

    @pytest.mark.asyncio
    async def test_analyze_sample_workspace(self, config, context, issue):
        strategy = RuleBasedStrategy(config)

        result = await strategy.analyze(context, issue)

        assert result.strategy == "rule_based"
        assert result.files[0].path == "src/services/UserService.ts"
        assert [f.path for f in result.files][-1] == "node_modules/lib/UserService.js"
        assert [s.name for s in result.symbols] == [
            "UserService",
            "getUser",
            "getUserController",
        ]
        assert result.confidence == pytest.approx(0.5155)

    @pytest.mark.asyncio
    async def test_deterministic(self, config, context, issue):
        strategy = RuleBasedStrategy(config)

        first = await strategy.analyze(context, issue)
        second = await strategy.analyze(context, issue)

        assert first == second

    @pytest.mark.asyncio
    async def test_caps_applied(self, context, issue):
        config = Config(analysis=AnalysisConfig(max_files=2, max_symbols=1, max_apis=1))
        strategy = RuleBasedStrategy(config)

        result = await strategy.analyze(context, issue)

        assert len(result.files) == 2
        assert len(result.symbols) == 1
        assert len(result.apis) == 1

    @pytest.mark.asyncio
    async def test_no_files_no_symbols(self, config, workspace, issue):
        context = AnalysisContext(workspace_path=str(workspace))

        result = await RuleBasedStrategy(config).analyze(context, issue)

        assert result.is_empty
        assert result.confidence == 0.0

    @pytest.mark.asyncio
    async def test_always_available(self, config):
        assert await RuleBasedStrategy(config).is_available() is True


# ============================================================================
# Symbols and APIs
# ============================================================================


class TestSymbolAndApiMatching:
    """Tests for the shared symbol and API stages."""

    @pytest.mark.asyncio
    async def test_symbols_have_workspace_relative_locations(self, config, context, issue):
        strategy = RuleBasedStrategy(config)
        keywords = KeywordExtractor().extract(issue)

        symbols = await strategy.find_relevant_symbols(context, keywords)

        assert symbols[0].location.file == "src/services/UserService.ts"
        assert symbols[0].type == "Class"
        assert symbols[1].type == "Method"
        assert (symbols[1].location.line, symbols[1].location.column) == (1, 2)

    @pytest.mark.asyncio
    async def test_symbol_threshold_is_strict(self, config, context):
        """
        GIVEN a technical keyword matching only a symbol name (weight 0.4)
        WHEN symbols are matched
        THEN nothing clears the 0.5 threshold.
        """
        strategy = RuleBasedStrategy(config)
        keywords = SearchKeywords(technical=["userservice"])

        assert await strategy.find_relevant_symbols(context, keywords) == []

    @pytest.mark.asyncio
    async def test_get_endpoint_detected(self, config, context, issue):
        strategy = RuleBasedStrategy(config)
        keywords = KeywordExtractor().extract(issue)

        apis = await strategy.find_relevant_apis(context, keywords)

        by_description = {api.description: api for api in apis}
        assert by_description["GET /users/:id"].method == "GET"
        assert by_description["GET /users/:id"].path == "src/controllers/UserController.ts"
        assert by_description["services.UserService"].method == "UNKNOWN"

    @pytest.mark.asyncio
    async def test_non_api_symbols_excluded(self, config, context):
        strategy = RuleBasedStrategy(config)
        keywords = SearchKeywords(primary=["log"])

        apis = await strategy.find_relevant_apis(context, keywords)

        assert apis == []

    @pytest.mark.asyncio
    async def test_missing_symbol_analysis(self, config, workspace, issue):
        context = AnalysisContext(workspace_path=str(workspace))
        strategy = RuleBasedStrategy(config)
        keywords = KeywordExtractor().extract(issue)

        assert await strategy.find_relevant_symbols(context, keywords) == []
        assert await strategy.find_relevant_apis(context, keywords) == []

    def test_keyword_match_score_locations(self, config, sample_symbols):
        strategy = RuleBasedStrategy(config)
        get_user = sample_symbols.symbols[1]

        by_name = strategy.keyword_match_score(get_user, SearchKeywords(secondary=["getuser"]))
        by_qualified = strategy.keyword_match_score(
            get_user, SearchKeywords(secondary=["services"])
        )

        assert by_name == pytest.approx(0.7)
        assert by_qualified == pytest.approx(0.56)


# ============================================================================
# Model-assisted: keywords
# ============================================================================


class TestModelAssistedKeywords:
    """Tests for keyword inference."""

    @pytest.mark.asyncio
    async def test_inferred_keywords_mapped_to_tiers(self, config, fake_inference, issue):
        fake_inference.keywords = KeywordInference(
            primary_keywords=["UserService"],
            component_names=["getUser"],
            technical_terms=["typescript"],
            error_patterns=["NullPointerException"],
            file_patterns=["*.service.ts"],
            search_strategies=["null check"],
        )
        strategy = ModelAssistedStrategy(fake_inference, config)

        outcome = await strategy.infer_keywords(issue)

        assert outcome.status is OutcomeStatus.SUCCESS
        assert outcome.keywords.primary == ("UserService",)
        assert outcome.keywords.secondary == ("getUser",)
        assert outcome.keywords.technical == ("typescript",)
        assert outcome.keywords.contextual == (
            "NullPointerException",
            "*.service.ts",
            "null check",
        )

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_local_extraction(
        self, config, fake_inference, issue
    ):
        fake_inference.keywords = InferenceTimeoutError("slow")
        strategy = ModelAssistedStrategy(fake_inference, config)

        outcome = await strategy.infer_keywords(issue)

        assert outcome.status is OutcomeStatus.FALLBACK
        assert outcome.keywords == KeywordExtractor().extract(issue)
        assert "slow" in outcome.error

    @pytest.mark.asyncio
    async def test_empty_inference_falls_back(self, config, fake_inference, issue):
        strategy = ModelAssistedStrategy(fake_inference, config)

        outcome = await strategy.infer_keywords(issue)

        assert outcome.status is OutcomeStatus.FALLBACK
        assert not outcome.keywords.is_empty


# ============================================================================
# Model-assisted: files
# ============================================================================


class TestModelAssistedFiles:
    """Tests for file judgments."""

    @pytest.mark.asyncio
    async def test_judgments_rescore_and_filter(self, config, fake_inference, context, issue):
        fake_inference.judgments = {
            "src/services/UserService.ts": RelevanceJudgment(
                is_relevant=True, relevance_score=0.95, reason="getUser dereferences null"
            ),
            "README.md": RelevanceJudgment(is_relevant=False, relevance_score=0.9),
        }
        strategy = ModelAssistedStrategy(fake_inference, config)

        result = await strategy.analyze(context, issue)

        paths = [f.path for f in result.files]
        assert result.strategy == "model_assisted"
        assert paths[0] == "src/services/UserService.ts"
        assert result.files[0].relevance_score == 0.95
        assert result.files[0].reason == "getUser dereferences null"
        assert "README.md" not in paths
        assert all(f.reason for f in result.files)

    @pytest.mark.asyncio
    async def test_nothing_relevant_returns_top_candidates(
        self, fake_inference, context, issue
    ):
        """
        GIVEN every judgment says "not relevant"
        WHEN files are selected
        THEN the top fallback_file_count candidates come back unmodified.
        """
        config = Config(analysis=AnalysisConfig(fallback_file_count=3))
        fake_inference.default_judgment = RelevanceJudgment(
            is_relevant=False, relevance_score=0.9
        )
        strategy = ModelAssistedStrategy(fake_inference, config)
        keywords = KeywordExtractor().extract(issue)

        files = await strategy.find_relevant_files(context.with_issue(issue), keywords)

        candidates = await filter_candidates(context, issue)
        assert files == candidates[:3]

    @pytest.mark.asyncio
    async def test_all_failures_degrade_to_candidate_scores(
        self, config, fake_inference, context, issue
    ):
        fake_inference.default_judgment = InferenceError("provider down")
        strategy = ModelAssistedStrategy(fake_inference, config)
        keywords = KeywordExtractor().extract(issue)

        files = await strategy.find_relevant_files(context.with_issue(issue), keywords)

        candidates = await filter_candidates(context, issue)
        assert files == candidates
        assert all(f.reason == "" for f in files)

    @pytest.mark.asyncio
    async def test_one_failure_keeps_that_file(self, config, fake_inference, context, issue):
        fake_inference.judgments = {"README.md": InferenceTimeoutError("slow")}
        strategy = ModelAssistedStrategy(fake_inference, config)
        keywords = KeywordExtractor().extract(issue)

        files = await strategy.find_relevant_files(context.with_issue(issue), keywords)

        readme = next(f for f in files if f.path == "README.md")
        assert readme.reason == ""
        assert readme.relevance_score == pytest.approx(0.25)

    @pytest.mark.asyncio
    async def test_malformed_judgment_keeps_that_file(
        self, config, fake_inference, context, issue
    ):
        """
        GIVEN the provider returns None instead of a judgment for one file
        WHEN files are selected
        THEN that file keeps its candidate score and the others are still judged.
        """
        fake_inference.judgments = {"README.md": lambda path: None}
        strategy = ModelAssistedStrategy(fake_inference, config)
        keywords = KeywordExtractor().extract(issue)

        files = await strategy.find_relevant_files(context.with_issue(issue), keywords)

        readme = next(f for f in files if f.path == "README.md")
        assert readme.reason == ""
        assert readme.relevance_score == pytest.approx(0.25)
        assert any(f.reason == "looks related" for f in files)

    @pytest.mark.asyncio
    async def test_malformed_judgment_outcome_is_fallback(
        self, config, fake_inference, issue
    ):
        fake_inference.judgments = {"a.ts": lambda path: {"is_relevant": True}}
        strategy = ModelAssistedStrategy(fake_inference, config)

        outcome = await strategy.judge_file(issue, FileMatch("a.ts", "x", 0.4))

        assert outcome.status == OutcomeStatus.FALLBACK
        assert outcome.judgment is None
        assert "dict" in outcome.error

    @pytest.mark.asyncio
    async def test_batches_bound_concurrency(self, fake_inference, context, issue):
        config = Config(analysis=AnalysisConfig(batch_size=2))
        strategy = ModelAssistedStrategy(fake_inference, config)
        keywords = KeywordExtractor().extract(issue)

        await strategy.find_relevant_files(context.with_issue(issue), keywords)

        assert len(fake_inference.calls) == 5
        assert 1 <= fake_inference.max_in_flight <= 2

    @pytest.mark.asyncio
    async def test_judges_at_most_max_files_to_analyze(self, fake_inference, context, issue):
        config = Config(analysis=AnalysisConfig(max_files_to_analyze=2))
        strategy = ModelAssistedStrategy(fake_inference, config)
        keywords = KeywordExtractor().extract(issue)

        files = await strategy.find_relevant_files(context.with_issue(issue), keywords)

        assert len(fake_inference.calls) == 2
        assert len(files) == 2

    @pytest.mark.asyncio
    async def test_judge_files_keeps_input_order(self, config, fake_inference, issue):
        strategy = ModelAssistedStrategy(fake_inference, config)
        files = [FileMatch(f"f{i}.ts", "code", 0.5) for i in range(7)]

        outcomes = await strategy.judge_files(issue, files)

        assert [o.file.path for o in outcomes] == [f.path for f in files]
        assert all(o.status is OutcomeStatus.SUCCESS for o in outcomes)

    @pytest.mark.asyncio
    async def test_unbound_issue_skips_judgments(self, config, fake_inference, context, issue):
        strategy = ModelAssistedStrategy(fake_inference, config)
        keywords = KeywordExtractor().extract(issue)

        files = await strategy.find_relevant_files(context, keywords)

        assert fake_inference.calls == []
        assert files == await filter_candidates(context, issue)


# ============================================================================
# Model-assisted: confidence and availability
# ============================================================================


class TestModelAssistedConfidence:
    """Tests for confidence and availability."""

    def test_reason_bonus(self, config, fake_inference):
        strategy = ModelAssistedStrategy(fake_inference, config)
        plain = AnalysisResult(files=[FileMatch("a.ts", "", 0.5)])
        explained = AnalysisResult(files=[FileMatch("a.ts", "", 0.5, "handles login")])

        baseline = strategy.calculate_confidence(plain)

        assert baseline == pytest.approx(0.6 * 0.5 + 0.2 * 0.2)
        assert strategy.calculate_confidence(explained) == pytest.approx(baseline + 0.2)

    def test_bonus_clamped(self, config, fake_inference):
        strategy = ModelAssistedStrategy(fake_inference, config)
        result = AnalysisResult(
            files=[FileMatch(f"{i}.ts", "", 1.0, "yes") for i in range(5)],
        )

        assert strategy.calculate_confidence(result) == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_available(self, config, fake_inference):
        assert await ModelAssistedStrategy(fake_inference, config).is_available() is True

    @pytest.mark.asyncio
    async def test_probe_exception_means_unavailable(self, config, fake_inference):
        fake_inference.available = ConnectionError("refused")

        assert await ModelAssistedStrategy(fake_inference, config).is_available() is False
