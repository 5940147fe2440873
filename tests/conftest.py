"""
Shared pytest fixtures for issuescope tests.

Fixture Organization
--------------------
- **workspace**: Temporary workspace with a small multi-language tree
- **config**: Default Config with deterministic settings
- **fake_inference**: Scriptable InferenceProvider double
- **sample_symbols**: SymbolAnalysis for the sample workspace
"""

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

import pytest

from issuescope.analysis.models import AnalysisContext, IssuePayload
from issuescope.analysis.symbols import SymbolAnalysis, SymbolInfo
from issuescope.core.config import Config
from issuescope.llm.inference import KeywordInference, RelevanceJudgment

SAMPLE_FILES: Dict[str, str] = {
    "src/services/UserService.ts": (
        "export class UserService {\n"
        "  getUser(id: string) {\n"
        "    const user = this.repo.find(id);\n"
        "    return user.profile; // NullPointerException when user is missing\n"
        "  }\n"
        "}\n"
    ),
    "src/utils/logger.ts": "export const log = (msg: string) => console.log(msg);\n",
    "src/controllers/UserController.ts": (
        "// GET /users/:id\n"
        "export function getUserController(req, res) {\n"
        "  return new UserService().getUser(req.params.id);\n"
        "}\n"
    ),
    "README.md": "# Sample\nA sample workspace.\n",
    "node_modules/lib/UserService.js": "module.exports = {};\n",
}


# ============================================================================
# Workspace Fixtures
# ============================================================================


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a small workspace on disk."""
    for relative, content in SAMPLE_FILES.items():
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return tmp_path


@pytest.fixture
def sample_symbols(workspace: Path) -> SymbolAnalysis:
    """Symbols matching the sample workspace, with absolute file paths."""
    return SymbolAnalysis(
        symbols=(
            SymbolInfo(
                name="UserService",
                qualified_name="services.UserService",
                kind=5,
                file_path=str(workspace / "src/services/UserService.ts"),
                line=0,
                column=0,
            ),
            SymbolInfo(
                name="getUser",
                qualified_name="services.UserService.getUser",
                kind=6,
                file_path=str(workspace / "src/services/UserService.ts"),
                line=1,
                column=2,
            ),
            SymbolInfo(
                name="getUserController",
                qualified_name="controllers.getUserController",
                kind=12,
                file_path=str(workspace / "src/controllers/UserController.ts"),
                line=1,
                column=0,
                comment="GET /users/:id",
            ),
            SymbolInfo(
                name="log",
                qualified_name="utils.log",
                kind=13,
                file_path=str(workspace / "src/utils/logger.ts"),
            ),
        )
    )


@pytest.fixture
def issue() -> IssuePayload:
    return IssuePayload(
        title="NullPointerException in UserService.getUser",
        body="Calling getUser with an unknown id crashes the profile page.",
    )


@pytest.fixture
def context(workspace: Path, sample_symbols: SymbolAnalysis) -> AnalysisContext:
    return AnalysisContext(
        workspace_path=str(workspace),
        filtered_files=tuple(SAMPLE_FILES),
        symbol_analysis=sample_symbols,
    )


@pytest.fixture
def config() -> Config:
    return Config()


# ============================================================================
# Inference Fixtures
# ============================================================================


ScriptedJudgment = Union[RelevanceJudgment, Exception, Callable[[str], Any]]


class FakeInference:
    """
    Scriptable InferenceProvider.

    Attributes:
        keywords: KeywordInference to return, or an exception to raise
        judgments: Per-path judgment (or exception); paths not listed get
            the default judgment
        default_judgment: Judgment or exception for unlisted paths
        available: Value (or exception) for is_available()
        calls: Paths judged, in call order
    """

    def __init__(self) -> None:
        self.keywords: Union[KeywordInference, Exception] = KeywordInference()
        self.judgments: Dict[str, ScriptedJudgment] = {}
        self.default_judgment: ScriptedJudgment = RelevanceJudgment(
            is_relevant=True, relevance_score=0.5, reason="looks related"
        )
        self.available: Union[bool, Exception] = True
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def analyze_issue_for_keywords(self, issue: IssuePayload) -> KeywordInference:
        if isinstance(self.keywords, Exception):
            raise self.keywords
        return self.keywords

    async def analyze_code_relevance(
        self, issue: IssuePayload, path: str, content: str
    ) -> RelevanceJudgment:
        self.calls.append(path)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            outcome: Any = self.judgments.get(path, self.default_judgment)
            if isinstance(outcome, Exception):
                raise outcome
            if callable(outcome):
                return outcome(path)
            return outcome
        finally:
            self.in_flight -= 1

    async def is_available(self) -> bool:
        if isinstance(self.available, Exception):
            raise self.available
        return self.available


@pytest.fixture
def fake_inference() -> FakeInference:
    return FakeInference()
