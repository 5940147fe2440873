"""
Inference Service for Model-Assisted Analysis.

Wraps a blocking LLMClient behind the async InferenceProvider protocol the
model-assisted strategy consumes:

- analyze_issue_for_keywords(issue) -> KeywordInference
- analyze_code_relevance(issue, path, content) -> RelevanceJudgment
- is_available() -> bool

Each call builds a prompt, runs the client in a worker thread, pulls the
first JSON object out of the reply and validates it with pydantic. Any
failure surfaces as an InferenceError; callers decide how to fall back.
"""

import asyncio
import json
import re
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from issuescope.analysis.models import IssuePayload
from issuescope.core.exceptions import InferenceError, InferenceResponseError
from issuescope.core.logging import get_logger
from issuescope.llm.base import GenerationConfig, LLMClient

logger = get_logger(__name__)

MAX_PROMPT_CONTENT_CHARS = 4000

KEYWORD_SYSTEM_PROMPT = (
    "You help engineers find the code behind a bug report or feature request. "
    "Reply with one JSON object and nothing else."
)

KEYWORD_PROMPT = """Extract search terms from this issue.

Title: {title}

Body:
{body}

Return a JSON object with these keys, each a list of short strings:
- "primary_keywords": the most specific domain terms and identifiers
- "component_names": classes, modules, services or components mentioned or implied
- "technical_terms": languages, frameworks and libraries involved
- "error_patterns": error messages, exception names or log fragments
- "file_patterns": likely file names, extensions or directories
- "search_strategies": other short phrases worth searching for"""

RELEVANCE_SYSTEM_PROMPT = (
    "You judge whether a source file is relevant to an issue. "
    "Reply with one JSON object and nothing else."
)

RELEVANCE_PROMPT = """Issue title: {title}

Issue body:
{body}

File: {path}
```
{content}
```

Is this file relevant to resolving the issue? Return a JSON object:
{{"is_relevant": true or false, "relevance_score": number between 0 and 1,
"reason": "one sentence explaining the judgment"}}"""


def _string_list(value: Any) -> List[str]:
    """Coerce a model-supplied value into a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


class KeywordInference(BaseModel):
    """Model-proposed search terms for an issue."""

    model_config = ConfigDict(extra="ignore")

    primary_keywords: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("primary_keywords", "primaryKeywords"),
    )
    component_names: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("component_names", "componentNames"),
    )
    technical_terms: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("technical_terms", "technicalTerms"),
    )
    error_patterns: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("error_patterns", "errorPatterns"),
    )
    file_patterns: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("file_patterns", "filePatterns"),
    )
    search_strategies: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("search_strategies", "searchStrategies"),
    )

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> List[str]:
        return _string_list(value)


class RelevanceJudgment(BaseModel):
    """Model verdict on one file."""

    model_config = ConfigDict(extra="ignore")

    is_relevant: bool = Field(
        False, validation_alias=AliasChoices("is_relevant", "isRelevant")
    )
    relevance_score: float = Field(
        0.0, validation_alias=AliasChoices("relevance_score", "relevanceScore")
    )
    reason: str = ""

    @field_validator("relevance_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> float:
        try:
            score = float(value)
        except (TypeError, ValueError):
            return 0.0
        if score != score:  # NaN
            return 0.0
        return max(0.0, min(1.0, score))

    @field_validator("reason", mode="before")
    @classmethod
    def _coerce_reason(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()


@runtime_checkable
class InferenceProvider(Protocol):
    """Narrow interface the model-assisted strategy depends on."""

    async def analyze_issue_for_keywords(self, issue: IssuePayload) -> KeywordInference:
        ...

    async def analyze_code_relevance(
        self, issue: IssuePayload, path: str, content: str
    ) -> RelevanceJudgment:
        ...

    async def is_available(self) -> bool:
        ...


_FENCE_PATTERN = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Pull the first JSON object out of a model reply.

    Handles bare JSON, fenced ```json blocks and prose around the object.

    Raises:
        InferenceResponseError: If no JSON object can be decoded
    """
    if not text or not text.strip():
        raise InferenceResponseError("Empty model reply")

    candidates = [m.group(1) for m in _FENCE_PATTERN.finditer(text)]
    candidates.append(text)

    decoder = json.JSONDecoder()
    for candidate in candidates:
        start = candidate.find("{")
        while start != -1:
            try:
                data, _ = decoder.raw_decode(candidate, start)
            except json.JSONDecodeError:
                start = candidate.find("{", start + 1)
                continue
            if isinstance(data, dict):
                return data
            start = candidate.find("{", start + 1)

    raise InferenceResponseError("No JSON object in model reply", raw_response=text)


class LLMInferenceService:
    """
    InferenceProvider backed by an LLMClient.

    Example:
        client = get_llm_client(config)
        service = LLMInferenceService(client, get_generation_config(config))
        judgment = await service.analyze_code_relevance(issue, path, content)
    """

    def __init__(
        self,
        client: LLMClient,
        generation_config: Optional[GenerationConfig] = None,
    ):
        self._client = client
        self._generation_config = generation_config or GenerationConfig(json_mode=True)

    @property
    def client(self) -> LLMClient:
        return self._client

    async def _complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run the blocking client call in a worker thread."""
        try:
            return await asyncio.to_thread(
                self._client.generate_with_context,
                system_prompt,
                user_prompt,
                None,
                self._generation_config,
            )
        except InferenceError:
            raise
        except Exception as e:
            raise InferenceError(f"Inference call failed: {e}") from e

    async def analyze_issue_for_keywords(self, issue: IssuePayload) -> KeywordInference:
        """Ask the model for search terms.

        Raises:
            InferenceError: On provider failure or an unparseable reply
        """
        prompt = KEYWORD_PROMPT.format(title=issue.title, body=issue.body or "(empty)")
        reply = await self._complete(KEYWORD_SYSTEM_PROMPT, prompt)
        data = extract_json_object(reply)
        try:
            return KeywordInference.model_validate(data)
        except ValidationError as e:
            raise InferenceResponseError(
                f"Invalid keyword reply: {e}", raw_response=reply
            ) from e

    async def analyze_code_relevance(
        self, issue: IssuePayload, path: str, content: str
    ) -> RelevanceJudgment:
        """Ask the model whether a file is relevant to the issue.

        Raises:
            InferenceError: On provider failure or an unparseable reply
        """
        prompt = RELEVANCE_PROMPT.format(
            title=issue.title,
            body=issue.body or "(empty)",
            path=path,
            content=content[:MAX_PROMPT_CONTENT_CHARS],
        )
        reply = await self._complete(RELEVANCE_SYSTEM_PROMPT, prompt)
        data = extract_json_object(reply)
        try:
            return RelevanceJudgment.model_validate(data)
        except ValidationError as e:
            raise InferenceResponseError(
                f"Invalid relevance reply for {path}: {e}", raw_response=reply
            ) from e

    async def is_available(self) -> bool:
        """Probe the underlying client; any exception means unavailable."""
        try:
            return bool(await asyncio.to_thread(self._client.is_available))
        except Exception as e:
            logger.debug("Inference availability probe failed", error=str(e))
            return False
