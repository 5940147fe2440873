"""
Centralized Exception Hierarchy for issuescope.

All custom exceptions inherit from IssueScopeError so callers can catch any
engine-specific failure in one place.

Each exception carries:
- error_code: Unique identifier for documentation lookup (e.g., "IS-INF-001")
- why_it_happened: Explanation of the root cause
- how_to_fix: Actionable steps to resolve the issue

Exception Hierarchy
-------------------
    IssueScopeError (base)
    ├── InferenceError
    │   ├── RateLimitError
    │   ├── InferenceTimeoutError
    │   ├── ConfigurationError
    │   └── InferenceResponseError
    ├── StrategyUnavailableError
    ├── RetryError
    └── ConfigValidationError

Where They Are Caught
---------------------
Inference failures never abort an analysis. The strategy layer catches them
per file and per keyword set, logs them, and falls back to heuristic scoring.
Only StrategyUnavailableError and configuration errors reach the caller.
"""

import re
from typing import Any, Callable, List, Optional, Tuple, Union


def sanitize_path(path: str) -> str:
    """Replace user home directories and key-like tokens in a path.

    Args:
        path: Original file path

    Returns:
        Path with sensitive components replaced by placeholders
    """
    if not path:
        return path

    patterns = [
        (r"[A-Za-z]:\\Users\\[^\\]+", r"<user-home>"),
        (r"/(?:home|Users)/[^/]+", r"<user-home>"),
        (r"[a-zA-Z0-9]{32,}", r"<key>"),
    ]

    result = path
    for pattern, replacement in patterns:
        result = re.sub(pattern, replacement, result)
    return result


def sanitize_message(message: str) -> str:
    """Mask API keys, tokens, credentials and home paths in a message.

    Provider SDK errors often echo request headers, so every IssueScopeError
    message passes through here.

    Args:
        message: Original error message

    Returns:
        Sanitized message
    """
    if not message:
        return message

    patterns: List[Tuple[str, Union[str, Callable[[re.Match], str]]]] = [
        (r"(sk-|sk-ant-|api_key[=:][\s]*)[a-zA-Z0-9_-]{20,}", r"\1<api-key>"),
        (r"(ANTHROPIC_API_KEY|OPENAI_API_KEY|API_KEY)[=:]\s*[^\s]+", r"\1=<hidden>"),
        (r"Bearer\s+[a-zA-Z0-9_.-]+", r"Bearer <token>"),
        (r"://[^:/\s]+:[^@/\s]+@", r"://<user>:<pass>@"),
        (r"/(?:home|Users)/[^\s\"']+", lambda m: sanitize_path(m.group(0))),
    ]

    result = message
    for pattern, replacement in patterns:
        result = re.sub(pattern, replacement, result)
    return result


class IssueScopeError(Exception):
    """
    Base exception for all issuescope errors.

    Example
    -------
        try:
            strategy = select_strategy(candidates)
        except IssueScopeError as e:
            logger.error(f"Analysis setup failed: {e}")
            print(f"Fix: {e.how_to_fix}")
    """

    error_code: str = "IS-ERR-000"
    why_it_happened: str = "An unexpected error occurred"
    how_to_fix: List[str] = ["Check the error message for details"]

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        super().__init__(sanitize_message(message))
        if error_code is not None:
            self.error_code = error_code
        if why_it_happened is not None:
            self.why_it_happened = why_it_happened
        if how_to_fix is not None:
            self.how_to_fix = how_to_fix

    @property
    def user_message(self) -> str:
        """Get the user-facing error message."""
        return str(self)


# ============================================================================
# Inference Exceptions
# ============================================================================


class InferenceError(IssueScopeError):
    """Base exception for external model inference failures."""

    error_code = "IS-INF-000"
    why_it_happened = "The language model provider returned an error"
    how_to_fix = [
        "Check that the provider is reachable",
        "Verify the configured model name",
    ]


class RateLimitError(InferenceError):
    """Raised when the provider rejects a request for rate limiting."""

    error_code = "IS-INF-001"
    why_it_happened = "Too many requests were sent to the provider"
    how_to_fix = [
        "Lower analysis.batch_size in the configuration",
        "Wait and retry the analysis",
    ]


class InferenceTimeoutError(InferenceError):
    """Raised when a provider request times out."""

    error_code = "IS-INF-004"
    why_it_happened = "The provider did not answer within the request timeout"
    how_to_fix = [
        "Check the network connection to the provider",
        "Use a smaller or faster model",
    ]


class ConfigurationError(InferenceError):
    """Raised when a provider is missing credentials or settings."""

    error_code = "IS-INF-002"
    why_it_happened = "The provider is not configured"
    how_to_fix = [
        "Set the provider API key (e.g. ANTHROPIC_API_KEY)",
        "Or choose another provider with ISSUESCOPE_LLM_PROVIDER",
    ]


class InferenceResponseError(InferenceError):
    """Raised when a model reply cannot be parsed into the expected schema."""

    error_code = "IS-INF-003"
    why_it_happened = "The model reply was not the JSON object that was requested"
    how_to_fix = [
        "Use a model that follows JSON instructions reliably",
        "Lower the generation temperature",
    ]

    def __init__(self, message: str, raw_response: str = "", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.raw_response = raw_response[:500]


# ============================================================================
# Engine Exceptions
# ============================================================================


class StrategyUnavailableError(IssueScopeError):
    """Raised when no analysis strategy reports itself available."""

    error_code = "IS-STR-001"
    why_it_happened = "Every configured strategy failed its availability check"
    how_to_fix = [
        "Include the rule_based strategy as a final choice",
        "Check the inference provider configuration",
    ]


class RetryError(IssueScopeError):
    """Raised when all retry attempts are exhausted."""

    error_code = "IS-RTY-001"
    why_it_happened = "The operation kept failing after every retry"
    how_to_fix = ["Check the underlying error for the root cause"]

    def __init__(self, message: str, last_exception: Exception, attempts: int) -> None:
        super().__init__(message)
        self.last_exception = last_exception
        self.attempts = attempts


class ConfigValidationError(IssueScopeError):
    """Raised when configuration values are out of range."""

    error_code = "IS-CFG-001"
    why_it_happened = "A configuration value failed validation"
    how_to_fix = ["Fix the reported value in issuescope.yaml"]


def get_error_info(exc: BaseException) -> dict[str, Any]:
    """
    Collect structured information about an exception for logging.

    Args:
        exc: Any exception

    Returns:
        Dict with type, message, and help fields when available
    """
    info: dict[str, Any] = {
        "type": type(exc).__name__,
        "message": sanitize_message(str(exc)),
    }
    if isinstance(exc, IssueScopeError):
        info["error_code"] = exc.error_code
        info["why_it_happened"] = exc.why_it_happened
        info["how_to_fix"] = list(exc.how_to_fix)
    return info
