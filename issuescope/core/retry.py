"""
Retry Utilities for External Inference Calls.

Exponential backoff with jitter for transient provider failures (rate
limits, timeouts). Provider clients decorate their blocking request methods
with ``llm_retry``; the analysis strategies never retry on their own and
instead fall back to heuristic scoring once a call finally fails.

Backoff Strategy
----------------
Delay grows as ``base_delay * (exponential_base ** attempt)``, capped at
``max_delay``, plus 0-25% random jitter:

    Attempt 1: 1.0s  (+ jitter)
    Attempt 2: 2.0s  (+ jitter)
    Attempt 3: 4.0s  (+ jitter)
"""

import random
import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Optional, Tuple, Type

from issuescope.core.exceptions import (
    InferenceTimeoutError,
    RateLimitError,
    RetryError,
)
from issuescope.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    base_delay: float = 1.0  # seconds
    max_delay: float = 60.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    retryable_exceptions: Tuple[Type[Exception], ...] = (Exception,)


def calculate_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    exponential_base: float,
    jitter: bool,
) -> float:
    """Calculate the delay before the next retry attempt."""
    delay = min(base_delay * (exponential_base**attempt), max_delay)
    if jitter:
        delay += delay * 0.25 * random.random()
    return delay


def _run_with_retry(
    func: Callable[..., Any],
    args: Tuple[Any, ...],
    kwargs: dict[str, Any],
    config: RetryConfig,
    on_retry: Optional[Callable[[Exception, int], None]],
) -> Any:
    """
    Call func until it succeeds or attempts run out.

    Rule #1: Extracted from decorator to reduce nesting

    Raises:
        RetryError: If every attempt fails with a retryable exception
    """
    last_exception: Optional[Exception] = None

    for attempt in range(config.max_attempts):
        try:
            return func(*args, **kwargs)
        except config.retryable_exceptions as e:
            last_exception = e
            if attempt >= config.max_attempts - 1:
                logger.error(
                    f"All {config.max_attempts} attempts failed",
                    error=str(e),
                    function=func.__name__,
                )
                break

            delay = calculate_delay(
                attempt,
                config.base_delay,
                config.max_delay,
                config.exponential_base,
                config.jitter,
            )
            logger.warning(
                f"Attempt {attempt + 1}/{config.max_attempts} failed, "
                f"retrying in {delay:.2f}s",
                error=str(e),
                function=func.__name__,
            )
            if on_retry:
                on_retry(e, attempt + 1)
            time.sleep(delay)

    raise RetryError(
        f"Failed after {config.max_attempts} attempts: {last_exception}",
        last_exception,
        config.max_attempts,
    )


def retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
    on_retry: Optional[Callable[[Exception, int], None]] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator for retrying a blocking function with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts (including the first try)
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries
        exponential_base: Base for exponential backoff
        jitter: Add random jitter to delays
        retryable_exceptions: Exception types to retry on
        on_retry: Callback(exception, attempt) called before each retry

    Example:
        @retry(max_attempts=3, retryable_exceptions=(RateLimitError,))
        def call_provider(prompt: str) -> str:
            ...
    """
    config = RetryConfig(
        max_attempts=max_attempts,
        base_delay=base_delay,
        max_delay=max_delay,
        exponential_base=exponential_base,
        jitter=jitter,
        retryable_exceptions=retryable_exceptions or (Exception,),
    )

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            return _run_with_retry(func, args, kwargs, config, on_retry)

        return wrapper

    return decorator


# For LLM API calls (rate limits, timeouts): 1s -> 2s -> 4s
llm_retry = retry(
    max_attempts=3,
    base_delay=1.0,
    max_delay=30.0,
    exponential_base=2.0,
    jitter=True,
    retryable_exceptions=(RateLimitError, InferenceTimeoutError),
)
