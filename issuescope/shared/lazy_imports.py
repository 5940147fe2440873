"""
Lazy Import Utilities.

Provider SDKs (anthropic, openai) are imported the first time a client is
actually used, so a rule-based analysis never pays for them and a missing
SDK only fails the provider that needs it.

    class ClaudeClient:
        @lazy_property
        def client(self):
            from anthropic import Anthropic  # Only runs on first access
            return Anthropic()
"""

from functools import wraps
from typing import Any, Callable, cast


def lazy_property(import_func: Callable[..., Any]) -> Any:
    """Decorator for lazy-loaded, cached properties.

    The decorated function runs once per instance; its result is stored on
    the instance and returned on later accesses. If it raises, nothing is
    cached and the next access tries again.

    Args:
        import_func: Function that imports and returns the dependency

    Returns:
        A property that lazy-loads the dependency
    """
    attr_name = f"_{import_func.__name__}_cached"

    @wraps(import_func)
    def wrapper(self: Any) -> Any:
        if not hasattr(self, attr_name):
            setattr(self, attr_name, import_func(self))
        return getattr(self, attr_name)

    return cast(Any, property(wrapper))
