"""
TTL caching for GitHub API responses.

Analysis of a single repository reads the same metadata and tree more than
once (retries, re-analysis right after a failure), so both are cached briefly:
- Trees: 5 minutes
- Repo metadata: 10 minutes

Cache keys include a digest of the caller's token so data fetched with
private-repo access is never served to an unauthenticated caller.
"""

import hashlib
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

tree_cache: TTLCache[str, Any] = TTLCache(maxsize=100, ttl=300)  # 5 min
repo_metadata_cache: TTLCache[str, Any] = TTLCache(maxsize=200, ttl=600)  # 10 min


def _make_cache_key(func_name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    """Build a key from the function name, the instance token and the remaining arguments."""
    instance_token = getattr(args[0], "token", None) if args else None
    cache_args = args[1:] if args else ()
    key_data = f"{func_name}:{instance_token}:{cache_args}:{sorted(kwargs.items())}"
    return hashlib.md5(key_data.encode()).hexdigest()


def cached_github_call(
    cache: TTLCache[str, Any],
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator for caching async GitHub API calls.

    Usage:
        @cached_github_call(tree_cache)
        async def get_file_tree(self, owner: str, repo: str, branch: str) -> RepoTree:
            ...

    Only successful results are stored; exceptions propagate uncached.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            key = _make_cache_key(func.__name__, args, kwargs)

            if key in cache:
                logger.debug(f"Cache HIT: {func.__name__}")
                cached_result: T = cache[key]
                return cached_result

            logger.debug(f"Cache MISS: {func.__name__}")
            result = await func(*args, **kwargs)
            cache[key] = result
            return result

        return wrapper

    return decorator


def clear_all_caches() -> None:
    """Clear all GitHub caches. Useful for testing or when data is known to be stale."""
    tree_cache.clear()
    repo_metadata_cache.clear()
    logger.debug("Cleared all GitHub caches")
