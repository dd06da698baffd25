"""
GitHub API helper utilities.

Rate limit inspection, error response mapping and the transient-failure
retry loop shared by the read operations.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from app.core.exceptions import NotFoundOrPrivateError, RateLimitedError
from app.services.github.constants import MAX_RETRIES, NOT_FOUND_MESSAGE, RETRY_BASE_DELAY
from app.services.github.exceptions import GitHubAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RateLimitInfo:
    """Rate limit information from GitHub API response."""

    def __init__(self, response: httpx.Response) -> None:
        self.remaining = response.headers.get("X-RateLimit-Remaining")
        self.reset = response.headers.get("X-RateLimit-Reset")

    @property
    def reset_timestamp(self) -> int | None:
        """Get reset timestamp as integer, or None if not available."""
        return int(self.reset) if self.reset else None

    @property
    def is_exhausted(self) -> bool:
        """Check if rate limit is exhausted."""
        return self.remaining is not None and int(self.remaining) == 0


def handle_error_response(response: httpx.Response, resource: str) -> None:
    """
    Map non-200 GitHub responses onto the application error taxonomy.

    Args:
        response: The HTTP response from GitHub API
        resource: What was requested, for log context (e.g. "owner/repo")

    Raises:
        NotFoundOrPrivateError: 404, the repository is missing or private
        RateLimitedError: Quota exhausted (403 with zero remaining, or 429)
        GitHubAPIError: Authentication, authorization, unfollowed redirects or other API errors
    """
    if response.status_code == 200:
        return

    rate_info = RateLimitInfo(response)

    if response.status_code == 404:
        logger.info(f"GitHub returned 404 for {resource}")
        raise NotFoundOrPrivateError(NOT_FOUND_MESSAGE)
    elif response.status_code == 429 or (response.status_code == 403 and rate_info.is_exhausted):
        logger.warning(f"GitHub rate limit exceeded while fetching {resource}")
        raise RateLimitedError(
            "GitHub API rate limit exceeded. Please try again later.",
            rate_limit_reset=rate_info.reset_timestamp,
        )
    elif response.status_code == 401:
        raise GitHubAPIError("Invalid or expired GitHub token", 401)
    elif response.status_code == 403:
        raise GitHubAPIError("GitHub API forbidden", 403)
    elif 300 <= response.status_code < 400:
        # Only reached by a client that does not follow redirects
        location = response.headers.get("Location", "")
        logger.warning(f"Unfollowed GitHub redirect for {resource} to {location!r}")
        raise GitHubAPIError(
            f"GitHub redirected {resource} (repository may have been renamed)", transient=False
        )
    raise GitHubAPIError(f"GitHub API error: {response.status_code}", response.status_code)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    operation_name: str,
    max_retries: int = MAX_RETRIES,
    base_delay: float = RETRY_BASE_DELAY,
) -> T:
    """
    Run ``operation`` retrying transient failures with exponential backoff.

    Only 5xx responses and transport errors are retried; not-found, rate-limit
    and other client errors propagate immediately.
    """
    last_error: Exception | None = None

    for attempt in range(max_retries):
        try:
            return await operation()
        except GitHubAPIError as e:
            if not e.is_transient:
                raise
            last_error = e
        except httpx.TransportError as e:
            last_error = e

        if attempt < max_retries - 1:
            delay = base_delay * (2**attempt)
            logger.warning(
                f"{operation_name} failed (attempt {attempt + 1}/{max_retries}): "
                f"{last_error}. Retrying in {delay}s"
            )
            await asyncio.sleep(delay)

    logger.error(f"{operation_name} failed after {max_retries} attempts: {last_error}")
    if isinstance(last_error, GitHubAPIError):
        raise last_error
    raise GitHubAPIError(f"GitHub API unreachable: {last_error}") from last_error
