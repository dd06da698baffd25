"""Exceptions for GitHub service.

Not-found and rate-limit conditions are raised as the shared
``NotFoundOrPrivateError`` / ``RateLimitedError`` types so callers can tell
them apart from generic failures.
"""

from app.core.exceptions import AppError


class GitHubAPIError(AppError):
    """Generic error from GitHub API."""

    code = "GITHUB_API_ERROR"
    status_code = 502

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        transient: bool | None = None,
    ):
        super().__init__(message, status_code=status_code)
        self._transient = transient

    @property
    def is_transient(self) -> bool:
        """Server-side failures are worth retrying, client errors are not."""
        if self._transient is not None:
            return self._transient
        return self.status_code >= 500
