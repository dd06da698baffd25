"""Application error taxonomy.

Every failure that can reach the service boundary is an ``AppError`` carrying
a stable ``code`` and an HTTP ``status_code``. The API layer turns these into
a ``{message, code, statusCode}`` triple; anything else becomes a generic
500 ``INTERNAL_ERROR``.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for all typed application errors."""

    code = "APP_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the boundary error shape."""
        return {
            "message": self.message,
            "code": self.code,
            "statusCode": self.status_code,
        }


class InvalidInputError(AppError):
    """Malformed URL or missing request field. Client error, no retry."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundOrPrivateError(AppError):
    """Repository is missing or private and no usable credentials were given."""

    code = "REPO_NOT_FOUND"
    status_code = 404


class RateLimitedError(AppError):
    """Source-control quota exhausted. Retryable after ``rate_limit_reset``."""

    code = "RATE_LIMIT_ERROR"
    status_code = 429

    def __init__(self, message: str, rate_limit_reset: int | None = None, **kwargs: Any):
        self.rate_limit_reset = rate_limit_reset  # Unix timestamp when the quota resets
        details = kwargs.pop("details", None) or {}
        details.setdefault("reset_time", rate_limit_reset)
        super().__init__(message, details=details, **kwargs)


class SizeLimitExceededError(AppError):
    """Repository is larger than the analysis limit. Terminal."""

    code = "SIZE_LIMIT_EXCEEDED"
    status_code = 413


class UpstreamAIError(AppError):
    """The generative AI service returned unusable output."""

    code = "AI_API_ERROR"
    status_code = 502


class AnalysisTimeoutError(AppError):
    """The overall analysis ceiling was exceeded."""

    code = "ANALYSIS_TIMEOUT"
    status_code = 408

    def __init__(self, message: str = "Analysis timeout. Repository may be too complex."):
        super().__init__(message)


class ResourceNotFoundError(AppError):
    """A stored document (roadmap, progress record) does not exist."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")


def handle_api_error(error: BaseException) -> dict[str, Any]:
    """Convert any exception into the boundary ``{message, code, statusCode}`` triple."""
    if isinstance(error, AppError):
        logger.error(
            f"[API] {type(error).__name__}: {error.message} "
            f"(code={error.code}, status={error.status_code}, details={error.details})"
        )
        return error.to_dict()

    logger.error(f"[API] Unhandled error: {error!r}")
    return {
        "message": "Internal server error",
        "code": "INTERNAL_ERROR",
        "statusCode": 500,
    }
