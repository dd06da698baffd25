"""
GitHub repository URL helpers.

Only the canonical form ``https://github.com/{owner}/{repo}`` is accepted:
https scheme, no trailing slash, no extra path segments.
"""

import re

from app.core.exceptions import InvalidInputError
from app.services.analysis.types import ParsedGitHubUrl

GITHUB_URL_PREFIX = "https://github.com/"
GITHUB_URL_PATTERN = re.compile(r"^https://github\.com/[^/]+/[^/]+$")

INVALID_URL_MESSAGE = "Invalid GitHub URL format. Expected: https://github.com/owner/repo"


def validate_github_url(url: str) -> bool:
    """Check whether ``url`` is a canonical GitHub repository URL."""
    return bool(GITHUB_URL_PATTERN.match(url))


def parse_github_url(url: str) -> ParsedGitHubUrl:
    """
    Split a repository URL into owner and repo.

    Raises:
        InvalidInputError: If the URL is not in the canonical form
    """
    if not validate_github_url(url):
        raise InvalidInputError(INVALID_URL_MESSAGE)

    owner, repo = url.removeprefix(GITHUB_URL_PREFIX).split("/")
    return ParsedGitHubUrl(owner=owner, repo=repo, url=url)


def construct_github_url(owner: str, repo: str) -> str:
    return f"{GITHUB_URL_PREFIX}{owner}/{repo}"


def repo_id_from_url(url: str) -> str:
    """Persistence key for a repository, e.g. ``owner-repo``."""
    return url.removeprefix(GITHUB_URL_PREFIX).replace("/", "-")
