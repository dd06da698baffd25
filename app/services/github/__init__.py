"""
GitHub service package.

Usage: `from app.services.github import GitHubService`

Module structure:
- service.py: GitHubService (metadata, tree, file content)
- helpers.py: Rate limit handling, error mapping and retry
- cache.py: TTL caches for metadata and trees
- http_client.py: Shared pooled HTTP client
- types.py: Data types for API responses
- exceptions.py: Generic API error
- constants.py: API constants and configuration
"""

from app.services.github.cache import clear_all_caches as clear_github_caches
from app.services.github.exceptions import GitHubAPIError
from app.services.github.helpers import RateLimitInfo, handle_error_response, with_retry
from app.services.github.http_client import close_github_client, get_github_client
from app.services.github.service import GitHubService
from app.services.github.types import FileTreeItem, GitHubRepo, RepoTree

__all__ = [
    "GitHubService",
    # HTTP client lifecycle
    "close_github_client",
    "get_github_client",
    # Cache management
    "clear_github_caches",
    # Utilities
    "handle_error_response",
    "with_retry",
    "RateLimitInfo",
    # Exceptions
    "GitHubAPIError",
    # Types
    "FileTreeItem",
    "GitHubRepo",
    "RepoTree",
]
