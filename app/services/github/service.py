"""
GitHub API service for repository analysis.

Read-only access to the three things analysis needs:
- Repository metadata
- The full recursive file tree
- Individual file contents

A token is optional. Without one only public repositories are reachable and
GitHub's unauthenticated quota applies.
"""

import base64
import logging
from typing import Any

from app.core.exceptions import NotFoundOrPrivateError
from app.services.github.cache import cached_github_call, repo_metadata_cache, tree_cache
from app.services.github.constants import (
    FALLBACK_BRANCHES,
    GITHUB_API_BASE,
    GITHUB_API_VERSION,
    USER_AGENT,
)
from app.services.github.exceptions import GitHubAPIError
from app.services.github.helpers import handle_error_response, with_retry
from app.services.github.http_client import get_github_client
from app.services.github.types import FileTreeItem, GitHubRepo, RepoTree

logger = logging.getLogger(__name__)


class GitHubService:
    """
    Service for GitHub REST API read operations.

    Uses the shared HTTP client singleton for connection pooling; the token is
    sent per request.
    """

    BASE_URL = GITHUB_API_BASE

    def __init__(self, token: str | None = None):
        self.token = token or None
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": USER_AGENT,
        }
        if self.token:
            self._headers["Authorization"] = f"Bearer {self.token}"

    def _normalize_repo(self, data: dict[str, Any]) -> GitHubRepo:
        """Convert GitHub API response to GitHubRepo dataclass."""
        owner_data = data.get("owner") or {}
        return GitHubRepo(
            owner=owner_data.get("login", ""),
            name=data["name"],
            full_name=data.get("full_name", data["name"]),
            description=data.get("description"),
            url=data.get("html_url", ""),
            default_branch=data.get("default_branch") or "main",
            is_private=data.get("private", False),
            language=data.get("language"),
            stars_count=data.get("stargazers_count", 0),
            forks_count=data.get("forks_count", 0),
            size_kb=data.get("size", 0),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    @cached_github_call(repo_metadata_cache)
    async def get_repository_metadata(self, owner: str, repo: str) -> GitHubRepo:
        """
        Fetch repository metadata.

        Transient failures (5xx, network) are retried up to three times with
        exponential backoff. Results are cached for 10 minutes.

        Raises:
            NotFoundOrPrivateError: Repository missing or private without access
            RateLimitedError: GitHub quota exhausted
            GitHubAPIError: Any other API failure
        """

        async def _fetch() -> GitHubRepo:
            client = get_github_client()
            response = await client.get(
                f"{self.BASE_URL}/repos/{owner}/{repo}",
                headers=self._headers,
            )
            handle_error_response(response, f"{owner}/{repo}")
            return self._normalize_repo(response.json())

        return await with_retry(_fetch, f"get_repository_metadata({owner}/{repo})")

    async def _fetch_tree(self, owner: str, repo: str, branch: str) -> RepoTree:
        client = get_github_client()
        response = await client.get(
            f"{self.BASE_URL}/repos/{owner}/{repo}/git/trees/{branch}",
            headers=self._headers,
            params={"recursive": "1"},
        )
        handle_error_response(response, f"{owner}/{repo}@{branch}")

        data = response.json()
        items = [
            FileTreeItem(
                path=item["path"],
                type=item["type"],
                size=item.get("size") or 0,
                sha=item.get("sha", ""),
                url=item.get("url", ""),
            )
            for item in data.get("tree", [])
        ]
        if data.get("truncated"):
            logger.warning(f"Tree for {owner}/{repo}@{branch} was truncated by GitHub")

        return RepoTree(
            sha=data.get("sha", ""),
            branch=branch,
            items=items,
            truncated=data.get("truncated", False),
        )

    @cached_github_call(tree_cache)
    async def get_file_tree(self, owner: str, repo: str, branch: str = "main") -> RepoTree:
        """
        Fetch the complete recursive file tree for a branch.

        If the branch is ``main`` and it does not exist, ``master`` is tried once
        before giving up.

        Raises:
            NotFoundOrPrivateError: Neither branch exists, or the repo is inaccessible
        """
        try:
            return await self._fetch_tree(owner, repo, branch)
        except NotFoundOrPrivateError:
            fallback = FALLBACK_BRANCHES.get(branch)
            if fallback is None:
                raise
            logger.info(f"Branch {branch} not found for {owner}/{repo}, trying {fallback}")
            return await self._fetch_tree(owner, repo, fallback)

    async def get_file_content(
        self,
        owner: str,
        repo: str,
        path: str,
        branch: str = "main",
    ) -> str:
        """
        Fetch and decode the text content of a single file.

        Raises:
            NotFoundOrPrivateError: The file does not exist on that branch
            GitHubAPIError: The path is not a file or could not be decoded
        """
        client = get_github_client()
        response = await client.get(
            f"{self.BASE_URL}/repos/{owner}/{repo}/contents/{path}",
            headers=self._headers,
            params={"ref": branch},
        )
        handle_error_response(response, f"{owner}/{repo}/{path}")

        data = response.json()
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise GitHubAPIError(f"{path} is not a file", 400)

        content = data.get("content") or ""
        if data.get("encoding", "base64") != "base64":
            return content

        try:
            return base64.b64decode(content).decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            raise GitHubAPIError(f"Could not decode {path}: {e}", 422) from e
