"""Fakes and payload factories for pipeline tests.

The fakes implement the same async methods as GitHubService and
OnboardingAIClient, so the analyzer can run end to end without I/O.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from app.core.exceptions import NotFoundOrPrivateError
from app.schemas.analysis import ProjectPurpose
from app.services.github.types import FileTreeItem, GitHubRepo, RepoTree
from app.services.roadmap_transformer import RawRoadmap

REPO_URL = "https://github.com/acme/widgets"
REPO_ID = "acme-widgets"

PACKAGE_JSON = json.dumps(
    {
        "description": "Widgets as a service",
        "dependencies": {"next": "14.0.0", "react": "18.2.0", "pg": "8.11.0"},
        "devDependencies": {"jest": "29.0.0"},
        "engines": {"node": ">=18"},
    }
)

ENV_EXAMPLE = "# Postgres connection\nDATABASE_URL=\nPORT=3000\n"

COMPOSE = """services:
  db:
    image: postgres:16
    environment:
      POSTGRES_PASSWORD: example
"""

README = "# Widgets\n\nA service for managing widgets.\n\n## Setup\n\nRun `npm install`.\n"


def make_github_repo(**overrides: Any) -> GitHubRepo:
    fields: dict[str, Any] = {
        "owner": "acme",
        "name": "widgets",
        "full_name": "acme/widgets",
        "description": "Widget management",
        "url": REPO_URL,
        "default_branch": "main",
        "is_private": False,
        "language": "TypeScript",
        "stars_count": 42,
        "forks_count": 7,
        "size_kb": 2048,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-06-01T00:00:00Z",
    }
    fields.update(overrides)
    return GitHubRepo(**fields)


def make_tree_items(paths: list[str]) -> list[FileTreeItem]:
    return [FileTreeItem(path=p, type="blob", size=100, sha=f"sha-{p}") for p in paths]


def raw_roadmap_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "sections": [
            {
                "id": "setup",
                "title": "Setup",
                "tasks": [
                    {"id": "setup-1", "title": "Install dependencies", "commands": ["npm install"]},
                    {"id": "setup-2", "title": "Start Postgres", "difficulty": "intermediate"},
                ],
            },
            {
                "id": "explore",
                "title": "Explore",
                "tasks": [{"id": "explore-1", "title": "Read the router", "estimated_time": "20m"}],
            },
        ]
    }
    data.update(overrides)
    return data


class FakeGitHub:
    """In-memory stand-in for GitHubService."""

    def __init__(
        self,
        repo: GitHubRepo | None = None,
        files: dict[str, str] | None = None,
        extra_paths: list[str] | None = None,
        failing_paths: set[str] | None = None,
        tree_delay: float = 0.0,
    ) -> None:
        self.repo = repo or make_github_repo()
        self.files = files if files is not None else {
            "README.md": README,
            "package.json": PACKAGE_JSON,
            ".env.example": ENV_EXAMPLE,
            "docker-compose.yml": COMPOSE,
        }
        self.extra_paths = extra_paths or ["src/index.ts", "src/db/migrations/001_init.sql"]
        self.failing_paths = failing_paths or set()
        self.tree_delay = tree_delay
        self.content_requests: list[str] = []

    async def get_repository_metadata(self, owner: str, repo: str) -> GitHubRepo:
        return self.repo

    async def get_file_tree(self, owner: str, repo: str, branch: str = "main") -> RepoTree:
        if self.tree_delay:
            await asyncio.sleep(self.tree_delay)
        items = make_tree_items([*self.files, *self.failing_paths, *self.extra_paths])
        return RepoTree(sha="abc", branch=branch, items=items, truncated=False)

    async def get_file_content(self, owner: str, repo: str, path: str, branch: str = "main") -> str:
        self.content_requests.append(path)
        if path in self.failing_paths:
            raise NotFoundOrPrivateError("gone")
        return self.files[path]


class FakeAI:
    """In-memory stand-in for OnboardingAIClient that records its inputs."""

    def __init__(self, roadmap: dict[str, Any] | None = None) -> None:
        self.roadmap = roadmap if roadmap is not None else raw_roadmap_data()
        self.purpose_calls: list[tuple[str, str | None, str | None]] = []
        self.bundles: list[Any] = []

    async def extract_project_purpose(
        self,
        readme_text: str,
        package_description: str | None = None,
        repo_description: str | None = None,
    ) -> ProjectPurpose:
        self.purpose_calls.append((readme_text, package_description, repo_description))
        return ProjectPurpose(
            purpose="Manage widgets",
            features=["CRUD for widgets"],
            target_users="Widget teams",
            project_type="Web Application",
        )

    async def generate_roadmap(self, bundle: Any) -> RawRoadmap:
        self.bundles.append(bundle)
        return RawRoadmap(data=self.roadmap)
