"""Data types for GitHub API responses."""

from dataclasses import dataclass, field


@dataclass
class GitHubRepo:
    """Normalized GitHub repository data."""

    owner: str
    name: str
    full_name: str
    description: str | None
    url: str
    default_branch: str
    is_private: bool
    language: str | None
    stars_count: int
    forks_count: int
    size_kb: int  # GitHub reports repository size in KB
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class FileTreeItem:
    """Single entry of a recursive repository tree."""

    path: str
    type: str  # "blob" (file) or "tree" (directory)
    size: int  # Size in bytes (0 for trees)
    sha: str
    url: str = ""


@dataclass
class RepoTree:
    """Repository file tree as returned by the Git Trees API."""

    sha: str
    branch: str  # Branch the tree was actually read from (after fallback)
    items: list[FileTreeItem] = field(default_factory=list)
    truncated: bool = False  # True if GitHub truncated the listing
