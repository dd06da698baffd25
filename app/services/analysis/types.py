"""
Analysis data types.

Plain dataclasses for intermediate, in-process results. Persisted shapes live
in ``app.schemas.analysis``.
"""

import math
from dataclasses import dataclass, field

from app.services.github.types import FileTreeItem


@dataclass(frozen=True)
class ParsedGitHubUrl:
    """Owner and repository name split out of a repository URL."""

    owner: str
    repo: str
    url: str


@dataclass
class FilteredFileTree:
    """
    Classified view over a repository file tree.

    ``critical_files`` and ``code_files`` partition ``files``, and
    ``analyzed_files + skipped_files == total_files``.
    """

    total_files: int
    analyzed_files: int
    skipped_files: int
    files: list[FileTreeItem] = field(default_factory=list)
    critical_files: list[FileTreeItem] = field(default_factory=list)
    code_files: list[FileTreeItem] = field(default_factory=list)

    @property
    def reduction_percentage(self) -> int:
        """Share of tree entries excluded, as a rounded percentage."""
        if self.total_files == 0:
            return 0
        # Half-up rounding, matching how percentages are shown in the UI
        return math.floor(100 * self.skipped_files / self.total_files + 0.5)


@dataclass(frozen=True)
class FilteringStats:
    """Summary counts reported with the file tree filtering step."""

    reduction_percentage: int
    critical_files_count: int
    code_files_count: int
