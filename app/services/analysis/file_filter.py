"""
Repository file tree classification.

Cuts a full recursive tree down to the files worth analyzing. Rules are
evaluated per file in a fixed precedence:

1. Excluded directory      -> reject (nothing overrides this)
2. Critical file           -> accept (overrides extension and size rules)
3. Excluded extension      -> reject
4. Larger than 1 MiB       -> reject
5. Known code extension    -> accept
6. Anything else           -> reject

Everything here is pure and deterministic.
"""

import logging

from app.services.analysis.constants import (
    CODE_EXTENSIONS,
    CRITICAL_FILES,
    EXCLUDED_DIRECTORIES,
    EXCLUDED_EXTENSIONS,
    MAX_FILE_SIZE,
)
from app.services.analysis.types import FilteredFileTree, FilteringStats
from app.services.github.types import FileTreeItem

logger = logging.getLogger(__name__)

_EXCLUDED_EXTENSIONS = tuple(EXCLUDED_EXTENSIONS)
_CODE_EXTENSIONS = tuple(CODE_EXTENSIONS)
_CRITICAL_SUFFIXES = tuple(CRITICAL_FILES)
_CRITICAL_NAMES = frozenset(CRITICAL_FILES)


def is_critical_file(file_path: str) -> bool:
    """True if the basename or a path suffix is on the always-analyze list."""
    file_name = file_path.rsplit("/", 1)[-1]
    return file_name in _CRITICAL_NAMES or file_path.endswith(_CRITICAL_SUFFIXES)


def should_analyze_file(file_path: str, file_size: int) -> bool:
    """Decide whether a single file is relevant to analysis."""
    if any(directory in file_path for directory in EXCLUDED_DIRECTORIES):
        return False

    if is_critical_file(file_path):
        return True

    if file_path.endswith(_EXCLUDED_EXTENSIONS):
        return False

    if file_size > MAX_FILE_SIZE:
        return False

    return file_path.endswith(_CODE_EXTENSIONS)


def filter_file_tree(items: list[FileTreeItem]) -> FilteredFileTree:
    """
    Classify a flat file tree.

    Directory entries (``type == "tree"``) are never analyzed but still count
    toward ``total_files``.
    """
    files: list[FileTreeItem] = []
    critical_files: list[FileTreeItem] = []
    code_files: list[FileTreeItem] = []

    for item in items:
        if item.type != "blob":
            continue
        if not should_analyze_file(item.path, item.size):
            continue

        files.append(item)
        if is_critical_file(item.path):
            critical_files.append(item)
        else:
            code_files.append(item)

    filtered = FilteredFileTree(
        total_files=len(items),
        analyzed_files=len(files),
        skipped_files=len(items) - len(files),
        files=files,
        critical_files=critical_files,
        code_files=code_files,
    )
    logger.debug(
        f"Filtered tree: {filtered.analyzed_files}/{filtered.total_files} files kept "
        f"({len(critical_files)} critical, {len(code_files)} code)"
    )
    return filtered


def get_filtering_stats(filtered: FilteredFileTree) -> FilteringStats:
    return FilteringStats(
        reduction_percentage=filtered.reduction_percentage,
        critical_files_count=len(filtered.critical_files),
        code_files_count=len(filtered.code_files),
    )
