"""
Database requirement detection.

Two independent sources are combined:
- dependency names (with migration and seed-data discovery in the file tree)
- docker-compose ``image:`` declarations

``merge_database_requirements`` folds them into at most one entry per type.
"""

import logging

from app.schemas.analysis import DatabaseRequirement
from app.services.analysis.constants import (
    COMPOSE_IMAGE_DATABASES,
    COMPOSE_SETUP_GUIDE,
    DATABASE_DEPENDENCY_GROUPS,
    DATABASE_SETUP_GUIDES,
    MIGRATION_PATTERNS,
    SEED_PATTERNS,
)
from app.services.github.types import FileTreeItem

logger = logging.getLogger(__name__)


def find_migrations_path(files: list[FileTreeItem]) -> str | None:
    """
    Return the first migrations directory found in the tree.

    The path is cut just after the matched pattern, e.g.
    ``api/db/migrate/001_init.rb`` -> ``api/db/migrate/``.
    """
    for item in files:
        for pattern in MIGRATION_PATTERNS:
            index = item.path.find(pattern)
            if index != -1:
                return item.path[: index + len(pattern)]
    return None


def has_seed_data(files: list[FileTreeItem]) -> bool:
    return any(pattern in item.path for item in files for pattern in SEED_PATTERNS)


def _requirement_from_dependencies(db_type: str, files: list[FileTreeItem]) -> DatabaseRequirement:
    migrations_path = find_migrations_path(files)
    return DatabaseRequirement(
        type=db_type,  # type: ignore[arg-type]
        required=True,
        requires_migration=migrations_path is not None,
        migrations_path=migrations_path,
        seed_data_available=has_seed_data(files),
        setup_guide=DATABASE_SETUP_GUIDES[db_type],
    )


def detect_database_requirements(
    dependencies: list[str], files: list[FileTreeItem]
) -> list[DatabaseRequirement]:
    """
    Detect required data stores from dependency names.

    Args:
        dependencies: Production and development dependency names
        files: The filtered (analyzed) file list, scanned for migrations and seeds

    Returns:
        One DatabaseRequirement per matched type, in a fixed type order
    """
    present = {name.lower() for name in dependencies}
    requirements = [
        _requirement_from_dependencies(db_type, files)
        for db_type, names in DATABASE_DEPENDENCY_GROUPS.items()
        if present.intersection(names)
    ]
    if requirements:
        logger.debug(f"Databases from dependencies: {[r.type for r in requirements]}")
    return requirements


def detect_database_from_docker_compose(compose_content: str) -> list[DatabaseRequirement]:
    """Detect data stores declared as services in a docker-compose file."""
    return [
        DatabaseRequirement(
            type=db_type,  # type: ignore[arg-type]
            required=True,
            requires_migration=False,
            seed_data_available=False,
            setup_guide=COMPOSE_SETUP_GUIDE,
        )
        for image, db_type in COMPOSE_IMAGE_DATABASES.items()
        if f"image: {image}" in compose_content
    ]


def _pick_path(*paths: str | None) -> str | None:
    candidates = [p for p in paths if p]
    return min(candidates) if candidates else None


def _pick_setup_guide(*guides: str) -> str:
    """A dependency-specific guide beats the generic docker-compose one."""
    specific = [g for g in guides if g and g != COMPOSE_SETUP_GUIDE]
    if specific:
        return min(specific)
    return next((g for g in guides if g), "")


def merge_database_requirements(*sources: list[DatabaseRequirement]) -> list[DatabaseRequirement]:
    """
    Merge detections from several sources, keyed by database type.

    The result does not depend on source order: boolean flags are OR'ed, a
    dependency setup guide wins over the docker-compose one, and entries are
    returned in the fixed type order of ``DATABASE_DEPENDENCY_GROUPS``.
    """
    merged: dict[str, DatabaseRequirement] = {}

    for source in sources:
        for requirement in source:
            existing = merged.get(requirement.type)
            if existing is None:
                merged[requirement.type] = requirement.model_copy()
                continue
            merged[requirement.type] = existing.model_copy(
                update={
                    "required": existing.required or requirement.required,
                    "requires_migration": existing.requires_migration
                    or requirement.requires_migration,
                    "migrations_path": _pick_path(
                        existing.migrations_path, requirement.migrations_path
                    ),
                    "seed_data_available": existing.seed_data_available
                    or requirement.seed_data_available,
                    "setup_guide": _pick_setup_guide(
                        existing.setup_guide, requirement.setup_guide
                    ),
                }
            )

    type_order = list(DATABASE_DEPENDENCY_GROUPS)
    return sorted(merged.values(), key=lambda r: type_order.index(r.type))
