"""
Repository analysis entry point for the API layer.

Wraps RepositoryAnalyzer with the 30-day analysis cache, live progress
persistence and storage of the results:
1. Serve a fresh cached analysis when one exists
2. Otherwise run the pipeline, mirroring progress into `analysis_progress/{repo_id}`
3. Store the repository record and roadmap
4. (Re)initialize the requesting user's progress
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from app.config import Settings, settings as default_settings
from app.core.store import DocumentStore
from app.domain import analysis_ops, analysis_progress_ops, progress_ops, roadmap_ops
from app.schemas.analysis import RepositoryRecord
from app.schemas.analysis_progress import AnalysisProgress
from app.services.analysis import repo_id_from_url
from app.services.analysis_orchestrator import (
    ProgressCallback,
    RepositoryAnalyzer,
    RoadmapAIClient,
    SourceControlClient,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOutcome:
    repo_id: str
    cached: bool
    message: str


async def find_cached_analysis(
    store: DocumentStore, repo_id: str, freshness_days: int
) -> bool:
    """
    True if a usable cached analysis exists.

    Both a fresh repository record and its roadmap are required; a record
    whose roadmap is missing is re-analyzed.
    """
    if not await analysis_ops.is_fresh(store, repo_id, freshness_days):
        return False
    if not await roadmap_ops.exists(store, repo_id):
        logger.info(f"Cached analysis for {repo_id} has no roadmap, re-analyzing")
        return False
    return True


def progress_writer(store: DocumentStore, repo_id: str) -> ProgressCallback:
    """Build a progress callback that mirrors events into the store."""

    async def _write(progress: AnalysisProgress) -> None:
        try:
            await analysis_progress_ops.record(store, repo_id, progress)
        except Exception as e:
            # The loading page loses an update; the analysis itself continues
            logger.warning(f"Failed to record progress for {repo_id}: {e}")

    return _write


async def run_repository_analysis(
    store: DocumentStore,
    repo_url: str,
    user_id: str,
    github: SourceControlClient,
    ai: RoadmapAIClient,
    config: Settings | None = None,
) -> AnalysisOutcome:
    """
    Analyze a repository for a user, reusing a fresh cached analysis when possible.

    Args:
        store: Document store for records and progress
        repo_url: Validated https://github.com/owner/repo URL
        user_id: User whose progress is initialized
        github: Source-control client (carries the caller's token, if any)
        ai: Client for purpose extraction and roadmap generation
        config: Settings override, defaults to the global settings

    Raises:
        AppError: Any typed pipeline failure
    """
    config = config or default_settings
    repo_id = repo_id_from_url(repo_url)

    try:
        cached = await find_cached_analysis(store, repo_id, config.cache_freshness_days)
    except Exception as e:
        logger.warning(f"Cache check failed for {repo_id}, proceeding with fresh analysis: {e}")
        cached = False

    if cached:
        logger.info(f"Cache hit for {repo_id}")
        if await progress_ops.get(store, user_id, repo_id) is None:
            await progress_ops.initialize(store, user_id, repo_id)
        return AnalysisOutcome(repo_id=repo_id, cached=True, message="Using cached analysis")

    logger.info(f"Starting fresh analysis for {repo_id} (user {user_id})")
    analyzer = RepositoryAnalyzer(
        github=github,
        ai=ai,
        on_progress=progress_writer(store, repo_id),
        config=config,
    )
    analysis = await analyzer.analyze(repo_url)

    record = RepositoryRecord.from_analysis(analysis)
    record.analyzed_at = datetime.now(UTC)
    record.analysis_duration = analysis.analysis_metadata.analysis_duration_seconds
    await analysis_ops.save(store, repo_id, record)
    await roadmap_ops.save(store, repo_id, analysis.roadmap)
    logger.info(
        f"Stored analysis for {repo_id}: {len(analysis.roadmap.sections)} sections, "
        f"{analysis.roadmap.total_tasks} tasks"
    )

    await progress_ops.initialize(store, user_id, repo_id)

    return AnalysisOutcome(
        repo_id=repo_id, cached=False, message="Analysis completed successfully"
    )
