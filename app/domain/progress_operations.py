import logging
import math
from datetime import UTC, datetime

from app.core.exceptions import ResourceNotFoundError
from app.core.store import DocumentStore
from app.domain.roadmap_operations import ROADMAPS_COLLECTION
from app.schemas.progress import AnalysisSummary, ProgressUpdate, UserProgress

logger = logging.getLogger(__name__)


def user_repos_collection(user_id: str) -> str:
    return f"user_progress/{user_id}/repos"


def calculate_progress(completed: int, total: int) -> int:
    """Completion percentage rounded half-up, 0 when there are no tasks."""
    if total <= 0:
        return 0
    return min(100, math.floor(100 * completed / total + 0.5))


def is_celebration(new_progress: int, previous_progress: int, thresholds: list[int]) -> bool:
    """A milestone is celebrated only when reached by moving forward."""
    return new_progress in thresholds and new_progress > previous_progress


class ProgressOperations:
    """Operations for per-user roadmap progress (`user_progress/{user_id}/repos/{repo_id}`)."""

    async def get(self, store: DocumentStore, user_id: str, repo_id: str) -> UserProgress | None:
        doc = await store.get(user_repos_collection(user_id), repo_id)
        if doc is None:
            return None
        return UserProgress.model_validate(doc)

    async def get_or_default(self, store: DocumentStore, user_id: str, repo_id: str) -> UserProgress:
        """Stored progress, or zero progress if the user never started this roadmap."""
        progress = await self.get(store, user_id, repo_id)
        return progress or UserProgress(user_id=user_id, repo_id=repo_id)

    async def initialize(self, store: DocumentStore, user_id: str, repo_id: str) -> UserProgress:
        """Start (or restart) a user's progress on a freshly analyzed roadmap."""
        now = datetime.now(UTC)
        progress = UserProgress(
            user_id=user_id,
            repo_id=repo_id,
            started_at=now,
            last_activity=now,
        )
        await store.set(user_repos_collection(user_id), repo_id, progress.model_dump(mode="json"))
        return progress

    async def toggle_task(
        self,
        store: DocumentStore,
        user_id: str,
        repo_id: str,
        task_id: str,
        completed: bool,
        total_tasks: int,
        milestone_thresholds: list[int],
    ) -> ProgressUpdate:
        """
        Mark a task complete or incomplete and recompute overall progress.

        Raises:
            ResourceNotFoundError: The user has no progress record for this repository
        """
        progress = await self.get(store, user_id, repo_id)
        if progress is None:
            raise ResourceNotFoundError("Progress")

        completed_tasks = list(progress.completed_tasks)
        if completed and task_id not in completed_tasks:
            completed_tasks.append(task_id)
        elif not completed and task_id in completed_tasks:
            completed_tasks = [t for t in completed_tasks if t != task_id]

        new_progress = calculate_progress(len(completed_tasks), total_tasks)
        celebration = is_celebration(
            new_progress, progress.overall_progress_percentage, milestone_thresholds
        )

        await store.update(
            user_repos_collection(user_id),
            repo_id,
            {
                "completed_tasks": completed_tasks,
                "overall_progress_percentage": new_progress,
                "ghost_solidness": new_progress,
                "last_activity": datetime.now(UTC).isoformat(),
            },
        )
        logger.info(
            f"User {user_id} {'completed' if completed else 'reopened'} {task_id} on {repo_id}: "
            f"{progress.overall_progress_percentage}% -> {new_progress}%"
        )
        return ProgressUpdate(new_progress=new_progress, celebration_triggered=celebration)

    async def list_for_user(self, store: DocumentStore, user_id: str) -> list[UserProgress]:
        docs = await store.list(user_repos_collection(user_id))
        return [
            UserProgress.model_validate({**doc, "repo_id": doc.get("repo_id", repo_id)})
            for repo_id, doc in docs.items()
        ]

    async def delete(self, store: DocumentStore, user_id: str, repo_id: str) -> bool:
        """Remove a user's progress. The shared analysis and roadmap are kept."""
        return await store.delete(user_repos_collection(user_id), repo_id)

    async def summarize_for_user(self, store: DocumentStore, user_id: str) -> list[AnalysisSummary]:
        """
        Build the user's analysis list, most recently active first.

        Progress records whose roadmap no longer exists are skipped.
        """
        summaries: list[AnalysisSummary] = []
        for progress in await self.list_for_user(store, user_id):
            roadmap = await store.get(ROADMAPS_COLLECTION, progress.repo_id)
            if roadmap is None:
                continue
            summaries.append(
                AnalysisSummary(
                    repo_id=progress.repo_id,
                    repository_name=roadmap.get("repository_name") or "Unknown",
                    progress=progress.overall_progress_percentage,
                    started_at=progress.started_at,
                    last_activity=progress.last_activity,
                    total_tasks=roadmap.get("total_tasks") or 0,
                    completed_tasks=len(progress.completed_tasks),
                )
            )

        epoch = datetime.min.replace(tzinfo=UTC)
        summaries.sort(key=lambda s: s.last_activity or epoch, reverse=True)
        return summaries


progress_ops = ProgressOperations()
