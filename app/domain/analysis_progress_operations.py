import logging
from datetime import UTC, datetime

from app.core.store import DocumentStore
from app.schemas.analysis_progress import AnalysisProgress

logger = logging.getLogger(__name__)

ANALYSIS_PROGRESS_COLLECTION = "analysis_progress"


class AnalysisProgressOperations:
    """Live progress of a running analysis (`analysis_progress/{repo_id}`)."""

    collection = ANALYSIS_PROGRESS_COLLECTION

    async def record(self, store: DocumentStore, repo_id: str, progress: AnalysisProgress) -> None:
        """Store the latest event and append it to the run's log."""
        existing = await store.get(self.collection, repo_id) or {}
        logs = list(existing.get("logs", []))
        # A new run restarts the log
        if progress.step == 1 and progress.status == "in-progress":
            logs = []
        logs.append(progress.model_dump(mode="json", exclude_none=True))

        await store.set(
            self.collection,
            repo_id,
            {
                "current_step": progress.step,
                "step_name": progress.step_name,
                "step_status": progress.status,
                "message": progress.message,
                "logs": logs,
                "updated_at": datetime.now(UTC).isoformat(),
            },
            merge=True,
        )

    async def get(self, store: DocumentStore, repo_id: str) -> AnalysisProgress | None:
        """Latest progress event, or None if no analysis has reported yet."""
        doc = await store.get(self.collection, repo_id)
        if doc is None:
            return None
        logs = doc.get("logs") or []
        if logs:
            return AnalysisProgress.model_validate(logs[-1])
        return AnalysisProgress(
            step=doc["current_step"],
            step_name=doc["step_name"],
            status=doc["step_status"],
            message=doc.get("message", ""),
        )

    async def get_document(self, store: DocumentStore, repo_id: str) -> dict | None:
        return await store.get(self.collection, repo_id)


analysis_progress_ops = AnalysisProgressOperations()
