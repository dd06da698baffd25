import logging
from datetime import UTC, datetime, timedelta

from app.core.store import DocumentStore
from app.domain.base_operations import BaseOperations
from app.schemas.analysis import RepositoryRecord

logger = logging.getLogger(__name__)

REPOSITORIES_COLLECTION = "repositories"


class AnalysisOperations(BaseOperations[RepositoryRecord]):
    """Operations for the `repositories/{repo_id}` analysis records."""

    def __init__(self) -> None:
        super().__init__(RepositoryRecord, REPOSITORIES_COLLECTION)

    async def is_fresh(
        self,
        store: DocumentStore,
        repo_id: str,
        freshness_days: int,
        now: datetime | None = None,
    ) -> bool:
        """True if the repository was analyzed within the last `freshness_days` days."""
        doc = await store.get(self.collection, repo_id)
        if doc is None or not doc.get("analyzed_at"):
            return False

        analyzed_at = datetime.fromisoformat(str(doc["analyzed_at"]))
        if analyzed_at.tzinfo is None:
            analyzed_at = analyzed_at.replace(tzinfo=UTC)

        cutoff = (now or datetime.now(UTC)) - timedelta(days=freshness_days)
        return analyzed_at > cutoff


analysis_ops = AnalysisOperations()
