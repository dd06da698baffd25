from datetime import UTC, datetime

from app.core.store import DocumentStore
from app.schemas.roadmap import Roadmap
from app.services.roadmap_transformer import transform_roadmap

ROADMAPS_COLLECTION = "roadmaps"


class RoadmapOperations:
    """Operations for `roadmaps/{repo_id}` documents."""

    collection = ROADMAPS_COLLECTION

    async def exists(self, store: DocumentStore, repo_id: str) -> bool:
        return await store.get(self.collection, repo_id) is not None

    async def get(self, store: DocumentStore, repo_id: str) -> Roadmap | None:
        """Get a roadmap, normalized so older stored shapes read like current ones."""
        doc = await store.get(self.collection, repo_id)
        if doc is None:
            return None
        return transform_roadmap(doc)

    async def get_total_tasks(self, store: DocumentStore, repo_id: str) -> int | None:
        """Stored task count, or None if there is no roadmap."""
        doc = await store.get(self.collection, repo_id)
        if doc is None:
            return None
        total = doc.get("total_tasks")
        return total if isinstance(total, int) else 0

    async def save(self, store: DocumentStore, repo_id: str, roadmap: Roadmap) -> None:
        """Store a freshly generated roadmap, replacing any previous one."""
        data = roadmap.model_dump(mode="json")
        data["repo_id"] = repo_id
        data["generated_at"] = datetime.now(UTC).isoformat()
        await store.set(self.collection, repo_id, data)


roadmap_ops = RoadmapOperations()
