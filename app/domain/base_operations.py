from typing import Generic, TypeVar

from pydantic import BaseModel

from app.core.store import DocumentStore

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseOperations(Generic[ModelType]):
    """Base document operations for a single top-level collection."""

    def __init__(self, model: type[ModelType], collection: str):
        self.model = model
        self.collection = collection

    async def get(self, store: DocumentStore, doc_id: str) -> ModelType | None:
        """Get a single document by ID, validated into the model."""
        doc = await store.get(self.collection, doc_id)
        if doc is None:
            return None
        return self.model.model_validate(doc)

    async def save(self, store: DocumentStore, doc_id: str, obj: ModelType) -> None:
        """Create or fully replace a document."""
        await store.set(self.collection, doc_id, obj.model_dump(mode="json"))

    async def delete(self, store: DocumentStore, doc_id: str) -> bool:
        """Delete a document. Returns True if it existed."""
        return await store.delete(self.collection, doc_id)
