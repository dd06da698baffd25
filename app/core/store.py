"""
Document store abstraction.

Persistence is modelled as a key-value document store addressed by a
collection path and a document id (e.g. ``user_progress/{user_id}/repos`` +
``owner-repo``). The pipeline core never talks to a concrete database; domain
operations receive a ``DocumentStore`` the same way they would receive a
session.

Writes are last-write-wins; no cross-document locking is provided.
"""

import asyncio
import copy
import logging
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

Document = dict[str, Any]


@runtime_checkable
class DocumentStore(Protocol):
    """Minimal repository-pattern interface over a document database."""

    async def get(self, collection: str, doc_id: str) -> Document | None: ...

    async def set(
        self, collection: str, doc_id: str, data: Document, merge: bool = False
    ) -> None: ...

    async def update(self, collection: str, doc_id: str, data: Document) -> None: ...

    async def delete(self, collection: str, doc_id: str) -> bool: ...

    async def batch_delete(self, refs: list[tuple[str, str]]) -> int: ...

    async def list(self, collection: str) -> dict[str, Document]: ...


class InMemoryDocumentStore:
    """
    In-process ``DocumentStore`` implementation.

    Documents are deep-copied on the way in and out so callers can never
    mutate stored state by accident.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        self._lock = asyncio.Lock()

    async def get(self, collection: str, doc_id: str) -> Document | None:
        """Get a single document, or None if it does not exist."""
        async with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    async def set(
        self,
        collection: str,
        doc_id: str,
        data: Document,
        merge: bool = False,
    ) -> None:
        """Create or replace a document. With ``merge`` top-level keys are merged."""
        async with self._lock:
            docs = self._collections.setdefault(collection, {})
            if merge and doc_id in docs:
                docs[doc_id].update(copy.deepcopy(data))
            else:
                docs[doc_id] = copy.deepcopy(data)

    async def update(self, collection: str, doc_id: str, data: Document) -> None:
        """Update fields of an existing document.

        Raises:
            KeyError: If the document does not exist
        """
        async with self._lock:
            docs = self._collections.get(collection, {})
            if doc_id not in docs:
                raise KeyError(f"{collection}/{doc_id}")
            docs[doc_id].update(copy.deepcopy(data))

    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns True if something was deleted."""
        async with self._lock:
            return self._collections.get(collection, {}).pop(doc_id, None) is not None

    async def batch_delete(self, refs: list[tuple[str, str]]) -> int:
        """Delete several ``(collection, doc_id)`` documents, returning the count removed."""
        deleted = 0
        async with self._lock:
            for collection, doc_id in refs:
                if self._collections.get(collection, {}).pop(doc_id, None) is not None:
                    deleted += 1
        logger.debug(f"Batch deleted {deleted}/{len(refs)} documents")
        return deleted

    async def list(self, collection: str) -> dict[str, Document]:
        """Return all documents in a collection keyed by id."""
        async with self._lock:
            return copy.deepcopy(self._collections.get(collection, {}))
