"""Unit tests for InMemoryDocumentStore."""

import pytest

from app.core.store import DocumentStore, InMemoryDocumentStore


def test_implements_protocol():
    assert isinstance(InMemoryDocumentStore(), DocumentStore)


class TestGetSet:
    @pytest.mark.anyio
    async def test_missing_document(self, store):
        assert await store.get("things", "a") is None

    @pytest.mark.anyio
    async def test_set_replaces(self, store):
        await store.set("things", "a", {"x": 1, "y": 2})
        await store.set("things", "a", {"x": 3})
        assert await store.get("things", "a") == {"x": 3}

    @pytest.mark.anyio
    async def test_set_merge(self, store):
        await store.set("things", "a", {"x": 1, "y": 2})
        await store.set("things", "a", {"x": 3}, merge=True)
        assert await store.get("things", "a") == {"x": 3, "y": 2}

    @pytest.mark.anyio
    async def test_returned_documents_are_copies(self, store):
        data = {"items": [1]}
        await store.set("things", "a", data)
        data["items"].append(2)

        doc = await store.get("things", "a")
        doc["items"].append(3)

        assert await store.get("things", "a") == {"items": [1]}


class TestUpdateDelete:
    @pytest.mark.anyio
    async def test_update_missing_raises(self, store):
        with pytest.raises(KeyError):
            await store.update("things", "a", {"x": 1})

    @pytest.mark.anyio
    async def test_update_merges_fields(self, store):
        await store.set("things", "a", {"x": 1, "y": 2})
        await store.update("things", "a", {"y": 5})
        assert await store.get("things", "a") == {"x": 1, "y": 5}

    @pytest.mark.anyio
    async def test_delete(self, store):
        await store.set("things", "a", {})
        assert await store.delete("things", "a") is True
        assert await store.delete("things", "a") is False

    @pytest.mark.anyio
    async def test_batch_delete_counts_existing(self, store):
        await store.set("things", "a", {})
        await store.set("other", "b", {})

        deleted = await store.batch_delete([("things", "a"), ("other", "b"), ("other", "c")])

        assert deleted == 2
        assert await store.list("things") == {}

    @pytest.mark.anyio
    async def test_list_is_scoped_to_collection(self, store):
        await store.set("user_progress/u1/repos", "r1", {"n": 1})
        await store.set("user_progress/u2/repos", "r2", {"n": 2})

        assert await store.list("user_progress/u1/repos") == {"r1": {"n": 1}}
