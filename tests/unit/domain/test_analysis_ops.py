"""Unit tests for AnalysisOperations and RoadmapOperations."""

from datetime import UTC, datetime, timedelta

import pytest

from app.domain.analysis_operations import REPOSITORIES_COLLECTION, analysis_ops
from app.domain.roadmap_operations import ROADMAPS_COLLECTION, roadmap_ops
from app.schemas.roadmap import Roadmap, RoadmapSection, RoadmapTask

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


class TestIsFresh:
    @pytest.mark.anyio
    async def test_missing_record(self, store):
        assert await analysis_ops.is_fresh(store, "r", 30, now=NOW) is False

    @pytest.mark.anyio
    async def test_record_without_timestamp(self, store):
        await store.set(REPOSITORIES_COLLECTION, "r", {"owner": "acme"})
        assert await analysis_ops.is_fresh(store, "r", 30, now=NOW) is False

    @pytest.mark.anyio
    async def test_within_window(self, store):
        analyzed = NOW - timedelta(days=29)
        await store.set(REPOSITORIES_COLLECTION, "r", {"analyzed_at": analyzed.isoformat()})
        assert await analysis_ops.is_fresh(store, "r", 30, now=NOW) is True

    @pytest.mark.anyio
    async def test_outside_window(self, store):
        analyzed = NOW - timedelta(days=30, seconds=1)
        await store.set(REPOSITORIES_COLLECTION, "r", {"analyzed_at": analyzed.isoformat()})
        assert await analysis_ops.is_fresh(store, "r", 30, now=NOW) is False

    @pytest.mark.anyio
    async def test_naive_timestamp_treated_as_utc(self, store):
        await store.set(REPOSITORIES_COLLECTION, "r", {"analyzed_at": "2025-02-28T12:00:00"})
        assert await analysis_ops.is_fresh(store, "r", 30, now=NOW) is True


def _roadmap() -> Roadmap:
    return Roadmap(
        repository_name="widgets",
        total_tasks=2,
        estimated_completion_time="20 minutes",
        sections=[
            RoadmapSection(
                id="setup",
                title="Setup",
                tasks=[RoadmapTask(id="setup-1"), RoadmapTask(id="setup-2")],
            )
        ],
    )


class TestRoadmapOps:
    @pytest.mark.anyio
    async def test_save_and_get(self, store):
        await roadmap_ops.save(store, "r", _roadmap())

        doc = await store.get(ROADMAPS_COLLECTION, "r")
        assert doc["repo_id"] == "r"
        assert "generated_at" in doc

        roadmap = await roadmap_ops.get(store, "r")
        assert roadmap.repository_name == "widgets"
        assert [t.id for t in roadmap.sections[0].tasks] == ["setup-1", "setup-2"]
        assert await roadmap_ops.exists(store, "r") is True

    @pytest.mark.anyio
    async def test_get_normalizes_partial_documents(self, store):
        await store.set(ROADMAPS_COLLECTION, "r", {"sections": [{"tasks": [{"title": "x"}]}]})

        roadmap = await roadmap_ops.get(store, "r")

        assert roadmap.total_tasks == 1
        assert roadmap.sections[0].tasks[0].difficulty == "beginner"

    @pytest.mark.anyio
    async def test_total_tasks(self, store):
        assert await roadmap_ops.get_total_tasks(store, "r") is None

        await store.set(ROADMAPS_COLLECTION, "r", {"sections": []})
        assert await roadmap_ops.get_total_tasks(store, "r") == 0

        await roadmap_ops.save(store, "r", _roadmap())
        assert await roadmap_ops.get_total_tasks(store, "r") == 2
