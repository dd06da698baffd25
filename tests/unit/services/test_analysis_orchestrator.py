"""Unit tests for RepositoryAnalyzer: the eight-step analysis pipeline.

Runs the pipeline against in-memory fakes to verify:
- Step results flow into the CompleteAnalysis
- Progress events are emitted in order
- Per-file fetch failures degrade softly
- Fatal failures (size limit, timeout, AI errors) propagate typed
"""

from __future__ import annotations

import pytest

from app.config import settings
from app.core.exceptions import (
    AnalysisTimeoutError,
    InvalidInputError,
    SizeLimitExceededError,
    UpstreamAIError,
)
from app.schemas.analysis import EnvironmentVariable, TechStack
from app.schemas.analysis_progress import AnalysisProgress
from app.services.analysis_orchestrator import (
    RepositoryAnalyzer,
    build_fallback_purpose,
    merge_compose_env_vars,
)
from tests.helpers.factories import REPO_ID, REPO_URL, FakeAI, FakeGitHub, make_github_repo


def _analyzer(github=None, ai=None, events=None, **config_overrides) -> RepositoryAnalyzer:
    config = settings.model_copy(update=config_overrides) if config_overrides else settings
    return RepositoryAnalyzer(
        github=github or FakeGitHub(),
        ai=ai or FakeAI(),
        on_progress=events.append if events is not None else None,
        config=config,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Happy path
# ═══════════════════════════════════════════════════════════════════════════


class TestAnalyze:
    @pytest.mark.anyio
    async def test_complete_analysis(self):
        ai = FakeAI()
        analysis = await _analyzer(ai=ai).analyze(REPO_URL)

        assert analysis.repository.id == REPO_ID
        assert analysis.repository.stars == 42
        assert analysis.repository.analyzed_at is not None
        assert analysis.tech_stack.framework == "Next.js"
        assert analysis.tech_stack.database == "PostgreSQL"

        [database] = analysis.database
        assert database.type == "PostgreSQL"
        assert database.requires_migration is True
        assert database.migrations_path == "src/db/migrations/"

        names = [v.name for v in analysis.environment_variables]
        assert names == ["DATABASE_URL", "PORT", "POSTGRES_PASSWORD"]
        assert analysis.environment_variables[2].description == "Declared in docker-compose.yml"
        assert analysis.environment_variables[2].required is True

        assert analysis.project_purpose.purpose == "Manage widgets"
        assert analysis.roadmap.repository_name == "widgets"
        assert analysis.roadmap.total_tasks == 3
        assert analysis.uploaded_files.total == 0
        assert analysis.analysis_metadata.total_files_scanned == 6
        assert analysis.analysis_metadata.files_analyzed == 6

    @pytest.mark.anyio
    async def test_purpose_call_receives_readme_and_descriptions(self):
        ai = FakeAI()
        await _analyzer(ai=ai).analyze(REPO_URL)

        [(readme, package_description, repo_description)] = ai.purpose_calls
        assert readme.startswith("# Widgets")
        assert package_description == "Widgets as a service"
        assert repo_description == "Widget management"

    @pytest.mark.anyio
    async def test_roadmap_bundle_carries_static_analysis(self):
        ai = FakeAI()
        await _analyzer(ai=ai, setup_instructions_chars=10).analyze(REPO_URL)

        [bundle] = ai.bundles
        assert bundle.tech_stack.framework == "Next.js"
        assert [d.type for d in bundle.database] == ["PostgreSQL"]
        assert bundle.setup_instructions == "# Widgets\n"
        assert bundle.security_issues == []

    @pytest.mark.anyio
    async def test_raw_roadmap_is_normalized(self):
        ai = FakeAI(roadmap={"sections": [{"title": "Only", "tasks": [None, {"title": "t"}]}]})

        analysis = await _analyzer(ai=ai).analyze(REPO_URL)

        [section] = analysis.roadmap.sections
        assert section.id == "section-1"
        assert [t.id for t in section.tasks] == ["section-1-task-1"]
        assert analysis.roadmap.estimated_completion_time == "10 minutes"

    @pytest.mark.anyio
    async def test_invalid_url(self):
        with pytest.raises(InvalidInputError):
            await _analyzer().analyze("https://github.com/acme")


# ═══════════════════════════════════════════════════════════════════════════
# Progress events
# ═══════════════════════════════════════════════════════════════════════════


class TestProgress:
    @pytest.mark.anyio
    async def test_steps_are_reported_in_order(self):
        events: list[AnalysisProgress] = []
        await _analyzer(events=events).analyze(REPO_URL)

        steps = [e.step for e in events]
        assert steps == sorted(steps)
        assert set(steps) == set(range(1, 9))
        assert events[-1].step == 8
        assert events[-1].status == "completed"
        assert events[-1].step_name == "Complete"

    @pytest.mark.anyio
    async def test_reserved_steps_are_skipped(self):
        events: list[AnalysisProgress] = []
        await _analyzer(events=events).analyze(REPO_URL)

        reserved = [e for e in events if e.step in (5, 6)]
        assert [e.status for e in reserved] == ["completed", "completed"]
        assert all(e.message.startswith("Skipped") for e in reserved)

    @pytest.mark.anyio
    async def test_filtering_details_are_reported(self):
        events: list[AnalysisProgress] = []
        await _analyzer(events=events).analyze(REPO_URL)

        [filtered] = [e for e in events if e.step == 2 and e.status == "completed"]
        assert filtered.details == {
            "reduction_percentage": 0,
            "critical_files_count": 4,
            "code_files_count": 2,
        }

    @pytest.mark.anyio
    async def test_async_callback_is_awaited(self):
        seen: list[int] = []

        async def on_progress(progress: AnalysisProgress) -> None:
            seen.append(progress.step)

        analyzer = RepositoryAnalyzer(github=FakeGitHub(), ai=FakeAI(), on_progress=on_progress)
        await analyzer.analyze(REPO_URL)

        assert seen[-1] == 8


# ═══════════════════════════════════════════════════════════════════════════
# Degradation and failures
# ═══════════════════════════════════════════════════════════════════════════


class TestFailures:
    @pytest.mark.anyio
    async def test_single_file_failure_is_not_fatal(self):
        github = FakeGitHub(failing_paths={"Dockerfile"})

        analysis = await _analyzer(github=github).analyze(REPO_URL)

        assert "Dockerfile" in github.content_requests
        assert analysis.tech_stack.framework == "Next.js"

    @pytest.mark.anyio
    async def test_fetches_are_capped(self):
        github = FakeGitHub()

        await _analyzer(github=github, critical_file_fetch_limit=2).analyze(REPO_URL)

        assert github.content_requests == ["README.md", "package.json"]

    @pytest.mark.anyio
    async def test_missing_readme_uses_fallback_purpose(self):
        github = FakeGitHub(files={"package.json": FakeGitHub().files["package.json"]})
        ai = FakeAI()

        analysis = await _analyzer(github=github, ai=ai).analyze(REPO_URL)

        assert ai.purpose_calls == []
        assert analysis.project_purpose.purpose == "Widget management"
        assert analysis.project_purpose.project_type == "Next.js"
        assert analysis.environment_variables == []

    @pytest.mark.anyio
    async def test_oversized_repository_is_rejected(self):
        events: list[AnalysisProgress] = []
        github = FakeGitHub(repo=make_github_repo(size_kb=600 * 1024))

        with pytest.raises(SizeLimitExceededError, match="Current size: 600MB"):
            await _analyzer(github=github, events=events).analyze(REPO_URL)

        assert events[-1].step == 1
        assert events[-1].status == "failed"

    @pytest.mark.anyio
    async def test_timeout(self):
        events: list[AnalysisProgress] = []
        github = FakeGitHub(tree_delay=1.0)

        with pytest.raises(AnalysisTimeoutError):
            await _analyzer(github=github, events=events, analysis_timeout_seconds=0.05).analyze(
                REPO_URL
            )

        assert events[-1].status == "failed"
        assert events[-1].step == 2

    @pytest.mark.anyio
    async def test_roadmap_failure_fails_the_run(self):
        ai = FakeAI()

        async def fail(_bundle):
            raise UpstreamAIError("Failed to generate onboarding roadmap")

        ai.generate_roadmap = fail
        events: list[AnalysisProgress] = []

        with pytest.raises(UpstreamAIError):
            await _analyzer(ai=ai, events=events).analyze(REPO_URL)

        assert events[-1].step == 7
        assert events[-1].status == "failed"


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════


class TestHelpers:
    def test_fallback_purpose_without_description(self):
        purpose = build_fallback_purpose(None, TechStack(primary_language="Go", framework=None))

        assert purpose.purpose == "No description available"
        assert purpose.features == ["Feature analysis requires README.md"]
        assert purpose.target_users == "Developers"
        assert purpose.project_type == "Unknown"

    def test_merge_compose_env_vars_skips_known_names(self):
        known = [EnvironmentVariable(name="PORT", description="d", required=False)]

        merged = merge_compose_env_vars(known, ["PORT", "REDIS_URL"])

        assert [v.name for v in merged] == ["PORT", "REDIS_URL"]
        assert merged[1].category == "database"
        assert merged[1].required is True
