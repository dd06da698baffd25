"""
Repository analysis orchestrator.

Runs the eight-step analysis pipeline for one repository:
1. Repository Access   - metadata fetch and size check
2. File Tree Filtering - full tree fetch and classification
3. Static Analysis     - critical file contents, tech stack, databases, env vars
4. Project Purpose     - AI extraction from README, or a metadata fallback
5. Security Scan       - reserved, always skipped
6. File Upload         - reserved, always skipped
7. Roadmap Generation  - AI roadmap, normalized by the transformer
8. Complete

Each transition is reported to the injected progress callback. The whole run
is bounded by a single timeout; steps never run concurrently.
"""

import asyncio
import inspect
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Protocol

from app.config import Settings, settings as default_settings
from app.core.exceptions import AnalysisTimeoutError, AppError, SizeLimitExceededError
from app.schemas.analysis import (
    AnalysisMetadata,
    CompleteAnalysis,
    DatabaseRequirement,
    EnvironmentVariable,
    ProjectPurpose,
    RepositoryMetadata,
    TechStack,
    UploadedFiles,
)
from app.schemas.analysis_progress import AnalysisProgress, ProgressStatus
from app.schemas.roadmap import Roadmap
from app.services.ai.client import AnalysisBundle
from app.services.analysis import (
    TechStackDetector,
    categorize_env_var,
    detect_database_from_docker_compose,
    detect_database_requirements,
    extract_env_vars_from_docker_compose,
    extract_environment_variables,
    filter_file_tree,
    get_filtering_stats,
    merge_database_requirements,
    parse_github_url,
    repo_id_from_url,
)
from app.services.analysis.types import FilteredFileTree
from app.services.github.types import GitHubRepo, RepoTree
from app.services.roadmap_transformer import RawRoadmap, transform_roadmap

logger = logging.getLogger(__name__)

STEP_NAMES = {
    1: "Repository Access",
    2: "File Tree Filtering",
    3: "Static Analysis",
    4: "Project Purpose",
    5: "Security Scan",
    6: "File Upload",
    7: "Roadmap Generation",
    8: "Complete",
}

ENV_EXAMPLE_FILES = (".env.example", ".env.sample")
COMPOSE_FILE = "docker-compose.yml"
COMPOSE_ENV_DESCRIPTION = "Declared in docker-compose.yml"

ProgressCallback = Callable[[AnalysisProgress], Awaitable[None] | None]


class SourceControlClient(Protocol):
    """What the pipeline needs from the source-control service."""

    async def get_repository_metadata(self, owner: str, repo: str) -> GitHubRepo: ...

    async def get_file_tree(self, owner: str, repo: str, branch: str = "main") -> RepoTree: ...

    async def get_file_content(
        self, owner: str, repo: str, path: str, branch: str = "main"
    ) -> str: ...


class RoadmapAIClient(Protocol):
    """What the pipeline needs from the generative AI service."""

    async def extract_project_purpose(
        self,
        readme_text: str,
        package_description: str | None = None,
        repo_description: str | None = None,
    ) -> ProjectPurpose: ...

    async def generate_roadmap(self, bundle: AnalysisBundle) -> RawRoadmap: ...


@dataclass
class StaticAnalysis:
    """Step 3 output."""

    files: dict[str, str]  # critical file basename -> content
    tech_stack: TechStack
    databases: list[DatabaseRequirement]
    env_vars: list[EnvironmentVariable]


@dataclass
class _RunState:
    """Per-run bookkeeping; never shared between analyses."""

    step: int = 1


def build_fallback_purpose(description: str | None, tech_stack: TechStack) -> ProjectPurpose:
    """Purpose synthesized from metadata when there is no README to analyze."""
    return ProjectPurpose(
        purpose=description or "No description available",
        features=["Feature analysis requires README.md"],
        target_users="Developers",
        project_type=tech_stack.framework or "Unknown",
    )


def merge_compose_env_vars(
    env_vars: list[EnvironmentVariable], compose_names: list[str]
) -> list[EnvironmentVariable]:
    """Append compose-declared variables missing from the example file as required."""
    known = {var.name for var in env_vars}
    extra = [
        EnvironmentVariable(
            name=name,
            description=COMPOSE_ENV_DESCRIPTION,
            required=True,
            example_value="",
            category=categorize_env_var(name),
        )
        for name in compose_names
        if name not in known
    ]
    return env_vars + extra


class RepositoryAnalyzer:
    """
    Analyze one GitHub repository into a CompleteAnalysis.

    Collaborators are injected so runs can be exercised with fakes. An
    analyzer holds no per-run state and may serve concurrent analyses.
    """

    def __init__(
        self,
        github: SourceControlClient,
        ai: RoadmapAIClient,
        on_progress: ProgressCallback | None = None,
        config: Settings | None = None,
    ) -> None:
        self.github = github
        self.ai = ai
        self.on_progress = on_progress
        self.config = config or default_settings
        self.tech_stack_detector = TechStackDetector()

    async def analyze(self, repo_url: str) -> CompleteAnalysis:
        """
        Run the full pipeline.

        Raises:
            InvalidInputError: Malformed repository URL
            NotFoundOrPrivateError / RateLimitedError: Fatal fetch failures
            SizeLimitExceededError: Repository above the size limit
            UpstreamAIError: Purpose extraction or roadmap generation failed
            AnalysisTimeoutError: The overall time ceiling was exceeded
        """
        state = _RunState()
        try:
            return await asyncio.wait_for(
                self._execute(repo_url, state),
                timeout=self.config.analysis_timeout_seconds,
            )
        except TimeoutError:
            logger.error(
                f"Analysis of {repo_url} timed out after {self.config.analysis_timeout_seconds}s "
                f"during step {state.step}"
            )
            error = AnalysisTimeoutError()
            await self._report(state, state.step, "failed", error.message)
            raise error from None
        except AppError as e:
            await self._report(state, state.step, "failed", e.message)
            raise
        except Exception:
            logger.exception(f"Analysis of {repo_url} failed unexpectedly")
            await self._report(state, state.step, "failed", "Analysis failed")
            raise

    async def _execute(self, repo_url: str, state: _RunState) -> CompleteAnalysis:
        started = time.monotonic()
        parsed = parse_github_url(repo_url)
        owner, repo = parsed.owner, parsed.repo
        logger.info(f"Starting analysis of {owner}/{repo}")

        # Step 1: Repository Access
        await self._report(state, 1, "in-progress", "Fetching repository metadata...")
        github_repo = await self.github.get_repository_metadata(owner, repo)
        self._validate_size(github_repo.size_kb)
        metadata = self._to_metadata(github_repo, owner, repo_url)
        await self._report(
            state,
            1,
            "completed",
            f"Repository: {metadata.name}",
            {"stars": metadata.stars, "language": metadata.language},
        )

        # Step 2: File Tree Filtering
        await self._report(state, 2, "in-progress", "Fetching file tree...")
        tree = await self.github.get_file_tree(owner, repo, metadata.default_branch)
        filtered = filter_file_tree(tree.items)
        stats = get_filtering_stats(filtered)
        await self._report(
            state,
            2,
            "completed",
            f"Filtered {filtered.total_files} files → {filtered.analyzed_files} relevant files "
            f"({stats.reduction_percentage}% reduction)",
            {
                "reduction_percentage": stats.reduction_percentage,
                "critical_files_count": stats.critical_files_count,
                "code_files_count": stats.code_files_count,
            },
        )

        # Step 3: Static Analysis
        await self._report(state, 3, "in-progress", "Analyzing tech stack...")
        static = await self._static_analysis(owner, repo, tree.branch, metadata, filtered)
        await self._report(
            state,
            3,
            "completed",
            f"Detected: {static.tech_stack.framework}, {len(static.databases)} databases, "
            f"{len(static.env_vars)} env vars",
        )

        # Step 4: Project Purpose
        await self._report(state, 4, "in-progress", "Analyzing project purpose...")
        readme = static.files.get("README.md", "")
        purpose = await self._project_purpose(readme, static, metadata)
        await self._report(state, 4, "completed", purpose.purpose)

        # Steps 5-6 are reserved extension points
        await self._report(state, 5, "completed", "Skipped (optional feature)")
        await self._report(state, 6, "completed", "Skipped (will be implemented for chat)")

        # Step 7: Roadmap Generation
        await self._report(state, 7, "in-progress", "Generating onboarding roadmap...")
        raw_roadmap = await self.ai.generate_roadmap(
            AnalysisBundle(
                tech_stack=static.tech_stack,
                database=static.databases,
                env_vars=static.env_vars,
                purpose=purpose,
                setup_instructions=readme[: self.config.setup_instructions_chars] or None,
                security_issues=[],
            )
        )
        roadmap = self._normalize_roadmap(raw_roadmap, metadata.name)
        await self._report(
            state,
            7,
            "completed",
            f"Generated {len(roadmap.sections)} sections with {roadmap.total_tasks} tasks",
        )

        # Step 8: Complete
        duration = round(time.monotonic() - started)
        analyzed_at = datetime.now(UTC)
        metadata = metadata.model_copy(
            update={"analysis_duration": duration, "analyzed_at": analyzed_at}
        )
        await self._report(state, 8, "completed", f"Analysis completed in {duration}s")
        logger.info(
            f"Analysis of {owner}/{repo} complete in {duration}s: "
            f"{filtered.analyzed_files}/{filtered.total_files} files, "
            f"{len(roadmap.sections)} sections, {roadmap.total_tasks} tasks"
        )

        return CompleteAnalysis(
            repository=metadata,
            tech_stack=static.tech_stack,
            database=static.databases,
            environment_variables=static.env_vars,
            project_purpose=purpose,
            roadmap=roadmap,
            uploaded_files=UploadedFiles(),
            analysis_metadata=AnalysisMetadata(
                analyzed_at=analyzed_at,
                analysis_duration_seconds=duration,
                total_files_scanned=filtered.total_files,
                files_analyzed=filtered.analyzed_files,
                reduction_percentage=stats.reduction_percentage,
            ),
        )

    # ─────────────────────────────────────────────────────────────
    # Steps
    # ─────────────────────────────────────────────────────────────

    def _validate_size(self, size_kb: int) -> None:
        max_kb = self.config.max_repo_size_kb
        if size_kb > max_kb:
            raise SizeLimitExceededError(
                f"Repository exceeds size limit ({round(max_kb / 1024)}MB). "
                f"Current size: {round(size_kb / 1024)}MB"
            )

    def _to_metadata(
        self, github_repo: GitHubRepo, owner: str, repo_url: str
    ) -> RepositoryMetadata:
        return RepositoryMetadata(
            id=repo_id_from_url(repo_url),
            owner=github_repo.owner or owner,
            name=github_repo.name,
            url=repo_url,
            description=github_repo.description or "",
            stars=github_repo.stars_count,
            forks=github_repo.forks_count,
            default_branch=github_repo.default_branch,
            created_at=github_repo.created_at,
            updated_at=github_repo.updated_at,
            language=github_repo.language or "Unknown",
            size_kb=github_repo.size_kb,
            is_private=github_repo.is_private,
        )

    async def _fetch_critical_files(
        self, owner: str, repo: str, branch: str, filtered: FilteredFileTree
    ) -> dict[str, str]:
        """Fetch the first N critical files, one at a time, keyed by basename."""
        files: dict[str, str] = {}
        for item in filtered.critical_files[: self.config.critical_file_fetch_limit]:
            try:
                content = await self.github.get_file_content(owner, repo, item.path, branch)
            except Exception as e:
                logger.warning(f"Failed to fetch {item.path} from {owner}/{repo}: {e}")
                continue
            files[item.path.rsplit("/", 1)[-1]] = content
        return files

    async def _static_analysis(
        self,
        owner: str,
        repo: str,
        branch: str,
        metadata: RepositoryMetadata,
        filtered: FilteredFileTree,
    ) -> StaticAnalysis:
        files = await self._fetch_critical_files(owner, repo, branch, filtered)
        language = metadata.language if metadata.language != "Unknown" else None

        tech_stack = self.tech_stack_detector.detect(language, files)

        databases = detect_database_requirements(tech_stack.dependencies.all(), filtered.files)
        compose = files.get(COMPOSE_FILE)
        if compose:
            databases = merge_database_requirements(
                databases, detect_database_from_docker_compose(compose)
            )

        env_example = next((files[name] for name in ENV_EXAMPLE_FILES if name in files), "")
        env_vars = extract_environment_variables(env_example)
        if compose:
            env_vars = merge_compose_env_vars(
                env_vars, extract_env_vars_from_docker_compose(compose)
            )

        return StaticAnalysis(
            files=files, tech_stack=tech_stack, databases=databases, env_vars=env_vars
        )

    async def _project_purpose(
        self, readme: str, static: StaticAnalysis, metadata: RepositoryMetadata
    ) -> ProjectPurpose:
        if not readme:
            logger.info(f"No README for {metadata.id}, using fallback purpose")
            return build_fallback_purpose(metadata.description, static.tech_stack)

        return await self.ai.extract_project_purpose(
            readme,
            self._package_description(static.files.get("package.json")),
            metadata.description or None,
        )

    @staticmethod
    def _package_description(package_json: str | None) -> str | None:
        if not package_json:
            return None
        try:
            data = json.loads(package_json)
        except json.JSONDecodeError:
            return None
        description = data.get("description") if isinstance(data, dict) else None
        return description if isinstance(description, str) else None

    @staticmethod
    def _normalize_roadmap(raw: RawRoadmap, repository_name: str) -> Roadmap:
        data: dict[str, Any] = dict(raw.data)
        data.setdefault("repository_name", repository_name)
        return transform_roadmap(RawRoadmap(data=data))

    # ─────────────────────────────────────────────────────────────
    # Progress
    # ─────────────────────────────────────────────────────────────

    async def _report(
        self,
        state: _RunState,
        step: int,
        status: ProgressStatus,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        state.step = max(state.step, step)
        progress = AnalysisProgress(
            step=state.step,
            step_name=STEP_NAMES[state.step],
            status=status,
            message=message,
            details=details,
        )
        logger.info(f"Step {progress.step}/8: {progress.step_name} - {status}: {message}")

        if self.on_progress is None:
            return
        result = self.on_progress(progress)
        if inspect.isawaitable(result):
            await result
