"""Repository analysis: run, poll and remove analyses."""

import logging

from fastapi import APIRouter, Body, Query
from pydantic import BaseModel, ConfigDict, Field

from app.api.deps import AIClient, GitHubFactory, Store
from app.core.exceptions import InvalidInputError, ResourceNotFoundError
from app.domain import analysis_progress_ops, progress_ops
from app.services.analysis import validate_github_url
from app.services.repository_analysis import run_repository_analysis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


class AnalyzeRepoRequest(BaseModel):
    """Analysis request. `githubToken` is only needed for private repositories."""

    model_config = ConfigDict(populate_by_name=True)

    repo_url: str = Field(alias="repoUrl")
    user_id: str = Field(alias="userId", min_length=1)
    github_token: str | None = Field(default=None, alias="githubToken")


class AnalyzeRepoResponse(BaseModel):
    success: bool
    repoId: str
    message: str
    cached: bool


class DeleteAnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
    repo_id: str = Field(alias="repoId", min_length=1)


@router.post("/analyze-repo", response_model=AnalyzeRepoResponse)
async def analyze_repo(
    data: AnalyzeRepoRequest,
    store: Store,
    github_factory: GitHubFactory,
    ai: AIClient,
) -> AnalyzeRepoResponse:
    """
    Analyze a GitHub repository and generate its onboarding roadmap.

    Runs inline; poll GET /analysis-progress/{repoId} for live step updates.
    A fresh analysis (younger than the cache window) is reused.
    """
    if not validate_github_url(data.repo_url):
        raise InvalidInputError("Invalid GitHub repository URL")

    logger.info(
        f"Analysis requested for {data.repo_url} by {data.user_id} "
        f"(token: {'yes' if data.github_token else 'no'})"
    )
    outcome = await run_repository_analysis(
        store,
        data.repo_url,
        data.user_id,
        github=github_factory(data.github_token),
        ai=ai,
    )
    return AnalyzeRepoResponse(
        success=True,
        repoId=outcome.repo_id,
        message=outcome.message,
        cached=outcome.cached,
    )


@router.get("/analysis-progress/{repo_id}")
async def get_analysis_progress(repo_id: str, store: Store) -> dict:
    """Latest progress event of the repository's analysis."""
    progress = await analysis_progress_ops.get(store, repo_id)
    if progress is None:
        raise ResourceNotFoundError("Analysis progress")

    return {
        "step": progress.step,
        "stepName": progress.step_name,
        "status": progress.status,
        "message": progress.message,
        "details": progress.details,
    }


@router.get("/user-analyses")
async def list_user_analyses(
    store: Store,
    user_id: str = Query(..., alias="userId", min_length=1),
) -> dict:
    """A user's analyses, most recently active first."""
    summaries = await progress_ops.summarize_for_user(store, user_id)
    return {"analyses": [s.model_dump(mode="json", by_alias=True) for s in summaries]}


@router.delete("/analysis")
async def delete_analysis(
    store: Store,
    data: DeleteAnalysisRequest = Body(...),
) -> dict:
    """
    Remove an analysis from a user's list.

    Only the user's progress is deleted. The repository record and roadmap
    are shared cache entries and stay.
    """
    await progress_ops.delete(store, data.user_id, data.repo_id)
    logger.info(f"Deleted progress of {data.user_id} on {data.repo_id}")
    return {"success": True, "message": "Analysis deleted successfully"}
