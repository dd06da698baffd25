"""Roadmap retrieval and task completion."""

import logging

from fastapi import APIRouter, Query
from pydantic import BaseModel, ConfigDict, Field

from app.api.deps import Store
from app.config import settings
from app.core.exceptions import ResourceNotFoundError
from app.domain import progress_ops, roadmap_ops

logger = logging.getLogger(__name__)

router = APIRouter(tags=["roadmap"])


class UpdateTaskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId", min_length=1)
    repo_id: str = Field(alias="repoId", min_length=1)
    task_id: str = Field(alias="taskId", min_length=1)
    completed: bool


class UpdateTaskResponse(BaseModel):
    success: bool
    newProgress: int
    celebrationTriggered: bool


@router.get("/roadmap")
async def get_roadmap(
    store: Store,
    repo_id: str = Query(..., alias="repoId", min_length=1),
    user_id: str = Query(..., alias="userId", min_length=1),
) -> dict:
    """Roadmap plus the user's progress (zero progress if never started)."""
    roadmap = await roadmap_ops.get(store, repo_id)
    if roadmap is None:
        raise ResourceNotFoundError("Roadmap")

    progress = await progress_ops.get_or_default(store, user_id, repo_id)
    return {
        "success": True,
        "roadmap": roadmap.model_dump(mode="json"),
        "progress": progress.model_dump(mode="json"),
    }


@router.post("/update-task", response_model=UpdateTaskResponse)
async def update_task(data: UpdateTaskRequest, store: Store) -> UpdateTaskResponse:
    """Mark a roadmap task complete or incomplete."""
    if await progress_ops.get(store, data.user_id, data.repo_id) is None:
        raise ResourceNotFoundError("Progress")

    total_tasks = await roadmap_ops.get_total_tasks(store, data.repo_id)
    if total_tasks is None:
        raise ResourceNotFoundError("Roadmap")

    update = await progress_ops.toggle_task(
        store,
        data.user_id,
        data.repo_id,
        data.task_id,
        completed=data.completed,
        total_tasks=total_tasks,
        milestone_thresholds=settings.milestone_thresholds,
    )
    return UpdateTaskResponse(
        success=True,
        newProgress=update.new_progress,
        celebrationTriggered=update.celebration_triggered,
    )
