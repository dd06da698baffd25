"""Pydantic schemas for per-user roadmap progress.

Stored at `user_progress/{user_id}/repos/{repo_id}`.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class UserProgress(BaseModel):
    """A user's completion state for one repository roadmap."""

    user_id: str
    repo_id: str
    completed_tasks: list[str] = Field(default_factory=list, description="Completed task IDs")
    overall_progress_percentage: int = Field(default=0, ge=0, le=100)
    ghost_solidness: int = Field(default=0, ge=0, le=100, description="Mirrors progress for the UI")
    started_at: datetime | None = None
    last_activity: datetime | None = None


class ProgressUpdate(BaseModel):
    """Result of toggling a task."""

    new_progress: int
    celebration_triggered: bool


class AnalysisSummary(BaseModel):
    """One entry of a user's analysis list."""

    repo_id: str = Field(serialization_alias="repoId")
    repository_name: str
    progress: int
    started_at: datetime | None
    last_activity: datetime | None
    total_tasks: int
    completed_tasks: int
