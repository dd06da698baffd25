"""Pydantic schema for analysis progress events.

Each step transition of the analysis pipeline emits one of these to the
injected progress callback. The API layer mirrors the latest event into the
`analysis_progress/{repo_id}` document so the loading page can poll it.

Within a single run, `step` never decreases.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

ProgressStatus = Literal["pending", "in-progress", "completed", "failed"]

TOTAL_STEPS = 8


class AnalysisProgress(BaseModel):
    """Progress update during repository analysis."""

    step: int = Field(ge=1, le=TOTAL_STEPS, description="Current step (1-8)")
    step_name: str = Field(description="Human-readable step name, e.g., 'File Tree Filtering'")
    status: ProgressStatus = Field(description="Status of the current step")
    message: str = Field(description="Human-readable status message")
    details: dict[str, Any] | None = Field(
        default=None,
        description="Optional structured details, e.g., filtering statistics",
    )
