"""Pydantic schemas for the normalized onboarding roadmap.

This is the validated, fully-populated shape produced by the roadmap
transformer. Everything downstream (storage, API responses, the task UI)
consumes this shape only; raw AI output never leaves the transformer.

Steps, code blocks, references and troubleshooting entries are kept as the
model emitted them, members unfiltered. Dict members usually carry:

- step: ``order``, ``action``, ``details``, ``os_specific`` ({mac, windows, linux} | null)
- code block: ``type``, ``file_path``, ``language``, ``content``, ``explanation``, ``highlights``
- reference: ``text``, ``url``, ``type``, ``relevance``
- troubleshooting: ``problem``, ``solution``, ``command``
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

Difficulty = Literal["beginner", "intermediate", "advanced"]
CommandOS = Literal["all", "mac", "windows", "linux"]
TipType = Literal["pro_tip", "beginner_friendly", "time_saver"]
WarningSeverity = Literal["critical", "important", "minor"]


class TaskDescription(BaseModel):
    summary: str = ""
    why_needed: str = ""
    learning_goal: str = ""


class CommandBlock(BaseModel):
    command: str = ""
    description: str = ""
    expected_output: str = ""
    os: CommandOS = "all"


class Tip(BaseModel):
    text: str = ""
    type: TipType = "pro_tip"
    emphasis: list[str] = Field(default_factory=list)


class TaskWarning(BaseModel):
    text: str = ""
    severity: WarningSeverity = "important"
    os_specific: bool = False
    emphasis: list[str] = Field(default_factory=list)


class Verification(BaseModel):
    how_to_verify: str = ""
    expected_result: str = ""
    troubleshooting: list[Any] = Field(default_factory=list)


class RoadmapTask(BaseModel):
    """A single onboarding task, fully defaulted."""

    id: str
    title: str = ""
    description: TaskDescription = Field(default_factory=TaskDescription)
    steps: list[Any] = Field(default_factory=list)
    commands: list[CommandBlock] = Field(default_factory=list)
    code_blocks: list[Any] = Field(default_factory=list)
    references: list[Any] = Field(default_factory=list)
    tips: list[Tip] = Field(default_factory=list)
    warnings: list[TaskWarning] = Field(default_factory=list)
    verification: Verification = Field(default_factory=Verification)
    difficulty: Difficulty = "beginner"
    estimated_time: str = "10 minutes"
    depends_on: list[str] = Field(default_factory=list)


class RoadmapSection(BaseModel):
    id: str
    title: str = ""
    description: str = ""
    tasks: list[RoadmapTask] = Field(default_factory=list)


class Roadmap(BaseModel):
    """Normalized onboarding roadmap."""

    repository_name: str = "Unknown Project"
    total_tasks: int = 0
    estimated_completion_time: str = "0 minutes"
    sections: list[RoadmapSection] = Field(default_factory=list)


class SectionMetrics(BaseModel):
    """Derived per-section aggregates for summary views."""

    id: str
    title: str
    task_count: int
    total_estimated_minutes: int
    difficulty_breakdown: dict[str, int]
    has_code: bool
    has_tips: bool
    has_warnings: bool


# ─────────────────────────────────────────────────────────────
# Alternate views
# ─────────────────────────────────────────────────────────────


class TimelineEvent(BaseModel):
    id: str
    order: int = Field(description="1-based position across all sections")
    title: str
    section: str
    difficulty: Difficulty
    estimated_time: str
    dependencies: list[str]


class TimelineView(BaseModel):
    repository_name: str
    events: list[TimelineEvent]


class GraphNode(BaseModel):
    id: str
    label: str
    difficulty: Difficulty


class GraphEdge(BaseModel):
    """Edge from a prerequisite task to the task that depends on it."""

    from_: str = Field(serialization_alias="from")
    to: str


class DependencyGraph(BaseModel):
    nodes: list[GraphNode]
    edges: list[GraphEdge]
