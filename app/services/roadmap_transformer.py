"""
Roadmap transformer.

The single conversion boundary between loosely-typed AI output and the
validated ``Roadmap`` schema. Generated roadmaps routinely omit fields, use a
plain string where an object is expected, or emit ``null`` list members; this
module fills every gap so downstream code (storage, API, task UI) can rely on
a fully-populated shape.

Transforming an already-normalized roadmap returns an equal roadmap.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from app.schemas.roadmap import (
    CommandBlock,
    DependencyGraph,
    GraphEdge,
    GraphNode,
    Roadmap,
    RoadmapSection,
    RoadmapTask,
    SectionMetrics,
    TaskDescription,
    TaskWarning,
    TimelineEvent,
    TimelineView,
    Tip,
    Verification,
)

logger = logging.getLogger(__name__)

DEFAULT_REPOSITORY_NAME = "Unknown Project"
DEFAULT_TASK_MINUTES = 10

VALID_COMMAND_OS = {"all", "mac", "windows", "linux"}
VALID_TIP_TYPES = {"pro_tip", "beginner_friendly", "time_saver"}
VALID_WARNING_SEVERITIES = {"critical", "important", "minor"}

BOLD_PATTERN = re.compile(r"\*\*(.*?)\*\*")
CODE_PATTERN = re.compile(r"`(.*?)`")
HOURS_PATTERN = re.compile(r"(\d+)\s*h", re.IGNORECASE)
MINUTES_PATTERN = re.compile(r"(\d+)\s*m", re.IGNORECASE)
NUMBER_PATTERN = re.compile(r"(\d+)")


@dataclass(frozen=True)
class RawRoadmap:
    """
    Unvalidated roadmap exactly as the AI service returned it.

    Kept distinct from ``Roadmap`` so raw output cannot be stored or served
    without going through ``transform_roadmap``.
    """

    data: dict[str, Any] = field(default_factory=dict)


# ─────────────────────────────────────────────────────────────
# Text helpers
# ─────────────────────────────────────────────────────────────


def extract_emphasis(text: str) -> list[str]:
    """Inner text of ``**bold**`` spans, then of `` `code` `` spans, in order of appearance."""
    if not text:
        return []
    return BOLD_PATTERN.findall(text) + CODE_PATTERN.findall(text)


def estimate_time_from_steps(steps: list[Any] | None) -> str:
    """Estimated time for a task that did not state one, scaled by step count."""
    step_count = len(steps) if steps else 0
    if step_count <= 2:
        return "10 minutes"
    if step_count <= 4:
        return "15 minutes"
    if step_count <= 6:
        return "20 minutes"
    return "30 minutes"


def parse_estimated_time(time_str: str) -> int:
    """
    Parse a free-form duration into minutes.

    ``"1h 30m"`` -> 90, ``"45m"`` -> 45, ``"10 minutes"`` -> 10. A bare number
    counts as minutes; anything unparseable counts as 10 minutes.
    """
    minutes = 0
    if hour_match := HOURS_PATTERN.search(time_str):
        minutes += int(hour_match.group(1)) * 60
    if minute_match := MINUTES_PATTERN.search(time_str):
        minutes += int(minute_match.group(1))

    if minutes == 0 and (number_match := NUMBER_PATTERN.search(time_str)):
        minutes = int(number_match.group(1))

    return minutes or DEFAULT_TASK_MINUTES


def format_minutes(total_minutes: int) -> str:
    """Render minutes as ``"Nh Mm"`` / ``"Nh"`` from an hour upward, else ``"N minutes"``."""
    if total_minutes >= 60:
        hours, minutes = divmod(total_minutes, 60)
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"
    return f"{total_minutes} minutes"


def calculate_total_time(sections: list[RoadmapSection]) -> str:
    total = sum(parse_estimated_time(task.estimated_time) for s in sections for task in s.tasks)
    return format_minutes(total)


def count_total_tasks(sections: list[RoadmapSection]) -> int:
    return sum(len(section.tasks) for section in sections)


# ─────────────────────────────────────────────────────────────
# Field normalizers
# ─────────────────────────────────────────────────────────────


def _str(value: Any) -> str:
    """Falsy values become the empty string; anything else is stringified."""
    if not value:
        return ""
    return value if isinstance(value, str) else str(value)


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _dict_entries(value: Any) -> list[dict[str, Any]]:
    return [entry for entry in _list(value) if isinstance(entry, dict)]


def normalize_description(description: Any) -> TaskDescription:
    if isinstance(description, str):
        return TaskDescription(summary=description)
    if isinstance(description, dict):
        return TaskDescription(
            summary=_str(description.get("summary")),
            why_needed=_str(description.get("why_needed")),
            learning_goal=_str(description.get("learning_goal")),
        )
    return TaskDescription()


def normalize_commands(commands: Any) -> list[CommandBlock]:
    normalized: list[CommandBlock] = []
    for command in _list(commands):
        if isinstance(command, str):
            normalized.append(CommandBlock(command=command))
        elif isinstance(command, dict):
            os_scope = command.get("os")
            normalized.append(
                CommandBlock(
                    command=_str(command.get("command")),
                    description=_str(command.get("description")),
                    expected_output=_str(command.get("expected_output")),
                    os=os_scope if os_scope in VALID_COMMAND_OS else "all",
                )
            )
    return normalized


def _emphasis(entry: dict[str, Any], text: str) -> list[str]:
    emphasis = entry.get("emphasis")
    if isinstance(emphasis, list):
        return [_str(item) for item in emphasis]
    return extract_emphasis(text)


def normalize_tips(tips: Any) -> list[Tip]:
    """Null members are dropped, strings become pro tips."""
    normalized: list[Tip] = []
    for tip in _list(tips):
        if isinstance(tip, str):
            normalized.append(Tip(text=tip, type="pro_tip", emphasis=extract_emphasis(tip)))
        elif isinstance(tip, dict):
            text = _str(tip.get("text"))
            tip_type = tip.get("type")
            normalized.append(
                Tip(
                    text=text,
                    type=tip_type if tip_type in VALID_TIP_TYPES else "pro_tip",
                    emphasis=_emphasis(tip, text),
                )
            )
    return normalized


def normalize_warnings(warnings: Any) -> list[TaskWarning]:
    """Null members are dropped, strings become important warnings."""
    normalized: list[TaskWarning] = []
    for warning in _list(warnings):
        if isinstance(warning, str):
            normalized.append(
                TaskWarning(
                    text=warning,
                    severity="important",
                    os_specific=False,
                    emphasis=extract_emphasis(warning),
                )
            )
        elif isinstance(warning, dict):
            text = _str(warning.get("text"))
            severity = warning.get("severity")
            normalized.append(
                TaskWarning(
                    text=text,
                    severity=severity if severity in VALID_WARNING_SEVERITIES else "important",
                    os_specific=bool(warning.get("os_specific", False)),
                    emphasis=_emphasis(warning, text),
                )
            )
    return normalized


def normalize_verification(verification: Any) -> Verification:
    if not isinstance(verification, dict):
        return Verification()
    return Verification(
        how_to_verify=_str(verification.get("how_to_verify")),
        expected_result=_str(verification.get("expected_result")),
        troubleshooting=_list(verification.get("troubleshooting")),
    )


def normalize_difficulty(difficulty: Any) -> str:
    """Only intermediate/advanced survive (case-insensitively); everything else is beginner."""
    normalized = difficulty.lower() if isinstance(difficulty, str) else ""
    if normalized in ("intermediate", "advanced"):
        return normalized
    return "beginner"


# ─────────────────────────────────────────────────────────────
# Transformer
# ─────────────────────────────────────────────────────────────


def enrich_task(task: dict[str, Any], fallback_id: str) -> RoadmapTask:
    steps = task.get("steps")
    return RoadmapTask(
        id=_str(task.get("id")) or fallback_id,
        title=_str(task.get("title")),
        description=normalize_description(task.get("description")),
        steps=_list(steps),
        commands=normalize_commands(task.get("commands")),
        code_blocks=_list(task.get("code_blocks")),
        references=_list(task.get("references")),
        tips=normalize_tips(task.get("tips")),
        warnings=normalize_warnings(task.get("warnings")),
        verification=normalize_verification(task.get("verification")),
        difficulty=normalize_difficulty(task.get("difficulty")),  # type: ignore[arg-type]
        estimated_time=_str(task.get("estimated_time")) or estimate_time_from_steps(_list(steps)),
        depends_on=[_str(dep) for dep in _list(task.get("depends_on")) if dep],
    )


def enrich_section(section: dict[str, Any], index: int) -> RoadmapSection:
    section_id = _str(section.get("id")) or f"section-{index + 1}"
    tasks = [
        enrich_task(task, f"{section_id}-task-{task_index + 1}")
        for task_index, task in enumerate(_dict_entries(section.get("tasks")))
    ]
    return RoadmapSection(
        id=section_id,
        title=_str(section.get("title")),
        description=_str(section.get("description")),
        tasks=tasks,
    )


def transform_roadmap(raw: RawRoadmap | Roadmap | dict[str, Any]) -> Roadmap:
    """
    Normalize a roadmap into the fully-populated ``Roadmap`` shape.

    Accepts raw AI output, a plain stored dict (possibly written by an older
    version) or an already-normalized ``Roadmap``.
    """
    if isinstance(raw, RawRoadmap):
        data = raw.data
    elif isinstance(raw, Roadmap):
        data = raw.model_dump()
    else:
        data = raw

    sections = [
        enrich_section(section, index)
        for index, section in enumerate(_dict_entries(data.get("sections")))
    ]

    total_tasks = data.get("total_tasks")
    if not isinstance(total_tasks, int) or isinstance(total_tasks, bool) or total_tasks <= 0:
        total_tasks = count_total_tasks(sections)

    roadmap = Roadmap(
        repository_name=_str(data.get("repository_name")) or DEFAULT_REPOSITORY_NAME,
        total_tasks=total_tasks,
        estimated_completion_time=(
            _str(data.get("estimated_completion_time")) or calculate_total_time(sections)
        ),
        sections=sections,
    )
    logger.debug(
        f"Transformed roadmap '{roadmap.repository_name}': "
        f"{len(sections)} sections, {roadmap.total_tasks} tasks, "
        f"{roadmap.estimated_completion_time}"
    )
    return roadmap


# ─────────────────────────────────────────────────────────────
# Derived views
# ─────────────────────────────────────────────────────────────


def enrich_section_with_metrics(section: RoadmapSection) -> SectionMetrics:
    """Per-section aggregates for summary cards."""
    breakdown = {"beginner": 0, "intermediate": 0, "advanced": 0}
    for task in section.tasks:
        breakdown[task.difficulty] += 1

    return SectionMetrics(
        id=section.id,
        title=section.title,
        task_count=len(section.tasks),
        total_estimated_minutes=sum(parse_estimated_time(t.estimated_time) for t in section.tasks),
        difficulty_breakdown=breakdown,
        has_code=any(task.code_blocks for task in section.tasks),
        has_tips=any(task.tips for task in section.tasks),
        has_warnings=any(task.warnings for task in section.tasks),
    )


def transform_to_timeline_view(roadmap: Roadmap) -> TimelineView:
    """Flatten all tasks into one ordered list of timeline events."""
    flattened = [(section, task) for section in roadmap.sections for task in section.tasks]
    events = [
        TimelineEvent(
            id=task.id,
            order=order,
            title=task.title,
            section=section.title,
            difficulty=task.difficulty,
            estimated_time=task.estimated_time,
            dependencies=task.depends_on,
        )
        for order, (section, task) in enumerate(flattened, start=1)
    ]
    return TimelineView(repository_name=roadmap.repository_name, events=events)


def transform_to_dependency_graph(roadmap: Roadmap) -> DependencyGraph:
    """Task nodes plus one edge per ``depends_on`` entry (prerequisite -> task)."""
    tasks = [task for section in roadmap.sections for task in section.tasks]
    return DependencyGraph(
        nodes=[GraphNode(id=t.id, label=t.title, difficulty=t.difficulty) for t in tasks],
        edges=[GraphEdge(from_=dep, to=t.id) for t in tasks for dep in t.depends_on],
    )
