"""Unit tests for the roadmap transformer."""

import pytest

from app.schemas.roadmap import Roadmap
from app.services.roadmap_transformer import (
    RawRoadmap,
    calculate_total_time,
    enrich_section_with_metrics,
    estimate_time_from_steps,
    extract_emphasis,
    format_minutes,
    normalize_difficulty,
    parse_estimated_time,
    transform_roadmap,
    transform_to_dependency_graph,
    transform_to_timeline_view,
)


def _raw(**overrides) -> RawRoadmap:
    data = {
        "repository_name": "acme/widgets",
        "sections": [
            {
                "id": "setup",
                "title": "Environment Setup",
                "tasks": [
                    {
                        "id": "setup-node",
                        "title": "Install Node",
                        "description": "Install **Node.js** 18",
                        "commands": ["node --version", {"command": "npm ci", "os": "plan9"}],
                        "tips": [None, "Use **nvm** and `node --version`"],
                        "warnings": [{"text": "Do not use `sudo`", "severity": "loud"}, None],
                        "difficulty": "Beginner",
                        "estimated_time": "10 minutes",
                    },
                    {
                        "id": "setup-db",
                        "title": "Create the database",
                        "steps": [{"order": i, "action": f"step {i}"} for i in range(5)],
                        "verification": {"how_to_verify": "psql -l"},
                        "difficulty": "ADVANCED",
                        "depends_on": ["setup-node"],
                    },
                ],
            },
            {
                "title": "First contribution",
                "tasks": [{"title": "Run the tests", "estimated_time": "1h 30m"}],
            },
        ],
    }
    data.update(overrides)
    return RawRoadmap(data=data)


class TestExtractEmphasis:
    def test_bold_then_code(self):
        assert extract_emphasis("Use **nvm** and `node --version`") == ["nvm", "node --version"]

    def test_code_before_bold_in_text_still_lists_bold_first(self):
        assert extract_emphasis("`a` then **b** then `c`") == ["b", "a", "c"]

    def test_duplicates_are_kept(self):
        assert extract_emphasis("**x** and **x**") == ["x", "x"]

    def test_empty(self):
        assert extract_emphasis("") == []


class TestTimeHelpers:
    @pytest.mark.parametrize(
        ("text", "minutes"),
        [
            ("10 minutes", 10),
            ("1h 30m", 90),
            ("45m", 45),
            ("2 hours", 120),
            ("about 25", 25),
            ("a while", 10),
        ],
    )
    def test_parse_estimated_time(self, text, minutes):
        assert parse_estimated_time(text) == minutes

    @pytest.mark.parametrize(
        ("minutes", "rendered"),
        [(45, "45 minutes"), (60, "1h"), (175, "2h 55m"), (120, "2h")],
    )
    def test_format_minutes(self, minutes, rendered):
        assert format_minutes(minutes) == rendered

    @pytest.mark.parametrize(
        ("step_count", "expected"),
        [(0, "10 minutes"), (2, "10 minutes"), (3, "15 minutes"), (6, "20 minutes"), (9, "30 minutes")],
    )
    def test_estimate_from_steps(self, step_count, expected):
        assert estimate_time_from_steps([{}] * step_count) == expected

    def test_estimate_without_steps(self):
        assert estimate_time_from_steps(None) == "10 minutes"

    def test_total_time_across_tasks(self):
        roadmap = transform_roadmap(
            {
                "sections": [
                    {
                        "id": "s",
                        "tasks": [
                            {"id": "a", "estimated_time": "10 minutes"},
                            {"id": "b", "estimated_time": "1h 30m"},
                            {"id": "c", "estimated_time": "75m"},
                        ],
                    }
                ]
            }
        )

        assert calculate_total_time(roadmap.sections) == "2h 55m"
        assert roadmap.estimated_completion_time == "2h 55m"


class TestNormalizeDifficulty:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("Beginner", "beginner"),
            ("EXPERT", "beginner"),
            (None, "beginner"),
            ("advanced", "advanced"),
            ("Intermediate", "intermediate"),
            (3, "beginner"),
        ],
    )
    def test_values(self, value, expected):
        assert normalize_difficulty(value) == expected


class TestTransformRoadmap:
    def test_fills_every_task_field(self):
        roadmap = transform_roadmap(_raw())

        node, db = roadmap.sections[0].tasks
        assert node.description.summary == "Install **Node.js** 18"
        assert node.description.why_needed == ""
        assert [c.command for c in node.commands] == ["node --version", "npm ci"]
        assert [c.os for c in node.commands] == ["all", "all"]
        assert len(node.tips) == 1
        assert node.tips[0].type == "pro_tip"
        assert node.tips[0].emphasis == ["nvm", "node --version"]
        assert len(node.warnings) == 1
        assert node.warnings[0].severity == "important"
        assert node.warnings[0].os_specific is False
        assert node.warnings[0].emphasis == ["sudo"]

        assert db.description.summary == ""
        assert db.estimated_time == "20 minutes"
        assert db.difficulty == "advanced"
        assert db.verification.how_to_verify == "psql -l"
        assert db.verification.expected_result == ""
        assert db.verification.troubleshooting == []
        assert db.depends_on == ["setup-node"]
        assert db.references == []
        assert db.code_blocks == []

    def test_explicit_emphasis_is_kept(self):
        roadmap = transform_roadmap(
            {"sections": [{"id": "s", "tasks": [{"id": "t", "tips": [{"text": "**a**", "emphasis": []}]}]}]}
        )

        assert roadmap.sections[0].tasks[0].tips[0].emphasis == []

    def test_passthrough_lists_keep_every_member(self):
        task = {
            "id": "t",
            "steps": ["Install node", "Run npm i", "Start"],
            "code_blocks": ["console.log(1)", {"language": "js"}],
            "references": ["https://nodejs.org"],
            "verification": {"troubleshooting": ["Restart the shell"]},
        }

        [transformed] = transform_roadmap({"sections": [{"id": "s", "tasks": [task]}]}).sections[0].tasks

        assert transformed.steps == ["Install node", "Run npm i", "Start"]
        assert transformed.code_blocks == ["console.log(1)", {"language": "js"}]
        assert transformed.references == ["https://nodejs.org"]
        assert transformed.verification.troubleshooting == ["Restart the shell"]
        assert transformed.estimated_time == "15 minutes"

    def test_passthrough_lists_survive_storage_round_trip(self):
        raw = {"sections": [{"id": "s", "tasks": [{"id": "t", "steps": ["a", {"action": "b"}]}]}]}
        once = transform_roadmap(raw)

        assert transform_roadmap(once.model_dump(mode="json")) == once

    def test_roadmap_level_defaults(self):
        roadmap = transform_roadmap(_raw())

        assert roadmap.repository_name == "acme/widgets"
        assert roadmap.total_tasks == 3
        # 10 + 20 + 90 minutes
        assert roadmap.estimated_completion_time == "2h"

    def test_missing_ids_are_generated(self):
        roadmap = transform_roadmap(_raw())

        second = roadmap.sections[1]
        assert second.id == "section-2"
        assert second.tasks[0].id == "section-2-task-1"
        assert second.description == ""

    def test_stated_totals_are_kept(self):
        roadmap = transform_roadmap(_raw(total_tasks=7, estimated_completion_time="1 day"))

        assert roadmap.total_tasks == 7
        assert roadmap.estimated_completion_time == "1 day"

    def test_empty_input(self):
        roadmap = transform_roadmap(RawRoadmap())

        assert roadmap.sections == []
        assert roadmap.total_tasks == 0
        assert roadmap.estimated_completion_time == "0 minutes"
        assert roadmap.repository_name == "Unknown Project"

    def test_idempotent(self):
        once = transform_roadmap(_raw())
        twice = transform_roadmap(once)
        from_stored = transform_roadmap(once.model_dump(mode="json"))

        assert twice == once
        assert from_stored == once

    def test_returns_validated_model(self):
        assert isinstance(transform_roadmap(_raw()), Roadmap)


class TestViews:
    def test_section_metrics(self):
        section = transform_roadmap(_raw()).sections[0]

        metrics = enrich_section_with_metrics(section)

        assert metrics.task_count == 2
        assert metrics.total_estimated_minutes == 30
        assert metrics.difficulty_breakdown == {"beginner": 1, "intermediate": 0, "advanced": 1}
        assert metrics.has_tips is True
        assert metrics.has_warnings is True
        assert metrics.has_code is False

    def test_timeline_orders_across_sections(self):
        timeline = transform_to_timeline_view(transform_roadmap(_raw()))

        assert [e.order for e in timeline.events] == [1, 2, 3]
        assert timeline.events[2].section == "First contribution"
        assert timeline.events[1].dependencies == ["setup-node"]

    def test_dependency_graph_edges(self):
        graph = transform_to_dependency_graph(transform_roadmap(_raw()))

        assert [n.id for n in graph.nodes] == ["setup-node", "setup-db", "section-2-task-1"]
        assert len(graph.edges) == 1
        assert graph.edges[0].model_dump(by_alias=True) == {"from": "setup-node", "to": "setup-db"}
