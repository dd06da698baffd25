"""
Prompt builders and tool schemas for onboarding AI calls.

Both calls use forced tool use so the model answers with structured JSON
that matches the tool's ``input_schema``.
"""

import json
from typing import Any

from app.schemas.analysis import DatabaseRequirement, EnvironmentVariable, ProjectPurpose, TechStack

PURPOSE_TOOL_NAME = "save_project_purpose"
ROADMAP_TOOL_NAME = "save_roadmap"


def build_purpose_prompt(
    readme_excerpt: str,
    package_description: str | None,
    repo_description: str | None,
) -> str:
    return "\n".join(
        [
            "Analyze this project and extract:",
            "1. Project Purpose (1-2 sentences): What problem does this solve?",
            "2. Core Features (3-5 bullet points): What can users do?",
            "3. Target Users: Who is this for?",
            '4. Project Type: (e.g., "REST API", "React Component Library", "CLI Tool", '
            '"Web Application")',
            "",
            "README excerpt:",
            readme_excerpt,
            "",
            f"Package description: {package_description or 'N/A'}",
            f"Repository description: {repo_description or 'N/A'}",
            "",
            f"Save your answer using the `{PURPOSE_TOOL_NAME}` tool.",
        ]
    )


def build_roadmap_prompt(
    tech_stack: TechStack,
    databases: list[DatabaseRequirement],
    env_vars: list[EnvironmentVariable],
    purpose: ProjectPurpose,
    setup_instructions: str | None = None,
    security_issues: list[Any] | None = None,
) -> str:
    sections = [
        "You are an expert developer creating an onboarding roadmap for a new team member.",
        "",
        "## Repository Analysis",
        "",
        f"- Tech Stack: {json.dumps(tech_stack.model_dump())}",
        f"- Database: {json.dumps([db.model_dump(exclude={'setup_guide'}) for db in databases])}",
        f"- Required Env Vars: {len(env_vars)} variables",
        f"- Project Purpose: {purpose.purpose}",
        "",
    ]

    if setup_instructions:
        sections.extend(["## Setup Instructions from README", "", setup_instructions, ""])

    if security_issues:
        sections.extend(["## Security Warnings", "", f"{len(security_issues)} issues found", ""])

    sections.extend(
        [
            "## Your Task",
            "",
            f"Generate an onboarding roadmap using the `{ROADMAP_TOOL_NAME}` tool.",
            "",
            "Requirements:",
            "- Structure sections logically: Setup -> Architecture Understanding -> "
            "First Contribution",
            "- Order tasks by dependency (can't run migrations before DB setup) and list "
            "prerequisites in `depends_on`",
            "- Give every task concrete steps and the exact commands to run, scoped by OS "
            "where they differ",
            "- Add tips and warnings from known issues; wrap key terms in **bold** and "
            "commands in `backticks`",
            "- If security issues exist, prioritize fixing them early",
            "- Use difficulty levels beginner/intermediate/advanced",
            "- Generate 3-5 sections with 3-7 tasks each",
        ]
    )
    return "\n".join(sections)


PURPOSE_TOOL_SCHEMA: dict[str, Any] = {
    "name": PURPOSE_TOOL_NAME,
    "description": "Save the extracted project purpose",
    "input_schema": {
        "type": "object",
        "required": ["purpose", "features", "target_users", "project_type"],
        "properties": {
            "purpose": {"type": "string", "description": "1-2 sentences"},
            "features": {
                "type": "array",
                "items": {"type": "string"},
                "description": "3-5 core features",
            },
            "target_users": {"type": "string"},
            "project_type": {"type": "string"},
        },
    },
}

_TASK_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id", "title"],
    "properties": {
        "id": {"type": "string"},
        "title": {"type": "string"},
        "description": {
            "type": "object",
            "properties": {
                "summary": {"type": "string"},
                "why_needed": {"type": "string"},
                "learning_goal": {"type": "string"},
            },
        },
        "steps": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "order": {"type": "integer"},
                    "action": {"type": "string"},
                    "details": {"type": "string"},
                    "os_specific": {
                        "type": "object",
                        "properties": {
                            "mac": {"type": "string"},
                            "windows": {"type": "string"},
                            "linux": {"type": "string"},
                        },
                    },
                },
            },
        },
        "commands": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "command": {"type": "string"},
                    "description": {"type": "string"},
                    "expected_output": {"type": "string"},
                    "os": {"type": "string", "enum": ["all", "mac", "windows", "linux"]},
                },
            },
        },
        "code_blocks": {"type": "array", "items": {"type": "object"}},
        "references": {"type": "array", "items": {"type": "object"}},
        "tips": {"type": "array", "items": {"type": "string"}},
        "warnings": {"type": "array", "items": {"type": "string"}},
        "verification": {
            "type": "object",
            "properties": {
                "how_to_verify": {"type": "string"},
                "expected_result": {"type": "string"},
                "troubleshooting": {"type": "array", "items": {"type": "object"}},
            },
        },
        "difficulty": {"type": "string", "enum": ["beginner", "intermediate", "advanced"]},
        "estimated_time": {"type": "string", "description": "e.g. '15 minutes' or '1h 30m'"},
        "depends_on": {"type": "array", "items": {"type": "string"}},
    },
}

ROADMAP_TOOL_SCHEMA: dict[str, Any] = {
    "name": ROADMAP_TOOL_NAME,
    "description": "Save the generated onboarding roadmap",
    "input_schema": {
        "type": "object",
        "required": ["sections"],
        "properties": {
            "repository_name": {"type": "string"},
            "sections": {
                "type": "array",
                "items": {
                    "type": "object",
                    "required": ["id", "title", "tasks"],
                    "properties": {
                        "id": {"type": "string"},
                        "title": {"type": "string"},
                        "description": {"type": "string"},
                        "tasks": {"type": "array", "items": _TASK_SCHEMA},
                    },
                },
            },
        },
    },
}
