"""
Environment variable extraction.

The primary source is an example env file (``.env.example`` / ``.env.sample``).
Secondary helpers pull variable names out of docker-compose files and README
setup sections.
"""

import logging
import re

from app.schemas.analysis import ENV_VAR_NAME_PATTERN, EnvironmentVariable, EnvVarCategory
from app.services.analysis.constants import (
    ENV_CATEGORY_KEYWORDS,
    ENV_TEMPLATE_SECTIONS,
    NO_DESCRIPTION,
    README_ENV_SECTIONS,
    README_ENV_STOPWORDS,
)

logger = logging.getLogger(__name__)

ENV_LINE_PATTERN = re.compile(r"^([A-Z_][A-Z0-9_]*)=(.*)$")
ENV_NAME_PATTERN = re.compile(ENV_VAR_NAME_PATTERN)
COMPOSE_ENV_ENTRY_PATTERN = re.compile(r"^-?\s*([A-Z_][A-Z0-9_]*)[:=]")
README_ENV_TOKEN_PATTERN = re.compile(r"\b([A-Z_][A-Z0-9_]{2,})\b")


def categorize_env_var(name: str) -> EnvVarCategory:
    """Assign a category by keyword, checking database, then secrets, then server."""
    upper_name = name.upper()
    for category, keywords in ENV_CATEGORY_KEYWORDS.items():
        if any(keyword in upper_name for keyword in keywords):
            return category  # type: ignore[return-value]
    return "general"


def validate_env_var_name(name: str) -> bool:
    return bool(ENV_NAME_PATTERN.match(name))


def extract_environment_variables(content: str) -> list[EnvironmentVariable]:
    """
    Parse an example env file.

    Comment lines directly above a variable become its description (stacked
    comments are joined with a space); a blank line discards pending comments.
    A variable is required when it has no example value.

    Returns:
        Variables in file order; empty for empty input
    """
    if not content or not content.strip():
        return []

    variables: list[EnvironmentVariable] = []
    current_comment = ""

    for line in content.split("\n"):
        trimmed = line.strip()

        if not trimmed:
            current_comment = ""
            continue

        if trimmed.startswith("#"):
            comment = trimmed[1:].strip()
            current_comment = f"{current_comment} {comment}" if current_comment else comment
            continue

        match = ENV_LINE_PATTERN.match(trimmed)
        if match:
            name, value = match.group(1), match.group(2)
            variables.append(
                EnvironmentVariable(
                    name=name,
                    description=current_comment or NO_DESCRIPTION,
                    required=not value.strip(),
                    example_value=value,
                    category=categorize_env_var(name),
                )
            )
            current_comment = ""

    return variables


def group_env_vars_by_category(
    variables: list[EnvironmentVariable],
) -> dict[str, list[EnvironmentVariable]]:
    """Group variables by category. All four categories are always present."""
    grouped: dict[str, list[EnvironmentVariable]] = {key: [] for key, _ in ENV_TEMPLATE_SECTIONS}
    for variable in variables:
        grouped[variable.category].append(variable)
    return grouped


def generate_env_template(variables: list[EnvironmentVariable]) -> str:
    """Rebuild an example env file, grouped under category headings."""
    grouped = group_env_vars_by_category(variables)
    template = "# Environment Variables\n\n"

    for key, title in ENV_TEMPLATE_SECTIONS:
        section = grouped[key]
        if not section:
            continue
        template += f"## {title}\n"
        for variable in section:
            if variable.description and variable.description != NO_DESCRIPTION:
                template += f"# {variable.description}\n"
            template += f"{variable.name}={variable.example_value}\n\n"

    return template


def extract_env_vars_from_docker_compose(content: str) -> list[str]:
    """Variable names listed under ``environment:`` blocks, de-duplicated in order."""
    names: list[str] = []
    in_environment = False

    for line in content.split("\n"):
        trimmed = line.strip()

        if trimmed == "environment:":
            in_environment = True
            continue

        if in_environment and trimmed and not trimmed.startswith("-") and ":" not in trimmed:
            in_environment = False

        if in_environment:
            match = COMPOSE_ENV_ENTRY_PATTERN.match(trimmed)
            if match:
                names.append(match.group(1))

    return list(dict.fromkeys(names))


def extract_env_vars_from_readme(content: str) -> list[str]:
    """
    Upper-snake tokens mentioned in README setup/configuration sections.

    A section starts at any line mentioning one of the section keywords and
    ends at the next heading that does not.
    """
    names: list[str] = []
    in_env_section = False

    for line in content.split("\n"):
        lower_line = line.lower()
        mentions_section = any(section in lower_line for section in README_ENV_SECTIONS)

        if mentions_section:
            in_env_section = True
        elif line.startswith("#") and in_env_section:
            in_env_section = False

        if in_env_section:
            names.extend(
                token
                for token in README_ENV_TOKEN_PATTERN.findall(line)
                if len(token) > 3 and token not in README_ENV_STOPWORDS
            )

    return list(dict.fromkeys(names))
