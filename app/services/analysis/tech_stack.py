"""
Tech stack detection from manifest files.

Dispatches on the primary language reported by GitHub and parses the
matching manifest:

- JavaScript / TypeScript: package.json
- Python: requirements.txt, falling back to pyproject.toml
- Ruby: Gemfile

Detection never raises. A missing or unparseable manifest yields a stack with
"Unknown" placeholders and empty dependency lists.
"""

import json
import logging
import re
import tomllib
from typing import Any

from app.schemas.analysis import DependencyLists, TechStack

logger = logging.getLogger(__name__)

# Each table is scanned in order; the first dependency present wins.
# Meta-frameworks come before the framework they build on.
JS_FRAMEWORKS: list[tuple[str, str]] = [
    ("next", "Next.js"),
    ("react", "React"),
    ("vue", "Vue.js"),
    ("@angular/core", "Angular"),
    ("express", "Express.js"),
    ("fastify", "Fastify"),
    ("nestjs", "NestJS"),
    ("svelte", "Svelte"),
    ("solid-js", "Solid.js"),
]

JS_TESTING_FRAMEWORKS: list[tuple[str, str]] = [
    ("jest", "Jest"),
    ("vitest", "Vitest"),
    ("mocha", "Mocha"),
    ("jasmine", "Jasmine"),
    ("@playwright/test", "Playwright"),
    ("cypress", "Cypress"),
]

JS_DATABASES: list[tuple[str, str]] = [
    ("pg", "PostgreSQL"),
    ("postgres", "PostgreSQL"),
    ("mysql", "MySQL"),
    ("mysql2", "MySQL"),
    ("mongodb", "MongoDB"),
    ("mongoose", "MongoDB"),
    ("sqlite3", "SQLite"),
    ("better-sqlite3", "SQLite"),
    ("redis", "Redis"),
    ("prisma", "Prisma (ORM)"),
]

JS_UI_LIBRARIES: list[tuple[str, str]] = [
    ("tailwindcss", "Tailwind CSS"),
    ("@mui/material", "Material-UI"),
    ("bootstrap", "Bootstrap"),
    ("antd", "Ant Design"),
    ("chakra-ui", "Chakra UI"),
    ("styled-components", "Styled Components"),
]

PYTHON_FRAMEWORKS: list[tuple[str, str]] = [
    ("django", "Django"),
    ("fastapi", "FastAPI"),
    ("flask", "Flask"),
    ("tornado", "Tornado"),
    ("pyramid", "Pyramid"),
]

PYTHON_TESTING_FRAMEWORKS: list[tuple[str, str]] = [
    ("pytest", "pytest"),
    ("unittest", "unittest"),
    ("nose", "nose"),
]

PYTHON_DATABASES: list[tuple[str, str]] = [
    ("psycopg2", "PostgreSQL"),
    ("psycopg2-binary", "PostgreSQL"),
    ("pymysql", "MySQL"),
    ("mysqlclient", "MySQL"),
    ("pymongo", "MongoDB"),
    ("redis", "Redis"),
    ("sqlalchemy", "SQLAlchemy (ORM)"),
]

RUBY_TESTING_FRAMEWORKS: list[tuple[str, str]] = [
    ("rspec", "RSpec"),
    ("minitest", "Minitest"),
    ("test-unit", "Test::Unit"),
]

RUBY_DATABASES: list[tuple[str, str]] = [
    ("pg", "PostgreSQL"),
    ("mysql2", "MySQL"),
    ("sqlite3", "SQLite"),
    ("mongoid", "MongoDB"),
]

GEM_PATTERN = re.compile(r"""gem\s+['"]([^'"]+)['"]""")
RUBY_VERSION_PATTERN = re.compile(r"""ruby\s+['"]([^'"]+)['"]""")

# Everything from the first version operator, marker, extra or space onward
REQUIREMENT_NAME_END = re.compile(r"[=<>!~;\[\s]")

JS_LANGUAGES = {"JavaScript", "TypeScript"}


def _first_match(names: list[str], table: list[tuple[str, str]]) -> str | None:
    present = set(names)
    for dep_name, label in table:
        if dep_name in present:
            return label
    return None


def parse_requirement_name(line: str) -> str:
    """Bare package name from one requirement specifier (``Django[argon2]>=4.2`` -> ``Django``)."""
    return REQUIREMENT_NAME_END.split(line.strip(), maxsplit=1)[0]


def parse_requirements_txt(content: str) -> list[str]:
    """Package names from a requirements file, skipping comments, blanks and pip options."""
    names: list[str] = []
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", "-")):
            continue
        name = parse_requirement_name(line)
        if name:
            names.append(name)
    return names


def parse_gemfile(content: str) -> list[str]:
    return GEM_PATTERN.findall(content)


def unknown_stack(primary_language: str | None) -> TechStack:
    """Stack with every detectable field set to its explicit unknown value."""
    return TechStack(primary_language=primary_language or "Unknown")


class TechStackDetector:
    """
    Detect a repository's technology stack from manifest file contents.

    Files are looked up by basename (``package.json``, ``requirements.txt``,
    ``pyproject.toml``, ``Gemfile``).
    """

    def detect(self, primary_language: str | None, files: dict[str, str]) -> TechStack:
        """
        Detect the stack for the given primary language.

        Args:
            primary_language: Language reported by GitHub (may be None)
            files: Mapping of critical file basename to raw text content

        Returns:
            TechStack, falling back to "Unknown" placeholders on any failure
        """
        try:
            if primary_language in JS_LANGUAGES:
                stack = self._detect_javascript(files.get("package.json"))
            elif primary_language == "Python":
                stack = self._detect_python(files.get("requirements.txt"), files.get("pyproject.toml"))
            elif primary_language == "Ruby":
                stack = self._detect_ruby(files.get("Gemfile"))
            else:
                stack = None
        except Exception as e:
            # Detection never fails the pipeline
            logger.warning(f"Tech stack detection failed for {primary_language}: {e}")
            stack = None

        if stack is None:
            logger.info(f"No usable manifest for language {primary_language!r}, stack unknown")
            return unknown_stack(primary_language)
        return stack

    def _detect_javascript(self, package_json: str | None) -> TechStack | None:
        """Detect JS/TS stack from package.json."""
        if not package_json:
            return None

        try:
            data = json.loads(package_json)
        except json.JSONDecodeError:
            logger.warning("Failed to parse package.json")
            return None
        if not isinstance(data, dict):
            logger.warning("package.json is not a JSON object")
            return None

        production = list((data.get("dependencies") or {}).keys())
        development = list((data.get("devDependencies") or {}).keys())
        all_deps = production + development
        engines = data.get("engines") or {}

        return TechStack(
            primary_language="JavaScript/TypeScript",
            framework=_first_match(all_deps, JS_FRAMEWORKS) or "Vanilla JavaScript",
            runtime_version=engines.get("node") or "Node.js (version unspecified)",
            # Lockfiles are excluded from the analyzed set, so npm is assumed
            package_manager="npm",
            dependencies=DependencyLists(production=production, development=development),
            testing_framework=_first_match(all_deps, JS_TESTING_FRAMEWORKS),
            database=_first_match(all_deps, JS_DATABASES),
            ui_library=_first_match(all_deps, JS_UI_LIBRARIES),
        )

    def _detect_python(
        self, requirements_txt: str | None, pyproject_toml: str | None
    ) -> TechStack | None:
        """Detect Python stack from requirements.txt and/or pyproject.toml."""
        if requirements_txt is None and pyproject_toml is None:
            return None

        pyproject: dict[str, Any] = {}
        if pyproject_toml:
            try:
                pyproject = tomllib.loads(pyproject_toml)
            except tomllib.TOMLDecodeError:
                logger.warning("Failed to parse pyproject.toml")

        poetry = pyproject.get("tool", {}).get("poetry", {})
        development: list[str] = []

        if requirements_txt:
            production = parse_requirements_txt(requirements_txt)
        else:
            production, development = self._pyproject_dependencies(pyproject)

        lowered = [name.lower() for name in production + development]
        runtime = poetry.get("dependencies", {}).get("python")

        return TechStack(
            primary_language="Python",
            framework=_first_match(lowered, PYTHON_FRAMEWORKS) or "Python Script",
            runtime_version=runtime if isinstance(runtime, str) else "Python 3.x",
            package_manager="Poetry" if pyproject_toml is not None else "pip",
            dependencies=DependencyLists(production=production, development=development),
            testing_framework=_first_match(lowered, PYTHON_TESTING_FRAMEWORKS),
            database=_first_match(lowered, PYTHON_DATABASES),
            ui_library=None,
        )

    def _pyproject_dependencies(self, pyproject: dict[str, Any]) -> tuple[list[str], list[str]]:
        """Production and development names from PEP 621 or Poetry tables."""
        project = pyproject.get("project", {})
        poetry = pyproject.get("tool", {}).get("poetry", {})

        production = [parse_requirement_name(spec) for spec in project.get("dependencies", [])]
        production += [name for name in poetry.get("dependencies", {}) if name != "python"]

        development: list[str] = []
        dev_groups = [poetry.get("dev-dependencies", {})]
        dev_groups.append(poetry.get("group", {}).get("dev", {}).get("dependencies", {}))
        for group in dev_groups:
            development.extend(group.keys())

        return [name for name in production if name], development

    def _detect_ruby(self, gemfile: str | None) -> TechStack | None:
        """Detect Ruby stack from Gemfile."""
        if not gemfile:
            return None

        gems = parse_gemfile(gemfile)
        version_match = RUBY_VERSION_PATTERN.search(gemfile)

        return TechStack(
            primary_language="Ruby",
            framework="Ruby on Rails" if "rails" in gems else "Ruby",
            runtime_version=(
                f"Ruby {version_match.group(1)}" if version_match else "Ruby (version unspecified)"
            ),
            package_manager="Bundler",
            dependencies=DependencyLists(production=gems),
            testing_framework=_first_match(gems, RUBY_TESTING_FRAMEWORKS),
            database=_first_match(gems, RUBY_DATABASES),
            ui_library=None,
        )
