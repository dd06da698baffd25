"""Pydantic schemas for repository analysis results.

These schemas define the shape of the `repositories/{repo_id}` document and
the payload handed to the roadmap generator. They serve as:
1. Validation - AI responses (project purpose) are checked against them
2. Type safety - the frontend knows exactly what to expect
3. Documentation - self-documenting persisted contract

Field naming uses snake_case to match the stored documents.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.schemas.roadmap import Roadmap

DatabaseType = Literal["PostgreSQL", "MySQL", "MongoDB", "SQLite", "Redis"]
EnvVarCategory = Literal["database", "api_key", "server", "general"]

ENV_VAR_NAME_PATTERN = r"^[A-Z_][A-Z0-9_]*$"


# ─────────────────────────────────────────────────────────────
# Repository
# ─────────────────────────────────────────────────────────────


class RepositoryMetadata(BaseModel):
    """Repository identity, GitHub stats and analysis bookkeeping."""

    id: str = Field(description="Persistence key, e.g., 'owner-repo'")
    owner: str
    name: str
    url: str
    description: str = ""
    stars: int = 0
    forks: int = 0
    default_branch: str = "main"
    created_at: datetime | None = None
    updated_at: datetime | None = None
    language: str = Field(default="Unknown", description="Primary language reported by GitHub")
    size_kb: int = Field(default=0, description="Repository size in KB")
    is_private: bool = False
    analyzed_at: datetime | None = None
    analysis_duration: int = Field(default=0, description="Analysis duration in seconds")


# ─────────────────────────────────────────────────────────────
# Static analysis
# ─────────────────────────────────────────────────────────────


class DependencyLists(BaseModel):
    """Dependency names split by scope."""

    production: list[str] = Field(default_factory=list)
    development: list[str] = Field(default_factory=list)

    def all(self) -> list[str]:
        """Production then development names."""
        return [*self.production, *self.development]


class TechStack(BaseModel):
    """Technology stack detected from manifest files.

    Missing values are explicit: "Unknown" for the string fields, None for
    the optional ones.
    """

    primary_language: str
    framework: str | None = "Unknown"
    runtime_version: str = "Unknown"
    package_manager: str = "Unknown"
    dependencies: DependencyLists = Field(default_factory=DependencyLists)
    testing_framework: str | None = None
    database: str | None = None
    ui_library: str | None = None


class DatabaseRequirement(BaseModel):
    """An external data store the project needs."""

    type: DatabaseType
    required: bool = True
    requires_migration: bool = False
    migrations_path: str | None = None
    seed_data_available: bool = False
    setup_guide: str = ""


class EnvironmentVariable(BaseModel):
    """A variable parsed from an example environment file."""

    name: str = Field(pattern=ENV_VAR_NAME_PATTERN)
    description: str
    required: bool
    example_value: str = ""
    category: EnvVarCategory = "general"


class ProjectPurpose(BaseModel):
    """What the project is and who it is for."""

    purpose: str = Field(min_length=1)
    features: list[str]
    target_users: str = Field(min_length=1)
    project_type: str = Field(min_length=1)

    @field_validator("features", mode="before")
    @classmethod
    def _coerce_features(cls, value: object) -> object:
        # The model occasionally returns a single string instead of a list
        if isinstance(value, str):
            return [value]
        return value


# ─────────────────────────────────────────────────────────────
# Aggregate
# ─────────────────────────────────────────────────────────────


class AnalysisMetadata(BaseModel):
    """Bookkeeping for a single analysis run."""

    analyzed_at: datetime
    analysis_duration_seconds: int
    total_files_scanned: int
    files_analyzed: int
    reduction_percentage: int = 0


class UploadedFiles(BaseModel):
    """Files uploaded for chat context (reserved, always empty for now)."""

    total: int = 0
    file_uris: list[str] = Field(default_factory=list)


class CompleteAnalysis(BaseModel):
    """Everything one analysis run produces."""

    repository: RepositoryMetadata
    tech_stack: TechStack
    database: list[DatabaseRequirement]
    environment_variables: list[EnvironmentVariable]
    project_purpose: ProjectPurpose
    roadmap: Roadmap
    uploaded_files: UploadedFiles = Field(default_factory=UploadedFiles)
    analysis_metadata: AnalysisMetadata


class RepositoryRecord(RepositoryMetadata):
    """The persisted `repositories/{repo_id}` document."""

    tech_stack: TechStack
    database_requirements: list[DatabaseRequirement] = Field(default_factory=list)
    environment_variables: list[EnvironmentVariable] = Field(default_factory=list)
    project_purpose: ProjectPurpose
    uploaded_file_uris: list[str] = Field(default_factory=list)

    @classmethod
    def from_analysis(cls, analysis: CompleteAnalysis) -> "RepositoryRecord":
        return cls(
            **analysis.repository.model_dump(),
            tech_stack=analysis.tech_stack,
            database_requirements=analysis.database,
            environment_variables=analysis.environment_variables,
            project_purpose=analysis.project_purpose,
            uploaded_file_uris=analysis.uploaded_files.file_uris,
        )
