"""Pydantic schemas for analysis results, roadmaps and progress."""

from app.schemas.analysis import (
    CompleteAnalysis,
    DatabaseRequirement,
    EnvironmentVariable,
    ProjectPurpose,
    RepositoryMetadata,
    RepositoryRecord,
    TechStack,
)
from app.schemas.analysis_progress import AnalysisProgress
from app.schemas.progress import AnalysisSummary, ProgressUpdate, UserProgress
from app.schemas.roadmap import Roadmap, RoadmapSection, RoadmapTask

__all__ = [
    "AnalysisProgress",
    "AnalysisSummary",
    "CompleteAnalysis",
    "DatabaseRequirement",
    "EnvironmentVariable",
    "ProgressUpdate",
    "ProjectPurpose",
    "RepositoryMetadata",
    "RepositoryRecord",
    "Roadmap",
    "RoadmapSection",
    "RoadmapTask",
    "TechStack",
    "UserProgress",
]
