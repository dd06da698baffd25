"""FastAPI dependency providers.

Every collaborator a route needs (document store, GitHub client, AI client)
comes from a provider here so tests can swap it via
``app.dependency_overrides``.
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends

from app.config import settings
from app.core.store import DocumentStore, InMemoryDocumentStore
from app.services.ai import OnboardingAIClient
from app.services.analysis_orchestrator import RoadmapAIClient, SourceControlClient
from app.services.github import GitHubService

GitHubServiceFactory = Callable[[str | None], SourceControlClient]

# Process-local: data is lost on restart and not shared between workers
_store = InMemoryDocumentStore()
_ai_client: OnboardingAIClient | None = None


def get_store() -> DocumentStore:
    """Application-wide document store."""
    return _store


def get_github_service_factory() -> GitHubServiceFactory:
    """
    Factory building a GitHub client per request.

    A token supplied with the request wins over the server-side default.
    """

    def _build(token: str | None) -> SourceControlClient:
        return GitHubService(token=token or settings.github_token or None)

    return _build


def get_ai_client() -> RoadmapAIClient:
    """Lazily created shared AI client."""
    global _ai_client
    if _ai_client is None:
        _ai_client = OnboardingAIClient()
    return _ai_client


Store = Annotated[DocumentStore, Depends(get_store)]
GitHubFactory = Annotated[GitHubServiceFactory, Depends(get_github_service_factory)]
AIClient = Annotated[RoadmapAIClient, Depends(get_ai_client)]
