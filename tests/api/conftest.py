"""API test fixtures: an HTTP client with every collaborator faked.

Overrides: get_store, get_github_service_factory, get_ai_client
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from tests.helpers.factories import FakeAI, FakeGitHub


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def fake_ai() -> FakeAI:
    return FakeAI()


@pytest.fixture
def github_tokens() -> list[str | None]:
    """Tokens the GitHub factory was called with, in order."""
    return []


@pytest.fixture
async def api_client(store, fake_github, fake_ai, github_tokens):
    """HTTP client against the app with an isolated store and fake upstreams."""
    from app.api.deps import get_ai_client, get_github_service_factory, get_store
    from app.main import app

    def build_github(token: str | None) -> FakeGitHub:
        github_tokens.append(token)
        return fake_github

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_github_service_factory] = lambda: build_github
    app.dependency_overrides[get_ai_client] = lambda: fake_ai

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
