"""Root conftest: shared fixtures for all backend tests.

Provides:
- anyio backend selection (asyncio only)
- A fresh in-memory document store per test
- Autouse clearing of the GitHub TTL caches
"""

from __future__ import annotations

import pytest

from app.core.store import InMemoryDocumentStore
from app.services.github.cache import clear_all_caches


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """An empty document store, isolated per test."""
    return InMemoryDocumentStore()


@pytest.fixture(autouse=True)
def _clear_github_caches():
    """Clear GitHub TTL caches before and after each test to prevent cross-test pollution."""
    clear_all_caches()
    yield
    clear_all_caches()
