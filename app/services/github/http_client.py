"""
Shared HTTP client for GitHub API operations.

A single pooled AsyncClient is reused by every GitHubService instance; auth
headers are passed per request so the client itself holds no credentials.
"""

import logging

import httpx

logger = logging.getLogger(__name__)

_client: httpx.AsyncClient | None = None


def get_github_client() -> httpx.AsyncClient:
    """Get or create the shared HTTP client for GitHub API calls."""
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(30.0, connect=5.0),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            http2=True,
            # Renamed or transferred repositories answer with a 301 to the new location
            follow_redirects=True,
        )
        logger.debug("Created new GitHub HTTP client with connection pooling")
    return _client


async def close_github_client() -> None:
    """Close the shared HTTP client. Called on app shutdown."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        _client = None
        logger.debug("Closed GitHub HTTP client")
