"""Constants for GitHub service."""

GITHUB_API_BASE = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "OnboardGhost"

# Branch tried when the requested default branch does not exist
FALLBACK_BRANCHES: dict[str, str] = {"main": "master"}

# Retry configuration for metadata fetches (transient failures only)
MAX_RETRIES = 3
RETRY_BASE_DELAY = 1.0  # seconds, doubled per attempt

NOT_FOUND_MESSAGE = "Repository not found or private. Connect GitHub to access private repos."
