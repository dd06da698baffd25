from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    cors_origins: list[str] = ["http://localhost:3000"]

    # GitHub - optional server-side token for unauthenticated requests.
    # Requests may carry their own OAuth token for private repositories.
    github_token: str = ""

    # AI / Anthropic
    anthropic_api_key: str = ""
    ai_model: str = "claude-sonnet-4-20250514"

    # Analysis pipeline
    # Hard ceiling for a whole analysis run, not a per-step limit
    analysis_timeout_seconds: float = 300.0
    # 500MB expressed in KB (GitHub reports repository size in KB)
    max_repo_size_kb: int = 500 * 1024
    # Number of critical files whose content is fetched during static analysis
    critical_file_fetch_limit: int = 10
    # Prompt excerpt sizes
    readme_excerpt_chars: int = 2000
    setup_instructions_chars: int = 1000

    # Product policy
    # Stored analyses younger than this are served from cache
    cache_freshness_days: int = 30
    # Progress percentages that trigger a celebration in the UI
    milestone_thresholds: list[int] = [25, 50, 75, 100]

    @property
    def ai_enabled(self) -> bool:
        """Check if the AI client is configured (has API key)."""
        return bool(self.anthropic_api_key)


settings = Settings()
