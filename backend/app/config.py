"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - ORCID base URLs configurable so the sandbox (pub.sandbox.orcid.org) can be targeted
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://orcid:orcid@db:5432/orcidpp"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # ORCID API
    orcid_api_base_url: str = "https://pub.orcid.org/v3.0"
    orcid_oauth_url: str = "https://orcid.org/oauth"
    orcid_client_id: str = ""
    orcid_client_secret: str = ""
    orcid_redirect_uri: str = "http://localhost:8080/login/callback"
    orcid_timeout_seconds: float = 30.0
    orcid_max_retries: int = 3
    orcid_base_delay_ms: int = 500
    orcid_max_delay_ms: int = 10_000

    # ADR: the public API serves anonymous reads; set true to mirror the strict proxy
    # behavior where every /orcid/* call must carry the caller's bearer token.
    orcid_require_authorization: bool = False

    # Aggregate loading: detail calls per researcher (works + fundings)
    orcid_detail_concurrency: int = 8
    orcid_detail_limit: int = 100

    # Search
    search_cache_ttl_seconds: int = 300
    search_cache_max_entries: int = 256
    search_max_results: int = 200
    search_page_size: int = 10

    # Local lists
    publications_page_size: int = 10
    projects_page_size: int = 6

    # API
    cors_origins: list[str] = ["http://localhost:8080", "http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
