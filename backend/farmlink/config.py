"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - FARMLINK_ env prefix: settings share a process with other tools' DATABASE_URL
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


def asyncpg_url(url: str) -> str:
    """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="FARMLINK_", case_sensitive=False,
    )

    # Remote data store
    database_url: str = (
        "postgresql+asyncpg://farmlink:farmlink@db:5432/farmlink"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        return asyncpg_url(v) if isinstance(v, str) else v

    database_pool_size: int = 10
    database_max_overflow: int = 5

    # Upper bound for identity revalidation against the remote store
    remote_timeout_seconds: float = 30.0

    # Auth
    auth_session_ttl_minutes: int = 60 * 24 * 7

    # Local identity cache
    identity_storage_dir: Path = Path.home() / ".farmlink"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
