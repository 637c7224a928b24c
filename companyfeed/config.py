"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and COMPANYFEED_* environment variables.

Examples
--------
::

    export COMPANYFEED_DATABASE_URL=https://my-app-default-rtdb.firebaseio.com
    export COMPANYFEED_AUTH_TOKEN=...
    export COMPANYFEED_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeedConfig(BaseSettings):
    """companyfeed configuration with environment variable overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="COMPANYFEED_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "WARNING"

    # Realtime store
    database_url: str = ""
    collection_path: str = "companies"
    auth_token: str = ""
    connect_timeout_seconds: float = Field(default=10.0, gt=0)
    # Server keep-alives arrive every 30s
    read_timeout_seconds: float = Field(default=60.0, gt=0)

    # Presentation
    recent_count: int = Field(default=5, ge=0)
    refresh_hz: float = Field(default=4.0, gt=0)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_database(self) -> bool:
        return bool(self.database_url)


# Module-level singleton — import as `from companyfeed.config import config`
config = FeedConfig()
