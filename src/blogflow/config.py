"""Application configuration.

Configuration is loaded from environment variables. For local development, you can provide a
`.env` file and set `BLOGFLOW_ENV_FILE` to point to it.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from blogflow.cache.result_cache import CacheConfig


class Settings(BaseSettings):
    """Blog flow settings.

    All fields are environment-configurable. Prefix is `BLOGFLOW_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOGFLOW_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    app_env: Literal["dev", "prod"] = Field(default="dev")
    log_level: str = Field(default="INFO")
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000, ge=1, le=65535)

    # LLM
    openai_api_key: str | None = Field(default=None)
    openai_base_url: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o-mini")
    openai_timeout_s: float = Field(default=120.0)
    openai_max_tokens: int = Field(default=4000, ge=256, le=32000)

    # Search
    search_provider: Literal["google", "serpapi"] = Field(default="google")
    google_api_key: str | None = Field(default=None)
    google_search_engine_id: str | None = Field(default=None)
    google_api_base_url: str = Field(default="https://www.googleapis.com/customsearch/v1")
    serpapi_key: str | None = Field(default=None)
    serpapi_base_url: str = Field(default="https://serpapi.com/search.json")
    search_timeout_s: float = Field(default=30.0, ge=1.0, le=300.0)
    search_results_per_query: int = Field(default=10, ge=1, le=10)
    # Free tier of the Custom Search JSON API
    search_daily_quota: int = Field(default=100, ge=1)
    search_request_delay_s: float = Field(default=1.0, ge=0.0, le=30.0)

    # Result cache
    cache_storage: Literal["persistent", "session", "memory"] = Field(default="persistent")
    cache_expiry_ms: int = Field(default=24 * 60 * 60 * 1000, ge=0)
    cache_max_entries: int | None = Field(default=100, ge=1)
    cache_namespace: str = Field(default="search_cache")
    cache_partition_by: Literal["day", "week", "month"] = Field(default="day")
    cache_compression: bool = Field(default=False)
    cache_encryption_key: str | None = Field(default=None)
    cache_persist_on_reload: bool = Field(default=True)

    # Persistent key/value medium
    state_backend: Literal["file", "redis"] = Field(default="file")
    state_dir: Path = Field(default=Path(".blogflow"))
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_key_prefix: str = Field(default="blogflow")

    def cache_config(self) -> CacheConfig:
        """Build the result cache configuration from these settings."""

        return CacheConfig(
            storage=self.cache_storage,
            expiry_ms=self.cache_expiry_ms,
            max_entries=self.cache_max_entries,
            namespace=self.cache_namespace,
            partition_by=self.cache_partition_by,
            compression=self.cache_compression,
            encryption_key=self.cache_encryption_key,
            persist_on_reload=self.cache_persist_on_reload,
        )


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("BLOGFLOW_ENV_FILE")
    if env_file_override:
        env_path = Path(env_file_override)
        return Settings(_env_file=env_path)

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
