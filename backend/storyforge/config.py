"""Application configuration."""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./storage/storyforge.db"

    # Application
    app_env: str = "development"
    log_level: str | None = None
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Azure DevOps REST API
    ado_api_version: str = "7.1"
    ado_timeout_seconds: float = 30.0
    ado_batch_size: int = 200

    # Work items cache (duplicate detection)
    cache_refresh_enabled: bool = True
    cache_refresh_interval_seconds: int = 3600
    cache_refresh_startup_delay_seconds: int = 2
    cache_history_months: int = 6
    similarity_candidate_limit: int = 200

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
