"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str
    token_path: Path = Path.home() / ".library_portal" / "session.json"
    http_timeout_seconds: float = 30
    search_debounce_seconds: float = 0.3
    min_search_length: int = 2
    booking_page_size: int = 10
    tour_page_size: int = 12
    default_sort_field: str = "createdAt"
    default_sort_order: str = "desc"
    stats_period: str = "month"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
