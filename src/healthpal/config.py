"""Application configuration."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    timezone: str = "UTC"
    storage_backend: str = "file"
    storage_path: Path = Path(".healthpal/store.json")
    metrics_backend: str = "store"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-1.5-pro-latest"
    jpeg_quality: int = 80
    request_timeout_seconds: float = 60
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_timezone(name: str) -> ZoneInfo:
    """Return the ZoneInfo for a configured timezone name."""
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {name!r}") from exc
