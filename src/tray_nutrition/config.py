"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    detector_api_url: str = "http://localhost:5000"
    detector_timeout_seconds: float = 30
    storage_bucket: str = "detection_menu"
    menu_match_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    lookup_cache_ttl_seconds: int = 300
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
