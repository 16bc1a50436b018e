"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal
from urllib.parse import urlsplit

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Workflow client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "RankRent Builder"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Backend-as-a-service
    supabase_url: str | None = None
    supabase_anon_key: str | None = None
    session_access_token: str | None = None  # attached by the session layer

    # Remote function calls
    edge_function_timeout_seconds: float = 20.0

    # Transient banner lifetime
    feedback_dismiss_seconds: float = 3.0

    @field_validator("supabase_url", "supabase_anon_key", "session_access_token", mode="before")
    @classmethod
    def _strip_optional_strings(cls, value: object) -> object:
        """Treat blank env values as unset."""
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return value

    @field_validator("edge_function_timeout_seconds", "feedback_dismiss_seconds")
    @classmethod
    def _require_positive_seconds(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @property
    def functions_base_url(self) -> str | None:
        """Return `<origin>/functions/v1` for the configured project URL."""
        if not self.supabase_url:
            return None
        parts = urlsplit(self.supabase_url)
        if not parts.scheme or not parts.netloc:
            return None
        return f"{parts.scheme}://{parts.netloc}/functions/v1"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
