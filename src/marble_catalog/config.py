"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    openai_max_output_tokens: int = 2000
    storage_bucket: str = "collection-photos"
    auto_add_threshold: float = 0.8
    max_upload_bytes: int = 5 * 1024 * 1024
    rate_limit_window_seconds: int = 15 * 60
    rate_limit_max_requests: int = 100
    rate_limit_strict_max_requests: int = 5
    rate_limit_max_keys: int = 10_000
    rate_limit_strict_prefixes: str = "/auth,/admin"
    cors_allowed_origins: str | None = None
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_csv(raw: str | None) -> list[str]:
    """Split a comma-separated env value, dropping blanks."""
    if raw is None:
        return []
    return [chunk.strip() for chunk in raw.split(",") if chunk.strip()]


def resolve_cors_origins(settings: Settings) -> list[str]:
    """Return allowed CORS origins, adding localhost outside production."""
    origins = parse_csv(settings.cors_allowed_origins)
    if settings.environment != "production" and "http://localhost:3000" not in origins:
        origins.append("http://localhost:3000")
    return origins
