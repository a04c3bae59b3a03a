"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every backend credential is optional: a missing value selects the
    in-process fallback for that concern at startup.
    """

    supabase_url: str | None = None
    supabase_key: str | None = None
    storage_bucket: str = "field-inspector"
    records_table: str = "inspection_records"
    openai_api_key: str | None = None
    transcription_model: str = "whisper-1"
    transcription_language: str = "es"
    simulated_upload_base_url: str = "https://storage.local"
    max_upload_bytes: int = 10 * 1024 * 1024
    cors_allow_origins: str = "*"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def supabase_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def transcription_enabled(self) -> bool:
        return bool(self.openai_api_key)


def parse_cors_origins(raw: str | None) -> list[str]:
    """Parse allowed CORS origins from env."""
    if raw is None:
        return ["*"]
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return ["*"]
    return [chunk.strip() for chunk in cleaned.split(",") if chunk.strip()]
