"""Application settings using Pydantic Settings."""
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from meetassist.pipelines.interfaces import LanguageHint


class Settings(BaseSettings):
    environment: str = Field(default="dev", description="Deployment environment (dev, production)")
    debug: bool = Field(default=True, description="Enable debug features")
    log_level: str = Field(default="INFO", description="Root log level")
    api_prefix: str = "/api"
    database_url: str = Field(
        default="postgresql+asyncpg://meetassist:meetassistpass@db:5432/meetassist",
        description="SQLAlchemy database URL (async). Use sqlite+aiosqlite:///./meetassist.db locally",
    )
    sql_echo: bool = Field(default=False, description="Enable SQLAlchemy echo for debugging")
    auto_create_tables: bool = Field(default=True, description="Create missing tables at startup")
    public_base_url: str | None = Field(
        default=None,
        description="Base URL used for dashboard/transcript links (defaults to the request URL)",
    )
    default_platform: str = "google_meet"

    # Transcription (ElevenLabs speech-to-text)
    elevenlabs_api_key: str | None = None
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    elevenlabs_model_id: str = "scribe_v1"
    transcription_timeout: float = Field(default=120.0, description="Provider timeout in seconds")
    default_language: LanguageHint = Field(default=LanguageHint.HINGLISH, description="Language hint: en or hinglish")
    fallback_confidence: float = Field(default=0.8, description="Confidence reported for fallback transcripts")

    # Summarization (DeepSeek chat completions)
    deepseek_api_key: str | None = None
    deepseek_base_url: str = "https://api.deepseek.com/chat/completions"
    deepseek_model: str = "deepseek-chat"
    summarization_temperature: float = 0.1
    summarization_max_tokens: int = 2000
    summarization_timeout: float = 60.0

    # Email (Resend)
    resend_api_key: str | None = None
    resend_base_url: str = "https://api.resend.com"
    email_from: str = "notes@meetassist.local"
    email_from_name: str = "Meeting Assistant"
    email_timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="MEETASSIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra fields from .env file
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in {"prod", "production"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
