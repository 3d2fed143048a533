"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_ocr_model: str = "gpt-4o-mini"
    openai_generation_model: str = "gpt-4o-mini"
    openai_timeout_seconds: float = 60.0
    max_ocr_retries: int = 2
    max_gen_retries: int = 2
    min_cards: int = 6
    min_transcript_chars: int = 20
    min_field_chars: int = 12
    min_fragment_chars: int = 24
    fallback_card_limit: int = 8
    max_document_chars: int = 12000
    ocr_max_tokens: int = 1500
    ocr_concurrency: int = 4
    max_session_images: int = 50
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
