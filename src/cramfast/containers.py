"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from cramfast.adapters.openai_model_client import OpenAIModelClient
from cramfast.adapters.supabase_session_repository import SupabaseSessionRepository
from cramfast.config import Settings
from cramfast.services.filtering import FilterRules
from cramfast.services.generation import GenerationService
from cramfast.services.model_client import ModelClient
from cramfast.services.sessions import SessionRepository, SessionService
from cramfast.services.synthesis import (
    FallbackStrategy,
    JsonObjectStrategy,
    StructuredOutputStrategy,
    SynthesisService,
)
from cramfast.services.transcription import TranscriptionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_service: SessionService
    generation_service: GenerationService
    close_resources: Callable[[], Awaitable[None]]


def build_services(
    settings: Settings,
    session_repository: SessionRepository,
    model_client: ModelClient,
) -> tuple[SessionService, GenerationService]:
    """Build the session and generation services from settings."""
    rules = FilterRules(min_field_chars=settings.min_field_chars)
    session_service = SessionService(
        repository=session_repository,
        max_images=settings.max_session_images,
    )
    transcription_service = TranscriptionService(
        client=model_client,
        model=settings.openai_ocr_model,
        max_retries=settings.max_ocr_retries,
        min_chars=settings.min_transcript_chars,
        max_output_tokens=settings.ocr_max_tokens,
        concurrency=settings.ocr_concurrency,
    )
    synthesis_service = SynthesisService(
        strategies=(
            StructuredOutputStrategy(
                client=model_client,
                model=settings.openai_generation_model,
                rules=rules,
                min_cards=settings.min_cards,
                max_retries=settings.max_gen_retries,
            ),
            JsonObjectStrategy(
                client=model_client,
                model=settings.openai_generation_model,
                rules=rules,
                min_cards=settings.min_cards,
            ),
            FallbackStrategy(
                rules=rules,
                min_fragment_chars=settings.min_fragment_chars,
                limit=settings.fallback_card_limit,
            ),
        ),
        max_document_chars=settings.max_document_chars,
    )
    generation_service = GenerationService(
        session_service=session_service,
        transcription_service=transcription_service,
        synthesis_service=synthesis_service,
    )
    return session_service, generation_service


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseSessionRepository(
        supabase_client, max_images=resolved_settings.max_session_images
    )
    model_client = OpenAIModelClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
    )
    session_service, generation_service = build_services(
        resolved_settings, session_repository, model_client
    )

    async def close_resources() -> None:
        await model_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_service=session_service,
        generation_service=generation_service,
        close_resources=close_resources,
    )
