"""Generation orchestrator: images in, committed flashcards out."""

import logging
from dataclasses import dataclass
from uuid import UUID

from cramfast.domain.errors import (
    CramfastError,
    OcrFailed,
    Unauthenticated,
    classify_provider_error,
)
from cramfast.domain.flashcards import GenerationResult
from cramfast.domain.sessions import SessionRecord
from cramfast.services.aggregator import aggregate_transcripts, transcript_body
from cramfast.services.sessions import SessionService
from cramfast.services.synthesis import SynthesisService
from cramfast.services.transcription import TranscriptionService, is_meaningful

_logger = logging.getLogger(__name__)


@dataclass
class GenerationService:
    """Sequences transcription, synthesis and the session state machine."""

    session_service: SessionService
    transcription_service: TranscriptionService
    synthesis_service: SynthesisService

    async def generate(self, session_id: UUID, user_id: str) -> GenerationResult:
        """Generate flashcards for a session and persist the outcome.

        Once the session is in ``generating`` it always ends in ``completed``
        or ``error``; the raised error is always a ``CramfastError``.
        """
        if not user_id or not user_id.strip():
            raise Unauthenticated("Missing caller identity")
        session = self.session_service.begin_generation(session_id, user_id)
        try:
            result = await self._run(session)
            self.session_service.commit_success(session, result)
        except Exception as exc:
            error = classify_provider_error(exc)
            self._fail(session, error)
            if error is exc:
                raise
            raise error from exc
        return result

    async def _run(self, session: SessionRecord) -> GenerationResult:
        pages = await self.transcription_service.transcribe_pages(
            list(session.image_urls)
        )
        body = transcript_body(pages)
        if not is_meaningful(body, min_chars=self.transcription_service.min_chars):
            raise OcrFailed(
                f"No readable text in {len(session.image_urls)} page(s)"
            )
        _logger.info(
            "Transcribed %s/%s pages",
            len(pages),
            len(session.image_urls),
            extra={"session_id": str(session.id)},
        )
        document = aggregate_transcripts(pages)
        return await self.synthesis_service.synthesize(document)

    def _fail(self, session: SessionRecord, error: CramfastError) -> None:
        _logger.warning(
            "Generation failed: %s",
            error.code,
            extra={"session_id": str(session.id), "detail": error.message},
        )
        try:
            self.session_service.commit_failure(session)
        except Exception:
            _logger.exception(
                "Failed to persist error status",
                extra={"session_id": str(session.id)},
            )
