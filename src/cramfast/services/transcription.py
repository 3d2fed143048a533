"""Handwritten page transcription via a vision model."""

import asyncio
import logging
from dataclasses import dataclass

from cramfast.domain.errors import classify_provider_error, is_fatal_provider_error
from cramfast.domain.flashcards import PageTranscript
from cramfast.services.model_client import ModelClient

_logger = logging.getLogger(__name__)

OCR_FAILURE_PHRASES: tuple[str, ...] = (
    "unable to extract text",
    "unable to transcribe",
    "image is unclear",
    "image is too blurry",
    "no text found",
    "no text detected",
    "cannot read the",
    "can't read the",
    "i'm unable to",
    "i am unable to",
    "i can't assist",
    "i cannot assist",
)

OCR_SYSTEM_PROMPT = (
    "You transcribe handwritten academic notes. "
    "Return only the extracted text, verbatim, preserving line breaks. "
    "Do not summarize, paraphrase or explain. "
    "Write [illegible] for any word or span you cannot read."
)
OCR_USER_PROMPT = "Transcribe this page exactly."


def is_meaningful(
    text: str | None,
    *,
    min_chars: int = 20,
    failure_phrases: tuple[str, ...] = OCR_FAILURE_PHRASES,
) -> bool:
    """Return whether a transcript carries real content."""
    if not isinstance(text, str):
        return False
    cleaned = text.strip()
    if len(cleaned) <= min_chars:
        return False
    lowered = cleaned.lower()
    return not any(phrase in lowered for phrase in failure_phrases)


@dataclass
class TranscriptionService:
    """Transcribes note images with bounded retries."""

    client: ModelClient
    model: str
    max_retries: int = 2
    min_chars: int = 20
    max_output_tokens: int = 1500
    concurrency: int = 4

    async def transcribe_pages(self, image_urls: list[str]) -> list[PageTranscript]:
        """Transcribe every page; pages without meaningful text are dropped.

        Pages run concurrently but results keep the original page order. A
        fatal provider error cancels the pages still in flight.
        """
        semaphore = asyncio.Semaphore(max(1, self.concurrency))

        async def run(index: int, image_url: str) -> PageTranscript | None:
            async with semaphore:
                text = await self.transcribe(image_url, page_index=index)
            if text is None:
                return None
            return PageTranscript(page_index=index, text=text)

        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(run(index, url))
                    for index, url in enumerate(image_urls)
                ]
        except ExceptionGroup as group_error:
            raise group_error.exceptions[0] from None
        results = (task.result() for task in tasks)
        return [page for page in results if page is not None]

    async def transcribe(self, image_url: str, page_index: int = 0) -> str | None:
        """Return the transcript of one image, or None after exhausting retries."""
        for attempt in range(1, self.max_retries + 1):
            try:
                content = await self.client.complete_text(
                    model=self.model,
                    system_prompt=OCR_SYSTEM_PROMPT,
                    user_prompt=OCR_USER_PROMPT,
                    image_url=image_url,
                    temperature=0,
                    max_output_tokens=self.max_output_tokens,
                )
            except Exception as exc:
                error = classify_provider_error(exc)
                if is_fatal_provider_error(error):
                    raise error from exc
                _logger.warning(
                    "Transcription attempt %s/%s failed for page %s: %s",
                    attempt,
                    self.max_retries,
                    page_index + 1,
                    exc,
                )
                continue
            if is_meaningful(content, min_chars=self.min_chars):
                return content.strip()
            _logger.info(
                "Discarding unusable transcript for page %s (attempt %s/%s)",
                page_index + 1,
                attempt,
                self.max_retries,
            )
        _logger.warning(
            "Dropping page %s after %s attempts",
            page_index + 1,
            self.max_retries,
            extra={"image_url": image_url},
        )
        return None
