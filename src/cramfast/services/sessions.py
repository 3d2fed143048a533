"""Session lifecycle state machine for flashcard generation."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from cramfast.domain.errors import (
    ImageLimitExceeded,
    InvalidImages,
    NoImages,
    NotFound,
)
from cramfast.domain.flashcards import Flashcard, GenerationResult
from cramfast.domain.sessions import SessionRecord, SessionStatus

_logger = logging.getLogger(__name__)

MAX_SESSION_IMAGES = 50
UNTITLED = "Untitled"
_IMAGE_PREFIXES = ("https://", "http://", "data:image/")


class SessionRepository(Protocol):
    """Persistence interface for note sessions."""

    def create_session(self, user_id: str, title: str) -> SessionRecord:
        """Create a pending session without images and return it."""

    def get_session(self, session_id: UUID, user_id: str) -> SessionRecord | None:
        """Return the session if it exists and belongs to the user."""

    def list_sessions(self, user_id: str) -> list[SessionRecord]:
        """Return the user's sessions, newest first."""

    def update_status(self, session_id: UUID, user_id: str, status: str) -> None:
        """Set the session status."""

    def commit_flashcards(  # noqa: PLR0913
        self,
        session_id: UUID,
        user_id: str,
        flashcards: list[Flashcard],
        topic: str,
        title: str | None,
        status: str,
    ) -> None:
        """Store flashcards, topic, title and status in one write."""

    def append_images(
        self, session_id: UUID, user_id: str, image_urls: list[str]
    ) -> SessionRecord:
        """Append image references; fail if the total would exceed the limit."""


@dataclass
class SessionService:
    """Owns every status transition of a session."""

    repository: SessionRepository
    max_images: int = MAX_SESSION_IMAGES

    def create_session(self, user_id: str, title: str | None = None) -> SessionRecord:
        """Create a pending session with a dated default title."""
        resolved = (title or "").strip() or _default_title()
        return self.repository.create_session(user_id, resolved)

    def list_sessions(self, user_id: str) -> list[SessionRecord]:
        """Return the user's sessions, newest first."""
        return self.repository.list_sessions(user_id)

    def get_session(self, session_id: UUID, user_id: str) -> SessionRecord:
        """Return an owned session or raise NotFound."""
        session = self.repository.get_session(session_id, user_id)
        if session is None:
            raise NotFound("Session not found")
        return session

    def add_images(
        self, session_id: UUID, user_id: str, image_urls: list[str]
    ) -> SessionRecord:
        """Append image references, keeping the stored list within the limit."""
        session = self.get_session(session_id, user_id)
        cleaned = [url.strip() for url in image_urls]
        if not cleaned or any(not url.startswith(_IMAGE_PREFIXES) for url in cleaned):
            raise InvalidImages("Upload valid image URLs")
        if len(session.image_urls) + len(cleaned) > self.max_images:
            raise ImageLimitExceeded(f"Maximum {self.max_images} images allowed")
        return self.repository.append_images(session_id, user_id, cleaned)

    def begin_generation(self, session_id: UUID, user_id: str) -> SessionRecord:
        """Move an owned session with images into ``generating``."""
        session = self.get_session(session_id, user_id)
        if not session.image_urls:
            raise NoImages("Session has no images")
        self.repository.update_status(session_id, user_id, SessionStatus.GENERATING)
        _logger.info(
            "Generation started",
            extra={"session_id": str(session_id), "pages": len(session.image_urls)},
        )
        return session

    def commit_success(
        self,
        session: SessionRecord,
        result: GenerationResult,
        title: str | None = None,
    ) -> None:
        """Store the result and mark the session ``completed``."""
        self.repository.commit_flashcards(
            session.id,
            session.user_id,
            flashcards=list(result.flashcards),
            topic=result.topic,
            title=derive_title(result.topic, title),
            status=SessionStatus.COMPLETED,
        )

    def commit_failure(self, session: SessionRecord) -> None:
        """Mark the session ``error``."""
        self.repository.update_status(session.id, session.user_id, SessionStatus.ERROR)


def derive_title(topic: str, title: str | None = None) -> str:
    """Pick an explicit title, else the topic, else a placeholder."""
    if title and title.strip():
        return title.strip()
    return topic.strip() or UNTITLED


def _default_title() -> str:
    return f"Session {datetime.now(tz=UTC).date().isoformat()}"
