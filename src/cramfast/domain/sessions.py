"""Domain models for note sessions."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from cramfast.domain.flashcards import Flashcard


class SessionStatus:
    """Lifecycle statuses persisted on a session."""

    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted note session."""

    id: UUID
    user_id: str
    image_urls: list[str]
    status: str
    created_at: datetime
    title: str | None = None
    topic: str | None = None
    flashcards: list[Flashcard] | None = None
