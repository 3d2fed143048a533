"""Request and response models for the HTTP API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from cramfast.domain.flashcards import GenerationResult
from cramfast.domain.sessions import SessionRecord


class FlashcardOut(BaseModel):
    """Flashcard as returned to clients."""

    front: str
    back: str


class CreateSessionRequest(BaseModel):
    """Body for creating a session."""

    title: str | None = None


class AddImagesRequest(BaseModel):
    """Body for appending image references to a session."""

    image_urls: list[str] = Field(min_length=1)


class SessionOut(BaseModel):
    """Session as returned to clients."""

    id: UUID
    title: str | None
    status: str
    created_at: datetime
    image_urls: list[str]
    topic: str | None = None
    flashcards: list[FlashcardOut] | None = None

    @classmethod
    def from_record(cls, record: SessionRecord) -> "SessionOut":
        """Build the response model from a domain record."""
        return cls(
            id=record.id,
            title=record.title,
            status=record.status,
            created_at=record.created_at,
            image_urls=list(record.image_urls),
            topic=record.topic,
            flashcards=(
                [FlashcardOut(front=c.front, back=c.back) for c in record.flashcards]
                if record.flashcards is not None
                else None
            ),
        )


class GenerationOut(BaseModel):
    """Result of a generation run."""

    topic: str
    flashcards: list[FlashcardOut]

    @classmethod
    def from_result(cls, result: GenerationResult) -> "GenerationOut":
        """Build the response model from a generation result."""
        return cls(
            topic=result.topic,
            flashcards=[
                FlashcardOut(front=card.front, back=card.back)
                for card in result.flashcards
            ],
        )


class ErrorOut(BaseModel):
    """Classified error payload."""

    error: str
    detail: str
