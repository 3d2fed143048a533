"""Models for flashcards and structured generation output."""

from dataclasses import dataclass

from pydantic import BaseModel, field_validator


@dataclass(frozen=True)
class Flashcard:
    """A question/answer pair."""

    front: str
    back: str


@dataclass(frozen=True)
class PageTranscript:
    """Text transcribed from one page image."""

    page_index: int
    text: str


@dataclass(frozen=True)
class GenerationResult:
    """Topic and flashcards produced by one synthesis strategy."""

    topic: str
    flashcards: list[Flashcard]


class FlashcardPayload(BaseModel):
    """Single flashcard as returned by the model."""

    front: str = ""
    back: str = ""

    @field_validator("front", "back", mode="before")
    @classmethod
    def _null_to_empty(cls, value: object) -> object:
        return "" if value is None else value


class FlashcardSetPayload(BaseModel):
    """Structured output for flashcard synthesis."""

    topic: str = ""
    flashcards: list[FlashcardPayload] = []

    @field_validator("topic", mode="before")
    @classmethod
    def _null_topic_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("flashcards", mode="before")
    @classmethod
    def _null_cards_to_empty(cls, value: object) -> object:
        return [] if value is None else value

    def to_flashcards(self) -> list[Flashcard]:
        """Convert payload cards to domain flashcards."""
        return [Flashcard(front=card.front, back=card.back) for card in self.flashcards]
