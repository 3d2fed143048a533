"""Shared test fixtures."""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from cramfast.config import Settings
from cramfast.containers import AppContainer, build_services
from cramfast.domain.errors import ImageLimitExceeded
from cramfast.domain.flashcards import Flashcard
from cramfast.domain.sessions import SessionRecord, SessionStatus
from cramfast.services.model_client import ModelClient
from cramfast.services.sessions import SessionRepository

PAGE_TEXT = (
    "Cells are the basic unit of life. Mitochondria produce ATP for the cell. "
    "The nucleus stores genetic material."
)


def card_payload(count: int, topic: str = "Cells") -> str:
    """Return structured output JSON with ``count`` distinct valid cards."""
    return json.dumps(
        {
            "topic": topic,
            "flashcards": [
                {
                    "front": f"What does organelle number {index} do?",
                    "back": f"Organelle {index} performs a specific cell function.",
                }
                for index in range(count)
            ],
        }
    )


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[UUID, SessionRecord] = field(default_factory=dict)
    status_history: list[tuple[UUID, str]] = field(default_factory=list)
    max_images: int = 50

    def add(
        self, user_id: str = "user-1", image_urls: list[str] | None = None
    ) -> SessionRecord:
        session = SessionRecord(
            id=uuid4(),
            user_id=user_id,
            image_urls=list(image_urls or []),
            status=SessionStatus.PENDING,
            created_at=datetime.now(tz=UTC) + timedelta(seconds=len(self.sessions)),
            title="Session",
        )
        self.sessions[session.id] = session
        return session

    def create_session(self, user_id: str, title: str) -> SessionRecord:
        session = self.add(user_id)
        return self._replace(session.id, title=title)

    def get_session(self, session_id: UUID, user_id: str) -> SessionRecord | None:
        session = self.sessions.get(session_id)
        if session is None or session.user_id != user_id:
            return None
        return session

    def list_sessions(self, user_id: str) -> list[SessionRecord]:
        owned = [s for s in self.sessions.values() if s.user_id == user_id]
        return sorted(owned, key=lambda s: s.created_at, reverse=True)

    def update_status(self, session_id: UUID, user_id: str, status: str) -> None:
        self.status_history.append((session_id, status))
        self._replace(session_id, status=status)

    def commit_flashcards(  # noqa: PLR0913
        self,
        session_id: UUID,
        user_id: str,
        flashcards: list[Flashcard],
        topic: str,
        title: str | None,
        status: str,
    ) -> None:
        self.status_history.append((session_id, status))
        changes: dict[str, object] = {
            "flashcards": list(flashcards),
            "topic": topic,
            "status": status,
        }
        if title:
            changes["title"] = title
        self._replace(session_id, **changes)

    def append_images(
        self, session_id: UUID, user_id: str, image_urls: list[str]
    ) -> SessionRecord:
        session = self.sessions[session_id]
        combined = [*session.image_urls, *image_urls]
        if len(combined) > self.max_images:
            raise ImageLimitExceeded("too many images")
        return self._replace(session_id, image_urls=combined)

    def _replace(self, session_id: UUID, **changes: object) -> SessionRecord:
        current = self.sessions[session_id]
        values = {
            "id": current.id,
            "user_id": current.user_id,
            "image_urls": current.image_urls,
            "status": current.status,
            "created_at": current.created_at,
            "title": current.title,
            "topic": current.topic,
            "flashcards": current.flashcards,
        }
        values.update(changes)
        updated = SessionRecord(**values)
        self.sessions[session_id] = updated
        return updated


@dataclass
class ScriptedModelClient(ModelClient):
    """Fake model client replaying scripted responses per call type.

    Each script entry is either a string response or an exception to raise.
    When a script runs out, its last entry is repeated. Text responses may
    also be keyed by image URL.
    """

    text_responses: list[object] | dict[str, object] = field(
        default_factory=lambda: [PAGE_TEXT]
    )
    structured_responses: list[object] = field(
        default_factory=lambda: [card_payload(8)]
    )
    json_responses: list[object] = field(default_factory=lambda: [card_payload(8)])
    calls: list[str] = field(default_factory=list)
    image_urls: list[str] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)

    async def complete_text(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        image_url: str | None,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        self.calls.append("text")
        self.image_urls.append(image_url or "")
        return self._next(self.text_responses, image_url)

    async def complete_structured(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        schema: dict[str, object],
        schema_name: str,
        temperature: float,
    ) -> str:
        self.calls.append("structured")
        self.prompts.append(user_prompt)
        return self._next(self.structured_responses)

    async def complete_json(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
    ) -> str:
        self.calls.append("json")
        self.prompts.append(user_prompt)
        return self._next(self.json_responses)

    def _next(
        self, script: list[object] | dict[str, object], key: str | None = None
    ) -> str:
        if isinstance(script, dict):
            entry = script[key]
        else:
            entry = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(entry, Exception):
            raise entry
        return str(entry)


class ProviderStatusError(Exception):
    """Provider-style exception carrying an HTTP status and error code."""

    def __init__(
        self, message: str, status_code: int, code: str | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        openai_api_key="openai-key",
    )


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def model_client() -> ScriptedModelClient:
    return ScriptedModelClient()


@pytest.fixture
def container(
    settings: Settings,
    session_repository: InMemorySessionRepository,
    model_client: ScriptedModelClient,
) -> AppContainer:
    session_service, generation_service = build_services(
        settings, session_repository, model_client
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_service=session_service,
        generation_service=generation_service,
        close_resources=close_resources,
    )
