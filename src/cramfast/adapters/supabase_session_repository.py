"""Supabase-backed session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from cramfast.domain.errors import ImageLimitExceeded, NotFound
from cramfast.domain.flashcards import Flashcard
from cramfast.domain.sessions import SessionRecord, SessionStatus
from cramfast.services.sessions import MAX_SESSION_IMAGES, SessionRepository

_COLUMNS = "id, user_id, title, created_at, image_urls, status, topic, flashcards"


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for note sessions."""

    client: Client
    max_images: int = MAX_SESSION_IMAGES

    def create_session(self, user_id: str, title: str) -> SessionRecord:
        """Create a pending session row and return it."""
        response = (
            self.client.table("sessions")
            .insert(
                {
                    "user_id": user_id,
                    "title": title,
                    "image_urls": [],
                    "status": SessionStatus.PENDING,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create session")
        return _to_record(response.data[0])

    def get_session(self, session_id: UUID, user_id: str) -> SessionRecord | None:
        """Return a session owned by the user, if present."""
        response = (
            self.client.table("sessions")
            .select(_COLUMNS)
            .eq("id", str(session_id))
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_record(response.data[0])

    def list_sessions(self, user_id: str) -> list[SessionRecord]:
        """Return the user's sessions, newest first."""
        response = (
            self.client.table("sessions")
            .select(_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [_to_record(row) for row in response.data or []]

    def update_status(self, session_id: UUID, user_id: str, status: str) -> None:
        """Update the session status."""
        self.client.table("sessions").update(
            {"status": status, "updated_at": _now()}
        ).eq("id", str(session_id)).eq("user_id", user_id).execute()

    def commit_flashcards(  # noqa: PLR0913
        self,
        session_id: UUID,
        user_id: str,
        flashcards: list[Flashcard],
        topic: str,
        title: str | None,
        status: str,
    ) -> None:
        """Write flashcards, topic, title and status together."""
        payload: dict[str, object] = {
            "flashcards": [
                {"front": card.front, "back": card.back} for card in flashcards
            ],
            "topic": topic,
            "status": status,
            "updated_at": _now(),
        }
        if title:
            payload["title"] = title
        self.client.table("sessions").update(payload).eq("id", str(session_id)).eq(
            "user_id", user_id
        ).execute()

    def append_images(
        self, session_id: UUID, user_id: str, image_urls: list[str]
    ) -> SessionRecord:
        """Append image references after re-checking the limit."""
        session = self.get_session(session_id, user_id)
        if session is None:
            raise NotFound("Session not found")
        combined = [*session.image_urls, *image_urls]
        if len(combined) > self.max_images:
            raise ImageLimitExceeded(f"Maximum {self.max_images} images allowed")
        response = (
            self.client.table("sessions")
            .update({"image_urls": combined, "updated_at": _now()})
            .eq("id", str(session_id))
            .eq("user_id", user_id)
            .execute()
        )
        if response.data:
            return _to_record(response.data[0])
        return SessionRecord(
            id=session.id,
            user_id=session.user_id,
            image_urls=combined,
            status=session.status,
            created_at=session.created_at,
            title=session.title,
            topic=session.topic,
            flashcards=session.flashcards,
        )


def _now() -> str:
    return datetime.now(tz=UTC).isoformat()


def _to_record(row: dict[str, object]) -> SessionRecord:
    raw_cards = row.get("flashcards")
    flashcards = (
        [Flashcard(front=card["front"], back=card["back"]) for card in raw_cards]
        if isinstance(raw_cards, list)
        else None
    )
    created_at = row.get("created_at")
    return SessionRecord(
        id=UUID(str(row["id"])),
        user_id=str(row["user_id"]),
        image_urls=list(row.get("image_urls") or []),
        status=str(row["status"]),
        created_at=(
            datetime.fromisoformat(created_at)
            if isinstance(created_at, str)
            else datetime.now(tz=UTC)
        ),
        title=row.get("title"),
        topic=row.get("topic"),
        flashcards=flashcards,
    )
