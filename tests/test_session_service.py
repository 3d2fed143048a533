"""Tests for the session state machine."""

from uuid import uuid4

import pytest

from cramfast.domain.errors import (
    ImageLimitExceeded,
    InvalidImages,
    NoImages,
    NotFound,
)
from cramfast.domain.flashcards import Flashcard, GenerationResult
from cramfast.domain.sessions import SessionStatus
from cramfast.services.sessions import SessionService, derive_title
from tests.conftest import InMemorySessionRepository

CARDS = [Flashcard(front="What is a cell?", back="The basic unit of life.")]


def test_create_session_uses_dated_default_title() -> None:
    repository = InMemorySessionRepository()
    service = SessionService(repository)

    session = service.create_session("user-1")

    assert session.status == SessionStatus.PENDING
    assert session.image_urls == []
    assert session.title is not None
    assert session.title.startswith("Session ")


def test_create_session_keeps_explicit_title() -> None:
    service = SessionService(InMemorySessionRepository())

    session = service.create_session("user-1", title="  Biology week 3 ")

    assert session.title == "Biology week 3"


def test_list_sessions_only_returns_owned_sessions() -> None:
    repository = InMemorySessionRepository()
    service = SessionService(repository)
    first = service.create_session("user-1")
    second = service.create_session("user-1")
    service.create_session("user-2")

    sessions = service.list_sessions("user-1")

    assert [session.id for session in sessions] == [second.id, first.id]


def test_get_session_of_other_user_is_not_found() -> None:
    repository = InMemorySessionRepository()
    session = repository.add("owner")

    with pytest.raises(NotFound):
        SessionService(repository).get_session(session.id, "intruder")


def test_begin_generation_without_images_does_not_mutate() -> None:
    repository = InMemorySessionRepository()
    session = repository.add("user-1")
    service = SessionService(repository)

    with pytest.raises(NoImages):
        service.begin_generation(session.id, "user-1")

    assert repository.sessions[session.id].status == SessionStatus.PENDING
    assert repository.status_history == []


def test_begin_generation_unknown_session_is_not_found() -> None:
    service = SessionService(InMemorySessionRepository())

    with pytest.raises(NotFound):
        service.begin_generation(uuid4(), "user-1")


def test_begin_generation_sets_generating() -> None:
    repository = InMemorySessionRepository()
    session = repository.add("user-1", ["https://img/1.jpg"])

    SessionService(repository).begin_generation(session.id, "user-1")

    assert repository.sessions[session.id].status == SessionStatus.GENERATING


def test_commit_success_stores_cards_topic_and_title() -> None:
    repository = InMemorySessionRepository()
    session = repository.add("user-1", ["https://img/1.jpg"])
    service = SessionService(repository)

    service.commit_success(session, GenerationResult(topic=" Cells ", flashcards=CARDS))

    stored = repository.sessions[session.id]
    assert stored.status == SessionStatus.COMPLETED
    assert stored.flashcards == CARDS
    assert stored.topic == " Cells "
    assert stored.title == "Cells"


def test_commit_failure_sets_error() -> None:
    repository = InMemorySessionRepository()
    session = repository.add("user-1", ["https://img/1.jpg"])

    SessionService(repository).commit_failure(session)

    assert repository.sessions[session.id].status == SessionStatus.ERROR


def test_derive_title() -> None:
    assert derive_title("Cells") == "Cells"
    assert derive_title("   ") == "Untitled"
    assert derive_title("Cells", title="My notes") == "My notes"


def test_add_images_appends_in_order() -> None:
    repository = InMemorySessionRepository()
    session = repository.add("user-1", ["https://img/1.jpg"])

    updated = SessionService(repository).add_images(
        session.id, "user-1", ["https://img/2.jpg", " https://img/3.jpg "]
    )

    assert updated.image_urls == [
        "https://img/1.jpg",
        "https://img/2.jpg",
        "https://img/3.jpg",
    ]


def test_add_images_over_limit_leaves_list_untouched() -> None:
    repository = InMemorySessionRepository()
    existing = [f"https://img/{index}.jpg" for index in range(49)]
    session = repository.add("user-1", existing)

    with pytest.raises(ImageLimitExceeded):
        SessionService(repository).add_images(
            session.id, "user-1", ["https://img/a.jpg", "https://img/b.jpg"]
        )

    assert repository.sessions[session.id].image_urls == existing


def test_add_images_rejects_invalid_references() -> None:
    repository = InMemorySessionRepository()
    session = repository.add("user-1")

    with pytest.raises(InvalidImages):
        SessionService(repository).add_images(session.id, "user-1", ["  "])
    with pytest.raises(InvalidImages):
        SessionService(repository).add_images(session.id, "user-1", ["ftp://x/y"])
