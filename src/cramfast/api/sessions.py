"""Session and generation endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, Request, status

from cramfast.api.schemas import (
    AddImagesRequest,
    CreateSessionRequest,
    GenerationOut,
    SessionOut,
)
from cramfast.domain.errors import Unauthenticated

if TYPE_CHECKING:
    from cramfast.containers import AppContainer

router = APIRouter(prefix="/sessions", tags=["sessions"])


async def require_user(x_user_id: str | None = Header(default=None)) -> str:
    """Return the caller identity or reject the request."""
    if not x_user_id or not x_user_id.strip():
        raise Unauthenticated("Missing X-User-Id header")
    return x_user_id.strip()


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    body: CreateSessionRequest,
    request: Request,
    user_id: str = Depends(require_user),
) -> SessionOut:
    """Create an empty pending session."""
    record = _container(request).session_service.create_session(user_id, body.title)
    return SessionOut.from_record(record)


@router.get("")
async def list_sessions(
    request: Request, user_id: str = Depends(require_user)
) -> dict[str, list[SessionOut]]:
    """List the caller's sessions, newest first."""
    records = _container(request).session_service.list_sessions(user_id)
    return {"sessions": [SessionOut.from_record(record) for record in records]}


@router.get("/{session_id}")
async def get_session(
    session_id: UUID, request: Request, user_id: str = Depends(require_user)
) -> SessionOut:
    """Return one session owned by the caller."""
    record = _container(request).session_service.get_session(session_id, user_id)
    return SessionOut.from_record(record)


@router.post("/{session_id}/images")
async def add_images(
    session_id: UUID,
    body: AddImagesRequest,
    request: Request,
    user_id: str = Depends(require_user),
) -> SessionOut:
    """Append uploaded image URLs to a session."""
    record = _container(request).session_service.add_images(
        session_id, user_id, body.image_urls
    )
    return SessionOut.from_record(record)


@router.post("/{session_id}/generate")
async def generate(
    session_id: UUID, request: Request, user_id: str = Depends(require_user)
) -> GenerationOut:
    """Run the generation pipeline for a session."""
    result = await _container(request).generation_service.generate(
        session_id, user_id
    )
    return GenerationOut.from_result(result)
