"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cramfast.api.schemas import ErrorOut
from cramfast.api.sessions import router as sessions_router
from cramfast.app_logging import configure_logging
from cramfast.containers import AppContainer
from cramfast.domain.errors import CramfastError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(sessions_router)

    @app.exception_handler(CramfastError)
    async def handle_cramfast_error(
        request: Request, exc: CramfastError
    ) -> JSONResponse:
        logger.info(
            "Request failed with %s",
            exc.code,
            extra={"path": request.url.path},
        )
        payload = ErrorOut(error=exc.code, detail=exc.message)
        return JSONResponse(status_code=exc.status_code, content=payload.model_dump())

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
