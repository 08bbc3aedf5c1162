"""
FastAPI application entrypoint for the Epic Games library viewer.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from epic_library.api.routes import router as api_router
from epic_library.core.config import get_settings
from epic_library.core.logging import configure_logging
from epic_library.dependencies import get_library_sync_service


@asynccontextmanager
async def _lifespan(app: FastAPI):
    # Pick up a session persisted by an earlier run.
    await get_library_sync_service().restore_session()
    yield


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Epic Games Library Viewer",
        version="0.1.0",
        description="Sign in with Epic Games and browse the owned-game library.",
        lifespan=_lifespan,
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
