"""
FastAPI routes exposing login, session state, and the owned-game library.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from epic_library.dependencies import get_app_settings, get_library_sync_service
from epic_library.schemas import AuthSuccess, Game, SyncCached, SyncError
from epic_library.utils.errors import ErrorKind

router = APIRouter()
logger = logging.getLogger(__name__)


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "").lower()


def _serialize_games(games: list[Game]) -> list[dict]:
    return [game.model_dump(mode="json", by_alias=True) for game in games]


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/auth/epic/authorize", status_code=HTTPStatus.OK)
async def start_epic_login(
    request: Request,
    sync_service: Annotated[Any, Depends(get_library_sync_service)],
    redirect: bool = Query(
        default=False,
        description="When true, respond with a redirect to the Epic login page.",
    ),
) -> Response:
    """Return (or redirect to) the Epic Games login URL."""
    authorization_url = sync_service.authorization_url()
    if redirect or _wants_html(request):
        return RedirectResponse(url=authorization_url, status_code=HTTPStatus.TEMPORARY_REDIRECT)
    return JSONResponse(content={"authorization_url": authorization_url})


@router.get("/auth/epic/callback", status_code=HTTPStatus.OK)
async def handle_epic_callback(
    request: Request,
    sync_service: Annotated[Any, Depends(get_library_sync_service)],
    settings: Annotated[Any, Depends(get_app_settings)],
    code: str | None = Query(default=None, description="Authorization code from Epic."),
    error: str | None = Query(default=None, description="Error reported by the login page."),
) -> Response:
    """Complete the login redirect and report the signed-in account."""
    outcome = await sync_service.handle_redirect(code=code, error=error)
    if not isinstance(outcome, AuthSuccess):
        raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=outcome.message)

    result = {"status": "connected", "display_name": outcome.display_name}
    if settings.frontend_base_url and _wants_html(request):
        return RedirectResponse(
            url=str(settings.frontend_base_url), status_code=HTTPStatus.TEMPORARY_REDIRECT
        )
    return JSONResponse(content=result)


@router.get("/session", status_code=HTTPStatus.OK)
async def get_session_state(
    sync_service: Annotated[Any, Depends(get_library_sync_service)],
) -> dict:
    session = sync_service.token_session
    return {"logged_in": session.is_logged_in, "display_name": session.display_name}


@router.post("/auth/logout", status_code=HTTPStatus.OK)
async def logout(
    sync_service: Annotated[Any, Depends(get_library_sync_service)],
) -> dict:
    sync_service.logout()
    return {"status": "logged_out"}


@router.get("/library", status_code=HTTPStatus.OK)
async def get_library(
    sync_service: Annotated[Any, Depends(get_library_sync_service)],
    force_refresh: bool = Query(
        default=False, description="Skip the cache freshness check and sync now."
    ),
) -> dict:
    """Return the owned-game library, from cache when it is fresh."""
    result = await sync_service.fetch_library(force_refresh=force_refresh)

    if isinstance(result, SyncError):
        status_code = (
            HTTPStatus.UNAUTHORIZED
            if result.reason == ErrorKind.NOT_AUTHENTICATED
            else HTTPStatus.BAD_GATEWAY
        )
        raise HTTPException(status_code=status_code, detail=result.message)

    if isinstance(result, SyncCached):
        return {
            "status": "cached",
            "games": _serialize_games(result.games),
            "last_sync": result.last_sync.isoformat(),
        }

    return {"status": "success", "games": _serialize_games(result.games), "last_sync": None}


__all__ = ["router"]
