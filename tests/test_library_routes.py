try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import copy
from datetime import datetime, timezone

import httpx
import pytest

from epic_library.main import app
from epic_library.schemas import (
    AuthFailure,
    AuthSuccess,
    Game,
    Session,
    SyncCached,
    SyncError,
    SyncSuccess,
)
from epic_library.utils.errors import ErrorKind


def _session() -> Session:
    return Session(
        access_token="access",
        refresh_token="refresh",
        expires_at="2030-01-01T00:00:00.000Z",
        account_id="account-1",
        display_name="Player One",
    )


class DummyTokenSession:
    def __init__(self) -> None:
        self.is_logged_in = False
        self.display_name = None


class DummySyncService:
    def __init__(self) -> None:
        self.token_session = DummyTokenSession()
        self.result = SyncSuccess(games=[])
        self.force_flags: list[bool] = []
        self.redirects: list[tuple] = []
        self.logged_out = False

    def authorization_url(self) -> str:
        return "https://www.epicgames.com/id/api/redirect?clientId=client&responseType=code"

    async def handle_redirect(self, *, code=None, error=None):
        self.redirects.append((code, error))
        if code == "good":
            self.token_session.is_logged_in = True
            self.token_session.display_name = "Player One"
            return AuthSuccess(session=_session())
        if error:
            return AuthFailure(message=f"Login cancelled or failed: {error}")
        return AuthFailure(message="Sorry the authorization code you supplied was not found.")

    def logout(self) -> None:
        self.logged_out = True

    async def fetch_library(self, force_refresh: bool = False):
        self.force_flags.append(force_refresh)
        return self.result


@pytest.fixture()
def overrides():
    from epic_library import dependencies
    from epic_library.core.config import get_settings

    service = DummySyncService()
    settings = copy.deepcopy(get_settings())
    settings.frontend_base_url = None

    app.dependency_overrides.update(
        {
            dependencies.get_library_sync_service: lambda: service,
            dependencies.get_app_settings: lambda: settings,
        }
    )

    yield service, settings

    app.dependency_overrides.clear()


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


@pytest.mark.anyio
async def test_authorize_returns_json_by_default(overrides):
    async with _client() as client:
        response = await client.get("/api/auth/epic/authorize")

    assert response.status_code == 200
    assert response.json()["authorization_url"].startswith("https://www.epicgames.com/")


@pytest.mark.anyio
async def test_authorize_redirects_for_html_accept(overrides):
    async with _client() as client:
        response = await client.get(
            "/api/auth/epic/authorize", headers={"accept": "text/html"}
        )

    assert response.status_code == 307
    assert response.headers["location"].startswith("https://www.epicgames.com/id/api/redirect")


@pytest.mark.anyio
async def test_callback_with_code_connects(overrides):
    service, _ = overrides

    async with _client() as client:
        callback = await client.get("/api/auth/epic/callback", params={"code": "good"})
        state = await client.get("/api/session")

    assert callback.status_code == 200
    assert callback.json() == {"status": "connected", "display_name": "Player One"}
    assert service.redirects == [("good", None)]
    assert state.json() == {"logged_in": True, "display_name": "Player One"}


@pytest.mark.anyio
async def test_callback_redirects_to_frontend_for_html(overrides):
    _, settings = overrides
    settings.frontend_base_url = "https://app.example.com/library"

    async with _client() as client:
        response = await client.get(
            "/api/auth/epic/callback",
            params={"code": "good"},
            headers={"accept": "text/html"},
        )

    assert response.status_code == 307
    assert response.headers["location"] == "https://app.example.com/library"


@pytest.mark.anyio
async def test_callback_error_is_bad_request(overrides):
    async with _client() as client:
        response = await client.get("/api/auth/epic/callback", params={"error": "access_denied"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Login cancelled or failed: access_denied"


@pytest.mark.anyio
async def test_library_success_and_cached_payloads(overrides):
    service, _ = overrides
    game = Game(app_name="Sugar", title="Rocket League", namespace="sugar", catalog_item_id="c")

    service.result = SyncSuccess(games=[game])
    async with _client() as client:
        fresh = await client.get("/api/library", params={"force_refresh": "true"})

    synced = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    service.result = SyncCached(games=[game], last_sync=synced)
    async with _client() as client:
        cached = await client.get("/api/library")

    assert fresh.status_code == 200
    assert fresh.json()["status"] == "success"
    assert fresh.json()["games"][0]["appName"] == "Sugar"
    assert fresh.json()["games"][0]["isDLC"] is False
    assert cached.json()["status"] == "cached"
    assert cached.json()["last_sync"] == synced.isoformat()
    assert service.force_flags == [True, False]


@pytest.mark.anyio
async def test_library_errors_map_to_status_codes(overrides):
    service, _ = overrides

    service.result = SyncError(message="Not authenticated", reason=ErrorKind.NOT_AUTHENTICATED)
    async with _client() as client:
        unauthenticated = await client.get("/api/library")

    service.result = SyncError(message="Library request failed with HTTP 500", reason=ErrorKind.HTTP_STATUS)
    async with _client() as client:
        upstream = await client.get("/api/library")

    assert unauthenticated.status_code == 401
    assert upstream.status_code == 502
    assert upstream.json()["detail"] == "Library request failed with HTTP 500"


@pytest.mark.anyio
async def test_logout(overrides):
    service, _ = overrides

    async with _client() as client:
        response = await client.post("/api/auth/logout")

    assert response.json() == {"status": "logged_out"}
    assert service.logged_out is True
