"""Tests for the library sync command-line front end."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from epic_library.schemas import AuthFailure, AuthSuccess, Game, Session, SyncCached, SyncError
from epic_library.utils.errors import ErrorKind
from scripts import sync_library


class FakeTokenSession:
    display_name = "Player One"


class FakeService:
    def __init__(self, *, result=None, restored: bool = True) -> None:
        self.result = result
        self.restored = restored
        self.token_session = FakeTokenSession()
        self.logged_out = False
        self.force_flags: list[bool] = []

    def authorization_url(self) -> str:
        return "https://www.epicgames.com/id/api/redirect?clientId=client&responseType=code"

    async def restore_session(self) -> bool:
        return self.restored

    async def authenticate(self, code: str):
        if code == "good":
            return AuthSuccess(
                session=Session(
                    access_token="a",
                    refresh_token="r",
                    expires_at="2030-01-01T00:00:00.000Z",
                    account_id="id",
                    display_name="Player One",
                )
            )
        return AuthFailure(message="Sorry the authorization code you supplied was not found.")

    async def fetch_library(self, force_refresh: bool = False):
        self.force_flags.append(force_refresh)
        return self.result

    def logout(self) -> None:
        self.logged_out = True


def test_authorize_url_prints_login_link(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = sync_library.main(["authorize-url"], service=FakeService())

    assert exit_code == sync_library.EXIT_OK
    assert "responseType=code" in capsys.readouterr().out


@pytest.mark.parametrize(
    ("code", "expected"),
    [("good", sync_library.EXIT_OK), ("bad", sync_library.EXIT_AUTH_ERROR)],
)
def test_login_exit_codes(code: str, expected: int) -> None:
    assert sync_library.main(["login", code], service=FakeService()) == expected


def test_sync_lists_cached_games(capsys: pytest.CaptureFixture[str]) -> None:
    games = [
        Game(app_name="a", title="Alpha", namespace="ns", catalog_item_id="1", developer="Studio"),
        Game(app_name="b", title="beta", namespace="ns", catalog_item_id="2"),
    ]
    service = FakeService(
        result=SyncCached(games=games, last_sync=datetime(2026, 1, 1, tzinfo=timezone.utc))
    )

    exit_code = sync_library.main(["sync", "--force"], service=service)

    captured = capsys.readouterr()
    assert exit_code == sync_library.EXIT_OK
    assert captured.out.splitlines() == ["Alpha (Studio)", "beta"]
    assert "cached" in captured.err
    assert service.force_flags == [True]


@pytest.mark.parametrize(
    ("reason", "expected"),
    [
        (ErrorKind.NOT_AUTHENTICATED, sync_library.EXIT_AUTH_ERROR),
        (ErrorKind.NETWORK, sync_library.EXIT_SYNC_ERROR),
    ],
)
def test_sync_error_exit_codes(reason: ErrorKind, expected: int) -> None:
    service = FakeService(result=SyncError(message="boom", reason=reason))

    assert sync_library.main(["sync"], service=service) == expected


def test_status_and_logout(capsys: pytest.CaptureFixture[str]) -> None:
    service = FakeService(restored=False)

    sync_library.main(["status"], service=service)
    sync_library.main(["logout"], service=service)

    output = capsys.readouterr().out
    assert "Not logged in" in output
    assert service.logged_out is True
