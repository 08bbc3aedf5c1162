"""Command-line front end for signing in and syncing the Epic Games library.

Example usages::

    # Print the login URL, open it in a browser, then paste the returned code.
    python -m scripts.sync_library authorize-url
    python -m scripts.sync_library login 3f0c...e1

    # Show the library, serving the cache while it is fresh.
    python -m scripts.sync_library sync
    python -m scripts.sync_library sync --force
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, Optional

from epic_library.core.config import get_settings
from epic_library.core.logging import configure_logging
from epic_library.dependencies import get_library_sync_service
from epic_library.schemas import AuthSuccess, SyncCached, SyncError
from epic_library.utils.errors import ErrorKind

EXIT_OK = 0
EXIT_AUTH_ERROR = 2
EXIT_SYNC_ERROR = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sign in to Epic Games and sync the owned-game library."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("authorize-url", help="Print the Epic Games login URL.")

    login_parser = subparsers.add_parser(
        "login", help="Exchange an authorization code for a session."
    )
    login_parser.add_argument("code", help="Authorization code from the login redirect.")

    sync_parser = subparsers.add_parser("sync", help="Print the owned-game library.")
    sync_parser.add_argument(
        "--force",
        action="store_true",
        help="Ignore a fresh cache and fetch from Epic Games.",
    )

    subparsers.add_parser("status", help="Show whether a session is stored.")
    subparsers.add_parser("logout", help="Forget the session and the cached library.")
    return parser


async def _login(service: Any, code: str) -> int:
    outcome = await service.authenticate(code)
    if not isinstance(outcome, AuthSuccess):
        print(f"Login failed: {outcome.message}", file=sys.stderr)
        return EXIT_AUTH_ERROR
    print(f"Welcome, {outcome.display_name}!")
    return EXIT_OK


async def _sync(service: Any, force: bool) -> int:
    await service.restore_session()
    result = await service.fetch_library(force_refresh=force)
    if isinstance(result, SyncError):
        print(f"Failed to load library: {result.message}", file=sys.stderr)
        return EXIT_AUTH_ERROR if result.reason == ErrorKind.NOT_AUTHENTICATED else EXIT_SYNC_ERROR

    for game in result.games:
        developer = f" ({game.developer})" if game.developer else ""
        print(f"{game.title}{developer}")

    if isinstance(result, SyncCached):
        print(
            f"{len(result.games)} games (cached {result.last_sync.isoformat()})",
            file=sys.stderr,
        )
    else:
        print(f"{len(result.games)} games", file=sys.stderr)
    return EXIT_OK


async def _status(service: Any) -> int:
    if await service.restore_session():
        print(f"Logged in as {service.token_session.display_name}")
    else:
        print("Not logged in")
    return EXIT_OK


def main(argv: list[str] | None = None, *, service: Optional[Any] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if service is None:
        configure_logging(get_settings().log_level)
        service = get_library_sync_service()

    command: str = args.command
    if command == "authorize-url":
        print(service.authorization_url())
        return EXIT_OK
    if command == "logout":
        service.logout()
        print("Logged out.")
        return EXIT_OK
    if command == "login":
        return asyncio.run(_login(service, args.code))
    if command == "sync":
        return asyncio.run(_sync(service, args.force))
    return asyncio.run(_status(service))


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
