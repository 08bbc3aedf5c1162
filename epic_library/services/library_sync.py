"""
Orchestrates the session, the fetcher, and the cache behind ``fetch_library``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from epic_library.schemas.auth import AuthFailure, AuthOutcome
from epic_library.schemas.library import SyncCached, SyncError, SyncResult, SyncSuccess
from epic_library.services.library_cache import LibraryCache
from epic_library.services.library_fetcher import LibraryFetcher
from epic_library.services.token_session import TokenSession
from epic_library.utils.errors import ErrorKind, describe_error

logger = logging.getLogger(__name__)


class LibrarySyncService:
    """Decide between cached, fresh, and degraded library results."""

    def __init__(
        self,
        token_session: TokenSession,
        fetcher: LibraryFetcher,
        cache: LibraryCache,
        *,
        cache_ttl: timedelta = timedelta(hours=6),
    ) -> None:
        self._session = token_session
        self._fetcher = fetcher
        self._cache = cache
        self._cache_ttl = cache_ttl

    @property
    def token_session(self) -> TokenSession:
        return self._session

    async def restore_session(self) -> bool:
        return await self._session.restore()

    def authorization_url(self) -> str:
        return self._session.authorization_url()

    async def authenticate(self, code: str) -> AuthOutcome:
        try:
            return await self._session.exchange_auth_code(code)
        except Exception as exc:
            logger.exception("Failed to complete login")
            return AuthFailure(message=f"Login failed: {describe_error(exc)}")

    async def handle_redirect(
        self, *, code: Optional[str] = None, error: Optional[str] = None
    ) -> AuthOutcome:
        """Complete a login redirect carrying either ``code`` or ``error``."""
        if code:
            return await self.authenticate(code)
        if error:
            return AuthFailure(message=f"Login cancelled or failed: {error}")
        return AuthFailure(
            message="Invalid response from Epic Games",
            kind=ErrorKind.MALFORMED_RESPONSE,
        )

    def logout(self) -> None:
        """Forget the session and the cached library that belonged to it."""
        self._session.logout()
        self._cache.clear()

    async def fetch_library(self, force_refresh: bool = False) -> SyncResult:
        """Return cached games while fresh, otherwise sync and fall back to any cache."""
        if not force_refresh:
            snapshot = self._cache.read()
            if snapshot is not None and self._cache.is_fresh(snapshot, self._cache_ttl):
                logger.info("Using cached library (%d games)", len(snapshot.games))
                return SyncCached(games=snapshot.games, last_sync=snapshot.last_sync)

        generation = self._session.generation
        try:
            access_token = await self._session.ensure_access_token()
            if access_token is None:
                return SyncError(message="Not authenticated", reason=ErrorKind.NOT_AUTHENTICATED)

            logger.info("Fetching library from Epic Games")
            games = await self._fetcher.fetch_library(access_token)
        except Exception as exc:
            logger.exception("Failed to fetch library")
            return self._fallback(exc)

        if self._session.generation != generation:
            logger.info("Logged out during sync; discarding fetched library")
            return SyncError(message="Not authenticated", reason=ErrorKind.NOT_AUTHENTICATED)

        try:
            self._cache.write(games, datetime.now(timezone.utc))
        except Exception:
            logger.exception("Failed to cache library")
        logger.info("Fetched %d games", len(games))
        return SyncSuccess(games=games)

    def _fallback(self, exc: Exception) -> SyncResult:
        snapshot = self._cache.read()
        if snapshot is not None:
            logger.info("Serving stale cache from %s", snapshot.last_sync.isoformat())
            return SyncCached(games=snapshot.games, last_sync=snapshot.last_sync)
        reason = getattr(exc, "kind", ErrorKind.UNKNOWN)
        return SyncError(message=describe_error(exc), reason=reason)


__all__ = ["LibrarySyncService"]
