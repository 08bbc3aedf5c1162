"""
Lifecycle of the Epic Games session: restore, expiry checks, refresh, logout.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import ValidationError

from epic_library.clients.credential_store import CredentialStore
from epic_library.clients.epic_auth import EpicOAuthClient
from epic_library.schemas.auth import AuthFailure, AuthOutcome, AuthSuccess, Session

logger = logging.getLogger(__name__)


class TokenSession:
    """Owns the live credential and persists every successful exchange."""

    STORAGE_KEY = "user_data"
    DEFAULT_EXPIRY_SKEW = timedelta(minutes=10)

    def __init__(
        self,
        credential_store: CredentialStore,
        oauth_client: EpicOAuthClient,
        *,
        expiry_skew: timedelta = DEFAULT_EXPIRY_SKEW,
    ) -> None:
        self._store = credential_store
        self._oauth = oauth_client
        self._skew = expiry_skew
        self._session: Optional[Session] = None
        self._generation = 0
        self._refresh_lock = asyncio.Lock()

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def generation(self) -> int:
        """Bumped on every logout; results started before one are stale."""
        return self._generation

    @property
    def is_logged_in(self) -> bool:
        return self._session is not None

    @property
    def display_name(self) -> Optional[str]:
        return self._session.display_name if self._session else None

    @property
    def access_token(self) -> Optional[str]:
        return self._session.access_token if self._session else None

    def authorization_url(self) -> str:
        return self._oauth.build_authorization_url()

    @staticmethod
    def is_expired(
        session: Optional[Session],
        now: Optional[datetime] = None,
        skew: timedelta = DEFAULT_EXPIRY_SKEW,
    ) -> bool:
        """True when ``session`` expires within ``skew``; unparsable expiry counts as expired."""
        if session is None:
            return True
        expiry = session.expiry()
        if expiry is None:
            return True
        now = now or datetime.now(timezone.utc)
        return now > expiry - skew

    async def restore(self) -> bool:
        """Load the persisted session, refreshing it when it has expired."""
        blob = self._store.get(self.STORAGE_KEY)
        if blob is None:
            return False

        try:
            stored = Session.from_bytes(blob)
        except ValidationError:
            logger.warning("Persisted session is unreadable; staying logged out")
            return False

        if self.is_expired(stored, skew=self._skew):
            logger.info("Persisted session expired, attempting refresh")
            return await self._refresh_from(stored)

        self._session = stored
        logger.info("Session restored for %s", stored.display_name)
        return True

    async def refresh(self) -> bool:
        """Refresh the live session. On failure the live session is left as is."""
        current = self._session
        if current is None:
            return False
        return await self._refresh_from(current)

    async def ensure_access_token(self) -> Optional[str]:
        """Return a non-expired access token, refreshing if needed."""
        current = self._session
        if current is None:
            return None
        if self.is_expired(current, skew=self._skew):
            if not await self._refresh_from(current):
                return None
        return self.access_token

    async def exchange_auth_code(self, code: str) -> AuthOutcome:
        """Complete login with an authorization code."""
        generation = self._generation
        async with self._refresh_lock:
            outcome = await self._oauth.exchange_authorization_code(code)
            if isinstance(outcome, AuthSuccess):
                if not self._adopt(outcome.session, generation):
                    return AuthFailure(message="Logged out during login")
                logger.info("Authenticated as %s", outcome.display_name)
        return outcome

    def logout(self) -> None:
        # Clear storage first; if that raises the live session survives too.
        self._store.clear()
        self._session = None
        self._generation += 1
        logger.info("Logged out")

    async def _refresh_from(self, stale: Session) -> bool:
        generation = self._generation
        async with self._refresh_lock:
            current = self._session
            if (
                current is not None
                and current is not stale
                and not self.is_expired(current, skew=self._skew)
            ):
                # Another caller refreshed while this one waited on the lock.
                return True

            outcome = await self._oauth.exchange_refresh_token(stale.refresh_token)
            if not isinstance(outcome, AuthSuccess):
                logger.error("Token refresh failed: %s", outcome.message)
                return False

            if not self._adopt(outcome.session, generation):
                return False
            logger.info("Token refreshed for %s", outcome.display_name)
            return True

    def _adopt(self, session: Session, generation: int) -> bool:
        if generation != self._generation:
            logger.info("Discarding credential issued before logout")
            return False
        self._store.put(self.STORAGE_KEY, session.to_bytes())
        self._session = session
        return True


__all__ = ["TokenSession"]
