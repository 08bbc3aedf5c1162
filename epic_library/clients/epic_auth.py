"""
Epic Games OAuth utilities.

Builds the login URL and performs the authorization-code and refresh-token
exchanges against the account service.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from epic_library.core.config import EpicSettings, HttpSettings
from epic_library.schemas.auth import AuthFailure, AuthOutcome, AuthSuccess, Session
from epic_library.utils.errors import ErrorKind, NetworkError
from epic_library.utils.http import build_timeout, send_request

logger = logging.getLogger(__name__)


class EpicOAuthClient:
    """Stateless client for the Epic account token endpoint."""

    TOKEN_PATH = "/account/api/oauth/token"
    TOKEN_TYPE = "eg1"

    def __init__(
        self,
        epic_settings: EpicSettings,
        http_settings: Optional[HttpSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._epic = epic_settings
        self._timeout = build_timeout(http_settings or HttpSettings())
        self._transport = transport

    @property
    def token_url(self) -> str:
        return f"https://{self._epic.oauth_host}{self.TOKEN_PATH}"

    def build_authorization_url(self) -> str:
        """Construct the login URL that redirects back with ``code``."""
        query = urlencode({"clientId": self._epic.client_id, "responseType": "code"})
        return f"{self._epic.authorize_url}?{query}"

    async def exchange_authorization_code(self, code: str) -> AuthOutcome:
        """Exchange a one-time authorization code for a session."""
        return await self._request_token(
            {"grant_type": "authorization_code", "code": code},
            failure_prefix="Authentication failed",
        )

    async def exchange_refresh_token(self, refresh_token: str) -> AuthOutcome:
        """Trade a refresh token for a new session."""
        return await self._request_token(
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            failure_prefix="Token refresh failed",
        )

    async def _request_token(self, form: Dict[str, str], *, failure_prefix: str) -> AuthOutcome:
        payload = {**form, "token_type": self.TOKEN_TYPE}
        auth = httpx.BasicAuth(self._epic.client_id, self._epic.client_secret)

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await send_request(
                    client.post,
                    self.token_url,
                    data=payload,
                    auth=auth,
                    context="Token request",
                    raise_for_status=False,
                )
        except NetworkError as exc:
            logger.warning("Token request (%s) failed: %s", form["grant_type"], exc)
            return AuthFailure(message=exc.message, kind=ErrorKind.NETWORK)

        if not response.is_success:
            message = self._error_description(response) or (
                f"{failure_prefix} ({response.status_code})"
            )
            logger.error(
                "Token request (%s) rejected with HTTP %s",
                form["grant_type"],
                response.status_code,
            )
            return AuthFailure(
                message=message,
                kind=ErrorKind.HTTP_STATUS,
                status_code=response.status_code,
            )

        try:
            session = Session.model_validate_json(response.content)
        except ValidationError:
            logger.error("Token endpoint returned an incomplete session payload")
            return AuthFailure(
                message="Incomplete token payload returned from Epic Games.",
                kind=ErrorKind.MALFORMED_RESPONSE,
            )

        return AuthSuccess(session=session)

    @staticmethod
    def _error_description(response: httpx.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if not isinstance(body, dict):
            return None
        description = body.get("error_description")
        if isinstance(description, str) and description:
            return description
        return None


__all__ = ["EpicOAuthClient"]
