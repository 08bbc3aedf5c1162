"""HTTP utilities that map httpx outcomes onto the pipeline error taxonomy."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from epic_library.core.config import HttpSettings
from epic_library.utils.errors import HttpStatusError, MalformedResponseError, NetworkError


def build_timeout(settings: HttpSettings) -> httpx.Timeout:
    """Connect/read timeouts enforced by the transport, never by the caller."""
    return httpx.Timeout(settings.read_timeout, connect=settings.connect_timeout)


def bearer_headers(access_token: str) -> Dict[str, str]:
    return {"Authorization": f"bearer {access_token}"}


async def send_request(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    context: str = "Request",
    raise_for_status: bool = True,
    **kwargs,
) -> httpx.Response:
    """
    Issue a request and normalize failures.

    Transport problems become ``NetworkError``; a non-2xx answer becomes
    ``HttpStatusError`` unless ``raise_for_status`` is false, in which case the
    caller inspects the response itself.
    """
    try:
        response = await func(*args, **kwargs)
    except httpx.RequestError as exc:
        detail = str(exc) or exc.__class__.__name__
        raise NetworkError(f"{context} failed: {detail}") from exc

    if raise_for_status and not response.is_success:
        raise HttpStatusError(
            response.status_code, _server_message(response), context=context
        )
    return response


def _server_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("errorMessage"), str):
        return body["errorMessage"]
    return None


def parse_json(response: httpx.Response, *, context: str = "Response") -> Any:
    """Decode a JSON body or raise ``MalformedResponseError``."""
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponseError(f"{context} is not valid JSON") from exc


__all__ = ["bearer_headers", "build_timeout", "parse_json", "send_request"]
