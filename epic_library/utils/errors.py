"""Error taxonomy shared by the auth client, the fetcher, and the sync service."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Coarse classification surfaced alongside human-readable messages."""

    NETWORK = "network"
    HTTP_STATUS = "http_status"
    MALFORMED_RESPONSE = "malformed_response"
    NOT_AUTHENTICATED = "not_authenticated"
    UNKNOWN = "unknown"


class EpicLibraryError(Exception):
    """Base class for failures raised inside the sync pipeline."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NetworkError(EpicLibraryError):
    """Transport-level failure: timeout, DNS, connection reset."""

    kind = ErrorKind.NETWORK


class HttpStatusError(EpicLibraryError):
    """The server answered with a non-2xx status."""

    kind = ErrorKind.HTTP_STATUS

    def __init__(
        self, status_code: int, server_message: Optional[str] = None, *, context: str = "Request"
    ) -> None:
        message = f"{context} failed with HTTP {status_code}"
        if server_message:
            message = f"{message}: {server_message}"
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message


class MalformedResponseError(EpicLibraryError):
    """The response body did not match the expected schema."""

    kind = ErrorKind.MALFORMED_RESPONSE


def describe_error(exc: BaseException) -> str:
    """Return a short message suitable for showing to a user."""
    if isinstance(exc, EpicLibraryError):
        return exc.message
    return str(exc) or "Unknown error"


__all__ = [
    "EpicLibraryError",
    "ErrorKind",
    "HttpStatusError",
    "MalformedResponseError",
    "NetworkError",
    "describe_error",
]
