"""Schemas related to the OAuth session lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from epic_library.utils.errors import ErrorKind


class Session(BaseModel):
    """Token pair and account identity returned by the token endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)
    expires_at: str = Field(
        ..., description="Absolute expiry, ISO-8601 in UTC with milliseconds."
    )
    account_id: str
    display_name: str = Field(..., alias="displayName")

    def expiry(self) -> Optional[datetime]:
        """Parse ``expires_at``; ``None`` when it cannot be interpreted."""
        try:
            parsed = datetime.fromisoformat(self.expires_at)
        except (TypeError, ValueError):
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def to_bytes(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_bytes(cls, blob: bytes) -> "Session":
        return cls.model_validate_json(blob)


@dataclass(frozen=True, slots=True)
class AuthSuccess:
    session: Session

    @property
    def display_name(self) -> str:
        return self.session.display_name


@dataclass(frozen=True, slots=True)
class AuthFailure:
    message: str
    kind: ErrorKind = ErrorKind.UNKNOWN
    status_code: Optional[int] = None


AuthOutcome = Union[AuthSuccess, AuthFailure]


__all__ = ["AuthFailure", "AuthOutcome", "AuthSuccess", "Session"]
