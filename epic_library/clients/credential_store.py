"""Encrypted credential storage backing the token session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Protocol

from epic_library.clients.sqlite_store import SQLiteStore

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from epic_library.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Opaque key-value persistence for the serialized session."""

    def get(self, key: str) -> Optional[bytes]: ...

    def put(self, key: str, value: bytes) -> None: ...

    def clear(self) -> None: ...


class EncryptedCredentialStore:
    """Credential store that encrypts every value at rest."""

    def __init__(self, store: SQLiteStore, cipher: "TokenCipherService") -> None:
        self._store = store
        self._cipher = cipher

    def get(self, key: str) -> Optional[bytes]:
        ciphertext = self._store.get(key)
        if ciphertext is None:
            return None
        try:
            return self._cipher.decrypt(ciphertext)
        except ValueError:
            # A rotated secret leaves an unreadable record; treat it as absent.
            logger.warning("Stored credential %r could not be decrypted; ignoring it", key)
            return None

    def put(self, key: str, value: bytes) -> None:
        self._store.put(key, self._cipher.encrypt(value))

    def clear(self) -> None:
        self._store.clear()


__all__ = ["CredentialStore", "EncryptedCredentialStore"]
