"""Expose constructed client wrappers."""

from .credential_store import CredentialStore, EncryptedCredentialStore
from .epic_auth import EpicOAuthClient
from .sqlite_store import SQLiteStore

__all__ = [
    "CredentialStore",
    "EncryptedCredentialStore",
    "EpicOAuthClient",
    "SQLiteStore",
]
