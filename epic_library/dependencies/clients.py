"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from datetime import timedelta
from functools import lru_cache

from epic_library.clients import EncryptedCredentialStore, EpicOAuthClient, SQLiteStore
from epic_library.core.config import get_settings
from epic_library.services import (
    LibraryCache,
    LibraryFetcher,
    LibrarySyncService,
    TokenCipherService,
    TokenSession,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for session storage."""
    settings = _settings()
    secret = settings.storage.token_encryption_secret or settings.epic.client_secret
    return TokenCipherService(secret=secret)


@lru_cache()
def get_credential_store() -> EncryptedCredentialStore:
    """Provide the encrypted store holding the serialized session."""
    settings = _settings()
    return EncryptedCredentialStore(
        SQLiteStore(settings.storage.db_path, namespace="credentials"),
        get_token_cipher_service(),
    )


@lru_cache()
def get_library_cache() -> LibraryCache:
    """Provide the cache of the last successful library sync."""
    settings = _settings()
    return LibraryCache(SQLiteStore(settings.storage.db_path, namespace="library"))


@lru_cache()
def get_epic_oauth_client() -> EpicOAuthClient:
    """Create a shared Epic OAuth client."""
    settings = _settings()
    return EpicOAuthClient(settings.epic, settings.http)


@lru_cache()
def get_token_session() -> TokenSession:
    """Provide the process-wide token session."""
    settings = _settings()
    return TokenSession(
        get_credential_store(),
        get_epic_oauth_client(),
        expiry_skew=timedelta(minutes=settings.sync.token_expiry_skew_minutes),
    )


@lru_cache()
def get_library_fetcher() -> LibraryFetcher:
    """Provide the library aggregation client."""
    settings = _settings()
    return LibraryFetcher(
        settings.epic,
        settings.http,
        max_pages=settings.sync.max_library_pages,
        metadata_concurrency=settings.sync.metadata_concurrency,
    )


@lru_cache()
def get_library_sync_service() -> LibrarySyncService:
    """Provide the library sync orchestrator."""
    settings = _settings()
    return LibrarySyncService(
        token_session=get_token_session(),
        fetcher=get_library_fetcher(),
        cache=get_library_cache(),
        cache_ttl=timedelta(hours=settings.sync.cache_ttl_hours),
    )


__all__ = [
    "get_credential_store",
    "get_epic_oauth_client",
    "get_library_cache",
    "get_library_fetcher",
    "get_library_sync_service",
    "get_token_cipher_service",
    "get_token_session",
]
