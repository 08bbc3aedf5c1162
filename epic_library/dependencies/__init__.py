"""Expose dependency helpers for FastAPI routers and scripts."""

from .clients import (
    get_credential_store,
    get_epic_oauth_client,
    get_library_cache,
    get_library_fetcher,
    get_library_sync_service,
    get_token_cipher_service,
    get_token_session,
)
from .config import get_app_settings

__all__ = [
    "get_app_settings",
    "get_credential_store",
    "get_epic_oauth_client",
    "get_library_cache",
    "get_library_fetcher",
    "get_library_sync_service",
    "get_token_cipher_service",
    "get_token_session",
]
