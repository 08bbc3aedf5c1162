"""Service layer exports."""

from .library_cache import CachedLibrary, LibraryCache
from .library_fetcher import LibraryFetcher
from .library_sync import LibrarySyncService
from .token_cipher import TokenCipherService
from .token_session import TokenSession

__all__ = [
    "CachedLibrary",
    "LibraryCache",
    "LibraryFetcher",
    "LibrarySyncService",
    "TokenCipherService",
    "TokenSession",
]
