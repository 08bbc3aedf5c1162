"""Public schema exports."""

from .auth import AuthFailure, AuthOutcome, AuthSuccess, Session
from .library import (
    CatalogMetadata,
    Category,
    Game,
    KeyImage,
    LibraryEntry,
    LibraryItem,
    LibraryPage,
    RawAsset,
    ResponseMetadata,
    SyncCached,
    SyncError,
    SyncResult,
    SyncSuccess,
)

__all__ = [
    "AuthFailure",
    "AuthOutcome",
    "AuthSuccess",
    "CatalogMetadata",
    "Category",
    "Game",
    "KeyImage",
    "LibraryEntry",
    "LibraryItem",
    "LibraryPage",
    "RawAsset",
    "ResponseMetadata",
    "Session",
    "SyncCached",
    "SyncError",
    "SyncResult",
    "SyncSuccess",
]
