"""
Pydantic models for the owned-game library.

Wire models mirror the Epic launcher, library, and catalog payloads; ``Game`` is
the merged entity persisted in the cache and returned to front ends.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from epic_library.utils.errors import ErrorKind


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RawAsset(_WireModel):
    """Entry of the launcher asset list."""

    app_name: str = Field(..., alias="appName")
    label_name: str = Field(..., alias="labelName")
    build_version: str = Field(..., alias="buildVersion")
    namespace: str
    catalog_item_id: str = Field(..., alias="catalogItemId")


class LibraryItem(_WireModel):
    """Entitlement record from the paginated library endpoint."""

    app_name: str = Field(..., alias="appName")
    namespace: str
    catalog_item_id: str = Field(..., alias="catalogItemId")
    sandbox_type: Optional[str] = Field(None, alias="sandboxType")


class ResponseMetadata(_WireModel):
    next_cursor: Optional[str] = Field(None, alias="nextCursor")


class LibraryPage(_WireModel):
    """Envelope of one library page. Records stay loose so each can fail alone."""

    records: Optional[List[Any]] = None
    response_metadata: Optional[ResponseMetadata] = Field(None, alias="responseMetadata")

    @property
    def next_cursor(self) -> Optional[str]:
        if self.response_metadata is None:
            return None
        return self.response_metadata.next_cursor or None


@dataclass(frozen=True, slots=True)
class LibraryEntry:
    """Identity shape shared by assets and library items before enrichment."""

    app_name: str
    namespace: str
    catalog_item_id: str
    sandbox_type: Optional[str] = None
    build_version: Optional[str] = None

    @classmethod
    def from_asset(cls, asset: RawAsset) -> "LibraryEntry":
        return cls(
            app_name=asset.app_name,
            namespace=asset.namespace,
            catalog_item_id=asset.catalog_item_id,
            build_version=asset.build_version,
        )

    @classmethod
    def from_library_item(
        cls, item: LibraryItem, build_version: Optional[str] = None
    ) -> "LibraryEntry":
        return cls(
            app_name=item.app_name,
            namespace=item.namespace,
            catalog_item_id=item.catalog_item_id,
            sandbox_type=item.sandbox_type,
            build_version=build_version,
        )


class KeyImage(_WireModel):
    type: str
    url: str


class Category(_WireModel):
    path: Optional[str] = None


_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _valid_entries(model: Type[_ModelT], value: Any) -> Optional[List[_ModelT]]:
    """Keep the list elements that parse as ``model``; a non-list reads as absent."""
    if not isinstance(value, list):
        return None
    entries: List[_ModelT] = []
    for raw in value:
        try:
            entries.append(model.model_validate(raw))
        except ValidationError:
            continue
    return entries


class CatalogMetadata(_WireModel):
    """One item of the catalog bulk lookup. Every field is optional."""

    title: Optional[str] = None
    description: Optional[str] = None
    developer: Optional[str] = None
    key_images: Optional[List[KeyImage]] = Field(None, alias="keyImages")
    categories: Optional[List[Category]] = None

    @field_validator("key_images", mode="before")
    @classmethod
    def _drop_bad_images(cls, value: Any) -> Optional[List[KeyImage]]:
        return _valid_entries(KeyImage, value)

    @field_validator("categories", mode="before")
    @classmethod
    def _drop_bad_categories(cls, value: Any) -> Optional[List[Category]]:
        return _valid_entries(Category, value)

    @property
    def is_dlc(self) -> bool:
        return any(category.path == "addons" for category in self.categories or [])


class Game(_WireModel):
    """A library entry enriched with catalog metadata."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    app_name: str = Field(..., alias="appName")
    title: str
    namespace: str
    catalog_item_id: str = Field(..., alias="catalogItemId")
    build_version: Optional[str] = Field(None, alias="buildVersion")
    description: Optional[str] = None
    developer: Optional[str] = None
    key_images: Optional[List[KeyImage]] = Field(None, alias="keyImages")
    is_dlc: bool = Field(False, alias="isDLC")
    platform: str = "Windows"

    @classmethod
    def shell(cls, entry: LibraryEntry, *, platform: str = "Windows") -> "Game":
        """Pre-metadata game: the title falls back to the app name."""
        return cls(
            app_name=entry.app_name,
            title=entry.app_name,
            namespace=entry.namespace,
            catalog_item_id=entry.catalog_item_id,
            build_version=entry.build_version,
            platform=platform,
        )

    def with_metadata(self, metadata: CatalogMetadata) -> "Game":
        return self.model_copy(
            update={
                "title": metadata.title or self.title,
                "description": metadata.description,
                "developer": metadata.developer,
                "key_images": metadata.key_images,
                "is_dlc": metadata.is_dlc,
            }
        )


@dataclass(frozen=True, slots=True)
class SyncSuccess:
    games: List[Game]


@dataclass(frozen=True, slots=True)
class SyncCached:
    games: List[Game]
    last_sync: datetime


@dataclass(frozen=True, slots=True)
class SyncError:
    message: str
    reason: ErrorKind = ErrorKind.UNKNOWN


SyncResult = Union[SyncSuccess, SyncCached, SyncError]


__all__ = [
    "CatalogMetadata",
    "Category",
    "Game",
    "KeyImage",
    "LibraryEntry",
    "LibraryItem",
    "LibraryPage",
    "RawAsset",
    "ResponseMetadata",
    "SyncCached",
    "SyncError",
    "SyncResult",
    "SyncSuccess",
]
