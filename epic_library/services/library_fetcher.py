"""
Aggregate a user's owned games from the launcher, library, and catalog services.

A fetch runs three stages: the launcher asset list, the cursor-paginated
library items, and one catalog lookup per distinct ``(namespace, catalogItemId)``.
Structural failures in the first two stages abort the fetch; per-record parse
failures and per-item catalog failures are absorbed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

import httpx
from pydantic import ValidationError

from epic_library.core.config import EpicSettings, HttpSettings
from epic_library.schemas.library import (
    CatalogMetadata,
    Game,
    LibraryEntry,
    LibraryItem,
    LibraryPage,
    RawAsset,
)
from epic_library.utils.errors import EpicLibraryError, MalformedResponseError
from epic_library.utils.http import bearer_headers, build_timeout, parse_json, send_request

logger = logging.getLogger(__name__)

CatalogKey = Tuple[str, str]


class LibraryFetcher:
    """Produce the deduplicated, metadata-enriched game list for an access token."""

    ASSETS_PATH = "/launcher/api/public/assets/{platform}"
    LIBRARY_PATH = "/library/api/public/items"
    CATALOG_PATH = "/catalog/api/shared/namespace/{namespace}/bulk/items"

    def __init__(
        self,
        epic_settings: EpicSettings,
        http_settings: Optional[HttpSettings] = None,
        *,
        max_pages: int = 500,
        metadata_concurrency: int = 4,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._epic = epic_settings
        self._timeout = build_timeout(http_settings or HttpSettings())
        self._max_pages = max_pages
        self._metadata_concurrency = max(1, metadata_concurrency)
        self._transport = transport

    async def fetch_library(self, access_token: str) -> List[Game]:
        """Run every stage and return non-DLC games sorted by title."""
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            assets = await self.fetch_assets(client, access_token)
            library_items = await self.fetch_library_items(client, access_token)
            entries = self.merge_entries(assets, library_items)
            logger.info(
                "Merged %d assets and %d library items into %d entries",
                len(assets),
                len(library_items),
                len(entries),
            )
            games = await self.enrich_games(client, access_token, entries)

        return self.finalize(games)

    async def fetch_assets(self, client: httpx.AsyncClient, access_token: str) -> List[RawAsset]:
        """Stage one: the launcher asset list for the configured platform."""
        url = f"https://{self._epic.launcher_host}" + self.ASSETS_PATH.format(
            platform=self._epic.platform
        )
        response = await send_request(
            client.get,
            url,
            params={"label": "Live"},
            headers=bearer_headers(access_token),
            context="Asset list request",
        )
        payload = parse_json(response, context="Asset list")
        if not isinstance(payload, list):
            raise MalformedResponseError("Asset list response is not a JSON array")

        assets: List[RawAsset] = []
        for element in payload:
            try:
                assets.append(RawAsset.model_validate(element))
            except ValidationError as exc:
                logger.warning("Skipping unparsable asset: %s", exc.errors()[:1])
        logger.debug("Fetched %d assets", len(assets))
        return assets

    async def fetch_library_items(
        self, client: httpx.AsyncClient, access_token: str
    ) -> List[LibraryItem]:
        """Stage two: follow the library cursor chain to its end."""
        url = f"https://{self._epic.library_host}{self.LIBRARY_PATH}"
        items: List[LibraryItem] = []
        seen_cursors: Set[str] = set()
        cursor: Optional[str] = None
        pages = 0

        while True:
            if pages >= self._max_pages:
                raise MalformedResponseError(
                    f"Library pagination exceeded {self._max_pages} pages"
                )
            params = {"includeMetadata": "true"}
            if cursor is not None:
                params["cursor"] = cursor

            response = await send_request(
                client.get,
                url,
                params=params,
                headers=bearer_headers(access_token),
                context="Library request",
            )
            pages += 1
            page = self._parse_page(response)
            if page.records is None:
                break

            for record in page.records:
                try:
                    items.append(LibraryItem.model_validate(record))
                except ValidationError as exc:
                    logger.warning("Skipping unparsable library record: %s", exc.errors()[:1])

            cursor = page.next_cursor
            if cursor is None:
                break
            if cursor in seen_cursors:
                raise MalformedResponseError("Library pagination returned a repeating cursor")
            seen_cursors.add(cursor)

        logger.debug("Fetched %d library items across %d pages", len(items), pages)
        return items

    @staticmethod
    def merge_entries(
        assets: Iterable[RawAsset], library_items: Iterable[LibraryItem]
    ) -> List[LibraryEntry]:
        """
        Deduplicate by ``appName``; the first occurrence wins.

        Library items come first so they take precedence over bare assets. A
        library item inherits the build version of the asset sharing its name.
        """
        assets = list(assets)
        build_versions: Dict[str, str] = {}
        for asset in assets:
            build_versions.setdefault(asset.app_name, asset.build_version)

        candidates = [
            LibraryEntry.from_library_item(item, build_versions.get(item.app_name))
            for item in library_items
        ]
        candidates.extend(LibraryEntry.from_asset(asset) for asset in assets)

        merged: Dict[str, LibraryEntry] = {}
        for entry in candidates:
            merged.setdefault(entry.app_name, entry)
        return list(merged.values())

    async def enrich_games(
        self,
        client: httpx.AsyncClient,
        access_token: str,
        entries: List[LibraryEntry],
    ) -> List[Game]:
        """Stage three: attach catalog metadata, one lookup per catalog key."""
        keys: List[CatalogKey] = list(
            dict.fromkeys((entry.namespace, entry.catalog_item_id) for entry in entries)
        )
        semaphore = asyncio.Semaphore(self._metadata_concurrency)

        async def _lookup(key: CatalogKey) -> Optional[CatalogMetadata]:
            async with semaphore:
                return await self._fetch_metadata_or_none(client, access_token, *key)

        results = await asyncio.gather(*(_lookup(key) for key in keys))
        metadata_by_key = dict(zip(keys, results))

        games: List[Game] = []
        for entry in entries:
            game = Game.shell(entry, platform=self._epic.platform)
            metadata = metadata_by_key.get((entry.namespace, entry.catalog_item_id))
            games.append(game.with_metadata(metadata) if metadata else game)
        return games

    async def fetch_metadata(
        self,
        client: httpx.AsyncClient,
        access_token: str,
        namespace: str,
        catalog_item_id: str,
    ) -> Optional[CatalogMetadata]:
        """Catalog details for one item; ``None`` when the item is not in the response."""
        url = f"https://{self._epic.catalog_host}" + self.CATALOG_PATH.format(
            namespace=namespace
        )
        params = {
            "id": catalog_item_id,
            "includeDLCDetails": "false",
            "includeMainGameDetails": "false",
            "country": self._epic.country,
            "locale": self._epic.locale,
        }
        response = await send_request(
            client.get,
            url,
            params=params,
            headers=bearer_headers(access_token),
            context="Catalog request",
        )
        payload = parse_json(response, context="Catalog response")
        if not isinstance(payload, dict):
            raise MalformedResponseError("Catalog response is not a JSON object")

        item = payload.get(catalog_item_id)
        if item is None:
            return None
        try:
            return CatalogMetadata.model_validate(item)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Catalog item {catalog_item_id} has an unexpected shape"
            ) from exc

    async def _fetch_metadata_or_none(
        self,
        client: httpx.AsyncClient,
        access_token: str,
        namespace: str,
        catalog_item_id: str,
    ) -> Optional[CatalogMetadata]:
        try:
            return await self.fetch_metadata(client, access_token, namespace, catalog_item_id)
        except EpicLibraryError as exc:
            logger.warning("Metadata fetch failed for %s: %s", catalog_item_id, exc)
            return None

    @staticmethod
    def finalize(games: Iterable[Game]) -> List[Game]:
        """Drop DLC and sort case-insensitively by title."""
        return sorted((game for game in games if not game.is_dlc), key=lambda g: g.title.lower())

    @staticmethod
    def _parse_page(response: httpx.Response) -> LibraryPage:
        payload = parse_json(response, context="Library page")
        try:
            return LibraryPage.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError("Library page has an unexpected shape") from exc


__all__ = ["LibraryFetcher"]
