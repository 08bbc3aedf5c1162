"""Persisted snapshot of the last successful library sync."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from epic_library.clients.sqlite_store import SQLiteStore
from epic_library.schemas.library import Game

logger = logging.getLogger(__name__)

_GAME_LIST = TypeAdapter(List[Game])


@dataclass(slots=True)
class CachedLibrary:
    games: List[Game]
    last_sync: datetime


class LibraryCache:
    """Store the ordered game list and its sync time as one record."""

    SNAPSHOT_KEY = "snapshot"

    def __init__(self, store: SQLiteStore) -> None:
        self._store = store

    def read(self) -> Optional[CachedLibrary]:
        """Return the cached snapshot, or ``None`` when absent or unreadable."""
        blob = self._store.get(self.SNAPSHOT_KEY)
        if blob is None:
            return None
        try:
            record = json.loads(blob)
            games = _GAME_LIST.validate_python(record["games"])
            last_sync = datetime.fromisoformat(record["last_sync"])
        except (ValueError, KeyError, TypeError, ValidationError):
            logger.exception("Failed to load cached library")
            return None
        if last_sync.tzinfo is None:
            last_sync = last_sync.replace(tzinfo=timezone.utc)
        return CachedLibrary(games=games, last_sync=last_sync)

    def write(self, games: List[Game], synced_at: Optional[datetime] = None) -> None:
        """Replace the snapshot in a single write."""
        synced_at = synced_at or datetime.now(timezone.utc)
        record = {
            "games": _GAME_LIST.dump_python(games, mode="json", by_alias=True),
            "last_sync": synced_at.isoformat(),
        }
        self._store.put(self.SNAPSHOT_KEY, json.dumps(record).encode("utf-8"))
        logger.debug("Cached %d games", len(games))

    def clear(self) -> None:
        self._store.clear()

    @staticmethod
    def is_fresh(
        snapshot: CachedLibrary, max_age: timedelta, now: Optional[datetime] = None
    ) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - snapshot.last_sync < max_age


__all__ = ["CachedLibrary", "LibraryCache"]
