from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

from epic_library.clients.sqlite_store import SQLiteStore
from epic_library.schemas.library import Game, KeyImage
from epic_library.services.library_cache import CachedLibrary, LibraryCache


def _games() -> list[Game]:
    return [
        Game(
            app_name="Sugar",
            title="Rocket League",
            namespace="sugar",
            catalog_item_id="cat-sugar",
            build_version="++Prime+Live-2.40",
            description="Soccer meets driving.",
            developer="Psyonix",
            key_images=[KeyImage(type="Thumbnail", url="https://cdn.example/rl.png")],
        ),
        Game(app_name="Kinglet", title="Kinglet", namespace="kinglet", catalog_item_id="cat-k"),
    ]


def test_cache_round_trip_preserves_games_and_order(tmp_path: Path) -> None:
    cache = LibraryCache(SQLiteStore(str(tmp_path / "cache.db"), namespace="library"))
    synced_at = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)

    cache.write(_games(), synced_at)
    snapshot = cache.read()

    assert snapshot is not None
    assert snapshot.games == _games()
    assert snapshot.last_sync == synced_at


def test_cache_read_returns_none_when_empty_or_corrupt(tmp_path: Path) -> None:
    store = SQLiteStore(str(tmp_path / "cache.db"), namespace="library")
    cache = LibraryCache(store)

    assert cache.read() is None

    store.put(LibraryCache.SNAPSHOT_KEY, b'{"games": [{"appName": 1}]}')
    assert cache.read() is None


def test_cache_clear_removes_snapshot(tmp_path: Path) -> None:
    cache = LibraryCache(SQLiteStore(str(tmp_path / "cache.db"), namespace="library"))
    cache.write(_games())

    cache.clear()

    assert cache.read() is None


def test_freshness_boundary() -> None:
    now = datetime.now(timezone.utc)
    max_age = timedelta(hours=6)
    stale = CachedLibrary(games=[], last_sync=now - timedelta(hours=6, seconds=1))
    fresh = CachedLibrary(games=[], last_sync=now - timedelta(hours=5, minutes=59))

    assert LibraryCache.is_fresh(stale, max_age, now=now) is False
    assert LibraryCache.is_fresh(fresh, max_age, now=now) is True
