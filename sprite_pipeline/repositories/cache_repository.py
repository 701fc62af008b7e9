from __future__ import annotations
from threading import Lock
from typing import Dict, Generic, NamedTuple, TypeVar

from ..models.bitmap import DecodedBitmap
from ..models.content_bounds import ContentBounds

K = TypeVar("K")
V = TypeVar("V")


class KeyedCache(Generic[K, V]):
    """
    Insert-or-overwrite map guarded by a lock.  No eviction; ``clear`` is the only teardown.
    """

    def __init__(self) -> None:
        self._entries: Dict[K, V] = {}
        self._lock = Lock()

    def get(self, key: K) -> V | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: K, value: V) -> None:
        with self._lock:
            self._entries[key] = value

    def contains(self, key: K) -> bool:
        with self._lock:
            return key in self._entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CacheKey(NamedTuple):
    locator: str
    filtered: bool = False


class BitmapCache(KeyedCache[CacheKey, DecodedBitmap]):
    """Decoded bitmaps keyed by locator, with filtered variants stored beside the raw ones."""

    def get_bitmap(self, locator: str, filtered: bool = False) -> DecodedBitmap | None:
        return self.get(CacheKey(locator, filtered))

    def put_bitmap(self, locator: str, bitmap: DecodedBitmap, filtered: bool = False) -> None:
        self.put(CacheKey(locator, filtered), bitmap)

    def has_bitmap(self, locator: str, filtered: bool = False) -> bool:
        return self.contains(CacheKey(locator, filtered))


class ContentBoundsCache(KeyedCache[str, ContentBounds]):
    """Content bounds keyed by locator, independent of the bitmap cache."""


# Process-wide defaults; services fall back to these when no cache is injected.
DEFAULT_BITMAP_CACHE = BitmapCache()
DEFAULT_BOUNDS_CACHE = ContentBoundsCache()
