from __future__ import annotations
import asyncio
import inspect
import logging
from itertools import count
from threading import Lock
from typing import Callable, Dict, Protocol, Tuple

from ..config import Settings
from ..errors import AssetNotFoundError, DecodeError, FetchError
from ..models.background_spec import BackgroundSpec
from ..models.bitmap import DecodedBitmap
from ..models.result import Result
from ..repositories.asset_fetcher import AssetFetcher
from ..repositories.bitmap_repository import BitmapRepository
from ..repositories.cache_repository import (
    BitmapCache,
    ContentBoundsCache,
    DEFAULT_BITMAP_CACHE,
    DEFAULT_BOUNDS_CACHE,
)
from .chroma_filter_service import ChromaFilterService
from .format_negotiator import FormatNegotiator

logger = logging.getLogger(__name__)

ImageLoadCallback = Callable[[str], None]


class Fetcher(Protocol):
    """
    Anything with ``fetch(locator) -> bytes``; ``fetch`` may also be a coroutine function.
    Failures should be FetchError; a raised OSError is converted (FileNotFoundError -> AssetNotFoundError).
    """

    def fetch(self, locator: str) -> bytes: ...


class LoaderService:
    """
    Loads sprites through the format negotiator and memoizes them.

    *   A cached locator is returned without any I/O.
    *   ``foo.png`` is first tried as ``foo.webp`` when supported; any failure
        there silently falls back to ``foo.png``.
    *   Successful loads are cached under the locator that was asked for and
        announced to every ``on_image_loaded`` subscriber exactly once.
    """

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        cache: BitmapCache | None = None,
        bounds_cache: ContentBoundsCache | None = None,
        negotiator: FormatNegotiator | None = None,
        chroma_filter: ChromaFilterService | None = None,
        background_spec: BackgroundSpec | None = None,
    ):
        self.fetcher = fetcher or AssetFetcher()
        self.cache = cache if cache is not None else DEFAULT_BITMAP_CACHE
        self.bounds_cache = bounds_cache if bounds_cache is not None else DEFAULT_BOUNDS_CACHE
        self.negotiator = negotiator or FormatNegotiator()
        self.background_spec = background_spec or Settings.from_env().background_spec()
        self.chroma_filter = chroma_filter or ChromaFilterService(self.background_spec)
        self.bitmap_repository = BitmapRepository()

        self._listeners: Dict[int, Tuple[ImageLoadCallback, asyncio.AbstractEventLoop | None]] = {}
        self._listener_ids = count()
        self._listener_lock = Lock()

    # ─── notifications ────────────────────────────────────────────────
    def on_image_loaded(self, callback: ImageLoadCallback) -> Callable[[], None]:
        """
        Register *callback* to be called with the locator after each successful load.

        When registered from inside a running event loop, the callback is
        delivered on that loop.

        Returns:
            A function that unregisters the callback.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        with self._listener_lock:
            handle = next(self._listener_ids)
            self._listeners[handle] = (callback, loop)

        def unsubscribe() -> None:
            with self._listener_lock:
                self._listeners.pop(handle, None)

        return unsubscribe

    def _notify_loaded(self, locator: str) -> None:
        with self._listener_lock:
            listeners = list(self._listeners.values())

        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None

        for callback, loop in listeners:
            if loop is not None and loop is not current and not loop.is_closed():
                loop.call_soon_threadsafe(callback, locator)
                continue
            try:
                callback(locator)
            except Exception:
                logger.exception(f"Image-loaded listener failed for {locator}")

    # ─── loading ──────────────────────────────────────────────────────
    async def _fetch_and_decode(self, locator: str) -> DecodedBitmap:
        try:
            if inspect.iscoroutinefunction(self.fetcher.fetch):
                data = await self.fetcher.fetch(locator)
            else:
                data = await asyncio.to_thread(self.fetcher.fetch, locator)
        except FileNotFoundError as err:
            raise AssetNotFoundError(f"Image not found: {locator}") from err
        except OSError as err:
            raise FetchError(f"Could not fetch {locator}: {err}") from err
        return self.bitmap_repository.decode(data, locator)

    async def load(self, locator: str) -> DecodedBitmap:
        """
        Return the decoded bitmap for *locator*, from cache when possible.

        Raises:
            DecodeError: when neither the alternate nor the original variant
            could be fetched and decoded. Nothing is cached in that case.
        """
        cached = self.cache.get_bitmap(locator)
        if cached is not None:
            return cached

        variant = self.negotiator.select_variant(locator)
        if variant != locator:
            result = await Result.attempt(self._fetch_and_decode, variant)
            if not result.ok:
                logger.debug(f"{variant} not available, using {locator}: {result.error}")
            result = await result.or_else(lambda: Result.attempt(self._fetch_and_decode, locator))
        else:
            result = await Result.attempt(self._fetch_and_decode, locator)

        if not result.ok:
            logger.warning(f"Failed to load image: {locator} ({result.error})")
            raise DecodeError(locator) from result.error

        bitmap = result.value
        self.cache.put_bitmap(locator, bitmap)
        self._notify_loaded(locator)
        return bitmap

    async def load_sprite(
        self,
        locator: str,
        apply_filter: bool = True,
        spec: BackgroundSpec | None = None,
    ) -> DecodedBitmap:
        """
        Load *locator* and, by default, strip its chroma-key background.
        The filtered bitmap is cached next to the raw one.
        """
        if not apply_filter:
            return await self.load(locator)

        cached = self.cache.get_bitmap(locator, filtered=True)
        if cached is not None:
            return cached

        bitmap = await self.load(locator)
        filtered = self.chroma_filter.filter_background(bitmap, spec or self.background_spec)
        self.cache.put_bitmap(locator, filtered, filtered=True)
        return filtered

    # ─── cache access ─────────────────────────────────────────────────
    def is_cached(self, locator: str, filtered: bool = False) -> bool:
        return self.cache.has_bitmap(locator, filtered)

    def get_cached(self, locator: str, filtered: bool = False) -> DecodedBitmap | None:
        return self.cache.get_bitmap(locator, filtered)

    def clear_cache(self) -> None:
        """Drop every cached bitmap (raw and filtered) and every cached content bounds."""
        self.cache.clear()
        self.bounds_cache.clear()
        logger.info("Image and content-bounds caches cleared")
