import asyncio
from typing import Dict, List

import numpy as np
import pytest

from sprite_pipeline.errors import AssetNotFoundError
from sprite_pipeline.models.bitmap import DecodedBitmap
from sprite_pipeline.repositories.bitmap_repository import BitmapRepository
from sprite_pipeline.repositories.cache_repository import BitmapCache, ContentBoundsCache
from sprite_pipeline.services.format_negotiator import FormatNegotiator
from sprite_pipeline.services.loader_service import LoaderService

RED = (255, 0, 0)
BLUE = (0, 0, 255)


def solid_pixels(width, height, color=RED, alpha=255):
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., :3] = color
    pixels[..., 3] = alpha
    return pixels


def make_bitmap(pixels, locator=None):
    return DecodedBitmap(pixels=pixels, locator=locator)


def sprite_png(width=40, height=30, box=(5, 10, 14, 19), bg=RED, fg=BLUE):
    """PNG bytes: solid *bg* with an *fg* rectangle covering box=(x0, y0, x1, y1) inclusive."""
    pixels = solid_pixels(width, height, bg)
    x0, y0, x1, y1 = box
    pixels[y0:y1 + 1, x0:x1 + 1, :3] = fg
    return BitmapRepository.encode(make_bitmap(pixels))


class FakeFetcher:
    """In-memory asset store; records every locator it is asked for."""

    def __init__(self, assets: Dict[str, bytes] | None = None, delay: float = 0.0):
        self.assets = dict(assets or {})
        self.delay = delay
        self.calls: List[str] = []

    async def fetch(self, locator: str) -> bytes:
        self.calls.append(locator)
        if self.delay:
            await asyncio.sleep(self.delay)
        if locator not in self.assets:
            raise AssetNotFoundError(f"Image not found: {locator}")
        return self.assets[locator]


@pytest.fixture
def png_bytes():
    return sprite_png()


@pytest.fixture
def bitmap_cache():
    return BitmapCache()


@pytest.fixture
def bounds_cache():
    return ContentBoundsCache()


@pytest.fixture
def make_loader(bitmap_cache, bounds_cache):
    def _make(assets=None, webp_supported=False, delay=0.0):
        fetcher = FakeFetcher(assets, delay=delay)
        negotiator = FormatNegotiator(".png", ".webp", probe=lambda: webp_supported)
        loader = LoaderService(
            fetcher=fetcher,
            cache=bitmap_cache,
            bounds_cache=bounds_cache,
            negotiator=negotiator,
        )
        return loader, fetcher
    return _make
