from __future__ import annotations
import logging
import numpy as np

from ..config import Settings
from ..models.bitmap import DecodedBitmap
from ..models.content_bounds import ContentBounds
from ..repositories.cache_repository import ContentBoundsCache, DEFAULT_BOUNDS_CACHE

logger = logging.getLogger(__name__)


class ContentBoundsService:
    """
    Finds where the opaque part of a sprite actually sits, so AI-generated art
    that is not centered in its frame can still be placed correctly.
    """

    def __init__(self, cache: ContentBoundsCache | None = None, alpha_threshold: int | None = None):
        self.cache = cache if cache is not None else DEFAULT_BOUNDS_CACHE
        self.alpha_threshold = (
            alpha_threshold if alpha_threshold is not None else Settings.from_env().alpha_threshold
        )

    def analyze(self, bitmap: DecodedBitmap) -> ContentBounds:
        """
        Args:
            bitmap (DecodedBitmap): Ideally already chroma-filtered.

        Returns:
            ContentBounds: Inclusive pixel bounds of pixels with alpha above the
            threshold. A bitmap with no such pixel yields ``ContentBounds.full_image``.
        """
        width, height = bitmap.width, bitmap.height
        opaque = bitmap.pixels[..., 3] > self.alpha_threshold

        rows = np.flatnonzero(opaque.any(axis=1))
        cols = np.flatnonzero(opaque.any(axis=0))
        if rows.size == 0:
            logger.debug(f"No opaque content in {bitmap.locator or 'bitmap'}, using full image")
            return ContentBounds.full_image(width, height)

        min_x, max_x = int(cols[0]), int(cols[-1])
        min_y, max_y = int(rows[0]), int(rows[-1])
        content_width = max_x - min_x + 1
        content_height = max_y - min_y + 1

        # Midpoint of the box, not a weighted centroid
        content_center_x = min_x + content_width / 2
        content_center_y = min_y + content_height / 2

        return ContentBounds(
            min_x=min_x,
            min_y=min_y,
            max_x=max_x,
            max_y=max_y,
            content_width=content_width,
            content_height=content_height,
            center_offset_x=(content_center_x - width / 2) / width,
            center_offset_y=(content_center_y - height / 2) / height,
            content_ratio_x=content_width / width,
            content_ratio_y=content_height / height,
        )

    def get_content_bounds(self, locator: str, bitmap: DecodedBitmap) -> ContentBounds:
        """Cached ``analyze``: a locator seen before returns its stored bounds without scanning."""
        bounds = self.cache.get(locator)
        if bounds is None:
            bounds = self.analyze(bitmap)
            self.cache.put(locator, bounds)
        return bounds
