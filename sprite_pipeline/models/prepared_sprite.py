from __future__ import annotations
from dataclasses import dataclass

from .bitmap import DecodedBitmap
from .content_bounds import ContentBounds


@dataclass(frozen=True)
class PreparedSprite:
    """
    Data object handed to the renderer: the (filtered) bitmap and where its content sits.
    """
    locator: str
    bitmap: DecodedBitmap
    bounds: ContentBounds
