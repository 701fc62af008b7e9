from __future__ import annotations
from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True, eq=False)
class DecodedBitmap:
    """
    Simple data object: RGBA pixels (+ the locator it was decoded from, for bookkeeping).
    The pixel buffer is frozen on construction; callers share it read-only.
    """
    pixels: np.ndarray  # Shape (H, W, 4), dtype uint8, RGBA order.
    locator: str | None = None  # Source of the image.

    def __post_init__(self):
        # Always copy: the bitmap owns its buffer and freezes only that.
        pixels = np.array(self.pixels, order="C", copy=True)
        if pixels.dtype != np.uint8 or pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(
                f"Expected (H, W, 4) uint8 RGBA pixels, got {pixels.shape} {pixels.dtype}"
            )
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def __eq__(self, other):
        if not isinstance(other, DecodedBitmap):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)

    __hash__ = None
