from __future__ import annotations
import logging
import numpy as np

from ..config import Settings
from ..errors import EncodeError
from ..models.background_spec import BackgroundSpec
from ..models.bitmap import DecodedBitmap
from ..repositories.bitmap_repository import BitmapRepository

logger = logging.getLogger(__name__)


class ChromaFilterService:
    """
    Chroma-key background removal.

    • Every pixel within ``spec.threshold`` (Euclidean RGB distance) of
      ``spec.reference_color`` gets alpha 0; all other pixels are copied as-is.
    • Pixels are judged one by one, so background-colored specks inside the
      subject are cleared too.
    • Returns a **new** DecodedBitmap; the input is never touched.
    """

    def __init__(self, default_spec: BackgroundSpec | None = None):
        self.default_spec = default_spec or Settings.from_env().background_spec()
        self.bitmap_repository = BitmapRepository()

    @staticmethod
    def background_mask(pixels: np.ndarray, spec: BackgroundSpec) -> np.ndarray:
        """Boolean (H, W) mask of pixels close enough to the background color."""
        rgb = pixels[..., :3].astype(np.float64)
        ref = np.asarray(spec.reference_color, dtype=np.float64)
        distance = np.sqrt(np.sum((rgb - ref) ** 2, axis=2))
        return distance <= spec.threshold

    def filter_background(self, bitmap: DecodedBitmap, spec: BackgroundSpec | None = None) -> DecodedBitmap:
        spec = spec or self.default_spec
        try:
            mask = self.background_mask(bitmap.pixels, spec)
            out = bitmap.pixels.copy()
            out[mask, 3] = 0
            filtered = self.bitmap_repository.create_bitmap(out, bitmap.locator)
        except MemoryError as err:
            raise EncodeError(
                f"Could not allocate filtered buffer for {bitmap.width}x{bitmap.height} bitmap"
            ) from err

        total = bitmap.width * bitmap.height
        filtered_count = int(mask.sum())
        percentage = (filtered_count / total * 100) if total else 0.0
        logger.info(
            f"Filtered {filtered_count} pixels ({percentage:.2f}%) from "
            f"{bitmap.locator or 'bitmap'} ({bitmap.width}x{bitmap.height}, "
            f"color={spec.reference_color}, threshold={spec.threshold})"
        )
        return filtered
