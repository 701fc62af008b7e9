from __future__ import annotations
import base64
import logging
from threading import Lock
from typing import Callable

from ..config import Settings
from ..repositories.bitmap_repository import BitmapRepository

logger = logging.getLogger(__name__)

# 1x1 lossy WebP, decoded once to find out whether this OpenCV build reads WebP.
_PROBE_IMAGES = {
    ".webp": base64.b64decode("UklGRiQAAABXRUJQVlA4IBgAAAAwAQCdASoBAAEAAwA0JaQAA3AA/vuUAAA="),
}


class FormatNegotiator:
    """
    Picks the cheapest encoding to fetch for a locator.

    ``foo.png`` becomes ``foo.webp`` when the runtime can decode WebP.
    The capability probe runs at most once per instance.
    """

    def __init__(
        self,
        base_ext: str | None = None,
        alt_ext: str | None = None,
        probe: Callable[[], bool] | None = None,
    ):
        settings = Settings.from_env()
        self.base_ext = base_ext or settings.base_ext
        self.alt_ext = alt_ext or settings.alt_ext
        self._probe = probe or self._decode_probe_image
        self._supported: bool | None = None
        self._lock = Lock()

    def _decode_probe_image(self) -> bool:
        data = _PROBE_IMAGES.get(self.alt_ext)
        if data is None:
            return False
        bitmap = BitmapRepository.decode(data, f"probe{self.alt_ext}")
        return bitmap.width > 0 and bitmap.height > 0

    def alternate_supported(self) -> bool:
        if self._supported is None:
            with self._lock:
                if self._supported is None:
                    try:
                        supported = bool(self._probe())
                    except Exception as err:
                        logger.debug(f"{self.alt_ext} probe failed: {err}")
                        supported = False
                    logger.info(f"{self.alt_ext} decoding supported: {supported}")
                    self._supported = supported
        return self._supported

    def select_variant(self, locator: str) -> str:
        """Return the alternate-encoding sibling of *locator*, or *locator* itself."""
        if not self.base_ext or not locator.endswith(self.base_ext):
            return locator
        if not self.alternate_supported():
            return locator
        return locator[: -len(self.base_ext)] + self.alt_ext
