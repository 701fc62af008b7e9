from __future__ import annotations
from io import BytesIO
import numpy as np
import cv2
from PIL import Image as PILImage

from ..errors import DecodeError, EncodeError
from ..models.bitmap import DecodedBitmap

# OpenCV hands back BGR(A) / gray; everything past this file is RGBA.
_TO_RGBA = {
    1: cv2.COLOR_GRAY2RGBA,
    3: cv2.COLOR_BGR2RGBA,
    4: cv2.COLOR_BGRA2RGBA,
}

_PIL_FORMATS = {
    ".png": "PNG",
    ".webp": "WEBP",
}


class BitmapRepository:
    """
    Handles decoding, encoding and conversion of DecodedBitmap entities.
    No OpenCV or Pillow logic outside this file.
    """

    @staticmethod
    def create_bitmap(pixels: np.ndarray, locator: str | None = None) -> DecodedBitmap:
        return DecodedBitmap(pixels=pixels, locator=locator)

    @staticmethod
    def decode(data: bytes, locator: str | None = None) -> DecodedBitmap:
        """Decode encoded image bytes into an 8-bit RGBA bitmap."""
        buf = np.frombuffer(data, dtype=np.uint8)
        if buf.size == 0:
            raise DecodeError(locator or "<bytes>", f"Empty image data: {locator}")
        try:
            arr = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
        except cv2.error as err:
            raise DecodeError(locator or "<bytes>", f"Image unreadable: {locator}") from err
        if arr is None:
            raise DecodeError(locator or "<bytes>", f"Image unreadable: {locator}")

        if arr.dtype == np.uint16:
            arr = (arr >> 8).astype(np.uint8)
        elif arr.dtype != np.uint8:
            raise DecodeError(locator or "<bytes>", f"Unsupported sample type {arr.dtype}: {locator}")

        channels = 1 if arr.ndim == 2 else arr.shape[2]
        if channels not in _TO_RGBA:
            raise DecodeError(locator or "<bytes>", f"Unsupported channel count {channels}: {locator}")
        rgba = cv2.cvtColor(arr, _TO_RGBA[channels])
        return DecodedBitmap(pixels=rgba, locator=locator)

    @staticmethod
    def encode(bitmap: DecodedBitmap, ext: str = ".png") -> bytes:
        """Encode a bitmap into PNG/WebP bytes."""
        fmt = _PIL_FORMATS.get(ext.lower())
        if fmt is None:
            raise EncodeError(f"Unsupported output extension: {ext}")
        out = BytesIO()
        try:
            PILImage.fromarray(np.array(bitmap.pixels)).save(out, format=fmt)
        except (OSError, ValueError, MemoryError) as err:
            raise EncodeError(f"Could not encode {bitmap.locator or 'bitmap'} as {fmt}: {err}") from err
        return out.getvalue()

    @staticmethod
    def to_pil_image(bitmap: DecodedBitmap) -> PILImage.Image:
        """Copy the pixels into a PIL Image, for renderers built on Pillow."""
        return PILImage.fromarray(np.array(bitmap.pixels))
