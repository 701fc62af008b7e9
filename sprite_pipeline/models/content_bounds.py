from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class ContentBounds:
    """
    Bounding box of the opaque content of a bitmap, plus the numbers a renderer
    needs to re-center it.

    Offsets are positive when content sits right of / below the image center.
    """
    min_x: int
    min_y: int
    max_x: int  # inclusive
    max_y: int  # inclusive
    content_width: int
    content_height: int
    center_offset_x: float  # [-0.5, 0.5] of image width
    center_offset_y: float  # [-0.5, 0.5] of image height
    content_ratio_x: float  # (0, 1]
    content_ratio_y: float  # (0, 1]

    @classmethod
    def full_image(cls, width: int, height: int) -> "ContentBounds":
        """Fallback used when nothing opaque was found: content fills the whole image."""
        return cls(
            min_x=0,
            min_y=0,
            max_x=width,
            max_y=height,
            content_width=width,
            content_height=height,
            center_offset_x=0.0,
            center_offset_y=0.0,
            content_ratio_x=1.0,
            content_ratio_y=1.0,
        )
