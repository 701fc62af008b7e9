# pipeline/sprite_preparer.py
from __future__ import annotations
import asyncio
from typing import Iterable, List

from ..models.background_spec import BackgroundSpec
from ..models.prepared_sprite import PreparedSprite
from ..services.content_bounds_service import ContentBoundsService
from ..services.loader_service import LoaderService


async def prepare_sprite(
    locator: str,
    *,
    loader_service: LoaderService | None = None,
    content_bounds_service: ContentBoundsService | None = None,
    apply_filter: bool = True,
    spec: BackgroundSpec | None = None,
) -> PreparedSprite:
    """
    For one locator:
        • load it (cache / alternate format / fallback)
        • strip the chroma-key background (unless apply_filter is False)
        • compute content bounds, cached per locator
    Raises DecodeError if the image cannot be loaded at all.
    """
    loader_service = loader_service or LoaderService()
    content_bounds_service = content_bounds_service or ContentBoundsService(loader_service.bounds_cache)

    bitmap = await loader_service.load_sprite(locator, apply_filter=apply_filter, spec=spec)
    bounds = content_bounds_service.get_content_bounds(locator, bitmap)
    return PreparedSprite(locator=locator, bitmap=bitmap, bounds=bounds)


async def prepare_sprites(
    locators: Iterable[str],
    *,
    loader_service: LoaderService | None = None,
    content_bounds_service: ContentBoundsService | None = None,
    apply_filter: bool = True,
    spec: BackgroundSpec | None = None,
) -> List[PreparedSprite]:
    """Prepare several sprites concurrently; results keep the input order."""
    loader_service = loader_service or LoaderService()
    content_bounds_service = content_bounds_service or ContentBoundsService(loader_service.bounds_cache)
    return list(await asyncio.gather(*(
        prepare_sprite(
            locator,
            loader_service=loader_service,
            content_bounds_service=content_bounds_service,
            apply_filter=apply_filter,
            spec=spec,
        )
        for locator in locators
    )))
