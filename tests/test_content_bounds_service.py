import numpy as np
import pytest

from sprite_pipeline.models.content_bounds import ContentBounds
from sprite_pipeline.services.content_bounds_service import ContentBoundsService

from conftest import make_bitmap, solid_pixels


@pytest.fixture
def service(bounds_cache):
    return ContentBoundsService(bounds_cache, alpha_threshold=10)


def transparent_with_block(width, height, x0, y0, x1, y1, alpha=255):
    pixels = solid_pixels(width, height, alpha=0)
    pixels[y0:y1 + 1, x0:x1 + 1, 3] = alpha
    return make_bitmap(pixels)


def test_fully_transparent_bitmap_falls_back_to_full_image(service):
    bitmap = make_bitmap(solid_pixels(30, 20, alpha=10))
    assert service.analyze(bitmap) == ContentBounds.full_image(30, 20)


def test_centered_half_size_square(service):
    bounds = service.analyze(transparent_with_block(100, 100, 25, 25, 74, 74))
    assert (bounds.min_x, bounds.min_y, bounds.max_x, bounds.max_y) == (25, 25, 74, 74)
    assert bounds.center_offset_x == pytest.approx(0)
    assert bounds.center_offset_y == pytest.approx(0)
    assert bounds.content_ratio_x == pytest.approx(0.5)
    assert bounds.content_ratio_y == pytest.approx(0.5)


def test_content_pushed_left(service):
    bounds = service.analyze(transparent_with_block(100, 100, 0, 45, 9, 54))
    assert bounds.center_offset_x < 0
    assert bounds.center_offset_x == pytest.approx(-0.45)
    assert bounds.center_offset_y == pytest.approx(0)
    assert (bounds.content_width, bounds.content_height) == (10, 10)


def test_bounds_are_inclusive_for_single_pixel(service):
    bounds = service.analyze(transparent_with_block(16, 8, 3, 7, 3, 7))
    assert (bounds.min_x, bounds.min_y, bounds.max_x, bounds.max_y) == (3, 7, 3, 7)
    assert (bounds.content_width, bounds.content_height) == (1, 1)
    assert bounds.center_offset_x == pytest.approx((3.5 - 8) / 16)
    assert bounds.center_offset_y == pytest.approx((7.5 - 4) / 8)


def test_alpha_threshold_is_exclusive(service):
    pixels = solid_pixels(10, 10, alpha=0)
    pixels[1, 1, 3] = 10
    pixels[6, 8, 3] = 11
    bounds = service.analyze(make_bitmap(pixels))
    assert (bounds.min_x, bounds.min_y, bounds.max_x, bounds.max_y) == (8, 6, 8, 6)


def test_scattered_pixels_use_extremes(service):
    pixels = solid_pixels(20, 20, alpha=0)
    for y, x in [(2, 15), (18, 4), (9, 9)]:
        pixels[y, x, 3] = 200
    bounds = service.analyze(make_bitmap(pixels))
    assert (bounds.min_x, bounds.min_y, bounds.max_x, bounds.max_y) == (4, 2, 15, 18)


def test_analyze_is_idempotent(service):
    bitmap = transparent_with_block(50, 40, 10, 5, 30, 20)
    assert service.analyze(bitmap) == service.analyze(bitmap)


def test_get_content_bounds_caches_per_locator(service, bounds_cache):
    first = service.get_content_bounds("a.png", transparent_with_block(50, 50, 0, 0, 9, 9))
    # A different bitmap under the same locator still yields the cached record
    second = service.get_content_bounds("a.png", transparent_with_block(50, 50, 20, 20, 49, 49))
    assert second is first
    assert bounds_cache.get("a.png") is first

    other = service.get_content_bounds("b.png", transparent_with_block(50, 50, 20, 20, 49, 49))
    assert other.min_x == 20


def test_cache_clear_forces_rescan(service, bounds_cache):
    service.get_content_bounds("a.png", transparent_with_block(50, 50, 0, 0, 9, 9))
    bounds_cache.clear()
    bounds = service.get_content_bounds("a.png", transparent_with_block(50, 50, 20, 20, 49, 49))
    assert bounds.min_x == 20


def test_ratios_stay_in_range_on_random_masks(service):
    rng = np.random.default_rng(3)
    pixels = solid_pixels(33, 17, alpha=0)
    pixels[..., 3] = rng.integers(0, 256, size=(17, 33)) * (rng.random((17, 33)) > 0.95)
    bounds = service.analyze(make_bitmap(pixels))
    assert -0.5 <= bounds.center_offset_x <= 0.5
    assert -0.5 <= bounds.center_offset_y <= 0.5
    assert 0 < bounds.content_ratio_x <= 1
    assert 0 < bounds.content_ratio_y <= 1
