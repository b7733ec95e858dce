"""Tests for the demo compositor."""

import io

import numpy as np
import pytest
from PIL import Image

from tryon.composite import Compositor
from tests.helpers import make_image_bytes
from utils.image_io import check_pixel_count


@pytest.fixture
def compositor():
    return Compositor()


def _gray(h=200, w=300, value=128):
    return np.full((h, w, 3), value, dtype=np.uint8)


class TestFitSize:

    def test_scales_to_fit_ratio(self, compositor):
        assert compositor.fit_size((100, 50), (1000, 1000)) == (300, 600)

    def test_never_exceeds_ratio(self, compositor):
        w, h = compositor.fit_size((90, 400), (200, 300))
        assert w <= 0.6 * 300 and h <= 0.6 * 200


class TestCompose:

    def test_keeps_base_size(self, compositor):
        result = compositor.compose(_gray(), _gray(50, 50, 0))
        assert result.shape == (200, 300, 3)
        assert result.dtype == np.uint8

    def test_garment_blended_at_center(self, compositor):
        garment = np.zeros((50, 50, 3), dtype=np.uint8)
        garment[:, :, 2] = 255
        result = compositor.compose(_gray(), garment)

        center = result[100, 150].astype(int)
        # Blue pulled up, red pulled down, neither fully replaced
        assert 128 < center[2] < 255
        assert 0 < center[0] < 128

    def test_transparent_garment_leaves_center(self):
        compositor = Compositor(vignette_strength=0.0)
        garment = np.zeros((50, 50, 3), dtype=np.uint8)
        alpha = np.zeros((50, 50), dtype=np.uint8)
        result = compositor.compose(_gray(), garment, alpha)
        assert tuple(result[100, 150]) == (128, 128, 128)

    def test_vignette_darkens_corners(self, compositor):
        result = compositor.compose(_gray(value=200), _gray(10, 10, 200))
        assert result[-1, -1].mean() < result[100, 150].mean()

    def test_badge_drawn_top_left(self):
        compositor = Compositor(vignette_strength=0.0)
        result = compositor.compose(_gray(), _gray(10, 10))
        badge_pixel = result[14, 14].astype(int)
        assert badge_pixel[2] > badge_pixel[0] + 50


class TestRenderOverlay:

    def test_outputs_jpeg_same_size(self, compositor):
        person = make_image_bytes(size=(120, 160), format="PNG")
        garment = make_image_bytes(size=(40, 80), format="PNG")

        data = compositor.render_overlay(person, garment)

        img = Image.open(io.BytesIO(data))
        assert img.format == "JPEG"
        assert img.size == (120, 160)

    def test_unreadable_garment_raises(self, compositor):
        person = make_image_bytes(format="JPEG")
        with pytest.raises(ValueError):
            compositor.render_overlay(person, b"not an image")


class TestLargeImages:

    def test_large_photo_is_downscaled(self, compositor):
        person = make_image_bytes(size=(3000, 1500), format="PNG")
        garment = make_image_bytes(size=(40, 80), format="PNG")

        data = compositor.render_overlay(person, garment)

        img = Image.open(io.BytesIO(data))
        assert img.size == (1024, 512)

    def test_custom_max_size(self):
        person = make_image_bytes(size=(400, 800), format="PNG")
        garment = make_image_bytes(size=(40, 80), format="PNG")

        data = Compositor(max_size=200).render_overlay(person, garment)

        assert Image.open(io.BytesIO(data)).size == (100, 200)

    def test_too_many_pixels_is_refused_before_decoding(self, compositor):
        # 36 megapixels that compress to a few kilobytes
        person = make_image_bytes(size=(6000, 6000), color=0, format="PNG", mode="1")
        assert len(person) < 100_000

        with pytest.raises(ValueError, match="too large"):
            compositor.render_overlay(person, make_image_bytes(format="PNG"))

    def test_pixel_limit(self):
        data = make_image_bytes(size=(200, 100), format="PNG")
        check_pixel_count(data, max_pixels=20_000)
        with pytest.raises(ValueError):
            check_pixel_count(data, max_pixels=19_999)

    def test_unrecognized_data_is_left_to_decoder(self):
        check_pixel_count(b"not an image", max_pixels=1)
