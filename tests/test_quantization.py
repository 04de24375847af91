"""Tests for bucketed color quantization."""
import numpy as np
import pytest

from stickervec.quantization import PaletteColor, quantize
from stickervec.types import PixelBuffer


def make_pixels(data):
    data = np.asarray(data, dtype=np.uint8)
    return PixelBuffer(width=data.shape[1], height=data.shape[0], data=data)


class TestQuantize:
    """Test dominant color extraction."""

    def test_single_solid_color(self, red_pixels):
        """A solid image yields one color counting every sampled pixel."""
        palette = quantize(red_pixels, max_colors=8)

        assert len(palette) == 1
        # 10000 pixels sampled every 4th
        assert palette[0].count == 2500
        assert palette[0].rgb() == (256, 0, 0)

    def test_bucket_rounding(self):
        """Channels round to the nearest multiple of the bucket size."""
        data = np.zeros((10, 10, 4), dtype=np.uint8)
        data[:, :] = (200, 100, 50, 255)
        palette = quantize(make_pixels(data), max_colors=4)

        assert palette[0].rgb() == (192, 96, 64)
        assert palette[0].count == 25

    def test_transparent_image_is_empty(self, transparent_pixels):
        """No opaque samples means no colors."""
        assert quantize(transparent_pixels, max_colors=8) == []

    def test_alpha_threshold(self):
        """Alpha below the threshold is ignored, at the threshold counts."""
        data = np.zeros((1, 8, 4), dtype=np.uint8)
        data[0, :, :3] = 255
        data[0, :4, 3] = 49
        data[0, 4:, 3] = 50
        palette = quantize(make_pixels(data), max_colors=8, stride=1)

        assert len(palette) == 1
        assert palette[0].count == 4

    def test_sorted_by_count(self, two_color_pixels):
        """The most frequent color comes first."""
        palette = quantize(two_color_pixels, max_colors=8)

        assert [c.rgb() for c in palette] == [(256, 0, 0), (0, 0, 256)]
        assert palette[0].count > palette[1].count

    def test_ties_keep_first_seen_order(self):
        """Equal counts are ordered by first appearance."""
        data = np.zeros((2, 2, 4), dtype=np.uint8)
        data[0, 0] = (0, 255, 0, 255)
        data[0, 1] = (255, 0, 0, 255)
        data[1, 0] = (255, 0, 0, 255)
        data[1, 1] = (0, 255, 0, 255)
        palette = quantize(make_pixels(data), max_colors=8, stride=1)

        assert [c.rgb() for c in palette] == [(0, 256, 0), (256, 0, 0)]

    def test_max_colors_truncates(self):
        """Only the top max_colors are returned."""
        data = np.zeros((1, 6, 4), dtype=np.uint8)
        data[0, :, 3] = 255
        data[0, :3, 0] = 255
        data[0, 3:5, 1] = 255
        data[0, 5, 2] = 255
        palette = quantize(make_pixels(data), max_colors=2, stride=1)

        assert len(palette) == 2
        assert palette[0].count == 3

    def test_invalid_max_colors(self, red_pixels):
        with pytest.raises(ValueError):
            quantize(red_pixels, max_colors=0)


class TestPaletteColor:
    """Test palette color conversion."""

    def test_rgba_clamps_bucket_overflow(self):
        """Keys of 256 still map to a channel value of 1.0."""
        color = PaletteColor(r=256, g=128, b=0, count=1)

        assert color.rgba() == (1.0, pytest.approx(128 / 255), 0.0, 1.0)
