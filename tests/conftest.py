"""Shared fixtures for stickervec tests."""
import numpy as np
import pytest

from stickervec.composition import Composition, Layer, RasterContent, VectorContent
from stickervec.timeline import Timeline
from stickervec.types import Keyframe, PixelBuffer


def solid_pixels(width, height, rgba):
    data = np.zeros((height, width, 4), dtype=np.uint8)
    data[:, :] = rgba
    return PixelBuffer(width=width, height=height, data=data)


@pytest.fixture
def red_pixels():
    """100x100 fully opaque red image."""
    return solid_pixels(100, 100, (255, 0, 0, 255))


@pytest.fixture
def transparent_pixels():
    """64x64 image with no opaque pixels."""
    return solid_pixels(64, 64, (0, 0, 0, 0))


@pytest.fixture
def two_color_pixels():
    """Red left 60 columns, blue right 40 columns, 100x100."""
    data = np.zeros((100, 100, 4), dtype=np.uint8)
    data[:, :60] = (255, 0, 0, 255)
    data[:, 60:] = (0, 0, 255, 255)
    return PixelBuffer(width=100, height=100, data=data)


@pytest.fixture
def moving_layer(red_pixels):
    """Raster layer sliding from x=100 to x=200 over the first second."""
    timeline = Timeline([Keyframe(time=0, x=100), Keyframe(time=1000, x=200)])
    return Layer(content=RasterContent(red_pixels), name="Red", timeline=timeline)


@pytest.fixture
def red_composition(moving_layer):
    """One second at 10 fps holding the moving red layer."""
    return Composition(layers=[moving_layer], duration_ms=1000, fps=10)


@pytest.fixture
def vector_layer():
    return Layer(
        content=VectorContent("M-50,-50 L50,-50 L50,50 L-50,50 Z"),
        name="Square",
    )
