"""Deterministic per-layer colors for fallback and untinted shapes."""
from typing import List

import numpy as np

from stickervec.types import RGBA, TracedShape

BASE_COLORS: List[RGBA] = [
    (1.0, 0.27, 0.27, 1.0),   # red
    (0.13, 0.77, 0.37, 1.0),  # green
    (0.23, 0.51, 0.96, 1.0),  # blue
    (0.92, 0.7, 0.03, 1.0),   # yellow
    (0.93, 0.28, 0.6, 1.0),   # pink
    (0.02, 0.71, 0.83, 1.0),  # cyan
    (0.98, 0.45, 0.09, 1.0),  # orange
    (0.55, 0.36, 0.96, 1.0),  # purple
]

FALLBACK_HALF_SIDE = 40.0


def layer_color(layer_index: int, shape_index: int = 0) -> RGBA:
    """
    Palette color for a layer, cycled by index.

    Later shapes in the same layer are brightened by 0.1 per shape so they
    stay distinguishable.
    """
    r, g, b, a = BASE_COLORS[layer_index % len(BASE_COLORS)]
    variation = shape_index * 0.1
    return (
        min(1.0, round(r + variation, 4)),
        min(1.0, round(g + variation, 4)),
        min(1.0, round(b + variation, 4)),
        a,
    )


def fallback_square() -> np.ndarray:
    """80x80 square centered on the canonical origin."""
    h = FALLBACK_HALF_SIDE
    return np.array([[-h, -h], [h, -h], [h, h], [-h, h]], dtype=np.float64)


def fallback_shape(layer_index: int) -> TracedShape:
    return TracedShape(color=layer_color(layer_index), points=fallback_square())
