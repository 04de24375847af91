"""Bucketed color quantization for picking dominant colors."""
import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from stickervec.types import PixelBuffer, RGBA

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaletteColor:
    """Quantized color with its sample count."""
    r: int
    g: int
    b: int
    count: int

    def rgb(self):
        return (self.r, self.g, self.b)

    def rgba(self) -> RGBA:
        """Color as 0-1 floats. Bucket rounding can reach 256, so clamp."""
        return (
            min(1.0, self.r / 255.0),
            min(1.0, self.g / 255.0),
            min(1.0, self.b / 255.0),
            1.0,
        )


def quantize(
    pixels: PixelBuffer,
    max_colors: int,
    alpha_threshold: int = 50,
    bucket_size: int = 32,
    stride: int = 4
) -> List[PaletteColor]:
    """
    Find the dominant opaque colors of an image.

    Every ``stride``-th pixel (row-major) is sampled. Pixels with alpha
    below ``alpha_threshold`` are ignored. Each channel is rounded to the
    nearest multiple of ``bucket_size`` so anti-aliasing noise collapses
    into a few keys.

    Args:
        pixels: RGBA image
        max_colors: Maximum number of colors to return
        alpha_threshold: Minimum alpha for a pixel to vote
        bucket_size: Channel rounding step
        stride: Sampling stride in pixels

    Returns:
        Colors by descending count, ties in first-seen order. Empty for a
        fully transparent image.
    """
    if max_colors < 1:
        raise ValueError(f"max_colors must be >= 1, got {max_colors}")

    flat = pixels.data.reshape(-1, 4)[::stride]
    opaque = flat[flat[:, 3] >= alpha_threshold]
    if len(opaque) == 0:
        return []

    # Round half up, matching integer rounding of r / bucket
    keys = np.floor(opaque[:, :3].astype(np.float64) / bucket_size + 0.5).astype(np.int64)
    keys *= bucket_size

    unique, first_index, counts = np.unique(
        keys, axis=0, return_index=True, return_counts=True
    )

    # Primary key: count descending; secondary: first appearance
    order = np.lexsort((first_index, -counts))[:max_colors]

    palette = [
        PaletteColor(
            r=int(unique[i][0]),
            g=int(unique[i][1]),
            b=int(unique[i][2]),
            count=int(counts[i]),
        )
        for i in order
    ]
    logger.debug(
        f"Quantized {len(opaque)} samples into {len(unique)} keys, "
        f"keeping {len(palette)}"
    )
    return palette
