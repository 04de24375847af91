"""Connected-component extraction on binary masks."""
from typing import List, Optional, Sequence

import cv2
import numpy as np

from stickervec.types import PixelBuffer, Points, TracingError

# 4-neighbour offsets as (dx, dy)
_NEIGHBOURS = ((-1, 0), (1, 0), (0, -1), (0, 1))


def color_mask(
    pixels: PixelBuffer,
    color: Sequence[int],
    tolerance: int = 50,
    alpha_threshold: int = 50
) -> np.ndarray:
    """
    Create a binary mask of pixels close to ``color``.

    Args:
        pixels: RGBA image
        color: Target (r, g, b), may come from bucket keys (up to 256)
        tolerance: Per-channel difference must be strictly below this
        alpha_threshold: Minimum alpha for a pixel to count

    Returns:
        Boolean mask (H, W)
    """
    data = pixels.data.astype(np.int16)
    target = np.asarray(color[:3], dtype=np.int16)
    close = np.all(np.abs(data[..., :3] - target) < tolerance, axis=2)
    return close & (data[..., 3] >= alpha_threshold)


def find_components(mask: np.ndarray, min_cells: int = 10) -> List[Points]:
    """
    Find 4-connected foreground components by flood fill.

    The grid is scanned row-major; each unvisited foreground cell seeds a
    stack-based fill. A component's points are its cells in visitation
    order, which is not a geometric perimeter; the simplifier reduces it
    to a usable polygon.

    Args:
        mask: Boolean grid (H, W)
        min_cells: Components with fewer cells are dropped as noise

    Returns:
        List of (N, 2) int arrays of (x, y) points
    """
    if mask.ndim != 2:
        raise TracingError(f"Expected 2D mask, got {mask.ndim}D")

    height, width = mask.shape
    grid = mask.astype(bool)
    visited = np.zeros((height, width), dtype=bool)
    components = []

    for flat_index in np.flatnonzero(grid):
        start_y, start_x = divmod(int(flat_index), width)
        if visited[start_y, start_x]:
            continue

        cells = []
        stack = [(start_x, start_y)]
        while stack:
            x, y = stack.pop()
            if x < 0 or x >= width or y < 0 or y >= height:
                continue
            if visited[y, x] or not grid[y, x]:
                continue
            visited[y, x] = True
            cells.append((x, y))
            for dx, dy in _NEIGHBOURS:
                stack.append((x + dx, y + dy))

        if len(cells) >= min_cells:
            components.append(np.array(cells, dtype=np.int32))

    return components


def find_outlines(mask: np.ndarray, min_cells: int = 10) -> List[Points]:
    """
    Find the outer perimeter of each 4-connected component.

    Drop-in alternative to :func:`find_components` producing true boundary
    walks instead of visitation order.

    Args:
        mask: Boolean grid (H, W)
        min_cells: Components with fewer cells are dropped as noise

    Returns:
        List of (N, 2) int arrays of (x, y) points, one per component
    """
    if mask.ndim != 2:
        raise TracingError(f"Expected 2D mask, got {mask.ndim}D")

    try:
        mask_u8 = mask.astype(np.uint8)
        n_labels, labels, stats, _ = cv2.connectedComponentsWithStats(
            mask_u8, connectivity=4
        )

        outlines = []
        # Label 0 is the background
        for label in range(1, n_labels):
            if stats[label, cv2.CC_STAT_AREA] < min_cells:
                continue
            component = (labels == label).astype(np.uint8) * 255
            contours, _ = cv2.findContours(
                component,
                cv2.RETR_EXTERNAL,  # Outer boundary only
                cv2.CHAIN_APPROX_NONE
            )
            if not contours:
                continue
            largest = max(contours, key=len)
            outlines.append(largest.reshape(-1, 2).astype(np.int32))

        return outlines

    except cv2.error as e:
        raise TracingError(f"Outline extraction failed: {e}") from e


def largest_component(components: List[Points]) -> Optional[Points]:
    """Return the component with the most points (first wins ties)."""
    if not components:
        return None
    best = components[0]
    for component in components[1:]:
        if len(component) > len(best):
            best = component
    return best
