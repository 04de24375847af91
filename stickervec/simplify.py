"""Path simplification and canonical coordinate mapping."""
from typing import Dict, List

import cv2
import numpy as np

from stickervec.types import CANVAS_SIZE, Points


def simplify(points: Points, factor: float = 0.3) -> Points:
    """
    Decimate a point sequence.

    Keeps every Nth point with ``N = max(1, floor(len * factor / 10))``
    and always keeps the final point. Higher ``factor`` gives fewer points
    and a smaller encoded file.

    Args:
        points: (N, 2) array of (x, y)
        factor: Decimation strength

    Returns:
        Reduced (M, 2) array
    """
    points = np.asarray(points)
    if len(points) <= 2:
        return points

    step = max(1, int(np.floor(len(points) * factor / 10)))
    kept = points[::step]
    if (len(points) - 1) % step != 0:
        kept = np.vstack([kept, points[-1:]])
    return kept


def simplify_douglas_peucker(points: Points, epsilon_factor: float = 0.01) -> Points:
    """
    Simplify a closed polygon with Ramer-Douglas-Peucker.

    Best suited to perimeter outlines; visitation-order point clouds do not
    form a meaningful polygon for RDP.

    Args:
        points: (N, 2) array of (x, y)
        epsilon_factor: Tolerance as a fraction of the perimeter

    Returns:
        Simplified (M, 2) array
    """
    points = np.asarray(points)
    if len(points) < 3:
        return points

    contour = points.astype(np.float32).reshape(-1, 1, 2)
    perimeter = cv2.arcLength(contour, closed=True)
    simplified = cv2.approxPolyDP(contour, epsilon_factor * perimeter, closed=True)
    return simplified.reshape(-1, 2)


def normalize(points: Points, width: int, height: int) -> np.ndarray:
    """
    Map pixel coordinates into the canonical frame.

    The image center goes to the origin and the longer image side spans
    512 units: ``x' = (x - w/2) * 512 / max(w, h)``.
    """
    points = np.asarray(points, dtype=np.float64)
    scale = CANVAS_SIZE / max(width, height)
    center = np.array([width / 2.0, height / 2.0])
    return (points - center) * scale


def denormalize(points: Points, width: int, height: int) -> np.ndarray:
    """Inverse of :func:`normalize`."""
    points = np.asarray(points, dtype=np.float64)
    scale = CANVAS_SIZE / max(width, height)
    center = np.array([width / 2.0, height / 2.0])
    return points / scale + center


def _fmt(value: float) -> str:
    text = f"{value:.1f}"
    return "0.0" if text == "-0.0" else text


def to_path_data(points: Points) -> str:
    """Closed polygon as ``M x,y L x,y ... Z`` with one decimal."""
    if len(points) == 0:
        return ""
    commands = [f"M{_fmt(points[0][0])},{_fmt(points[0][1])}"]
    for x, y in points[1:]:
        commands.append(f"L{_fmt(x)},{_fmt(y)}")
    commands.append("Z")
    return " ".join(commands)


def to_shape_vertices(points: Points, closed: bool = True, precision: int = 1) -> Dict[str, List]:
    """
    Polygon as a Lottie shape value.

    Tangents are all zero since traced shapes are polygonal.
    """
    vertices = [[round(float(x), precision), round(float(y), precision)] for x, y in points]
    return {
        "i": [[0, 0] for _ in vertices],
        "o": [[0, 0] for _ in vertices],
        "v": vertices,
        "c": closed,
    }
