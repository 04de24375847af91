"""Parser for straight-segment SVG path data (M, L, H, V, Z)."""
import re
from dataclasses import dataclass
from typing import List

import numpy as np

from stickervec.types import PathDataError

_TOKEN = re.compile(r"[MmLlHhVvZz]|[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_CURVE_COMMANDS = set("CcSsQqTtAa")


@dataclass
class SubPath:
    points: np.ndarray  # (N, 2)
    closed: bool = False


def parse_path_data(path_data: str) -> List[SubPath]:
    """
    Parse polygonal SVG path data into subpaths.

    Supports absolute and relative M, L, H, V and Z, implicit lineto after
    moveto, and comma or whitespace separators.

    Args:
        path_data: SVG ``d`` attribute

    Returns:
        Subpaths with at least one point each

    Raises:
        PathDataError: On curve commands, stray numbers or malformed input
    """
    curves = _CURVE_COMMANDS.intersection(path_data)
    if curves:
        raise PathDataError(f"Curve commands are not supported: {''.join(sorted(curves))}")

    tokens = _TOKEN.findall(path_data)
    leftover = _TOKEN.sub("", path_data).replace(",", "").strip()
    if leftover:
        raise PathDataError(f"Unexpected characters in path data: {leftover[:20]!r}")

    subpaths: List[SubPath] = []
    current: List[List[float]] = []
    closed = False
    x = y = 0.0
    start_x = start_y = 0.0
    command = None
    i = 0

    def flush():
        if current:
            subpaths.append(SubPath(points=np.array(current, dtype=np.float64), closed=closed))

    def take() -> float:
        nonlocal i
        if i >= len(tokens) or tokens[i].isalpha():
            raise PathDataError(f"Missing coordinate after {command!r}")
        value = float(tokens[i])
        i += 1
        return value

    while i < len(tokens):
        token = tokens[i]
        if token.isalpha():
            command = token
            i += 1
            if command in "Zz":
                closed = True
                flush()
                current, closed = [], False
                x, y = start_x, start_y
                command = None
            continue

        if command is None:
            raise PathDataError(f"Coordinate {token!r} without a command")

        relative = command.islower()
        op = command.upper()
        if op == "M":
            nx, ny = take(), take()
            if relative:
                nx, ny = x + nx, y + ny
            flush()
            current, closed = [[nx, ny]], False
            start_x, start_y = nx, ny
            # Further pairs after a moveto are implicit linetos
            command = "l" if relative else "L"
        elif op == "L":
            nx, ny = take(), take()
            if relative:
                nx, ny = x + nx, y + ny
            if not current:
                current = [[x, y]]
            current.append([nx, ny])
        elif op == "H":
            nx = take()
            if relative:
                nx = x + nx
            ny = y
            if not current:
                current = [[x, y]]
            current.append([nx, ny])
        else:  # V
            ny = take()
            if relative:
                ny = y + ny
            nx = x
            if not current:
                current = [[x, y]]
            current.append([nx, ny])
        x, y = nx, ny

    flush()

    if not subpaths:
        raise PathDataError("Path data contains no points")
    return subpaths
