"""Builders for the Lottie-dialect JSON shared by both output schemas."""
import copy
import math
from typing import Any, Dict, List, Optional

from stickervec.simplify import to_shape_vertices
from stickervec.timeline import value_at
from stickervec.types import CANVAS_SIZE, PixelBuffer, RGBA

STICKER_VERSION = "5.5.7"
GENERAL_VERSION = "5.7.4"

# Symmetric ease-in/ease-out, applied to every keyframe except the last
EASE_OUT = {"x": [0.167], "y": [0.167]}
EASE_IN = {"x": [0.833], "y": [0.833]}
EASE_NAME = "0p833_0p833_0p167_0p167"

PROPERTIES = ("opacity", "rotation", "position", "scale")
_PROPERTY_KEYS = {"opacity": "o", "rotation": "r", "position": "p", "scale": "s"}

LAYER_TYPE_IMAGE = 2
LAYER_TYPE_SHAPE = 4


def frame_index(time_ms: float, duration_ms: float, total_frames: int) -> int:
    """Map a keyframe time onto a frame number, rounding halves up."""
    return int(math.floor(time_ms / duration_ms * total_frames + 0.5))


def property_value(transform, prop: str, three_d: bool) -> Any:
    """
    Lottie value of one property.

    Opacity and scale are percentages. Position and scale carry a third
    component in the sticker (3D) dialect.
    """
    if prop == "opacity":
        return transform.opacity * 100
    if prop == "rotation":
        return transform.rotation
    if prop == "position":
        return [transform.x, transform.y, 0] if three_d else [transform.x, transform.y]
    if prop == "scale":
        scale = [transform.scale_x * 100, transform.scale_y * 100]
        return scale + [100] if three_d else scale
    raise ValueError(f"Unknown property: {prop!r}")


def _as_list(value: Any) -> List[float]:
    return value if isinstance(value, list) else [value]


def property_track(
    layer,
    prop: str,
    duration_ms: float,
    total_frames: int,
    three_d: bool = True
) -> Dict[str, Any]:
    """
    Animated or static Lottie property for one layer.

    Layers with at most one keyframe collapse to a static value (the single
    keyframe if present, else the layer's static transform).
    """
    keyframes = layer.keyframes
    if len(keyframes) <= 1:
        return {"a": 0, "k": property_value(value_at(layer, 0), prop, three_d)}

    track = []
    last = len(keyframes) - 1
    for i, keyframe in enumerate(keyframes):
        entry: Dict[str, Any] = {
            "t": frame_index(keyframe.time, duration_ms, total_frames),
            "s": _as_list(property_value(keyframe, prop, three_d)),
        }
        if i != last:
            entry["i"] = copy.deepcopy(EASE_IN)
            entry["o"] = copy.deepcopy(EASE_OUT)
            entry["n"] = EASE_NAME
        track.append(entry)
    return {"a": 1, "k": track}


def layer_transform(layer, duration_ms: float, total_frames: int, three_d: bool = True) -> Dict[str, Any]:
    """The ``ks`` block of a layer."""
    ks = {
        _PROPERTY_KEYS[prop]: property_track(layer, prop, duration_ms, total_frames, three_d)
        for prop in PROPERTIES
    }
    ks["a"] = {"a": 0, "k": [0, 0, 0] if three_d else [0, 0]}
    return ks


def _identity_transform() -> Dict[str, Any]:
    return {
        "ty": "tr",
        "p": {"a": 0, "k": [0, 0]},
        "a": {"a": 0, "k": [0, 0]},
        "s": {"a": 0, "k": [100, 100]},
        "r": {"a": 0, "k": 0},
        "o": {"a": 0, "k": 100},
        "sk": {"a": 0, "k": 0},
        "sa": {"a": 0, "k": 0},
    }


def _color(color: RGBA) -> List[float]:
    return [round(float(c), 4) for c in color]


def shape_group(points, color: RGBA, name: str, closed: bool = True) -> Dict[str, Any]:
    """One filled polygon: path, fill and transform items."""
    return {
        "ty": "gr",
        "it": [
            {"ind": 0, "ty": "sh", "ks": {"a": 0, "k": to_shape_vertices(points, closed)}},
            {"ty": "fl", "c": {"a": 0, "k": _color(color)}, "o": {"a": 0, "k": 100}, "r": 1, "bm": 0},
            _identity_transform(),
        ],
        "nm": name,
        "bm": 0,
    }


def _layer_base(layer, index: int, total_frames: int) -> Dict[str, Any]:
    return {
        "ddd": 0,
        "ind": index + 1,
        "nm": layer.name or f"Layer {index + 1}",
        "sr": 1,
        "ao": 0,
        "ip": 0,
        "op": total_frames,
        "st": 0,
        "bm": 0,
    }


def shape_layer(
    layer,
    index: int,
    groups: List[Dict[str, Any]],
    duration_ms: float,
    total_frames: int,
    three_d: bool = True
) -> Dict[str, Any]:
    """Shape layer (``ty`` 4) holding ``groups``."""
    data = _layer_base(layer, index, total_frames)
    data["ty"] = LAYER_TYPE_SHAPE
    data["ks"] = layer_transform(layer, duration_ms, total_frames, three_d)
    data["shapes"] = groups
    return data


def image_layer(
    layer,
    index: int,
    ref_id: str,
    duration_ms: float,
    total_frames: int
) -> Dict[str, Any]:
    """Image layer (``ty`` 2) referencing an embedded asset."""
    data = _layer_base(layer, index, total_frames)
    data["ty"] = LAYER_TYPE_IMAGE
    data["refId"] = ref_id
    data["ks"] = layer_transform(layer, duration_ms, total_frames, three_d=False)
    return data


def image_asset(ref_id: str, pixels: PixelBuffer, data_uri: str) -> Dict[str, Any]:
    return {"id": ref_id, "w": pixels.width, "h": pixels.height, "u": "", "p": data_uri, "e": 1}


def sticker_document(name: str, fps: int, total_frames: int, layers: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Top level of the compressed sticker schema."""
    return {
        "tgs": 1,
        "v": STICKER_VERSION,
        "fr": fps,
        "ip": 0,
        "op": total_frames,
        "w": CANVAS_SIZE,
        "h": CANVAS_SIZE,
        "nm": name,
        "ddd": 0,
        "assets": [],
        "layers": layers,
    }


def general_document(
    name: str,
    fps: int,
    total_frames: int,
    layers: List[Dict[str, Any]],
    assets: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Top level of the uncompressed general schema."""
    return {
        "v": GENERAL_VERSION,
        "fr": fps,
        "ip": 0,
        "op": total_frames,
        "w": CANVAS_SIZE,
        "h": CANVAS_SIZE,
        "nm": name,
        "ddd": 0,
        "assets": assets or [],
        "layers": layers,
    }
