"""JSON project files describing a composition."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from stickervec.composition import Composition, Layer, RasterContent, VectorContent
from stickervec.raster_ingest import load_pixels, save_png
from stickervec.timeline import Timeline
from stickervec.types import ImageLoadError, Keyframe, ProjectError, Transform

logger = logging.getLogger(__name__)

_TRANSFORM_FIELDS = ("x", "y", "rotation", "scale_x", "scale_y", "opacity")


def _transform_from_dict(data: Dict[str, Any]) -> Transform:
    if not isinstance(data, dict):
        raise ProjectError(f"Transform must be an object, got {type(data).__name__}")
    unknown = set(data) - set(_TRANSFORM_FIELDS)
    if unknown:
        raise ProjectError(f"Unknown transform fields: {sorted(unknown)}")
    try:
        return Transform(**{name: float(value) for name, value in data.items()})
    except (TypeError, ValueError) as e:
        raise ProjectError(f"Invalid transform value: {e}") from e


def _keyframe_from_dict(data: Dict[str, Any]) -> Keyframe:
    if not isinstance(data, dict) or "time" not in data:
        raise ProjectError("Keyframe is missing 'time'")
    fields = dict(data)
    time = fields.pop("time")
    try:
        return Keyframe.from_transform(float(time), _transform_from_dict(fields))
    except (TypeError, ValueError) as e:
        raise ProjectError(f"Invalid keyframe: {e}") from e


def _layer_from_dict(data: Dict[str, Any], base_dir: Path) -> Layer:
    if not isinstance(data, dict):
        raise ProjectError(f"Layer entry must be an object, got {type(data).__name__}")

    if "image" in data:
        if not isinstance(data["image"], str):
            raise ProjectError(f"Image path must be a string, got {data['image']!r}")
        image_path = base_dir / data["image"]
        try:
            content = RasterContent(pixels=load_pixels(image_path), source=str(data["image"]))
        except (FileNotFoundError, ImageLoadError) as e:
            raise ProjectError(f"Layer image could not be loaded: {e}") from e
    elif "path" in data:
        fill = data.get("fill")
        if fill is not None and (not isinstance(fill, (list, tuple)) or len(fill) != 4):
            raise ProjectError(f"Fill color must have 4 components, got {fill!r}")
        try:
            fill_color = tuple(float(c) for c in fill) if fill is not None else None
        except (TypeError, ValueError) as e:
            raise ProjectError(f"Invalid fill color {fill!r}: {e}") from e
        content = VectorContent(path_data=str(data["path"]), fill_color=fill_color)
    else:
        raise ProjectError("Layer needs either 'image' or 'path'")

    keyframes = data.get("keyframes", [])
    if not isinstance(keyframes, list):
        raise ProjectError("Layer keyframes must be a list")

    kwargs = {
        "content": content,
        "name": data.get("name", ""),
        "transform": _transform_from_dict(data.get("transform", {})),
        "visible": bool(data.get("visible", True)),
        "timeline": Timeline(_keyframe_from_dict(kf) for kf in keyframes),
    }
    if "id" in data:
        kwargs["id"] = str(data["id"])
    return Layer(**kwargs)


def composition_from_dict(data: Dict[str, Any], base_dir: Union[str, Path] = ".") -> Composition:
    """
    Build a composition from parsed project JSON.

    Args:
        data: Project dictionary
        base_dir: Directory that relative image paths resolve against

    Returns:
        Composition

    Raises:
        ProjectError: If the project structure is invalid
    """
    if not isinstance(data, dict):
        raise ProjectError("Project must be a JSON object")

    layer_entries = data.get("layers", [])
    if not isinstance(layer_entries, list):
        raise ProjectError("Project layers must be a list")

    base_dir = Path(base_dir)
    layers = [_layer_from_dict(layer, base_dir) for layer in layer_entries]

    try:
        return Composition(
            layers=layers,
            duration_ms=float(data.get("duration_ms", 3000)),
            fps=data.get("fps", 30),
            current_time_ms=float(data.get("current_time_ms", 0)),
        )
    except (TypeError, ValueError) as e:
        raise ProjectError(f"Invalid composition: {e}") from e


def load_project(path: Union[str, Path]) -> Composition:
    """Read a project file; image paths are relative to its directory."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise
    except (OSError, json.JSONDecodeError) as e:
        raise ProjectError(f"Cannot read project {path}: {e}") from e

    composition = composition_from_dict(data, path.parent)
    logger.info(f"Loaded project {path.name}: {len(composition.layers)} layers")
    return composition


def _transform_to_dict(transform) -> Dict[str, float]:
    return {name: getattr(transform, name) for name in _TRANSFORM_FIELDS}


def save_project(
    composition: Composition,
    path: Union[str, Path],
    image_dir: Optional[Union[str, Path]] = None
) -> Path:
    """
    Write a composition as a project file.

    Raster layers are stored as PNG files in ``image_dir`` (default: an
    ``images`` directory next to the project), named by layer id.
    """
    path = Path(path)
    image_dir = Path(image_dir) if image_dir is not None else path.parent / "images"

    layers = []
    for layer in composition.layers:
        entry: Dict[str, Any] = {
            "id": layer.id,
            "name": layer.name,
            "visible": layer.visible,
            "transform": _transform_to_dict(layer.transform),
            "keyframes": [
                dict(time=kf.time, **_transform_to_dict(kf)) for kf in layer.keyframes
            ],
        }
        if isinstance(layer.content, RasterContent):
            image_dir.mkdir(parents=True, exist_ok=True)
            image_path = image_dir / f"{layer.id}.png"
            save_png(layer.content.pixels, image_path)
            entry["image"] = Path(os.path.relpath(image_path, path.parent)).as_posix()
        else:
            entry["path"] = layer.content.path_data
            if layer.content.fill_color is not None:
                entry["fill"] = list(layer.content.fill_color)
        layers.append(entry)

    data = {
        "duration_ms": composition.duration_ms,
        "fps": composition.fps,
        "current_time_ms": composition.current_time_ms,
        "layers": layers,
    }
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
