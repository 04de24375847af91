"""Layers and the composition that orders them."""
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from stickervec.timeline import Timeline, total_frames, value_at
from stickervec.types import Keyframe, PixelBuffer, RGBA, Transform


@dataclass
class RasterContent:
    """Image-backed layer content."""
    pixels: PixelBuffer
    source: str = ""  # where the pixels came from, for project files


@dataclass
class VectorContent:
    """Layer authored directly as straight-segment path data."""
    path_data: str
    fill_color: Optional[RGBA] = None  # None = palette color for the layer


LayerContent = Union[RasterContent, VectorContent]


@dataclass
class Layer:
    """A single animated layer. The layer exclusively owns its timeline."""
    content: LayerContent
    name: str = ""
    transform: Transform = field(default_factory=Transform)
    visible: bool = True
    timeline: Timeline = field(default_factory=Timeline)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        if not self.name:
            self.name = f"Layer {self.id[:8]}"

    @property
    def keyframes(self) -> Tuple[Keyframe, ...]:
        return self.timeline.snapshot()

    @property
    def is_raster(self) -> bool:
        return isinstance(self.content, RasterContent)


class Composition:
    """
    Ordered layer stack plus timing.

    Layer order is paint order, first = bottom. Sticker limits (fps <= 60,
    duration <= 3000 ms) are not enforced here; the encoder reports them.
    """

    def __init__(
        self,
        layers: Optional[List[Layer]] = None,
        duration_ms: float = 3000.0,
        fps: int = 30,
        current_time_ms: float = 0.0
    ):
        if duration_ms <= 0:
            raise ValueError(f"duration_ms must be > 0, got {duration_ms}")
        if int(fps) != fps or fps < 1:
            raise ValueError(f"fps must be a positive integer, got {fps}")

        self.duration_ms = float(duration_ms)
        self.fps = int(fps)
        self._layers: List[Layer] = []
        for layer in layers or ():
            self.add_layer(layer)
        self.current_time_ms = 0.0
        self.seek(current_time_ms)

    @property
    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    @property
    def visible_layers(self) -> List[Layer]:
        return [layer for layer in self._layers if layer.visible]

    @property
    def total_frames(self) -> int:
        return total_frames(self.duration_ms, self.fps)

    def add_layer(self, layer: Layer) -> Layer:
        """Append a layer on top of the stack."""
        if any(existing.id == layer.id for existing in self._layers):
            raise ValueError(f"Duplicate layer id: {layer.id}")
        self._layers.append(layer)
        return layer

    def get_layer(self, layer_id: str) -> Layer:
        for layer in self._layers:
            if layer.id == layer_id:
                return layer
        raise KeyError(f"No layer with id {layer_id!r}")

    def remove_layer(self, layer_id: str) -> Layer:
        layer = self.get_layer(layer_id)
        self._layers.remove(layer)
        return layer

    def move_layer(self, from_index: int, to_index: int) -> None:
        """Move a layer in the paint order; layers themselves are untouched."""
        layer = self._layers.pop(from_index)
        self._layers.insert(to_index, layer)

    def seek(self, time_ms: float) -> float:
        """Set the current time, clamped to [0, duration_ms]."""
        self.current_time_ms = max(0.0, min(float(time_ms), self.duration_ms))
        return self.current_time_ms

    def transforms_at(self, time_ms: Optional[float] = None) -> Dict[str, Transform]:
        """Interpolated transform of every layer, keyed by layer id."""
        t = self.current_time_ms if time_ms is None else time_ms
        return {layer.id: value_at(layer, t) for layer in self._layers}
