"""Core types for the sticker animation pipeline."""
from dataclasses import dataclass, field
from typing import Optional, List, Tuple
from enum import Enum, auto
import numpy as np

# Type aliases
RGBA = Tuple[float, float, float, float]
Points = np.ndarray  # (N, 2) array of (x, y)

# Format limits of the compressed sticker schema
MAX_STICKER_BYTES = 64 * 1024
MAX_STICKER_FPS = 60
RECOMMENDED_MAX_DURATION_MS = 3000
CANVAS_SIZE = 512


class TraceKind(Enum):
    """Outcome of tracing one raster layer."""
    TRACED = auto()
    FALLBACK = auto()


class OutputSchema(Enum):
    """Target document schema."""
    STICKER = "sticker"  # gzip'd shape animation (.tgs)
    GENERAL = "general"  # plain JSON with embedded image assets


@dataclass(frozen=True)
class Transform:
    """Layer transform in canonical canvas units."""
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0  # degrees
    scale_x: float = 1.0
    scale_y: float = 1.0
    opacity: float = 1.0


@dataclass(frozen=True)
class Keyframe:
    """Timestamped transform snapshot used as an interpolation anchor."""
    time: float  # ms
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    opacity: float = 1.0

    def __post_init__(self):
        if not self.time >= 0:  # also rejects NaN
            raise ValueError(f"Keyframe time must be >= 0, got {self.time}")

    @classmethod
    def from_transform(cls, time: float, transform: Transform) -> "Keyframe":
        return cls(
            time=time,
            x=transform.x,
            y=transform.y,
            rotation=transform.rotation,
            scale_x=transform.scale_x,
            scale_y=transform.scale_y,
            opacity=transform.opacity,
        )

    @property
    def transform(self) -> Transform:
        return Transform(
            x=self.x,
            y=self.y,
            rotation=self.rotation,
            scale_x=self.scale_x,
            scale_y=self.scale_y,
            opacity=self.opacity,
        )


@dataclass
class PixelBuffer:
    """Decoded RGBA image. ``data`` is (H, W, 4) uint8 and is never mutated."""
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        if self.data.shape != (self.height, self.width, 4):
            raise ValueError(
                f"Pixel data shape {self.data.shape} does not match "
                f"{self.width}x{self.height} RGBA"
            )


@dataclass
class TracedShape:
    """Filled polygon in canonical [-256, 256] coordinates."""
    color: RGBA
    points: Points


@dataclass
class TraceResult:
    """Shapes produced for one raster layer, tagged traced or fallback."""
    kind: TraceKind
    shapes: List[TracedShape] = field(default_factory=list)
    reason: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.kind is TraceKind.FALLBACK


@dataclass
class TracingConfig:
    """Configuration for raster to vector tracing."""
    # Color quantization
    max_colors: int = 8
    alpha_threshold: int = 50
    bucket_size: int = 32
    sample_stride: int = 4

    # Mask + component extraction
    color_tolerance: int = 50
    min_component_cells: int = 10
    contour_method: str = "flood"  # "flood" or "outline"

    # Downscale before tracing
    processing_cap: int = 256

    # Simplification
    simplify: float = 0.3
    simplify_method: str = "decimate"  # "decimate" or "douglas_peucker"
    epsilon_factor: float = 0.01

    def __post_init__(self):
        if self.max_colors < 1:
            raise ValueError(f"max_colors must be >= 1, got {self.max_colors}")
        if self.bucket_size < 1:
            raise ValueError(f"bucket_size must be >= 1, got {self.bucket_size}")
        if self.sample_stride < 1:
            raise ValueError(f"sample_stride must be >= 1, got {self.sample_stride}")
        if self.processing_cap < 1:
            raise ValueError(f"processing_cap must be >= 1, got {self.processing_cap}")
        if self.simplify < 0:
            raise ValueError(f"simplify must be >= 0, got {self.simplify}")
        if self.contour_method not in ("flood", "outline"):
            raise ValueError(f"Unknown contour_method: {self.contour_method!r}")
        if self.simplify_method not in ("decimate", "douglas_peucker"):
            raise ValueError(f"Unknown simplify_method: {self.simplify_method!r}")


@dataclass
class EncoderConfig:
    """Configuration for encoding a composition."""
    schema: OutputSchema = OutputSchema.STICKER
    fps: Optional[int] = None  # None = use the composition's fps
    use_vector_tracing: bool = True
    tracing: TracingConfig = field(default_factory=TracingConfig)
    workers: int = 1
    max_size_bytes: int = MAX_STICKER_BYTES
    name: str = "Vector Animation"

    def __post_init__(self):
        if self.fps is not None and self.fps < 1:
            raise ValueError(f"fps must be >= 1, got {self.fps}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")


@dataclass
class ValidationReport:
    """Outcome of checking an encoded document against format limits."""
    valid: bool
    size: int
    max_size: Optional[int] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class StickerVecError(Exception):
    """Base exception for stickervec errors."""
    pass


class TracingError(StickerVecError):
    """Raised inside the tracing pipeline; never escapes the tracer."""
    pass


class PathDataError(StickerVecError):
    """Raised when vector path data cannot be parsed."""
    pass


class ImageLoadError(StickerVecError):
    """Raised when an image cannot be decoded."""
    pass


class EncodingError(StickerVecError):
    """Raised when an export fails as a whole."""
    pass


class NoVisibleLayersError(EncodingError):
    """Raised when a composition has nothing to export."""
    pass


class ProjectError(StickerVecError):
    """Raised when a project file is malformed."""
    pass
