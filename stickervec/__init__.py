"""stickervec: keyframe animation to vector sticker export."""

__version__ = "0.1.0"

from stickervec.composition import Composition, Layer, RasterContent, VectorContent
from stickervec.encoder import AnimationEncoder, EncodedDocument, encode_general, encode_sticker
from stickervec.timeline import Timeline, add_keyframe, remove_keyframe, value_at
from stickervec.tracer import RasterTracer
from stickervec.types import (
    EncoderConfig,
    EncodingError,
    Keyframe,
    OutputSchema,
    PixelBuffer,
    StickerVecError,
    TraceKind,
    TraceResult,
    TracedShape,
    TracingConfig,
    Transform,
    ValidationReport,
)

__all__ = [
    "AnimationEncoder",
    "Composition",
    "EncodedDocument",
    "EncoderConfig",
    "EncodingError",
    "Keyframe",
    "Layer",
    "OutputSchema",
    "PixelBuffer",
    "RasterContent",
    "RasterTracer",
    "StickerVecError",
    "Timeline",
    "TraceKind",
    "TraceResult",
    "TracedShape",
    "TracingConfig",
    "Transform",
    "ValidationReport",
    "VectorContent",
    "add_keyframe",
    "encode_general",
    "encode_sticker",
    "remove_keyframe",
    "value_at",
]
