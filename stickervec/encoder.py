"""Encode a composition into sticker (.tgs) or general Lottie JSON bytes."""
import gzip
import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from stickervec import lottie_schema as schema
from stickervec.composition import Composition, Layer, RasterContent, VectorContent
from stickervec.palette import fallback_shape, layer_color
from stickervec.raster_ingest import to_png_data_uri
from stickervec.svg_path import parse_path_data
from stickervec.timeline import total_frames
from stickervec.tracer import RasterTracer
from stickervec.types import (
    EncoderConfig,
    EncodingError,
    MAX_STICKER_FPS,
    NoVisibleLayersError,
    OutputSchema,
    PathDataError,
    TraceKind,
    TraceResult,
    ValidationReport,
)
from stickervec.validation import validate_sticker_bytes

logger = logging.getLogger(__name__)

STICKER_MEDIA_TYPE = "application/x-tgsticker"
GZIP_LEVEL = 6


@dataclass
class EncodedDocument:
    """Serialized document plus its validation report."""
    data: bytes
    document: Dict[str, Any]
    schema: OutputSchema
    report: ValidationReport

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def valid(self) -> bool:
        return self.report.valid

    def save(self, path: Union[str, Path]) -> Path:
        """Write the bytes to ``path`` regardless of validity."""
        path = Path(path)
        path.write_bytes(self.data)
        return path


class AnimationEncoder:
    """Build, serialize, compress and validate animation documents."""

    def __init__(self, config: Optional[EncoderConfig] = None):
        """
        Initialize encoder with configuration.

        Args:
            config: Encoder configuration. Uses defaults if None.
        """
        self.config = config or EncoderConfig()
        self.tracer = RasterTracer(self.config.tracing)

    def encode(self, composition: Composition) -> EncodedDocument:
        """
        Encode every visible layer of ``composition``.

        Args:
            composition: Layers and timing to export

        Returns:
            EncodedDocument; limit violations are reported, not raised

        Raises:
            NoVisibleLayersError: If no layer is visible
            EncodingError: If serialization fails
        """
        layers = composition.visible_layers
        if not layers:
            raise NoVisibleLayersError("Composition has no visible layers to export")

        requested_fps = self.config.fps or composition.fps
        fps = min(requested_fps, MAX_STICKER_FPS)
        frames = total_frames(composition.duration_ms, fps)
        duration_ms = composition.duration_ms

        logger.info(
            f"Encoding {len(layers)} layers as {self.config.schema.value}: "
            f"{fps} fps, {frames} frames"
        )

        if self.config.schema is OutputSchema.STICKER:
            document = self._build_sticker(layers, fps, frames, duration_ms)
        else:
            document = self._build_general(layers, fps, frames, duration_ms)

        raw = self._serialize(document)

        if self.config.schema is OutputSchema.STICKER:
            data = self._compress(raw)
            report = validate_sticker_bytes(
                data,
                max_size=self.config.max_size_bytes,
                fps=fps,
                duration_ms=duration_ms,
                requested_fps=requested_fps,
            )
        else:
            data = raw
            report = ValidationReport(valid=True, size=len(data))

        logger.info(f"Encoded document: {len(data) / 1024:.1f}KB, valid={report.valid}")
        return EncodedDocument(data=data, document=document, schema=self.config.schema, report=report)

    def _build_sticker(self, layers: List[Layer], fps: int, frames: int, duration_ms: float) -> Dict[str, Any]:
        traced = self._trace_raster_layers(layers)

        lottie_layers = []
        for index, layer in enumerate(layers):
            if isinstance(layer.content, VectorContent):
                groups = self._vector_groups(layer.content, index)
            else:
                groups = self._traced_groups(traced[index], index)
            lottie_layers.append(
                schema.shape_layer(layer, index, groups, duration_ms, frames, three_d=True)
            )

        return schema.sticker_document(self.config.name, fps, frames, lottie_layers)

    def _build_general(self, layers: List[Layer], fps: int, frames: int, duration_ms: float) -> Dict[str, Any]:
        assets = []
        lottie_layers = []
        for index, layer in enumerate(layers):
            if isinstance(layer.content, RasterContent):
                ref_id = f"image_{index}"
                pixels = layer.content.pixels
                assets.append(schema.image_asset(ref_id, pixels, to_png_data_uri(pixels)))
                lottie_layers.append(schema.image_layer(layer, index, ref_id, duration_ms, frames))
            else:
                groups = self._vector_groups(layer.content, index)
                lottie_layers.append(
                    schema.shape_layer(layer, index, groups, duration_ms, frames, three_d=False)
                )

        return schema.general_document(self.config.name, fps, frames, lottie_layers, assets)

    def _trace_raster_layers(self, layers: List[Layer]) -> Dict[int, TraceResult]:
        """Trace results keyed by layer index, in layer order."""
        raster = [
            (index, layer) for index, layer in enumerate(layers)
            if isinstance(layer.content, RasterContent)
        ]

        if not self.config.use_vector_tracing:
            return {
                index: TraceResult(TraceKind.FALLBACK, [fallback_shape(index)], "tracing disabled")
                for index, _ in raster
            }

        jobs = [(layer.content.pixels, index) for index, layer in raster]
        results = self.tracer.trace_layers(jobs, workers=self.config.workers)
        return {index: result for (index, _), result in zip(raster, results)}

    def _traced_groups(self, result: TraceResult, index: int) -> List[Dict[str, Any]]:
        if result.is_fallback:
            shape = result.shapes[0]
            return [schema.shape_group(shape.points, shape.color, f"Rectangle {index + 1}")]
        return [
            schema.shape_group(shape.points, shape.color, f"Shape {i + 1}")
            for i, shape in enumerate(result.shapes)
        ]

    def _vector_groups(self, content: VectorContent, index: int) -> List[Dict[str, Any]]:
        try:
            subpaths = parse_path_data(content.path_data)
        except PathDataError as e:
            logger.warning(f"Vector layer {index} has unusable path data, using fallback shape: {e}")
            shape = fallback_shape(index)
            return [schema.shape_group(shape.points, shape.color, f"Rectangle {index + 1}")]

        groups = []
        for i, subpath in enumerate(subpaths):
            color = content.fill_color or layer_color(index, i)
            groups.append(schema.shape_group(subpath.points, color, f"Path {i + 1}", closed=subpath.closed))
        return groups

    def _serialize(self, document: Dict[str, Any]) -> bytes:
        try:
            return json.dumps(document, separators=(",", ":"), allow_nan=False).encode("utf-8")
        except (TypeError, ValueError, MemoryError) as e:
            raise EncodingError(f"Serialization failed: {e}") from e

    def _compress(self, raw: bytes) -> bytes:
        try:
            return gzip.compress(raw, compresslevel=GZIP_LEVEL, mtime=0)
        except (OSError, MemoryError) as e:
            raise EncodingError(f"Compression failed: {e}") from e


def encode_sticker(composition: Composition, config: Optional[EncoderConfig] = None) -> EncodedDocument:
    """
    Encode a composition as a compressed sticker.

    Example:
        >>> result = encode_sticker(composition)
        >>> if result.valid:
        ...     result.save("sticker.tgs")
    """
    config = replace(config or EncoderConfig(), schema=OutputSchema.STICKER)
    return AnimationEncoder(config).encode(composition)


def encode_general(composition: Composition, config: Optional[EncoderConfig] = None) -> EncodedDocument:
    """Encode a composition as uncompressed JSON with embedded images."""
    config = replace(config or EncoderConfig(), schema=OutputSchema.GENERAL)
    return AnimationEncoder(config).encode(composition)
