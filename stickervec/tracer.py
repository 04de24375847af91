"""Raster to vector tracing: quantize, mask, extract, simplify, normalize."""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Tuple

from stickervec.contour import color_mask, find_components, find_outlines, largest_component
from stickervec.palette import fallback_shape
from stickervec.quantization import PaletteColor, quantize
from stickervec.raster_ingest import downscale
from stickervec.simplify import normalize, simplify, simplify_douglas_peucker
from stickervec.types import (
    PixelBuffer,
    TraceKind,
    TraceResult,
    TracedShape,
    TracingConfig,
    TracingError,
)

logger = logging.getLogger(__name__)


class RasterTracer:
    """Convert a raster layer into a few filled polygons."""

    def __init__(self, config: Optional[TracingConfig] = None):
        """
        Initialize tracer with configuration.

        Args:
            config: Tracing configuration. Uses defaults if None.
        """
        self.config = config or TracingConfig()

    def trace_layer(self, pixels: PixelBuffer, layer_index: int = 0) -> TraceResult:
        """
        Trace one raster layer.

        Never raises: when nothing usable is found, or anything goes wrong,
        the result is a single fallback square colored by ``layer_index``.

        Args:
            pixels: Decoded RGBA image (read only)
            layer_index: Position among exported layers, for the fallback color

        Returns:
            TraceResult tagged TRACED or FALLBACK
        """
        start_time = time.time()
        try:
            shapes = self._trace(pixels)
        except Exception as e:
            logger.warning(f"Tracing failed for layer {layer_index}, using fallback shape: {e}")
            return self._fallback(layer_index, f"tracing failed: {e}")

        if not shapes:
            logger.warning(f"No shapes traced for layer {layer_index}, using fallback shape")
            return self._fallback(layer_index, "no shapes found")

        logger.info(
            f"Traced layer {layer_index}: {len(shapes)} shapes "
            f"in {time.time() - start_time:.2f}s"
        )
        return TraceResult(kind=TraceKind.TRACED, shapes=shapes)

    def trace_layers(
        self,
        jobs: Sequence[Tuple[PixelBuffer, int]],
        workers: int = 1
    ) -> List[TraceResult]:
        """
        Trace several layers, optionally in parallel.

        Args:
            jobs: (pixels, layer_index) pairs
            workers: Thread count; 1 traces sequentially

        Returns:
            Results in the same order as ``jobs``
        """
        if workers <= 1 or len(jobs) <= 1:
            return [self.trace_layer(pixels, index) for pixels, index in jobs]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map() yields in submission order
            return list(pool.map(lambda job: self.trace_layer(*job), jobs))

    def _trace(self, pixels: PixelBuffer) -> List[TracedShape]:
        cfg = self.config

        # Step 1: Downscale for speed; normalization undoes the scale
        small = downscale(pixels, cfg.processing_cap)

        # Step 2: Dominant colors
        palette = quantize(
            small,
            cfg.max_colors,
            alpha_threshold=cfg.alpha_threshold,
            bucket_size=cfg.bucket_size,
            stride=cfg.sample_stride,
        )
        if not palette:
            return []

        # Step 3: One shape per color, from its largest component
        shapes = []
        for color in palette:
            shape = self._trace_color(small, color)
            if shape is not None:
                shapes.append(shape)
        return shapes

    def _trace_color(self, pixels: PixelBuffer, color: PaletteColor) -> Optional[TracedShape]:
        cfg = self.config

        mask = color_mask(
            pixels,
            color.rgb(),
            tolerance=cfg.color_tolerance,
            alpha_threshold=cfg.alpha_threshold,
        )

        if cfg.contour_method == "outline":
            components = find_outlines(mask, cfg.min_component_cells)
        else:
            components = find_components(mask, cfg.min_component_cells)

        largest = largest_component(components)
        if largest is None:
            return None

        if cfg.simplify_method == "douglas_peucker":
            reduced = simplify_douglas_peucker(largest, cfg.epsilon_factor)
        else:
            reduced = simplify(largest, cfg.simplify)

        if len(reduced) == 0:
            raise TracingError(f"Simplification emptied the path for color {color.rgb()}")

        points = normalize(reduced, pixels.width, pixels.height)
        return TracedShape(color=color.rgba(), points=points)

    def _fallback(self, layer_index: int, reason: str) -> TraceResult:
        return TraceResult(
            kind=TraceKind.FALLBACK,
            shapes=[fallback_shape(layer_index)],
            reason=reason,
        )


def trace_layer(
    pixels: PixelBuffer,
    config: Optional[TracingConfig] = None,
    layer_index: int = 0
) -> TraceResult:
    """Convenience function for one-off tracing."""
    return RasterTracer(config).trace_layer(pixels, layer_index)
