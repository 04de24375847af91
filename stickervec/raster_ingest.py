"""Raster image ingestion into RGBA pixel buffers."""
import base64
import io
import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image
from PIL import ImageOps

from stickervec.types import ImageLoadError, PixelBuffer

logger = logging.getLogger(__name__)


def load_pixels(path: Union[str, Path]) -> PixelBuffer:
    """
    Decode an image file into an RGBA pixel buffer.

    Args:
        path: Path to image file

    Returns:
        PixelBuffer with (H, W, 4) uint8 data

    Raises:
        FileNotFoundError: If file doesn't exist
        ImageLoadError: If file cannot be decoded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise ImageLoadError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)
            rgba = img.convert("RGBA")
            data = np.array(rgba, dtype=np.uint8)
    except (IOError, OSError) as e:
        raise ImageLoadError(f"Failed to load image {path}: {e}") from e

    height, width = data.shape[:2]
    logger.debug(f"Loaded {path.name}: {width}x{height}")
    return PixelBuffer(width=width, height=height, data=data)


def pixels_from_array(image: np.ndarray) -> PixelBuffer:
    """
    Create a PixelBuffer from a numpy array.

    Args:
        image: (H, W), (H, W, 3) or (H, W, 4) array, uint8 or floats in [0, 1]

    Returns:
        PixelBuffer (a copy; the input is not retained)
    """
    image = np.asarray(image)

    if image.ndim == 2:
        # Grayscale - convert to RGB
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise ImageLoadError(f"Expected 3D array, got {image.ndim}D")

    if image.dtype != np.uint8:
        image = np.clip(image * 255.0 + 0.5, 0, 255).astype(np.uint8)

    if image.shape[2] == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        image = np.concatenate([image, alpha], axis=2)
    elif image.shape[2] != 4:
        raise ImageLoadError(f"Expected 3 or 4 channels, got {image.shape[2]}")

    height, width = image.shape[:2]
    return PixelBuffer(width=width, height=height, data=np.array(image, dtype=np.uint8))


def to_image(pixels: PixelBuffer) -> Image.Image:
    # (H, W, 4) uint8 is inferred as RGBA
    return Image.fromarray(pixels.data)


def downscale(pixels: PixelBuffer, cap: int) -> PixelBuffer:
    """
    Shrink so the longer edge is at most ``cap``. Never upscales.

    Returns a new buffer; the input is not modified.
    """
    longest = max(pixels.width, pixels.height)
    if longest <= cap:
        return PixelBuffer(pixels.width, pixels.height, pixels.data.copy())

    scale = cap / longest
    width = max(1, int(pixels.width * scale))
    height = max(1, int(pixels.height * scale))
    resized = to_image(pixels).resize((width, height), Image.Resampling.BILINEAR)
    return PixelBuffer(width, height, np.array(resized, dtype=np.uint8))


def to_png_bytes(pixels: PixelBuffer) -> bytes:
    buffer = io.BytesIO()
    to_image(pixels).save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()


def to_png_data_uri(pixels: PixelBuffer, max_edge: int = 512) -> str:
    """Encode pixels as a base64 PNG data URI, downscaled to ``max_edge``."""
    png = to_png_bytes(downscale(pixels, max_edge))
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def save_png(pixels: PixelBuffer, path: Union[str, Path]) -> None:
    to_image(pixels).save(Path(path), format="PNG")
