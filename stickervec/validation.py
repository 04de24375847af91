"""Format-limit checks for encoded sticker files."""
import gzip
import json
import logging
import zlib
from typing import Any, Dict, Optional, Tuple

from stickervec.types import (
    CANVAS_SIZE,
    MAX_STICKER_BYTES,
    MAX_STICKER_FPS,
    RECOMMENDED_MAX_DURATION_MS,
    ValidationReport,
)

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid frame value
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_sticker_bytes(
    data: bytes,
    max_size: int = MAX_STICKER_BYTES,
    fps: Optional[float] = None,
    duration_ms: Optional[float] = None,
    requested_fps: Optional[float] = None
) -> ValidationReport:
    """
    Check compressed sticker bytes against the format limits.

    Only reports; ``data`` is never modified or dropped.

    Args:
        data: Compressed document
        max_size: Byte budget
        fps: Frame rate written into the document
        duration_ms: Animation duration
        requested_fps: Frame rate asked for before capping

    Returns:
        ValidationReport; size and fps violations are errors, long
        durations and capped frame rates are warnings
    """
    size = len(data)
    errors = []
    warnings = []

    if size > max_size:
        errors.append(f"File size {size / 1024:.1f}KB exceeds {max_size / 1024:.0f}KB limit")

    if fps is not None and fps > MAX_STICKER_FPS:
        errors.append(f"Frame rate {fps} exceeds {MAX_STICKER_FPS} fps limit")

    if requested_fps is not None and requested_fps > MAX_STICKER_FPS:
        warnings.append(f"Frame rate {requested_fps} capped to {MAX_STICKER_FPS} fps")

    if duration_ms is not None and duration_ms > RECOMMENDED_MAX_DURATION_MS:
        warnings.append(
            f"Duration {duration_ms:.0f}ms exceeds recommended "
            f"{RECOMMENDED_MAX_DURATION_MS}ms"
        )

    for message in warnings:
        logger.warning(message)

    return ValidationReport(
        valid=not errors,
        size=size,
        max_size=max_size,
        errors=errors,
        warnings=warnings,
    )


def inspect_sticker(data: bytes, max_size: int = MAX_STICKER_BYTES) -> Tuple[Optional[Dict[str, Any]], ValidationReport]:
    """
    Decompress and check an existing sticker file.

    Args:
        data: Raw ``.tgs`` bytes
        max_size: Byte budget

    Returns:
        Tuple of (document or None when unreadable, report)
    """
    try:
        document = json.loads(gzip.decompress(data).decode("utf-8"))
    except (OSError, EOFError, zlib.error, UnicodeDecodeError, json.JSONDecodeError) as e:
        return None, ValidationReport(
            valid=False,
            size=len(data),
            max_size=max_size,
            errors=[f"Not a gzip-compressed JSON document: {e}"],
        )

    if not isinstance(document, dict):
        return None, ValidationReport(
            valid=False, size=len(data), max_size=max_size,
            errors=["Top level of the document is not an object"],
        )

    fps = document.get("fr")
    in_point = document.get("ip", 0)
    out_point = document.get("op", 0)
    fps_ok = _is_number(fps) and fps > 0
    frames_ok = _is_number(in_point) and _is_number(out_point)

    duration_ms = None
    if fps_ok and frames_ok:
        duration_ms = (out_point - in_point) / fps * 1000.0

    report = validate_sticker_bytes(
        data,
        max_size=max_size,
        fps=fps if fps_ok else None,
        duration_ms=duration_ms,
    )

    if document.get("tgs") != 1:
        report.errors.append("Missing tgs=1 marker")
    if not fps_ok:
        report.errors.append(f"Invalid frame rate: {fps!r}")
    if not frames_ok:
        report.errors.append(f"Invalid frame range: ip={in_point!r}, op={out_point!r}")
    if document.get("w") != CANVAS_SIZE or document.get("h") != CANVAS_SIZE:
        report.errors.append(
            f"Canvas must be {CANVAS_SIZE}x{CANVAS_SIZE}, "
            f"got {document.get('w')}x{document.get('h')}"
        )
    if not document.get("layers"):
        report.errors.append("Document has no layers")

    report.valid = not report.errors
    return document, report
