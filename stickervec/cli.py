"""Command line interface for stickervec."""
import argparse
import logging
import sys
from pathlib import Path

from stickervec.encoder import AnimationEncoder, STICKER_MEDIA_TYPE
from stickervec.project import load_project
from stickervec.raster_ingest import load_pixels
from stickervec.simplify import to_path_data
from stickervec.tracer import RasterTracer
from stickervec.types import (
    EncoderConfig,
    OutputSchema,
    StickerVecError,
    TracingConfig,
    ValidationReport,
)
from stickervec.validation import inspect_sticker


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="stickervec",
        description="Export layered keyframe animations as vector stickers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stickervec export project.json -o sticker.tgs
  stickervec export project.json -o sticker.tgs --general animation.json
  stickervec export project.json -o sticker.tgs --no-trace --fps 30
  stickervec trace logo.png --colors 4
  stickervec validate sticker.tgs
        """,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    export = subparsers.add_parser("export", help="Encode a project file")
    export.add_argument("project", help="Project JSON file")
    export.add_argument(
        "-o", "--output",
        default=None,
        help="Output .tgs path (default: project name with .tgs extension)"
    )
    export.add_argument(
        "--general",
        default=None,
        help="Also write the uncompressed JSON with embedded images to this path"
    )
    export.add_argument("--fps", type=int, default=None, help="Frame rate (capped at 60)")
    export.add_argument(
        "--no-trace",
        action="store_true",
        help="Skip vector tracing; image layers become placeholder squares"
    )
    export.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used to trace image layers (default: 1)"
    )
    export.add_argument(
        "--force",
        action="store_true",
        help="Exit successfully even when the sticker fails validation"
    )
    _add_tracing_arguments(export)

    trace = subparsers.add_parser("trace", help="Print traced path data for an image")
    trace.add_argument("image", help="Input image path")
    _add_tracing_arguments(trace)

    validate = subparsers.add_parser("validate", help="Check a .tgs file against sticker limits")
    validate.add_argument("file", help="Sticker file")

    return parser


def _add_tracing_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--colors", "-c",
        type=int,
        default=8,
        help="Maximum traced colors per image (default: 8)"
    )
    parser.add_argument(
        "--simplify",
        type=float,
        default=0.3,
        help="Path decimation factor, higher = smaller file (default: 0.3)"
    )
    parser.add_argument(
        "--contour",
        choices=["flood", "outline"],
        default="flood",
        help="Boundary method: flood (visitation order + decimation) or outline (perimeter walk + Douglas-Peucker) (default: flood)"
    )


def _tracing_config(args) -> TracingConfig:
    simplify_method = "douglas_peucker" if args.contour == "outline" else "decimate"
    return TracingConfig(
        max_colors=args.colors,
        simplify=args.simplify,
        contour_method=args.contour,
        simplify_method=simplify_method,
    )


def _print_report(report: ValidationReport) -> None:
    print(f"  Size: {report.size:,} bytes")
    for warning in report.warnings:
        print(f"  Warning: {warning}")
    for error in report.errors:
        print(f"  Error: {error}")
    print(f"  Overall: {'PASS' if report.valid else 'FAIL'}")


def _run_export(args) -> int:
    project_path = Path(args.project)
    if not project_path.exists():
        print(f"Error: Project file not found: {project_path}", file=sys.stderr)
        return 1

    output_path = Path(args.output) if args.output else project_path.with_suffix(".tgs")

    composition = load_project(project_path)
    config = EncoderConfig(
        schema=OutputSchema.STICKER,
        fps=args.fps,
        use_vector_tracing=not args.no_trace,
        tracing=_tracing_config(args),
        workers=args.workers,
    )

    result = AnimationEncoder(config).encode(composition)
    result.save(output_path)
    print(f"Wrote {output_path} ({STICKER_MEDIA_TYPE})")
    _print_report(result.report)

    if args.general:
        general_config = EncoderConfig(
            schema=OutputSchema.GENERAL,
            fps=args.fps,
            tracing=config.tracing,
        )
        general = AnimationEncoder(general_config).encode(composition)
        general.save(args.general)
        print(f"Wrote {args.general} ({general.size:,} bytes)")

    return 0 if result.valid or args.force else 1


def _run_trace(args) -> int:
    pixels = load_pixels(args.image)
    result = RasterTracer(_tracing_config(args)).trace_layer(pixels)
    if result.is_fallback:
        print(f"Warning: {result.reason}; showing fallback shape", file=sys.stderr)
    for shape in result.shapes:
        print(to_path_data(shape.points))
    return 0


def _run_validate(args) -> int:
    path = Path(args.file)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1

    document, report = inspect_sticker(path.read_bytes())
    print(f"Validation Results for {path.name}:")
    if document is not None:
        print(f"  Frames: {document.get('op')} at {document.get('fr')} fps")
        print(f"  Layers: {len(document.get('layers', []))}")
    _print_report(report)
    return 0 if report.valid else 1


def main(args=None):
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "export": _run_export,
        "trace": _run_trace,
        "validate": _run_validate,
    }

    try:
        return handlers[parsed_args.command](parsed_args)
    except (StickerVecError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
