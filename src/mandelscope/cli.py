"""
CLI entry point for the Mandelbrot renderer.

Usage:
    mandelscope [options]
    python -m mandelscope [options]
"""

import argparse
import sys
import time

from mandelscope.config import PROFILES, RenderConfig, default_workers
from mandelscope.core.camera import Camera
from mandelscope.errors import ConfigurationError
from mandelscope.io.surface import ImageSurface
from mandelscope.palettes import DEFAULT_PALETTE, PALETTES, get_palette
from mandelscope.renderer import FrameRenderer


def _band_reporter(stream=None):
    """
    Build a progress callback for the scoring step.

    On a terminal one status line is rewritten in place; otherwise a line
    is printed at every quarter of the bands.
    """
    stream = stream or sys.stdout
    start = time.time()
    interactive = stream.isatty()

    def report(done: int, total: int):
        elapsed = time.time() - start
        status = f"  scoring: {done}/{total} bands ({done / max(total, 1):.0%}, {elapsed:.1f}s)"
        if interactive:
            stream.write("\r" + status)
            if done >= total:
                stream.write("\n")
            stream.flush()
        elif done >= total or done % max(1, total // 4) == 0:
            print(status, file=stream, flush=True)

    return report


def _parse_aspect(value: str) -> float:
    """Accept ``1.333`` or ``4:3`` / ``4/3``."""
    for sep in (":", "/"):
        if sep in value:
            w, h = value.split(sep, 1)
            try:
                return float(w) / float(h)
            except (ValueError, ZeroDivisionError):
                raise argparse.ArgumentTypeError(f"invalid aspect ratio: {value}") from None
    try:
        return float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid aspect ratio: {value}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mandelscope",
        description=(
            "Histogram-equalized Mandelbrot renderer. The frame is rendered in "
            "memory and only summarized unless --show is given; nothing is "
            "written to disk."
        ),
    )

    # Output
    parser.add_argument("--width", type=int, default=640, help="Output width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=None, help="Output height (default: width / aspect)")

    # Camera
    default_cam = Camera.default()
    parser.add_argument(
        "-x", "--center-x", type=float, default=default_cam.center_x,
        help=f"Real part of the view center (default: {default_cam.center_x})",
    )
    parser.add_argument(
        "-y", "--center-y", type=float, default=default_cam.center_y,
        help=f"Imaginary part of the view center (default: {default_cam.center_y})",
    )
    parser.add_argument(
        "-w", "--view-width", type=float, default=default_cam.view_width,
        help=f"Visible width on the real axis (default: {default_cam.view_width})",
    )
    parser.add_argument(
        "-a", "--aspect", type=_parse_aspect, default=default_cam.aspect_ratio,
        help="Aspect ratio width/height, e.g. 1.5 or 4:3 (default: 4:3)",
    )

    # Colors
    parser.add_argument(
        "-p", "--palette", type=str, default=DEFAULT_PALETTE,
        choices=list(PALETTES),
        help=f"Palette preset (default: {DEFAULT_PALETTE})",
    )
    parser.add_argument("--list-palettes", action="store_true", help="List palettes and exit")

    # Quality
    parser.add_argument(
        "-q", "--profile", type=str, default=None,
        choices=list(PROFILES),
        help="Quality profile (low: 1x1 samples, medium: 2x2, high: 3x3)",
    )
    parser.add_argument("--max-iter", type=int, default=None, help="Iteration cap (overrides profile)")
    parser.add_argument(
        "-s", "--supersampling", type=int, default=None,
        help="Sub-samples per pixel edge (overrides profile, default: 3)",
    )
    parser.add_argument(
        "-j", "--workers", type=int, default=None,
        help="Threads used to score samples (default: CPU count, up to 8)",
    )

    parser.add_argument(
        "--show", action="store_true",
        help="Display the frame in the system image viewer (without it the run only reports statistics)",
    )
    return parser


def build_config(args: argparse.Namespace) -> RenderConfig:
    """Turn parsed arguments into a validated ``RenderConfig``."""
    camera = Camera(
        center_x=args.center_x,
        center_y=args.center_y,
        view_width=args.view_width,
        aspect_ratio=args.aspect,
    )
    height = args.height if args.height is not None else max(1, round(args.width / args.aspect))
    overrides = dict(
        width=args.width,
        height=height,
        camera=camera,
        palette=get_palette(args.palette),
        max_iter=args.max_iter,
        supersampling=args.supersampling,
        workers=args.workers if args.workers is not None else default_workers(),
    )
    if args.profile:
        return RenderConfig.from_profile(args.profile, **overrides)
    return RenderConfig(**{k: v for k, v in overrides.items() if v is not None})


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_palettes:
        for name, palette in PALETTES.items():
            stops = ", ".join(f"{b:g}" for b in palette.breakpoints)
            print(f"{name:12s} stops: {stops}")
        return 0

    try:
        config = build_config(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    cam = config.camera
    print(f"Rendering {config.width}x{config.height}")
    print(f"  Center: {cam.center_x:+.10g} {cam.center_y:+.10g}i, width {cam.view_width:.6g}")
    print(
        f"  Palette: {config.palette.name}, Max iter: {config.max_iter}, "
        f"Supersampling: {config.supersampling}x{config.supersampling}, Workers: {config.workers}"
    )

    surface = ImageSurface(config.width, config.height) if args.show else None

    t0 = time.time()
    renderer = FrameRenderer(config)
    frame = renderer.render(surface=surface, progress_callback=_band_reporter())
    elapsed = time.time() - t0

    print(f"\nDone! {frame.sample_count} samples, {frame.escaped_fraction * 100:.1f}% escaped")
    print(f"  Render took {elapsed:.2f}s")

    if surface is not None:
        surface.show(title="mandelscope")
    else:
        print("  Frame not displayed; pass --show to view it")
    return 0


if __name__ == "__main__":
    sys.exit(main())
