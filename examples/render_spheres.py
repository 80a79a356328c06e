#!/usr/bin/env python3
"""Render the four-sphere reference scene.

This script renders the reference scene (two matte spheres, two metal spheres
and a sky) end to end and writes the result as a plain-text PPM or a PNG.

Usage:
    python examples/render_spheres.py [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 200)
    --samples SAMPLES   Samples per pixel (default: 32)
    --depth DEPTH       Maximum bounces per path (default: 8)
    --seed SEED         Random seed (default: fresh entropy)
    --output OUTPUT     Output path; "-" writes PPM to stdout, a .png path
                        writes PNG, anything else PPM (default: -)
    --arch ARCH         Taichi backend (default: cpu)
    --threads N         CPU worker threads (default: Taichi's choice)
    --quiet             Suppress progress output

Example:
    python examples/render_spheres.py --samples 64 --output spheres.png
"""

import argparse
import sys
import time
from pathlib import Path

from eyetrace.config import RenderConfig, init_taichi


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = RenderConfig()
    parser = argparse.ArgumentParser(
        description="Render the four-sphere reference scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.width,
        help=f"Image width in pixels (default: {defaults.width})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=defaults.height,
        help=f"Image height in pixels (default: {defaults.height})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults.samples_per_pixel,
        help=f"Samples per pixel (default: {defaults.samples_per_pixel})",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=defaults.max_depth,
        help=f"Maximum bounces per path (default: {defaults.max_depth})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: fresh entropy)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help='Output path; "-" for PPM on stdout, .png for PNG (default: -)',
    )
    parser.add_argument(
        "--arch",
        type=str,
        default=defaults.arch,
        help=f"Taichi backend (default: {defaults.arch})",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="CPU worker threads (default: Taichi's choice)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def log(message: str, quiet: bool) -> None:
    # stdout may carry the image
    if not quiet:
        print(message, file=sys.stderr)


def render_spheres(config: RenderConfig, output_path: str = "-", quiet: bool = False) -> None:
    """Render the reference scene and write it out.

    Args:
        config: Render settings.
        output_path: "-" for PPM on stdout, a .png path for PNG, else PPM.
        quiet: If True, suppress progress output.
    """
    # Lazy imports so Taichi is initialized before any field is created
    from eyetrace.core.renderer import render_scene
    from eyetrace.output.export import save_png, save_ppm, write_ppm

    log(
        f"Rendering {config.width}x{config.height}, "
        f"{config.samples_per_pixel} spp, depth {config.max_depth}...",
        quiet,
    )
    start_time = time.time()

    renderer = render_scene(config)
    framebuffer = renderer.framebuffer

    log(f"Render time: {time.time() - start_time:.2f}s", quiet)

    if output_path == "-":
        write_ppm(framebuffer, sys.stdout)
        sys.stdout.flush()
        return

    output_file = Path(output_path)
    if output_file.suffix.lower() == ".png":
        save_png(framebuffer, str(output_file))
    else:
        save_ppm(framebuffer, str(output_file))
    log(f"Saved to: {output_file.absolute()}", quiet)


def main() -> int:
    """Main entry point."""
    args = parse_args()

    try:
        config = RenderConfig(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.depth,
            seed=args.seed,
            arch=args.arch,
            num_threads=args.threads,
        )
        init_taichi(config)
        render_spheres(config, output_path=args.output, quiet=args.quiet)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
