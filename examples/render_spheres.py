#!/usr/bin/env python3
"""Render one of the sphere scenes.

This script renders either the four-sphere default scene or the random
spheres scene with the scanline renderer and writes a PNG, or a plain-text
PPM when the output path ends in ``.ppm`` (``-`` writes PPM to stdout).

Usage:
    python examples/render_spheres.py [options]

Options:
    --scene {default,random}  Scene to render (default: default)
    --width WIDTH             Image width in pixels (default: 800)
    --height HEIGHT           Image height in pixels (default: 400)
    --samples SAMPLES         Number of samples per pixel (default: 100)
    --max-depth DEPTH         Maximum bounces per path (default: 50)
    --rows-per-batch ROWS     Scanlines per progress update (default: 16)
    --threads THREADS         Worker threads (default: all hardware threads)
    --seed SEED               Random seed (default: 0)
    --output OUTPUT           Output file path (default: spheres.png)
    --quiet                   Suppress progress output
    --verbose                 Enable debug logging

Example:
    python examples/render_spheres.py --scene random --width 400 --height 225 --samples 20
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np

from fastray.config import RenderSettings, init_runtime


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("default", "random"),
        default="default",
        help="Scene to render (default: default)",
    )
    parser.add_argument("--width", type=int, default=800, help="Image width in pixels (default: 800)")
    parser.add_argument("--height", type=int, default=400, help="Image height in pixels (default: 400)")
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum bounces per path (default: 50)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=16,
        help="Scanlines per progress update (default: 16)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Worker threads (default: all hardware threads)",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path, .png or .ppm, '-' for PPM on stdout (default: spheres.png)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def render_spheres(
    scene_name: str,
    settings: RenderSettings,
    seed: int = 0,
    output_path: str = "spheres.png",
    quiet: bool = False,
) -> None:
    """Render a scene and write the image.

    Args:
        scene_name: "default" or "random".
        settings: Image and sampling parameters.
        seed: Seed for scene generation.
        output_path: PNG or PPM path, or "-" for PPM on stdout.
        quiet: If True, suppress progress output.
    """
    # Lazy imports to allow Taichi initialization first
    from fastray.core.renderer import ScanlineRenderer
    from fastray.preview.export import save_png, write_ppm
    from fastray.scene.scenes import create_default_scene, create_random_scene

    # Progress goes to stderr when the image itself goes to stdout
    out = sys.stderr if output_path == "-" else sys.stdout

    if not quiet:
        print(f"Creating {scene_name} scene ({settings.width}x{settings.height})...", file=out)

    if scene_name == "random":
        _, camera = create_random_scene(
            np.random.default_rng(seed), aspect_ratio=settings.aspect_ratio
        )
    else:
        _, camera = create_default_scene(aspect_ratio=settings.aspect_ratio)

    renderer = ScanlineRenderer(settings, camera)

    if not quiet:
        print(f"Rendering {settings.samples_per_pixel} samples per pixel...", file=out)

    start_time = time.time()

    def progress_callback(current: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / total) * 100 if total > 0 else 0
            rays_per_sec = renderer.stats.rays_traced / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{total} scanlines "
                f"({progress_pct:.1f}%) - {rays_per_sec / 1e6:.2f} Mrays/s",
                end="",
                flush=True,
                file=out,
            )

    image = renderer.render(callback=progress_callback)

    if not quiet:
        print(file=out)  # Newline after progress

    if output_path == "-":
        write_ppm(image, sys.stdout)
    elif output_path.endswith(".ppm"):
        with open(output_path, "w", encoding="ascii") as stream:
            write_ppm(image, stream)
    else:
        save_png(image, output_path)

    total_time = time.time() - start_time
    if not quiet:
        if output_path != "-":
            print(f"Saved to: {Path(output_path).absolute()}", file=out)
        print(
            f"Total time: {total_time:.2f}s, {renderer.stats.rays_traced} rays traced",
            file=out,
        )


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        settings = RenderSettings(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            rows_per_batch=args.rows_per_batch,
        )
        init_runtime(seed=args.seed, num_threads=args.threads)
        render_spheres(
            args.scene,
            settings,
            seed=args.seed,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
