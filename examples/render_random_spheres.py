#!/usr/bin/env python3
"""Render the random spheres scene.

This script builds the random spheres showcase scene, sets up the thin-lens
camera, renders with progressive accumulation, and writes the image file.

Usage:
    python -m examples.render_random_spheres [options]

Options:
    --width WIDTH           Image width in pixels (default: 1200)
    --aspect-ratio RATIO    Image width / height (default: 1.7778)
    --samples SAMPLES       Number of samples per pixel (default: 500)
    --max-depth DEPTH       Maximum bounces per path (default: 50)
    --grid EXTENT           Small sphere grid extent (default: 22)
    --seed SEED             Scene randomization seed (default: random)
    --output OUTPUT         Output file path (default: output.jpg)
    --batch-size SIZE       Samples per progress update (default: 10)
    --cpu                   Force the CPU backend
    --quiet                 Suppress progress output

Example:
    python -m examples.render_random_spheres --width 400 --samples 50 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

from src.pathtrace import init_runtime

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=1200,
        help="Image width in pixels (default: 1200)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=16.0 / 9.0,
        help="Image width divided by height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=500,
        help="Number of samples per pixel (default: 500)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum bounces per path (default: 50)",
    )
    parser.add_argument(
        "--grid",
        type=int,
        default=22,
        help="Small sphere grid extent per axis (default: 22)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Scene randomization seed (default: random)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="output.jpg",
        help="Output file path (default: output.jpg)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_random_spheres(
    width: int = 1200,
    aspect_ratio: float = 16.0 / 9.0,
    num_samples: int = 500,
    max_depth: int = 50,
    grid_extent: int = 22,
    seed: int | None = None,
    output_path: str = "output.jpg",
    batch_size: int = 10,
    quiet: bool = False,
) -> Path:
    """Render the random spheres scene and save to file.

    Args:
        width: Image width in pixels.
        aspect_ratio: Image width divided by height.
        num_samples: Number of samples per pixel.
        max_depth: Maximum bounces per path.
        grid_extent: Small sphere grid extent per axis.
        seed: Scene randomization seed, or None for a random scene.
        output_path: Output file path. The extension selects the format.
        batch_size: Number of samples to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtrace.core.progressive import ProgressiveRenderer
    from src.pathtrace.scene.random_spheres import (
        RandomSpheresParams,
        create_random_spheres_scene,
    )

    params = RandomSpheresParams(
        grid_extent=grid_extent,
        seed=seed,
        image_width=width,
        aspect_ratio=aspect_ratio,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
    )
    scene, camera_config = create_random_spheres_scene(params)
    logger.info("Scene: %s", scene.summary())

    renderer = ProgressiveRenderer(camera_config)
    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
                file=sys.stderr,
            )

    renderer.render(batch_size=batch_size, callback=progress_callback)

    if not quiet:
        print(file=sys.stderr)  # Newline after progress

    output_file = Path(output_path)
    renderer.save_image(str(output_file))

    logger.info("Saved to: %s", output_file.absolute())
    logger.info("Total time: %.2fs", time.time() - start_time)
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    if args.cpu:
        init_runtime(arch=ti.cpu)
    else:
        try:
            init_runtime(arch=ti.gpu)
        except Exception:
            init_runtime(arch=ti.cpu)

    try:
        render_random_spheres(
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            num_samples=args.samples,
            max_depth=args.max_depth,
            grid_extent=args.grid,
            seed=args.seed,
            output_path=args.output,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
        return 0
    except (RuntimeError, ValueError, OSError) as e:
        logger.error("Render failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
