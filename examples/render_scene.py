#!/usr/bin/env python3
"""Ray trace the Cornell box scene graph.

This script builds the Cornell box scene graph, installs a headless renderer
and ray traces a still image with Phong shading, hard shadows and a
spotlight.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH         Image width in pixels (default: 256)
    --height HEIGHT       Image height in pixels (default: 256)
    --output OUTPUT       Output file path (default: scene.png)
    --sequence-dir DIR    Write image001.png, image002.png, ... into DIR instead
    --workers N           Worker threads tracing scan lines (default: 1)
    --no-spotlight        Leave out the spotlight
    --quiet               Suppress progress output
    --verbose             Enable debug logging

Example:
    python -m examples.render_scene --width 128 --height 128 --workers 4
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Ray trace the Cornell box scene graph.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=256,
        help="Image width in pixels (default: 256)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=256,
        help="Image height in pixels (default: 256)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="scene.png",
        help="Output file path (default: scene.png)",
    )
    parser.add_argument(
        "--sequence-dir",
        type=str,
        default=None,
        help="Write numbered images (image001.png, ...) into this directory",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker threads tracing scan lines (default: 1)",
    )
    parser.add_argument(
        "--no-spotlight",
        action="store_true",
        help="Leave out the spotlight",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args()


def render_scene(
    width: int = 256,
    height: int = 256,
    output_path: str = "scene.png",
    sequence_dir: str | None = None,
    workers: int = 1,
    spotlight: bool = True,
    quiet: bool = False,
) -> Path:
    """Ray trace the Cornell box scene graph and save it to a file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        output_path: Output file path (PNG), used when sequence_dir is None.
        sequence_dir: Directory for sequentially numbered output files.
        workers: Number of worker threads tracing scan lines.
        spotlight: Whether the scene includes the spotlight.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.sgraph.core.config import RayTraceConfig
    from src.sgraph.preview.export import ImageSequenceWriter, save_png
    from src.sgraph.scene.cornell_box import CornellBoxParams, create_cornell_box_scene

    if not quiet:
        print(f"Creating Cornell box scene graph ({width}x{height})...")

    graph, camera = create_cornell_box_scene(params=CornellBoxParams(spotlight=spotlight))
    graph.config = RayTraceConfig(max_workers=workers)

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            rows_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} rows "
                f"({progress_pct:.1f}%) - {rows_per_sec:.1f} rows/s",
                end="",
                flush=True,
            )

    if not quiet:
        print(f"Ray tracing with {workers} worker(s)...")

    stack = camera.view_stack()
    if sequence_dir is not None:
        writer = ImageSequenceWriter(sequence_dir)
        output_file = graph.ray_trace_to_file(
            width, height, stack, camera.vfov, writer, progress_callback=progress_callback
        )
    else:
        image = graph.ray_trace(width, height, stack, camera.vfov, progress_callback=progress_callback)
        output_file = save_png(image, output_path)

    if not quiet:
        print()  # Newline after progress

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    graph.dispose()
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Quantisation kernels run on host arrays
    ti.init(arch=ti.cpu)

    from src.sgraph.core.errors import SceneGraphError

    try:
        render_scene(
            width=args.width,
            height=args.height,
            output_path=args.output,
            sequence_dir=args.sequence_dir,
            workers=args.workers,
            spotlight=not args.no_spotlight,
            quiet=args.quiet,
        )
        return 0
    except (SceneGraphError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
