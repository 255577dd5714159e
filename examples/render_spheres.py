#!/usr/bin/env python3
"""Render the default three-spheres scene.

This script renders the demo world (a diffuse sphere between a silver and a
gold metal sphere, resting on a large ground sphere) and writes the image
to disk.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH          Image width in pixels (default: 400)
    --samples SAMPLES      Number of samples per pixel (default: 100)
    --max-depth DEPTH      Maximum bounces per path (default: 50)
    --seed SEED            Random seed (default: 0)
    --output OUTPUT        Output file path (default: spheres.png)
    --rows-per-batch ROWS  Rows per progress update (default: 16)
    --absorb-below         Absorb metal reflections that point into the surface
    --preview              Show the result in a Matplotlib window
    --quiet                Suppress progress output

Example:
    python -m examples.render_spheres --width 200 --samples 20 --output small.png
"""

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the default three-spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument(
        "--samples", type=int, default=100, help="Number of samples per pixel (default: 100)"
    )
    parser.add_argument(
        "--max-depth", type=int, default=50, help="Maximum bounces per path (default: 50)"
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed (default: 0)")
    parser.add_argument(
        "--output", type=str, default="spheres.png", help="Output file path (default: spheres.png)"
    )
    parser.add_argument(
        "--rows-per-batch", type=int, default=16, help="Rows per progress update (default: 16)"
    )
    parser.add_argument(
        "--absorb-below",
        action="store_true",
        help="Absorb metal reflections that point into the surface",
    )
    parser.add_argument("--preview", action="store_true", help="Show the result in a window")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_spheres(
    width: int = 400,
    samples_per_pixel: int = 100,
    max_depth: int = 50,
    seed: int = 0,
    output_path: str = "spheres.png",
    rows_per_batch: int = 16,
    absorb_below: bool = False,
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the default scene and save it to a file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from raygun.core.renderer import Renderer, RenderSettings
    from raygun.preview.display import show_preview
    from raygun.scene.default_scene import create_default_scene

    settings = RenderSettings(
        width=width,
        samples_per_pixel=samples_per_pixel,
        max_depth=max_depth,
        seed=seed,
        rows_per_batch=rows_per_batch,
        metal_absorbs_below_surface=absorb_below,
    )

    if not quiet:
        print(f"Creating default scene ({settings.width}x{settings.height})...")
    scene, camera = create_default_scene(aspect_ratio=settings.aspect_ratio)

    renderer = Renderer(settings, camera)

    if not quiet:
        print(f"Rendering {samples_per_pixel} samples per pixel...")

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            progress_pct = (rows_done / total_rows) * 100 if total_rows > 0 else 0
            print(
                f"\r  Scanlines remaining: {total_rows - rows_done:4d} ({progress_pct:.1f}%)",
                end="",
                flush=True,
            )

    image = renderer.render(callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    renderer.save_image(output_file)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if preview:
        show_preview(image, title=f"{samples_per_pixel} spp, seed {seed}")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu, default_fp=ti.f64)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu, default_fp=ti.f64)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_spheres(
            width=args.width,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            output_path=args.output,
            rows_per_batch=args.rows_per_batch,
            absorb_below=args.absorb_below,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
