#!/usr/bin/env python3
"""Render the meadow demo scene.

Creates the demo scene, renders one or more palette-quantized frames and
saves the last one as a PNG.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 320)
    --height HEIGHT     Image height in pixels (default: 180)
    --mode MODE         path_traced or direct_lit (default: path_traced)
    --bounces N         Path depth in path-traced mode (default: 4)
    --rays N            Rays per pixel in path-traced mode (default: 4)
    --block SIZE        Output pixels per trace along each axis (default: 1)
    --metric METRIC     euclidean or perceptual (default: perceptual)
    --preset PRESET     Perceptual constants, soft or hue (default: soft)
    --frames N          Number of frames to render (default: 1)
    --scale N           Nearest-neighbour upscale of the saved PNG (default: 3)
    --output OUTPUT     Output file path (default: meadow.png)
    --quiet             Suppress progress output

Example:
    python -m examples.render_scene --mode direct_lit --block 2 --output meadow.png
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
        description="Render the meadow demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=320, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=180, help="Image height in pixels")
    parser.add_argument(
        "--mode",
        choices=["path_traced", "direct_lit"],
        default="path_traced",
        help="Shading mode (default: path_traced)",
    )
    parser.add_argument("--bounces", type=int, default=4, help="Path depth (default: 4)")
    parser.add_argument("--rays", type=int, default=4, help="Rays per pixel (default: 4)")
    parser.add_argument(
        "--block", type=int, default=1, help="Output pixels per trace along each axis"
    )
    parser.add_argument(
        "--metric",
        choices=["euclidean", "perceptual"],
        default="perceptual",
        help="Palette distance metric (default: perceptual)",
    )
    parser.add_argument(
        "--preset",
        choices=["soft", "hue"],
        default="soft",
        help="Perceptual metric constants (default: soft)",
    )
    parser.add_argument("--frames", type=int, default=1, help="Frames to render (default: 1)")
    parser.add_argument("--scale", type=int, default=3, help="PNG upscale factor (default: 3)")
    parser.add_argument(
        "--output", type=str, default="meadow.png", help="Output file path (default: meadow.png)"
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_scene(
    width: int = 320,
    height: int = 180,
    settings_dict: dict | None = None,
    num_frames: int = 1,
    scale: int = 3,
    output_path: str = "meadow.png",
    quiet: bool = False,
) -> Path:
    """Render the meadow scene and save the last frame.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        settings_dict: RenderSettings fields as a plain dictionary.
        num_frames: Number of frames to render.
        scale: Nearest-neighbour upscale of the saved image.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from palettetrace.core.renderer import FrameRenderer
    from palettetrace.core.settings import RenderSettings
    from palettetrace.preview.export import save_png
    from palettetrace.scene.demo import create_meadow_scene

    if not quiet:
        print(f"Creating meadow scene ({width}x{height})...")

    scene, camera = create_meadow_scene()
    settings = RenderSettings.from_dict(settings_dict or {})
    renderer = FrameRenderer(width, height, settings=settings, camera=camera)

    if not quiet:
        print(
            f"Scene: {scene.get_sphere_count()} spheres, "
            f"{scene.get_triangle_count()} triangles, {scene.get_light_count()} lights"
        )
        print(f"Rendering {num_frames} frame(s) in {settings.mode.name.lower()} mode...")

    start_time = time.time()
    for frame_time, _ in renderer.render_frames(num_frames):
        if not quiet:
            elapsed = time.time() - start_time
            fps = (frame_time.frame + 1) / elapsed if elapsed > 0 else 0.0
            print(
                f"\r  Frame {frame_time.frame + 1}/{num_frames} - {fps:.1f} fps",
                end="",
                flush=True,
            )

    if not quiet:
        print()

    output_file = Path(output_path)
    save_png(renderer, str(output_file), scale=scale)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    settings = {
        "mode": args.mode,
        "bounces": args.bounces,
        "rays_per_pixel": args.rays,
        "block_size": args.block,
        "metric": args.metric,
        "perceptual_preset": args.preset,
    }
    try:
        render_scene(
            width=args.width,
            height=args.height,
            settings_dict=settings,
            num_frames=args.frames,
            scale=args.scale,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
