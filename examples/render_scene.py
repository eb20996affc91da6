#!/usr/bin/env python3
"""Render a scene file with a render config.

Reads the config and scene, applies RENDER_* environment overrides, renders
every pixel and writes the image. The output format follows the file suffix:
``.png`` writes a PNG, anything else a plain-text PPM.

Usage:
    python -m examples.render_scene CONFIG SCENE OUTPUT [options]

Options:
    --gpu               Use the Taichi GPU backend (needs float64 support,
                        e.g. CUDA; the default is the CPU backend)
    --batch-rows ROWS   Image rows per progress update (default: 16)
    --quiet             Suppress progress output

The scene summary, camera settings and progress go to stdout; errors go to
stderr with exit code 1.

Environment:
    RENDER_VFOV, RENDER_FROM, RENDER_AT, RENDER_VUP, RENDER_SPP,
    RENDER_SEED, RENDER_APERTURE, RENDER_FOCUS (vectors as x,y,z)

Example:
    python -m examples.render_scene examples/demo.cfg examples/demo.scene demo.ppm
    RENDER_SPP=16 python -m examples.render_scene examples/demo.cfg examples/demo.scene demo.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene file to a PPM or PNG image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("config", type=str, help="Render config file")
    parser.add_argument("scene", type=str, help="Scene description file")
    parser.add_argument("output", type=str, help="Output image (.ppm or .png)")
    parser.add_argument(
        "--gpu",
        action="store_true",
        help="Use the GPU backend (requires float64 support, e.g. CUDA)",
    )
    parser.add_argument(
        "--batch-rows",
        type=int,
        default=16,
        help="Image rows per progress update (default: 16)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_scene(
    config_path: str,
    scene_path: str,
    output_path: str,
    batch_rows: int = 16,
    quiet: bool = False,
) -> Path:
    """Parse the inputs, render and save the image.

    Args:
        config_path: Render config file.
        scene_path: Scene description file.
        output_path: Output image path.
        batch_rows: Image rows shaded between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.

    Raises:
        ParseError: If the config, scene or an environment override is invalid.
        OSError: If the image cannot be written.
    """
    # Lazy imports to allow Taichi initialization first
    from src.minitrace.camera.thin_lens import Camera
    from src.minitrace.core.integrator import render_image
    from src.minitrace.parsing.config import apply_env_overrides, load_config
    from src.minitrace.parsing.scene import load_scene
    from src.minitrace.preview.export import save_image

    config = apply_env_overrides(load_config(config_path))
    scene = load_scene(scene_path)

    if not quiet:
        print(scene.summary())
        if scene.spheres:
            first = scene.spheres[0]
            c = first.center
            print(f"first sphere: c=({c.x}, {c.y}, {c.z}), r={first.radius}")
        print(
            f"camera: {config.width}x{config.height}, fov={config.vertical_fov_deg}, "
            f"spp={config.samples_per_pixel}, seed={config.seed}, "
            f"aperture={config.aperture}, focus={config.focus_dist}"
        )

    camera = Camera.from_config(config)

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            progress_pct = (current / target) * 100 if target > 0 else 0
            print(
                f"\r  Progress: {current}/{target} rows ({progress_pct:.1f}%)",
                end="",
                flush=True,
            )

    image = render_image(camera, scene, batch_rows=batch_rows, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = save_image(output_path, image, gamma=config.gamma)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Shading runs in double precision to match the Python reference
    arch = ti.gpu if args.gpu else ti.cpu
    ti.init(arch=arch, default_fp=ti.f64)

    from src.minitrace.parsing.errors import ParseError

    try:
        render_scene(
            config_path=args.config,
            scene_path=args.scene,
            output_path=args.output,
            batch_rows=args.batch_rows,
            quiet=args.quiet,
        )
        return 0
    except ParseError as e:
        print(e, file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
