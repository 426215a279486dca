"""Command line entry point for rendering a scene.

Renders either the default three-sphere scene or a JSON scene file and
writes the result as a PNG.

Usage:
    whitted [options]
    python -m whitted [options]

Options:
    --width WIDTH               Image width in pixels (default: 1080)
    --height HEIGHT             Image height in pixels (default: 1080)
    --max-depth DEPTH           Maximum recursion depth (default: 3)
    --min-ray-distance DIST     Self-intersection epsilon (default: 0.1)
    --output OUTPUT             Output file path (default: images/out.png)
    --scene SCENE               JSON scene file (default: built-in scene)
    --arch {auto,cpu,gpu}       Taichi backend (default: auto)
    --gamma GAMMA               Gamma applied on export (default: 1.0)
    --batch-rows ROWS           Rows per progress update (default: 64)
    --quiet                     Only log warnings and errors
    --verbose                   Log debug messages

Example:
    whitted --width 256 --height 256 --max-depth 4 --output images/small.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Sequence
from pathlib import Path

import taichi as ti

from whitted.core.config import (
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_IMAGE_WIDTH,
    DEFAULT_MAX_RECURSION_DEPTH,
    DEFAULT_MIN_RAY_DISTANCE,
    DEFAULT_OUTPUT_PATH,
    RenderConfig,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(asctime)s][%(name)s][%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d][%H:%M:%S"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="whitted",
        description="Render a sphere scene with recursive Whitted ray tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_IMAGE_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_IMAGE_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_IMAGE_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_IMAGE_HEIGHT})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_RECURSION_DEPTH,
        help=f"Maximum recursion depth (default: {DEFAULT_MAX_RECURSION_DEPTH})",
    )
    parser.add_argument(
        "--min-ray-distance",
        type=float,
        default=DEFAULT_MIN_RAY_DISTANCE,
        help=f"Self-intersection epsilon (default: {DEFAULT_MIN_RAY_DISTANCE})",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=DEFAULT_OUTPUT_PATH,
        help=f"Output file path (default: {DEFAULT_OUTPUT_PATH})",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in three-sphere scene)",
    )
    parser.add_argument(
        "--arch",
        choices=("auto", "cpu", "gpu"),
        default="auto",
        help="Taichi backend (default: auto)",
    )
    parser.add_argument(
        "--gamma",
        type=float,
        default=1.0,
        help="Gamma applied on export (default: 1.0, linear)",
    )
    parser.add_argument(
        "--batch-rows",
        type=int,
        default=64,
        help="Rows per progress update (default: 64)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    verbosity.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug messages",
    )
    return parser.parse_args(argv)


def configure_logging(quiet: bool = False, verbose: bool = False) -> None:
    """Configure the root logger for command line use."""
    level = logging.INFO
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, force=True)


def init_taichi(arch: str) -> None:
    """Initialize Taichi on the requested backend.

    With "auto", the GPU backend is tried first and the CPU backend is used
    if it fails.
    """
    if arch == "cpu":
        ti.init(arch=ti.cpu)
    elif arch == "gpu":
        ti.init(arch=ti.gpu)
    else:
        try:
            ti.init(arch=ti.gpu)
        except Exception:
            logger.warning("GPU backend unavailable, falling back to CPU")
            ti.init(arch=ti.cpu)


def render_scene(
    config: RenderConfig,
    scene_path: str | None = None,
    gamma: float = 1.0,
    batch_rows: int = 64,
    show_progress: bool = True,
) -> Path:
    """Render a scene and save it to config.output_path.

    Taichi must already be initialized.

    Args:
        config: Render configuration.
        scene_path: JSON scene file, or None for the default scene.
        gamma: Gamma correction applied on export.
        batch_rows: Number of rows to render between progress updates.
        show_progress: If True, print a progress line to stderr.

    Returns:
        Path to the saved image file.

    Raises:
        SceneLoadError: If the scene file cannot be loaded.
        ImageSaveError: If the image cannot be written.
        ValueError: If the configuration is invalid.
    """
    # Lazy imports to allow Taichi initialization first
    from whitted.camera.image_plane import ImagePlaneCamera, setup_camera
    from whitted.core.renderer import Renderer
    from whitted.core.tunables import apply_render_config
    from whitted.preview.export import save_png
    from whitted.scene.default_scene import create_default_scene
    from whitted.scene.manager import load_scene_file

    apply_render_config(config)

    if scene_path is None:
        scene, camera = create_default_scene()
        logger.info("Using default scene")
    else:
        scene = load_scene_file(scene_path)
        camera = ImagePlaneCamera()

    logger.info(
        "Scene has %d spheres, %d materials, %d lights",
        scene.get_sphere_count(),
        scene.get_material_count(),
        scene.get_light_count(),
    )

    setup_camera(camera)
    renderer = Renderer(config.image_width, config.image_height, config.max_recursion_depth)

    start_time = time.perf_counter()

    def progress_callback(done: int, total: int) -> None:
        if show_progress:
            elapsed = time.perf_counter() - start_time
            print(
                f"\r  Progress: {done}/{total} rows ({done / total * 100:.1f}%) - {elapsed:.1f}s",
                end="",
                file=sys.stderr,
                flush=True,
            )

    renderer.render(batch_rows=batch_rows, callback=progress_callback)

    if show_progress:
        print(file=sys.stderr)  # Newline after progress

    return save_png(renderer, config.output_path, gamma=gamma)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(quiet=args.quiet, verbose=args.verbose)

    config = RenderConfig(
        min_ray_distance=args.min_ray_distance,
        max_recursion_depth=args.max_depth,
        image_width=args.width,
        image_height=args.height,
        output_path=args.output,
    )

    try:
        config.validate()
        if args.gamma <= 0.0:
            raise ValueError(f"--gamma must be positive, got {args.gamma}")
        if args.batch_rows <= 0:
            raise ValueError(f"--batch-rows must be positive, got {args.batch_rows}")
        init_taichi(args.arch)
        output = render_scene(
            config,
            scene_path=args.scene,
            gamma=args.gamma,
            batch_rows=args.batch_rows,
            show_progress=not args.quiet,
        )
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("%s", e)
        return 1

    logger.info("Saved to %s", output.absolute())
    return 0


if __name__ == "__main__":
    sys.exit(main())
