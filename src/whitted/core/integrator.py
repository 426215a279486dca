"""Recursive Whitted shading and image rendering kernels.

This module implements the recursive shader and the kernels that evaluate
it for every pixel of an image.

The shader is a pure function of (ray, depth):

    - depth > max_depth: black, without testing any intersection.
    - no hit: black (the background).
    - hit: split the ray into reflected and refracted children, evaluate
      direct illumination at the hit, shade both children at depth + 1,
      and combine:

          Ia + kd * D + ks * S + kt * T

      with per-channel products. T is black when no refracted ray exists.

Taichi functions cannot recurse, so the ray tree is walked with an explicit
stack of pending rays. max_depth is an ordinary kernel argument: changing
it between renders does not recompile anything, and each primary ray
shades at most 2^(max_depth + 1) - 1 nodes.

Every pixel is independent and the scene is read-only during a render, so
the render kernel parallelizes over pixels with no synchronization.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.default_scene import create_default_scene
    >>> from whitted.camera.image_plane import setup_camera
    >>> from whitted.core.integrator import setup_render_target, render_image
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(256, 256)
    >>> render_image(max_depth=3)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from whitted.camera.image_plane import get_ray
from whitted.core.config import (
    DEFAULT_MAX_RECURSION_DEPTH,
    MAX_SUPPORTED_DEPTH,
    validate_recursion_depth,
)
from whitted.core.lighting import direct_illumination
from whitted.core.splitting import split_ray
from whitted.core.tunables import ensure_render_config
from whitted.materials.material import get_material
from whitted.scene.intersection import intersect_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Recursive Shader
# =============================================================================

# Capacity of the pending-ray stack. Each shaded node pushes at most two
# children and the traversal is depth-first, so at most one sibling waits
# per level.
RAY_STACK_SIZE = MAX_SUPPORTED_DEPTH + 2


@ti.func
def cast_ray(
    ray_origin: vec3,
    ray_direction: vec3,
    depth: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Shade a ray with the Whitted illumination model.

    The ray tree is walked depth-first with a fixed-size stack of pending
    (origin, direction, weight, depth) entries. The weight of a child is
    its parent's weight times ks (reflected) or kt (refracted), so the sum
    of weight * (Ia + kd * D) over all shaded nodes equals the recursive
    combination. Children whose weight is zero in every channel are not
    traced.

    Args:
        ray_origin: Origin of the ray.
        ray_direction: Unit direction of the ray.
        depth: Recursion depth of this ray. Primary rays are depth 0.
        max_depth: Maximum recursion depth.

    Returns:
        The color seen along the ray (RGB, unclamped).
    """
    color = vec3(0.0, 0.0, 0.0)

    origins = ti.Matrix.zero(ti.f32, RAY_STACK_SIZE, 3)
    directions = ti.Matrix.zero(ti.f32, RAY_STACK_SIZE, 3)
    weights = ti.Matrix.zero(ti.f32, RAY_STACK_SIZE, 3)
    depths = ti.Vector([0 for _ in range(RAY_STACK_SIZE)], dt=ti.i32)

    for k in ti.static(range(3)):
        origins[0, k] = ray_origin[k]
        directions[0, k] = ray_direction[k]
        weights[0, k] = 1.0
    depths[0] = depth
    top = 1

    while top > 0:
        top -= 1
        origin = vec3(origins[top, 0], origins[top, 1], origins[top, 2])
        direction = vec3(directions[top, 0], directions[top, 1], directions[top, 2])
        weight = vec3(weights[top, 0], weights[top, 1], weights[top, 2])
        ray_depth = depths[top]

        if ray_depth > max_depth:
            continue

        hit_record = intersect_scene(origin, direction)
        if hit_record.hit == 0:
            continue

        material = get_material(hit_record.material_id)
        diffuse_light = direct_illumination(hit_record.point, hit_record.normal)
        color += weight * (material.ambient + material.diffuse * diffuse_light)

        if ray_depth < max_depth:
            split = split_ray(
                origin,
                direction,
                hit_record.t,
                hit_record.normal,
                material.refractive_index,
            )

            refracted_weight = weight * material.transmissive
            if split.has_refraction == 1 and refracted_weight.max() > 0.0:
                if top < RAY_STACK_SIZE:
                    for k in ti.static(range(3)):
                        origins[top, k] = split.origin[k]
                        directions[top, k] = split.refracted_direction[k]
                        weights[top, k] = refracted_weight[k]
                    depths[top] = ray_depth + 1
                    top += 1

            reflected_weight = weight * material.specular
            if reflected_weight.max() > 0.0:
                if top < RAY_STACK_SIZE:
                    for k in ti.static(range(3)):
                        origins[top, k] = split.origin[k]
                        directions[top, k] = split.reflected_direction[k]
                        weights[top, k] = reflected_weight[k]
                    depths[top] = ray_depth + 1
                    top += 1

    return color


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer, indexed [x, row] with row 0 at the top of the image
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffer.

    Sets the active image dimensions and clears the buffer. The buffer is
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT to avoid Taichi
    kernel recompilation.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to black."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Forget the render target so rendering requires a new setup."""
    _render_target_initialized[None] = 0
    clear_render_target()


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    width: ti.i32,
    height: ti.i32,
    row_start: ti.i32,
    row_end: ti.i32,
    max_depth: ti.i32,
):
    """Shade every pixel in rows [row_start, row_end) of the image."""
    for i, j in ti.ndrange(width, (row_start, row_end)):
        ray = get_ray(i, j, width, height)
        _color_buffer[i, j] = cast_ray(ray.origin, ray.direction, 0, max_depth)


@ti.kernel
def _cast_single_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Shade a single ray. Used for testing and debugging."""
    return cast_ray(vec3(ox, oy, oz), vec3(dx, dy, dz), depth, max_depth)


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Shade the primary ray of a single pixel without touching the buffer."""
    ray = get_ray(pixel_i, pixel_j, width, height)
    return cast_ray(ray.origin, ray.direction, 0, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
    max_depth: int = DEFAULT_MAX_RECURSION_DEPTH,
) -> tuple[float, float, float]:
    """Shade a single ray against the current scene.

    This is a Python-callable entry point for testing and inspection. For
    whole images use render_image(), which processes all pixels in
    parallel.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z). Should be unit length.
        depth: Recursion depth to start at. Values above max_depth return
            black without any intersection test.
        max_depth: Maximum recursion depth.

    Returns:
        Tuple of (R, G, B) color values (unclamped).

    Raises:
        ValueError: If depth is negative or max_depth is out of range.
    """
    validate_recursion_depth(max_depth)
    if depth < 0:
        raise ValueError(f"depth must be non-negative, got {depth}")
    ensure_render_config()

    color = _cast_single_ray(
        float(origin[0]),
        float(origin[1]),
        float(origin[2]),
        float(direction[0]),
        float(direction[1]),
        float(direction[2]),
        int(depth),
        int(max_depth),
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_pixel(
    pixel_i: int, pixel_j: int, max_depth: int = DEFAULT_MAX_RECURSION_DEPTH
) -> tuple[float, float, float]:
    """Shade the primary ray of one pixel of the current render target.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel row (0 = top).
        max_depth: Maximum recursion depth.

    Returns:
        Tuple of (R, G, B) color values (unclamped).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    validate_recursion_depth(max_depth)
    ensure_render_config()

    width, height = get_image_dimensions()
    color = _render_single_pixel(pixel_i, pixel_j, width, height, int(max_depth))
    return (float(color[0]), float(color[1]), float(color[2]))


def render_rows(
    row_start: int, row_end: int, max_depth: int = DEFAULT_MAX_RECURSION_DEPTH
) -> None:
    """Render a band of image rows into the color buffer.

    Args:
        row_start: First row to render (inclusive, 0 = top).
        row_end: Last row to render (exclusive).
        max_depth: Maximum recursion depth.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row range is outside the image.
    """
    _check_render_target_initialized()
    validate_recursion_depth(max_depth)
    ensure_render_config()

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Row range [{row_start}, {row_end}) is outside [0, {height})")
    if row_start == row_end:
        return

    _render_rows(width, height, row_start, row_end, int(max_depth))


def render_image(max_depth: int = DEFAULT_MAX_RECURSION_DEPTH) -> None:
    """Render every pixel of the render target.

    Args:
        max_depth: Maximum recursion depth.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    logger.debug("Rendering %dx%d image at max depth %d", width, height, max_depth)
    render_rows(0, height, max_depth)


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    The values are the raw shaded colors; they are not clamped. The array
    shape is (height, width, 3) with row 0 at the top.

    Returns:
        NumPy array of shape (height, width, 3) with dtype float32.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    return np.ascontiguousarray(image, dtype=np.float32)
