"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    config: Render configuration and default tunables
    tunables: Taichi-side storage for the self-intersection epsilon
    splitting: Reflected and refracted ray construction
    lighting: Direct diffuse illumination from point lights
    integrator: Recursive Whitted shader and render kernels
    renderer: Row-band rendering loop with progress reporting

Only ray and config are imported here since they create no Taichi fields.
Import the other modules directly after ti.init(), e.g.:
    from whitted.core.renderer import Renderer
"""

from .config import (
    DEFAULT_IMAGE_HEIGHT,
    DEFAULT_IMAGE_WIDTH,
    DEFAULT_MAX_RECURSION_DEPTH,
    DEFAULT_MIN_RAY_DISTANCE,
    DEFAULT_OUTPUT_PATH,
    MAX_SUPPORTED_DEPTH,
    RenderConfig,
    validate_min_ray_distance,
    validate_recursion_depth,
)
from .ray import Ray, dot, length, length_squared, make_ray, normalize, ray_at, vec3

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "RenderConfig",
    "validate_min_ray_distance",
    "validate_recursion_depth",
    "DEFAULT_MIN_RAY_DISTANCE",
    "DEFAULT_MAX_RECURSION_DEPTH",
    "DEFAULT_IMAGE_WIDTH",
    "DEFAULT_IMAGE_HEIGHT",
    "DEFAULT_OUTPUT_PATH",
    "MAX_SUPPORTED_DEPTH",
]
