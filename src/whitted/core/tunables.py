"""Taichi-side storage for the runtime tunables.

The self-intersection epsilon lives in a Taichi scalar field so it can be
changed between renders without recompiling kernels. The recursion bound
is not stored here: it is passed to the render kernels as an argument.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.config import RenderConfig
    >>> from whitted.core.tunables import apply_render_config
    >>> apply_render_config(RenderConfig(min_ray_distance=0.01))
"""

import taichi as ti

from whitted.core.config import (
    DEFAULT_MIN_RAY_DISTANCE,
    RenderConfig,
    validate_min_ray_distance,
)

_min_ray_distance = ti.field(dtype=ti.f32, shape=())
_tunables_initialized = ti.field(dtype=ti.i32, shape=())


def set_min_ray_distance(distance: float) -> None:
    """Set the self-intersection epsilon used by all intersection tests.

    Raises:
        ValueError: If distance is negative.
    """
    validate_min_ray_distance(distance)
    _min_ray_distance[None] = distance
    _tunables_initialized[None] = 1


def get_min_ray_distance_python() -> float:
    """Get the current self-intersection epsilon (Python scope)."""
    ensure_render_config()
    return float(_min_ray_distance[None])


def reset_render_config() -> None:
    """Restore the runtime tunables to their defaults."""
    set_min_ray_distance(DEFAULT_MIN_RAY_DISTANCE)


def ensure_render_config() -> None:
    """Load the default tunables if none have been set since ti.init()."""
    if _tunables_initialized[None] == 0:
        reset_render_config()


def apply_render_config(config: RenderConfig) -> None:
    """Validate a RenderConfig and push its runtime tunables to Taichi.

    Raises:
        ValueError: If the configuration is invalid.
    """
    config.validate()
    set_min_ray_distance(config.min_ray_distance)


@ti.func
def get_min_ray_distance() -> ti.f32:
    """Get the current self-intersection epsilon (Taichi scope)."""
    return _min_ray_distance[None]
