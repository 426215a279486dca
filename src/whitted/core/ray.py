"""Ray data structure and vector utilities for Whitted ray tracing.

This module provides the fundamental Ray dataclass and the small set of
vector helpers the shading engine relies on. All operations are designed to
work within Taichi kernels.

Colors share the vector type: an RGB color is a ``vec3`` whose components
are the red, green and blue channels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.ray import Ray, ray_at, vec3
    >>> primary = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, 1.0))
    >>> hit_point = ray_at(primary, 20.0)  # on the glass sphere of the demo scene
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors (and RGB colors) using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A half-line cast from a point on the image plane or a surface.

    Attributes:
        origin: Where the ray starts (vec3).
        direction: The direction vector of the ray (vec3). Expected to be
            unit length by convention, but this is not enforced.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Evaluate the ray at distance t from its origin.

    Args:
        ray: The ray to evaluate.
        t: Distance along the ray. Only t above the self-intersection
            epsilon counts as a hit.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Build a Ray from its two vectors."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean norm, used for light falloff and root tests."""
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(tm.dot(v, v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Unlike ``tm.normalize``, a zero-length input does not produce NaN
    components: the zero vector is returned unchanged, so degenerate
    directions contribute nothing instead of poisoning a color sum.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or the zero vector if v
        has zero length.
    """
    unit = vec3(0.0, 0.0, 0.0)
    norm_sq = tm.dot(v, v)
    if norm_sq > 0.0:
        unit = v / ti.sqrt(norm_sq)
    return unit
