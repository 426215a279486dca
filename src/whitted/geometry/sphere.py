"""Sphere primitive with analytic ray-sphere intersection.

This module provides a Sphere dataclass and the intersection routine used by
the scene resolver and the shadow tester.

For a ray with unit direction d starting at o, and a sphere with center c and
radius r, let diff = o - c. Points on the ray satisfy |o + t*d - c| = r, which
for unit d reduces to:

    t^2 + 2*(d . diff)*t + |diff|^2 - r^2 = 0

with discriminant (d . diff)^2 - |diff|^2 + r^2 and roots
t = -(d . diff) +/- sqrt(discriminant).

Roots at or below the self-intersection epsilon are rejected, so a ray that
starts on (or numerically just off) a surface does not hit that surface
again. A tangent ray has a single repeated root and needs no special case.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 20), radius=10.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import normalize

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: Distance along the ray to the intersection. Only valid if hit == 1.
        point: The 3D point where the ray intersected the sphere.
            Only valid if hit == 1.
        normal: The unit outward surface normal at the intersection point.
            It is not flipped toward the ray: for a ray leaving the sphere
            from inside, the normal points along the ray.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Find the nearest intersection of a ray with a sphere.

    Both roots of the intersection quadratic are computed; any root at or
    below t_min is discarded and the smaller survivor is taken. The
    survivor must also lie below t_max, which lets the scene resolver
    shrink the search interval as closer hits are found.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.
        t_min: Self-intersection epsilon; roots <= t_min are rejected.
        t_max: Roots >= t_max are rejected.

    Returns:
        A HitRecord for the nearest valid root. Check the hit field to
        determine whether an intersection occurred.
    """
    diff = ray_origin - sphere.center
    base = -tm.dot(ray_direction, diff)
    discriminant = base * base - tm.dot(diff, diff) + sphere.radius * sphere.radius

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t_near = base - sqrt_d
        t_far = base + sqrt_d

        t = t_near
        if t <= t_min:
            t = t_far

        if t > t_min and t < t_max:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            hit_normal = normalize(hit_point - sphere.center)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
