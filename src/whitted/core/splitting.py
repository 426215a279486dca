"""Reflection and refraction ray splitting.

Given an incident ray and a surface hit, the splitter produces the reflected
ray (always) and the transmitted ray (when one exists), following Whitted's
construction in "An Improved Illumination Model for Shaded Display".

The equations assume the incident direction V points into the surface,
i.e. V . N < 0. When a ray leaves a medium the outward normal faces the
other way, so the normal is flipped and the refractive index inverted
before splitting:

    if V . N > 0:  N <- -N,  kn <- 1 / kn

With V' = V / |V . N|:

    reflected:    R = V' + 2N
    transmitted:  kf = 1 / sqrt(kn^2 |V'|^2 - |V' + N|^2)
                  P = kf (N + V') - N

Both directions are normalized. A negative radicand means total internal
reflection; a zero radicand or any other non-finite kf is treated the same
way. In those cases only the reflected ray is produced.

Both child rays start exactly at the hit point. They do not re-hit the
surface because intersection tests reject roots at or below the
self-intersection epsilon.
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import length_squared, normalize

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class SplitRays:
    """Child rays spawned at a surface hit.

    Attributes:
        origin: Shared origin of both child rays (the hit point).
        reflected_direction: Unit direction of the reflected ray.
        refracted_direction: Unit direction of the refracted ray.
            Only valid if has_refraction == 1.
        has_refraction: 1 if a refracted ray exists, 0 otherwise.
    """

    origin: vec3
    reflected_direction: vec3
    refracted_direction: vec3
    has_refraction: ti.i32


@ti.func
def split_ray(
    ray_origin: vec3,
    ray_direction: vec3,
    t: ti.f32,
    normal: vec3,
    refractive_index: ti.f32,
) -> SplitRays:
    """Derive reflected and refracted rays at an intersection.

    A grazing ray (V . N == 0) cannot be scaled by 1 / |V . N|; it keeps
    its direction as the reflected ray and produces no refracted ray.

    Args:
        ray_origin: Origin of the incident ray.
        ray_direction: Unit direction of the incident ray (V).
        t: Distance along the incident ray to the hit.
        normal: Unit outward surface normal at the hit.
        refractive_index: The hit material's refractive index (kn).

    Returns:
        SplitRays with the reflected direction and, when possible, the
        refracted direction.
    """
    origin = ray_origin + t * ray_direction
    n = normal
    kn = refractive_index

    v_dot_n = tm.dot(ray_direction, n)
    if v_dot_n > 0.0:
        # Leaving the medium
        n = -n
        kn = 1.0 / kn
        v_dot_n = -v_dot_n

    reflected = ray_direction
    refracted = vec3(0.0, 0.0, 0.0)
    has_refraction = 0

    if v_dot_n < 0.0:
        v_prime = ray_direction / (-v_dot_n)
        reflected = normalize(v_prime + 2.0 * n)

        radicand = kn * kn * length_squared(v_prime) - length_squared(v_prime + n)
        if radicand > 0.0:
            kf = 1.0 / ti.sqrt(radicand)
            if not (tm.isnan(kf) or tm.isinf(kf)):
                refracted = normalize(kf * (n + v_prime) - n)
                has_refraction = 1

    return SplitRays(
        origin=origin,
        reflected_direction=reflected,
        refracted_direction=refracted,
        has_refraction=has_refraction,
    )
