"""Direct diffuse illumination from point lights.

For a shading point P with unit normal N, each light that is not shadowed
at P contributes:

    color * intensity * max(0, N . L) / max(|P_light - P|^2, radius^2)

where L is the unit direction from P to the light. Lights behind the
surface (N . L < 0) contribute nothing rather than negative light, and the
radius floor keeps the inverse-square term bounded near the light.

The returned sum is unweighted: the caller scales it by the material's
diffuse coefficient.
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import length_squared
from whitted.scene.intersection import is_shadowed
from whitted.scene.lights import get_light, num_lights

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def direct_illumination(point: vec3, normal: vec3) -> vec3:
    """Sum the unshadowed diffuse light arriving at a shading point.

    A light exactly coincident with the point has no defined direction
    and is skipped.

    Args:
        point: The shading point.
        normal: The unit surface normal at the point.

    Returns:
        The total incoming diffuse light (RGB).
    """
    total = vec3(0.0, 0.0, 0.0)

    n_lights = num_lights[None]
    for i in range(n_lights):
        light = get_light(i)
        to_light = light.origin - point
        dist_sq = length_squared(to_light)

        if dist_sq > 0.0:
            if is_shadowed(point, light.origin) == 0:
                cos_theta = tm.max(0.0, tm.dot(normal, to_light / ti.sqrt(dist_sq)))
                falloff = tm.max(dist_sq, light.radius * light.radius)
                total += light.color * light.intensity * cos_theta / falloff

    return total
