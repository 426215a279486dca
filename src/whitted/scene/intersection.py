"""Scene-level intersection and shadow queries.

This module stores the scene's spheres in Taichi fields and answers the two
queries the shading engine asks of a scene:

    intersect_scene: the globally nearest hit along a ray, with the
        material ID of the sphere that was hit.
    is_shadowed: whether any sphere blocks the straight path from a shading
        point to a light.

Each sphere carries a material ID into the material registry, so a hit
record identifies its material by index and never holds a reference into
scene storage.

The scene is built once before rendering and is read-only inside kernels,
so any number of pixels can query it in parallel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.intersection import add_sphere, clear_scene, vec3
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, 20), 10.0, material_id=0)
    0
    >>> # Use intersect_scene / is_shadowed within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import length_squared, normalize
from whitted.core.tunables import get_min_ray_distance
from whitted.geometry.sphere import HitRecord, Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Upper bound on hit distances for open-ended queries
T_MAX = 1e30


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        t: Distance along the ray to the intersection. Only valid if hit == 1.
        point: The 3D intersection point. Only valid if hit == 1.
        normal: The unit outward normal of the hit sphere at the point.
            Only valid if hit == 1.
        sphere_index: Index of the hit sphere. -1 on a miss.
        material_id: Material ID of the hit sphere. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    sphere_index: ti.i32
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The actual field data is not cleared
    but will be overwritten when new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere. Must be positive.
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
        ValueError: If the radius is not positive.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _hit_record_to_scene_hit_record(
    rec: HitRecord, sphere_index: ti.i32, material_id: ti.i32
) -> SceneHitRecord:
    """Convert a sphere HitRecord to a SceneHitRecord."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        sphere_index=sphere_index,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        sphere_index=-1,
        material_id=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest intersection of a ray with any sphere in the scene.

    Spheres are tested in insertion order and a hit only replaces the
    current best when it is strictly closer, so if two spheres report
    exactly the same distance the one added first wins. The result is
    always a single sphere's hit, never a blend.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if the ray hits nothing.
    """
    t_min = get_min_ray_distance()
    closest_t = T_MAX
    result = _make_miss_record()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _hit_record_to_scene_hit_record(rec, i, sphere_material_ids[i])

    return result


@ti.func
def is_shadowed(point: vec3, light_origin: vec3) -> ti.i32:
    """Test whether any sphere blocks the path from a point to a light.

    The shadow ray starts at the shading point and travels toward the
    light, so the surface the point lies on is excluded by the usual
    self-intersection epsilon rather than by identity. Every sphere is
    tested, including the one the point lies on: a sphere can occlude
    its own far side.

    A blocker counts when its hit distance does not exceed the distance to
    the light. Distances are compared squared.

    Args:
        point: The shading point.
        light_origin: Position of the light.

    Returns:
        1 if the light is occluded, 0 otherwise. A light coincident with
        the point is never occluded.
    """
    to_light = light_origin - point
    dist_sq = length_squared(to_light)
    shadowed = 0

    if dist_sq > 0.0:
        direction = normalize(to_light)
        t_min = get_min_ray_distance()

        n_spheres = num_spheres[None]
        for i in range(n_spheres):
            if shadowed == 0:
                sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
                rec = hit_sphere(point, direction, sphere, t_min, T_MAX)
                if rec.hit == 1 and rec.t * rec.t <= dist_sq:
                    shadowed = 1

    return shadowed
