"""Point light storage.

A point light emits light of a given color and scalar intensity from a
single origin. Its radius does not make it visible geometry: it is a falloff
floor, so the inverse-square term never divides by less than radius^2 as a
shading point approaches the light.

Lights are stored in Taichi fields and iterated by the illumination
evaluator inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.lights import add_point_light
    >>> add_point_light(origin=(3.0, 10.0, 10.0), color=(1.0, 1.0, 1.0),
    ...                 intensity=200.0, radius=1.0)
    0
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class PointLight:
    """A point light source.

    Attributes:
        origin: Position of the light in world space.
        color: RGB color of the emitted light.
        intensity: Scalar brightness multiplier.
        radius: Falloff floor; distances below it are treated as equal to it.
    """

    origin: vec3
    color: vec3
    intensity: ti.f32
    radius: ti.f32


# Maximum number of lights in the scene
MAX_LIGHTS = 64

light_origins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
light_radii = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the scene."""
    num_lights[None] = 0


def add_point_light(
    origin: tuple[float, float, float],
    color: tuple[float, float, float],
    intensity: float,
    radius: float,
) -> int:
    """Add a point light to the scene.

    Args:
        origin: Position of the light as (x, y, z).
        color: Light color as (R, G, B).
        intensity: Scalar brightness. Must be non-negative.
        radius: Falloff floor. Must be non-negative.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        ValueError: If intensity or radius is negative, or a color
            component is negative.
    """
    if intensity < 0.0:
        raise ValueError(f"Light intensity must be non-negative, got {intensity}")
    if radius < 0.0:
        raise ValueError(f"Light radius must be non-negative, got {radius}")
    for i, component in enumerate(color):
        if component < 0.0:
            raise ValueError(f"Light color component {i} = {component} is negative")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_origins[idx] = vec3(origin[0], origin[1], origin[2])
    light_colors[idx] = vec3(color[0], color[1], color[2])
    light_intensities[idx] = intensity
    light_radii[idx] = radius
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_light(light_index: ti.i32) -> PointLight:
    """Get a light by index (Taichi scope)."""
    return PointLight(
        origin=light_origins[light_index],
        color=light_colors[light_index],
        intensity=light_intensities[light_index],
        radius=light_radii[light_index],
    )
