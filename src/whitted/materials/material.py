"""Whitted surface material and material registry.

A material describes how a surface responds in the Whitted illumination
model. Every coefficient except the refractive index is a per-channel RGB
weight:

    ambient (Ia): Constant self-illumination added to every hit.
    diffuse (kd): Scales the direct light arriving from point lights.
    specular (ks): Scales the color seen along the reflected ray.
    transmissive (kt): Scales the color seen along the refracted ray.
    refractive_index (kn): Ratio used by the ray splitter to bend the
        transmitted ray. Inverted when a ray leaves the medium.

The final color at a hit is:

    Ia + kd * D + ks * S + kt * T

where products are per-channel, D is the direct illumination sum and S, T
are the recursively shaded reflected and refracted colors.

Materials are stored in Taichi fields and addressed by an integer material
ID, so intersection records carry an index instead of a reference.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.materials.material import add_material
    >>> glass = add_material(
    ...     ambient=(0.01, 0.01, 0.01),
    ...     diffuse=(0.1, 0.1, 0.1),
    ...     specular=(0.1, 0.1, 0.1),
    ...     transmissive=(1.0, 1.0, 1.0),
    ...     refractive_index=0.995,
    ... )
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class Material:
    """Whitted material properties.

    Attributes:
        ambient: Ambient color Ia (RGB, each component in [0, 1]).
        diffuse: Diffuse coefficient kd (RGB, each component in [0, 1]).
        specular: Specular reflection coefficient ks (RGB, in [0, 1]).
        transmissive: Specular transmission coefficient kt (RGB, in [0, 1]).
        refractive_index: Refractive index kn (positive).
    """

    ambient: vec3
    diffuse: vec3
    specular: vec3
    transmissive: vec3
    refractive_index: ti.f32


# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 1024

material_ambient = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_diffuse = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_specular = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_transmissive = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_refractive_index = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _validate_color(name: str, color: tuple[float, float, float]) -> None:
    """Check that a color weight has three components in [0, 1]."""
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"{name} component {i} = {component} is outside [0, 1]")


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(
    ambient: tuple[float, float, float],
    diffuse: tuple[float, float, float],
    specular: tuple[float, float, float],
    transmissive: tuple[float, float, float],
    refractive_index: float = 1.0,
) -> int:
    """Add a material to the material registry.

    Args:
        ambient: Ambient color Ia as (R, G, B).
        diffuse: Diffuse coefficient kd as (R, G, B).
        specular: Specular coefficient ks as (R, G, B).
        transmissive: Transmissive coefficient kt as (R, G, B).
        refractive_index: Refractive index kn. Must be positive.

    Returns:
        The material ID of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any color component is outside [0, 1] or the
            refractive index is not positive.
    """
    _validate_color("ambient", ambient)
    _validate_color("diffuse", diffuse)
    _validate_color("specular", specular)
    _validate_color("transmissive", transmissive)
    if not refractive_index > 0.0:
        raise ValueError(f"refractive_index must be positive, got {refractive_index}")

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_ambient[idx] = vec3(ambient[0], ambient[1], ambient[2])
    material_diffuse[idx] = vec3(diffuse[0], diffuse[1], diffuse[2])
    material_specular[idx] = vec3(specular[0], specular[1], specular[2])
    material_transmissive[idx] = vec3(transmissive[0], transmissive[1], transmissive[2])
    material_refractive_index[idx] = refractive_index
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material(material_id: ti.i32) -> Material:
    """Get a material by ID (Taichi scope).

    Args:
        material_id: The index of the material in the registry.

    Returns:
        The Material stored at that index.
    """
    return Material(
        ambient=material_ambient[material_id],
        diffuse=material_diffuse[material_id],
        specular=material_specular[material_id],
        transmissive=material_transmissive[material_id],
        refractive_index=material_refractive_index[material_id],
    )
