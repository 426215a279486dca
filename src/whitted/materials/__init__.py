"""Materials module for Whitted surface coefficients.

Each material holds the ambient color (Ia), the diffuse (kd), specular
(ks) and transmissive (kt) coefficients, and the refractive index (kn).
Materials are stored in Taichi fields and referenced by material ID.
"""

from .material import (
    MAX_MATERIALS,
    Material,
    add_material,
    clear_materials,
    get_material,
    get_material_count,
)

__all__ = [
    "Material",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "MAX_MATERIALS",
]
