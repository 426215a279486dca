"""Scene manager for building and serializing sphere scenes.

This module provides a high-level scene API on top of the Taichi-side
registries. It keeps the material registry, the sphere storage and the
light list in step, and mirrors everything it adds in plain Python records
so a scene can be exported and reloaded.

The SceneManager maintains:
- Materials, addressed by material ID in insertion order
- Spheres, each referencing a registered material ID
- Point lights
- Scene serialization to dictionaries and JSON scene files

Scene files are JSON objects with three arrays. Vectors and colors are
three-element arrays:

    {
        "materials": [{"ambient": [...], "diffuse": [...],
                       "specular": [...], "transmissive": [...],
                       "refractive_index": 1.0}],
        "spheres": [{"center": [0, 0, 20], "radius": 10, "material_id": 0}],
        "lights": [{"origin": [3, 10, 10], "color": [1, 1, 1],
                    "intensity": 200, "radius": 1}]
    }

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_material(
    ...     ambient=(0.1, 0.0, 0.0),
    ...     diffuse=(0.9, 0.1, 0.1),
    ...     specular=(1.0, 1.0, 1.0),
    ...     transmissive=(0.0, 0.0, 0.0),
    ... )
    >>> scene.add_sphere(center=(0, 0, 300), radius=265.0, material_id=red)
    0
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from whitted.materials.material import (
    MAX_MATERIALS,
    add_material,
    clear_materials,
    get_material_count,
)
from whitted.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    vec3,
)
from whitted.scene.lights import (
    MAX_LIGHTS,
    add_point_light,
    clear_lights,
    get_light_count,
)

logger = logging.getLogger(__name__)


class SceneLoadError(ValueError):
    """Raised when a scene description cannot be read or is malformed."""


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material ID in the registry.
        ambient: Ambient color Ia.
        diffuse: Diffuse coefficient kd.
        specular: Specular coefficient ks.
        transmissive: Transmissive coefficient kt.
        refractive_index: Refractive index kn.
    """

    material_id: int
    ambient: tuple[float, float, float]
    diffuse: tuple[float, float, float]
    specular: tuple[float, float, float]
    transmissive: tuple[float, float, float]
    refractive_index: float


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class LightInfo:
    """Information about a point light in the scene."""

    light_index: int
    origin: tuple[float, float, float]
    color: tuple[float, float, float]
    intensity: float
    radius: float


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        lights: List of light configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)


def _as_vec3(entry: dict[str, Any], key: str, default: Any = None) -> tuple[float, float, float]:
    """Read a three-component vector from a configuration entry.

    Raises:
        ValueError: If the key is missing (and has no default) or the value
            is not a list of three numbers.
    """
    value = entry.get(key, default)
    if value is None:
        raise ValueError(f"Missing required key '{key}'")
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 3
        or not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value)
    ):
        raise ValueError(f"'{key}' must be a list of 3 numbers, got {value!r}")
    return (float(value[0]), float(value[1]), float(value[2]))


def _as_float(entry: dict[str, Any], key: str, default: float | None = None) -> float:
    """Read a scalar from a configuration entry.

    Raises:
        ValueError: If the key is missing (and has no default) or the value
            is not a number.
    """
    value = entry.get(key, default)
    if value is None:
        raise ValueError(f"Missing required key '{key}'")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' must be a number, got {value!r}")
    return float(value)


class SceneManager:
    """Scene builder coordinating materials, spheres and lights.

    The Taichi-side registries are module-level, so a SceneManager owns the
    whole scene: creating one clears any previous materials, spheres and
    lights.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.
        lights: List of LightInfo for all lights in the scene.

    Example:
        >>> scene = SceneManager()
        >>> glass = scene.add_material(
        ...     ambient=(0.01, 0.01, 0.01),
        ...     diffuse=(0.1, 0.1, 0.1),
        ...     specular=(0.1, 0.1, 0.1),
        ...     transmissive=(1.0, 1.0, 1.0),
        ...     refractive_index=0.995,
        ... )
        >>> scene.add_sphere((0, 0, 20), 10.0, glass)
        0
        >>> scene.add_point_light((3, 10, 10), (1, 1, 1), 200.0, 1.0)
        0
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.lights: list[LightInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_materials()
        clear_lights()
        self.materials.clear()
        self.spheres.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres, materials and lights)."""
        self._clear_all()

    # =========================================================================
    # Scene Construction
    # =========================================================================

    def add_material(
        self,
        ambient: tuple[float, float, float],
        diffuse: tuple[float, float, float],
        specular: tuple[float, float, float],
        transmissive: tuple[float, float, float],
        refractive_index: float = 1.0,
    ) -> int:
        """Add a material to the scene.

        Args:
            ambient: Ambient color Ia as (R, G, B).
            diffuse: Diffuse coefficient kd as (R, G, B).
            specular: Specular coefficient ks as (R, G, B).
            transmissive: Transmissive coefficient kt as (R, G, B).
            refractive_index: Refractive index kn. Default is 1.0.

        Returns:
            The material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any coefficient is outside [0, 1] or the
                refractive index is not positive.
        """
        material_id = add_material(ambient, diffuse, specular, transmissive, refractive_index)

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                ambient=tuple(ambient),
                diffuse=tuple(diffuse),
                specular=tuple(specular),
                transmissive=tuple(transmissive),
                refractive_index=refractive_index,
            )
        )
        return material_id

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be positive.
            material_id: A material ID returned by add_material().

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is not registered or the radius is
                not positive.
        """
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

        center_vec = vec3(center[0], center[1], center[2])
        sphere_index = add_sphere(center_vec, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_point_light(
        self,
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
            ValueError: If intensity, radius or a color component is negative.
        """
        light_index = add_point_light(origin, color, intensity, radius)

        self.lights.append(
            LightInfo(
                light_index=light_index,
                origin=tuple(origin),
                color=tuple(color),
                intensity=intensity,
                radius=radius,
            )
        )
        return light_index

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_material_count(self) -> int:
        """Get the number of materials in the scene."""
        return get_material_count()

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID.

        Returns:
            MaterialInfo for the material, or None if not found.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all materials, spheres and lights.
        """
        config = SceneConfig()

        for mat in self.materials:
            config.materials.append(
                {
                    "ambient": list(mat.ambient),
                    "diffuse": list(mat.diffuse),
                    "specular": list(mat.specular),
                    "transmissive": list(mat.transmissive),
                    "refractive_index": mat.refractive_index,
                }
            )

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for light in self.lights:
            config.lights.append(
                {
                    "origin": list(light.origin),
                    "color": list(light.color),
                    "intensity": light.intensity,
                    "radius": light.radius,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Every entry is parsed before the current scene is touched, so a
        malformed configuration leaves the scene as it was. If a registry
        rejects a value while building, the previous scene is restored
        before the error propagates. Materials are loaded first so spheres
        can reference them by ID.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
            RuntimeError: If a capacity limit is exceeded.
        """
        materials = [
            {
                "ambient": _as_vec3(mat_config, "ambient"),
                "diffuse": _as_vec3(mat_config, "diffuse"),
                "specular": _as_vec3(mat_config, "specular"),
                "transmissive": _as_vec3(mat_config, "transmissive"),
                "refractive_index": _as_float(mat_config, "refractive_index", 1.0),
            }
            for mat_config in config.materials
        ]

        spheres = []
        for sphere_config in config.spheres:
            material_id = sphere_config.get("material_id", 0)
            if isinstance(material_id, bool) or not isinstance(material_id, int):
                raise ValueError(f"'material_id' must be an integer, got {material_id!r}")
            spheres.append(
                {
                    "center": _as_vec3(sphere_config, "center"),
                    "radius": _as_float(sphere_config, "radius"),
                    "material_id": material_id,
                }
            )

        lights = [
            {
                "origin": _as_vec3(light_config, "origin"),
                "color": _as_vec3(light_config, "color", [1.0, 1.0, 1.0]),
                "intensity": _as_float(light_config, "intensity"),
                "radius": _as_float(light_config, "radius", 0.0),
            }
            for light_config in config.lights
        ]

        previous = self.to_config()
        try:
            self._build(materials, spheres, lights)
        except (ValueError, RuntimeError):
            self._build(previous.materials, previous.spheres, previous.lights)
            raise

        logger.debug(
            "Loaded scene with %d materials, %d spheres, %d lights",
            len(self.materials),
            len(self.spheres),
            len(self.lights),
        )

    def _build(
        self,
        materials: list[dict[str, Any]],
        spheres: list[dict[str, Any]],
        lights: list[dict[str, Any]],
    ) -> None:
        """Replace the scene with already-parsed entries."""
        self.clear()
        for params in materials:
            self.add_material(**params)
        for params in spheres:
            self.add_sphere(**params)
        for params in lights:
            self.add_point_light(**params)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "lights": config.lights,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'spheres' and 'lights' keys.
                Missing keys are treated as empty lists.

        Raises:
            ValueError: If the dictionary is not a valid scene description.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Scene must be a JSON object, got {type(data).__name__}")

        sections = {}
        for key in ("materials", "spheres", "lights"):
            entries = data.get(key, [])
            if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
                raise ValueError(f"'{key}' must be a list of objects")
            sections[key] = entries

        self.from_config(SceneConfig(**sections))

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS


# =============================================================================
# Scene Files
# =============================================================================


def load_scene_file(path: str | Path, scene: SceneManager | None = None) -> SceneManager:
    """Load a JSON scene file.

    Args:
        path: Path to the scene file.
        scene: Scene to load into. A new SceneManager is created if None.

    Returns:
        The SceneManager holding the loaded scene.

    Raises:
        SceneLoadError: If the file cannot be read, is not valid JSON, or
            does not describe a valid scene.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SceneLoadError(f"Cannot read scene file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SceneLoadError(f"Invalid JSON in scene file {path}: {e}") from e

    if scene is None:
        scene = SceneManager()

    try:
        scene.from_dict(data)
    except (ValueError, RuntimeError) as e:
        raise SceneLoadError(f"Invalid scene file {path}: {e}") from e

    logger.info("Loaded scene from %s", path)
    return scene


def save_scene_file(scene: SceneManager, path: str | Path) -> Path:
    """Write a scene to a JSON file.

    Creates parent directories if they don't exist.

    Args:
        scene: The scene to save.
        path: Output path.

    Returns:
        The path that was written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(scene.to_dict(), indent=2), encoding="utf-8")
    logger.info("Saved scene to %s", path)
    return path
