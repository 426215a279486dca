"""Scene module for scene storage, lights and scene management.

Components:
    intersection: Sphere storage, nearest-hit and shadow queries
    lights: Point light storage
    manager: Scene builder with serialization and JSON scene files
    default_scene: The built-in three-sphere scene

Scene data is organized for efficient parallel access:
    - Structure-of-Arrays layout for spheres and lights
    - Spheres reference materials by integer ID
"""

from .default_scene import create_default_scene
from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    is_shadowed,
)
from .lights import (
    MAX_LIGHTS,
    PointLight,
    add_point_light,
    clear_lights,
    get_light,
    get_light_count,
)
from .manager import (
    LightInfo,
    MaterialInfo,
    SceneConfig,
    SceneLoadError,
    SceneManager,
    SphereInfo,
    load_scene_file,
    save_scene_file,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "is_shadowed",
    "MAX_SPHERES",
    # Lights module
    "PointLight",
    "add_point_light",
    "clear_lights",
    "get_light",
    "get_light_count",
    "MAX_LIGHTS",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "SceneLoadError",
    "MaterialInfo",
    "SphereInfo",
    "LightInfo",
    "load_scene_file",
    "save_scene_file",
    # Default scene
    "create_default_scene",
]
