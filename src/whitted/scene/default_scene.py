"""Default demonstration scene.

Three spheres lit by a single white point light, seen through the default
image-plane camera:

- A nearly invisible glass sphere in front (fully transmissive, kn slightly
  below 1, faint ambient).
- A cyan sphere just behind and above it.
- A large red backdrop sphere far behind both, with a mirror specular term.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.default_scene import create_default_scene
    >>> from whitted.camera.image_plane import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> scene.get_sphere_count()
    3
"""

from whitted.camera.image_plane import ImagePlaneCamera
from whitted.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

GLASS_SPHERE_CENTER = (0.0, 0.0, 20.0)
GLASS_SPHERE_RADIUS = 10.0

CYAN_SPHERE_CENTER = (0.0, 10.0, 25.0)
CYAN_SPHERE_RADIUS = 10.0

BACKDROP_SPHERE_CENTER = (0.0, 0.0, 300.0)
BACKDROP_SPHERE_RADIUS = 265.0

LIGHT_ORIGIN = (3.0, 10.0, 10.0)
LIGHT_COLOR = (1.0, 1.0, 1.0)
LIGHT_INTENSITY = 200.0
LIGHT_RADIUS = 1.0


def create_default_scene() -> tuple[SceneManager, ImagePlaneCamera]:
    """Create the default three-sphere scene.

    Returns:
        A tuple of (SceneManager, ImagePlaneCamera) where the scene holds
        three materials, three spheres and one light, and the camera is the
        default image plane at z = 0 looking through (0, 0, 1).
    """
    scene = SceneManager()

    glass = scene.add_material(
        ambient=(0.01, 0.01, 0.01),
        diffuse=(0.1, 0.1, 0.1),
        specular=(0.1, 0.1, 0.1),
        transmissive=(1.0, 1.0, 1.0),
        refractive_index=0.995,
    )
    cyan = scene.add_material(
        ambient=(0.0, 0.1, 0.1),
        diffuse=(0.0, 1.0, 1.0),
        specular=(0.0, 0.5, 0.5),
        transmissive=(0.0, 0.0, 0.0),
        refractive_index=1.0,
    )
    red = scene.add_material(
        ambient=(0.1, 0.0, 0.0),
        diffuse=(0.9, 0.1, 0.1),
        specular=(1.0, 1.0, 1.0),
        transmissive=(0.0, 0.0, 0.0),
        refractive_index=1.0,
    )

    scene.add_sphere(GLASS_SPHERE_CENTER, GLASS_SPHERE_RADIUS, glass)
    scene.add_sphere(CYAN_SPHERE_CENTER, CYAN_SPHERE_RADIUS, cyan)
    scene.add_sphere(BACKDROP_SPHERE_CENTER, BACKDROP_SPHERE_RADIUS, red)

    scene.add_point_light(LIGHT_ORIGIN, LIGHT_COLOR, LIGHT_INTENSITY, LIGHT_RADIUS)

    return scene, ImagePlaneCamera()
