"""Recursive Whitted ray tracer built on Taichi.

This package renders scenes of spheres lit by point lights using the
illumination model from Whitted's "An Improved Illumination Model for
Shaded Display": ambient light, diffuse direct illumination with hard
shadows, and recursively traced mirror reflection and refraction.

Subpackages:
    core: Ray utilities, configuration, ray splitting, shading and rendering
    geometry: Sphere primitive and ray-sphere intersection
    materials: Whitted material coefficients and the material registry
    scene: Sphere storage, lights, scene building and scene files
    camera: Image-plane camera with per-pixel ray generation
    preview: Image export

Subpackages that hold Taichi fields create them on import, so call
ti.init() before importing them.
"""

__version__ = "0.1.0"
