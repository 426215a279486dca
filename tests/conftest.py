"""Pytest configuration for whitted tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate the module-level fields created by earlier imports.
    """
    ti.init(arch=ti.cpu)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data and runtime tunables around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the Taichi fields are created after ti.init()
    from whitted.core.integrator import reset_render_target
    from whitted.core.tunables import reset_render_config
    from whitted.materials.material import clear_materials
    from whitted.scene.intersection import clear_scene
    from whitted.scene.lights import clear_lights

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_lights()
        reset_render_config()
        reset_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def default_camera():
    """Load the default image-plane camera into Taichi fields."""
    from whitted.camera.image_plane import ImagePlaneCamera, setup_camera

    camera = ImagePlaneCamera()
    setup_camera(camera)
    return camera
