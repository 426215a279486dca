"""Camera module for primary ray generation.

Components:
    image_plane: Rectangular image plane with rays converging on a focal
        point

Ray generation runs inside Taichi kernels, one call per pixel.
"""

from .image_plane import ImagePlaneCamera, get_camera_info, get_ray, setup_camera

__all__ = [
    "ImagePlaneCamera",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
