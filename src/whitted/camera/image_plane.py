"""Image-plane camera for primary ray generation.

Each pixel owns a point on a rectangular image plane at a fixed depth. The
primary ray for the pixel starts at that point and travels toward a single
focal point:

    origin    = (x / W * 2 * plane_width  - plane_width,
                 y / H * 2 * plane_height - plane_height,
                 plane_z)
    direction = normalize(focal_point - origin)

where (x, y) is the pixel column and row (row 0 at the top of the image)
and W x H is the image size. Every ray crosses the axis at the focal
point, so the top row looks toward +y and the left column toward +x.

World axes: +x is right, +y is up, +z points into the scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.camera.image_plane import ImagePlaneCamera, setup_camera, get_ray
    >>>
    >>> setup_camera(ImagePlaneCamera())
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0, 0, 256, 256)  # Ray for the top-left pixel
"""

from dataclasses import dataclass

import taichi as ti

from whitted.core.ray import Ray, make_ray, normalize, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ImagePlaneCamera:
    """Configuration for the image-plane camera.

    Attributes:
        plane_z: Depth of the image plane along the z axis.
        plane_width: Half-extent of the image plane along x. Pixel columns
            span [-plane_width, plane_width).
        plane_height: Half-extent of the image plane along y. Pixel rows
            span [-plane_height, plane_height).
        focal_point: Point every primary ray passes through.
    """

    plane_z: float = 0.0
    plane_width: float = 1.0
    plane_height: float = 1.0
    focal_point: tuple[float, float, float] = (0.0, 0.0, 1.0)

    def validate(self) -> None:
        """Check that the camera describes a usable image plane.

        Raises:
            ValueError: If the plane extents are not positive or the focal
                point lies on the image plane.
        """
        if self.plane_width <= 0.0 or self.plane_height <= 0.0:
            raise ValueError(
                f"Image plane extents must be positive, got "
                f"{self.plane_width}x{self.plane_height}"
            )
        if self.focal_point[2] == self.plane_z:
            raise ValueError("Focal point must not lie on the image plane")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_plane_z = ti.field(dtype=ti.f32, shape=())
_plane_width = ti.field(dtype=ti.f32, shape=())
_plane_height = ti.field(dtype=ti.f32, shape=())
_focal_point = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: ImagePlaneCamera) -> None:
    """Load a camera configuration into Taichi fields.

    Must be called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the camera configuration is invalid.
    """
    camera.validate()
    _plane_z[None] = camera.plane_z
    _plane_width[None] = camera.plane_width
    _plane_height[None] = camera.plane_height
    _focal_point[None] = [camera.focal_point[0], camera.focal_point[1], camera.focal_point[2]]


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray for a pixel.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray starting on the image plane and pointing at the focal point.
    """
    pw = _plane_width[None]
    ph = _plane_height[None]
    x = ti.cast(pixel_i, ti.f32) / ti.cast(width, ti.f32) * (pw * 2.0) - pw
    y = ti.cast(pixel_j, ti.f32) / ti.cast(height, ti.f32) * (ph * 2.0) - ph

    origin = vec3(x, y, _plane_z[None])
    direction = normalize(_focal_point[None] - origin)

    return make_ray(origin, direction)


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with plane_z, plane_size and focal_point.
    """
    focal = _focal_point[None]
    return {
        "plane_z": (float(_plane_z[None]),),
        "plane_size": (float(_plane_width[None]), float(_plane_height[None])),
        "focal_point": (float(focal[0]), float(focal[1]), float(focal[2])),
    }
