"""Render configuration and tunable constants.

Two tunables drive the shading engine:

    min_ray_distance: Self-intersection epsilon. Intersections at or below
        this distance along a ray are ignored, which keeps secondary rays
        from re-hitting the surface they were spawned on.
    max_recursion_depth: Termination bound for the recursive shader. Rays
        at a depth greater than this contribute black.

This module is plain Python and creates no Taichi fields, so it can be
imported before ti.init(). The runtime side of the tunables lives in
whitted.core.tunables.

Example:
    >>> from whitted.core.config import RenderConfig
    >>> config = RenderConfig(max_recursion_depth=1, image_width=64, image_height=64)
    >>> config.validate()
"""

from dataclasses import dataclass

# Reference defaults
DEFAULT_MIN_RAY_DISTANCE = 0.1
DEFAULT_MAX_RECURSION_DEPTH = 3
DEFAULT_IMAGE_WIDTH = 1080
DEFAULT_IMAGE_HEIGHT = 1080
DEFAULT_OUTPUT_PATH = "images/out.png"

# Upper bound on the recursion depth. It sizes the shader's pending-ray
# stack, and a primary ray shades at most 2^(depth + 1) - 1 nodes.
MAX_SUPPORTED_DEPTH = 8


@dataclass
class RenderConfig:
    """Tunable parameters for a render.

    Attributes:
        min_ray_distance: Minimum valid hit distance (self-intersection epsilon).
        max_recursion_depth: Maximum depth of reflected/refracted rays.
            Depth 0 is the primary ray.
        image_width: Output image width in pixels.
        image_height: Output image height in pixels.
        output_path: Where the rendered image is written.
    """

    min_ray_distance: float = DEFAULT_MIN_RAY_DISTANCE
    max_recursion_depth: int = DEFAULT_MAX_RECURSION_DEPTH
    image_width: int = DEFAULT_IMAGE_WIDTH
    image_height: int = DEFAULT_IMAGE_HEIGHT
    output_path: str = DEFAULT_OUTPUT_PATH

    def validate(self) -> None:
        """Check that all parameters are in range.

        Raises:
            ValueError: If any parameter is out of range.
        """
        validate_min_ray_distance(self.min_ray_distance)
        validate_recursion_depth(self.max_recursion_depth)
        if self.image_width <= 0 or self.image_height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got "
                f"{self.image_width}x{self.image_height}"
            )


def validate_min_ray_distance(distance: float) -> None:
    """Check that a self-intersection epsilon is usable.

    Raises:
        ValueError: If distance is negative.
    """
    if not distance >= 0.0:
        raise ValueError(f"min_ray_distance must be non-negative, got {distance}")


def validate_recursion_depth(max_depth: int) -> None:
    """Check that a recursion bound fits the shader's pending-ray stack.

    Raises:
        ValueError: If max_depth is outside [0, MAX_SUPPORTED_DEPTH].
    """
    if not 0 <= max_depth <= MAX_SUPPORTED_DEPTH:
        raise ValueError(
            f"max_recursion_depth must be in [0, {MAX_SUPPORTED_DEPTH}], got {max_depth}"
        )
