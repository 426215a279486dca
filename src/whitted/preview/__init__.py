"""Preview module for image output.

Components:
    export: Clamping, gamma correction, 8-bit quantization and PNG export

Example:
    >>> from whitted.preview import save_png
    >>> from whitted.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(512, 512)
    >>> renderer.render()
    >>> save_png(renderer, "output.png")
"""

from whitted.preview.export import (
    ImageSaveError,
    apply_gamma,
    clamp_image,
    image_to_uint8,
    save_png,
    save_png_from_array,
)

__all__ = [
    "ImageSaveError",
    "apply_gamma",
    "clamp_image",
    "image_to_uint8",
    "save_png",
    "save_png_from_array",
]
