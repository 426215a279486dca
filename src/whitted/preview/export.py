"""Image export utilities for rendered images.

This module turns the raw shaded colors of a render into an 8-bit image
and writes it to disk. Colors are clamped to [0, 1], optionally gamma
corrected, then quantized with each channel mapped to floor(c * 255).

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from whitted.preview.export import save_png
    >>> from whitted.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(512, 512)
    >>> renderer.render()
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from whitted.core.renderer import Renderer

logger = logging.getLogger(__name__)


class ImageSaveError(OSError):
    """Raised when a rendered image cannot be written."""


def clamp_image(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float32]:
    """Clamp every channel of an image to [0, 1].

    NaN channels are mapped to 0.

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        Clamped float32 copy of the image.
    """
    clamped = np.nan_to_num(image.astype(np.float32), nan=0.0, posinf=1.0, neginf=0.0)
    return np.clip(clamped, 0.0, 1.0)


def apply_gamma(image: npt.NDArray[np.float32], gamma: float) -> npt.NDArray[np.float32]:
    """Apply gamma correction to an image already clamped to [0, 1].

    Args:
        image: Clamped image array.
        gamma: Gamma value. 1.0 leaves the image unchanged; 2.2 encodes
            for a typical sRGB display.

    Returns:
        Gamma-corrected image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return image
    return np.power(image, 1.0 / gamma).astype(np.float32)


def image_to_uint8(
    image: npt.NDArray[np.floating],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a raw float image to uint8 for export.

    Args:
        image: Raw image array of shape (H, W, 3).
        gamma: Gamma correction value (default 1.0, linear).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = apply_gamma(clamp_image(image), gamma)
    return np.floor(processed * 255.0).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.floating],
    filepath: str | Path,
    *,
    gamma: float = 1.0,
) -> Path:
    """Save a NumPy array as a PNG file.

    Creates parent directories if they don't exist.

    Args:
        image: Raw image array of shape (H, W, 3), row 0 at the top.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 1.0, linear).

    Returns:
        The path that was written.

    Raises:
        ImageSaveError: If the file cannot be written.
    """
    path = Path(filepath)
    image_uint8 = image_to_uint8(image, gamma=gamma)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        pil_image = PILImage.fromarray(image_uint8)
        pil_image.save(path, format="PNG")
    except (OSError, ValueError) as e:
        raise ImageSaveError(f"Cannot save image to {path}: {e}") from e

    logger.info("Saved %dx%d image to %s", image_uint8.shape[1], image_uint8.shape[0], path)
    return path


def save_png(
    renderer: Renderer,
    filepath: str | Path,
    *,
    gamma: float = 1.0,
) -> Path:
    """Save the renderer's current image as a PNG file.

    Args:
        renderer: The Renderer instance to save.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 1.0, linear).

    Returns:
        The path that was written.

    Raises:
        ImageSaveError: If the file cannot be written.
    """
    return save_png_from_array(renderer.get_raw_image_numpy(), filepath, gamma=gamma)

