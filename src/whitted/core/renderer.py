"""Row-band renderer with progress reporting.

This module provides a convenient wrapper around the core integrator that
supports:
- Rendering a whole image in bands of rows
- Progress callbacks for command line or UI updates
- A generator interface for cooperative iteration or cancellation
- Access to the raw, clamped or 8-bit image

Every pixel is a pure function of the scene, so splitting the image into
row bands changes only how often progress is reported, never the result.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.renderer import Renderer
    >>> from whitted.scene.default_scene import create_default_scene
    >>> from whitted.camera.image_plane import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(256, 256, max_depth=3)
    >>> renderer.render(batch_rows=32)
    >>> image = renderer.get_image_numpy()
"""

import logging
import time
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from whitted.core.config import DEFAULT_MAX_RECURSION_DEPTH, validate_recursion_depth
from whitted.core.integrator import (
    clear_render_target,
    get_image_numpy,
    render_rows,
    setup_render_target,
)
from whitted.preview.export import clamp_image, image_to_uint8, save_png_from_array

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_completed, total_rows)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """A renderer that shades the image in bands of rows.

    The renderer maintains its own state for width, height and recursion
    depth and delegates to the global integrator buffers (which are Taichi
    fields), so only one render target is active at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum recursion depth of the shader.
    """

    def __init__(
        self, width: int, height: int, max_depth: int = DEFAULT_MAX_RECURSION_DEPTH
    ) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            max_depth: Maximum recursion depth.

        Raises:
            ValueError: If dimensions or depth are out of range.
        """
        validate_recursion_depth(max_depth)
        self._width = width
        self._height = height
        self._max_depth = max_depth
        self._rows_completed = 0
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def max_depth(self) -> int:
        """Get the maximum recursion depth."""
        return self._max_depth

    @property
    def rows_completed(self) -> int:
        """Get the number of rows rendered since the last reset."""
        return self._rows_completed

    @property
    def is_complete(self) -> bool:
        """Whether every row has been rendered."""
        return self._rows_completed >= self._height

    def reset(self) -> None:
        """Clear the image so the next render starts from the top row."""
        clear_render_target()
        self._rows_completed = 0

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset progress.

        Raises:
            ValueError: If dimensions exceed maximum supported size.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self._rows_completed = 0

    def iter_render(self, batch_rows: int = 64) -> Generator[tuple[int, int], None, None]:
        """Render the remaining rows, yielding progress after each band.

        This is a generator-based alternative to render() with callbacks.
        Stopping iteration early leaves the remaining rows black; calling
        iter_render() again resumes where it stopped.

        Args:
            batch_rows: Number of rows to render per band.

        Yields:
            Tuple of (rows_completed, total_rows).

        Raises:
            ValueError: If batch_rows is not positive.

        Example:
            >>> for done, total in renderer.iter_render(batch_rows=16):
            ...     print(f"{done}/{total} rows")
        """
        if batch_rows <= 0:
            raise ValueError(f"batch_rows must be positive, got {batch_rows}")

        while self._rows_completed < self._height:
            row_start = self._rows_completed
            row_end = min(row_start + batch_rows, self._height)
            render_rows(row_start, row_end, self._max_depth)
            self._rows_completed = row_end
            yield (self._rows_completed, self._height)

    def render(
        self,
        batch_rows: int = 64,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the whole image from the top row.

        Args:
            batch_rows: Number of rows to render before each callback.
                A larger band reduces callback overhead but provides less
                frequent updates.
            callback: Optional callback function called after each band.
                Receives (rows_completed, total_rows).
        """
        self.reset()
        logger.info(
            "Rendering %dx%d image (max depth %d)", self._width, self._height, self._max_depth
        )
        start = time.perf_counter()

        for done, total in self.iter_render(batch_rows):
            if callback is not None:
                callback(done, total)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)

    def get_raw_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the unclamped shaded colors as an array of shape (height, width, 3)."""
        return get_image_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the rendered image clamped to [0, 1].

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32,
            row 0 at the top.
        """
        return clamp_image(get_image_numpy())

    def get_image_uint8(self, gamma: float = 1.0) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit NumPy array.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        return image_to_uint8(get_image_numpy(), gamma=gamma)

    def save_image(self, filepath: str | Path, gamma: float = 1.0) -> Path:
        """Save the rendered image to a PNG file.

        Args:
            filepath: Path to save the image (e.g., "output.png").
            gamma: Gamma correction value. Default 1.0 (linear).

        Returns:
            The path that was written.

        Raises:
            ImageSaveError: If the file cannot be written.
        """
        return save_png_from_array(get_image_numpy(), filepath, gamma=gamma)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"max_depth={self.max_depth}, rows={self.rows_completed}/{self.height})"
        )
