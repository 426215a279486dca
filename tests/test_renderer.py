"""Tests for the row-band renderer.

Tests cover:
- Initialization and validation
- Reset and resize
- Callback and generator progress reporting
- Image readback and saving
"""

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def default_scene():
    """Load the default scene and camera."""
    from whitted.camera.image_plane import setup_camera
    from whitted.scene.default_scene import create_default_scene

    scene, camera = create_default_scene()
    setup_camera(camera)
    return scene


class TestRendererInit:
    """Tests for Renderer construction."""

    def test_init_sets_properties(self):
        from whitted.core.renderer import Renderer

        renderer = Renderer(32, 24, max_depth=2)

        assert renderer.width == 32
        assert renderer.height == 24
        assert renderer.max_depth == 2
        assert renderer.rows_completed == 0
        assert not renderer.is_complete

    def test_default_depth(self):
        from whitted.core.renderer import Renderer

        assert Renderer(8, 8).max_depth == 3

    @pytest.mark.parametrize("width,height", [(0, 10), (10, -1), (4096, 10)])
    def test_invalid_dimensions_rejected(self, width, height):
        from whitted.core.renderer import Renderer

        with pytest.raises(ValueError):
            Renderer(width, height)

    @pytest.mark.parametrize("max_depth", [-1, 9])
    def test_invalid_depth_rejected(self, max_depth):
        from whitted.core.renderer import Renderer

        with pytest.raises(ValueError):
            Renderer(8, 8, max_depth=max_depth)

    def test_repr(self):
        from whitted.core.renderer import Renderer

        assert repr(Renderer(16, 8, max_depth=1)) == (
            "Renderer(width=16, height=8, max_depth=1, rows=0/8)"
        )


class TestRendererRender:
    """Tests for rendering with callbacks."""

    def test_render_completes(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(16, 16)
        renderer.render(batch_rows=5)

        assert renderer.is_complete
        assert renderer.rows_completed == 16

    def test_callback_progress_sequence(self, default_scene):
        from whitted.core.renderer import Renderer

        progress = []
        renderer = Renderer(8, 10, max_depth=1)
        renderer.render(batch_rows=4, callback=lambda done, total: progress.append((done, total)))

        assert progress == [(4, 10), (8, 10), (10, 10)]

    def test_render_restarts_from_top(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(8, 8, max_depth=1)
        renderer.render()
        progress = []
        renderer.render(batch_rows=8, callback=lambda done, total: progress.append(done))

        assert progress == [8]

    def test_band_size_does_not_change_image(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(12, 12)
        renderer.render(batch_rows=12)
        whole = renderer.get_raw_image_numpy()
        renderer.render(batch_rows=1)
        banded = renderer.get_raw_image_numpy()

        np.testing.assert_array_equal(banded, whole)

    def test_render_is_deterministic(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(10, 10)
        renderer.render()
        first = renderer.get_image_numpy()
        renderer.render()

        np.testing.assert_array_equal(renderer.get_image_numpy(), first)

    def test_render_at_maximum_depth(self, default_scene):
        from whitted.core.config import MAX_SUPPORTED_DEPTH
        from whitted.core.renderer import Renderer

        renderer = Renderer(8, 8, max_depth=MAX_SUPPORTED_DEPTH)
        renderer.render()
        image = renderer.get_raw_image_numpy()

        assert renderer.is_complete
        assert np.all(np.isfinite(image))
        assert image.max() > 0.0

    def test_render_logs_timing(self, default_scene, caplog):
        from whitted.core.renderer import Renderer

        with caplog.at_level("INFO", logger="whitted.core.renderer"):
            Renderer(4, 4, max_depth=0).render()

        assert "Rendering 4x4 image" in caplog.text
        assert "Render finished" in caplog.text


class TestRendererGenerator:
    """Tests for iter_render."""

    def test_iter_render_yields_progress(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(6, 7, max_depth=1)

        assert list(renderer.iter_render(batch_rows=3)) == [(3, 7), (6, 7), (7, 7)]
        assert renderer.is_complete

    def test_iter_render_resumes(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(6, 8, max_depth=1)
        progress = renderer.iter_render(batch_rows=2)
        next(progress)
        next(progress)
        assert renderer.rows_completed == 4

        remaining = list(renderer.iter_render(batch_rows=4))

        assert remaining == [(8, 8)]
        assert renderer.is_complete

    def test_unrendered_rows_are_black(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(8, 8)
        next(renderer.iter_render(batch_rows=2))
        image = renderer.get_raw_image_numpy()

        assert np.all(image[2:] == 0.0)

    @pytest.mark.parametrize("batch_rows", [0, -4])
    def test_invalid_batch_rows_rejected(self, batch_rows):
        from whitted.core.renderer import Renderer

        renderer = Renderer(4, 4)

        with pytest.raises(ValueError, match="batch_rows"):
            next(renderer.iter_render(batch_rows=batch_rows))


class TestRendererResetResize:
    """Tests for reset and resize."""

    def test_reset_clears_image(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(8, 8)
        renderer.render()
        renderer.reset()

        assert renderer.rows_completed == 0
        assert np.all(renderer.get_raw_image_numpy() == 0.0)

    def test_resize(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(8, 8)
        renderer.render()
        renderer.resize(12, 6)

        assert (renderer.width, renderer.height) == (12, 6)
        assert renderer.rows_completed == 0
        assert renderer.get_raw_image_numpy().shape == (6, 12, 3)

    def test_resize_too_large_keeps_size(self):
        from whitted.core.renderer import Renderer

        renderer = Renderer(8, 8)

        with pytest.raises(ValueError):
            renderer.resize(10000, 8)
        assert (renderer.width, renderer.height) == (8, 8)


class TestRendererImageOutput:
    """Tests for image readback and saving."""

    def test_image_shapes_and_types(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(10, 6)
        renderer.render()

        clamped = renderer.get_image_numpy()
        as_uint8 = renderer.get_image_uint8()

        assert clamped.shape == (6, 10, 3)
        assert clamped.dtype == np.float32
        assert clamped.min() >= 0.0
        assert clamped.max() <= 1.0
        assert as_uint8.shape == (6, 10, 3)
        assert as_uint8.dtype == np.uint8

    def test_default_scene_is_not_black(self, default_scene):
        from whitted.core.renderer import Renderer

        renderer = Renderer(16, 16)
        renderer.render()

        assert renderer.get_image_numpy().max() > 0.0

    def test_save_image(self, default_scene, tmp_path):
        from whitted.core.renderer import Renderer

        renderer = Renderer(10, 6)
        renderer.render()

        path = renderer.save_image(tmp_path / "render.png")

        with Image.open(path) as png:
            assert png.size == (10, 6)
            np.testing.assert_array_equal(np.asarray(png), renderer.get_image_uint8())

    def test_save_png_helper(self, default_scene, tmp_path):
        from whitted.core.renderer import Renderer
        from whitted.preview.export import save_png

        renderer = Renderer(5, 5, max_depth=1)
        renderer.render()

        path = save_png(renderer, tmp_path / "helper.png", gamma=2.2)

        with Image.open(path) as png:
            np.testing.assert_array_equal(np.asarray(png), renderer.get_image_uint8(gamma=2.2))
