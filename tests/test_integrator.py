"""Tests for the recursive shader and the render kernels.

Tests cover:
- Misses and empty scenes shade black at every depth
- Rays past the recursion bound shade black
- Ambient, diffuse, specular and transmitted terms
- Render target setup, row bands and image readback
"""

import math

import numpy as np
import pytest

BLACK = (0.0, 0.0, 0.0)
NO_COLOR = (0.0, 0.0, 0.0)


def _add_material(
    ambient=NO_COLOR,
    diffuse=NO_COLOR,
    specular=NO_COLOR,
    transmissive=NO_COLOR,
    kn=1.0,
):
    from whitted.materials.material import add_material

    return add_material(ambient, diffuse, specular, transmissive, kn)


def _add_sphere(center, radius, material_id):
    from whitted.scene.intersection import add_sphere, vec3

    return add_sphere(vec3(*center), radius, material_id)


class TestCastRay:
    """Tests for single-ray shading through trace_ray."""

    @pytest.mark.parametrize("max_depth", [0, 1, 2, 3])
    def test_empty_scene_is_black(self, max_depth):
        from whitted.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=max_depth)

        assert color == BLACK

    @pytest.mark.parametrize("max_depth", [0, 1, 3])
    def test_miss_is_black(self, max_depth):
        from whitted.core.integrator import trace_ray
        from whitted.scene.lights import add_point_light

        mat = _add_material(ambient=(1.0, 1.0, 1.0))
        _add_sphere((0.0, 50.0, 20.0), 10.0, mat)
        add_point_light((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 200.0, 1.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=max_depth)

        assert color == BLACK

    def test_depth_past_bound_is_black(self):
        """A ray at depth > max_depth is black even if it would hit."""
        from whitted.core.integrator import trace_ray

        mat = _add_material(ambient=(0.5, 0.5, 0.5))
        _add_sphere((0.0, 0.0, 20.0), 10.0, mat)

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), depth=2, max_depth=1) == BLACK
        hit_color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), depth=1, max_depth=1)
        assert hit_color == pytest.approx((0.5, 0.5, 0.5), abs=1e-6)

    @pytest.mark.parametrize("max_depth", [0, 1, 2, 3])
    def test_ambient_only_material(self, max_depth):
        """With kd = ks = kt = 0 the color is exactly Ia at any depth."""
        from whitted.core.integrator import trace_ray
        from whitted.scene.lights import add_point_light

        mat = _add_material(ambient=(0.01, 0.02, 0.03))
        _add_sphere((0.0, 0.0, 20.0), 10.0, mat)
        add_point_light((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 200.0, 1.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=max_depth)

        assert color == pytest.approx((0.01, 0.02, 0.03), abs=1e-6)

    @pytest.mark.parametrize("max_depth", [0, 1, 2, 3])
    def test_single_ambient_sphere_without_lights(self, max_depth):
        """A lone Ia = 0.01 sphere with no lights shades to exactly Ia."""
        from whitted.core.integrator import trace_ray

        mat = _add_material(ambient=(0.01, 0.01, 0.01))
        _add_sphere((0.0, 0.0, 20.0), 10.0, mat)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=max_depth)

        stored = float(np.float32(0.01))
        assert color == (stored, stored, stored)

    def test_diffuse_term(self):
        """kd scales the direct light: intensity 100 at distance 10 gives D = 1."""
        from whitted.core.integrator import trace_ray
        from whitted.scene.lights import add_point_light

        mat = _add_material(diffuse=(0.5, 0.25, 1.0))
        _add_sphere((0.0, 0.0, 20.0), 10.0, mat)
        add_point_light((0.0, 0.0, 0.0), (1.0, 1.0, 1.0), 100.0, 0.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=0)

        assert color == pytest.approx((0.5, 0.25, 1.0), rel=1e-4)

    def test_no_lights_leaves_only_ambient(self):
        from whitted.core.integrator import trace_ray

        mat = _add_material(ambient=(0.1, 0.0, 0.0), diffuse=(1.0, 1.0, 1.0))
        _add_sphere((0.0, 0.0, 20.0), 10.0, mat)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=2)

        assert color == pytest.approx((0.1, 0.0, 0.0), abs=1e-6)

    def test_specular_term_sees_reflected_sphere(self):
        """A mirror in front reflects an ambient sphere behind the origin."""
        from whitted.core.integrator import trace_ray

        mirror = _add_material(specular=(1.0, 1.0, 1.0))
        backdrop = _add_material(ambient=(0.2, 0.3, 0.4))
        _add_sphere((0.0, 0.0, 20.0), 10.0, mirror)
        _add_sphere((0.0, 0.0, -20.0), 5.0, backdrop)

        reflected = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=1)
        assert reflected == pytest.approx((0.2, 0.3, 0.4), abs=1e-5)

        # At max_depth 0 the reflected ray is past the bound
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=0) == BLACK

    def test_transmitted_term_sees_through_sphere(self):
        """A kn = 1 sphere with kt = 1 shows the sphere behind it."""
        from whitted.core.integrator import trace_ray

        glass = _add_material(transmissive=(1.0, 1.0, 1.0), kn=1.0)
        behind = _add_material(ambient=(0.5, 0.25, 0.125))
        _add_sphere((0.0, 0.0, 20.0), 10.0, glass)
        _add_sphere((0.0, 0.0, 60.0), 10.0, behind)

        # Enter the glass at depth 0, exit at depth 1, reach the far sphere at depth 2
        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=2)
        assert color == pytest.approx((0.5, 0.25, 0.125), abs=1e-5)

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=1) == BLACK

    def test_zero_transmission_ignores_refracted_ray(self):
        from whitted.core.integrator import trace_ray

        opaque = _add_material(transmissive=(0.0, 0.0, 0.0), kn=1.0)
        behind = _add_material(ambient=(0.5, 0.25, 0.125))
        _add_sphere((0.0, 0.0, 20.0), 10.0, opaque)
        _add_sphere((0.0, 0.0, 60.0), 10.0, behind)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=3)

        assert color == BLACK

    def test_result_is_finite_for_default_scene(self):
        from whitted.core.integrator import trace_ray
        from whitted.scene.default_scene import create_default_scene

        create_default_scene()

        for direction in [(0.0, 0.0, 1.0), (0.3, 0.1, 0.9486833), (0.0, 1.0, 0.0)]:
            color = trace_ray((0.0, 0.0, 0.0), direction, max_depth=3)
            assert all(math.isfinite(c) for c in color)
            assert all(c >= 0.0 for c in color)

    def test_maximum_depth_between_mirrors(self):
        """Two facing mirrors bounce the ray once per level up to the bound.

        The origin sits between a mirror sphere ahead and one behind. Every
        bounce hits a mirror with Ia = 0.01 and ks = 0.5, so the color is
        the geometric sum of 0.01 * 0.5^k over the depth + 1 shaded hits.
        """
        from whitted.core.config import MAX_SUPPORTED_DEPTH
        from whitted.core.integrator import trace_ray

        mirror = _add_material(ambient=(0.01, 0.01, 0.01), specular=(0.5, 0.5, 0.5))
        _add_sphere((0.0, 0.0, 20.0), 10.0, mirror)
        _add_sphere((0.0, 0.0, -20.0), 10.0, mirror)

        for max_depth in (MAX_SUPPORTED_DEPTH - 1, MAX_SUPPORTED_DEPTH):
            color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=max_depth)
            expected = sum(0.01 * 0.5**k for k in range(max_depth + 1))
            assert color == pytest.approx((expected, expected, expected), rel=1e-5)

    def test_maximum_depth_default_scene(self):
        from whitted.core.config import MAX_SUPPORTED_DEPTH
        from whitted.core.integrator import trace_ray
        from whitted.scene.default_scene import create_default_scene

        create_default_scene()

        shallow = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=3)
        deep = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=MAX_SUPPORTED_DEPTH)

        assert all(math.isfinite(c) for c in deep)
        # Deeper recursion only adds non-negative contributions
        assert all(d >= s * (1.0 - 1e-5) - 1e-6 for d, s in zip(deep, shallow))

    def test_invalid_depths_rejected(self):
        from whitted.core.integrator import trace_ray

        with pytest.raises(ValueError):
            trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), depth=-1)
        with pytest.raises(ValueError):
            trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), max_depth=9)


class TestRenderTarget:
    """Tests for render target setup and readback."""

    def test_render_before_setup_raises(self):
        from whitted.core.integrator import render_image

        with pytest.raises(RuntimeError, match="setup_render_target"):
            render_image(max_depth=1)

    @pytest.mark.parametrize("width,height", [(0, 10), (10, -1), (4096, 10)])
    def test_invalid_dimensions_rejected(self, width, height):
        from whitted.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(width, height)

    def test_image_shape(self, default_camera):
        from whitted.core.integrator import get_image_numpy, render_image, setup_render_target

        setup_render_target(12, 8)
        render_image(max_depth=1)
        image = get_image_numpy()

        assert image.shape == (8, 12, 3)
        assert image.dtype == np.float32

    @pytest.mark.parametrize("max_depth", [0, 2])
    def test_empty_scene_renders_black(self, default_camera, max_depth):
        from whitted.core.integrator import get_image_numpy, render_image, setup_render_target
        from whitted.scene.lights import add_point_light

        add_point_light((0.0, 0.0, 5.0), (1.0, 1.0, 1.0), 200.0, 1.0)
        setup_render_target(8, 8)
        render_image(max_depth=max_depth)

        assert np.all(get_image_numpy() == 0.0)

    def test_row_bands_match_full_render(self, default_camera):
        from whitted.core.integrator import (
            get_image_numpy,
            render_image,
            render_rows,
            setup_render_target,
        )
        from whitted.scene.default_scene import create_default_scene

        create_default_scene()
        setup_render_target(16, 16)
        render_image(max_depth=2)
        full = get_image_numpy()

        setup_render_target(16, 16)
        render_rows(0, 5, max_depth=2)
        render_rows(5, 16, max_depth=2)
        banded = get_image_numpy()

        np.testing.assert_array_equal(full, banded)

    def test_render_rows_range_checked(self, default_camera):
        from whitted.core.integrator import render_rows, setup_render_target

        setup_render_target(8, 8)
        with pytest.raises(ValueError):
            render_rows(4, 9)
        with pytest.raises(ValueError):
            render_rows(5, 4)

    def test_render_pixel_matches_image(self, default_camera):
        from whitted.core.integrator import (
            get_image_numpy,
            render_image,
            render_pixel,
            setup_render_target,
        )
        from whitted.scene.default_scene import create_default_scene

        create_default_scene()
        setup_render_target(16, 16)
        render_image(max_depth=3)
        image = get_image_numpy()

        color = render_pixel(3, 11, max_depth=3)

        assert color == pytest.approx(tuple(image[11, 3]), abs=1e-5)

    def test_center_pixel_sees_glass_sphere(self, default_camera):
        """The center pixel's ray runs down the z axis into the glass sphere."""
        from whitted.core.integrator import render_pixel, setup_render_target
        from whitted.scene.default_scene import create_default_scene

        create_default_scene()
        setup_render_target(16, 16)

        color = render_pixel(8, 8, max_depth=3)

        # At least the glass sphere's ambient term
        assert all(c >= 0.01 - 1e-6 for c in color)
