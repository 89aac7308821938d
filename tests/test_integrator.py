"""Tests for the path tracing integrator.

This module tests:
- The sky gradient returned for escaping rays
- Bounce budget handling
- Material dispatch (absorbing, transparent and diffuse surfaces)
- Render target setup, sample accumulation and image resolve
- Numerical sanity of rendered images

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import numpy as np
import pytest


def _setup_camera(width=16, aspect_ratio=1.0, max_depth=10, **kwargs):
    from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis, setup_camera
    from src.pathtrace.core.integrator import setup_render_target

    config = CameraConfig(image_width=width, aspect_ratio=aspect_ratio, max_depth=max_depth, **kwargs)
    basis = compute_camera_basis(config)
    setup_camera(basis)
    setup_render_target(basis.image_width, basis.image_height, basis.max_depth)
    return basis


class TestBackground:
    """Tests for rays that leave the scene."""

    def test_straight_up_is_sky_blue(self):
        from src.pathtrace.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 5) == pytest.approx((0.5, 0.7, 1.0))

    def test_straight_down_is_white(self):
        from src.pathtrace.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, -3.0, 0.0), 5) == pytest.approx((1.0, 1.0, 1.0))

    def test_horizontal_is_halfway(self):
        from src.pathtrace.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 5) == pytest.approx((0.75, 0.85, 1.0))


class TestBounceBudget:
    """Tests for the max depth limit."""

    def test_depth_zero_is_black(self):
        """Test that no light is gathered without a bounce budget, even on a miss."""
        from src.pathtrace.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0) == (0.0, 0.0, 0.0)

    def test_enclosed_white_diffuse_runs_out_of_bounces(self):
        """Test that a path trapped inside a sphere ends black."""
        from src.pathtrace.core.integrator import trace_ray
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, 0.0), 10.0, (1.0, 1.0, 1.0))

        for _ in range(5):
            assert trace_ray((0.0, 0.0, 0.0), (0.3, 0.2, -1.0), 8) == (0.0, 0.0, 0.0)


class TestMaterialDispatch:
    """Tests for scattering through the scene."""

    def test_black_diffuse_absorbs_everything(self):
        from src.pathtrace.core.integrator import trace_ray
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -5.0), 1.0, (0.0, 0.0, 0.0))

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10) == (0.0, 0.0, 0.0)

    def test_surface_very_close_to_origin_is_hit(self):
        """Test only the origin is excluded: a sphere spanning t in (3e-4, 7e-4) still blocks the ray."""
        from src.pathtrace.core.integrator import trace_ray
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -5e-4), 2e-4, (0.0, 0.0, 0.0))

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10) == (0.0, 0.0, 0.0)

    def test_index_one_glass_is_invisible(self):
        """Test a sphere with ior 1 passes a head-on ray straight through."""
        from src.pathtrace.core.integrator import trace_ray
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, -5.0), 1.0, ior=1.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10)
        assert color == pytest.approx((0.75, 0.85, 1.0))

    def test_glass_needs_enough_bounces(self):
        """Test that two refractions consume two bounces before the sky is seen."""
        from src.pathtrace.core.integrator import trace_ray
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, -5.0), 1.0, ior=1.0)

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 2) == (0.0, 0.0, 0.0)
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 3) == pytest.approx((0.75, 0.85, 1.0))

    def test_diffuse_attenuates_by_albedo(self):
        """Test one diffuse bounce off a huge ground sphere scales the sky by the albedo."""
        from src.pathtrace.core.integrator import trace_ray
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, -1000.0, 0.0), 999.0, (0.5, 0.5, 0.5))

        for _ in range(20):
            r, g, b = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), 2)
            # Scattered rays leave the upper hemisphere and see the sky once
            assert 0.25 <= r <= 0.5 + 1e-12
            assert 0.35 - 1e-12 <= g <= 0.5 + 1e-12
            assert b == pytest.approx(0.5)

    def test_unregistered_material_is_absorbed(self):
        """Test hits on a material ID without a registered material end the path."""
        from src.pathtrace.core.integrator import trace_ray
        from src.pathtrace.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 1.0, material_id=42)
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10) == (0.0, 0.0, 0.0)


class TestRenderTarget:
    """Tests for render target setup and accumulation."""

    def test_setup_render_target(self):
        from src.pathtrace.core.integrator import get_image_dimensions, get_total_samples

        _setup_camera(width=32, aspect_ratio=2.0)
        assert get_image_dimensions() == (32, 16)
        assert get_total_samples() == 0

    def test_oversized_target_rejected(self):
        from src.pathtrace.core.integrator import MAX_IMAGE_WIDTH, setup_render_target

        with pytest.raises(ValueError, match="exceed maximum"):
            setup_render_target(MAX_IMAGE_WIDTH + 1, 10, 5)

    def test_render_without_setup_raises(self):
        from src.pathtrace.core.integrator import _render_target_initialized, render_image

        _render_target_initialized[None] = 0
        with pytest.raises(RuntimeError, match="Render target not set up"):
            render_image(1)

    def test_resolve_without_samples_raises(self):
        from src.pathtrace.core.integrator import resolve_image_uint8

        _setup_camera()
        with pytest.raises(RuntimeError, match="No samples"):
            resolve_image_uint8()

    def test_sample_counters(self):
        from src.pathtrace.core.integrator import (
            get_completed_pixel_samples,
            get_total_samples,
            render_image,
        )

        _setup_camera(width=8, aspect_ratio=2.0)
        render_image(3)
        render_image(2)
        assert get_total_samples() == 5
        assert get_completed_pixel_samples() == 8 * 4 * 5

    def test_clear_render_target(self):
        from src.pathtrace.core.integrator import (
            clear_render_target,
            get_sample_sum_numpy,
            get_total_samples,
            render_image,
        )

        _setup_camera()
        render_image(2)
        clear_render_target()
        assert get_total_samples() == 0
        assert np.all(get_sample_sum_numpy() == 0.0)


class TestRenderedImage:
    """Tests for complete renders."""

    def test_enclosing_black_sphere_renders_black(self):
        """Test a camera inside a black diffuse sphere produces an all-zero image."""
        from src.pathtrace.core.integrator import render_image, resolve_image_uint8
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, 0.0), 100.0, (0.0, 0.0, 0.0))
        _setup_camera(width=12, aspect_ratio=1.5)

        render_image(4)
        image = resolve_image_uint8()
        assert image.shape == (8, 12, 3)
        assert image.dtype == np.uint8
        assert np.all(image == 0)

    def test_empty_scene_sky_gradient_orientation(self):
        """Test row 0 is the top of the image: bluer at the top than at the bottom."""
        from src.pathtrace.core.integrator import render_image, resolve_image_uint8

        _setup_camera(width=20)
        render_image(2)
        image = resolve_image_uint8()

        assert image.shape == (20, 20, 3)
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()
        # Blue is always fully saturated in the sky
        assert np.all(image[:, :, 2] == 255)

    def test_sample_sums_are_finite_and_bounded(self):
        """Test the random spheres materials produce finite, non-negative radiance."""
        from src.pathtrace.core.integrator import get_sample_sum_numpy, render_image
        from src.pathtrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
        scene.add_lambertian_sphere((0.0, 0.0, -1.2), 0.5, (0.1, 0.2, 0.5))
        scene.add_dielectric_sphere((-1.0, 0.0, -1.0), 0.5, 1.5)
        scene.add_dielectric_sphere((-1.0, 0.0, -1.0), 0.4, 1.0 / 1.5)
        scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), 1.0)
        _setup_camera(width=24, max_depth=20)

        render_image(4)
        sums = get_sample_sum_numpy()
        assert sums.shape == (24, 24, 3)
        assert np.all(np.isfinite(sums))
        assert np.all(sums >= 0.0)
        assert np.all(sums <= 4.0 + 1e-9)
