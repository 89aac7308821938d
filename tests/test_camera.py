"""Unit tests for the thin-lens camera.

Tests cover:
- CameraConfig validation and derived image height
- Camera basis computation (orthonormal frame, viewport, pixel grid)
- Degenerate orientations
- Ray generation with and without defocus blur
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestCameraConfig:
    """Tests for configuration validation."""

    def test_image_height_from_aspect(self):
        from src.pathtrace.camera.thin_lens import CameraConfig

        assert CameraConfig(image_width=400, aspect_ratio=16.0 / 9.0).image_height == 225
        assert CameraConfig(image_width=1200, aspect_ratio=16.0 / 9.0).image_height == 675

    def test_image_height_at_least_one(self):
        from src.pathtrace.camera.thin_lens import CameraConfig

        assert CameraConfig(image_width=10, aspect_ratio=100.0).image_height == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"image_width": 0},
            {"aspect_ratio": 0.0},
            {"samples_per_pixel": 0},
            {"max_depth": -1},
            {"vfov": 0.0},
            {"vfov": 180.0},
            {"defocus_angle": -1.0},
            {"focus_distance": 0.0},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        from src.pathtrace.camera.thin_lens import CameraConfig

        with pytest.raises(ValueError):
            CameraConfig(**kwargs)

    def test_config_is_immutable(self):
        from dataclasses import FrozenInstanceError

        from src.pathtrace.camera.thin_lens import CameraConfig

        config = CameraConfig()
        with pytest.raises(FrozenInstanceError):
            config.image_width = 10


class TestCameraBasis:
    """Tests for compute_camera_basis."""

    def test_default_basis(self):
        """Test the default camera looks down -z through a 2x2 viewport."""
        from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis

        basis = compute_camera_basis(CameraConfig(image_width=100, focus_distance=1.0))

        assert list(basis.w) == pytest.approx([0.0, 0.0, 1.0])
        assert list(basis.u) == pytest.approx([1.0, 0.0, 0.0])
        assert list(basis.v) == pytest.approx([0.0, 1.0, 0.0])
        # vfov 90 and focus distance 1 give a 2x2 viewport
        assert list(basis.pixel_delta_u) == pytest.approx([0.02, 0.0, 0.0])
        assert list(basis.pixel_delta_v) == pytest.approx([0.0, -0.02, 0.0])
        assert list(basis.pixel00_loc) == pytest.approx([-0.99, 0.99, -1.0])
        assert basis.pixel_samples_scale == pytest.approx(0.1)

    def test_basis_is_orthonormal(self):
        from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis

        basis = compute_camera_basis(
            CameraConfig(look_from=(13.0, 2.0, 3.0), look_at=(0.0, 0.0, 0.0), vfov=20.0)
        )
        frame = np.stack([basis.u, basis.v, basis.w])
        assert frame @ frame.T == pytest.approx(np.eye(3))
        assert basis.w == pytest.approx(np.array([13.0, 2.0, 3.0]) / math.sqrt(182.0))

    def test_viewport_on_focus_plane(self):
        """Test the image center lies focus_distance in front of the camera."""
        from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis

        config = CameraConfig(image_width=64, aspect_ratio=2.0, focus_distance=3.4, vfov=40.0)
        basis = compute_camera_basis(config)
        center_pixel = (
            basis.pixel00_loc
            + (config.image_width - 1) / 2.0 * basis.pixel_delta_u
            + (config.image_height - 1) / 2.0 * basis.pixel_delta_v
        )
        assert list(center_pixel) == pytest.approx([0.0, 0.0, -3.4])

    def test_viewport_width_uses_exact_aspect_ratio(self):
        """Test the viewport width is not skewed when width / aspect is not a whole number."""
        from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis

        config = CameraConfig(image_width=100, aspect_ratio=16.0 / 9.0)
        basis = compute_camera_basis(config)

        assert config.image_height == 56
        viewport_height = 2.0 * math.tan(math.radians(45.0)) * 10.0
        viewport_width = np.linalg.norm(basis.pixel_delta_u) * config.image_width
        assert viewport_width == pytest.approx(viewport_height * 16.0 / 9.0)
        assert np.linalg.norm(basis.pixel_delta_v) * config.image_height == pytest.approx(viewport_height)

    def test_defocus_disk_radius(self):
        from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis

        basis = compute_camera_basis(CameraConfig(defocus_angle=10.0, focus_distance=2.0))
        expected = 2.0 * math.tan(math.radians(5.0))
        assert np.linalg.norm(basis.defocus_disk_u) == pytest.approx(expected)
        assert np.linalg.norm(basis.defocus_disk_v) == pytest.approx(expected)

    def test_look_from_equals_look_at(self):
        from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis
        from src.pathtrace.core.vec import DegenerateVectorError

        with pytest.raises(DegenerateVectorError):
            compute_camera_basis(CameraConfig(look_from=(1.0, 1.0, 1.0), look_at=(1.0, 1.0, 1.0)))

    def test_vup_parallel_to_view(self):
        from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis
        from src.pathtrace.core.vec import DegenerateVectorError

        with pytest.raises(DegenerateVectorError):
            compute_camera_basis(
                CameraConfig(look_from=(0.0, 5.0, 0.0), look_at=(0.0, 0.0, 0.0), vup=(0.0, 1.0, 0.0))
            )


class TestRayGeneration:
    """Tests for get_ray."""

    def _sample_rays(self, pixel_i, pixel_j, n=500):
        from src.pathtrace.camera.thin_lens import get_ray

        origins = ti.Vector.field(3, dtype=ti.f64, shape=n)
        directions = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel(i: ti.i32, j: ti.i32):
            for k in range(n):
                ray = get_ray(i, j)
                origins[k] = ray.origin
                directions[k] = ray.direction

        test_kernel(pixel_i, pixel_j)
        return origins.to_numpy(), directions.to_numpy()

    def test_setup_camera_uploads_state(self):
        from src.pathtrace.camera.thin_lens import (
            CameraConfig,
            compute_camera_basis,
            get_camera_info,
            is_camera_initialized,
            setup_camera,
        )

        basis = compute_camera_basis(CameraConfig(look_from=(1.0, 2.0, 3.0)))
        setup_camera(basis)
        info = get_camera_info()
        assert is_camera_initialized()
        assert info["center"] == pytest.approx((1.0, 2.0, 3.0))
        assert info["pixel00_loc"] == pytest.approx(tuple(basis.pixel00_loc))

    def test_pinhole_rays_start_at_center_and_stay_in_pixel(self):
        """Test rays through pixel (0, 0) land inside the top-left pixel square."""
        from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis, setup_camera

        basis = compute_camera_basis(CameraConfig(image_width=100, focus_distance=1.0))
        setup_camera(basis)
        origins, directions = self._sample_rays(0, 0)

        assert np.allclose(origins, 0.0)
        # Directions end on the focus plane z = -1
        targets = origins + directions
        assert np.allclose(targets[:, 2], -1.0)
        assert np.all(targets[:, 0] >= -1.0 - 1e-12) and np.all(targets[:, 0] < -0.98 + 1e-12)
        assert np.all(targets[:, 1] <= 1.0 + 1e-12) and np.all(targets[:, 1] > 0.98 - 1e-12)

    def test_defocus_rays_start_on_lens_disk(self):
        """Test defocused rays start within the disk and still aim at the focus plane."""
        from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis, setup_camera

        config = CameraConfig(image_width=20, defocus_angle=20.0, focus_distance=2.0)
        basis = compute_camera_basis(config)
        setup_camera(basis)
        origins, directions = self._sample_rays(10, 10)

        radius = 2.0 * math.tan(math.radians(10.0))
        assert np.all(np.linalg.norm(origins, axis=1) < radius + 1e-12)
        assert np.allclose(origins[:, 2], 0.0)
        assert np.std(origins[:, 0]) > 0.0
        targets = origins + directions
        assert np.allclose(targets[:, 2], -2.0)
