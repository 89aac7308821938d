"""Unit tests for the interval module and the ray record.

Tests cover:
- Inclusive contains() and exclusive surrounds()
- clamp(), size(), and the universe/empty intervals
- ray_at()
"""

import pytest
import taichi as ti


class TestInterval:
    """Tests for Interval operations."""

    def test_contains_is_inclusive(self):
        """Test contains() accepts both endpoints."""
        from src.pathtrace.core.interval import Interval, interval_contains

        results = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            iv = Interval(min=0.0, max=1.0)
            results[0] = interval_contains(iv, 0.0)
            results[1] = interval_contains(iv, 1.0)
            results[2] = interval_contains(iv, 0.5)
            results[3] = interval_contains(iv, 1.5)

        test_kernel()
        assert results.to_numpy().tolist() == [1, 1, 1, 0]

    def test_surrounds_is_exclusive(self):
        """Test surrounds() rejects both endpoints."""
        from src.pathtrace.core.interval import Interval, interval_surrounds

        results = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            iv = Interval(min=0.0, max=1.0)
            results[0] = interval_surrounds(iv, 0.0)
            results[1] = interval_surrounds(iv, 1.0)
            results[2] = interval_surrounds(iv, 0.5)

        test_kernel()
        assert results.to_numpy().tolist() == [0, 0, 1]

    def test_clamp(self):
        """Test clamp() to [0, 0.999]."""
        from src.pathtrace.core.interval import Interval, interval_clamp

        results = ti.field(dtype=ti.f64, shape=3)

        @ti.kernel
        def test_kernel():
            iv = Interval(min=0.0, max=0.999)
            results[0] = interval_clamp(iv, -0.5)
            results[1] = interval_clamp(iv, 0.25)
            results[2] = interval_clamp(iv, 2.0)

        test_kernel()
        assert results.to_numpy().tolist() == pytest.approx([0.0, 0.25, 0.999])

    def test_size_universe_and_empty(self):
        """Test size of the predefined intervals."""
        from src.pathtrace.core.interval import (
            empty,
            interval_contains,
            interval_size,
            make_interval,
            universe,
        )

        sizes = ti.field(dtype=ti.f64, shape=3)
        contains = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            sizes[0] = interval_size(make_interval(2.0, 5.0))
            sizes[1] = interval_size(universe())
            sizes[2] = interval_size(empty())
            contains[0] = interval_contains(universe(), 1e200)
            contains[1] = interval_contains(empty(), 0.0)

        test_kernel()
        assert sizes[0] == pytest.approx(3.0)
        assert sizes[1] > 1e299
        assert sizes[2] < -1e299
        assert contains[0] == 1
        assert contains[1] == 0


class TestRay:
    """Tests for the Ray record."""

    def test_ray_at(self):
        """Test ray_at at t = 0 and t = 2.5 with an unnormalized direction."""
        from src.pathtrace.core.ray import Ray, ray_at
        from src.pathtrace.core.vec import vec3

        results = ti.Vector.field(3, dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -2.0))
            results[0] = ray_at(ray, 0.0)
            results[1] = ray_at(ray, 2.5)

        test_kernel()
        assert list(results[0]) == pytest.approx([1.0, 2.0, 3.0])
        assert list(results[1]) == pytest.approx([1.0, 2.0, -2.0])
