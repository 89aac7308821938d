"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    vec: 3-vector type, vector math and random direction sampling
    interval: Closed real intervals used to bound ray parameters
    ray: Ray data structure and point evaluation
    color: Gamma encoding and 8-bit quantization of linear colors
    integrator: Recursive color estimator and rendering kernels
    progressive: Sample accumulation driven from Python

All compute-intensive operations use Taichi kernels for parallel execution.
"""

from .color import INTENSITY_MAX, INTENSITY_MIN, color_to_bytes, linear_to_gamma, map_color
from .interval import (
    INFINITY,
    Interval,
    empty,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
    universe,
)
from .ray import Ray, make_ray, ray_at
from .vec import (
    DegenerateVectorError,
    Real,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    random_in_unit_disk,
    random_unit_vector,
    reflect,
    refract,
    unit_vector,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from src.pathtrace.core.integrator or src.pathtrace.core.progressive.

__all__ = [
    "Real",
    "vec3",
    "DegenerateVectorError",
    "length",
    "length_squared",
    "unit_vector",
    "dot",
    "cross",
    "near_zero",
    "reflect",
    "refract",
    "random_unit_vector",
    "random_in_unit_disk",
    "INFINITY",
    "Interval",
    "make_interval",
    "universe",
    "empty",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "Ray",
    "make_ray",
    "ray_at",
    "INTENSITY_MIN",
    "INTENSITY_MAX",
    "linear_to_gamma",
    "color_to_bytes",
    "map_color",
]
