"""Vector math and random sampling utilities.

Vectors are Taichi 3-vectors of 64-bit floats. The same type is used for
points, directions and linear RGB colors. Arithmetic (addition, scaling,
componentwise products, negation) is native to Taichi vectors, so this module
only provides the named operations and the random constructors used for
Monte Carlo sampling.

Host-side helpers operating on NumPy arrays live at the bottom of the module.
They are used when deriving camera state before any kernel runs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.core.vec import vec3, random_unit_vector
    >>> # Use random_unit_vector() within a Taichi kernel
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Scalar and vector types shared by every kernel in the package
Real = ti.f64
vec3 = ti.types.vector(3, Real)

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8

# Lower bound on the squared length accepted by random_unit_vector().
# Smaller values can underflow and normalize to infinities.
UNIT_VECTOR_MIN_LENGTH_SQUARED = 1e-160


class DegenerateVectorError(ValueError):
    """Raised when a zero-length vector would have to be normalized."""


@ti.func
def length_squared(v: vec3) -> Real:
    """Compute the squared Euclidean length of a vector."""
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> Real:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Callers must guarantee a nonzero length. Camera and scatter directions
    satisfy this by construction.
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> Real:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether all components of a vector are close to zero.

    Used to detect degenerate scatter directions.

    Returns:
        1 if every component is below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Mirror a direction about a unit normal: v - 2(v . n)n."""
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: Real) -> vec3:
    """Refract a unit direction through a surface with Snell's law.

    The refracted ray is built from its components perpendicular and
    parallel to the normal.

    Args:
        uv: The unit incident direction.
        n: The unit surface normal, facing against uv.
        etai_over_etat: Ratio of the refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_real(lo: Real, hi: Real) -> Real:
    """Draw a uniform real number in [lo, hi)."""
    return lo + (hi - lo) * ti.random(Real)


@ti.func
def random_vec3() -> vec3:
    """Draw a vector uniformly from [0, 1)^3."""
    return vec3(ti.random(Real), ti.random(Real), ti.random(Real))


@ti.func
def random_vec3_range(lo: Real, hi: Real) -> vec3:
    """Draw a vector uniformly from [lo, hi)^3."""
    return vec3(random_real(lo, hi), random_real(lo, hi), random_real(lo, hi))


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    Rejection-samples the cube [-1, 1)^3 until a point falls inside the unit
    ball and away from the origin, then projects it onto the sphere.

    Returns:
        A random unit vector.
    """
    result = vec3(0.0, 0.0, 0.0)
    found = 0
    while found == 0:
        p = random_vec3_range(-1.0, 1.0)
        lensq = length_squared(p)
        if UNIT_VECTOR_MIN_LENGTH_SQUARED < lensq and lensq <= 1.0:
            result = p / ti.sqrt(lensq)
            found = 1
    return result


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used for sampling the camera lens aperture.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    result = vec3(0.0, 0.0, 0.0)
    found = 0
    while found == 0:
        p = vec3(random_real(-1.0, 1.0), random_real(-1.0, 1.0), 0.0)
        if length_squared(p) < 1.0:
            result = p
            found = 1
    return result


# =============================================================================
# Host-side helpers (NumPy)
# =============================================================================


def as_array(v) -> npt.NDArray[np.float64]:
    """Convert a 3-tuple or array-like to a float64 NumPy vector."""
    arr = np.asarray(v, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {arr.shape}")
    return arr


def host_unit_vector(v) -> npt.NDArray[np.float64]:
    """Normalize a host-side vector.

    Raises:
        DegenerateVectorError: If the vector has zero (or non-finite) length.
    """
    arr = as_array(v)
    norm = float(np.linalg.norm(arr))
    if norm == 0.0 or not math.isfinite(norm):
        raise DegenerateVectorError(f"Cannot normalize vector {tuple(arr)} of length {norm}")
    return arr / norm


def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0
