"""Real-number intervals for bounding ray parameters and color channels.

An Interval is a {min, max} pair. surrounds() is strictly exclusive at both
ends, contains() is inclusive. Ray intersection tests use surrounds() so that
a hit exactly at the interval bound (for example t = 0 at the ray origin) is
rejected.

Example:
    >>> from src.pathtrace.core.interval import Interval, interval_surrounds
    >>> # Within a Taichi kernel:
    >>> # ray_t = Interval(min=0.001, max=INFINITY)
    >>> # if interval_surrounds(ray_t, t): ...
"""

import taichi as ti

from src.pathtrace.core.vec import Real

# Stand-in for infinity. Kernels are compiled with fast math, which assumes
# finite operands, so the unbounded ends of intervals use a huge finite value.
INFINITY = 1e300


@ti.dataclass
class Interval:
    """A range of real numbers.

    Attributes:
        min: Lower bound.
        max: Upper bound. Producers always supply min <= max, except for the
            deliberately inverted EMPTY interval.
    """

    min: Real
    max: Real


@ti.func
def make_interval(lo: Real, hi: Real) -> Interval:
    return Interval(min=lo, max=hi)


@ti.func
def universe() -> Interval:
    """The interval spanning the whole real line."""
    return Interval(min=-INFINITY, max=INFINITY)


@ti.func
def empty() -> Interval:
    """An interval that contains nothing."""
    return Interval(min=INFINITY, max=-INFINITY)


@ti.func
def interval_size(interval: Interval) -> Real:
    return interval.max - interval.min


@ti.func
def interval_contains(interval: Interval, x: Real) -> ti.i32:
    """Inclusive containment test: min <= x <= max."""
    return interval.min <= x and x <= interval.max


@ti.func
def interval_surrounds(interval: Interval, x: Real) -> ti.i32:
    """Strict containment test: min < x < max."""
    return interval.min < x and x < interval.max


@ti.func
def interval_clamp(interval: Interval, x: Real) -> Real:
    """Clamp x into [min, max]."""
    result = x
    if x < interval.min:
        result = interval.min
    elif x > interval.max:
        result = interval.max
    return result
