"""Linear-to-display color mapping.

Radiance estimates are linear RGB values roughly in [0, 1] but not clamped.
For display each channel is gamma corrected with a square root ("gamma 2"),
clamped to [0, 0.999] and quantized to an 8-bit integer by multiplying by 256
and truncating.

Example:
    >>> from src.pathtrace.core.color import map_color
    >>> map_color((0.25, 0.0, 1.0))
    (128, 0, 255)
"""

import taichi as ti

from src.pathtrace.core.interval import Interval, interval_clamp
from src.pathtrace.core.vec import Real, vec3

ivec3 = ti.types.vector(3, ti.i32)

# Channel range before quantization
INTENSITY_MIN = 0.0
INTENSITY_MAX = 0.999


@ti.func
def linear_to_gamma(linear_component: Real) -> Real:
    """Apply gamma 2 correction; non-positive input maps to zero."""
    result = 0.0
    if linear_component > 0.0:
        result = ti.sqrt(linear_component)
    return result


@ti.func
def color_to_bytes(pixel_color: vec3) -> ivec3:
    """Map a linear color to three 8-bit channel values in [0, 255]."""
    intensity = Interval(min=INTENSITY_MIN, max=INTENSITY_MAX)
    result = ivec3(0, 0, 0)
    for c in ti.static(range(3)):
        gamma = linear_to_gamma(pixel_color[c])
        result[c] = ti.cast(256.0 * interval_clamp(intensity, gamma), ti.i32)
    return result


@ti.kernel
def _map_color_kernel(r: Real, g: Real, b: Real) -> ivec3:
    return color_to_bytes(vec3(r, g, b))


def map_color(color: tuple[float, float, float]) -> tuple[int, int, int]:
    """Map a single linear color to display bytes.

    Python-callable wrapper around color_to_bytes(), mostly for testing and
    for callers that post-process individual pixels.

    Args:
        color: Linear (R, G, B) radiance.

    Returns:
        Tuple of (R, G, B) integers in [0, 255].
    """
    result = _map_color_kernel(color[0], color[1], color[2])
    return (int(result[0]), int(result[1]), int(result[2]))
