"""Ray data structure.

A ray is an origin and a direction. The direction is never normalized by the
ray itself; intersection and scattering code accounts for arbitrary lengths.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.core.ray import Ray, ray_at
    >>> # Within a Taichi kernel:
    >>> # ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # point = ray_at(ray, 5.0)
"""

import taichi as ti

from src.pathtrace.core.vec import Real, vec3


@ti.dataclass
class Ray:
    """A half-line origin + t * direction.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. Not required to be unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: Real) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)
