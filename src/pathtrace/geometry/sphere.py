"""Sphere primitive with ray-sphere intersection.

Substituting the ray origin + t * direction into |p - center|^2 = radius^2
gives the quadratic

    a*t^2 - 2*h*t + c = 0

with oc = center - origin, a = |direction|^2, h = direction . oc and
c = |oc|^2 - radius^2. The nearer root (h - sqrt(d)) / a is tried first and
the farther root (h + sqrt(d)) / a only if the nearer one is outside the
interval. Both roots must lie strictly inside the interval.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.geometry.sphere import Sphere, hit_sphere
    >>> # Within a Taichi kernel:
    >>> # rec = hit_sphere(ray, sphere, Interval(min=0.001, max=INFINITY))
"""

import taichi as ti
import taichi.math as tm

from src.pathtrace.core.interval import Interval, interval_surrounds
from src.pathtrace.core.ray import Ray, ray_at
from src.pathtrace.core.vec import Real, length_squared, vec3
from src.pathtrace.geometry.hittable import HitRecord, make_miss_record, set_face_normal


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere.
        radius: The radius, never negative.
        material_id: Unified material ID shared with other primitives.
    """

    center: vec3
    radius: Real
    material_id: ti.i32


@ti.func
def make_sphere(center: vec3, radius: Real, material_id: ti.i32) -> Sphere:
    """Create a sphere, clamping a negative radius to zero."""
    return Sphere(center=center, radius=tm.max(radius, 0.0), material_id=material_id)


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Find the nearest intersection of a ray with a sphere inside ray_t.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test against.
        ray_t: Open interval of acceptable ray parameters.

    Returns:
        A HitRecord. Check the hit field to determine whether an
        intersection occurred.
    """
    result = make_miss_record()

    oc = sphere.center - ray.origin
    a = length_squared(ray.direction)
    h = tm.dot(ray.direction, oc)
    c = length_squared(oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    if discriminant >= 0.0:
        sqrtd = ti.sqrt(discriminant)

        root = (h - sqrtd) / a
        valid = interval_surrounds(ray_t, root)
        if not valid:
            root = (h + sqrtd) / a
            valid = interval_surrounds(ray_t, root)

        if valid:
            p = ray_at(ray, root)
            outward_normal = (p - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray.direction, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                p=p,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result
