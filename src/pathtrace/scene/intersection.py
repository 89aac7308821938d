"""Scene-level primitive storage and closest-hit queries.

Spheres are stored in Taichi fields (structure of arrays) and scanned
linearly. While scanning, the upper bound of the query interval shrinks to
the closest hit found so far, so later primitives only report hits that are
nearer than the current best.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import logging

import taichi as ti

from src.pathtrace.core.interval import Interval
from src.pathtrace.core.ray import Ray
from src.pathtrace.core.vec import Real, vec3
from src.pathtrace.geometry.hittable import HitRecord, make_miss_record
from src.pathtrace.geometry.sphere import Sphere, hit_sphere

logger = logging.getLogger(__name__)

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=Real, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=Real, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all primitives from the scene.

    Resets the primitive count to zero. Field data is overwritten when new
    primitives are added.
    """
    num_spheres[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius. Negative values are clamped to zero.
        material_id: The unified material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = max(0.0, float(radius))
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    logger.debug("Added sphere %d at %s (r=%s, material %d)", idx, tuple(center), radius, material_id)
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(idx: ti.i32) -> Sphere:
    return Sphere(
        center=sphere_centers[idx],
        radius=sphere_radii[idx],
        material_id=sphere_material_ids[idx],
    )


@ti.func
def intersect_scene(ray: Ray, ray_t: Interval) -> HitRecord:
    """Find the nearest hit of a ray among all primitives in the scene.

    Args:
        ray: The ray to test.
        ray_t: Open interval of acceptable ray parameters.

    Returns:
        The HitRecord of the globally nearest intersection, or a miss record.
    """
    result = make_miss_record()
    closest_so_far = ray_t.max

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), Interval(min=ray_t.min, max=closest_so_far))
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result
