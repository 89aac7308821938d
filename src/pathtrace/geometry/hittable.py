"""Hit records shared by every intersectable primitive.

Every primitive exposes the same contract: given a ray and a parameter
interval, it returns a HitRecord whose hit flag tells whether the nearest
intersection inside the interval exists. The record carries the contact point,
a unit normal that always faces against the incoming ray, the front_face flag
and the material ID of the struck surface.

Hit records are transient. They are built per intersection test and consumed
by the next scatter step.
"""

import taichi as ti
import taichi.math as tm

from src.pathtrace.core.vec import Real, vec3

# Material ID stored in records that did not hit anything
NO_MATERIAL = -1


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 otherwise.
        t: Ray parameter of the intersection. Only valid if hit == 1.
        p: The contact point. Only valid if hit == 1.
        normal: Unit surface normal, always pointing against the ray.
            Only valid if hit == 1.
        front_face: 1 if the ray approached from outside (the outward normal
            already opposed the ray direction), 0 if it had to be flipped.
        material_id: Unified material ID of the struck surface, or
            NO_MATERIAL on a miss.
    """

    hit: ti.i32
    t: Real
    p: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a unit outward normal against the ray.

    Args:
        ray_direction: The direction of the incoming ray.
        outward_normal: The geometric outward normal (unit length).

    Returns:
        A tuple (front_face, normal).
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def make_miss_record() -> HitRecord:
    return HitRecord(
        hit=0,
        t=0.0,
        p=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=NO_MATERIAL,
    )
