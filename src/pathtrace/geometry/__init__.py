"""Geometry module for primitive shapes.

Components:
    hittable: Hit record produced by ray-surface intersection
    sphere: Sphere primitive and its intersection test
"""

from .hittable import NO_MATERIAL, HitRecord, make_miss_record, set_face_normal
from .sphere import Sphere, hit_sphere, make_sphere

__all__ = [
    "NO_MATERIAL",
    "HitRecord",
    "make_miss_record",
    "set_face_normal",
    "Sphere",
    "make_sphere",
    "hit_sphere",
]
