"""Scene module for scene management and ray-scene queries.

Components:
    intersection: Sphere storage and nearest-hit queries
    manager: Scene manager coordinating spheres and shared materials
    random_spheres: Factory for the random spheres showcase scene

Scene data lives in Taichi fields using a Structure-of-Arrays layout.
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .random_spheres import RandomSpheresParams, create_random_spheres_scene

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Random spheres module
    "RandomSpheresParams",
    "create_random_spheres_scene",
]
