"""Unified scene manager for coordinating spheres and materials.

Materials are registered once and referenced by ID from any number of
spheres. The manager keeps a unified material_id space and maps every ID to
(material_type, type_local_index), so kernels can dispatch to the right
scattering function and look up its parameters.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> ground = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    >>> scene.add_sphere(center=(0, -1000, 0), radius=1000, material_id=ground)
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from src.pathtrace.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from src.pathtrace.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from src.pathtrace.materials.metal import (
    add_metal_material,
    clear_metal_materials,
    effective_fuzz,
)
from src.pathtrace.scene.intersection import (
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 3072

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the index into the type-specific registry
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Returns:
        The material type as an integer (see MaterialType), or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local registry index for a given material ID, or -1."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material.
        type_index: The index within the type-specific registry.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data description of a scene, suitable for serialization.

    Attributes:
        materials: List of {"type": ..., **params} dictionaries in ID order.
        spheres: List of {"center", "radius", "material_id"} dictionaries.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Scene builder with shared, immutable materials.

    Attributes:
        materials: MaterialInfo for all registered materials, indexed by ID.
        spheres: SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> glass = scene.add_dielectric_material(ior=1.5)
        >>> scene.add_sphere((0, 1, 0), 1.0, glass)
        >>> scene.add_sphere((0, 1, 0), -0.9, glass)  # clamped to radius 0
    """

    def __init__(self) -> None:
        """Initialize an empty scene, clearing any previous global scene data."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the entire scene (primitives and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register(self, material_type: MaterialType, type_index: int, params: dict[str, Any]) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Registered %s material %d: %s", material_type.name, material_id, params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If a material registry is full.
            ValueError: If any albedo component is negative.
        """
        type_index = add_lambertian_material(albedo)
        return self._register(MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)})

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Add a metal (specular reflective) material.

        The recorded params hold the fuzz actually stored, after the floor in
        materials.metal has been applied.

        Returns:
            The unified material ID for this material.
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._register(
            MaterialType.METAL,
            type_index,
            {"albedo": tuple(albedo), "fuzz": effective_fuzz(fuzz)},
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Add a dielectric (glass/water) material.

        Returns:
            The unified material ID for this material.

        Raises:
            ValueError: If IOR is not positive.
        """
        type_index = add_dielectric_material(ior)
        return self._register(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def get_material_count(self) -> int:
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere referencing an already registered material.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius. Negative values are clamped to zero.
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(float(c) for c in center),
                radius=max(0.0, float(radius)),
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> int:
        """Add a sphere with its own new Lambertian material."""
        return self.add_sphere(center, radius, self.add_lambertian_material(albedo))

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a sphere with its own new metal material."""
        return self.add_sphere(center, radius, self.add_metal_material(albedo, fuzz))

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> int:
        """Add a sphere with its own new dielectric material."""
        return self.add_sphere(center, radius, self.add_dielectric_material(ior))

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene as a SceneConfig."""
        config = SceneConfig()
        for info in self.materials:
            config.materials.append({"type": info.material_type.name.lower(), **info.params})
        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": sphere.center,
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the contents of a SceneConfig.

        Raises:
            ValueError: If a material type is unknown.
        """
        self.clear()
        for mat in config.materials:
            mat_type = mat.get("type", "").lower()
            if mat_type == "lambertian":
                self.add_lambertian_material(tuple(mat["albedo"]))
            elif mat_type == "metal":
                self.add_metal_material(tuple(mat["albedo"]), mat.get("fuzz", 0.0))
            elif mat_type == "dielectric":
                self.add_dielectric_material(mat.get("ior", 1.5))
            else:
                raise ValueError(f"Unknown material type: {mat.get('type')!r}")
        for sphere in config.spheres:
            self.add_sphere(tuple(sphere["center"]), sphere["radius"], sphere["material_id"])

    def to_dict(self) -> dict[str, Any]:
        return asdict(self.to_config())

    def from_dict(self, data: dict[str, Any]) -> None:
        self.from_config(
            SceneConfig(
                materials=list(data.get("materials", [])),
                spheres=list(data.get("spheres", [])),
            )
        )

    def summary(self) -> dict[str, int]:
        """Count materials per type and spheres, for logging."""
        counts = {mat_type.name.lower(): 0 for mat_type in MaterialType}
        for info in self.materials:
            counts[info.material_type.name.lower()] += 1
        counts["spheres"] = len(self.spheres)
        return counts
