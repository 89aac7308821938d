"""Metal (specular reflective) material implementation.

The incoming direction is normalized and mirrored about the normal:

    R = I - 2(I . N)N

then perturbed by fuzz times a random unit vector. If the perturbed
direction dips below the surface the ray is absorbed.

The registry keeps the fuzz floor of the renderer this package reproduces:
stored fuzz is max(fuzz, 1.0). scatter_metal() itself uses the fuzz it is
given, so a perfect mirror is available when calling it directly.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from src.pathtrace.core.vec import Real, random_unit_vector, reflect, unit_vector, vec3

# Lower bound applied to fuzz when a metal material is registered
FUZZ_FLOOR = 1.0


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: Real,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute the scattered ray direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: Perturbation scale. 0 gives a perfect mirror.
        incident_direction: The incoming ray direction (any nonzero length).
        normal: The unit surface normal facing against the incoming ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 1 if the direction points away from the surface and
        0 if the ray is absorbed.
    """
    reflected = reflect(unit_vector(incident_direction), normal)
    scattered_direction = reflected + fuzz * random_unit_vector()

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

MAX_METAL_MATERIALS = 1024

metal_albedos = ti.Vector.field(3, dtype=Real, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=Real, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials."""
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple. Components must be
            non-negative.
        fuzz: Requested fuzziness. Stored as max(fuzz, FUZZ_FLOOR).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is negative.
    """
    for i, component in enumerate(albedo):
        if component < 0.0:
            raise ValueError(f"Albedo component {i} = {component} is negative")

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = effective_fuzz(fuzz)
    num_metal_materials[None] = idx + 1
    return idx


def effective_fuzz(fuzz: float) -> float:
    """Return the fuzz value a metal material is stored with."""
    return fuzz if fuzz >= FUZZ_FLOOR else FUZZ_FLOOR


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> Real:
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
):
    """Scatter using the parameters stored in the registry at material_idx."""
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, incident_direction, normal)
