"""Lambertian (ideal diffuse) material implementation.

The scattered direction is the surface normal plus a random unit vector,
which distributes outgoing rays with a cosine-weighted density about the
normal. When the random sample nearly cancels the normal the direction falls
back to the normal itself.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_lambertian(albedo, normal)
"""

import taichi as ti

from src.pathtrace.core.vec import Real, near_zero, random_unit_vector, vec3


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Sample a diffuse scatter direction.

    Lambertian surfaces always scatter; the attenuation is the albedo.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal facing against the incoming ray.

    Returns:
        A tuple of (scattered_direction, attenuation).
    """
    scatter_direction = normal + random_unit_vector()

    # Catch degenerate scatter direction
    if near_zero(scatter_direction):
        scatter_direction = normal

    return scatter_direction, albedo


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 1024

lambertian_albedos = ti.Vector.field(3, dtype=Real, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all lambertian materials."""
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a lambertian material to the material registry.

    Args:
        albedo: The diffuse color as (R, G, B) tuple. Components must be
            non-negative.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is negative.
    """
    for i, component in enumerate(albedo):
        if component < 0.0:
            raise ValueError(f"Albedo component {i} = {component} is negative")

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3):
    """Scatter using the albedo stored in the registry at material_idx."""
    return scatter_lambertian(get_lambertian_albedo(material_idx), normal)
