"""Taichi-based Monte Carlo path tracer.

This package renders scenes of spheres with diffuse, metal and glass
materials by tracing random light paths from a thin-lens camera:
- Iterative path tracing with a bounded bounce budget
- Lambertian, fuzzy metal and dielectric scattering
- Antialiasing jitter and defocus blur
- Progressive per-pixel sample accumulation

Subpackages:
    core: Vector math, intervals, rays, the integrator and color mapping
    geometry: Hit records and the sphere primitive
    materials: Scattering models and their parameter registries
    scene: Scene storage, material management and demo scenes
    camera: Thin-lens camera configuration and ray generation
    preview: Image export

Taichi must be initialized in double precision before importing any module
that owns Taichi fields. Use init_runtime() for that.
"""

import taichi as ti

__version__ = "0.1.0"


def init_runtime(arch=ti.cpu, random_seed: int = 0) -> None:
    """Initialize Taichi with the settings the renderer expects.

    Args:
        arch: Taichi backend (ti.cpu, ti.gpu, ...). The backend must
            support 64-bit floats.
        random_seed: Seed for Taichi's per-thread random generators.
    """
    ti.init(arch=arch, default_fp=ti.f64, random_seed=random_seed)
