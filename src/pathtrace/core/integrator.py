"""Path tracing integrator for Monte Carlo light transport.

This module implements the color estimator and the rendering kernels.

For a camera ray, the estimator finds the nearest surface, asks its material
for a scattered ray and an attenuation, and continues along the scattered ray
with one fewer bounce left. The estimate is the product of the attenuations
along the path times the background color where the path escapes. Paths
that run out of bounces or are absorbed contribute black.

The recursion is written as a loop carrying the accumulated attenuation, which
keeps Taichi kernels free of recursive calls.

Each render pass traces one sample through every pixel in parallel and adds
it to a per-pixel sum. The sum is scaled by 1 / samples when the image is
resolved.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.camera.thin_lens import (
    ...     CameraConfig, compute_camera_basis, setup_camera
    ... )
    >>> from src.pathtrace.core.integrator import render_image, setup_render_target
    >>> basis = compute_camera_basis(CameraConfig(image_width=64))
    >>> setup_camera(basis)
    >>> setup_render_target(basis.image_width, basis.image_height, basis.max_depth)
    >>> render_image(num_samples=4)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.pathtrace.camera.thin_lens import get_ray, is_camera_initialized
from src.pathtrace.core.color import color_to_bytes
from src.pathtrace.core.interval import INFINITY, Interval
from src.pathtrace.core.ray import Ray, make_ray
from src.pathtrace.core.vec import Real, unit_vector, vec3
from src.pathtrace.materials.dielectric import scatter_dielectric_by_id
from src.pathtrace.materials.lambertian import scatter_lambertian_by_id
from src.pathtrace.materials.metal import scatter_metal_by_id
from src.pathtrace.scene.intersection import intersect_scene
from src.pathtrace.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# Scene queries cover (RAY_T_MIN, INFINITY); only the ray origin is excluded
RAY_T_MIN = 0.0

# Background gradient endpoints (RGB)
SKY_WHITE = (1.0, 1.0, 1.0)
SKY_BLUE = (0.5, 0.7, 1.0)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 1152

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_max_depth = ti.field(dtype=ti.i32, shape=())

# Per-pixel radiance sum, indexed [column, row] with row 0 at the top
_color_sum = ti.Vector.field(3, dtype=Real, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Quantized output, indexed like _color_sum
_color_bytes = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Completed passes and completed pixel samples (incremented atomically)
_passes_done = ti.field(dtype=ti.i32, shape=())
_samples_done = ti.field(dtype=ti.i64, shape=())

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int, max_depth: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and bounce budget and clears the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).
        max_depth: Maximum number of bounces per path.

    Raises:
        ValueError: If dimensions exceed the maximum supported size.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _max_depth[None] = max_depth
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the accumulated samples and counters."""
    _color_sum.fill(0.0)
    _color_bytes.fill(0)
    _passes_done[None] = 0
    _samples_done[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_ready() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")
    if not is_camera_initialized():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(ray: Ray, rec):
    """Dispatch to the scattering function of the struck material.

    Args:
        ray: The incoming ray.
        rec: The HitRecord of the intersection.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation = scatter_lambertian_by_id(type_index, rec.normal)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, ray.direction, rec.normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation = scatter_dielectric_by_id(
            type_index, ray.direction, rec.normal, rec.front_face
        )
        did_scatter = 1

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Color Estimator
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Vertical sky gradient for rays that leave the scene.

    a = 0.5 * (unit_y + 1) blends from white at a = 0 (straight down) to
    sky blue at a = 1 (straight up).
    """
    unit_direction = unit_vector(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    white = vec3(SKY_WHITE[0], SKY_WHITE[1], SKY_WHITE[2])
    blue = vec3(SKY_BLUE[0], SKY_BLUE[1], SKY_BLUE[2])
    return (1.0 - a) * white + a * blue


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace.
        depth: Remaining bounce budget. 0 returns black.

    Returns:
        The linear RGB radiance estimate.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    remaining = depth
    active = 1

    while active == 1:
        if remaining <= 0:
            # Bounce budget exhausted
            active = 0
        else:
            rec = intersect_scene(current, Interval(min=RAY_T_MIN, max=INFINITY))
            if rec.hit == 0:
                color = throughput * background_color(current.direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(current, rec)
                if did_scatter == 0:
                    # Absorbed
                    active = 0
                else:
                    throughput *= attenuation
                    current = make_ray(rec.p, scattered_direction)
                    remaining -= 1

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_pass(width: ti.i32, height: ti.i32):
    """Trace one sample through every pixel and add it to the pixel sums."""
    for i, j in ti.ndrange(width, height):
        ray = get_ray(i, j)
        _color_sum[i, j] += ray_color(ray, _max_depth[None])
        ti.atomic_add(_samples_done[None], 1)


@ti.kernel
def _resolve(width: ti.i32, height: ti.i32, scale: Real):
    """Average the pixel sums and map them to display bytes."""
    for i, j in ti.ndrange(width, height):
        _color_bytes[i, j] = ti.cast(color_to_bytes(scale * _color_sum[i, j]), ti.u8)


@ti.kernel
def _trace_single_ray(ox: Real, oy: Real, oz: Real, dx: Real, dy: Real, dz: Real, depth: ti.i32) -> vec3:
    return ray_color(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)), depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
) -> tuple[float, float, float]:
    """Estimate the radiance along a single ray against the current scene.

    Python-callable entry point, mostly for testing. Does not need a camera
    or render target.

    Returns:
        Tuple of linear (R, G, B) values.
    """
    color = _trace_single_ray(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], depth
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1) -> None:
    """Add num_samples samples to every pixel.

    Can be called repeatedly; samples accumulate until the render target is
    cleared.

    Raises:
        RuntimeError: If the render target or camera has not been set up.
    """
    _check_ready()

    width, height = get_image_dimensions()
    for _ in range(num_samples):
        _render_pass(width, height)
        _passes_done[None] += 1


def get_total_samples() -> int:
    """Number of samples accumulated per pixel so far."""
    return int(_passes_done[None])


def get_completed_pixel_samples() -> int:
    """Number of individual pixel samples traced so far, across all pixels."""
    return int(_samples_done[None])


def get_sample_sum_numpy() -> npt.NDArray[np.float64]:
    """Get the per-pixel radiance sums as an array of shape (height, width, 3)."""
    width, height = get_image_dimensions()
    full = _color_sum.to_numpy()
    return np.transpose(full[:width, :height, :], (1, 0, 2))


def resolve_image_uint8() -> npt.NDArray[np.uint8]:
    """Average, gamma-map and quantize the accumulated samples.

    Returns:
        Array of shape (height, width, 3) with dtype uint8, row 0 at the top.

    Raises:
        RuntimeError: If the render target has not been set up or no samples
            have been rendered.
    """
    _check_ready()
    samples = get_total_samples()
    if samples == 0:
        raise RuntimeError("No samples rendered yet. Call render_image() first.")

    width, height = get_image_dimensions()
    _resolve(width, height, 1.0 / samples)
    full = _color_bytes.to_numpy()
    return np.ascontiguousarray(np.transpose(full[:width, :height, :], (1, 0, 2)))
