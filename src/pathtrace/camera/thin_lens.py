"""Thin-lens camera model with antialiasing and defocus blur.

Camera state is split in two:
- CameraConfig: immutable user settings (image size, sampling, placement).
- CameraBasis: immutable derived geometry computed by the pure function
  compute_camera_basis().

setup_camera() uploads a CameraBasis into Taichi fields. It must be called
once before rendering and never while a kernel is running.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport lies on the focus plane, focus_distance in front of the camera.
Pixel (0, 0) is the upper-left pixel; the row index j grows downward.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.camera.thin_lens import (
    ...     CameraConfig, compute_camera_basis, setup_camera
    ... )
    >>> config = CameraConfig(image_width=400, aspect_ratio=16.0 / 9.0)
    >>> basis = compute_camera_basis(config)
    >>> setup_camera(basis)
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.pathtrace.core.ray import Ray, make_ray
from src.pathtrace.core.vec import (
    Real,
    as_array,
    degrees_to_radians,
    host_unit_vector,
    random_in_unit_disk,
    vec3,
)

logger = logging.getLogger(__name__)

Vector3 = tuple[float, float, float]


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class CameraConfig:
    """User configuration of the camera.

    Attributes:
        aspect_ratio: Image width divided by height.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Number of random samples averaged per pixel.
        max_depth: Maximum number of ray bounces per sample.
        vfov: Vertical field of view in degrees.
        look_from: Camera position in world space.
        look_at: Point the camera looks at.
        vup: Camera-relative "up" direction.
        defocus_angle: Cone angle in degrees of rays through each pixel.
            0 disables depth of field.
        focus_distance: Distance from the camera to the plane of perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    look_from: Vector3 = (0.0, 0.0, 0.0)
    look_at: Vector3 = (0.0, 0.0, -1.0)
    vup: Vector3 = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    focus_distance: float = 10.0

    def __post_init__(self) -> None:
        if self.image_width < 1:
            raise ValueError(f"image_width must be at least 1, got {self.image_width}")
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.defocus_angle < 0.0:
            raise ValueError(f"defocus_angle must be non-negative, got {self.defocus_angle}")
        if not self.focus_distance > 0.0:
            raise ValueError(f"focus_distance must be positive, got {self.focus_distance}")

    @property
    def image_height(self) -> int:
        """Image height derived from width and aspect ratio, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))


@dataclass(frozen=True)
class CameraBasis:
    """Geometry derived from a CameraConfig.

    All vectors are float64 NumPy arrays of shape (3,).
    """

    image_width: int
    image_height: int
    samples_per_pixel: int
    max_depth: int
    pixel_samples_scale: float
    center: npt.NDArray[np.float64]
    pixel00_loc: npt.NDArray[np.float64]
    pixel_delta_u: npt.NDArray[np.float64]
    pixel_delta_v: npt.NDArray[np.float64]
    u: npt.NDArray[np.float64]
    v: npt.NDArray[np.float64]
    w: npt.NDArray[np.float64]
    defocus_angle: float
    defocus_disk_u: npt.NDArray[np.float64]
    defocus_disk_v: npt.NDArray[np.float64]


def compute_camera_basis(config: CameraConfig) -> CameraBasis:
    """Derive the camera geometry from its configuration.

    Args:
        config: The camera configuration.

    Returns:
        The derived CameraBasis.

    Raises:
        DegenerateVectorError: If look_from equals look_at or vup is parallel
            to the viewing direction.
    """
    image_width = config.image_width
    image_height = config.image_height

    center = as_array(config.look_from)

    # Viewport dimensions on the focus plane
    theta = degrees_to_radians(config.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * config.focus_distance
    viewport_width = viewport_height * config.aspect_ratio

    # Orthonormal basis
    w = host_unit_vector(center - as_array(config.look_at))
    u = host_unit_vector(np.cross(as_array(config.vup), w))
    v = np.cross(w, u)

    # Vectors across the horizontal and down the vertical viewport edges
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    viewport_upper_left = center - config.focus_distance * w - viewport_u / 2.0 - viewport_v / 2.0
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_radius = config.focus_distance * math.tan(degrees_to_radians(config.defocus_angle / 2.0))

    return CameraBasis(
        image_width=image_width,
        image_height=image_height,
        samples_per_pixel=config.samples_per_pixel,
        max_depth=config.max_depth,
        pixel_samples_scale=1.0 / config.samples_per_pixel,
        center=center,
        pixel00_loc=pixel00_loc,
        pixel_delta_u=pixel_delta_u,
        pixel_delta_v=pixel_delta_v,
        u=u,
        v=v,
        w=w,
        defocus_angle=config.defocus_angle,
        defocus_disk_u=u * defocus_radius,
        defocus_disk_v=v * defocus_radius,
    )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=Real, shape=())
_pixel00_loc = ti.Vector.field(3, dtype=Real, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=Real, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=Real, shape=())
_defocus_disk_u = ti.Vector.field(3, dtype=Real, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=Real, shape=())
_defocus_angle = ti.field(dtype=Real, shape=())
_camera_initialized = ti.field(dtype=ti.i32, shape=())


def setup_camera(basis: CameraBasis) -> None:
    """Upload derived camera geometry into Taichi fields.

    Must be called from Python before any render kernel runs.
    """
    _camera_center[None] = basis.center.tolist()
    _pixel00_loc[None] = basis.pixel00_loc.tolist()
    _pixel_delta_u[None] = basis.pixel_delta_u.tolist()
    _pixel_delta_v[None] = basis.pixel_delta_v.tolist()
    _defocus_disk_u[None] = basis.defocus_disk_u.tolist()
    _defocus_disk_v[None] = basis.defocus_disk_v.tolist()
    _defocus_angle[None] = basis.defocus_angle
    _camera_initialized[None] = 1
    logger.debug(
        "Camera set up: %dx%d, center=%s, defocus_angle=%s",
        basis.image_width,
        basis.image_height,
        tuple(basis.center),
        basis.defocus_angle,
    )


def is_camera_initialized() -> bool:
    return bool(_camera_initialized[None])


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def sample_square() -> vec3:
    """Random offset in the [-0.5, 0.5) x [-0.5, 0.5) unit square."""
    return vec3(ti.random(Real) - 0.5, ti.random(Real) - 0.5, 0.0)


@ti.func
def defocus_disk_sample() -> vec3:
    """Random point on the camera's defocus disk."""
    p = random_in_unit_disk()
    return _camera_center[None] + p[0] * _defocus_disk_u[None] + p[1] * _defocus_disk_v[None]


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32) -> Ray:
    """Generate a camera ray for pixel (i, j).

    The ray is aimed at a random point inside the pixel and originates from
    the camera center, or from a random point on the defocus disk when depth
    of field is enabled.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = top).

    Returns:
        A Ray with an unnormalized direction.
    """
    offset = sample_square()
    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(pixel_i, Real) + offset.x) * _pixel_delta_u[None]
        + (ti.cast(pixel_j, Real) + offset.y) * _pixel_delta_v[None]
    )

    ray_origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        ray_origin = defocus_disk_sample()

    return make_ray(ray_origin, pixel_sample - ray_origin)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for inspection."""

    def _tuple(f) -> tuple[float, float, float]:
        v = f[None]
        return (float(v[0]), float(v[1]), float(v[2]))

    return {
        "center": _tuple(_camera_center),
        "pixel00_loc": _tuple(_pixel00_loc),
        "pixel_delta_u": _tuple(_pixel_delta_u),
        "pixel_delta_v": _tuple(_pixel_delta_v),
        "defocus_disk_u": _tuple(_defocus_disk_u),
        "defocus_disk_v": _tuple(_defocus_disk_v),
    }
