"""Camera module for primary ray generation.

Components:
    thin_lens: Positionable camera with antialiasing and defocus blur
"""

from .thin_lens import (
    CameraBasis,
    CameraConfig,
    compute_camera_basis,
    get_camera_info,
    get_ray,
    is_camera_initialized,
    setup_camera,
)

__all__ = [
    "CameraConfig",
    "CameraBasis",
    "compute_camera_basis",
    "setup_camera",
    "is_camera_initialized",
    "get_ray",
    "get_camera_info",
]
