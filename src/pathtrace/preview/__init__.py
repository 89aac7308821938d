"""Preview module for writing rendered images.

Components:
    export: Image file export via Pillow
"""

from .export import compute_rmse, image_to_pil, save_image

__all__ = [
    "image_to_pil",
    "save_image",
    "compute_rmse",
]
