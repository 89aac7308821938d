"""Image export utilities for rendered images.

The renderer produces display-ready 8-bit RGB arrays of shape (H, W, 3).
This module encodes them with Pillow; the format follows the file extension
(PNG, JPEG, ...).

Example:
    >>> from src.pathtrace.preview.export import save_image
    >>> save_image(renderer.get_image_uint8(), "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def image_to_pil(image: npt.NDArray[np.uint8]) -> PILImage.Image:
    """Wrap an (H, W, 3) uint8 array in a Pillow image.

    Raises:
        ValueError: If the array does not have shape (H, W, 3) and dtype uint8.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {image.dtype}")
    return PILImage.fromarray(np.ascontiguousarray(image))


def save_image(image: npt.NDArray[np.uint8], filepath: str | Path) -> Path:
    """Save an 8-bit RGB image.

    Args:
        image: Array of shape (H, W, 3) with dtype uint8.
        filepath: Output path. The extension selects the format.

    Returns:
        The path written.
    """
    path = Path(filepath)
    image_to_pil(image).save(path)
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], path)
    return path


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
