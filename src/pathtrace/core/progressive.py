"""Progressive renderer for iterative sample accumulation.

This module wraps the integrator with a camera configuration and supports:
- Rendering the configured samples per pixel in one call
- Incremental rendering that refines over time
- Progress callbacks and a generator interface
- Averaged, gamma-mapped 8-bit output and file export

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.camera.thin_lens import CameraConfig
    >>> from src.pathtrace.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(CameraConfig(image_width=200, samples_per_pixel=20))
    >>> renderer.render()
    >>> image = renderer.get_image_uint8()
"""

import logging
import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from src.pathtrace.camera.thin_lens import CameraConfig, compute_camera_basis, setup_camera
from src.pathtrace.core.integrator import (
    clear_render_target,
    get_completed_pixel_samples,
    get_sample_sum_numpy,
    get_total_samples,
    render_image,
    resolve_image_uint8,
    setup_render_target,
)

logger = logging.getLogger(__name__)

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A renderer that accumulates samples for one camera configuration.

    Creating the renderer computes the camera basis, uploads it, and sizes
    the render target. The scene is whatever is currently registered with
    the scene module.

    Attributes:
        config: The camera configuration.
        basis: The derived camera geometry.
    """

    def __init__(self, config: CameraConfig) -> None:
        """Initialize the renderer.

        Raises:
            DegenerateVectorError: If the camera orientation is degenerate.
            ValueError: If the image exceeds the maximum supported size.
        """
        self.config = config
        self.basis = compute_camera_basis(config)
        setup_camera(self.basis)
        setup_render_target(self.basis.image_width, self.basis.image_height, self.basis.max_depth)

    @property
    def width(self) -> int:
        return self.basis.image_width

    @property
    def height(self) -> int:
        return self.basis.image_height

    @property
    def sample_count(self) -> int:
        """Number of accumulated samples per pixel."""
        return get_total_samples()

    @property
    def completed_pixel_samples(self) -> int:
        """Number of pixel samples traced so far, across all pixels."""
        return get_completed_pixel_samples()

    def reset(self) -> None:
        """Discard accumulated samples."""
        clear_render_target()

    def render(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples with an optional progress callback.

        Args:
            num_samples: Samples per pixel to add. Defaults to the configured
                samples_per_pixel.
            batch_size: Number of samples to render before each callback.
            callback: Optional function receiving
                (current_total_samples, target_total_samples) after each batch.
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int | None = None,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples, yielding progress after each batch.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        if num_samples is None:
            num_samples = self.config.samples_per_pixel
        if num_samples <= 0:
            return
        batch_size = max(1, batch_size)

        target_samples = self.sample_count + num_samples
        logger.info(
            "Rendering %dx%d, %d samples per pixel, max depth %d",
            self.width,
            self.height,
            num_samples,
            self.basis.max_depth,
        )
        start = time.perf_counter()

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch)
            remaining -= batch
            yield (self.sample_count, target_samples)

        logger.info("Rendered %d samples in %.2fs", num_samples, time.perf_counter() - start)

    def get_image_linear(self) -> npt.NDArray[np.float64]:
        """Get the averaged linear radiance as an array of shape (H, W, 3).

        Raises:
            RuntimeError: If no samples have been rendered.
        """
        samples = self.sample_count
        if samples == 0:
            raise RuntimeError("No samples rendered yet. Call render() first.")
        return get_sample_sum_numpy() / samples

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-mapped 8-bit image of shape (H, W, 3), row 0 at the top."""
        return resolve_image_uint8()

    def save_image(self, filepath: str) -> None:
        """Save the rendered image to a file (format from the extension)."""
        from src.pathtrace.preview.export import save_image

        save_image(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
