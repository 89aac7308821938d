"""Random spheres scene configuration.

This module provides a factory function for the classic "many random spheres"
showcase scene:

- A huge diffuse gray ground sphere
- A grid of small spheres (radius 0.2) on the ground, each jittered inside its
  cell and given a random material: 80% diffuse, 15% metal, 5% glass
- Three large feature spheres: glass in the middle, brown diffuse on the left,
  polished metal on the right

Small spheres closer than 0.9 units to (4, 0.2, 0) are skipped so they do not
overlap the metal feature sphere.

Randomness comes from a NumPy Generator seeded from the params, so a given
seed always builds the same scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtrace.scene.random_spheres import create_random_spheres_scene
    >>> from src.pathtrace.core.progressive import ProgressiveRenderer
    >>>
    >>> scene, camera_config = create_random_spheres_scene()
    >>> renderer = ProgressiveRenderer(camera_config)
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from src.pathtrace.camera.thin_lens import CameraConfig
from src.pathtrace.scene.manager import SceneManager

logger = logging.getLogger(__name__)


# =============================================================================
# Random Spheres Parameters
# =============================================================================


@dataclass
class RandomSpheresParams:
    """Parameters for configuring the random spheres scene.

    The defaults reproduce the reference render: a 1200 pixel wide 16:9 image
    at 500 samples per pixel with up to 50 bounces.

    Attributes:
        grid_extent: Number of grid cells along each axis. Cells run from
            -grid_extent // 2 to grid_extent // 2 - 1.
        seed: Seed for scene randomization.
        image_width: Rendered image width in pixels.
        aspect_ratio: Image width divided by height.
        samples_per_pixel: Samples averaged per pixel.
        max_depth: Maximum bounces per path.
        vfov: Vertical field of view in degrees.
        look_from: Camera position.
        look_at: Point the camera looks at.
        vup: Camera up direction.
        defocus_angle: Defocus cone angle in degrees.
        focus_distance: Distance to the plane of perfect focus.

    Example:
        >>> params = RandomSpheresParams(grid_extent=6, image_width=320)
        >>> scene, camera_config = create_random_spheres_scene(params)
    """

    grid_extent: int = 22
    seed: int | None = None
    image_width: int = 1200
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 500
    max_depth: int = 50
    vfov: float = 20.0
    look_from: tuple[float, float, float] = (13.0, 2.0, 3.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.6
    focus_distance: float = 10.0


# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

SMALL_SPHERE_RADIUS = 0.2
CELL_JITTER = 0.9

# Small spheres must stay this far from the metal feature sphere's footprint
CLEARANCE_POINT = (4.0, 0.2, 0.0)
CLEARANCE_DISTANCE = 0.9

# Material choice thresholds on a uniform [0, 1) draw
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.15

METAL_ALBEDO_RANGE = (0.5, 1.0)
METAL_FUZZ_RANGE = (0.0, 0.5)
GLASS_IOR = 1.5

FEATURE_RADIUS = 1.0
FEATURE_GLASS_CENTER = (0.0, 1.0, 0.0)
FEATURE_DIFFUSE_CENTER = (-4.0, 1.0, 0.0)
FEATURE_DIFFUSE_ALBEDO = (0.4, 0.2, 0.1)
FEATURE_METAL_CENTER = (4.0, 1.0, 0.0)
FEATURE_METAL_ALBEDO = (0.7, 0.6, 0.5)
FEATURE_METAL_FUZZ = 0.0


# =============================================================================
# Random Spheres Factory
# =============================================================================


def _as_tuple(values: np.ndarray) -> tuple[float, float, float]:
    return (float(values[0]), float(values[1]), float(values[2]))


def _add_small_spheres(scene: SceneManager, grid_extent: int, rng: np.random.Generator) -> None:
    half = grid_extent // 2
    for a in range(-half, half):
        for b in range(-half, half):
            choose_mat = rng.random()
            center = (a + CELL_JITTER * rng.random(), SMALL_SPHERE_RADIUS, b + CELL_JITTER * rng.random())

            if math.dist(center, CLEARANCE_POINT) <= CLEARANCE_DISTANCE:
                continue

            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = _as_tuple(rng.random(3) * rng.random(3))
                scene.add_lambertian_sphere(center, SMALL_SPHERE_RADIUS, albedo)
            elif choose_mat < DIFFUSE_PROBABILITY + METAL_PROBABILITY:
                albedo = _as_tuple(rng.uniform(*METAL_ALBEDO_RANGE, size=3))
                fuzz = float(rng.uniform(*METAL_FUZZ_RANGE))
                scene.add_metal_sphere(center, SMALL_SPHERE_RADIUS, albedo, fuzz)
            else:
                scene.add_dielectric_sphere(center, SMALL_SPHERE_RADIUS, GLASS_IOR)


def create_random_spheres_scene(
    params: RandomSpheresParams | None = None,
) -> tuple[SceneManager, CameraConfig]:
    """Create the random spheres scene.

    Args:
        params: Optional RandomSpheresParams. If None, uses the defaults.

    Returns:
        A tuple of (SceneManager, CameraConfig) where the scene holds all
        spheres and materials and the config frames the reference view.

    Raises:
        RuntimeError: If the scene exceeds the sphere or material capacity.
        ValueError: If a camera parameter is out of range.
    """
    if params is None:
        params = RandomSpheresParams()

    rng = np.random.default_rng(params.seed)
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)

    _add_small_spheres(scene, params.grid_extent, rng)

    scene.add_dielectric_sphere(FEATURE_GLASS_CENTER, FEATURE_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere(FEATURE_DIFFUSE_CENTER, FEATURE_RADIUS, FEATURE_DIFFUSE_ALBEDO)
    scene.add_metal_sphere(
        FEATURE_METAL_CENTER, FEATURE_RADIUS, FEATURE_METAL_ALBEDO, FEATURE_METAL_FUZZ
    )

    camera_config = CameraConfig(
        aspect_ratio=params.aspect_ratio,
        image_width=params.image_width,
        samples_per_pixel=params.samples_per_pixel,
        max_depth=params.max_depth,
        vfov=params.vfov,
        look_from=params.look_from,
        look_at=params.look_at,
        vup=params.vup,
        defocus_angle=params.defocus_angle,
        focus_distance=params.focus_distance,
    )

    logger.debug("Built random spheres scene: %s", scene.summary())
    return scene, camera_config
