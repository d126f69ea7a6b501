"""Ready-made scenes.

Two scenes are provided:
- the default scene: four spheres on a large ground sphere, seen by an
  axis-aligned pinhole camera, stored as a flat list;
- the random spheres scene: a grid of small randomly placed spheres of
  random materials around three large ones, stored in a BVH and seen by a
  thin-lens camera with a shallow depth of field.

Each factory clears the global scene state, registers its materials,
uploads its world and returns the SceneManager together with the camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fastray.scene.scenes import create_default_scene
    >>> from fastray.camera import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> # Now render using the scene and camera
"""

import logging

import numpy as np

from fastray.camera.pinhole import PinholeCamera
from fastray.camera.thin_lens import ThinLensCamera
from fastray.scene.manager import SceneManager
from fastray.scene.shapes import Shape, ShapeList

logger = logging.getLogger(__name__)

# =============================================================================
# Default Scene
# =============================================================================

DEFAULT_ASPECT_RATIO = 2.0


def create_default_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the four-sphere default scene.

    - a matte red sphere in the middle,
    - a large yellow-green ground sphere,
    - a brushed gold metal sphere on the right,
    - a very rough silver metal sphere on the left.

    Args:
        aspect_ratio: Width over height of the image. At the default 2.0 the
            image plane spans x in [-2, 2] and y in [-1, 1] at z = -1.

    Returns:
        A tuple of (SceneManager, PinholeCamera).
    """
    scene = SceneManager()

    red = scene.add_lambertian_material((0.8, 0.3, 0.3))
    ground = scene.add_lambertian_material((0.8, 0.8, 0.0))
    gold = scene.add_metal_material((0.8, 0.6, 0.2), fuzz=0.3)
    silver = scene.add_metal_material((0.8, 0.8, 0.8), fuzz=1.0)

    world = ShapeList(
        [
            scene.sphere((0.0, 0.0, -1.0), 0.5, red),
            scene.sphere((0.0, -100.5, -1.0), 100.0, ground),
            scene.sphere((1.0, 0.0, -1.0), 0.4, gold),
            scene.sphere((-1.0, 0.0, -1.0), 0.45, silver),
        ]
    )
    scene.set_world(world)

    camera = PinholeCamera.from_viewport(viewport_height=2.0, aspect_ratio=aspect_ratio)
    return scene, camera


# =============================================================================
# Random Spheres Scene
# =============================================================================

GROUND_ALBEDO = (0.5, 0.5, 0.5)
GLASS_INDEX = 1.5
SMALL_RADIUS = 0.2

# Keep small spheres clear of the large metal sphere
_CLEARANCE_POINT = np.array([4.0, 0.2, 0.0])


def create_random_scene(
    rng: np.random.Generator | None = None,
    grid_half_extent: int = 11,
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random spheres scene.

    One small sphere is placed near every integer grid point (a, b) with
    -grid_half_extent <= a, b < grid_half_extent. Its material is diffuse
    with probability 0.8, metal with probability 0.15 and glass otherwise.

    Args:
        rng: Source of randomness for placement, materials and BVH split
            axes. Defaults to a fresh ``np.random.default_rng()``.
        grid_half_extent: Half the side of the grid of small spheres.
        aspect_ratio: Width over height of the image.

    Returns:
        A tuple of (SceneManager, ThinLensCamera).
    """
    if rng is None:
        rng = np.random.default_rng()
    if grid_half_extent < 0:
        raise ValueError(f"grid_half_extent must be non-negative, got {grid_half_extent}")

    scene = SceneManager()
    spheres: list[Shape] = []

    ground = scene.add_lambertian_material(GROUND_ALBEDO)
    spheres.append(scene.sphere((0.0, -1000.0, 0.0), 1000.0, ground))

    for a in range(-grid_half_extent, grid_half_extent):
        for b in range(-grid_half_extent, grid_half_extent):
            choose_mat = rng.random()
            center = np.array([a + 0.9 * rng.random(), SMALL_RADIUS, b + 0.9 * rng.random()])
            if np.linalg.norm(center - _CLEARANCE_POINT) <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = rng.random(3) * rng.random(3)
                material = scene.add_lambertian_material(tuple(float(c) for c in albedo))
            elif choose_mat < 0.95:
                albedo = 0.5 * (1.0 + rng.random(3))
                material = scene.add_metal_material(
                    tuple(float(c) for c in albedo), fuzz=float(0.5 * rng.random())
                )
            else:
                material = scene.add_dielectric_material(GLASS_INDEX)
            spheres.append(scene.sphere(tuple(center), SMALL_RADIUS, material))

    glass = scene.add_dielectric_material(GLASS_INDEX)
    brown = scene.add_lambertian_material((0.4, 0.2, 0.1))
    steel = scene.add_metal_material((0.7, 0.6, 0.5), fuzz=0.0)
    spheres.append(scene.sphere((0.0, 1.0, 0.0), 1.0, glass))
    spheres.append(scene.sphere((-4.0, 1.0, 0.0), 1.0, brown))
    spheres.append(scene.sphere((4.0, 1.0, 0.0), 1.0, steel))

    seed = int(rng.integers(2**31))
    scene.set_world(scene.build_bvh(spheres, seed=seed))
    logger.debug("Random scene: %d spheres", len(spheres))

    camera = ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )
    return scene, camera
