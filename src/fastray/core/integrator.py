"""Path tracing integrator for Monte Carlo light transport.

This module implements the estimator and the scanline render kernel.

A path starts at the camera and is followed through the scene: every hit
asks the surface material to scatter, and the path ends when it escapes to
the sky, is absorbed, or runs out of bounces. The colour of a path is the
sky colour it finally sees multiplied by every attenuation collected on the
way; an absorbed or exhausted path is black.

The render kernel parallelizes over scanlines. Each scanline is handled by
one worker of the Taichi CPU thread pool and writes only its own row of the
colour buffer, so the finished image does not depend on completion order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fastray.core.integrator import render_rows, setup_render_target
    >>> from fastray.core.stats import RenderStats
    >>> from fastray.scene.scenes import create_default_scene
    >>> from fastray.camera import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(200, 100)
    >>> stats = RenderStats()
    >>> render_rows(0, 100, samples_per_pixel=4, max_depth=50, counters=stats.counters)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from fastray.camera.rays import get_ray_jittered, is_camera_ready
from fastray.core.stats import RAYS_TRACED, SCANLINES_COMPLETED
from fastray.materials.dielectric import (
    get_dielectric_index,
    scatter_dielectric,
)
from fastray.materials.lambertian import (
    get_lambertian_albedo,
    scatter_lambertian,
)
from fastray.materials.metal import (
    get_metal_albedo,
    get_metal_fuzz,
    scatter_metal,
)
from fastray.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)
from fastray.scene.world import intersect_world

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default number of bounces before a path is cut off
DEFAULT_MAX_DEPTH = 50

# t_min and t_max for ray intersection; t_min keeps scattered rays from
# re-hitting the surface they start on
T_MIN = 0.001
T_MAX = 1e30

# Sky gradient endpoints
SKY_HORIZON = vec3(1.0, 1.0, 1.0)
SKY_ZENITH = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Linear colour per pixel, indexed [row, column] with row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the colour buffer to zero."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Forget the render target; rendering fails until it is set up again."""
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Sky and Material Dispatch
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background colour seen along ``direction``.

    A vertical gradient from white at the horizon (and below) to light blue
    straight up.
    """
    t = 0.5 * (tm.normalize(direction).y + 1.0)
    return (1.0 - t) * SKY_HORIZON + t * SKY_ZENITH


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (normalized, facing toward ray).
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material IDs absorb.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    # Default values
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation, did_scatter = scatter_lambertian(albedo, normal)

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        refractive_index = get_dielectric_index(type_index)
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            refractive_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace(origin: vec3, direction: vec3, max_depth: ti.i32):
    """Estimate the colour arriving along a ray.

    A path may bounce ``max_depth`` times. A miss always returns the sky
    (times the accumulated attenuation), so at ``max_depth = 0`` hit pixels
    are black while background pixels still show the sky.

    Args:
        origin: The ray origin.
        direction: The ray direction (any length).
        max_depth: Remaining number of bounces.

    Returns:
        A tuple of (color, rays_cast) where rays_cast counts the scene
        queries made for this path.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction
    rays_cast = 0

    # Active flag for path continuation
    active = 1

    for depth in range(max_depth + 1):
        if active == 1:
            rays_cast += 1
            rec = intersect_world(ray_origin, ray_direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * sky_color(ray_direction)
                active = 0
            elif depth == max_depth:
                # Out of bounces
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = scatter_material(
                    rec.material_id, ray_direction, rec.normal, rec.front_face
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = rec.point
                    ray_direction = scattered_direction

    return color, rays_cast


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    counters: ti.types.ndarray(dtype=ti.i64, ndim=1),
):
    """Render scanlines [row_start, row_end), one scanline per worker."""
    for row in range(row_start, row_end):
        row_rays = ti.cast(0, ti.i64)
        for i in range(width):
            color = vec3(0.0, 0.0, 0.0)
            for _s in range(samples_per_pixel):
                ray = get_ray_jittered(i, row, width, height)
                sample, rays_cast = trace(ray.origin, ray.direction, max_depth)
                color += sample
                row_rays += rays_cast
            _color_buffer[row, i] = color / ti.cast(samples_per_pixel, ti.f32)

        ti.atomic_add(counters[RAYS_TRACED], row_rays)
        ti.atomic_add(counters[SCANLINES_COMPLETED], 1)


@ti.kernel
def _copy_image(width: ti.i32, height: ti.i32, out: ti.types.ndarray(dtype=ti.f32, ndim=3)):
    for row, i in ti.ndrange(height, width):
        for c in ti.static(range(3)):
            out[row, i, c] = _color_buffer[row, i][c]


# =============================================================================
# Public Rendering API
# =============================================================================


def render_rows(
    row_start: int,
    row_end: int,
    samples_per_pixel: int,
    max_depth: int,
    counters: npt.NDArray[np.int64],
) -> None:
    """Render a band of scanlines into the colour buffer.

    Args:
        row_start: First row to render (0 = top).
        row_end: One past the last row to render.
        samples_per_pixel: Number of jittered paths averaged per pixel.
        max_depth: Bounce limit per path.
        counters: int64 telemetry array (see fastray.core.stats), updated
            in place.

    Raises:
        RuntimeError: If the render target or the camera has not been set up.
        ValueError: If the row range is outside the image, samples_per_pixel
            is not positive or max_depth is negative.
    """
    if samples_per_pixel <= 0:
        raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    _check_render_target_initialized()
    if not is_camera_ready():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Row range [{row_start}, {row_end}) is outside [0, {height})")
    if row_start == row_end:
        return

    _render_rows(row_start, row_end, width, height, samples_per_pixel, max_depth, counters)


def get_linear_image() -> npt.NDArray[np.float32]:
    """Get the rendered linear colours as a (height, width, 3) float32 array.

    Row 0 is the top scanline.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = np.zeros((height, width, 3), dtype=np.float32)
    _copy_image(width, height, image)
    return image


def to_rgb8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Tone map linear colours to 8-bit RGB.

    Each channel is clamped to [0, 0.999], gamma corrected with a square
    root and scaled by 256, so that every value lands in 0..255.
    """
    clamped = np.clip(np.asarray(image, dtype=np.float64), 0.0, 0.999)
    return (np.sqrt(clamped) * 256.0).astype(np.uint8)
