"""Primary ray generation on the device.

The active camera is stored in Taichi fields as its reduced viewport. Ray
generation uses normalized image coordinates:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image

Pixel rows are numbered from the top: row 0 is the top scanline.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fastray.camera import PinholeCamera, get_ray, setup_camera
    >>> setup_camera(PinholeCamera.from_viewport())
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import logging
from typing import Union

import taichi as ti
import taichi.math as tm

from fastray.camera.pinhole import PinholeCamera
from fastray.camera.thin_lens import ThinLensCamera
from fastray.camera.viewport import CameraViewport
from fastray.core.ray import Ray, make_ray, random_in_unit_disk, vec3

logger = logging.getLogger(__name__)

Camera = Union[PinholeCamera, ThinLensCamera, CameraViewport]

# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (lens center)
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport vectors for ray computation
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())  # Lower-left of viewport

_lens_radius = ti.field(dtype=ti.f32, shape=())

# Set to 1 once a camera has been uploaded
_camera_ready = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (host side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: Camera) -> CameraViewport:
    """Upload a camera for ray generation.

    Args:
        camera: A PinholeCamera, a ThinLensCamera, or an already reduced
            CameraViewport.

    Returns:
        The uploaded viewport.
    """
    viewport = camera if isinstance(camera, CameraViewport) else camera.viewport()

    _camera_origin[None] = list(viewport.origin)
    _camera_u[None] = list(viewport.u)
    _camera_v[None] = list(viewport.v)
    _camera_w[None] = list(viewport.w)
    _viewport_horizontal[None] = list(viewport.horizontal)
    _viewport_vertical[None] = list(viewport.vertical)
    _lower_left_corner[None] = list(viewport.lower_left)
    _lens_radius[None] = viewport.lens_radius
    _camera_ready[None] = 1

    logger.debug("Camera set up: %s", viewport)
    return viewport


def clear_camera() -> None:
    """Forget the current camera."""
    _camera_ready[None] = 0


def is_camera_ready() -> bool:
    """Whether setup_camera has been called since the last clear."""
    return bool(_camera_ready[None])


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    For a thin lens the origin is displaced by a random point on the lens
    disk; the ray still passes through the same point of the image plane.

    Args:
        s: Horizontal coordinate in [0, 1] (left to right).
        t: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray with a normalized direction.
    """
    offset = vec3(0.0, 0.0, 0.0)
    if _lens_radius[None] > 0.0:
        rd = _lens_radius[None] * random_in_unit_disk()
        offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    target = _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]

    return make_ray(origin, tm.normalize(target - origin))


@ti.func
def get_ray_jittered(pixel_i: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a ray with uniform sub-pixel jitter for anti-aliasing.

    Args:
        pixel_i: Pixel column (0 = left).
        row: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
    """
    jitter_s = ti.random(ti.f32)
    jitter_t = ti.random(ti.f32)

    s = (ti.cast(pixel_i, ti.f32) + jitter_s) / ti.cast(width, ti.f32)
    t = (ti.cast(height - 1 - row, ti.f32) + jitter_t) / ti.cast(height, ti.f32)

    return get_ray(s, t)


@ti.func
def get_camera_origin() -> vec3:
    """Get the lens center in world space."""
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        and lens_radius.
    """

    def _read(f) -> tuple[float, float, float]:
        vec = f[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "origin": _read(_camera_origin),
        "u": _read(_camera_u),
        "v": _read(_camera_v),
        "w": _read(_camera_w),
        "horizontal": _read(_viewport_horizontal),
        "vertical": _read(_viewport_vertical),
        "lower_left": _read(_lower_left_corner),
        "lens_radius": float(_lens_radius[None]),
    }
