"""Viewport geometry shared by the camera models.

Every camera is reduced on the host to a ``CameraViewport``: the ray origin,
the image plane spanned by ``horizontal`` and ``vertical`` from
``lower_left``, the orthonormal basis (u, v, w) and a lens radius (0 for a
pinhole). Ray generation on the device only ever reads this reduced form.

The basis is built from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

Vec3 = tuple[float, float, float]


@dataclass(frozen=True)
class CameraViewport:
    """Image plane and lens of a camera, in world space.

    Attributes:
        origin: Center of the lens (the eye point).
        lower_left: Lower-left corner of the image plane.
        horizontal: Full-width edge of the image plane.
        vertical: Full-height edge of the image plane.
        u: Right direction.
        v: Up direction.
        w: Backward direction (opposite view direction).
        lens_radius: Radius of the thin lens, 0 for a pinhole.
    """

    origin: Vec3
    lower_left: Vec3
    horizontal: Vec3
    vertical: Vec3
    u: Vec3 = (1.0, 0.0, 0.0)
    v: Vec3 = (0.0, 1.0, 0.0)
    w: Vec3 = (0.0, 0.0, 1.0)
    lens_radius: float = 0.0

    def __post_init__(self) -> None:
        if self.lens_radius < 0.0:
            raise ValueError(f"Lens radius must be non-negative, got {self.lens_radius}")
        # The image plane must span an area
        normal = np.cross(_as_vec3("horizontal", self.horizontal), _as_vec3("vertical", self.vertical))
        if np.linalg.norm(normal) == 0.0:
            raise ValueError(
                f"Viewport edges {tuple(self.horizontal)} and {tuple(self.vertical)} "
                "do not span an image plane"
            )


def _as_vec3(name: str, value) -> np.ndarray:
    array = np.asarray(value, dtype=np.float64)
    if array.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got {value}")
    return array


def orthonormal_basis(lookfrom, lookat, vup) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Build the camera basis (u, v, w) from look-at parameters.

    Raises:
        ValueError: If lookfrom equals lookat or vup is parallel to the view
            direction.
    """
    w = _as_vec3("lookfrom", lookfrom) - _as_vec3("lookat", lookat)
    w_norm = np.linalg.norm(w)
    if w_norm == 0.0:
        raise ValueError(f"lookfrom and lookat must differ, both are {tuple(lookfrom)}")
    w = w / w_norm

    u = np.cross(_as_vec3("vup", vup), w)
    u_norm = np.linalg.norm(u)
    if u_norm < 1e-12:
        raise ValueError(f"vup {tuple(vup)} is parallel to the view direction")
    u = u / u_norm

    v = np.cross(w, u)
    return u, v, w


def validate_view(vfov: float, aspect_ratio: float) -> None:
    """Check field of view and aspect ratio.

    Raises:
        ValueError: If vfov is outside (0, 180) or aspect_ratio is not positive.
    """
    if not 0.0 < vfov < 180.0:
        raise ValueError(f"Vertical field of view must be in (0, 180) degrees, got {vfov}")
    if not aspect_ratio > 0.0:
        raise ValueError(f"Aspect ratio must be positive, got {aspect_ratio}")


def viewport_size(vfov: float, aspect_ratio: float) -> tuple[float, float]:
    """Width and height of the image plane at unit distance."""
    viewport_height = 2.0 * math.tan(math.radians(vfov) / 2.0)
    return aspect_ratio * viewport_height, viewport_height


def _tuple(array: np.ndarray) -> Vec3:
    return (float(array[0]), float(array[1]), float(array[2]))


def make_viewport(
    lookfrom,
    lookat,
    vup,
    vfov: float,
    aspect_ratio: float,
    focus_dist: float = 1.0,
    lens_radius: float = 0.0,
) -> CameraViewport:
    """Reduce look-at parameters to a CameraViewport.

    The image plane sits ``focus_dist`` in front of the origin, so that
    points on it are in perfect focus for a thin lens.
    """
    u, v, w = orthonormal_basis(lookfrom, lookat, vup)
    width, height = viewport_size(vfov, aspect_ratio)

    origin = np.asarray(lookfrom, dtype=np.float64)
    horizontal = focus_dist * width * u
    vertical = focus_dist * height * v
    lower_left = origin - horizontal / 2.0 - vertical / 2.0 - focus_dist * w

    return CameraViewport(
        origin=_tuple(origin),
        lower_left=_tuple(lower_left),
        horizontal=_tuple(horizontal),
        vertical=_tuple(vertical),
        u=_tuple(u),
        v=_tuple(v),
        w=_tuple(w),
        lens_radius=lens_radius,
    )
