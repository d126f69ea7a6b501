"""Pinhole camera model for perspective projection.

A pinhole camera has no lens: every primary ray starts at the eye point, so
the whole scene is in focus. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios

Example:
    >>> from fastray.camera.pinhole import PinholeCamera
    >>> camera = PinholeCamera(
    ...     lookfrom=(0.0, 0.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=60.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> camera.viewport().lens_radius
    0.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from fastray.camera.viewport import (
    CameraViewport,
    make_viewport,
    orthonormal_basis,
    validate_view,
)


@dataclass(frozen=True)
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float

    def __post_init__(self) -> None:
        validate_view(self.vfov, self.aspect_ratio)
        orthonormal_basis(self.lookfrom, self.lookat, self.vup)

    @classmethod
    def from_viewport(
        cls,
        viewport_height: float = 2.0,
        aspect_ratio: float = 2.0,
        focal_length: float = 1.0,
        origin: tuple[float, float, float] = (0.0, 0.0, 0.0),
    ) -> PinholeCamera:
        """Axis-aligned camera looking down -z with a given image plane.

        With the defaults the image plane spans x in [-2, 2] and y in [-1, 1]
        at z = -1.
        """
        if not viewport_height > 0.0:
            raise ValueError(f"Viewport height must be positive, got {viewport_height}")
        if not focal_length > 0.0:
            raise ValueError(f"Focal length must be positive, got {focal_length}")
        vfov = math.degrees(2.0 * math.atan(viewport_height / (2.0 * focal_length)))
        lookat = (origin[0], origin[1], origin[2] - focal_length)
        return cls(
            lookfrom=tuple(origin),
            lookat=lookat,
            vup=(0.0, 1.0, 0.0),
            vfov=vfov,
            aspect_ratio=aspect_ratio,
        )

    def viewport(self) -> CameraViewport:
        """Reduce this camera to its image plane."""
        return make_viewport(self.lookfrom, self.lookat, self.vup, self.vfov, self.aspect_ratio)
