"""Thin-lens camera model with depth of field.

Primary rays start at a random point on a disk of radius ``aperture / 2``
around the eye point and pass through the image plane placed at
``focus_dist``. Points at that distance are sharp; everything else blurs in
proportion to the aperture.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastray.camera.viewport import (
    CameraViewport,
    make_viewport,
    orthonormal_basis,
    validate_view,
)


@dataclass(frozen=True)
class ThinLensCamera:
    """Configuration for a thin-lens camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation.
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter, strictly positive.
        focus_dist: Distance from the lens to the plane in focus, strictly
            positive.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float
    focus_dist: float

    def __post_init__(self) -> None:
        validate_view(self.vfov, self.aspect_ratio)
        orthonormal_basis(self.lookfrom, self.lookat, self.vup)
        if not self.aperture > 0.0:
            raise ValueError(f"Aperture must be positive, got {self.aperture}")
        if not self.focus_dist > 0.0:
            raise ValueError(f"Focus distance must be positive, got {self.focus_dist}")

    @property
    def lens_radius(self) -> float:
        return self.aperture / 2.0

    def viewport(self) -> CameraViewport:
        """Reduce this camera to its image plane at the focus distance."""
        return make_viewport(
            self.lookfrom,
            self.lookat,
            self.vup,
            self.vfov,
            self.aspect_ratio,
            focus_dist=self.focus_dist,
            lens_radius=self.lens_radius,
        )
