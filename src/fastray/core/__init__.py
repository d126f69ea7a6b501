"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray data structure, vector helpers and rejection samplers
    integrator: Path tracing estimator, sky model, tone mapping and the
        scanline render kernel
    renderer: Batched scanline renderer with progress callbacks
    stats: Shared telemetry counters (rays traced, scanlines completed)

All compute-intensive operations are Taichi kernels running on the CPU
backend's worker pool.
"""

from .ray import (
    Ray,
    length_squared,
    make_ray,
    near_zero,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    reflectance,
    refract,
    vec3,
)

# Note: integrator and renderer are NOT imported here; they pull in modules
# that declare Taichi fields. Import them directly from fastray.core.integrator
# or fastray.core.renderer once Taichi has been initialised.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "near_zero",
    "reflect",
    "refract",
    "reflectance",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
