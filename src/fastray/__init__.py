"""Taichi-based Monte-Carlo path tracer.

This package renders scenes of spheres with a CPU-parallel path tracer, with
support for:
- Bounding volume hierarchies over unordered primitives
- Lambertian, metal and dielectric materials
- Pinhole and thin-lens (depth of field) cameras
- Scanline-parallel rendering with progress telemetry

Subpackages:
    core: Ray utilities, the path tracing integrator and the renderer
    geometry: Bounding boxes and the sphere primitive
    materials: Scattering models
    scene: Shape trees, BVH construction, material registry and demo scenes
    camera: Camera models with ray generation
    preview: Image export utilities

Modules that declare Taichi fields must be imported after
``fastray.config.init_runtime()`` (or ``ti.init()``) has run, so this package
does not import them eagerly.
"""

__version__ = "0.1.0"
