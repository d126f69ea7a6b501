"""Materials module for surface scattering models.

This module implements the three surface models supported by the renderer:

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection blurred by a fuzz parameter
    dielectric: Glass-like materials with refraction and Schlick reflectance

Each material provides a ``scatter_*`` Taichi function that, given the
incoming ray and surface data, returns ``(direction, attenuation,
did_scatter)``. A ray that does not scatter is absorbed.

Material parameters live in per-type Taichi fields. Registration functions
(``add_*_material``) validate their arguments on the host before writing.
"""

# Lambertian (ideal diffuse) material
from .lambertian import (
    MAX_LAMBERTIAN_MATERIALS,
    add_lambertian_material,
    diffuse_direction,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    validate_albedo,
)

# Metal (specular reflective) material
from .metal import (
    MAX_METAL_MATERIALS,
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
)

# Dielectric (glass/water) material
from .dielectric import (
    MAX_DIELECTRIC_MATERIALS,
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_index,
    get_dielectric_material_count,
    refraction_ratio,
    scatter_dielectric,
    will_reflect,
)

__all__ = [
    # Lambertian
    "MAX_LAMBERTIAN_MATERIALS",
    "scatter_lambertian",
    "diffuse_direction",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    "validate_albedo",
    # Metal
    "MAX_METAL_MATERIALS",
    "scatter_metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "MAX_DIELECTRIC_MATERIALS",
    "scatter_dielectric",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_index",
    "refraction_ratio",
    "will_reflect",
]
