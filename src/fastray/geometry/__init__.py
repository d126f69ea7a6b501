"""Geometry module for bounding volumes and shape primitives.

Components:
    aabb: Axis-aligned bounding boxes (host value + device slab test)
    sphere: Sphere primitive with ray-sphere intersection

Intersection routines are Taichi functions (@ti.func). Bounding boxes are
also built on the host while constructing bounding volume hierarchies.

Ray-primitive intersection follows the pattern:
    record = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)
"""

from .aabb import AABB, hit_aabb, surrounding_box_of
from .sphere import HitRecord, Sphere, face_normal, hit_sphere, sphere_bounding_box

__all__ = [
    "AABB",
    "hit_aabb",
    "surrounding_box_of",
    "Sphere",
    "HitRecord",
    "face_normal",
    "hit_sphere",
    "sphere_bounding_box",
]
