"""Sphere primitive with closed-form ray-sphere intersection.

This module provides a Sphere dataclass, the HitRecord produced by primitive
intersection, and the intersection routine itself. Roots are tested nearest
first, so a ray starting outside the sphere reports the entry point and a ray
starting inside reports the exit point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fastray.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from fastray.geometry.aabb import AABB

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The unit surface normal at the intersection point, flipped so
            that it always opposes the incoming ray.
            Only valid if hit == 1.
        front_face: Whether the ray hit the outside (1) or inside (0) of the
            surface. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a geometric normal against the incoming ray.

    Args:
        ray_direction: The direction of the incoming ray.
        outward_normal: The unit normal pointing out of the surface.

    Returns:
        A tuple of (normal, front_face) where front_face is 1 when the ray
        approaches from outside.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray_direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return normal, front_face


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection over the interval [t_min, t_max).

    Solves |origin + t * direction - center|^2 = radius^2 with the half-b
    form of the quadratic:

        a = dot(direction, direction)
        h = dot(oc, direction)          (oc = origin - center)
        c = dot(oc, oc) - radius^2
        discriminant = h^2 - a*c

    A non-positive discriminant is a miss. Otherwise the near root
    (-h - sqrt(d)) / a is tried before the far root (-h + sqrt(d)) / a and
    the first one inside the interval is reported.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Smallest accepted t (inclusive, avoids self-intersection).
        t_max: Largest accepted t (exclusive, the closest hit found so far).

    Returns:
        A HitRecord containing intersection information. Check hit field
        to determine if intersection occurred.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-h - sqrt_d) / a
        valid = (t >= t_min) and (t < t_max)
        if not valid:
            t = (-h + sqrt_d) / a
            valid = (t >= t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            outward_normal = (hit_point - sphere.center) / sphere.radius
            hit_normal, is_front_face = face_normal(ray_direction, outward_normal)

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
    )


def sphere_bounding_box(center: tuple[float, float, float], radius: float) -> AABB:
    """Bounding box of a sphere: center -/+ radius on every axis."""
    return AABB(
        tuple(c - radius for c in center),
        tuple(c + radius for c in center),
    )
