"""Axis-aligned bounding boxes.

The host-side ``AABB`` value is used while building bounding volume
hierarchies; the device-side ``hit_aabb`` slab test runs during traversal
against box corners stored in Taichi fields.

Example:
    >>> from fastray.geometry.aabb import AABB
    >>> a = AABB((0.0, 0.0, 0.0), (1.0, 1.0, 1.0))
    >>> b = AABB((-1.0, 0.5, 0.0), (0.5, 2.0, 0.5))
    >>> a.surrounding_box(b)
    AABB(minimum=(-1.0, 0.0, 0.0), maximum=(1.0, 2.0, 1.0))
"""

from collections.abc import Iterable
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@dataclass(frozen=True)
class AABB:
    """An axis-aligned box given by its minimum and maximum corners.

    Attributes:
        minimum: The corner with the smallest coordinates (x, y, z).
        maximum: The corner with the largest coordinates (x, y, z).
    """

    minimum: tuple[float, float, float]
    maximum: tuple[float, float, float]

    def __post_init__(self) -> None:
        minimum = tuple(float(c) for c in self.minimum)
        maximum = tuple(float(c) for c in self.maximum)
        if len(minimum) != 3 or len(maximum) != 3:
            raise ValueError("AABB corners must have exactly 3 components")
        for axis in range(3):
            if minimum[axis] > maximum[axis]:
                raise ValueError(
                    f"AABB minimum {minimum} exceeds maximum {maximum} on axis {axis}"
                )
        object.__setattr__(self, "minimum", minimum)
        object.__setattr__(self, "maximum", maximum)

    def surrounding_box(self, other: "AABB") -> "AABB":
        """Return the smallest box enclosing both boxes."""
        return AABB(
            tuple(min(a, b) for a, b in zip(self.minimum, other.minimum)),
            tuple(max(a, b) for a, b in zip(self.maximum, other.maximum)),
        )

    def contains(self, other: "AABB") -> bool:
        """Check whether ``other`` lies entirely inside this box."""
        return all(
            self.minimum[axis] <= other.minimum[axis]
            and other.maximum[axis] <= self.maximum[axis]
            for axis in range(3)
        )

    def axis_min(self, axis: int) -> float:
        """Minimum coordinate along an axis (0 = x, 1 = y, 2 = z)."""
        return self.minimum[axis]


def surrounding_box_of(boxes: Iterable[AABB | None]) -> AABB | None:
    """Fold a sequence of boxes into one enclosing box.

    Returns None for an empty sequence, or when any element is None (a
    composite containing an unbounded child has no bound).
    """
    result = None
    for index, box in enumerate(boxes):
        if box is None:
            return None
        result = box if index == 0 else result.surrounding_box(box)
    return result


@ti.func
def hit_aabb(
    ray_origin: vec3,
    ray_direction: vec3,
    box_min: vec3,
    box_max: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Slab test of a ray against a box over the interval [t_min, t_max).

    For each axis the entry/exit distances are computed from the inverse
    direction component and swapped when it is negative. A zero direction
    component divides to a signed infinity, which the min/max logic handles
    without a special case.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        box_min: Minimum corner of the box.
        box_max: Maximum corner of the box.
        t_min: Start of the parametric interval.
        t_max: End of the parametric interval.

    Returns:
        1 if the interval stays non-empty after all three slabs, 0 otherwise.
    """
    lo = t_min
    hi = t_max
    inside = 1
    for a in ti.static(range(3)):
        if inside == 1:
            inv_d = 1.0 / ray_direction[a]
            t0 = (box_min[a] - ray_origin[a]) * inv_d
            t1 = (box_max[a] - ray_origin[a]) * inv_d
            if inv_d < 0.0:
                temp = t0
                t0 = t1
                t1 = temp
            lo = tm.max(lo, t0)
            hi = tm.min(hi, t1)
            if hi <= lo:
                inside = 0
    return inside
