"""Host-side shape tree: sphere leaves, unordered lists and BVH nodes.

A scene is described as a tree of ``Shape`` values built once on the host.
Every node answers ``bounding_box()``; intersection runs on the device after
the tree has been uploaded with ``fastray.scene.world.upload_world``.

Nodes are immutable after construction and may be shared between parents
(a single-entity BVH aliases its only child on both sides).

Example:
    >>> from fastray.scene.shapes import ShapeList, SphereShape
    >>> world = ShapeList([
    ...     SphereShape((0.0, 0.0, -1.0), 0.5, material_id=0),
    ...     SphereShape((0.0, -100.5, -1.0), 100.0, material_id=1),
    ... ])
    >>> world.bounding_box().minimum
    (-100.0, -200.5, -101.0)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from fastray.geometry.aabb import AABB, surrounding_box_of
from fastray.geometry.sphere import sphere_bounding_box


@dataclass(frozen=True, eq=False)
class SphereShape:
    """A sphere leaf.

    Attributes:
        center: The center of the sphere (x, y, z).
        radius: The radius of the sphere, strictly positive.
        material_id: The unified material ID from the SceneManager.
    """

    center: tuple[float, float, float]
    radius: float
    material_id: int

    def __post_init__(self) -> None:
        center = tuple(float(c) for c in self.center)
        if len(center) != 3:
            raise ValueError(f"Sphere center must have 3 components, got {self.center}")
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        object.__setattr__(self, "center", center)
        object.__setattr__(self, "radius", float(self.radius))

    def bounding_box(self) -> AABB:
        return sphere_bounding_box(self.center, self.radius)


@dataclass(frozen=True, eq=False)
class ShapeList:
    """An ordered list of shapes tested one after another.

    Used for flat scenes without acceleration. An empty list has no bounding
    box and never reports a hit. Any iterable of shapes is accepted and kept
    as a tuple.
    """

    entities: tuple[Shape, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entities", tuple(self.entities))

    def bounding_box(self) -> AABB | None:
        return surrounding_box_of(entity.bounding_box() for entity in self.entities)

    def __len__(self) -> int:
        return len(self.entities)


@dataclass(frozen=True, eq=False)
class BVHNode:
    """A binary bounding volume hierarchy node.

    Build instances with ``fastray.scene.bvh.build_bvh``.

    Attributes:
        left: The child tested first.
        right: The child tested second, against the narrowed interval.
        box: The box enclosing both children.
    """

    left: Shape
    right: Shape
    box: AABB

    def bounding_box(self) -> AABB:
        return self.box


Shape = Union[SphereShape, ShapeList, BVHNode]
