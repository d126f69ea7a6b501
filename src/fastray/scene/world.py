"""Device-side scene arena and closest-hit traversal.

The host shape tree (``fastray.scene.shapes``) is flattened into Taichi fields
so that kernels can walk it:

- spheres are stored Structure-of-Arrays (center, radius, material ID);
- every tree node gets an arena slot with a kind tag, two integer payloads
  and its bounding box:

    ======  =================  ==================
    kind    first              second
    ======  =================  ==================
    SPHERE  sphere index       unused
    LIST    first list item    number of items
    BVH     left node index    right node index
    ======  =================  ==================

- list children are node indices stored contiguously in ``list_items``.

Shared host nodes are uploaded once and referenced from every parent.

Traversal keeps an explicit stack of (node, cursor) pairs and a running
``closest_t``. Every candidate is tested against [t_min, closest_t), so a
list narrows the interval after each child and a BVH node narrows it between
its left and right subtrees. The nearest hit therefore wins regardless of the
order in which children are visited.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fastray.scene.shapes import ShapeList, SphereShape
    >>> from fastray.scene.world import intersect_world, upload_world
    >>> upload_world(ShapeList([SphereShape((0, 0, -1), 0.5, material_id=0)]))
    >>> # Use intersect_world within a Taichi kernel
"""

import logging
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from fastray.geometry.aabb import hit_aabb
from fastray.geometry.sphere import HitRecord, Sphere, hit_sphere
from fastray.scene.shapes import BVHNode, Shape, ShapeList, SphereShape

logger = logging.getLogger(__name__)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class NodeKind(IntEnum):
    """Tag of an arena node."""

    SPHERE = 0
    LIST = 1
    BVH = 2


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Extends the basic HitRecord with material_id for scene-level queries.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the surface.
        normal: The unit surface normal, opposing the incoming ray.
        front_face: Whether the ray hit the outside (1) or inside (0).
        material_id: The material ID of the hit primitive, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@dataclass(frozen=True)
class WorldInfo:
    """Summary of an uploaded world.

    Attributes:
        sphere_count: Number of distinct spheres in the arena.
        node_count: Number of arena nodes (leaves, lists and BVH nodes).
        list_item_count: Total number of list children.
        stack_demand: Deepest traversal stack the tree needs.
    """

    sphere_count: int
    node_count: int
    list_item_count: int
    stack_demand: int


# Arena capacities
MAX_SPHERES = 4096
MAX_NODES = 16384
MAX_LIST_ITEMS = 16384

# Per-ray traversal stack size
MAX_STACK_DEPTH = 32

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Node arena
node_kinds = ti.field(dtype=ti.i32, shape=MAX_NODES)
node_first = ti.field(dtype=ti.i32, shape=MAX_NODES)
node_second = ti.field(dtype=ti.i32, shape=MAX_NODES)
node_box_min = ti.Vector.field(3, dtype=ti.f32, shape=MAX_NODES)
node_box_max = ti.Vector.field(3, dtype=ti.f32, shape=MAX_NODES)
num_nodes = ti.field(dtype=ti.i32, shape=())

# Children of list nodes
list_items = ti.field(dtype=ti.i32, shape=MAX_LIST_ITEMS)

# Index of the root node, only meaningful while num_nodes > 0
root_node = ti.field(dtype=ti.i32, shape=())


def clear_world() -> None:
    """Remove the current world. Every ray misses until the next upload."""
    num_spheres[None] = 0
    num_nodes[None] = 0
    root_node[None] = 0


class _Flattener:
    """Assigns arena slots to host shapes, depth first, children before parents."""

    def __init__(self) -> None:
        self.slots: dict[int, int] = {}
        self.kinds: list[int] = []
        self.first: list[int] = []
        self.second: list[int] = []
        self.box_min: list[tuple[float, float, float]] = []
        self.box_max: list[tuple[float, float, float]] = []
        self.items: list[int] = []
        self.centers: list[tuple[float, float, float]] = []
        self.radii: list[float] = []
        self.material_ids: list[int] = []

    def _new_node(self, kind: NodeKind, first: int, second: int, shape: Shape) -> int:
        box = shape.bounding_box()
        self.kinds.append(int(kind))
        self.first.append(first)
        self.second.append(second)
        self.box_min.append(box.minimum if box is not None else (0.0, 0.0, 0.0))
        self.box_max.append(box.maximum if box is not None else (0.0, 0.0, 0.0))
        return len(self.kinds) - 1

    def add(self, shape: Shape) -> int:
        key = id(shape)
        if key in self.slots:
            return self.slots[key]

        if isinstance(shape, SphereShape):
            sphere_index = len(self.centers)
            self.centers.append(shape.center)
            self.radii.append(shape.radius)
            self.material_ids.append(shape.material_id)
            slot = self._new_node(NodeKind.SPHERE, sphere_index, 0, shape)
        elif isinstance(shape, ShapeList):
            children = [self.add(entity) for entity in shape.entities]
            start = len(self.items)
            self.items.extend(children)
            slot = self._new_node(NodeKind.LIST, start, len(children), shape)
        elif isinstance(shape, BVHNode):
            left = self.add(shape.left)
            right = self.add(shape.right)
            slot = self._new_node(NodeKind.BVH, left, right, shape)
        else:
            raise TypeError(f"Unsupported shape type: {type(shape).__name__}")

        self.slots[key] = slot
        return slot


def stack_demand(shape: Shape, _memo: dict[int, int] | None = None) -> int:
    """Number of traversal stack entries needed to walk ``shape``.

    A BVH node keeps its right child pending while the left subtree is
    walked; a list keeps one continuation entry pending while any child but
    the last is walked.
    """
    memo = {} if _memo is None else _memo
    key = id(shape)
    if key in memo:
        return memo[key]

    if isinstance(shape, SphereShape):
        demand = 1
    elif isinstance(shape, ShapeList):
        demand = 1
        last = len(shape.entities) - 1
        for index, entity in enumerate(shape.entities):
            pending = 1 if index < last else 0
            demand = max(demand, pending + stack_demand(entity, memo))
    elif isinstance(shape, BVHNode):
        demand = max(1 + stack_demand(shape.left, memo), stack_demand(shape.right, memo))
    else:
        raise TypeError(f"Unsupported shape type: {type(shape).__name__}")

    memo[key] = demand
    return demand


def _padded(values: list, shape: tuple[int, ...], dtype) -> np.ndarray:
    array = np.zeros(shape, dtype=dtype)
    if values:
        array[: len(values)] = np.asarray(values, dtype=dtype)
    return array


def upload_world(root: Shape | None) -> WorldInfo:
    """Flatten a shape tree into the device arena and make it the world.

    Args:
        root: The root of the shape tree, or None for an empty world.

    Returns:
        A WorldInfo summarizing the uploaded arena.

    Raises:
        ValueError: If the tree exceeds an arena capacity or needs a deeper
            traversal stack than MAX_STACK_DEPTH. Nothing is written in that
            case.
        TypeError: If the tree contains something that is not a Shape.
    """
    if root is None:
        clear_world()
        return WorldInfo(sphere_count=0, node_count=0, list_item_count=0, stack_demand=0)

    flat = _Flattener()
    root_slot = flat.add(root)
    demand = stack_demand(root)

    if len(flat.centers) > MAX_SPHERES:
        raise ValueError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    if len(flat.kinds) > MAX_NODES:
        raise ValueError(f"Maximum number of scene nodes ({MAX_NODES}) exceeded")
    if len(flat.items) > MAX_LIST_ITEMS:
        raise ValueError(f"Maximum number of list items ({MAX_LIST_ITEMS}) exceeded")
    if demand > MAX_STACK_DEPTH:
        raise ValueError(
            f"Shape tree needs a traversal stack of {demand} entries, "
            f"more than the supported {MAX_STACK_DEPTH}"
        )

    sphere_centers.from_numpy(_padded(flat.centers, (MAX_SPHERES, 3), np.float32))
    sphere_radii.from_numpy(_padded(flat.radii, (MAX_SPHERES,), np.float32))
    sphere_material_ids.from_numpy(_padded(flat.material_ids, (MAX_SPHERES,), np.int32))
    node_kinds.from_numpy(_padded(flat.kinds, (MAX_NODES,), np.int32))
    node_first.from_numpy(_padded(flat.first, (MAX_NODES,), np.int32))
    node_second.from_numpy(_padded(flat.second, (MAX_NODES,), np.int32))
    node_box_min.from_numpy(_padded(flat.box_min, (MAX_NODES, 3), np.float32))
    node_box_max.from_numpy(_padded(flat.box_max, (MAX_NODES, 3), np.float32))
    list_items.from_numpy(_padded(flat.items, (MAX_LIST_ITEMS,), np.int32))

    num_spheres[None] = len(flat.centers)
    num_nodes[None] = len(flat.kinds)
    root_node[None] = root_slot

    info = WorldInfo(
        sphere_count=len(flat.centers),
        node_count=len(flat.kinds),
        list_item_count=len(flat.items),
        stack_demand=demand,
    )
    logger.debug("Uploaded world: %s", info)
    return info


def get_sphere_count() -> int:
    """Get the number of spheres in the uploaded world."""
    return int(num_spheres[None])


def get_node_count() -> int:
    """Get the number of arena nodes in the uploaded world."""
    return int(num_nodes[None])


def get_sphere_material_ids() -> list[int]:
    """Material IDs of the uploaded spheres, in arena order."""
    count = get_sphere_count()
    return [int(m) for m in sphere_material_ids.to_numpy()[:count]]


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    """Convert a HitRecord to a SceneHitRecord with material ID."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_world(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the closest hit of a ray in the uploaded world.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Smallest accepted t (inclusive).
        t_max: Largest accepted t (exclusive).

    Returns:
        A SceneHitRecord for the closest intersection in [t_min, t_max), or
        a miss record.
    """
    closest_t = t_max
    result = _make_miss_record()

    node_stack = ti.Vector.zero(ti.i32, MAX_STACK_DEPTH)
    cursor_stack = ti.Vector.zero(ti.i32, MAX_STACK_DEPTH)
    sp = 0
    if num_nodes[None] > 0:
        node_stack[0] = root_node[None]
        sp = 1

    while sp > 0:
        sp -= 1
        node = node_stack[sp]
        cursor = cursor_stack[sp]
        kind = node_kinds[node]

        if kind == int(NodeKind.SPHERE):
            s = node_first[node]
            sphere = Sphere(center=sphere_centers[s], radius=sphere_radii[s])
            rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
            if rec.hit == 1:
                closest_t = rec.t
                result = _hit_record_to_scene_hit_record(rec, sphere_material_ids[s])

        elif kind == int(NodeKind.LIST):
            count = node_second[node]
            if cursor < count:
                # Continuation for the remaining children goes underneath
                if cursor + 1 < count:
                    node_stack[sp] = node
                    cursor_stack[sp] = cursor + 1
                    sp += 1
                node_stack[sp] = list_items[node_first[node] + cursor]
                cursor_stack[sp] = 0
                sp += 1

        elif kind == int(NodeKind.BVH):
            if hit_aabb(
                ray_origin,
                ray_direction,
                node_box_min[node],
                node_box_max[node],
                t_min,
                closest_t,
            ):
                # Right is pushed first so that left is walked first
                node_stack[sp] = node_second[node]
                cursor_stack[sp] = 0
                sp += 1
                node_stack[sp] = node_first[node]
                cursor_stack[sp] = 0
                sp += 1

    return result
