"""Scene module for shape trees, materials bookkeeping and ready-made scenes.

This module handles scene representation and ray-scene queries:

Components:
    shapes: Host-side shape tree (sphere leaves, lists, BVH nodes)
    bvh: Bounding volume hierarchy construction
    world: Device arena for the shape tree and closest-hit traversal
    manager: Unified scene manager coordinating materials and the world
    scenes: Default and random-spheres scenes

Scene data is organized for efficient kernel access:
    - Structure-of-Arrays layout for sphere data
    - Tree nodes addressed by index in a flat arena
    - Contiguous material ID arrays
"""

from .bvh import build_bvh, bvh_depth

# Scene manager for coordinating the world and materials
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneManager,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .scenes import create_default_scene, create_random_scene
from .shapes import BVHNode, Shape, ShapeList, SphereShape

# Device arena and traversal
from .world import (
    MAX_LIST_ITEMS,
    MAX_NODES,
    MAX_SPHERES,
    MAX_STACK_DEPTH,
    NodeKind,
    SceneHitRecord,
    WorldInfo,
    clear_world,
    get_node_count,
    get_sphere_count,
    intersect_world,
    upload_world,
)

__all__ = [
    # Shape tree
    "Shape",
    "SphereShape",
    "ShapeList",
    "BVHNode",
    "build_bvh",
    "bvh_depth",
    # World arena
    "SceneHitRecord",
    "NodeKind",
    "WorldInfo",
    "upload_world",
    "clear_world",
    "get_sphere_count",
    "get_node_count",
    "intersect_world",
    "MAX_SPHERES",
    "MAX_NODES",
    "MAX_LIST_ITEMS",
    "MAX_STACK_DEPTH",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Ready-made scenes
    "create_default_scene",
    "create_random_scene",
]
