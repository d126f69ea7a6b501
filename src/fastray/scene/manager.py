"""Unified scene manager for coordinating the shape tree and materials.

This module provides a high-level scene management API that coordinates the
material registries with the shape tree. It tracks which material type
(Lambertian, Metal, Dielectric) each material ID corresponds to, enabling
material dispatch in the path tracer.

The SceneManager maintains:
- A unified material_id space across all material types
- Mapping from material_id to (material_type, type_local_index)
- Construction helpers for sphere leaves and BVHs
- Upload of the finished shape tree to the device arena

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from fastray.scene.manager import SceneManager
    >>> from fastray.scene.shapes import ShapeList
    >>> scene = SceneManager()
    >>> red = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.set_world(ShapeList([scene.sphere((0, 0, -1), 0.5, red)]))
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import numpy as np
import taichi as ti

from fastray.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from fastray.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from fastray.materials.metal import (
    add_metal_material,
    clear_metal_materials,
)
from fastray.scene.bvh import build_bvh
from fastray.scene.shapes import BVHNode, Shape, ShapeList, SphereShape
from fastray.scene.world import WorldInfo, clear_world, upload_world

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 3072  # 1024 per type * 3 types

# Taichi fields for device-side material type lookup
# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    This is used to look up material properties in the type-specific
    material arrays (e.g., lambertian_albedos[type_index]).

    Returns:
        The index into the type-specific material array.
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material (Lambertian, Metal, Dielectric).
        type_index: The index within the type-specific material array.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


def _material_ids_in(root: Shape) -> set[int]:
    """Collect the material IDs referenced by a shape tree."""
    found: set[int] = set()
    seen: set[int] = set()
    pending: list[Shape] = [root]
    while pending:
        shape = pending.pop()
        if id(shape) in seen:
            continue
        seen.add(id(shape))
        if isinstance(shape, SphereShape):
            found.add(shape.material_id)
        elif isinstance(shape, ShapeList):
            pending.extend(shape.entities)
        elif isinstance(shape, BVHNode):
            pending.append(shape.left)
            pending.append(shape.right)
    return found


class SceneManager:
    """Unified scene manager coordinating the shape tree and materials.

    The SceneManager provides a high-level API for building scenes with
    automatic material tracking. It maintains a unified material_id space
    that maps to type-specific material registries, enabling the path tracer
    to dispatch to the correct scattering function.

    Only one world is live at a time: ``set_world`` replaces the device arena.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        world: The host shape tree last passed to ``set_world``.
        world_info: Summary of the uploaded arena, or None before upload.

    Example:
        >>> scene = SceneManager()
        >>> red_diffuse = scene.add_lambertian_material(albedo=(0.8, 0.1, 0.1))
        >>> gold_metal = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> glass = scene.add_dielectric_material(refractive_index=1.5)
        >>> spheres = [
        ...     scene.sphere((0, 0, -1), 0.5, red_diffuse),
        ...     scene.sphere((1, 0, -1), 0.5, gold_metal),
        ...     scene.sphere((-1, 0, -1), 0.5, glass),
        ... ]
        >>> scene.set_world(scene.build_bvh(spheres, seed=7))
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.world: Shape | None = None
        self.world_info: WorldInfo | None = None
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        # Clear the device arena
        clear_world()
        # Clear material registries
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        # Clear material tracking
        _clear_material_tracking()
        # Clear local tracking
        self.materials.clear()
        self.world = None
        self.world_info = None

    def clear(self) -> None:
        """Clear the entire scene (shape tree and materials).

        Resets all Taichi fields and internal tracking structures.
        """
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register(self, material_type: MaterialType, type_index: int, params: dict[str, Any]) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Material %d: %s %s", material_id, material_type.name, params)
        return material_id

    def add_lambertian_material(
        self,
        albedo: tuple[float, float, float],
    ) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B) tuple.
                Each component must be in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        return self._register(MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)})

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B) tuple.
                Each component must be in [0, 1].
            fuzz: The reflection blur in [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
            ValueError: If fuzz is outside [0, 1].
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._register(
            MaterialType.METAL, type_index, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_dielectric_material(
        self,
        refractive_index: float = 1.5,
    ) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            refractive_index: Index of refraction. Default is 1.5 (typical glass).
                Common values: Air=1.0, Water=1.33, Glass=1.5, Diamond=2.4

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the refractive index is not positive.
        """
        type_index = add_dielectric_material(refractive_index)
        return self._register(
            MaterialType.DIELECTRIC, type_index, {"refractive_index": refractive_index}
        )

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the material type for a given material ID (Python side).

        For device-side lookup, use the get_material_type() Taichi function.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    # =========================================================================
    # Shape Tree
    # =========================================================================

    def sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> SphereShape:
        """Create a sphere leaf bound to a registered material.

        Raises:
            ValueError: If material_id is invalid or the radius is not positive.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")
        return SphereShape(center=center, radius=radius, material_id=material_id)

    def build_bvh(self, shapes: Sequence[Shape], seed: int | None = None) -> BVHNode:
        """Build a BVH over ``shapes`` with split axes drawn from ``seed``.

        Raises:
            ValueError: If ``shapes`` is empty.
        """
        return build_bvh(shapes, np.random.default_rng(seed))

    def set_world(self, root: Shape | None) -> WorldInfo:
        """Upload a shape tree as the world to render.

        Args:
            root: The root of the shape tree, or None for an empty world.

        Returns:
            A WorldInfo summarizing the uploaded arena.

        Raises:
            ValueError: If the tree references an unregistered material or
                does not fit the arena.
        """
        if root is not None:
            unknown = sorted(
                m for m in _material_ids_in(root) if self.get_material_info(m) is None
            )
            if unknown:
                raise ValueError(f"Shape tree references unknown material IDs: {unknown}")

        info = upload_world(root)
        self.world = root
        self.world_info = info
        logger.info(
            "World set: %d spheres, %d nodes, %d materials",
            info.sphere_count,
            info.node_count,
            self.get_material_count(),
        )
        return info

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the uploaded world."""
        return 0 if self.world_info is None else self.world_info.sphere_count

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
