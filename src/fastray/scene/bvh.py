"""Bounding volume hierarchy construction.

The hierarchy is built top-down by median split: at each level a split axis
is chosen uniformly at random, the entities are ordered by the minimum
coordinate of their bounding boxes on that axis and the sequence is cut at its
midpoint. The result is depth-balanced (about log2(n) levels).

Because the split axis is random, two builds over the same input generally
produce different tree shapes. Compare rendered output, not tree structure.

Example:
    >>> import numpy as np
    >>> from fastray.scene.bvh import build_bvh
    >>> from fastray.scene.shapes import SphereShape
    >>> spheres = [SphereShape((x, 0.0, -3.0), 0.4, 0) for x in range(8)]
    >>> root = build_bvh(spheres, np.random.default_rng(7))
    >>> root.bounding_box().maximum
    (7.4, 0.4, -2.6)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from fastray.geometry.aabb import AABB
from fastray.scene.shapes import BVHNode, Shape

logger = logging.getLogger(__name__)


def _box_of(entity: Shape) -> AABB:
    box = entity.bounding_box()
    if box is None:
        raise ValueError(
            f"Cannot place {type(entity).__name__} without a bounding box in a BVH"
        )
    return box


def _build(entities: list[Shape], rng: np.random.Generator) -> BVHNode:
    axis = int(rng.integers(3))

    if len(entities) == 1:
        left = right = entities[0]
    elif len(entities) == 2:
        first, second = entities
        if _box_of(first).axis_min(axis) < _box_of(second).axis_min(axis):
            left, right = first, second
        else:
            left, right = second, first
    else:
        ordered = sorted(entities, key=lambda entity: _box_of(entity).axis_min(axis))
        mid = len(ordered) // 2
        left = _build(ordered[:mid], rng)
        right = _build(ordered[mid:], rng)

    return BVHNode(
        left=left,
        right=right,
        box=_box_of(left).surrounding_box(_box_of(right)),
    )


def build_bvh(entities: Sequence[Shape], rng: np.random.Generator | None = None) -> BVHNode:
    """Build a BVH over one or more shapes.

    Args:
        entities: The shapes to partition. Each must have a bounding box.
            The sequence itself is not modified.
        rng: Source of the random split axes. Defaults to a fresh
            ``np.random.default_rng()``.

    Returns:
        The root BVHNode.

    Raises:
        ValueError: If ``entities`` is empty or contains a shape without a
            bounding box (such as an empty ShapeList).
    """
    if len(entities) == 0:
        raise ValueError("Cannot build a BVH from an empty set of shapes")
    if rng is None:
        rng = np.random.default_rng()

    root = _build(list(entities), rng)
    logger.debug("Built BVH over %d shapes, bounds %s", len(entities), root.box)
    return root


def bvh_depth(node: Shape) -> int:
    """Number of BVH levels on the longest root-to-leaf path."""
    if isinstance(node, BVHNode):
        return 1 + max(bvh_depth(node.left), bvh_depth(node.right))
    return 0
