"""Unit tests for BVH construction.

Tests cover:
- Empty input and entities without bounds
- Single and two entity special cases
- Enclosing boxes at every level
- Balanced depth and input immutability
"""

import numpy as np
import pytest


def _spheres(count, spacing=1.0):
    from fastray.scene.shapes import SphereShape

    return [SphereShape((i * spacing, 0.0, -3.0), 0.4, material_id=0) for i in range(count)]


def _leaves(node):
    from fastray.scene.shapes import BVHNode

    if isinstance(node, BVHNode):
        return _leaves(node.left) + _leaves(node.right)
    return [node]


def _check_boxes(node):
    """Every BVH node's box encloses both children."""
    from fastray.scene.shapes import BVHNode

    if isinstance(node, BVHNode):
        assert node.box.contains(node.left.bounding_box())
        assert node.box.contains(node.right.bounding_box())
        _check_boxes(node.left)
        _check_boxes(node.right)


class TestBuildBvh:
    """Tests for build_bvh."""

    def test_empty_input_raises(self):
        from fastray.scene.bvh import build_bvh

        with pytest.raises(ValueError):
            build_bvh([], np.random.default_rng(0))

    def test_entity_without_box_raises(self):
        from fastray.scene.bvh import build_bvh
        from fastray.scene.shapes import ShapeList

        with pytest.raises(ValueError):
            build_bvh([ShapeList(), *_spheres(2)], np.random.default_rng(0))

    def test_single_entity_aliases_both_children(self):
        from fastray.scene.bvh import build_bvh

        (sphere,) = _spheres(1)
        root = build_bvh([sphere], np.random.default_rng(0))

        assert root.left is sphere
        assert root.right is sphere
        assert root.box == sphere.bounding_box()

    @pytest.mark.parametrize("seed", range(6))
    def test_two_entities_ordered_along_axis(self, seed):
        from fastray.scene.bvh import build_bvh
        from fastray.scene.shapes import SphereShape

        a = SphereShape((1.0, 2.0, 3.0), 0.5, material_id=0)
        b = SphereShape((-1.0, -2.0, -3.0), 0.5, material_id=0)
        root = build_bvh([a, b], np.random.default_rng(seed))

        # b is smaller on every axis, whichever axis was drawn
        assert root.left is b
        assert root.right is a

    def test_root_box_encloses_everything(self):
        from fastray.geometry.aabb import surrounding_box_of
        from fastray.scene.bvh import build_bvh

        spheres = _spheres(13)
        root = build_bvh(spheres, np.random.default_rng(3))

        assert root.bounding_box() == surrounding_box_of(s.bounding_box() for s in spheres)
        _check_boxes(root)

    def test_every_entity_is_a_leaf(self):
        from fastray.scene.bvh import build_bvh

        spheres = _spheres(10)
        root = build_bvh(spheres, np.random.default_rng(5))

        leaf_ids = {id(leaf) for leaf in _leaves(root)}
        assert leaf_ids == {id(s) for s in spheres}

    def test_depth_is_logarithmic(self):
        from fastray.scene.bvh import build_bvh, bvh_depth

        root = build_bvh(_spheres(64), np.random.default_rng(1))
        assert bvh_depth(root) == 6

    def test_input_sequence_is_not_modified(self):
        from fastray.scene.bvh import build_bvh

        spheres = list(reversed(_spheres(9)))
        before = list(spheres)
        build_bvh(spheres, np.random.default_rng(2))

        assert all(a is b for a, b in zip(spheres, before))

    def test_nested_bvh_as_entity(self):
        from fastray.scene.bvh import build_bvh

        inner = build_bvh(_spheres(4), np.random.default_rng(0))
        outer = build_bvh([inner, *_spheres(2, spacing=10.0)], np.random.default_rng(0))

        assert outer.bounding_box().contains(inner.bounding_box())
        _check_boxes(outer)


class TestShapeList:
    """Tests for the ShapeList node."""

    def test_entities_are_copied_into_a_tuple(self):
        from fastray.scene.shapes import ShapeList

        spheres = _spheres(3)
        world = ShapeList(spheres)
        spheres.append(_spheres(1)[0])

        assert isinstance(world.entities, tuple)
        assert len(world) == 3

    def test_is_frozen(self):
        from dataclasses import FrozenInstanceError

        from fastray.scene.shapes import ShapeList

        world = ShapeList(_spheres(2))
        with pytest.raises(FrozenInstanceError):
            world.entities = ()

    def test_empty_list_has_no_box(self):
        from fastray.scene.shapes import ShapeList

        assert ShapeList().entities == ()
        assert ShapeList().bounding_box() is None
