"""Tests for the SceneManager.

Tests cover:
- Adding shapes of every kind and the GPU mirror
- Names and parent links
- Transform propagation through the hierarchy, cycles included
- Loading a parsed scene description
"""

import numpy as np
import pytest


class TestAddShapes:
    """Shapes are appended and uploaded."""

    def test_indices_follow_insertion_order(self, fresh_scene):
        from marchtrace.scene import storage
        from marchtrace.scene.shapes import ShapeKind

        a = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))
        b = fresh_scene.add_plane((0, -1, 0), (0, 1, 0), (0, 1, 0))
        c = fresh_scene.add_cylinder((0, 0, 0), 1.0, 2.0, (0, 0, 1))

        assert (a, b, c) == (0, 1, 2)
        assert len(fresh_scene) == 3
        assert storage.get_shape_count() == 3
        assert fresh_scene.get_shape(1).kind is ShapeKind.PLANE
        assert storage.get_shape_kind(2) is ShapeKind.CYLINDER

    def test_invalid_shape_is_not_added(self, fresh_scene):
        from marchtrace.scene import storage

        with pytest.raises(ValueError):
            fresh_scene.add_sphere((0, 0, 0), -1.0, (1, 0, 0))

        assert len(fresh_scene) == 0
        assert storage.get_shape_count() == 0

    def test_transform_is_uploaded(self, fresh_scene):
        from marchtrace.geometry.transform import translation
        from marchtrace.scene import storage

        idx = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0), transform=translation((0, 2, 0)))

        assert np.allclose(storage.get_shape_inverse_transform(idx)[:3, 3], [0.0, -2.0, 0.0])

    def test_statistics(self, fresh_scene):
        fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0), name="ball")
        fresh_scene.add_sphere((2, 0, 0), 1.0, (1, 0, 0))
        fresh_scene.add_box((0, 0, 0), 1.0, (1, 0, 0))

        stats = fresh_scene.get_statistics()

        assert stats["total"] == 3
        assert stats["named"] == 1
        assert stats["sphere"] == 2
        assert stats["box"] == 1
        assert stats["plane"] == 0

    def test_clear(self, fresh_scene):
        from marchtrace.scene import storage

        fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0), name="ball")
        fresh_scene.clear()

        assert len(fresh_scene) == 0
        assert fresh_scene.find("ball") is None
        assert storage.get_shape_count() == 0


class TestNamesAndParents:
    def test_find_by_name(self, fresh_scene):
        idx = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0), name="body")

        assert fresh_scene.find("body") == idx
        assert fresh_scene.find("missing") is None

    def test_set_name_later_duplicate_wins(self, fresh_scene):
        fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0), name="x")
        second = fresh_scene.add_sphere((1, 0, 0), 1.0, (1, 0, 0))
        fresh_scene.set_name(second, "x")

        assert fresh_scene.find("x") == second

    def test_set_parent_records_child_once(self, fresh_scene):
        parent = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))
        child = fresh_scene.add_sphere((2, 0, 0), 0.5, (1, 0, 0))
        fresh_scene.set_parent(child, parent)
        fresh_scene.set_parent(child, parent)

        assert fresh_scene.get_children(parent) == [child]

    def test_self_parent_raises(self, fresh_scene):
        idx = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))

        with pytest.raises(ValueError):
            fresh_scene.set_parent(idx, idx)

    def test_out_of_range_index_raises(self, fresh_scene):
        fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))

        with pytest.raises(IndexError):
            fresh_scene.set_parent(5, 0)
        with pytest.raises(IndexError):
            fresh_scene.get_transform(-1)


class TestTransformPropagation:
    """apply_translation / apply_rotation move whole subtrees."""

    def test_translation_moves_children(self, fresh_scene):
        body = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))
        wing = fresh_scene.add_triangle((1, 0, 0), (2, 0, 0), (1, 1, 0), (0, 1, 0))
        other = fresh_scene.add_sphere((5, 0, 0), 1.0, (0, 0, 1))
        fresh_scene.set_parent(wing, body)

        fresh_scene.apply_translation(body, (0.5, 0.0, -1.0))

        for idx in (body, wing):
            assert np.allclose(fresh_scene.get_transform(idx)[:3, 3], [0.5, 0.0, -1.0])
        assert np.allclose(fresh_scene.get_transform(other), np.eye(4))

    def test_translation_does_not_move_parent_of_child(self, fresh_scene):
        body = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))
        wing = fresh_scene.add_sphere((2, 0, 0), 0.5, (0, 1, 0))
        fresh_scene.set_parent(wing, body)

        fresh_scene.apply_translation(wing, (1.0, 0.0, 0.0))

        assert np.allclose(fresh_scene.get_transform(body), np.eye(4))

    def test_grandchildren_follow(self, fresh_scene):
        a = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))
        b = fresh_scene.add_sphere((1, 0, 0), 1.0, (1, 0, 0))
        c = fresh_scene.add_sphere((2, 0, 0), 1.0, (1, 0, 0))
        fresh_scene.set_parent(b, a)
        fresh_scene.set_parent(c, b)

        fresh_scene.apply_translation(a, (0.0, 3.0, 0.0))

        assert np.allclose(fresh_scene.get_transform(c)[:3, 3], [0.0, 3.0, 0.0])

    def test_cycle_terminates_and_moves_each_once(self, fresh_scene):
        a = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))
        b = fresh_scene.add_sphere((1, 0, 0), 1.0, (1, 0, 0))
        fresh_scene.set_parent(b, a)
        fresh_scene.set_parent(a, b)

        fresh_scene.apply_translation(a, (1.0, 0.0, 0.0))

        assert np.allclose(fresh_scene.get_transform(a)[:3, 3], [1.0, 0.0, 0.0])
        assert np.allclose(fresh_scene.get_transform(b)[:3, 3], [1.0, 0.0, 0.0])

    def test_rotation_composes_in_object_space(self, fresh_scene):
        from marchtrace.geometry.transform import rotation_y, translation

        idx = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0), transform=translation((2, 0, 0)))
        fresh_scene.apply_rotation(idx, 90.0)

        expected = translation((2, 0, 0)) @ rotation_y(90.0)
        assert np.allclose(fresh_scene.get_transform(idx), expected, atol=1e-6)

    def test_set_transform_leaves_children(self, fresh_scene):
        from marchtrace.geometry.transform import translation

        body = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))
        wing = fresh_scene.add_sphere((2, 0, 0), 0.5, (0, 1, 0))
        fresh_scene.set_parent(wing, body)

        fresh_scene.set_transform(body, translation((0, 0, 4)))

        assert np.allclose(fresh_scene.get_transform(wing), np.eye(4))

    def test_singular_transform_rejected(self, fresh_scene):
        idx = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))

        with pytest.raises(ValueError):
            fresh_scene.set_transform(idx, np.zeros((4, 4)))


class TestLoad:
    def test_load_replaces_scene(self, fresh_scene):
        from marchtrace.scene.loader import parse_scene

        fresh_scene.add_box((0, 0, 0), 1.0, (1, 1, 1))
        description = parse_scene(
            "image 8 8\n"
            "camera_position 0 0 5\n"
            "camera_target 0 0 0\n"
            "sphere 0 0 0 1 1 0 0\n"
            "name body\n"
            "triangle 1 0 0 2 0 0 1 1 0 0 1 0\n"
            "parent body\n"
        )
        fresh_scene.load(description)

        assert len(fresh_scene) == 2
        assert fresh_scene.find("body") == 0
        assert fresh_scene.get_children(0) == [1]

    def test_load_copies_shapes(self, fresh_scene):
        from marchtrace.scene.loader import parse_scene

        description = parse_scene(
            "image 8 8\ncamera_position 0 0 5\ncamera_target 0 0 0\nsphere 0 0 0 1 1 0 0\n"
        )
        fresh_scene.load(description)
        fresh_scene.apply_translation(0, (1.0, 0.0, 0.0))

        assert np.allclose(description.shapes[0].transform, np.eye(4))
