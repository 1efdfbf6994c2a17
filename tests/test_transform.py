"""Tests for the NumPy transform helpers."""

import numpy as np
import pytest


class TestMatrixBuilders:
    def test_translation_moves_points(self):
        from marchtrace.geometry.transform import translation

        m = translation((1.0, 2.0, 3.0))
        p = m @ np.array([0.0, 0.0, 0.0, 1.0])

        assert np.allclose(p[:3], [1.0, 2.0, 3.0])
        assert m.dtype == np.float32

    def test_rotation_y_quarter_turn(self):
        """+90 degrees about Y takes +X to -Z."""
        from marchtrace.geometry.transform import rotation_y

        p = rotation_y(90.0) @ np.array([1.0, 0.0, 0.0, 1.0])

        assert np.allclose(p[:3], [0.0, 0.0, -1.0], atol=1e-6)

    def test_rotation_normalizes_axis(self):
        from marchtrace.geometry.transform import rotation

        assert np.allclose(rotation(30.0, (0.0, 5.0, 0.0)), rotation(30.0, (0.0, 1.0, 0.0)))

    def test_rotation_zero_axis_raises(self):
        from marchtrace.geometry.transform import rotation

        with pytest.raises(ValueError):
            rotation(10.0, (0.0, 0.0, 0.0))


class TestFromRows:
    def test_translation_in_entries_4_8_12(self):
        from marchtrace.geometry.transform import from_rows

        values = [1, 0, 0, 5, 0, 1, 0, 6, 0, 0, 1, 7, 0, 0, 0, 1]
        m = from_rows(values)

        assert np.allclose(m[:3, 3], [5.0, 6.0, 7.0])

    def test_wrong_count_raises(self):
        from marchtrace.geometry.transform import from_rows

        with pytest.raises(ValueError, match="16"):
            from_rows([1.0] * 15)


class TestAsMatrixAndInverse:
    def test_singular_matrix_rejected(self):
        from marchtrace.geometry.transform import as_matrix

        with pytest.raises(ValueError, match="invertible"):
            as_matrix(np.zeros((4, 4)))

    def test_wrong_shape_rejected(self):
        from marchtrace.geometry.transform import as_matrix

        with pytest.raises(ValueError, match="4x4"):
            as_matrix(np.eye(3))

    def test_inverse_undoes_transform(self):
        from marchtrace.geometry.transform import inverse, rotation, translation

        m = translation((1.0, -2.0, 0.5)) @ rotation(40.0, (1.0, 1.0, 0.0))

        assert np.allclose(inverse(m) @ m, np.eye(4), atol=1e-5)
