"""Affine transform helpers (Python side, NumPy).

Shapes carry a 4x4 object-to-world matrix. The tracing oracle needs its
inverse (to move rays into local space) and, implicitly, the transpose of
that inverse (to move normals back out). These helpers build and combine
the matrices on the CPU; only the inverse is uploaded to Taichi fields.

All matrices are float32 NumPy arrays in the usual mathematical layout:
``m[row, col]``, column vectors, translation in the last column.

Example:
    >>> from marchtrace.geometry.transform import translation, rotation_y
    >>> m = translation((1.0, 0.0, 0.0)) @ rotation_y(90.0)
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

Matrix4 = npt.NDArray[np.float32]


def identity() -> Matrix4:
    """Return the 4x4 identity matrix."""
    return np.eye(4, dtype=np.float32)


def translation(offset: Sequence[float]) -> Matrix4:
    """Build a translation matrix.

    Args:
        offset: The (x, y, z) translation.

    Returns:
        A 4x4 matrix that moves points by offset.
    """
    m = identity()
    m[0, 3] = offset[0]
    m[1, 3] = offset[1]
    m[2, 3] = offset[2]
    return m


def rotation(angle_degrees: float, axis: Sequence[float]) -> Matrix4:
    """Build a rotation matrix about an arbitrary axis (right-handed).

    Args:
        angle_degrees: Rotation angle in degrees; positive is
            counter-clockwise when looking down the axis toward the origin.
        axis: The rotation axis; normalized internally.

    Returns:
        A 4x4 rotation matrix.

    Raises:
        ValueError: If the axis has zero length.
    """
    a = np.asarray(axis, dtype=np.float64)
    norm = np.linalg.norm(a)
    if norm == 0.0:
        raise ValueError("Rotation axis must be non-zero")
    x, y, z = a / norm

    theta = math.radians(angle_degrees)
    c = math.cos(theta)
    s = math.sin(theta)
    t = 1.0 - c

    m = identity()
    m[:3, :3] = np.array(
        [
            [t * x * x + c, t * x * y - s * z, t * x * z + s * y],
            [t * x * y + s * z, t * y * y + c, t * y * z - s * x],
            [t * x * z - s * y, t * y * z + s * x, t * z * z + c],
        ],
        dtype=np.float32,
    )
    return m


def rotation_y(angle_degrees: float) -> Matrix4:
    """Build a rotation about the world Y axis."""
    return rotation(angle_degrees, (0.0, 1.0, 0.0))


def from_rows(values: Sequence[float]) -> Matrix4:
    """Build a matrix from 16 values listed row by row.

    This is the layout of the ``transform`` command in scene files: the
    translation is found in entries 4, 8 and 12.

    Raises:
        ValueError: If values does not hold exactly 16 numbers.
    """
    if len(values) != 16:
        raise ValueError(f"Expected 16 matrix entries, got {len(values)}")
    return np.asarray(values, dtype=np.float32).reshape(4, 4)


def as_matrix(matrix: npt.ArrayLike) -> Matrix4:
    """Coerce an array-like into a validated 4x4 float32 affine matrix.

    Raises:
        ValueError: If the shape is wrong or the matrix is singular.
    """
    m = np.array(matrix, dtype=np.float32)
    if m.shape != (4, 4):
        raise ValueError(f"Transform must be 4x4, got shape {m.shape}")
    if abs(float(np.linalg.det(m.astype(np.float64)))) < 1e-12:
        raise ValueError("Transform must be invertible")
    return m


def inverse(matrix: Matrix4) -> Matrix4:
    """Invert an affine matrix (computed in float64, returned as float32)."""
    return np.linalg.inv(matrix.astype(np.float64)).astype(np.float32)
