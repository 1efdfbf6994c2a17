"""Geometry module for shape primitives and their oracles.

This module provides the per-shape distance and intersection routines:

Components:
    sphere: Signed distance and closest-approach intersection
    triangle: Unsigned distance and Moller-Trumbore intersection
    box: Signed distance of an axis-aligned cube (marching only)
    cylinder: Signed distance of a vertical capped cylinder (marching only)
    plane: Point/normal plane intersection (tracing only)
    transform: NumPy helpers for 4x4 affine matrices

Distance and intersection routines are Taichi functions (@ti.func) called
from the rendering kernels. Analytic intersection follows the pattern:
    rec = intersect_shape(ray_origin, ray_direction, ...)  # HitRecord
"""

from .box import box_distance, box_normal
from .cylinder import cylinder_distance, cylinder_normal
from .plane import intersect_plane
from .sphere import HitRecord, intersect_sphere, make_miss, sphere_distance, sphere_normal
from .transform import (
    as_matrix,
    from_rows,
    identity,
    inverse,
    rotation,
    rotation_y,
    translation,
)
from .triangle import intersect_triangle, triangle_distance, triangle_normal

__all__ = [
    "HitRecord",
    "make_miss",
    "sphere_distance",
    "sphere_normal",
    "intersect_sphere",
    "triangle_distance",
    "triangle_normal",
    "intersect_triangle",
    "box_distance",
    "box_normal",
    "cylinder_distance",
    "cylinder_normal",
    "intersect_plane",
    "identity",
    "translation",
    "rotation",
    "rotation_y",
    "from_rows",
    "as_matrix",
    "inverse",
]
