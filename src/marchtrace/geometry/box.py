"""Axis-aligned box primitive for sphere marching.

Boxes are centered cubes described by a center and a full edge length. The
signed distance folds the query point into the positive octant and measures
the excess over the half-extent:

    q = |p - c| - size / 2
    d = |max(q, 0)| + min(max(q.x, q.y, q.z), 0)

Boxes are only supported by the marching integrator.
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Tie-break tolerance when snapping a radial direction to a face normal
_FACE_SNAP_EPSILON = 1e-6


@ti.func
def box_distance(p: vec3, center: vec3, size: ti.f32) -> ti.f32:
    """Signed distance from a point to an axis-aligned cube.

    Args:
        p: The query point.
        center: The cube center.
        size: The full edge length of the cube.

    Returns:
        Distance to the surface; negative inside.
    """
    q = ti.abs(p - center) - 0.5 * size
    outside = tm.length(ti.max(q, vec3(0.0, 0.0, 0.0)))
    inside = ti.min(ti.max(q.x, ti.max(q.y, q.z)), 0.0)
    return outside + inside


@ti.func
def box_normal(p: vec3, center: vec3) -> vec3:
    """Face normal of the box at a surface point.

    The radial direction from the center is snapped to the axis with the
    largest magnitude component. Ties are resolved x first, then y, then z.
    """
    n = tm.normalize(p - center)
    max_component = ti.max(ti.abs(n.x), ti.max(ti.abs(n.y), ti.abs(n.z)))

    result = n
    if ti.abs(max_component - ti.abs(n.x)) < _FACE_SNAP_EPSILON:
        result = vec3(tm.sign(n.x), 0.0, 0.0)
    elif ti.abs(max_component - ti.abs(n.y)) < _FACE_SNAP_EPSILON:
        result = vec3(0.0, tm.sign(n.y), 0.0)
    elif ti.abs(max_component - ti.abs(n.z)) < _FACE_SNAP_EPSILON:
        result = vec3(0.0, 0.0, tm.sign(n.z))

    return result
