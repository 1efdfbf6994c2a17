"""Triangle primitive: unsigned distance and Moller-Trumbore intersection.

Triangles have no inside, so the marching oracle returns an unsigned
distance to the filled triangle. For a point p and vertices v1, v2, v3:

    - If p projects inside all three edge half-planes, the distance is the
      point-plane distance.
    - Otherwise it is the distance to the nearest point on the three edge
      segments, found by clamping the projection of p onto each edge.

The tracing oracle is the Moller-Trumbore formulation with the usual
rejection tests on the determinant, the barycentric coordinates and t.
"""

import taichi as ti
import taichi.math as tm

from marchtrace.core.config import EPSILON, FAR_DISTANCE

from .sphere import HitRecord

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Squared normal length below which a triangle is treated as zero-area
_DEGENERATE_AREA2 = 1e-12


@ti.func
def _segment_distance_squared(edge: vec3, p_rel: vec3) -> ti.f32:
    """Squared distance from a point to the segment [0, edge].

    Args:
        edge: The edge vector, starting at the local origin.
        p_rel: The query point relative to the edge start.
    """
    h = tm.clamp(tm.dot(edge, p_rel) / tm.dot(edge, edge), 0.0, 1.0)
    diff = edge * h - p_rel
    return tm.dot(diff, diff)


@ti.func
def triangle_distance(p: vec3, v1: vec3, v2: vec3, v3: vec3) -> ti.f32:
    """Unsigned distance from a point to a filled triangle.

    Args:
        p: The query point.
        v1: First vertex.
        v2: Second vertex.
        v3: Third vertex.

    Returns:
        The distance to the nearest point of the triangle, or FAR_DISTANCE
        for a zero-area triangle.
    """
    v21 = v2 - v1
    p1 = p - v1
    v32 = v3 - v2
    p2 = p - v2
    v13 = v1 - v3
    p3 = p - v3
    nor = tm.cross(v21, v13)

    result = FAR_DISTANCE
    nor_len2 = tm.dot(nor, nor)
    if nor_len2 > _DEGENERATE_AREA2:
        side = (
            tm.sign(tm.dot(tm.cross(v21, nor), p1))
            + tm.sign(tm.dot(tm.cross(v32, nor), p2))
            + tm.sign(tm.dot(tm.cross(v13, nor), p3))
        )
        dist2 = 0.0
        if side < 2.0:
            dist2 = ti.min(
                ti.min(
                    _segment_distance_squared(v21, p1),
                    _segment_distance_squared(v32, p2),
                ),
                _segment_distance_squared(v13, p3),
            )
        else:
            plane = tm.dot(nor, p1)
            dist2 = plane * plane / nor_len2
        result = ti.sqrt(dist2)

    return result


@ti.func
def triangle_normal(v1: vec3, v2: vec3, v3: vec3) -> vec3:
    """Flat shading normal used by the lighting model.

    The orientation is fixed: the negated right-handed face normal of
    (v1, v2, v3).
    """
    edge1 = v2 - v1
    edge2 = v3 - v1
    return -tm.normalize(tm.cross(edge1, edge2))


@ti.func
def intersect_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    v1: vec3,
    v2: vec3,
    v3: vec3,
) -> HitRecord:
    """Intersect a ray with a triangle (Moller-Trumbore).

    Rejects rays parallel to the triangle plane (|det| < EPSILON),
    barycentric coordinates outside the triangle, and t <= EPSILON.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (need not be normalized).
        v1: First vertex.
        v2: Second vertex.
        v3: Third vertex.

    Returns:
        A HitRecord with the face normal normalize(cross(v2 - v1, v3 - v1)).
    """
    did_hit = 0
    hit_t = 0.0
    hit_normal = vec3(0.0, 0.0, 0.0)

    edge1 = v2 - v1
    edge2 = v3 - v1
    h = tm.cross(ray_direction, edge2)
    det = tm.dot(edge1, h)

    if ti.abs(det) >= EPSILON:
        f = 1.0 / det
        s = ray_origin - v1
        u = f * tm.dot(s, h)
        if u >= 0.0 and u <= 1.0:
            q = tm.cross(s, edge1)
            v = f * tm.dot(ray_direction, q)
            if v >= 0.0 and u + v <= 1.0:
                t = f * tm.dot(edge2, q)
                if t > EPSILON:
                    did_hit = 1
                    hit_t = t
                    hit_normal = tm.normalize(tm.cross(edge1, edge2))

    return HitRecord(hit=did_hit, t=hit_t, normal=hit_normal)
