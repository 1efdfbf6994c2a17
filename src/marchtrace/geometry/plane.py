"""Infinite plane primitive for analytic ray tracing.

A plane is given in point/normal form. The ray parameter of the
intersection solves dot(n, o + t*d - p) = 0:

    t = -dot(n, o - p) / dot(d, n)

Rays (nearly) parallel to the plane miss, as do intersections behind the
ray origin. Planes are only supported by the tracing integrator.
"""

import taichi as ti
import taichi.math as tm

from marchtrace.core.config import EPSILON

from .sphere import HitRecord

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def intersect_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    point: vec3,
    normal: vec3,
) -> HitRecord:
    """Intersect a ray with an infinite plane.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (need not be normalized).
        point: Any point on the plane.
        normal: The plane normal (need not be normalized).

    Returns:
        A HitRecord with t >= 0 and the normalized plane normal.
    """
    did_hit = 0
    hit_t = 0.0
    hit_normal = vec3(0.0, 0.0, 0.0)

    denom = tm.dot(ray_direction, normal)
    if ti.abs(denom) >= EPSILON:
        t = -tm.dot(normal, ray_origin - point) / denom
        if t >= 0.0:
            did_hit = 1
            hit_t = t
            hit_normal = tm.normalize(normal)

    return HitRecord(hit=did_hit, t=hit_t, normal=hit_normal)
