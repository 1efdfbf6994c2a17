"""Ray data structure and the affine helpers shared by both integrators.

This module provides the Ray dataclass plus reflection and the 4x4 point and
direction transforms used by the analytic intersection routines, the camera
and the lighting model. Everything here is a pure Taichi function so it can
be called from inside the per-pixel rendering kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 5.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = make_ray(origin, direction)
"""

import taichi as ti
import taichi.math as tm

# Type aliases for vectors using Taichi's math module
vec3 = tm.vec3
vec4 = tm.vec4


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Camera and shadow
            rays are normalized; rays moved into a shape's local space are not
            re-normalized so that the ray parameter stays comparable.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def transform_point(matrix, p: vec3) -> vec3:
    """Apply a 4x4 affine matrix to a point (w = 1)."""
    r = matrix @ vec4(p.x, p.y, p.z, 1.0)
    return vec3(r[0], r[1], r[2])


@ti.func
def transform_direction(matrix, d: vec3) -> vec3:
    """Apply a 4x4 affine matrix to a direction (w = 0, no translation)."""
    r = matrix @ vec4(d.x, d.y, d.z, 0.0)
    return vec3(r[0], r[1], r[2])
