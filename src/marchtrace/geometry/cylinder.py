"""Vertical capped cylinder primitive for sphere marching.

The cylinder axis is parallel to y and passes through the center. Its
signed distance works in the 2-D (radial, vertical) half-plane:

    d = |(|p.xz - c.xz|, p.y - c.y)| - (radius, height / 2)
    distance = |max(d, 0)| + min(max(d.x, d.y), 0)

Cylinders are only supported by the marching integrator.
"""

import taichi as ti
import taichi.math as tm

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3


@ti.func
def _cylinder_excess(p: vec3, center: vec3, radius: ti.f32, height: ti.f32) -> vec2:
    """Radial and vertical excess of a point over the cylinder extents."""
    radial = tm.length(vec2(p.x - center.x, p.z - center.z))
    vertical = p.y - center.y
    return ti.abs(vec2(radial, vertical)) - vec2(radius, 0.5 * height)


@ti.func
def cylinder_distance(p: vec3, center: vec3, radius: ti.f32, height: ti.f32) -> ti.f32:
    """Signed distance from a point to a vertical capped cylinder.

    Args:
        p: The query point.
        center: The center of the cylinder (midway between the caps).
        radius: The cylinder radius.
        height: The full height between the caps.

    Returns:
        Distance to the surface; negative inside.
    """
    d = _cylinder_excess(p, center, radius, height)
    distance_to_side = tm.length(ti.max(d, vec2(0.0, 0.0)))
    distance_to_caps = ti.min(ti.max(d.x, d.y), 0.0)
    return distance_to_side + distance_to_caps


@ti.func
def cylinder_normal(p: vec3, center: vec3, radius: ti.f32, height: ti.f32) -> vec3:
    """Shading normal of the cylinder at a surface point.

    Points whose vertical excess dominates the radial one lie on a cap and
    get the vertical normal, signed by which side of the center they are
    on. All other points get the radial normal in the xz plane.
    """
    d = _cylinder_excess(p, center, radius, height)

    result = vec3(0.0, 0.0, 0.0)
    if d.y >= d.x:
        result = vec3(0.0, tm.sign(p.y - center.y), 0.0)
    else:
        result = tm.normalize(vec3(p.x - center.x, 0.0, p.z - center.z))

    return result
