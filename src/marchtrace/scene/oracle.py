"""Scene-level oracle dispatch over the shape tag.

The marching integrator and the lighting model query shapes through
shape_distance() and shape_normal(); the tracing integrator through
intersect_shape(). Each function reads the tag of shape ``i`` and only
touches the arrays of that kind.

Shapes outside an integrator's supported set are handled uniformly:
planes report FAR_DISTANCE to the marcher, boxes and cylinders report a
miss to the tracer.

Tracing happens in the shape's local space. The ray is moved by the
inverse transform without re-normalizing its direction, so the local ray
parameter equals the world one; the local normal is moved back by the
inverse-transpose and re-normalized.
"""

import taichi as ti
import taichi.math as tm

from marchtrace.core.config import FAR_DISTANCE
from marchtrace.core.ray import transform_direction, transform_point
from marchtrace.geometry.box import box_distance, box_normal
from marchtrace.geometry.cylinder import cylinder_distance, cylinder_normal
from marchtrace.geometry.plane import intersect_plane
from marchtrace.geometry.sphere import (
    HitRecord,
    intersect_sphere,
    make_miss,
    sphere_distance,
    sphere_normal,
)
from marchtrace.geometry.triangle import intersect_triangle, triangle_distance, triangle_normal
from marchtrace.scene.shapes import ShapeKind
from marchtrace.scene.storage import (
    box_centers,
    box_sizes,
    cylinder_centers,
    cylinder_heights,
    cylinder_radii,
    num_shapes,
    plane_normals,
    plane_points,
    shape_colors,
    shape_inverse_transforms,
    shape_kinds,
    shape_slots,
    sphere_centers,
    sphere_radii,
    triangle_v1,
    triangle_v2,
    triangle_v3,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def get_num_shapes() -> ti.i32:
    return num_shapes[None]


@ti.func
def get_shape_color(i: ti.i32) -> vec3:
    return shape_colors[i]


@ti.func
def shape_distance(i: ti.i32, p: vec3) -> ti.f32:
    """Distance from a world-space point to shape i (marching oracle).

    Transforms are not applied in marching mode.

    Args:
        i: Global shape index.
        p: The query point.

    Returns:
        Signed distance for closed shapes, unsigned for triangles, and
        FAR_DISTANCE for planes.
    """
    kind = shape_kinds[i]
    slot = shape_slots[i]

    distance = FAR_DISTANCE
    if kind == int(ShapeKind.SPHERE):
        distance = sphere_distance(p, sphere_centers[slot], sphere_radii[slot])
    elif kind == int(ShapeKind.TRIANGLE):
        distance = triangle_distance(p, triangle_v1[slot], triangle_v2[slot], triangle_v3[slot])
    elif kind == int(ShapeKind.BOX):
        distance = box_distance(p, box_centers[slot], box_sizes[slot])
    elif kind == int(ShapeKind.CYLINDER):
        distance = cylinder_distance(
            p, cylinder_centers[slot], cylinder_radii[slot], cylinder_heights[slot]
        )

    return distance


@ti.func
def shape_normal(i: ti.i32, p: vec3) -> vec3:
    """Shading normal of shape i at a surface point (marching oracle)."""
    kind = shape_kinds[i]
    slot = shape_slots[i]

    normal = vec3(0.0, 0.0, 0.0)
    if kind == int(ShapeKind.SPHERE):
        normal = sphere_normal(p, sphere_centers[slot])
    elif kind == int(ShapeKind.TRIANGLE):
        normal = triangle_normal(triangle_v1[slot], triangle_v2[slot], triangle_v3[slot])
    elif kind == int(ShapeKind.BOX):
        normal = box_normal(p, box_centers[slot])
    elif kind == int(ShapeKind.CYLINDER):
        normal = cylinder_normal(
            p, cylinder_centers[slot], cylinder_radii[slot], cylinder_heights[slot]
        )

    return normal


@ti.func
def _intersect_local(i: ti.i32, origin: vec3, direction: vec3) -> HitRecord:
    """Intersect a ray already expressed in shape i's local space."""
    kind = shape_kinds[i]
    slot = shape_slots[i]

    rec = make_miss()
    if kind == int(ShapeKind.SPHERE):
        rec = intersect_sphere(origin, direction, sphere_centers[slot], sphere_radii[slot])
    elif kind == int(ShapeKind.TRIANGLE):
        rec = intersect_triangle(
            origin, direction, triangle_v1[slot], triangle_v2[slot], triangle_v3[slot]
        )
    elif kind == int(ShapeKind.PLANE):
        rec = intersect_plane(origin, direction, plane_points[slot], plane_normals[slot])

    return rec


@ti.func
def intersect_shape(i: ti.i32, origin: vec3, direction: vec3) -> HitRecord:
    """Intersect a world-space ray with shape i (tracing oracle).

    Args:
        i: Global shape index.
        origin: The ray origin in world space.
        direction: The ray direction in world space.

    Returns:
        A HitRecord with the world-space ray parameter and the world-space
        unit normal. Boxes and cylinders always miss.
    """
    inv = shape_inverse_transforms[i]
    local_origin = transform_point(inv, origin)
    local_direction = transform_direction(inv, direction)

    rec = _intersect_local(i, local_origin, local_direction)
    world_normal = rec.normal
    if rec.hit == 1:
        world_normal = tm.normalize(transform_direction(inv.transpose(), rec.normal))

    return HitRecord(hit=rec.hit, t=rec.t, normal=world_normal)
