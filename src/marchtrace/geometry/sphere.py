"""Sphere primitive: signed distance and analytic ray intersection.

The signed distance is the classic |p - c| - r, negative inside the sphere.

The analytic intersection uses the origin-projection (closest approach)
formulation rather than the quadratic formula:

    1. Project the center onto the ray to find the closest approach.
    2. Reject the ray if the closest approach is farther than the radius.
    3. Step back from the closest approach by the half-chord length.

The projection is divided by |d|^2 so the routine stays exact for the
non-normalized directions produced by moving a ray into a shape's local
space.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from marchtrace.geometry.sphere import intersect_sphere, sphere_distance
    >>> # Use within a Taichi kernel:
    >>> # rec = intersect_sphere(origin, direction, center, 1.0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Record of an analytic ray-shape intersection.

    Attributes:
        hit: Whether the ray intersected the shape (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        normal: The outward surface normal at the intersection point, unit
            length. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    normal: vec3


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(hit=0, t=0.0, normal=vec3(0.0, 0.0, 0.0))


@ti.func
def sphere_distance(p: vec3, center: vec3, radius: ti.f32) -> ti.f32:
    """Signed distance from a point to a sphere surface.

    Args:
        p: The query point.
        center: The sphere center.
        radius: The sphere radius.

    Returns:
        Distance to the surface; negative inside, zero on the surface.
    """
    return tm.length(p - center) - radius


@ti.func
def sphere_normal(p: vec3, center: vec3) -> vec3:
    """Radial outward normal of a sphere at (or near) a surface point."""
    return tm.normalize(p - center)


@ti.func
def intersect_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    center: vec3,
    radius: ti.f32,
) -> HitRecord:
    """Intersect a ray with a sphere using the closest-approach formula.

    The nearer intersection is returned when it lies in front of the origin.
    If the origin is inside the sphere the nearer root is negative and the
    farther one is returned instead. Rays whose closest approach exceeds the
    radius, or whose roots are both behind the origin, miss.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The ray direction (need not be normalized).
        center: The sphere center.
        radius: The sphere radius.

    Returns:
        A HitRecord with the smallest non-negative t and the radial normal.
    """
    did_hit = 0
    hit_t = 0.0
    hit_normal = vec3(0.0, 0.0, 0.0)

    a = tm.dot(ray_direction, ray_direction)
    if a > 0.0:
        to_center = center - ray_origin
        # Ray parameter of the closest approach to the center
        projection = tm.dot(to_center, ray_direction) / a
        closest_point = ray_origin + projection * ray_direction
        distance_to_center = tm.length(closest_point - center)

        if distance_to_center <= radius:
            half_chord = ti.sqrt(radius * radius - distance_to_center * distance_to_center)
            # Half-chord is a world length; convert it to ray parameter units
            dt = half_chord / ti.sqrt(a)

            t = projection - dt
            if t < 0.0:
                t = projection + dt

            if t >= 0.0:
                hit_point = ray_origin + t * ray_direction
                did_hit = 1
                hit_t = t
                hit_normal = (hit_point - center) / radius

    return HitRecord(hit=did_hit, t=hit_t, normal=hit_normal)
