"""GPU-side shape storage: a tag array plus one set of arrays per variant.

Shapes are stored as a Structure of Arrays in preallocated Taichi fields.
Every shape gets a global index ``i`` (its position in the scene order) and:

    shape_kinds[i]    the ShapeKind tag
    shape_slots[i]    index into the arrays of that kind
    shape_colors[i]   RGB color
    shape_inverse_transforms[i]  world-to-object matrix

The variant parameters live only in the arrays of the tagged kind, so a
sphere's radius can never be read through a triangle's index.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from marchtrace.scene.storage import add_sphere, clear_scene, get_shape_count
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, 0.0), 1.0, color=(1.0, 0.0, 0.0))
    0
    >>> get_shape_count()
    1
"""

import numpy as np
import taichi as ti

from marchtrace.geometry.transform import Matrix4, as_matrix, identity, inverse
from marchtrace.scene.shapes import ShapeKind

# Maximum number of shapes in a scene (all kinds together)
MAX_SHAPES = 256

# Per-shape attributes, indexed by global shape index
shape_kinds = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_slots = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SHAPES)
shape_inverse_transforms = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_SHAPES)
num_shapes = ti.field(dtype=ti.i32, shape=())

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SHAPES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SHAPES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Triangle storage
triangle_v1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SHAPES)
triangle_v2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SHAPES)
triangle_v3 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SHAPES)
num_triangles = ti.field(dtype=ti.i32, shape=())

# Box storage (size is the full edge length)
box_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SHAPES)
box_sizes = ti.field(dtype=ti.f32, shape=MAX_SHAPES)
num_boxes = ti.field(dtype=ti.i32, shape=())

# Cylinder storage (height is the full height)
cylinder_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SHAPES)
cylinder_radii = ti.field(dtype=ti.f32, shape=MAX_SHAPES)
cylinder_heights = ti.field(dtype=ti.f32, shape=MAX_SHAPES)
num_cylinders = ti.field(dtype=ti.i32, shape=())

# Plane storage
plane_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SHAPES)
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SHAPES)
num_planes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all shapes.

    Resets the counts to zero. Field data is left in place and will be
    overwritten when new shapes are added.
    """
    num_shapes[None] = 0
    num_spheres[None] = 0
    num_triangles[None] = 0
    num_boxes[None] = 0
    num_cylinders[None] = 0
    num_planes[None] = 0


def _register_shape(kind: ShapeKind, slot: int, color) -> int:
    """Append the shared attributes of a new shape and return its index."""
    idx = num_shapes[None]
    shape_kinds[idx] = int(kind)
    shape_slots[idx] = slot
    shape_colors[idx] = [color[0], color[1], color[2]]
    shape_inverse_transforms[idx] = identity().tolist()
    num_shapes[None] = idx + 1
    return idx


def _check_capacity() -> None:
    if num_shapes[None] >= MAX_SHAPES:
        raise RuntimeError(f"Maximum number of shapes ({MAX_SHAPES}) exceeded")


def add_sphere(center, radius: float, color) -> int:
    """Add a sphere.

    Args:
        center: The sphere center (x, y, z).
        radius: The sphere radius.
        color: RGB color in [0, 1].

    Returns:
        The global index of the new shape.

    Raises:
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    _check_capacity()
    slot = num_spheres[None]
    sphere_centers[slot] = [center[0], center[1], center[2]]
    sphere_radii[slot] = radius
    num_spheres[None] = slot + 1
    return _register_shape(ShapeKind.SPHERE, slot, color)


def add_triangle(v1, v2, v3, color) -> int:
    """Add a triangle given its three vertices.

    Raises:
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    _check_capacity()
    slot = num_triangles[None]
    triangle_v1[slot] = [v1[0], v1[1], v1[2]]
    triangle_v2[slot] = [v2[0], v2[1], v2[2]]
    triangle_v3[slot] = [v3[0], v3[1], v3[2]]
    num_triangles[None] = slot + 1
    return _register_shape(ShapeKind.TRIANGLE, slot, color)


def add_box(center, size: float, color) -> int:
    """Add an axis-aligned cube of full edge length ``size``.

    Raises:
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    _check_capacity()
    slot = num_boxes[None]
    box_centers[slot] = [center[0], center[1], center[2]]
    box_sizes[slot] = size
    num_boxes[None] = slot + 1
    return _register_shape(ShapeKind.BOX, slot, color)


def add_cylinder(center, radius: float, height: float, color) -> int:
    """Add a vertical capped cylinder.

    Raises:
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    _check_capacity()
    slot = num_cylinders[None]
    cylinder_centers[slot] = [center[0], center[1], center[2]]
    cylinder_radii[slot] = radius
    cylinder_heights[slot] = height
    num_cylinders[None] = slot + 1
    return _register_shape(ShapeKind.CYLINDER, slot, color)


def add_plane(point, normal, color) -> int:
    """Add an infinite plane in point/normal form.

    Raises:
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    _check_capacity()
    slot = num_planes[None]
    plane_points[slot] = [point[0], point[1], point[2]]
    plane_normals[slot] = [normal[0], normal[1], normal[2]]
    num_planes[None] = slot + 1
    return _register_shape(ShapeKind.PLANE, slot, color)


def check_shape_index(index: int) -> None:
    if index < 0 or index >= num_shapes[None]:
        raise IndexError(f"Shape index {index} out of range (scene has {num_shapes[None]} shapes)")


def set_shape_transform(index: int, matrix: Matrix4) -> None:
    """Upload the object-to-world transform of a shape.

    Only the inverse is stored; the tracing oracle uses it to move rays into
    local space and its transpose to move normals back out.

    Raises:
        IndexError: If index does not name an existing shape.
        ValueError: If the matrix is not an invertible 4x4 matrix.
    """
    check_shape_index(index)
    shape_inverse_transforms[index] = inverse(as_matrix(matrix)).tolist()


def get_shape_count() -> int:
    """Get the number of shapes in the scene."""
    return int(num_shapes[None])


def get_shape_kind(index: int) -> ShapeKind:
    """Get the tag of a shape.

    Raises:
        IndexError: If index does not name an existing shape.
    """
    check_shape_index(index)
    return ShapeKind(int(shape_kinds[index]))


def get_shape_color(index: int) -> tuple[float, float, float]:
    """Get the stored color of a shape."""
    check_shape_index(index)
    c = shape_colors[index]
    return (float(c[0]), float(c[1]), float(c[2]))


def get_shape_inverse_transform(index: int) -> Matrix4:
    """Read back the stored world-to-object matrix of a shape."""
    check_shape_index(index)
    return np.asarray(shape_inverse_transforms[index].to_numpy(), dtype=np.float32)


def get_kind_counts() -> dict[ShapeKind, int]:
    """Get the number of shapes of each kind."""
    return {
        ShapeKind.SPHERE: int(num_spheres[None]),
        ShapeKind.TRIANGLE: int(num_triangles[None]),
        ShapeKind.BOX: int(num_boxes[None]),
        ShapeKind.CYLINDER: int(num_cylinders[None]),
        ShapeKind.PLANE: int(num_planes[None]),
    }
