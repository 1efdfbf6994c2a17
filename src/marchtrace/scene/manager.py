"""Scene manager: the owned list of shapes and its GPU mirror.

The SceneManager is the arena that owns every Shape of a scene. Shapes are
addressed by their index in that list; names and parent/child links are
index-based back-references, never direct references between shapes.

Every mutation is mirrored into the Taichi fields of scene.storage so the
kernels always see the current scene:

- add_* appends a shape and uploads its parameters
- set_transform / apply_translation / apply_rotation upload new
  inverse transforms
- load() replaces the whole scene from a parsed scene description

Transform propagation walks the children depth-first and visits each shape
at most once, so cycles in the parent links cannot recurse forever.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from marchtrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> body = scene.add_sphere((0.0, 0.0, 0.0), 1.0, (1.0, 0.0, 0.0), name="body")
    >>> arm = scene.add_triangle((1, 0, 0), (2, 0, 0), (1, 1, 0), (0.0, 1.0, 0.0))
    >>> scene.set_parent(arm, body)
    >>> scene.apply_translation(body, (0.5, 0.0, 0.0))  # moves both
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import numpy as np

from marchtrace.geometry.transform import Matrix4, as_matrix, rotation, translation
from marchtrace.scene import storage
from marchtrace.scene.shapes import (
    BoxGeometry,
    CylinderGeometry,
    Geometry,
    PlaneGeometry,
    Shape,
    ShapeKind,
    SphereGeometry,
    TriangleGeometry,
    Vec3,
)

if TYPE_CHECKING:
    from marchtrace.scene.loader import SceneDescription


def _upload_geometry(geometry: Geometry, color: Vec3) -> int:
    """Append a geometry to the Taichi storage and return its global index."""
    if isinstance(geometry, SphereGeometry):
        return storage.add_sphere(geometry.center, geometry.radius, color)
    if isinstance(geometry, TriangleGeometry):
        return storage.add_triangle(geometry.vertex1, geometry.vertex2, geometry.vertex3, color)
    if isinstance(geometry, BoxGeometry):
        return storage.add_box(geometry.center, geometry.size, color)
    if isinstance(geometry, CylinderGeometry):
        return storage.add_cylinder(geometry.center, geometry.radius, geometry.height, color)
    if isinstance(geometry, PlaneGeometry):
        return storage.add_plane(geometry.point, geometry.normal, color)
    raise TypeError(f"Unsupported geometry type: {type(geometry).__name__}")


class SceneManager:
    """Owns the scene's shapes and keeps the GPU fields in sync.

    Only one scene can be live at a time because the Taichi fields are
    module-level; creating a SceneManager clears them.
    """

    def __init__(self) -> None:
        self._shapes: list[Shape] = []
        self._names: dict[str, int] = {}
        storage.clear_scene()

    # -------------------------------------------------------------------------
    # Adding shapes
    # -------------------------------------------------------------------------

    def add_shape(self, shape: Shape) -> int:
        """Append a shape and upload it.

        The shape's name is registered and its transform uploaded. Children
        listed on the shape are kept as given and must refer to shapes of
        this scene by the time a transform is propagated.

        Returns:
            The index of the new shape.

        Raises:
            RuntimeError: If the scene is full.
        """
        index = _upload_geometry(shape.geometry, shape.color)
        if index != len(self._shapes):
            raise RuntimeError("Scene storage is out of sync with the scene manager")
        self._shapes.append(shape)
        storage.set_shape_transform(index, shape.transform)
        if shape.name is not None:
            self._names[shape.name] = index
        return index

    def add_sphere(
        self,
        center: Vec3,
        radius: float,
        color: Vec3,
        *,
        name: str | None = None,
        transform: Matrix4 | None = None,
    ) -> int:
        """Add a sphere and return its index."""
        return self._add(SphereGeometry(center, radius), color, name, transform)

    def add_triangle(
        self,
        vertex1: Vec3,
        vertex2: Vec3,
        vertex3: Vec3,
        color: Vec3,
        *,
        name: str | None = None,
        transform: Matrix4 | None = None,
    ) -> int:
        """Add a triangle and return its index."""
        return self._add(TriangleGeometry(vertex1, vertex2, vertex3), color, name, transform)

    def add_box(
        self,
        center: Vec3,
        size: float,
        color: Vec3,
        *,
        name: str | None = None,
        transform: Matrix4 | None = None,
    ) -> int:
        """Add an axis-aligned cube (marching only) and return its index."""
        return self._add(BoxGeometry(center, size), color, name, transform)

    def add_cylinder(
        self,
        center: Vec3,
        radius: float,
        height: float,
        color: Vec3,
        *,
        name: str | None = None,
        transform: Matrix4 | None = None,
    ) -> int:
        """Add a vertical cylinder (marching only) and return its index."""
        return self._add(CylinderGeometry(center, radius, height), color, name, transform)

    def add_plane(
        self,
        point: Vec3,
        normal: Vec3,
        color: Vec3,
        *,
        name: str | None = None,
        transform: Matrix4 | None = None,
    ) -> int:
        """Add an infinite plane (tracing only) and return its index."""
        return self._add(PlaneGeometry(point, normal), color, name, transform)

    def _add(
        self,
        geometry: Geometry,
        color: Vec3,
        name: str | None,
        transform: Matrix4 | None,
    ) -> int:
        shape = Shape(geometry=geometry, color=color, name=name)
        if transform is not None:
            shape.transform = as_matrix(transform)
        return self.add_shape(shape)

    # -------------------------------------------------------------------------
    # Names and hierarchy
    # -------------------------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= len(self._shapes):
            raise IndexError(
                f"Shape index {index} out of range (scene has {len(self._shapes)} shapes)"
            )

    def set_name(self, index: int, name: str) -> None:
        """Label a shape. A later shape with the same name takes it over."""
        self._check_index(index)
        self._shapes[index].name = name
        self._names[name] = index

    def find(self, name: str) -> int | None:
        """Index of the shape registered under name, or None."""
        return self._names.get(name)

    def set_parent(self, child: int, parent: int) -> None:
        """Attach child to parent for transform propagation.

        Raises:
            IndexError: If either index is out of range.
            ValueError: If child and parent are the same shape.
        """
        self._check_index(child)
        self._check_index(parent)
        if child == parent:
            raise ValueError("A shape cannot be its own parent")
        children = self._shapes[parent].children
        if child not in children:
            children.append(child)

    def get_children(self, index: int) -> list[int]:
        self._check_index(index)
        return list(self._shapes[index].children)

    def _subtree(self, root: int) -> list[int]:
        """Root and its descendants in depth-first order, each once."""
        order: list[int] = []
        visited: set[int] = set()

        def visit(index: int) -> None:
            if index in visited:
                return
            visited.add(index)
            order.append(index)
            for child in self._shapes[index].children:
                self._check_index(child)
                visit(child)

        visit(root)
        return order

    # -------------------------------------------------------------------------
    # Transforms
    # -------------------------------------------------------------------------

    def set_transform(self, index: int, matrix: Matrix4) -> None:
        """Replace a shape's object-to-world transform (children untouched).

        Raises:
            IndexError: If index is out of range.
            ValueError: If the matrix is not an invertible 4x4 matrix.
        """
        self._check_index(index)
        m = as_matrix(matrix)
        storage.set_shape_transform(index, m)
        self._shapes[index].transform = m

    def get_transform(self, index: int) -> Matrix4:
        self._check_index(index)
        return np.array(self._shapes[index].transform, copy=True)

    def apply_translation(self, index: int, offset: Sequence[float]) -> None:
        """Translate a shape and its descendants in world space.

        Each transform becomes T @ M, so the offset is applied after any
        existing rotation.
        """
        self._check_index(index)
        t = translation(offset)
        for i in self._subtree(index):
            self.set_transform(i, t @ self._shapes[i].transform)

    def apply_rotation(
        self,
        index: int,
        angle_degrees: float,
        axis: Sequence[float] = (0.0, 1.0, 0.0),
    ) -> None:
        """Rotate a shape and its descendants about an axis.

        Each transform becomes M @ R, so every shape turns in its own
        object space (about the world origin for an untransformed shape).
        """
        self._check_index(index)
        r = rotation(angle_degrees, axis)
        for i in self._subtree(index):
            self.set_transform(i, self._shapes[i].transform @ r)

    # -------------------------------------------------------------------------
    # Whole-scene operations
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Remove every shape."""
        self._shapes.clear()
        self._names.clear()
        storage.clear_scene()

    def load(self, description: SceneDescription) -> None:
        """Replace the scene with the shapes of a parsed scene description.

        Names and child links are taken as resolved by the parser.
        """
        self.clear()
        for shape in description.shapes:
            self.add_shape(shape.copy())
        for shape in self._shapes:
            for child in shape.children:
                self._check_index(child)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def shapes(self) -> tuple[Shape, ...]:
        """The shapes in scene order (do not mutate; use the methods)."""
        return tuple(self._shapes)

    def get_shape(self, index: int) -> Shape:
        self._check_index(index)
        return self._shapes[index]

    def get_shape_count(self) -> int:
        return len(self._shapes)

    def __len__(self) -> int:
        return len(self._shapes)

    def get_statistics(self) -> dict[str, Any]:
        """Counts of shapes per kind, for logging and tests."""
        counts = {kind.name.lower(): 0 for kind in ShapeKind}
        for shape in self._shapes:
            counts[shape.kind.name.lower()] += 1
        return {
            "total": len(self._shapes),
            "named": len(self._names),
            "max_shapes": storage.MAX_SHAPES,
            **counts,
        }

    def __repr__(self) -> str:
        return f"SceneManager(shapes={len(self._shapes)})"
