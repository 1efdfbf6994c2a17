"""Shape descriptions: the tagged union of supported primitives.

Each primitive variant is its own frozen dataclass holding only the
parameters that variant needs. A Shape pairs one of them with the shared
attributes (color, transform, name, children). The ShapeKind tag is derived
from the geometry's type, so the tag and the data cannot disagree, and a
variant's parameters are only reachable through an object of that variant.

Example:
    >>> from marchtrace.scene.shapes import Shape, SphereGeometry, ShapeKind
    >>> s = Shape(SphereGeometry(center=(0.0, 0.0, 0.0), radius=1.0), color=(1.0, 0.0, 0.0))
    >>> s.kind is ShapeKind.SPHERE
    True
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

import numpy as np

from marchtrace.geometry.transform import Matrix4, as_matrix, identity

Vec3 = tuple[float, float, float]


class ShapeKind(IntEnum):
    """Discriminant of the shape union.

    The integer values are stored in the GPU-side tag field and used for
    dispatch in the distance and intersection oracles.
    """

    SPHERE = 0
    TRIANGLE = 1
    BOX = 2
    CYLINDER = 3
    PLANE = 4


# Shape kinds each integrator knows how to evaluate
MARCHING_KINDS = frozenset({ShapeKind.SPHERE, ShapeKind.TRIANGLE, ShapeKind.BOX, ShapeKind.CYLINDER})
TRACING_KINDS = frozenset({ShapeKind.SPHERE, ShapeKind.TRIANGLE, ShapeKind.PLANE})


def _as_vec3(value: Vec3, name: str) -> Vec3:
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    result = (float(value[0]), float(value[1]), float(value[2]))
    if not all(math.isfinite(c) for c in result):
        raise ValueError(f"{name} must be finite, got {result}")
    return result


def _require_positive(value: float, name: str) -> float:
    value = float(value)
    if not value > 0.0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def validate_color(color: Vec3) -> Vec3:
    """Check that a color has three components in [0, 1].

    Raises:
        ValueError: If any component is outside [0, 1].
    """
    rgb = _as_vec3(color, "color")
    for c in rgb:
        if c < 0.0 or c > 1.0:
            raise ValueError(f"Color components must be in [0, 1], got {rgb}")
    return rgb


@dataclass(frozen=True)
class SphereGeometry:
    """A sphere given by center and radius."""

    center: Vec3
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _as_vec3(self.center, "center"))
        object.__setattr__(self, "radius", _require_positive(self.radius, "radius"))


@dataclass(frozen=True)
class TriangleGeometry:
    """A triangle given by its three vertices.

    Zero-area triangles are accepted; both oracles treat them as misses.
    """

    vertex1: Vec3
    vertex2: Vec3
    vertex3: Vec3

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertex1", _as_vec3(self.vertex1, "vertex1"))
        object.__setattr__(self, "vertex2", _as_vec3(self.vertex2, "vertex2"))
        object.__setattr__(self, "vertex3", _as_vec3(self.vertex3, "vertex3"))


@dataclass(frozen=True)
class BoxGeometry:
    """An axis-aligned cube given by center and full edge length."""

    center: Vec3
    size: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _as_vec3(self.center, "center"))
        object.__setattr__(self, "size", _require_positive(self.size, "size"))


@dataclass(frozen=True)
class CylinderGeometry:
    """A vertical capped cylinder given by center, radius and full height."""

    center: Vec3
    radius: float
    height: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", _as_vec3(self.center, "center"))
        object.__setattr__(self, "radius", _require_positive(self.radius, "radius"))
        object.__setattr__(self, "height", _require_positive(self.height, "height"))


@dataclass(frozen=True)
class PlaneGeometry:
    """An infinite plane given by a point on it and its normal."""

    point: Vec3
    normal: Vec3

    def __post_init__(self) -> None:
        object.__setattr__(self, "point", _as_vec3(self.point, "point"))
        normal = _as_vec3(self.normal, "normal")
        if normal == (0.0, 0.0, 0.0):
            raise ValueError("Plane normal must be non-zero")
        object.__setattr__(self, "normal", normal)


Geometry = Union[SphereGeometry, TriangleGeometry, BoxGeometry, CylinderGeometry, PlaneGeometry]

_KIND_BY_GEOMETRY: dict[type, ShapeKind] = {
    SphereGeometry: ShapeKind.SPHERE,
    TriangleGeometry: ShapeKind.TRIANGLE,
    BoxGeometry: ShapeKind.BOX,
    CylinderGeometry: ShapeKind.CYLINDER,
    PlaneGeometry: ShapeKind.PLANE,
}


def kind_of(geometry: Geometry) -> ShapeKind:
    """Return the tag for a geometry object.

    Raises:
        TypeError: If geometry is not one of the supported variants.
    """
    try:
        return _KIND_BY_GEOMETRY[type(geometry)]
    except KeyError:
        raise TypeError(f"Unsupported geometry type: {type(geometry).__name__}") from None


@dataclass
class Shape:
    """A primitive in the scene.

    Attributes:
        geometry: The variant-specific parameters.
        color: RGB color in [0, 1].
        transform: 4x4 object-to-world matrix (identity by default). Only
            the tracing integrator applies it.
        name: Optional identifier used by ``parent`` links in scene files.
        children: Indices of child shapes in the owning scene. These are
            back-references for transform propagation, not ownership.
    """

    geometry: Geometry
    color: Vec3
    transform: Matrix4 = field(default_factory=identity)
    name: str | None = None
    children: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        kind_of(self.geometry)
        self.color = validate_color(self.color)
        self.transform = as_matrix(self.transform)

    @property
    def kind(self) -> ShapeKind:
        """The discriminant derived from the geometry type."""
        return kind_of(self.geometry)

    def copy(self) -> Shape:
        """Return an independent copy (transform and children duplicated)."""
        return Shape(
            geometry=self.geometry,
            color=self.color,
            transform=np.array(self.transform, copy=True),
            name=self.name,
            children=list(self.children),
        )
