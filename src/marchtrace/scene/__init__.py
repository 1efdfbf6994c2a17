"""Scene module: shapes, their GPU storage and scene management.

Components:
    shapes: The shape tagged union (ShapeKind + per-variant geometry)
    storage: Taichi field storage (tag array plus per-kind arrays)
    oracle: Distance, normal and intersection dispatch over the tag
    manager: SceneManager owning the shapes and their hierarchy
    loader: Scene file parser
"""

from .loader import (
    SceneDescription,
    SceneError,
    SceneFileError,
    SceneParseError,
    load_scene,
    parse_scene,
)
from .manager import SceneManager
from .shapes import (
    MARCHING_KINDS,
    TRACING_KINDS,
    BoxGeometry,
    CylinderGeometry,
    PlaneGeometry,
    Shape,
    ShapeKind,
    SphereGeometry,
    TriangleGeometry,
)
from .storage import MAX_SHAPES, clear_scene, get_shape_count

__all__ = [
    "ShapeKind",
    "Shape",
    "SphereGeometry",
    "TriangleGeometry",
    "BoxGeometry",
    "CylinderGeometry",
    "PlaneGeometry",
    "MARCHING_KINDS",
    "TRACING_KINDS",
    "MAX_SHAPES",
    "clear_scene",
    "get_shape_count",
    "SceneManager",
    "SceneDescription",
    "SceneError",
    "SceneFileError",
    "SceneParseError",
    "load_scene",
    "parse_scene",
]
