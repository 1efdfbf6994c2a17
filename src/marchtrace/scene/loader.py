"""Scene file parser.

A scene file is a sequence of commands, one per line:

    image <width> <height>
    camera_position <x> <y> <z>
    camera_target   <x> <y> <z>
    camera_up       <x> <y> <z>
    sphere   <cx> <cy> <cz> <radius> <r> <g> <b>
    triangle <x1> <y1> <z1> <x2> <y2> <z2> <x3> <y3> <z3> <r> <g> <b>
    box      <cx> <cy> <cz> <size> <r> <g> <b>
    cylinder <cx> <cy> <cz> <radius> <height> <r> <g> <b>
    plane    <px> <py> <pz> <nx> <ny> <nz> <r> <g> <b>
    name <identifier>
    parent <identifier>
    transform <16 numbers>

``name``, ``parent`` and ``transform`` apply to the most recently added
shape. ``parent`` attaches that shape as a child of a previously named
shape; an unknown name is ignored. ``transform`` lists the 4x4 matrix row
by row, so the translation sits in entries 4, 8 and 12. Blank lines and
everything after ``#`` are skipped, and unknown commands are ignored.

Example:
    >>> from marchtrace.scene.loader import parse_scene
    >>> description = parse_scene('''
    ... image 64 48
    ... camera_position 0 0 5
    ... camera_target 0 0 0
    ... sphere 0 0 0 1 1 0 0
    ... ''')
    >>> description.width, len(description.shapes)
    (64, 1)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from marchtrace.camera.view import ViewCamera, look_at_matrix
from marchtrace.geometry.transform import as_matrix, from_rows
from marchtrace.scene.shapes import (
    BoxGeometry,
    CylinderGeometry,
    Geometry,
    PlaneGeometry,
    Shape,
    SphereGeometry,
    TriangleGeometry,
)


class SceneError(ValueError):
    """Base class for scene input errors."""


class SceneFileError(SceneError):
    """The scene file could not be opened or read."""


class SceneParseError(SceneError):
    """A line of the scene file is malformed.

    Attributes:
        line_number: 1-based line number of the offending line (0 when the
            problem concerns the file as a whole).
    """

    def __init__(self, line_number: int, message: str) -> None:
        self.line_number = line_number
        prefix = f"line {line_number}: " if line_number > 0 else ""
        super().__init__(f"{prefix}{message}")


@dataclass
class SceneDescription:
    """Everything a scene file describes.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        camera: The camera configuration.
        shapes: Shapes in file order, names and child indices resolved.
    """

    width: int
    height: int
    camera: ViewCamera
    shapes: list[Shape] = field(default_factory=list)

    @property
    def names(self) -> dict[str, int]:
        """Map of shape names to indices (a later duplicate wins)."""
        return {s.name: i for i, s in enumerate(self.shapes) if s.name is not None}


def _floats(line_number: int, command: str, args: list[str], count: int) -> list[float]:
    if len(args) != count:
        raise SceneParseError(
            line_number, f"'{command}' expects {count} values, got {len(args)}"
        )
    try:
        return [float(a) for a in args]
    except ValueError as e:
        raise SceneParseError(line_number, f"'{command}': {e}") from None


def _sphere(v: list[float]) -> tuple[Geometry, list[float]]:
    return SphereGeometry(center=tuple(v[0:3]), radius=v[3]), v[4:7]


def _triangle(v: list[float]) -> tuple[Geometry, list[float]]:
    return TriangleGeometry(tuple(v[0:3]), tuple(v[3:6]), tuple(v[6:9])), v[9:12]


def _box(v: list[float]) -> tuple[Geometry, list[float]]:
    return BoxGeometry(center=tuple(v[0:3]), size=v[3]), v[4:7]


def _cylinder(v: list[float]) -> tuple[Geometry, list[float]]:
    return CylinderGeometry(center=tuple(v[0:3]), radius=v[3], height=v[4]), v[5:8]


def _plane(v: list[float]) -> tuple[Geometry, list[float]]:
    return PlaneGeometry(point=tuple(v[0:3]), normal=tuple(v[3:6])), v[6:9]


# Shape command -> (number of values, builder)
_SHAPE_COMMANDS: dict[str, tuple[int, Callable[[list[float]], tuple[Geometry, list[float]]]]] = {
    "sphere": (7, _sphere),
    "triangle": (12, _triangle),
    "box": (7, _box),
    "cylinder": (8, _cylinder),
    "plane": (9, _plane),
}


def parse_scene(text: str) -> SceneDescription:
    """Parse the text of a scene file.

    Args:
        text: The scene file contents.

    Returns:
        The parsed SceneDescription.

    Raises:
        SceneParseError: If a line is malformed, a value is invalid, or a
            required command (image, camera_position, camera_target) is
            missing.
    """
    width = height = None
    position = target = None
    up = (0.0, 1.0, 0.0)
    shapes: list[Shape] = []
    names: dict[str, int] = {}

    for line_number, raw in enumerate(text.splitlines(), start=1):
        tokens = raw.split("#", 1)[0].split()
        if not tokens:
            continue
        command, args = tokens[0], tokens[1:]

        if command == "image":
            if len(args) != 2:
                raise SceneParseError(line_number, f"'image' expects 2 values, got {len(args)}")
            try:
                width, height = int(args[0]), int(args[1])
            except ValueError as e:
                raise SceneParseError(line_number, f"'image': {e}") from None
            if width < 1 or height < 1:
                raise SceneParseError(line_number, f"image size must be positive, got {width}x{height}")

        elif command == "camera_position":
            position = tuple(_floats(line_number, command, args, 3))
        elif command == "camera_target":
            target = tuple(_floats(line_number, command, args, 3))
        elif command == "camera_up":
            up = tuple(_floats(line_number, command, args, 3))

        elif command in _SHAPE_COMMANDS:
            count, build = _SHAPE_COMMANDS[command]
            values = _floats(line_number, command, args, count)
            try:
                geometry, color = build(values)
                shapes.append(Shape(geometry=geometry, color=tuple(color)))
            except ValueError as e:
                raise SceneParseError(line_number, f"'{command}': {e}") from None

        elif command in ("name", "parent", "transform"):
            if not shapes:
                raise SceneParseError(line_number, f"'{command}' before any shape")
            current = len(shapes) - 1

            if command == "name":
                if len(args) != 1:
                    raise SceneParseError(line_number, "'name' expects one identifier")
                shapes[current].name = args[0]
                names[args[0]] = current
            elif command == "parent":
                if len(args) != 1:
                    raise SceneParseError(line_number, "'parent' expects one identifier")
                parent = names.get(args[0])
                if parent is not None and parent != current:
                    if current not in shapes[parent].children:
                        shapes[parent].children.append(current)
            else:
                values = _floats(line_number, command, args, 16)
                try:
                    shapes[current].transform = as_matrix(from_rows(values))
                except ValueError as e:
                    raise SceneParseError(line_number, f"'transform': {e}") from None

        # Unknown commands are ignored

    if width is None or height is None:
        raise SceneParseError(0, "missing 'image' command")
    if position is None:
        raise SceneParseError(0, "missing 'camera_position' command")
    if target is None:
        raise SceneParseError(0, "missing 'camera_target' command")
    try:
        look_at_matrix(position, target, up)
    except ValueError as e:
        raise SceneParseError(0, f"invalid camera: {e}") from None

    return SceneDescription(
        width=width,
        height=height,
        camera=ViewCamera(position=position, target=target, up=up),
        shapes=shapes,
    )


def load_scene(path: str | Path) -> SceneDescription:
    """Read and parse a scene file.

    Raises:
        SceneFileError: If the file cannot be read.
        SceneParseError: If its contents are malformed.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SceneFileError(f"Could not open scene file '{path}': {e}") from e
    except UnicodeDecodeError as e:
        raise SceneFileError(f"Scene file '{path}' is not valid UTF-8: {e}") from e
    return parse_scene(text)
