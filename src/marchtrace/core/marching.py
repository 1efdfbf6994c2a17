"""Sphere-marching integrator.

A ray is advanced in steps bounded by the smallest distance to any shape
until it reaches a surface or runs out of budget. The loop is an explicit
state machine:

    MARCHING -> HIT
             -> EXHAUSTED_ITERATIONS  (iteration budget spent)
             -> EXHAUSTED_DISTANCE    (distance budget spent)

Each step evaluates the shapes in scene order at the current point. The
first shape closer than the hit epsilon is the hit, even if a shape later
in the order is geometrically nearer. Otherwise the march advances by the
minimum distance (first seen wins on ties) and the iteration count grows.

HIT pixels are shaded by the Phong model with shadows; exhausted rays
return the black background.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from marchtrace.core.marching import march_ray
    >>> outcome = march_ray((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
    >>> outcome.state
    <MarchState.HIT: 1>
"""

from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import taichi as ti

from marchtrace.core.config import (
    FAR_DISTANCE,
    get_hit_epsilon,
    get_max_distance,
    get_max_iterations,
)
from marchtrace.core.ray import vec3
from marchtrace.lighting.phong import shade_surface
from marchtrace.scene.oracle import get_num_shapes, shape_distance

# Background color for rays that never reach a surface
BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)


class MarchState(IntEnum):
    """States of the marching loop."""

    MARCHING = 0
    HIT = 1
    EXHAUSTED_ITERATIONS = 2
    EXHAUSTED_DISTANCE = 3


@ti.dataclass
class MarchResult:
    """Terminal state of a marched ray.

    Attributes:
        state: A MarchState value (never MARCHING once returned).
        shape_index: Index of the hit shape, -1 unless state is HIT.
        iterations: Number of advancing steps taken.
        traveled: Distance marched along the ray.
        point: The last evaluated point (the hit point for HIT).
    """

    state: ti.i32
    shape_index: ti.i32
    iterations: ti.i32
    traveled: ti.f32
    point: vec3


@ti.func
def march(origin: vec3, direction: vec3) -> MarchResult:
    """March a ray through the scene until it hits or exhausts its budget.

    Args:
        origin: The ray origin.
        direction: The unit ray direction.

    Returns:
        The terminal MarchResult.
    """
    max_iterations = get_max_iterations()
    max_distance = get_max_distance()
    epsilon = get_hit_epsilon()
    n = get_num_shapes()

    state = int(MarchState.MARCHING)
    hit_index = -1
    iterations = 0
    traveled = 0.0
    point = origin

    while state == int(MarchState.MARCHING):
        if iterations >= max_iterations:
            state = int(MarchState.EXHAUSTED_ITERATIONS)
        elif traveled >= max_distance:
            state = int(MarchState.EXHAUSTED_DISTANCE)
        else:
            point = origin + traveled * direction
            min_distance = FAR_DISTANCE
            for i in range(n):
                if hit_index < 0:
                    d = shape_distance(i, point)
                    if d < epsilon:
                        hit_index = i
                    elif d < min_distance:
                        min_distance = d

            if hit_index >= 0:
                state = int(MarchState.HIT)
            else:
                traveled += min_distance
                iterations += 1

    return MarchResult(
        state=state,
        shape_index=hit_index,
        iterations=iterations,
        traveled=traveled,
        point=point,
    )


@ti.func
def march_result_color(result: MarchResult) -> vec3:
    """Shaded color for a finished march; background unless it hit."""
    color = BACKGROUND_COLOR
    if result.state == int(MarchState.HIT):
        color = shade_surface(result.shape_index, result.point)
    return color


@ti.func
def march_color(origin: vec3, direction: vec3) -> vec3:
    """Color seen along a ray by the marching integrator."""
    return march_result_color(march(origin, direction))


# =============================================================================
# Python-side probe
# =============================================================================


@dataclass(frozen=True)
class MarchOutcome:
    """Python view of a marched ray, returned by march_ray()."""

    state: MarchState
    shape_index: int
    iterations: int
    traveled: float
    point: tuple[float, float, float]
    color: tuple[float, float, float]


_probe_result = MarchResult.field(shape=())
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _march_probe(origin: vec3, direction: vec3):
    result = march(origin, direction)
    _probe_result[None] = result
    _probe_color[None] = march_result_color(result)


def march_ray(origin, direction) -> MarchOutcome:
    """March a single ray from Python.

    The direction is normalized before marching. Uses the current scene,
    marching settings, light and camera (the camera position drives the
    specular term).

    Args:
        origin: The ray origin (x, y, z).
        direction: The ray direction (x, y, z), non-zero.

    Returns:
        A MarchOutcome with the terminal state and the shaded color.
    """
    d = np.asarray(direction, dtype=np.float64)
    d = d / np.linalg.norm(d)
    _march_probe(vec3(*origin), vec3(*d))

    result = _probe_result[None]
    point = result.point
    color = _probe_color[None]
    return MarchOutcome(
        state=MarchState(int(result.state)),
        shape_index=int(result.shape_index),
        iterations=int(result.iterations),
        traveled=float(result.traveled),
        point=(float(point[0]), float(point[1]), float(point[2])),
        color=(float(color[0]), float(color[1]), float(color[2])),
    )
