"""Analytic ray-tracing integrator.

Every shape is intersected analytically (in its own local space, see
scene.oracle) and the nearest hit with a non-negative ray parameter wins.
The pixel takes that shape's flat stored color; there is no lighting and
no secondary ray. Rays that hit nothing return the black background.

The nearest-hit fold uses a strict comparison, so when two shapes report
exactly the same t the one earlier in scene order is kept. For distinct
distances the result does not depend on the order of the shapes.
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti

from marchtrace.core.config import FAR_DISTANCE
from marchtrace.core.ray import vec3
from marchtrace.scene.oracle import get_num_shapes, get_shape_color, intersect_shape

# Background color for rays that miss every shape
BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)


@ti.dataclass
class TraceResult:
    """Nearest hit of a traced ray.

    Attributes:
        hit: 1 if any shape was hit, 0 otherwise.
        shape_index: Index of the nearest shape, -1 on a miss.
        t: World-space ray parameter of the hit.
        normal: World-space unit normal at the hit.
    """

    hit: ti.i32
    shape_index: ti.i32
    t: ti.f32
    normal: vec3


@ti.func
def trace(origin: vec3, direction: vec3) -> TraceResult:
    """Find the nearest shape along a ray.

    Args:
        origin: The ray origin in world space.
        direction: The ray direction in world space.

    Returns:
        The nearest hit, or a miss with shape_index -1.
    """
    closest_t = FAR_DISTANCE
    closest_index = -1
    closest_normal = vec3(0.0, 0.0, 0.0)

    for i in range(get_num_shapes()):
        rec = intersect_shape(i, origin, direction)
        if rec.hit == 1 and rec.t >= 0.0 and rec.t < closest_t:
            closest_t = rec.t
            closest_index = i
            closest_normal = rec.normal

    did_hit = 0
    if closest_index >= 0:
        did_hit = 1

    return TraceResult(hit=did_hit, shape_index=closest_index, t=closest_t, normal=closest_normal)


@ti.func
def trace_result_color(result: TraceResult) -> vec3:
    """Flat color of the nearest hit, or the background on a miss."""
    color = BACKGROUND_COLOR
    if result.hit == 1:
        color = get_shape_color(result.shape_index)
    return color


@ti.func
def trace_color(origin: vec3, direction: vec3) -> vec3:
    """Color seen along a ray by the tracing integrator."""
    return trace_result_color(trace(origin, direction))


# =============================================================================
# Python-side probe
# =============================================================================


@dataclass(frozen=True)
class TraceOutcome:
    """Python view of a traced ray, returned by trace_ray()."""

    hit: bool
    shape_index: int
    t: float
    normal: tuple[float, float, float]
    color: tuple[float, float, float]


_probe_result = TraceResult.field(shape=())
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_probe(origin: vec3, direction: vec3):
    # Single-iteration outer loop keeps the shape loop in trace() serial
    for _ in range(1):
        result = trace(origin, direction)
        _probe_result[None] = result
        _probe_color[None] = trace_result_color(result)


def trace_ray(origin, direction) -> TraceOutcome:
    """Trace a single ray from Python.

    The direction is normalized first, so ``t`` is a world-space distance.

    Args:
        origin: The ray origin (x, y, z).
        direction: The ray direction (x, y, z), non-zero.

    Returns:
        A TraceOutcome with the nearest hit and its flat color.
    """
    d = np.asarray(direction, dtype=np.float64)
    d = d / np.linalg.norm(d)
    _trace_probe(vec3(*origin), vec3(*d))

    result = _probe_result[None]
    normal = result.normal
    color = _probe_color[None]
    return TraceOutcome(
        hit=bool(result.hit),
        shape_index=int(result.shape_index),
        t=float(result.t),
        normal=(float(normal[0]), float(normal[1]), float(normal[2])),
        color=(float(color[0]), float(color[1]), float(color[2])),
    )
