"""Local Phong lighting with hard shadows for the marching integrator.

A single point light illuminates the scene. The shaded color of a surface
point is

    clamp(ambient + diffuse * shape_color * light_color
          + specular * specular_color, 0, 1)

with diffuse = max(0, n.L) and specular = max(0, V.reflect(-L, n))^shininess,
where L points toward the light and V toward the camera.

The shadow test marches from the surface point toward the light in fixed
steps of the configured shadow step. At every step the distance to every
other shape is evaluated; if any falls below the hit epsilon the point is
in shadow and its color is scaled by the shadow attenuation. The cost is
O(steps * shapes) per shaded pixel.

Example:
    >>> from marchtrace.lighting.phong import PointLight, setup_light
    >>> setup_light(PointLight(position=(-5.0, -5.0, 5.0)))
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from marchtrace.camera.view import get_camera_position
from marchtrace.core.config import get_hit_epsilon, get_shadow_step
from marchtrace.core.ray import reflect, vec3
from marchtrace.scene.oracle import (
    get_num_shapes,
    get_shape_color,
    shape_distance,
    shape_normal,
)
from marchtrace.scene.storage import check_shape_index


@dataclass(frozen=True)
class PointLight:
    """Point light and material constants of the lighting model.

    Attributes:
        position: Light position in world space.
        color: Light color multiplied into the diffuse term.
        ambient: Ambient color added to every lit point.
        specular_color: Color of the specular highlight.
        shininess: Specular exponent.
        shadow_attenuation: Factor applied to the color of shadowed points.
    """

    position: tuple[float, float, float] = (-5.0, -5.0, 5.0)
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    ambient: tuple[float, float, float] = (0.1, 0.1, 0.1)
    specular_color: tuple[float, float, float] = (0.5, 0.5, 0.5)
    shininess: float = 10.0
    shadow_attenuation: float = 0.2

    def __post_init__(self) -> None:
        if self.shininess < 0.0:
            raise ValueError(f"shininess must be non-negative, got {self.shininess}")
        if not 0.0 <= self.shadow_attenuation <= 1.0:
            raise ValueError(
                f"shadow_attenuation must be in [0, 1], got {self.shadow_attenuation}"
            )


DEFAULT_LIGHT = PointLight()

# =============================================================================
# Light Configuration (GPU-accessible)
# =============================================================================

_light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_light_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_ambient_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_specular_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_shininess = ti.field(dtype=ti.f32, shape=())
_shadow_attenuation = ti.field(dtype=ti.f32, shape=())


def setup_light(light: PointLight = DEFAULT_LIGHT) -> None:
    """Copy the light configuration into the Taichi fields.

    Args:
        light: The light to use. Defaults to DEFAULT_LIGHT.
    """
    _light_position[None] = list(light.position)
    _light_color[None] = list(light.color)
    _ambient_color[None] = list(light.ambient)
    _specular_color[None] = list(light.specular_color)
    _shininess[None] = light.shininess
    _shadow_attenuation[None] = light.shadow_attenuation


def get_light() -> PointLight:
    """Read the current light configuration back from the Taichi fields."""

    def _vec(field) -> tuple[float, float, float]:
        v = field[None]
        return (float(v[0]), float(v[1]), float(v[2]))

    return PointLight(
        position=_vec(_light_position),
        color=_vec(_light_color),
        ambient=_vec(_ambient_color),
        specular_color=_vec(_specular_color),
        shininess=float(_shininess[None]),
        shadow_attenuation=float(_shadow_attenuation[None]),
    )


# =============================================================================
# Shading (Taichi functions)
# =============================================================================


@ti.func
def phong_shade(point: vec3, normal: vec3, color: vec3) -> vec3:
    """Unshadowed Phong color of a surface point.

    Args:
        point: The surface point.
        normal: The unit shading normal at the point.
        color: The shape color.

    Returns:
        The shaded color, clamped to [0, 1].
    """
    light_direction = tm.normalize(_light_position[None] - point)
    view_direction = tm.normalize(get_camera_position() - point)

    diffuse = ti.max(0.0, tm.dot(normal, light_direction))
    reflection = reflect(-light_direction, normal)
    specular = ti.pow(ti.max(0.0, tm.dot(view_direction, reflection)), _shininess[None])

    shaded = (
        _ambient_color[None]
        + diffuse * color * _light_color[None]
        + specular * _specular_color[None]
    )
    return tm.clamp(shaded, 0.0, 1.0)


@ti.func
def in_shadow(point: vec3, exclude_index: ti.i32) -> ti.i32:
    """Whether another shape blocks the light from a surface point.

    Args:
        point: The surface point.
        exclude_index: The shape the point lies on; it never shadows itself.

    Returns:
        1 if shadowed, 0 otherwise.
    """
    to_light = _light_position[None] - point
    light_distance = tm.length(to_light)
    direction = to_light / light_distance

    step = get_shadow_step()
    epsilon = get_hit_epsilon()
    n = get_num_shapes()

    shadowed = 0
    t = step
    while t < light_distance and shadowed == 0:
        probe = point + t * direction
        for j in range(n):
            if j != exclude_index and shadowed == 0:
                if shape_distance(j, probe) < epsilon:
                    shadowed = 1
        t += step

    return shadowed


@ti.func
def shade_surface(i: ti.i32, point: vec3) -> vec3:
    """Final marching color of shape i at a hit point, shadow included."""
    color = phong_shade(point, shape_normal(i, point), get_shape_color(i))
    if in_shadow(point, i) == 1:
        color = color * _shadow_attenuation[None]
    return color


# =============================================================================
# Python-side probes
# =============================================================================


@ti.kernel
def _shade_kernel(i: ti.i32, point: vec3) -> vec3:
    return shade_surface(i, point)


@ti.kernel
def _phong_kernel(i: ti.i32, point: vec3) -> vec3:
    return phong_shade(point, shape_normal(i, point), get_shape_color(i))


@ti.kernel
def _shadow_kernel(i: ti.i32, point: vec3) -> ti.i32:
    return in_shadow(point, i)


def _as_tuple(v) -> tuple[float, float, float]:
    return (float(v[0]), float(v[1]), float(v[2]))


def shade_surface_point(shape_index: int, point) -> tuple[float, float, float]:
    """Shade a point of a shape from Python, shadow test included.

    Requires the camera and light to be set up.
    """
    check_shape_index(shape_index)
    return _as_tuple(_shade_kernel(shape_index, vec3(*point)))


def unshadowed_color(shape_index: int, point) -> tuple[float, float, float]:
    """Phong color of a point of a shape from Python, ignoring shadows."""
    check_shape_index(shape_index)
    return _as_tuple(_phong_kernel(shape_index, vec3(*point)))


def is_in_shadow(shape_index: int, point) -> bool:
    """Run the shadow test for a point of a shape from Python."""
    check_shape_index(shape_index)
    return bool(_shadow_kernel(shape_index, vec3(*point)))
