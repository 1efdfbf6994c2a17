"""Lighting module: one point light, Phong shading and hard shadows."""

from .phong import (
    DEFAULT_LIGHT,
    PointLight,
    get_light,
    in_shadow,
    is_in_shadow,
    phong_shade,
    setup_light,
    shade_surface,
    shade_surface_point,
    unshadowed_color,
)

__all__ = [
    "PointLight",
    "DEFAULT_LIGHT",
    "setup_light",
    "get_light",
    "phong_shade",
    "in_shadow",
    "shade_surface",
    "shade_surface_point",
    "unshadowed_color",
    "is_in_shadow",
]
