"""Core rendering module.

Components:
    ray: Ray data structure and affine helpers
    config: Marching budgets and tolerances
    marching: Sphere-marching integrator (MARCHING/HIT/EXHAUSTED states)
    tracing: Analytic nearest-hit integrator
    renderer: Per-pixel loop, pixel buffer and the Renderer class

The per-pixel work runs in Taichi kernels parallelised over the image.
"""

from .config import (
    DEFAULT_MARCH_SETTINGS,
    EPSILON,
    FAR_DISTANCE,
    MarchSettings,
    configure_marching,
    get_march_settings,
)
from .ray import (
    Ray,
    make_ray,
    reflect,
    transform_direction,
    transform_point,
    vec3,
    vec4,
)

# Note: marching, tracing and renderer are NOT imported here to avoid circular imports.
# Import directly from marchtrace.core.renderer when needed, e.g.:
#   from marchtrace.core.renderer import Renderer, RenderMode

__all__ = [
    "Ray",
    "make_ray",
    "vec3",
    "vec4",
    "reflect",
    "transform_point",
    "transform_direction",
    "MarchSettings",
    "DEFAULT_MARCH_SETTINGS",
    "configure_marching",
    "get_march_settings",
    "FAR_DISTANCE",
    "EPSILON",
]
