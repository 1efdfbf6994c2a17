"""Marching budget and tolerance configuration.

The sphere-marching integrator and the shadow test are driven by four
numbers: the iteration budget, the distance budget, the hit epsilon and the
shadow step. They are described by the MarchSettings dataclass on the Python
side and mirrored into 0-d Taichi fields so kernels can read them without
recompiling when they change.

Example:
    >>> from marchtrace.core.config import MarchSettings, configure_marching
    >>> configure_marching(MarchSettings(max_iterations=200))
"""

from dataclasses import dataclass

import taichi as ti

# Distance reported for shapes a given oracle does not support, and for
# degenerate geometry. Large enough that it never wins a minimum.
FAR_DISTANCE = 1e10

# Tolerance for determinants and near-parallel tests in analytic intersection
EPSILON = 1e-6


@dataclass(frozen=True)
class MarchSettings:
    """Budgets and tolerances for sphere marching.

    Attributes:
        max_iterations: Number of marching steps before giving up on a ray.
        max_distance: Distance along the ray before giving up.
        hit_epsilon: A shape closer than this is considered hit. Also used
            by the shadow test to detect occluders.
        shadow_step: Fixed step length of the shadow probe toward the light.
    """

    max_iterations: int = 100
    max_distance: float = 100.0
    hit_epsilon: float = 1e-3
    shadow_step: float = 1e-3

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if self.max_distance <= 0.0:
            raise ValueError(f"max_distance must be positive, got {self.max_distance}")
        if self.hit_epsilon <= 0.0:
            raise ValueError(f"hit_epsilon must be positive, got {self.hit_epsilon}")
        if self.shadow_step <= 0.0:
            raise ValueError(f"shadow_step must be positive, got {self.shadow_step}")


DEFAULT_MARCH_SETTINGS = MarchSettings()

# =============================================================================
# Taichi Fields for Marching State (GPU-accessible)
# =============================================================================

_max_iterations = ti.field(dtype=ti.i32, shape=())
_max_distance = ti.field(dtype=ti.f32, shape=())
_hit_epsilon = ti.field(dtype=ti.f32, shape=())
_shadow_step = ti.field(dtype=ti.f32, shape=())


def configure_marching(settings: MarchSettings = DEFAULT_MARCH_SETTINGS) -> None:
    """Copy marching settings into the Taichi fields read by the kernels.

    Args:
        settings: The settings to apply. Defaults to DEFAULT_MARCH_SETTINGS.
    """
    _max_iterations[None] = settings.max_iterations
    _max_distance[None] = settings.max_distance
    _hit_epsilon[None] = settings.hit_epsilon
    _shadow_step[None] = settings.shadow_step


def get_march_settings() -> MarchSettings:
    """Read the currently configured settings back from the Taichi fields."""
    return MarchSettings(
        max_iterations=int(_max_iterations[None]),
        max_distance=float(_max_distance[None]),
        hit_epsilon=float(_hit_epsilon[None]),
        shadow_step=float(_shadow_step[None]),
    )


@ti.func
def get_max_iterations() -> ti.i32:
    return _max_iterations[None]


@ti.func
def get_max_distance() -> ti.f32:
    return _max_distance[None]


@ti.func
def get_hit_epsilon() -> ti.f32:
    return _hit_epsilon[None]


@ti.func
def get_shadow_step() -> ti.f32:
    return _shadow_step[None]
