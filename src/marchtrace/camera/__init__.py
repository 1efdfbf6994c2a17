"""Camera module for view and ray generation.

Components:
    view: Look-at camera driven by an inverse view matrix

Pixel (x, y) maps to unnormalized device coordinates
    ndc_x = aspect * (2x / width - 1)
    ndc_y = 1 - 2y / height
which are taken through the inverse view matrix; y = 0 is the top row.
"""

from .view import (
    ViewCamera,
    generate_ray,
    get_camera_info,
    get_camera_position,
    get_ray_direction,
    is_camera_initialized,
    look_at_matrix,
    setup_camera,
)

__all__ = [
    "ViewCamera",
    "look_at_matrix",
    "setup_camera",
    "is_camera_initialized",
    "generate_ray",
    "get_camera_position",
    "get_ray_direction",
    "get_camera_info",
]
