"""Look-at camera driven by an inverse view matrix.

The camera is described by a position, a target and an up vector. From
these a right-handed look-at view matrix is built once per render pass
(Python side, NumPy), and its inverse is stored in a Taichi field.

There is no separate projection matrix. A pixel (x, y) of a width x height
image is mapped to unnormalized device coordinates

    ndc_x = aspect * (2x / width - 1)
    ndc_y = 1 - 2y / height

and the clip-space point (ndc_x, ndc_y, -1, 1) is taken through the
inverse view matrix. The ray direction is the negated, normalized xyz of
the result and the ray origin is the camera position. Pixel y = 0 is the
top row of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from marchtrace.camera.view import ViewCamera, setup_camera, generate_ray
    >>>
    >>> camera = ViewCamera(position=(0.0, 0.0, 5.0), target=(0.0, 0.0, 0.0))
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = generate_ray(2, 2, 4, 4)  # Ray through the image center
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from marchtrace.core.ray import Ray, make_ray, vec3, vec4
from marchtrace.geometry.transform import Matrix4, inverse

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class ViewCamera:
    """Configuration for the look-at camera.

    Attributes:
        position: Camera position in world space (x, y, z).
        target: Point the camera is looking at in world space (x, y, z).
        up: Up direction for camera orientation.
    """

    position: tuple[float, float, float]
    target: tuple[float, float, float]
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)


def look_at_matrix(
    position: tuple[float, float, float],
    target: tuple[float, float, float],
    up: tuple[float, float, float],
) -> Matrix4:
    """Build a right-handed look-at view matrix (world to camera).

    The camera looks down its local -Z axis. Rows of the rotation part are
    the right, up and backward directions.

    Raises:
        ValueError: If position equals target, or up is parallel to the
            viewing direction.
    """
    eye = np.asarray(position, dtype=np.float64)
    center = np.asarray(target, dtype=np.float64)
    up_vec = np.asarray(up, dtype=np.float64)

    forward = center - eye
    forward_len = np.linalg.norm(forward)
    if forward_len == 0.0:
        raise ValueError("Camera position and target must differ")
    f = forward / forward_len

    side = np.cross(f, up_vec)
    side_len = np.linalg.norm(side)
    if side_len < 1e-12:
        raise ValueError("Camera up vector must not be parallel to the view direction")
    s = side / side_len
    u = np.cross(s, f)

    view = np.eye(4, dtype=np.float64)
    view[0, :3] = s
    view[1, :3] = u
    view[2, :3] = -f
    view[0, 3] = -np.dot(s, eye)
    view[1, 3] = -np.dot(u, eye)
    view[2, 3] = np.dot(f, eye)
    return view.astype(np.float32)


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_inverse_view = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
_camera_initialized = ti.field(dtype=ti.i32, shape=())


def setup_camera(camera: ViewCamera) -> None:
    """Derive the view matrix and store its inverse for ray generation.

    Must be called before rendering, and again whenever the camera changes.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the camera configuration is degenerate.
    """
    view = look_at_matrix(camera.position, camera.target, camera.up)
    _inverse_view[None] = inverse(view).tolist()
    _camera_position[None] = [camera.position[0], camera.position[1], camera.position[2]]
    _camera_initialized[None] = 1


def is_camera_initialized() -> bool:
    """Check whether setup_camera() has been called."""
    return bool(_camera_initialized[None])


def reset_camera() -> None:
    """Forget the current camera (used between tests and scene reloads)."""
    _camera_initialized[None] = 0


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def generate_ray(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through pixel (x, y).

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera position with a normalized direction.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    aspect = w / h

    ndc_x = aspect * (2.0 * ti.cast(x, ti.f32) / w - 1.0)
    ndc_y = 1.0 - 2.0 * ti.cast(y, ti.f32) / h

    eye = _inverse_view[None] @ vec4(ndc_x, ndc_y, -1.0, 1.0)
    direction = -tm.normalize(vec3(eye[0], eye[1], eye[2]))

    return make_ray(_camera_position[None], direction)


@ti.func
def get_camera_position() -> vec3:
    """Get the camera position in world space."""
    return _camera_position[None]


@ti.kernel
def _probe_ray(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    return generate_ray(x, y, width, height).direction


def get_ray_direction(x: int, y: int, width: int, height: int) -> tuple[float, float, float]:
    """Compute the primary ray direction of one pixel from Python.

    Useful for tests and for checking a camera setup.

    Raises:
        RuntimeError: If the camera has not been set up.
    """
    if not is_camera_initialized():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")
    d = _probe_ray(x, y, width, height)
    return (float(d[0]), float(d[1]), float(d[2]))


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, object]:
    """Get the current camera state for debugging.

    Returns:
        Dictionary with the camera position and the inverse view matrix.
    """
    pos = _camera_position[None]
    return {
        "position": (float(pos[0]), float(pos[1]), float(pos[2])),
        "inverse_view": np.asarray(_inverse_view[None].to_numpy(), dtype=np.float32),
    }
