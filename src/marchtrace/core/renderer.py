"""Renderer loop: one integrator per pass over every pixel.

For each pixel (x, y) the camera ray is built, exactly one integrator is
run (fixed for the whole pass), and the resulting color is written to an
8-bit RGB buffer as uint8(clamp(color, 0, 1) * 255), truncating. The pixel
loop is a single parallel Taichi kernel: pixels share no mutable state.

The buffer is preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT so that
changing the image size never triggers kernel recompilation. It is indexed
[x, y] with y = 0 at the top of the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from marchtrace.camera.view import ViewCamera
    >>> from marchtrace.core.renderer import Renderer, RenderMode
    >>>
    >>> renderer = Renderer(64, 64, ViewCamera((0.0, 0.0, 5.0), (0.0, 0.0, 0.0)))
    >>> renderer.render()
    >>> image = renderer.get_image_uint8()  # (64, 64, 3) uint8
"""

import time
from enum import Enum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from marchtrace.camera.view import ViewCamera, generate_ray, is_camera_initialized, setup_camera
from marchtrace.core.config import DEFAULT_MARCH_SETTINGS, MarchSettings, configure_marching
from marchtrace.core.marching import march_color
from marchtrace.core.tracing import trace_color
from marchtrace.core.ray import vec3
from marchtrace.lighting.phong import DEFAULT_LIGHT, PointLight, setup_light


class RenderMode(str, Enum):
    """Integrator used for a render pass."""

    MARCH = "march"
    TRACE = "trace"


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# 8-bit RGB pixel buffer, indexed [x, y]
_pixels = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the pixel buffer.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is out of range.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Fill the pixel buffer with the black background."""
    _pixels.fill(0)


def reset_render_target() -> None:
    """Forget the active image size (used between tests)."""
    _render_target_initialized[None] = 0
    _image_width[None] = 0
    _image_height[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_ready() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")
    if not is_camera_initialized():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def _store_pixel(x: ti.i32, y: ti.i32, color: vec3):
    """Quantize a color to 8 bits per channel (truncating) and store it."""
    scaled = tm.clamp(color, 0.0, 1.0) * 255.0
    _pixels[x, y] = ti.cast(scaled, ti.u8)


@ti.kernel
def _render_marching(width: ti.i32, height: ti.i32):
    for x, y in ti.ndrange(width, height):
        ray = generate_ray(x, y, width, height)
        _store_pixel(x, y, march_color(ray.origin, ray.direction))


@ti.kernel
def _render_tracing(width: ti.i32, height: ti.i32):
    for x, y in ti.ndrange(width, height):
        ray = generate_ray(x, y, width, height)
        _store_pixel(x, y, trace_color(ray.origin, ray.direction))


def render_frame(mode: RenderMode = RenderMode.MARCH) -> None:
    """Render one full image with the given integrator.

    The call returns after every pixel has been written.

    Args:
        mode: RenderMode.MARCH or RenderMode.TRACE (or their string values).

    Raises:
        RuntimeError: If the render target or camera has not been set up.
        ValueError: If mode is not a valid RenderMode.
    """
    _check_ready()
    mode = RenderMode(mode)
    width, height = get_image_dimensions()

    if mode is RenderMode.MARCH:
        _render_marching(width, height)
    else:
        _render_tracing(width, height)
    ti.sync()


def get_pixels_numpy() -> npt.NDArray[np.uint8]:
    """Copy the active region of the pixel buffer to NumPy.

    Returns:
        Array of shape (height, width, 3), dtype uint8, top row first.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")
    width, height = get_image_dimensions()
    full = _pixels.to_numpy()
    return np.ascontiguousarray(full[:width, :height].transpose(1, 0, 2)).astype(np.uint8)


class Renderer:
    """Configures the rendering state and renders frames.

    Setting up a Renderer uploads the camera, the marching settings and the
    light, and sizes the render target. Scene shapes are managed separately
    (see scene.manager.SceneManager) and are read at every render().

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        mode: The integrator used by render().
    """

    def __init__(
        self,
        width: int,
        height: int,
        camera: ViewCamera,
        mode: RenderMode = RenderMode.MARCH,
        settings: MarchSettings = DEFAULT_MARCH_SETTINGS,
        light: PointLight = DEFAULT_LIGHT,
    ) -> None:
        """Initialize the renderer.

        Raises:
            ValueError: If the dimensions, mode or camera are invalid.
        """
        self.mode = RenderMode(mode)
        self._camera = camera
        self._settings = settings
        self._light = light
        self.last_render_seconds = 0.0

        setup_render_target(width, height)
        setup_camera(camera)
        configure_marching(settings)
        setup_light(light)

        self._width = width
        self._height = height

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def camera(self) -> ViewCamera:
        return self._camera

    @property
    def settings(self) -> MarchSettings:
        return self._settings

    def render(self) -> None:
        """Render one frame with the configured mode."""
        start = time.perf_counter()
        render_frame(self.mode)
        self.last_render_seconds = time.perf_counter() - start

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the last frame as a (height, width, 3) uint8 array."""
        return get_pixels_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the last frame as a (height, width, 3) float32 array in [0, 1]."""
        return get_pixels_numpy().astype(np.float32) / 255.0

    def save_image(self, filepath: str) -> None:
        """Save the last frame as an image file (format from the extension)."""
        from marchtrace.preview.export import save_png_from_array

        save_png_from_array(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        return f"Renderer(width={self.width}, height={self.height}, mode={self.mode.value!r})"
