"""Interactive key-driven viewer using Taichi GGUI.

The viewer shows the current frame in a ti.ui.Window and edits the scene
between frames in response to key presses. Each recognized key moves or
turns one shape (index 0 by default) together with its children, then
triggers exactly one full re-render before the next event is read. A
frame always completes before input is accepted again.

Keys:
    Left / Right   translate by +0.5 / -0.5 along X
    Up / Down      translate by -0.5 / +0.5 along Z
    q / e          rotate by +20 / -20 degrees about Y
    Escape         close the window

Example:
    >>> from marchtrace.preview.interactive import InteractiveViewer
    >>> viewer = InteractiveViewer(scene, renderer)
    >>> viewer.run()  # Blocks until the window is closed
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

if TYPE_CHECKING:
    import numpy.typing as npt

    from marchtrace.core.renderer import Renderer
    from marchtrace.scene.manager import SceneManager


@dataclass(frozen=True)
class KeyAction:
    """Scene edit bound to a key.

    Exactly one of translation and rotation_degrees is set. Rotations are
    about the world Y axis.
    """

    translation: tuple[float, float, float] | None = None
    rotation_degrees: float | None = None


KEY_ACTIONS: dict[str, KeyAction] = {
    ti.ui.LEFT: KeyAction(translation=(0.5, 0.0, 0.0)),
    ti.ui.RIGHT: KeyAction(translation=(-0.5, 0.0, 0.0)),
    ti.ui.UP: KeyAction(translation=(0.0, 0.0, -0.5)),
    ti.ui.DOWN: KeyAction(translation=(0.0, 0.0, 0.5)),
    "q": KeyAction(rotation_degrees=20.0),
    "e": KeyAction(rotation_degrees=-20.0),
}


def apply_key(scene: SceneManager, key: str, target_index: int = 0) -> bool:
    """Apply the scene edit bound to a key.

    Args:
        scene: The scene to edit.
        key: A GGUI key name (e.g. ti.ui.LEFT or "q").
        target_index: The shape to move; its children follow.

    Returns:
        True if the key is bound and the scene changed, False otherwise
        (unbound key or empty scene).
    """
    action = KEY_ACTIONS.get(key)
    if action is None or len(scene) == 0:
        return False

    if action.translation is not None:
        scene.apply_translation(target_index, action.translation)
    else:
        scene.apply_rotation(target_index, action.rotation_degrees, (0.0, 1.0, 0.0))
    return True


class InteractiveViewer:
    """Window showing the renderer's frames, re-rendering on key presses.

    Attributes:
        width: Window width in pixels (the render width).
        height: Window height in pixels (the render height).
        display_image: Taichi field holding the displayed frame.
        frames_rendered: Number of full renders performed.
    """

    def __init__(
        self,
        scene: SceneManager,
        renderer: Renderer,
        *,
        target_index: int = 0,
        title: str = "marchtrace - Interactive Viewer",
        on_change: Callable[[SceneManager, int], None] | None = None,
    ) -> None:
        """Initialize the viewer.

        The window itself is created lazily by run() so the viewer can be
        built and driven without a display.

        Args:
            on_change: Called with (scene, target_index) after each key that
                edits the scene, once the new frame is rendered.
        """
        self.scene = scene
        self.renderer = renderer
        self.target_index = target_index
        self.width = renderer.width
        self.height = renderer.height
        self.frames_rendered = 0
        self._title = title
        self._on_change = on_change

        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Shape is (width, height); GGUI puts (0, 0) at the bottom-left
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(self.width, self.height)
        )

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()

    def update_image(self, image: npt.NDArray[np.uint8]) -> None:
        """Copy an (H, W, 3) uint8 frame (top row first) into the display field.

        Raises:
            ValueError: If the image shape doesn't match (height, width, 3).
        """
        expected_shape = (self.height, self.width, 3)
        if image.shape != expected_shape:
            raise ValueError(
                f"Image shape {image.shape} doesn't match expected {expected_shape}"
            )

        # Flip rows (GGUI origin is bottom-left) and swap to (x, y) indexing
        as_float = image.astype(np.float32) / 255.0
        self.display_image.from_numpy(
            np.ascontiguousarray(np.transpose(np.flipud(as_float), (1, 0, 2)))
        )

    def refresh(self) -> None:
        """Render one full frame and load it into the display field."""
        self.renderer.render()
        self.frames_rendered += 1
        self.update_image(self.renderer.get_image_uint8())

    def handle_key(self, key: str) -> bool:
        """Apply a key press; re-render once if it changed the scene.

        Returns:
            True if a new frame was rendered.
        """
        if not apply_key(self.scene, key, self.target_index):
            return False
        self.refresh()
        if self._on_change is not None:
            self._on_change(self.scene, self.target_index)
        return True

    def run(self) -> None:
        """Open the window and process key presses until it is closed."""
        self._initialize_window()
        assert self._window is not None and self._canvas is not None

        self.refresh()
        while self._window.running:
            for event in self._window.get_events(ti.ui.PRESS):
                if event.key == ti.ui.ESCAPE:
                    self._window.running = False
                else:
                    self.handle_key(event.key)
            self._canvas.set_image(self.display_image)
            self._window.show()

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering."""
        if os.name == "nt":
            return True
        return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))
