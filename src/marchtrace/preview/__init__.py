"""Preview module for output and visualization.

Components:
    display: Matplotlib-based static preview
    export: PNG export through Pillow
    interactive: Taichi GGUI window with key-driven scene edits

Example:
    >>> from marchtrace.preview import show_preview, save_png
    >>> renderer.render()
    >>> show_preview(renderer)
    >>> save_png(renderer, "output.png")
"""

from marchtrace.preview.display import show_image, show_preview
from marchtrace.preview.export import image_to_uint8, save_png, save_png_from_array
from marchtrace.preview.interactive import KEY_ACTIONS, InteractiveViewer, KeyAction, apply_key

__all__ = [
    # Interactive viewer
    "InteractiveViewer",
    "KeyAction",
    "KEY_ACTIONS",
    "apply_key",
    # Display functions
    "show_preview",
    "show_image",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
]
