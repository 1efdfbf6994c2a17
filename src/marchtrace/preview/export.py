"""Image export utilities for rendered images.

Rendered frames are already 8-bit RGB, so export is a direct write through
Pillow. Float images in [0, 1] are quantized the same way the renderer
quantizes pixels: clamp, scale by 255, truncate.

Example:
    >>> from marchtrace.preview.export import save_png
    >>> renderer.render()
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from marchtrace.core.renderer import Renderer


def image_to_uint8(image: npt.NDArray) -> npt.NDArray[np.uint8]:
    """Convert an RGB image to uint8.

    uint8 input is returned unchanged (as a copy). Float input is clamped
    to [0, 1], scaled by 255 and truncated.

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype == np.uint8:
        return image.copy()
    return (np.clip(image, 0.0, 1.0) * 255.0).astype(np.uint8)


def save_png_from_array(image: npt.NDArray, filepath: str) -> None:
    """Save an (H, W, 3) array as a PNG file (top row first)."""
    pil_image = PILImage.fromarray(image_to_uint8(image), mode="RGB")
    pil_image.save(filepath)


def save_png(renderer: Renderer, filepath: str) -> None:
    """Save the renderer's last frame as a PNG file.

    Args:
        renderer: The Renderer whose frame to save.
        filepath: Output file path (should end in .png).
    """
    save_png_from_array(renderer.get_image_uint8(), filepath)
