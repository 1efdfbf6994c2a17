"""Matplotlib-based preview display for rendered images.

Example:
    >>> from marchtrace.preview.display import show_preview
    >>> renderer.render()
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from marchtrace.core.renderer import Renderer


def show_image(
    image: npt.NDArray[np.uint8],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
):
    """Display an (H, W, 3) image in a Matplotlib figure.

    Pixels are shown unfiltered so small renders stay legible.

    Returns:
        The Matplotlib figure.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image, interpolation="nearest")
    ax.axis("off")
    if title is not None:
        ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
    return fig


def show_preview(
    renderer: Renderer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
):
    """Display the renderer's last frame.

    The default title names the integrator and the image size.

    Returns:
        The Matplotlib figure.
    """
    if title is None:
        title = f"{renderer.mode.value} - {renderer.width}x{renderer.height}"
    return show_image(renderer.get_image_uint8(), title=title, figsize=figsize, block=block)
