#!/usr/bin/env python3
"""Interactive ray-traced scene viewer.

Usage:
    python -m examples.interactive_scene SCENE [--mode trace] [--cpu]

Controls:
    - Left / Right: move the first shape (and its children) along X
    - Up / Down: move it along Z
    - Q / E: turn it 20 degrees about the Y axis
    - Escape or closing the window exits

Every key press re-renders the whole frame once and prints the moved
shape's transform.
"""

from __future__ import annotations

import argparse
import sys

import numpy as np
import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive scene viewer.")
    parser.add_argument("scene", type=str, help="Path to the scene file")
    parser.add_argument(
        "--mode",
        choices=["march", "trace"],
        default="trace",
        help="Integrator to use (default: trace)",
    )
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    return parser.parse_args(argv)


def print_transform(scene, index: int) -> None:
    """Print the current 4x4 transform of a shape, one row per line."""
    print(f"Shape {index} transform:")
    print(np.array2string(scene.get_transform(index), precision=3, suppress_small=True))


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the interactive viewer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args(argv)

    # Initialize Taichi first (before importing modules that declare fields)
    ti.init(arch=ti.cpu if args.cpu else ti.gpu)

    from marchtrace.core.renderer import Renderer, RenderMode
    from marchtrace.preview.interactive import InteractiveViewer
    from marchtrace.scene.loader import SceneError, load_scene
    from marchtrace.scene.manager import SceneManager

    if not InteractiveViewer.is_display_available():
        print("Error: No display available. Cannot run interactive viewer.", file=sys.stderr)
        return 1

    try:
        description = load_scene(args.scene)
    except SceneError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    scene = SceneManager()
    scene.load(description)
    if len(scene) == 0:
        print("Error: the scene has no shapes to move.", file=sys.stderr)
        return 1

    try:
        renderer = Renderer(
            description.width,
            description.height,
            description.camera,
            mode=RenderMode(args.mode),
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Loaded {len(scene)} shapes; moving shape 0 and its children.")
    print("  - Arrow keys translate, Q/E rotate, Escape quits")

    viewer = InteractiveViewer(scene, renderer, on_change=print_transform)
    try:
        viewer.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")

    print(f"Rendered {viewer.frames_rendered} frames.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
