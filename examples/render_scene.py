#!/usr/bin/env python3
"""Render a scene file to a PNG image.

Usage:
    python -m examples.render_scene SCENE [options]

Options:
    --mode {march,trace}    Integrator (default: march)
    --output OUTPUT         Output file path (default: render.png)
    --max-iterations N      Marching iteration budget (default: 100)
    --max-distance D        Marching distance budget (default: 100)
    --cpu                   Force the CPU backend
    --show                  Open a Matplotlib preview after rendering
    --quiet                 Suppress progress output

Example:
    python -m examples.render_scene examples/scenes/marching.txt --mode march
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene file with sphere marching or ray tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("scene", type=str, help="Path to the scene file")
    parser.add_argument(
        "--mode",
        choices=["march", "trace"],
        default="march",
        help="Integrator to use (default: march)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.png",
        help="Output file path (default: render.png)",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=100,
        help="Marching iteration budget (default: 100)",
    )
    parser.add_argument(
        "--max-distance",
        type=float,
        default=100.0,
        help="Marching distance budget (default: 100)",
    )
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument(
        "--show",
        action="store_true",
        help="Show a Matplotlib preview after rendering",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args(argv)


def render_scene(
    scene_path: str,
    mode: str = "march",
    output_path: str = "render.png",
    max_iterations: int = 100,
    max_distance: float = 100.0,
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Load a scene file, render it once and save the image.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from marchtrace.core.config import MarchSettings
    from marchtrace.core.renderer import Renderer, RenderMode
    from marchtrace.preview.export import save_png
    from marchtrace.scene.loader import load_scene
    from marchtrace.scene.manager import SceneManager
    from marchtrace.scene.shapes import MARCHING_KINDS, TRACING_KINDS

    description = load_scene(scene_path)
    render_mode = RenderMode(mode)

    scene = SceneManager()
    scene.load(description)

    supported = MARCHING_KINDS if render_mode is RenderMode.MARCH else TRACING_KINDS
    skipped = [s.kind.name.lower() for s in scene.shapes if s.kind not in supported]

    if not quiet:
        print(f"Loaded {len(scene)} shapes from {scene_path}")
        if skipped:
            print(f"  Not drawn in {render_mode.value} mode: {', '.join(sorted(set(skipped)))}")
        print(f"Rendering {description.width}x{description.height} ({render_mode.value})...")

    renderer = Renderer(
        description.width,
        description.height,
        description.camera,
        mode=render_mode,
        settings=MarchSettings(max_iterations=max_iterations, max_distance=max_distance),
    )

    start_time = time.time()
    renderer.render()
    render_time = time.time() - start_time

    output_file = Path(output_path)
    save_png(renderer, str(output_file))

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Render time: {render_time:.2f}s")

    if show:
        from marchtrace.preview.display import show_preview

        show_preview(renderer)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.cpu:
        ti.init(arch=ti.cpu)
    else:
        ti.init(arch=ti.gpu)
    if not args.quiet:
        print("Using CPU backend" if args.cpu else "Using GPU backend (falls back to CPU)")

    try:
        render_scene(
            args.scene,
            mode=args.mode,
            output_path=args.output,
            max_iterations=args.max_iterations,
            max_distance=args.max_distance,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
