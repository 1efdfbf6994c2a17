"""Taichi-based renderer for small scenes of implicit and analytic surfaces.

Two integrators share one scene, camera and pixel loop:
- Sphere marching against signed distances, with Phong lighting and hard
  shadows
- Analytic ray tracing with nearest-hit flat color

Subpackages:
    core: Ray helpers, settings, the two integrators and the renderer loop
    geometry: Per-shape distance and intersection routines, transforms
    scene: Shape union, GPU storage, oracle dispatch, manager and loader
    camera: Look-at camera and primary ray generation
    lighting: Point light, Phong shading and the shadow test
    preview: PNG export, static preview and the interactive window
"""

__version__ = "0.1.0"
