"""Pytest configuration for marchtrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def reset_render_state():
    """Reset scene, camera, light and settings before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the fields are created after ti.init()
    from marchtrace.camera.view import reset_camera
    from marchtrace.core.config import configure_marching
    from marchtrace.core.renderer import reset_render_target
    from marchtrace.lighting.phong import setup_light
    from marchtrace.scene.storage import clear_scene

    def _reset_all():
        clear_scene()
        reset_camera()
        reset_render_target()
        configure_marching()
        setup_light()

    _reset_all()
    yield
    _reset_all()


@pytest.fixture
def front_camera():
    """Camera at (0, 0, 5) looking at the origin, already uploaded."""
    from marchtrace.camera.view import ViewCamera, setup_camera

    camera = ViewCamera(position=(0.0, 0.0, 5.0), target=(0.0, 0.0, 0.0), up=(0.0, 1.0, 0.0))
    setup_camera(camera)
    return camera


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from marchtrace.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()
