"""Tests for the preview module.

This module tests the preview/export, preview/display and
preview/interactive functionality including:
- uint8 conversion and PNG export
- Matplotlib figures (drawn with the non-interactive Agg backend)
- Key bindings and the viewer's frame handling, without opening a window
"""

import numpy as np
import pytest
from PIL import Image as PILImage


def _small_scene_and_renderer(mode="trace"):
    from marchtrace.camera.view import ViewCamera
    from marchtrace.core.renderer import Renderer
    from marchtrace.scene.manager import SceneManager

    scene = SceneManager()
    scene.add_sphere((0.0, 0.0, 0.0), 1.0, (1.0, 0.0, 0.0))
    renderer = Renderer(4, 4, ViewCamera((0.0, 0.0, 5.0), (0.0, 0.0, 0.0)), mode=mode)
    return scene, renderer


class TestImageToUint8:
    def test_uint8_passes_through_as_copy(self):
        from marchtrace.preview.export import image_to_uint8

        image = np.full((2, 3, 3), 7, dtype=np.uint8)
        result = image_to_uint8(image)
        result[0, 0, 0] = 0

        assert image[0, 0, 0] == 7

    def test_float_is_clamped_and_truncated(self):
        from marchtrace.preview.export import image_to_uint8

        image = np.array([[[-0.5, 0.5, 2.0]]], dtype=np.float32)
        result = image_to_uint8(image)

        assert result.dtype == np.uint8
        assert tuple(result[0, 0]) == (0, 127, 255)

    def test_wrong_shape_raises(self):
        from marchtrace.preview.export import image_to_uint8

        with pytest.raises(ValueError, match="H, W, 3"):
            image_to_uint8(np.zeros((4, 4)))


class TestSavePng:
    def test_save_png_from_array_keeps_row_order(self, tmp_path):
        from marchtrace.preview.export import save_png_from_array

        image = np.zeros((2, 3, 3), dtype=np.uint8)
        image[0, 2] = (255, 0, 0)  # top-right
        path = tmp_path / "out.png"
        save_png_from_array(image, str(path))

        with PILImage.open(path) as img:
            assert img.size == (3, 2)
            assert img.getpixel((2, 0)) == (255, 0, 0)
            assert img.getpixel((0, 1)) == (0, 0, 0)

    def test_save_png_from_renderer(self, tmp_path):
        from marchtrace.preview.export import save_png

        _, renderer = _small_scene_and_renderer()
        renderer.render()
        path = tmp_path / "frame.png"
        save_png(renderer, str(path))

        saved = np.asarray(PILImage.open(path))
        assert np.array_equal(saved, renderer.get_image_uint8())


class TestDisplay:
    @pytest.fixture(autouse=True)
    def agg_backend(self):
        import matplotlib

        matplotlib.use("Agg")
        yield
        import matplotlib.pyplot as plt

        plt.close("all")

    def test_show_image_returns_figure(self):
        from marchtrace.preview.display import show_image

        fig = show_image(np.zeros((4, 4, 3), dtype=np.uint8), title="black", block=False)

        assert fig.axes[0].get_title() == "black"

    def test_show_preview_default_title(self):
        from marchtrace.preview.display import show_preview

        _, renderer = _small_scene_and_renderer()
        renderer.render()
        fig = show_preview(renderer, block=False)

        assert fig.axes[0].get_title() == "trace - 4x4"


class TestKeyBindings:
    """apply_key edits the scene without a window."""

    def test_arrow_keys_translate(self, fresh_scene):
        import taichi as ti

        from marchtrace.preview.interactive import apply_key

        fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))

        assert apply_key(fresh_scene, ti.ui.LEFT)
        assert apply_key(fresh_scene, ti.ui.UP)
        assert np.allclose(fresh_scene.get_transform(0)[:3, 3], [0.5, 0.0, -0.5])

        assert apply_key(fresh_scene, ti.ui.RIGHT)
        assert apply_key(fresh_scene, ti.ui.DOWN)
        assert np.allclose(fresh_scene.get_transform(0), np.eye(4), atol=1e-6)

    def test_rotation_keys(self, fresh_scene):
        from marchtrace.geometry.transform import rotation_y
        from marchtrace.preview.interactive import apply_key

        fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))
        apply_key(fresh_scene, "q")

        assert np.allclose(fresh_scene.get_transform(0), rotation_y(20.0), atol=1e-6)

        apply_key(fresh_scene, "e")
        assert np.allclose(fresh_scene.get_transform(0), np.eye(4), atol=1e-6)

    def test_children_follow_target(self, fresh_scene):
        import taichi as ti

        from marchtrace.preview.interactive import apply_key

        body = fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))
        wing = fresh_scene.add_sphere((2, 0, 0), 0.5, (0, 1, 0))
        fresh_scene.set_parent(wing, body)
        apply_key(fresh_scene, ti.ui.LEFT)

        assert np.allclose(fresh_scene.get_transform(wing)[:3, 3], [0.5, 0.0, 0.0])

    def test_unbound_key_and_empty_scene(self, fresh_scene):
        import taichi as ti

        from marchtrace.preview.interactive import apply_key

        assert not apply_key(fresh_scene, ti.ui.LEFT)
        fresh_scene.add_sphere((0, 0, 0), 1.0, (1, 0, 0))
        assert not apply_key(fresh_scene, "z")


class TestInteractiveViewer:
    """Viewer logic that does not need a display."""

    def test_update_image_flips_rows(self):
        from marchtrace.preview.interactive import InteractiveViewer

        scene, renderer = _small_scene_and_renderer()
        viewer = InteractiveViewer(scene, renderer)

        image = np.zeros((4, 4, 3), dtype=np.uint8)
        image[0, 1] = (255, 255, 255)  # top row, column 1
        viewer.update_image(image)
        display = viewer.display_image.to_numpy()

        # GGUI origin is bottom-left: the top row is y = height - 1
        assert np.allclose(display[1, 3], [1.0, 1.0, 1.0])
        assert display.sum() == pytest.approx(3.0)

    def test_update_image_rejects_wrong_shape(self):
        from marchtrace.preview.interactive import InteractiveViewer

        scene, renderer = _small_scene_and_renderer()
        viewer = InteractiveViewer(scene, renderer)

        with pytest.raises(ValueError, match="doesn't match"):
            viewer.update_image(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_handle_key_renders_once(self):
        import taichi as ti

        from marchtrace.preview.interactive import InteractiveViewer

        scene, renderer = _small_scene_and_renderer()
        viewer = InteractiveViewer(scene, renderer)

        assert viewer.handle_key(ti.ui.LEFT)
        assert viewer.frames_rendered == 1
        assert not viewer.handle_key("x")
        assert viewer.frames_rendered == 1

    def test_on_change_sees_updated_transform(self):
        import taichi as ti

        from marchtrace.preview.interactive import InteractiveViewer

        scene, renderer = _small_scene_and_renderer()
        seen = []
        viewer = InteractiveViewer(
            scene,
            renderer,
            on_change=lambda s, index: seen.append(s.get_transform(index)),
        )

        viewer.handle_key(ti.ui.LEFT)
        viewer.handle_key("x")

        assert len(seen) == 1
        assert seen[0][0, 3] == pytest.approx(0.5)

    def test_moving_shape_out_of_view_clears_frame(self):
        from marchtrace.preview.interactive import InteractiveViewer

        scene, renderer = _small_scene_and_renderer()
        viewer = InteractiveViewer(scene, renderer)
        viewer.refresh()
        assert viewer.display_image.to_numpy().any()

        scene.apply_translation(0, (20.0, 0.0, 0.0))
        viewer.refresh()

        assert not viewer.display_image.to_numpy().any()
        assert viewer.frames_rendered == 2
