"""Unit tests for the marching-only box and cylinder primitives."""

import math

import numpy as np
import pytest
import taichi as ti

# Unit directions along +-x, +-y and +-z
AXES = np.array(
    [[1, 0, 0], [-1, 0, 0], [0, 1, 0], [0, -1, 0], [0, 0, 1], [0, 0, -1]], dtype=np.float32
)
# Distances from the center, starting on the surface
OFFSETS = np.linspace(1.0, 5.9, 50, dtype=np.float32)


class TestBoxDistance:
    """Tests for box_distance and box_normal."""

    def test_distance_outside_on_and_inside(self):
        from marchtrace.geometry.box import box_distance, vec3

        result = ti.field(dtype=ti.f32, shape=4)

        @ti.kernel
        def test_kernel():
            center = vec3(0.0, 0.0, 0.0)
            result[0] = box_distance(vec3(0.0, 0.0, 5.0), center, 2.0)
            result[1] = box_distance(vec3(1.0, 0.3, -0.2), center, 2.0)
            result[2] = box_distance(vec3(0.0, 0.0, 0.0), center, 2.0)
            result[3] = box_distance(vec3(2.0, 2.0, 0.0), center, 2.0)

        test_kernel()
        assert abs(result[0] - 4.0) < 1e-5
        assert abs(result[1]) < 1e-6
        assert abs(result[2] + 1.0) < 1e-6
        # Nearest point is the edge at (1, 1, z)
        assert abs(result[3] - math.sqrt(2.0)) < 1e-5

    def test_normal_snaps_to_dominant_axis(self):
        from marchtrace.geometry.box import box_normal, vec3

        result = ti.field(dtype=ti.math.vec3, shape=2)

        @ti.kernel
        def test_kernel():
            center = vec3(0.0, 0.0, 0.0)
            result[0] = box_normal(vec3(1.0, 0.2, 0.1), center)
            result[1] = box_normal(vec3(0.3, -0.1, -1.0), center)

        test_kernel()
        a = result[0]
        b = result[1]
        assert (a[0], a[1], a[2]) == (1.0, 0.0, 0.0)
        assert (b[0], b[1], b[2]) == (0.0, 0.0, -1.0)

    def test_normal_tie_prefers_x(self):
        """On an edge where |x| == |y| the x face wins."""
        from marchtrace.geometry.box import box_normal, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = box_normal(vec3(1.0, 1.0, 0.0), vec3(0.0, 0.0, 0.0))

        test_kernel()
        n = result[None]
        assert (n[0], n[1], n[2]) == (1.0, 0.0, 0.0)


class TestCylinderDistance:
    """Tests for cylinder_distance and cylinder_normal."""

    def test_distance_to_side_cap_and_inside(self):
        from marchtrace.geometry.cylinder import cylinder_distance, vec3

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            center = vec3(0.0, 0.0, 0.0)
            result[0] = cylinder_distance(vec3(3.0, 0.0, 0.0), center, 1.0, 2.0)
            result[1] = cylinder_distance(vec3(0.0, 4.0, 0.0), center, 1.0, 2.0)
            result[2] = cylinder_distance(vec3(0.0, 0.0, 0.0), center, 1.0, 2.0)

        test_kernel()
        assert abs(result[0] - 2.0) < 1e-5
        assert abs(result[1] - 3.0) < 1e-5
        assert abs(result[2] + 1.0) < 1e-5

    def test_side_normal_is_radial(self):
        from marchtrace.geometry.cylinder import cylinder_normal, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = cylinder_normal(vec3(0.0, 0.3, 1.0), vec3(0.0, 0.0, 0.0), 1.0, 2.0)

        test_kernel()
        n = result[None]
        assert abs(n[0]) < 1e-6
        assert abs(n[1]) < 1e-6
        assert abs(n[2] - 1.0) < 1e-6

    def test_cap_normal_is_vertical(self):
        from marchtrace.geometry.cylinder import cylinder_normal, vec3

        result = ti.field(dtype=ti.math.vec3, shape=2)

        @ti.kernel
        def test_kernel():
            center = vec3(0.0, 0.0, 0.0)
            result[0] = cylinder_normal(vec3(0.2, 1.0, 0.0), center, 1.0, 2.0)
            result[1] = cylinder_normal(vec3(0.2, -1.0, 0.1), center, 1.0, 2.0)

        test_kernel()
        top = result[0]
        bottom = result[1]
        assert (top[0], top[1], top[2]) == (0.0, 1.0, 0.0)
        assert (bottom[0], bottom[1], bottom[2]) == (0.0, -1.0, 0.0)


class TestDistanceGrowsOutside:
    """Distance grows strictly with displacement along any axis past the half-extents."""

    @pytest.mark.parametrize("kind", ["box", "cylinder"])
    def test_distance_increases_along_each_axis(self, kind):
        from marchtrace.geometry.box import box_distance, vec3
        from marchtrace.geometry.cylinder import cylinder_distance

        axes = ti.Vector.field(3, dtype=ti.f32, shape=len(AXES))
        offsets = ti.field(dtype=ti.f32, shape=len(OFFSETS))
        result = ti.field(dtype=ti.f32, shape=(len(AXES), len(OFFSETS)))
        axes.from_numpy(AXES)
        offsets.from_numpy(OFFSETS)
        is_box = 1 if kind == "box" else 0

        @ti.kernel
        def test_kernel():
            center = vec3(0.0, 0.0, 0.0)
            for a, k in result:
                p = offsets[k] * axes[a]
                d = 0.0
                if is_box == 1:
                    # Edge length 2: half-extent 1 on every axis
                    d = box_distance(p, center, 2.0)
                else:
                    # Radius 1, height 2: half-extent 1 on every axis
                    d = cylinder_distance(p, center, 1.0, 2.0)
                result[a, k] = d

        test_kernel()
        distances = result.to_numpy()

        for a in range(len(AXES)):
            assert np.all(np.diff(distances[a]) > 0.0), f"axis {AXES[a]}"
        # Starts on the surface and ends 4.9 units out
        assert np.allclose(distances[:, 0], 0.0, atol=1e-5)
        assert np.allclose(distances[:, -1], 4.9, atol=1e-4)
