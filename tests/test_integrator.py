"""Unit tests for the path tracing integrator.

Tests cover:
- Sky gradient
- Tone mapping to 8-bit RGB
- Material dispatch, including unknown material IDs
- Bounce limit semantics of trace()
- Render target setup and render_rows argument checks
"""

import numpy as np
import pytest
import taichi as ti


def _trace(origin, direction, max_depth):
    """Run trace() for a single ray and return (color, rays_cast)."""
    from fastray.core.integrator import trace, vec3

    color = ti.Vector.field(3, dtype=ti.f32, shape=())
    rays_cast = ti.field(dtype=ti.i32, shape=())
    ox, oy, oz = origin
    dx, dy, dz = direction

    @ti.kernel
    def test_kernel():
        c, n = trace(vec3(ox, oy, oz), vec3(dx, dy, dz), max_depth)
        color[None] = c
        rays_cast[None] = n

    test_kernel()
    return tuple(color[None].to_numpy()), rays_cast[None]


def _sky(direction):
    d = np.asarray(direction, dtype=np.float64)
    t = 0.5 * (d[1] / np.linalg.norm(d) + 1.0)
    return (1.0 - t) * np.array([1.0, 1.0, 1.0]) + t * np.array([0.5, 0.7, 1.0])


class TestSkyColor:
    """Tests for the background gradient."""

    @pytest.mark.parametrize(
        "direction",
        [(0.0, 1.0, 0.0), (0.0, -1.0, 0.0), (0.0, 0.0, -1.0), (3.0, 4.0, 0.0)],
    )
    def test_gradient(self, direction):
        from fastray.core.integrator import sky_color, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())
        dx, dy, dz = direction

        @ti.kernel
        def test_kernel():
            result[None] = sky_color(vec3(dx, dy, dz))

        test_kernel()
        np.testing.assert_allclose(result[None].to_numpy(), _sky(direction), atol=1e-6)


class TestToneMapping:
    """Tests for to_rgb8."""

    def test_known_values(self):
        from fastray.core.integrator import to_rgb8

        image = np.array([[[0.0, 0.25, 1.0], [-0.5, 4.0, 0.0625]]], dtype=np.float32)
        rgb = to_rgb8(image)

        assert rgb.dtype == np.uint8
        assert rgb.shape == (1, 2, 3)
        assert rgb[0, 0].tolist() == [0, 128, 255]
        assert rgb[0, 1].tolist() == [0, 255, 64]

    def test_monotonic(self):
        from fastray.core.integrator import to_rgb8

        values = np.linspace(0.0, 1.0, 101, dtype=np.float32).reshape(1, -1, 1)
        rgb = to_rgb8(np.repeat(values, 3, axis=2))
        assert (np.diff(rgb[0, :, 0].astype(int)) >= 0).all()


class TestTrace:
    """Tests for the path estimator."""

    def test_miss_returns_sky(self, fresh_scene):
        from fastray.scene.shapes import ShapeList

        fresh_scene.set_world(ShapeList([]))
        color, rays_cast = _trace((0.0, 0.0, 0.0), (0.0, 0.6, -0.8), 5)

        np.testing.assert_allclose(color, _sky((0.0, 0.6, -0.8)), atol=1e-5)
        assert rays_cast == 1

    def test_miss_returns_sky_even_at_depth_zero(self, fresh_scene):
        from fastray.scene.shapes import ShapeList

        fresh_scene.set_world(ShapeList([]))
        color, rays_cast = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 0)

        np.testing.assert_allclose(color, _sky((0.0, 0.0, -1.0)), atol=1e-5)
        assert rays_cast == 1

    def test_hit_at_depth_zero_is_black(self, fresh_scene):
        from fastray.scene.shapes import ShapeList

        white = fresh_scene.add_lambertian_material((1.0, 1.0, 1.0))
        fresh_scene.set_world(ShapeList([fresh_scene.sphere((0.0, 0.0, -2.0), 0.5, white)]))
        color, rays_cast = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 0)

        assert color == (0.0, 0.0, 0.0)
        assert rays_cast == 1

    def test_single_diffuse_bounce_is_attenuated_sky(self, fresh_scene):
        """A scattered ray leaving a lone convex sphere always reaches the sky."""
        from fastray.scene.shapes import ShapeList

        grey = fresh_scene.add_lambertian_material((0.5, 0.5, 0.5))
        fresh_scene.set_world(ShapeList([fresh_scene.sphere((0.0, 0.0, -2.0), 0.5, grey)]))
        color, rays_cast = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 1)

        assert rays_cast == 2
        assert 0.25 - 1e-5 <= color[0] <= 0.5 + 1e-5
        assert color[2] == pytest.approx(0.5, abs=1e-5)

    def test_unknown_material_absorbs(self, fresh_scene):
        from fastray.scene.world import upload_world
        from fastray.scene.shapes import ShapeList, SphereShape

        # Bypass SceneManager validation to upload a dangling material ID
        upload_world(ShapeList([SphereShape((0.0, 0.0, -2.0), 0.5, material_id=42)]))
        color, rays_cast = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 10)

        assert color == (0.0, 0.0, 0.0)
        assert rays_cast == 1

    def test_mirror_enclosure_exhausts_bounces(self, fresh_scene):
        """From the center of a mirrored sphere every path bounces until cut off."""
        from fastray.scene.shapes import ShapeList

        mirror = fresh_scene.add_metal_material((1.0, 1.0, 1.0), fuzz=0.0)
        fresh_scene.set_world(ShapeList([fresh_scene.sphere((0.0, 0.0, 0.0), 10.0, mirror)]))
        color, rays_cast = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 7)

        assert color == (0.0, 0.0, 0.0)
        assert rays_cast == 8

    def test_unit_index_glass_is_invisible_head_on(self, fresh_scene):
        from fastray.scene.shapes import ShapeList

        glass = fresh_scene.add_dielectric_material(1.0)
        fresh_scene.set_world(ShapeList([fresh_scene.sphere((0.0, 0.0, -2.0), 0.5, glass)]))
        color, rays_cast = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 5)

        # Enter, leave, escape
        assert rays_cast == 3
        np.testing.assert_allclose(color, _sky((0.0, 0.0, -1.0)), atol=1e-5)

    def test_metal_tints_reflection(self, fresh_scene):
        from fastray.scene.shapes import ShapeList

        gold = fresh_scene.add_metal_material((0.8, 0.6, 0.2), fuzz=0.0)
        fresh_scene.set_world(ShapeList([fresh_scene.sphere((0.0, 0.0, -2.0), 0.5, gold)]))
        color, rays_cast = _trace((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 5)

        # Reflected straight back toward +z, which sees the horizon colour
        assert rays_cast == 2
        np.testing.assert_allclose(color, [0.8 * 0.75, 0.6 * 0.85, 0.2], atol=1e-5)


class TestRenderTarget:
    """Tests for render target setup and row rendering preconditions."""

    def test_setup_render_target(self):
        from fastray.core.integrator import get_image_dimensions, setup_render_target

        setup_render_target(64, 32)
        assert get_image_dimensions() == (64, 32)

    @pytest.mark.parametrize("size", [(0, 10), (10, -1), (4096, 10), (10, 4096)])
    def test_invalid_dimensions(self, size):
        from fastray.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(*size)

    def test_render_rows_without_target(self):
        from fastray.core.integrator import render_rows
        from fastray.core.stats import RenderStats

        with pytest.raises(RuntimeError):
            render_rows(0, 1, 1, 1, RenderStats().counters)

    def test_render_rows_without_camera(self):
        from fastray.core.integrator import render_rows, setup_render_target
        from fastray.core.stats import RenderStats

        setup_render_target(8, 4)
        with pytest.raises(RuntimeError):
            render_rows(0, 1, 1, 1, RenderStats().counters)

    @pytest.mark.parametrize("rows", [(-1, 2), (3, 2), (0, 5)])
    def test_render_rows_bad_range(self, rows):
        from fastray.camera.pinhole import PinholeCamera
        from fastray.camera.rays import setup_camera
        from fastray.core.integrator import render_rows, setup_render_target
        from fastray.core.stats import RenderStats

        setup_render_target(8, 4)
        setup_camera(PinholeCamera.from_viewport())
        with pytest.raises(ValueError):
            render_rows(rows[0], rows[1], 1, 1, RenderStats().counters)

    @pytest.mark.parametrize("samples, depth", [(0, 5), (-3, 5), (4, -1)])
    def test_render_rows_bad_sampling(self, fresh_scene, samples, depth):
        from fastray.camera.pinhole import PinholeCamera
        from fastray.camera.rays import setup_camera
        from fastray.core.integrator import render_rows, setup_render_target
        from fastray.core.stats import RenderStats
        from fastray.scene.shapes import ShapeList

        fresh_scene.set_world(ShapeList([]))
        setup_render_target(8, 4)
        setup_camera(PinholeCamera.from_viewport())
        stats = RenderStats()

        with pytest.raises(ValueError):
            render_rows(0, 2, samples, depth, stats.counters)
        assert stats.rays_traced == 0
        assert stats.scanlines_completed == 0

    def test_linear_image_without_target(self):
        from fastray.core.integrator import get_linear_image

        with pytest.raises(RuntimeError):
            get_linear_image()

    def test_render_rows_counts_and_writes_only_its_band(self, fresh_scene):
        from fastray.camera.pinhole import PinholeCamera
        from fastray.camera.rays import setup_camera
        from fastray.core.integrator import get_linear_image, render_rows, setup_render_target
        from fastray.core.stats import RenderStats
        from fastray.scene.shapes import ShapeList

        fresh_scene.set_world(ShapeList([]))
        setup_render_target(8, 6)
        setup_camera(PinholeCamera.from_viewport(aspect_ratio=8.0 / 6.0))
        stats = RenderStats()

        render_rows(2, 4, 3, 5, stats.counters)
        image = get_linear_image()

        assert stats.scanlines_completed == 2
        # Every ray escapes immediately
        assert stats.rays_traced == 2 * 8 * 3
        assert (image[2:4] > 0.0).all()
        assert (image[:2] == 0.0).all()
        assert (image[4:] == 0.0).all()
