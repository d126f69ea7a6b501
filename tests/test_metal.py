"""Unit tests for the metal material module.

Tests cover:
- Perfect mirror reflection
- Fuzzed reflection and absorption below the surface
- Material registry operations and validation
"""

import pytest
import taichi as ti


def _scatter(incident, normal, fuzz=0.0, albedo=(0.8, 0.6, 0.2)):
    """Run scatter_metal once and return (direction, attenuation, did_scatter)."""
    from fastray.materials.metal import scatter_metal, vec3

    direction = ti.Vector.field(3, dtype=ti.f32, shape=())
    attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
    did_scatter = ti.field(dtype=ti.i32, shape=())
    ix, iy, iz = incident
    nx, ny, nz = normal
    ar, ag, ab = albedo

    @ti.kernel
    def test_kernel():
        d, a, s = scatter_metal(vec3(ar, ag, ab), fuzz, vec3(ix, iy, iz), vec3(nx, ny, nz))
        direction[None] = d
        attenuation[None] = a
        did_scatter[None] = s

    test_kernel()
    return (
        tuple(direction[None].to_numpy()),
        tuple(attenuation[None].to_numpy()),
        did_scatter[None],
    )


class TestMetalScatter:
    """Tests for the metal scatter function."""

    def test_perfect_mirror_45_degrees(self):
        direction, attenuation, did_scatter = _scatter((1.0, -1.0, 0.0), (0.0, 1.0, 0.0))

        s = 2.0**-0.5
        assert direction[0] == pytest.approx(s, abs=1e-5)
        assert direction[1] == pytest.approx(s, abs=1e-5)
        assert direction[2] == pytest.approx(0.0, abs=1e-5)
        assert attenuation == pytest.approx((0.8, 0.6, 0.2))
        assert did_scatter == 1

    def test_head_on_reflects_back(self):
        direction, _, did_scatter = _scatter((0.0, 0.0, -3.0), (0.0, 0.0, 1.0))

        assert direction[2] == pytest.approx(1.0, abs=1e-5)
        assert did_scatter == 1

    def test_grazing_mirror_ray_is_absorbed(self):
        """A reflection exactly along the surface has dot = 0 and does not scatter."""
        _, _, did_scatter = _scatter((1.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert did_scatter == 0

    def test_fuzz_stays_within_radius(self):
        from fastray.materials.metal import scatter_metal, vec3

        n = 1000
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                d, _, _ = scatter_metal(
                    vec3(1.0, 1.0, 1.0), 0.3, vec3(0.0, 0.0, -1.0), vec3(0.0, 0.0, 1.0)
                )
                directions[i] = d

        test_kernel()
        d = directions.to_numpy()
        offsets = d - [0.0, 0.0, 1.0]
        assert ((offsets**2).sum(axis=1) ** 0.5).max() < 0.3 + 1e-5

    def test_fuzzed_grazing_rays_absorbed_when_below_surface(self):
        """did_scatter agrees with the sign of dot(scattered, normal)."""
        from fastray.materials.metal import scatter_metal, vec3

        n = 1000
        dots = ti.field(dtype=ti.f32, shape=n)
        flags = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            for i in range(n):
                d, _, s = scatter_metal(vec3(1.0, 1.0, 1.0), 1.0, vec3(1.0, -0.05, 0.0), normal)
                dots[i] = ti.math.dot(d, normal)
                flags[i] = s

        test_kernel()
        dots_np = dots.to_numpy()
        flags_np = flags.to_numpy()
        assert ((dots_np > 0.0) == (flags_np == 1)).all()
        # Some of these nearly-grazing rays must be absorbed
        assert (flags_np == 0).any()
        assert (flags_np == 1).any()


class TestMetalRegistry:
    """Tests for metal material registry operations."""

    def test_add_and_read_back(self):
        from fastray.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
            get_metal_material_count,
        )

        add_metal_material((0.8, 0.8, 0.8))
        idx = add_metal_material((0.8, 0.6, 0.2), fuzz=0.25)
        assert idx == 1
        assert get_metal_material_count() == 2

        albedo = ti.Vector.field(3, dtype=ti.f32, shape=())
        fuzz = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            albedo[None] = get_metal_albedo(idx)
            fuzz[None] = get_metal_fuzz(idx)

        test_kernel()
        assert tuple(albedo[None].to_numpy()) == pytest.approx((0.8, 0.6, 0.2))
        assert fuzz[None] == pytest.approx(0.25)

    @pytest.mark.parametrize("fuzz", [-0.1, 1.5])
    def test_invalid_fuzz_rejected(self, fuzz):
        from fastray.materials.metal import add_metal_material, get_metal_material_count

        with pytest.raises(ValueError):
            add_metal_material((0.5, 0.5, 0.5), fuzz=fuzz)
        assert get_metal_material_count() == 0

    def test_invalid_albedo_rejected(self):
        from fastray.materials.metal import add_metal_material

        with pytest.raises(ValueError):
            add_metal_material((0.5, 1.5, 0.5))

    def test_clear_resets_count(self):
        from fastray.materials.metal import (
            add_metal_material,
            clear_metal_materials,
            get_metal_material_count,
        )

        add_metal_material((0.5, 0.5, 0.5), fuzz=1.0)
        clear_metal_materials()
        assert get_metal_material_count() == 0
