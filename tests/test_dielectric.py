"""Unit tests for the dielectric material module.

Tests cover:
- Refraction ratio on entry and exit
- Total internal reflection detection
- Scatter function (attenuation, straight-through at index 1.0, TIR)
- Reflect/refract split following Schlick's approximation
- Material registry operations and validation
"""

import math

import pytest
import taichi as ti


class TestRefractionRatio:
    """Tests for refraction_ratio."""

    def test_entering_and_leaving(self):
        from fastray.materials.dielectric import refraction_ratio

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = refraction_ratio(1.5, 1)
            result[1] = refraction_ratio(1.5, 0)

        test_kernel()
        assert result[0] == pytest.approx(1.0 / 1.5)
        assert result[1] == pytest.approx(1.5)


class TestTotalInternalReflection:
    """Tests for will_reflect."""

    def _will_reflect(self, angle_degrees, front_face, index=1.5):
        from fastray.materials.dielectric import vec3, will_reflect

        result = ti.field(dtype=ti.i32, shape=())
        theta = math.radians(angle_degrees)

        @ti.kernel
        def test_kernel():
            incident = vec3(ti.sin(theta), -ti.cos(theta), 0.0)
            result[None] = will_reflect(index, incident, vec3(0.0, 1.0, 0.0), front_face)

        test_kernel()
        return result[None]

    def test_entering_never_tir(self):
        assert self._will_reflect(80.0, front_face=1) == 0

    def test_leaving_below_critical_angle(self):
        # Critical angle for 1.5 is about 41.8 degrees
        assert self._will_reflect(30.0, front_face=0) == 0

    def test_leaving_above_critical_angle(self):
        assert self._will_reflect(60.0, front_face=0) == 1


class TestDielectricScatter:
    """Tests for the dielectric scatter function."""

    def test_attenuation_is_white_and_always_scatters(self):
        from fastray.materials.dielectric import scatter_dielectric, vec3

        n = 200
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=n)
        did_scatter = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                _, a, s = scatter_dielectric(
                    1.5, vec3(0.3, -1.0, 0.2), vec3(0.0, 1.0, 0.0), 1
                )
                attenuation[i] = a
                did_scatter[i] = s

        test_kernel()
        assert (attenuation.to_numpy() == 1.0).all()
        assert (did_scatter.to_numpy() == 1).all()

    def test_unit_index_passes_straight_through(self):
        """With index 1.0 the Schlick term is (1 - cos)^5, negligible near normal incidence."""
        from fastray.materials.dielectric import scatter_dielectric, vec3

        n = 200
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                d, _, _ = scatter_dielectric(
                    1.0, vec3(0.1, -2.0, 0.05), vec3(0.0, 1.0, 0.0), i % 2
                )
                directions[i] = d

        test_kernel()
        expected = [0.1, -2.0, 0.05]
        norm = math.sqrt(sum(c * c for c in expected))
        d = directions.to_numpy()
        for axis in range(3):
            assert abs(d[:, axis] - expected[axis] / norm).max() < 1e-5

    def test_total_internal_reflection_always_reflects(self):
        from fastray.materials.dielectric import scatter_dielectric, vec3

        n = 200
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)
        theta = math.radians(60.0)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                incident = vec3(ti.sin(theta), -ti.cos(theta), 0.0)
                d, _, _ = scatter_dielectric(1.5, incident, vec3(0.0, 1.0, 0.0), 0)
                directions[i] = d

        test_kernel()
        d = directions.to_numpy()
        assert abs(d[:, 0] - math.sin(theta)).max() < 1e-5
        assert abs(d[:, 1] - math.cos(theta)).max() < 1e-5

    def test_reflect_fraction_matches_schlick(self):
        """At normal incidence the reflected fraction is r0 = 0.04 for glass."""
        from fastray.materials.dielectric import scatter_dielectric, vec3

        n = 20000
        reflected = ti.field(dtype=ti.i32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                d, _, _ = scatter_dielectric(1.5, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1)
                reflected[i] = 1 if d[1] > 0.0 else 0

        test_kernel()
        fraction = reflected.to_numpy().mean()
        assert fraction == pytest.approx(0.04, abs=0.01)


class TestDielectricRegistry:
    """Tests for dielectric material registry operations."""

    def test_add_and_read_back(self):
        from fastray.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_index,
            get_dielectric_material_count,
        )

        assert add_dielectric_material() == 0
        idx = add_dielectric_material(2.4)
        assert get_dielectric_material_count() == 2

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = get_dielectric_index(0)
            result[1] = get_dielectric_index(idx)

        test_kernel()
        assert result[0] == pytest.approx(1.5)
        assert result[1] == pytest.approx(2.4)

    @pytest.mark.parametrize("index", [0.0, -1.5])
    def test_non_positive_index_rejected(self, index):
        from fastray.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_material_count,
        )

        with pytest.raises(ValueError):
            add_dielectric_material(index)
        assert get_dielectric_material_count() == 0

    def test_index_below_one_accepted(self):
        from fastray.materials.dielectric import add_dielectric_material

        assert add_dielectric_material(0.5) == 0

    def test_clear_resets_count(self):
        from fastray.materials.dielectric import (
            add_dielectric_material,
            clear_dielectric_materials,
            get_dielectric_material_count,
        )

        add_dielectric_material(1.33)
        clear_dielectric_materials()
        assert get_dielectric_material_count() == 0
