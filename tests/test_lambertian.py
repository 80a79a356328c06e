"""Unit tests for Lambertian (diffuse) material.

Tests cover:
- Scatter direction = normal + offset, attenuation = albedo
- Degenerate offset fallback to the normal
- Sampled scatter always scatters, into the normal's hemisphere side
- Material registry (add, count, lookup, validation, scatter by id)
"""

import pytest
import taichi as ti


class TestScatterLambertianOffset:
    """Tests for the deterministic scatter rule."""

    def test_direction_is_normal_plus_offset(self):
        """Test the scattered direction is normal + offset, unnormalized."""
        from eyetrace.materials.lambertian import scatter_lambertian_offset, vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())
        attenuation = ti.field(dtype=ti.math.vec3, shape=())
        did_scatter = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            d, a, s = scatter_lambertian_offset(
                vec3(0.8, 0.3, 0.3), vec3(0.0, 1.0, 0.0), vec3(0.5, 0.25, 0.0)
            )
            direction[None] = d
            attenuation[None] = a
            did_scatter[None] = s

        test_kernel()
        d = direction[None]
        assert (d[0], d[1], d[2]) == pytest.approx((0.5, 1.25, 0.0), abs=1e-6)
        a = attenuation[None]
        assert (a[0], a[1], a[2]) == pytest.approx((0.8, 0.3, 0.3), abs=1e-6)
        assert did_scatter[None] == 1

    def test_degenerate_offset_falls_back_to_normal(self):
        """Test an offset cancelling the normal yields the normal."""
        from eyetrace.materials.lambertian import scatter_lambertian_offset, vec3

        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            d, att, scattered = scatter_lambertian_offset(
                vec3(0.5, 0.5, 0.5), vec3(0.0, 0.0, 1.0), vec3(0.0, 0.0, -1.0)
            )
            direction[None] = d

        test_kernel()
        d = direction[None]
        assert (d[0], d[1], d[2]) == pytest.approx((0.0, 0.0, 1.0), abs=1e-6)


class TestScatterLambertian:
    """Tests for sampled Lambertian scatter."""

    def test_always_scatters_with_albedo(self):
        """Test every sample scatters and attenuates by the albedo."""
        from eyetrace.materials.lambertian import scatter_lambertian, vec3

        n = 512
        scattered = ti.field(dtype=ti.i32, shape=n)
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for k in range(n):
                d, a, s = scatter_lambertian(vec3(0.2, 0.4, 0.6), vec3(0.0, 1.0, 0.0), k)
                scattered[k] = s
                attenuation[k] = a

        test_kernel()
        assert scattered.to_numpy().min() == 1
        att = attenuation.to_numpy()
        assert att[:, 0] == pytest.approx(0.2, abs=1e-6)
        assert att[:, 2] == pytest.approx(0.6, abs=1e-6)

    def test_direction_within_unit_ball_of_normal(self):
        """Test direction - normal lies inside the unit sphere."""
        from eyetrace.materials.lambertian import scatter_lambertian, vec3

        n = 512
        dist_sq = ti.field(dtype=ti.f32, shape=n)
        cosine = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 0.0, 1.0)
            for k in range(n):
                d, a, s = scatter_lambertian(vec3(0.5, 0.5, 0.5), normal, k)
                dist_sq[k] = (d - normal).dot(d - normal)
                cosine[k] = d.dot(normal)

        test_kernel()
        assert dist_sq.to_numpy().max() < 1.0 + 1e-5
        # The sampled lobe leans strongly toward the normal
        assert cosine.to_numpy().mean() > 0.5


class TestMaterialRegistry:
    """Tests for Lambertian material registry."""

    def test_add_and_get_material(self):
        """Test adding a material and reading its albedo back in a kernel."""
        from eyetrace.materials.lambertian import add_lambertian_material, get_lambertian_albedo

        idx = add_lambertian_material((0.8, 0.3, 0.3))
        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_lambertian_albedo(mat_idx)

        test_kernel(idx)
        r = result[None]
        assert idx == 0
        assert (r[0], r[1], r[2]) == pytest.approx((0.8, 0.3, 0.3), abs=1e-6)

    def test_material_count_and_clear(self):
        """Test counting and clearing materials."""
        from eyetrace.materials.lambertian import (
            add_lambertian_material,
            clear_lambertian_materials,
            get_lambertian_material_count,
        )

        add_lambertian_material((0.1, 0.1, 0.1))
        add_lambertian_material((0.2, 0.2, 0.2))
        assert get_lambertian_material_count() == 2

        clear_lambertian_materials()
        assert get_lambertian_material_count() == 0

    @pytest.mark.parametrize(
        "albedo", [(-0.1, 0.5, 0.5), (0.5, 1.1, 0.5), (0.5, 0.5)]
    )
    def test_invalid_albedo_raises(self, albedo):
        """Test out-of-range or malformed albedos are rejected."""
        from eyetrace.materials.lambertian import add_lambertian_material

        with pytest.raises(ValueError):
            add_lambertian_material(albedo)

    def test_scatter_by_id(self):
        """Test scatter_lambertian_by_id uses the registered albedo."""
        from eyetrace.materials.lambertian import (
            add_lambertian_material,
            scatter_lambertian_by_id,
            vec3,
        )

        add_lambertian_material((0.9, 0.9, 0.9))
        idx = add_lambertian_material((0.1, 0.2, 0.3))
        attenuation = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            for _ in range(1):
                d, a, s = scatter_lambertian_by_id(mat_idx, vec3(0.0, 1.0, 0.0), 0)
                attenuation[None] = a

        test_kernel(idx)
        a = attenuation[None]
        assert (a[0], a[1], a[2]) == pytest.approx((0.1, 0.2, 0.3), abs=1e-6)
