"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (near root)
- Ray missing sphere
- Ray starting inside sphere (far root, outward normal)
- Tangent rays and degenerate radii
- Open interval bounds on t
"""

import pytest
import taichi as ti


def _hit(origin, direction, center, radius, t_min=0.001, t_max=1000.0):
    """Run hit_sphere once and return (hit, t, point, normal, material_id)."""
    from eyetrace.geometry.sphere import Sphere, hit_sphere
    from eyetrace.core.ray import make_ray, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    material = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32, lo: ti.f32, hi: ti.f32):
        sphere = Sphere(center=c, radius=r, material_id=7)
        record = hit_sphere(make_ray(o, d), sphere, lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        material[None] = record.material_id

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    return hit[None], t_val[None], point[None], normal[None], material[None]


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from eyetrace.geometry.sphere import make_sphere, vec3

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())
        material_result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5, 4)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius
            material_result[None] = sphere.material_id

        test_kernel()
        c = center_result[None]
        assert c[0] == pytest.approx(1.0)
        assert c[1] == pytest.approx(2.0)
        assert c[2] == pytest.approx(3.0)
        assert radius_result[None] == pytest.approx(0.5)
        assert material_result[None] == 4

    def test_miss_record(self):
        """Test the miss record has no hit and no material."""
        from eyetrace.geometry.sphere import make_miss_record

        hit = ti.field(dtype=ti.i32, shape=())
        material = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            record = make_miss_record()
            hit[None] = record.hit
            material[None] = record.material_id

        test_kernel()
        assert hit[None] == 0
        assert material[None] == -1


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_from_outside(self):
        """Test a ray aimed at the center hits at distance - radius."""
        hit, t, p, n, material = _hit((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0)

        assert hit == 1
        assert t == pytest.approx(4.0, abs=1e-5)
        assert (p[0], p[1], p[2]) == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert (n[0], n[1], n[2]) == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert material == 7

    def test_unnormalized_direction(self):
        """Test t scales with the direction length."""
        hit, t, p, _, _ = _hit((0, 0, 5), (0, 0, -2), (0, 0, 0), 1.0)

        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert p[2] == pytest.approx(1.0, abs=1e-5)

    def test_off_axis_normal_is_unit_and_radial(self):
        """Test the normal is (point - center) / radius for an oblique hit."""
        hit, _, p, n, _ = _hit((0.3, 0.2, 5), (0, 0, -1), (0, 0, 0), 2.0)

        assert hit == 1
        length = (n[0] ** 2 + n[1] ** 2 + n[2] ** 2) ** 0.5
        assert length == pytest.approx(1.0, abs=1e-5)
        for k in range(3):
            assert n[k] == pytest.approx(p[k] / 2.0, abs=1e-5)

    def test_miss(self):
        """Test a ray passing beside the sphere."""
        hit, _, _, _, material = _hit((5, 0, 0), (0, 0, -1), (0, 0, 0), 1.0)

        assert hit == 0
        assert material == -1

    def test_sphere_behind_ray(self):
        """Test a sphere behind the origin is not hit."""
        hit, _, _, _, _ = _hit((0, 0, 5), (0, 0, 1), (0, 0, 0), 1.0)

        assert hit == 0

    def test_inside_sphere_hits_far_root_with_outward_normal(self):
        """Test a ray from the center exits through the far root."""
        hit, t, p, n, _ = _hit((0, 0, 0), (0, 0, 1), (0, 0, 0), 1.0)

        assert hit == 1
        assert t == pytest.approx(1.0, abs=1e-5)
        assert p[2] == pytest.approx(1.0, abs=1e-5)
        # Outward, not flipped to face the ray
        assert n[2] == pytest.approx(1.0, abs=1e-5)

    def test_near_root_below_t_min_falls_back(self):
        """Test the far root is used when the near root lies below t_min."""
        # Near root at t=4, far root at t=6
        hit, t, _, n, _ = _hit((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0, t_min=4.5)

        assert hit == 1
        assert t == pytest.approx(6.0, abs=1e-5)
        assert n[2] == pytest.approx(-1.0, abs=1e-5)

    def test_both_roots_outside_interval(self):
        """Test no hit when neither root is in (t_min, t_max)."""
        hit, _, _, _, _ = _hit((0, 0, 5), (0, 0, -1), (0, 0, 0), 1.0, t_max=3.9)

        assert hit == 0

    def test_tangent_ray_is_a_miss(self):
        """Test a zero discriminant counts as no hit."""
        hit, _, _, _, _ = _hit((1, 0, 5), (0, 0, -1), (0, 0, 0), 1.0)

        assert hit == 0

    @pytest.mark.parametrize("radius", [0.0, -1.0])
    def test_non_positive_radius_never_hit(self, radius):
        """Test a zero or negative radius is unhittable."""
        hit, _, _, _, _ = _hit((0, 0, 5), (0, 0, -1), (0, 0, 0), radius)

        assert hit == 0

    def test_zero_direction_is_a_miss(self):
        """Test a zero-length direction never hits."""
        hit, _, _, _, _ = _hit((0, 0, 5), (0, 0, 0), (0, 0, 0), 1.0)

        assert hit == 0
