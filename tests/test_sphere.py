"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside the sphere misses
- Interval bounds and non-unit directions
"""

import numpy as np
import taichi as ti


def _cast(origin, direction, center, radius, t_min=0.0, t_max=1e10):
    """Run hit_sphere in a kernel and return the record fields as a dict."""
    from palettetrace.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        o: ti.math.vec3, d: ti.math.vec3, c: ti.math.vec3, r: ti.f32, lo: ti.f32, hi: ti.f32
    ):
        record = hit_sphere(o, d, Sphere(center=c, radius=r), lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": point[None].to_numpy(),
        "normal": normal[None].to_numpy(),
        "front_face": front_face[None],
    }


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from palettetrace.geometry.sphere import make_sphere, vec3

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        assert np.allclose(center_result[None].to_numpy(), [1.0, 2.0, 3.0], atol=1e-6)
        assert abs(radius_result[None] - 0.5) < 1e-6


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_canonical_hit(self):
        """Ray from z=-100 along +z against a radius 50 sphere at the origin."""
        rec = _cast((0.0, 0.0, -100.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 50.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 50.0) < 1e-4
        assert np.allclose(rec["point"], [0.0, 0.0, -50.0], atol=1e-4)
        assert np.allclose(rec["normal"], [0.0, 0.0, -1.0], atol=1e-5)
        assert rec["front_face"] == 1

    def test_miss(self):
        """A ray passing beside the sphere reports a miss."""
        rec = _cast((0.0, 5.0, -10.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_pointing_away(self):
        """Both roots behind the origin is a miss."""
        rec = _cast((0.0, 0.0, -10.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_origin_inside_is_a_miss(self):
        """From inside, the smaller root is behind the origin: no hit."""
        rec = _cast((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 0.0), 2.0)
        assert rec["hit"] == 0

    def test_origin_inside_off_centre_is_a_miss(self):
        rec = _cast((0.5, 0.3, -0.2), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_t_max_rejects_far_hit(self):
        rec = _cast((0.0, 0.0, -100.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 50.0, t_max=40.0)
        assert rec["hit"] == 0

    def test_t_max_is_exclusive(self):
        rec = _cast((0.0, 0.0, -4.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0, t_max=3.0)
        assert rec["hit"] == 0

    def test_non_unit_direction(self):
        """t is measured in units of the direction length."""
        rec = _cast((0.0, 0.0, -100.0), (0.0, 0.0, 2.0), (0.0, 0.0, 0.0), 50.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 25.0) < 1e-4
        assert np.allclose(rec["point"], [0.0, 0.0, -50.0], atol=1e-3)

    def test_normal_is_unit_length(self):
        rec = _cast((0.3, 0.4, -10.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        assert abs(np.linalg.norm(rec["normal"]) - 1.0) < 1e-5
        assert not np.any(np.isnan(rec["normal"]))
