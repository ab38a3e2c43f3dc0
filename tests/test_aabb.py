"""Unit tests for the ray-AABB slab test."""

import taichi as ti


def _slab(origin, direction, box_min=(-1.0, -1.0, -1.0), box_max=(1.0, 1.0, 1.0), t_min=0.0, t_max=1e10):
    from palettetrace.geometry.aabb import hit_aabb

    vec3 = ti.math.vec3
    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, lo: vec3, hi: vec3, t0: ti.f32, t1: ti.f32):
        result[None] = hit_aabb(o, d, lo, hi, t0, t1)

    test_kernel(vec3(*origin), vec3(*direction), vec3(*box_min), vec3(*box_max), t_min, t_max)
    return result[None]


class TestSlabTest:
    def test_hit_head_on(self):
        assert _slab((0.0, 0.0, -5.0), (0.0, 0.0, 1.0)) == 1

    def test_miss_beside(self):
        assert _slab((3.0, 0.0, -5.0), (0.0, 0.0, 1.0)) == 0

    def test_diagonal_hit(self):
        assert _slab((-5.0, -5.0, -5.0), (1.0, 1.0, 1.0)) == 1

    def test_origin_inside_box(self):
        assert _slab((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) == 1

    def test_parallel_outside_slab(self):
        """A direction component of zero outside that slab never enters."""
        assert _slab((0.0, 2.0, -5.0), (0.0, 0.0, 1.0)) == 0

    def test_box_behind_ray(self):
        assert _slab((0.0, 0.0, 5.0), (0.0, 0.0, 1.0)) == 0

    def test_box_beyond_t_max(self):
        """The box is rejected once a closer hit bounds the interval."""
        assert _slab((0.0, 0.0, -10.0), (0.0, 0.0, 1.0), t_max=5.0) == 0
        assert _slab((0.0, 0.0, -10.0), (0.0, 0.0, 1.0), t_max=9.5) == 1

    def test_flat_box(self):
        """A zero-thickness box (a plane's bounds) is still hit."""
        assert _slab(
            (0.0, 5.0, 0.0),
            (0.0, -1.0, 0.0),
            box_min=(-1.0, 0.0, -1.0),
            box_max=(1.0, 0.0, 1.0),
        ) == 1
