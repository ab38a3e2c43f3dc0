"""Ray-triangle intersection by solving the edge basis.

A point on the ray o + t*d lies on the triangle (v0, v1, v2) when

    o + t*d = v0 + u*e1 + v*e2,   e1 = v1 - v0, e2 = v2 - v0

which rearranges to the 3x3 linear system

    [e1 | e2 | -d] (u, v, t)^T = o - v0.

The basis matrix is inverted once per ray per triangle. A ray parallel to the
triangle plane (or a degenerate triangle) makes the basis singular; that case
is detected through the determinant and reported as a miss.

The returned (u, v) are the barycentric weights of v1 and v2; the weight of v0
is 1 - u - v.
"""

import taichi as ti
import taichi.math as tm

from palettetrace.geometry.sphere import HitRecord, make_miss

vec3 = tm.vec3

# Determinants below this magnitude are treated as a singular basis
DETERMINANT_EPSILON = 1e-8


@ti.func
def solve_triangle(ray_origin: vec3, ray_direction: vec3, v0: vec3, v1: vec3, v2: vec3):
    """Solve the edge basis for the ray parameters.

    Returns:
        A tuple (solvable, u, v, t). solvable is 0 when the basis is singular,
        in which case u, v and t are zero.
    """
    e1 = v1 - v0
    e2 = v2 - v0
    basis = ti.Matrix.cols([e1, e2, -ray_direction])

    solvable = 0
    u = 0.0
    v = 0.0
    t = 0.0

    if ti.abs(basis.determinant()) > DETERMINANT_EPSILON:
        solution = basis.inverse() @ (ray_origin - v0)
        u = solution[0]
        v = solution[1]
        t = solution[2]
        solvable = 1

    return solvable, u, v, t


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    v0: vec3,
    v1: vec3,
    v2: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-triangle intersection.

    A hit requires t in [t_min, t_max), u >= 0, v >= 0 and u + v <= 1. The
    normal is the geometric face normal (cross(e1, e2), counter-clockwise
    winding is the front), flipped to face the incoming ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        v0: First triangle vertex.
        v1: Second triangle vertex.
        v2: Third triangle vertex.
        t_min: Minimum t value to consider a valid hit.
        t_max: Hits at or beyond this t are rejected.

    Returns:
        A HitRecord with u, v set to the barycentric weights of v1 and v2.
    """
    result = make_miss()

    solvable, u, v, t = solve_triangle(ray_origin, ray_direction, v0, v1, v2)

    if solvable == 1:
        inside = u >= 0.0 and v >= 0.0 and u + v <= 1.0
        if inside and t >= t_min and t < t_max:
            outward_normal = tm.normalize(tm.cross(v1 - v0, v2 - v0))
            front_face = 1
            normal = outward_normal
            if tm.dot(ray_direction, outward_normal) > 0.0:
                front_face = 0
                normal = -outward_normal

            result = HitRecord(
                hit=1,
                t=t,
                point=ray_origin + t * ray_direction,
                normal=normal,
                front_face=front_face,
                u=u,
                v=v,
            )

    return result


@ti.func
def interpolate_normal(n0: vec3, n1: vec3, n2: vec3, u: ti.f32, v: ti.f32) -> vec3:
    """Blend three vertex normals with barycentric weights (1-u-v, u, v)."""
    return tm.normalize((1.0 - u - v) * n0 + u * n1 + v * n2)
