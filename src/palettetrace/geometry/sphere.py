"""Sphere primitive with half-b ray-sphere intersection.

The ray-sphere intersection solves

    a*t^2 + 2*half_b*t + c = 0

with a = dot(d, d), half_b = dot(o - center, d) and
c = dot(o - center, o - center) - r^2. A negative discriminant
half_b^2 - a*c short-circuits to a miss before any square root is taken, so no
NaN ever leaves this function. Only the smaller root can hit, so a ray that
starts inside a sphere misses it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from palettetrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 0), radius=50.0)
    >>> # hit_sphere(vec3(0, 0, -100), vec3(0, 0, 1), sphere, 0.0, 1e10) -> t = 50
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: The parameter value along the ray of the intersection.
        point: The 3D intersection point.
        normal: The unit surface normal, oriented against the ray.
        front_face: 1 if the ray hit the outward side of the surface.
        u: First barycentric weight (triangles only, 0 for spheres).
        v: Second barycentric weight (triangles only, 0 for spheres).

    All fields except hit are only meaningful when hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    u: ti.f32
    v: ti.f32


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord describing a miss."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        u=0.0,
        v=0.0,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Only the smaller root is considered: the ray hits when it lies in
    [t_min, t_max). A ray starting inside the sphere has its smaller root
    behind the origin and misses.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be unit).
        sphere: The sphere to test intersection against.
        t_min: Minimum t value to consider a valid hit.
        t_max: Hits at or beyond this t are rejected.

    Returns:
        A HitRecord; check its hit field.
    """
    oc = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c

    result = make_miss()

    if discriminant >= 0.0 and a > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-half_b - sqrt_d) / a

        if t >= t_min and t < t_max:
            point = ray_origin + t * ray_direction
            # The near root is always on the side facing the ray
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=(point - sphere.center) / sphere.radius,
                front_face=1,
                u=0.0,
                v=0.0,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a kernel."""
    return Sphere(center=center, radius=radius)
