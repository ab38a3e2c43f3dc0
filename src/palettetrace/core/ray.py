"""Ray data structure and vector utilities for the per-pixel kernels.

This module provides the Ray dataclass and the small vector helpers shared by
the intersector, the integrator and the camera. All helpers are Taichi
functions so they can be called from any kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, -100.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 50.0)  # (0, 0, -50), inside a kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Lengths below this are treated as zero before normalizing
ZERO_LENGTH_EPSILON = 1e-12


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Intersection math
            accepts any length; shading assumes unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def safe_normalize(v: vec3) -> vec3:
    """Normalize a vector, returning zero for zero-length input.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the direction of v, or the zero vector when v has
        (numerically) zero length.
    """
    result = vec3(0.0, 0.0, 0.0)
    len_sq = tm.dot(v, v)
    if len_sq > ZERO_LENGTH_EPSILON:
        result = v / ti.sqrt(len_sq)
    return result


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The mirror reflection I - 2(I . N)N.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def clamp01(v: vec3) -> vec3:
    """Clamp every component of a color to [0, 1]."""
    return tm.clamp(v, 0.0, 1.0)


@ti.func
def sanitize(v: vec3) -> vec3:
    """Replace NaN and infinite components with zero."""
    result = v
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


@ti.func
def transform_point(matrix: tm.mat4, p: vec3) -> vec3:
    """Apply a 4x4 affine transform to a point (w = 1)."""
    h = matrix @ tm.vec4(p.x, p.y, p.z, 1.0)
    return vec3(h.x, h.y, h.z)


@ti.func
def transform_direction(matrix: tm.mat3, d: vec3) -> vec3:
    """Apply a 3x3 linear transform to a direction."""
    return matrix @ d
