"""Geometry module for primitives and intersection algorithms.

Components:
    sphere: Ray-sphere intersection and the shared HitRecord
    triangle: Ray-triangle intersection with barycentric coordinates
    aabb: Slab test for per-mesh bounding box rejection
    mesh: Host-side mesh data, procedural shapes and transform helpers

Intersection routines are Taichi functions; mesh assembly is NumPy.
"""

from .aabb import hit_aabb
from .mesh import (
    MeshData,
    compose,
    compute_aabb,
    identity,
    make_box,
    make_plane,
    make_pyramid,
    normal_matrix,
    rotation_y,
    scaling,
    transform_points,
    translation,
)
from .sphere import HitRecord, Sphere, hit_sphere, make_miss, make_sphere
from .triangle import hit_triangle, interpolate_normal, solve_triangle

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss",
    "hit_triangle",
    "solve_triangle",
    "interpolate_normal",
    "hit_aabb",
    "MeshData",
    "identity",
    "translation",
    "scaling",
    "rotation_y",
    "compose",
    "transform_points",
    "normal_matrix",
    "compute_aabb",
    "make_plane",
    "make_box",
    "make_pyramid",
]
