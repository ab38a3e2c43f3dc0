"""Scene geometry buffers and scene-level ray queries.

The scene holds two kinds of primitives: spheres, and triangle meshes that
index into one global vertex/index buffer. Each mesh carries its index range,
material, model transform and a world-space bounding box that lets a ray skip
the whole mesh.

Queries scan spheres first, then meshes, each in buffer order. The closest
hit wins; a later hit replaces an earlier one only with a strictly smaller t,
so equal-distance ties keep the first primitive in scan order.

Example:
    >>> from palettetrace.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, 0), 50.0, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from palettetrace.core.ray import transform_direction, transform_point
from palettetrace.geometry.aabb import hit_aabb
from palettetrace.geometry.sphere import HitRecord, hit_sphere, make_sphere
from palettetrace.geometry.triangle import hit_triangle, interpolate_normal

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class PrimitiveKind(IntEnum):
    """Tag of the primitive a SceneHitRecord refers to."""

    NONE = -1
    SPHERE = 0
    TRIANGLE = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if the ray intersected any primitive, 0 on a miss.
        t: The parameter value along the ray of the intersection.
        point: The 3D intersection point.
        normal: The unit shading normal, oriented against the ray.
        front_face: 1 if the ray hit the outward side of the surface.
        material_id: The material ID of the hit primitive, -1 on a miss.
        primitive_kind: A PrimitiveKind value.
        primitive_index: Sphere index, or mesh index for triangles.
        u: First barycentric weight of a triangle hit.
        v: Second barycentric weight of a triangle hit.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32
    primitive_kind: ti.i32
    primitive_index: ti.i32
    u: ti.f32
    v: ti.f32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_MESHES = 256
MAX_VERTICES = 65536
MAX_INDICES = 196608

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Global vertex and index buffers shared by all meshes
vertex_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_VERTICES)
vertex_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_VERTICES)
index_buffer = ti.field(dtype=ti.i32, shape=MAX_INDICES)
num_vertices = ti.field(dtype=ti.i32, shape=())
num_indices = ti.field(dtype=ti.i32, shape=())

# Mesh storage
mesh_first_index = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_num_indices = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_material_ids = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_has_normals = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_aabb_min = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MESHES)
mesh_aabb_max = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MESHES)
mesh_transforms = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_MESHES)
mesh_normal_matrices = ti.Matrix.field(3, 3, dtype=ti.f32, shape=MAX_MESHES)
num_meshes = ti.field(dtype=ti.i32, shape=())

# Per-mesh bounding box rejection switch (1 = enabled)
aabb_culling = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive and buffer counts to zero. The field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_spheres[None] = 0
    num_vertices[None] = 0
    num_indices[None] = 0
    num_meshes[None] = 0
    aabb_culling[None] = 1


def set_aabb_culling(enabled: bool) -> None:
    """Enable or disable per-mesh bounding box rejection.

    Disabling it never changes which hits are reported when every box
    encloses its mesh; it only makes every ray walk every triangle.
    """
    aabb_culling[None] = 1 if enabled else 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (must be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
        ValueError: If the radius is not positive.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_mesh_buffers(
    vertices: npt.NDArray[np.float32],
    normals: npt.NDArray[np.float32] | None,
    indices: npt.NDArray[np.int32],
    material_id: int,
    transform: npt.NDArray[np.float32],
    normal_matrix: npt.NDArray[np.float32],
    aabb_min: npt.NDArray[np.float32],
    aabb_max: npt.NDArray[np.float32],
) -> int:
    """Append a mesh's vertices and indices to the global buffers.

    Indices are given relative to the mesh's own vertices and rebased onto
    the global vertex buffer.

    Returns:
        The index of the added mesh.

    Raises:
        RuntimeError: If a buffer capacity would be exceeded.
    """
    mesh_idx = num_meshes[None]
    if mesh_idx >= MAX_MESHES:
        raise RuntimeError(f"Maximum number of meshes ({MAX_MESHES}) exceeded")

    first_vertex = num_vertices[None]
    first_index = num_indices[None]
    n_vertices = int(vertices.shape[0])
    n_indices = int(indices.shape[0])
    if first_vertex + n_vertices > MAX_VERTICES:
        raise RuntimeError(f"Maximum number of vertices ({MAX_VERTICES}) exceeded")
    if first_index + n_indices > MAX_INDICES:
        raise RuntimeError(f"Maximum number of indices ({MAX_INDICES}) exceeded")

    for i in range(n_vertices):
        vertex_positions[first_vertex + i] = vertices[i].tolist()
        if normals is not None:
            vertex_normals[first_vertex + i] = normals[i].tolist()
        else:
            vertex_normals[first_vertex + i] = [0.0, 0.0, 0.0]
    for i in range(n_indices):
        index_buffer[first_index + i] = int(indices[i]) + first_vertex

    mesh_first_index[mesh_idx] = first_index
    mesh_num_indices[mesh_idx] = n_indices
    mesh_material_ids[mesh_idx] = material_id
    mesh_has_normals[mesh_idx] = 1 if normals is not None else 0
    mesh_aabb_min[mesh_idx] = aabb_min.tolist()
    mesh_aabb_max[mesh_idx] = aabb_max.tolist()
    mesh_transforms[mesh_idx] = transform.tolist()
    mesh_normal_matrices[mesh_idx] = normal_matrix.tolist()

    num_vertices[None] = first_vertex + n_vertices
    num_indices[None] = first_index + n_indices
    num_meshes[None] = mesh_idx + 1
    return mesh_idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_mesh_count() -> int:
    """Get the number of meshes in the scene."""
    return int(num_meshes[None])


def get_triangle_count() -> int:
    """Get the number of triangles across all meshes."""
    return int(num_indices[None]) // 3


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
        primitive_kind=int(PrimitiveKind.NONE),
        primitive_index=-1,
        u=0.0,
        v=0.0,
    )


@ti.func
def _to_scene_record(rec: HitRecord, material_id: ti.i32, kind: ti.i32, index: ti.i32):
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
        primitive_kind=kind,
        primitive_index=index,
        u=rec.u,
        v=rec.v,
    )


@ti.func
def _mesh_triangle(mesh: ti.i32, tri: ti.i32):
    """World-space vertices and global vertex indices of one mesh triangle."""
    base = mesh_first_index[mesh] + 3 * tri
    i0 = index_buffer[base]
    i1 = index_buffer[base + 1]
    i2 = index_buffer[base + 2]
    matrix = mesh_transforms[mesh]
    v0 = transform_point(matrix, vertex_positions[i0])
    v1 = transform_point(matrix, vertex_positions[i1])
    v2 = transform_point(matrix, vertex_positions[i2])
    return v0, v1, v2, i0, i1, i2


@ti.func
def _mesh_reachable(mesh: ti.i32, ray_origin: vec3, ray_direction: vec3, t_min: ti.f32, t_max: ti.f32):
    reachable = 1
    if aabb_culling[None] == 1:
        reachable = hit_aabb(
            ray_origin, ray_direction, mesh_aabb_min[mesh], mesh_aabb_max[mesh], t_min, t_max
        )
    return reachable


@ti.func
def _shading_normal(mesh: ti.i32, rec: HitRecord, ray_direction: vec3, i0: ti.i32, i1: ti.i32, i2: ti.i32) -> vec3:
    """Interpolated vertex normal in world space, facing the ray.

    Falls back to the geometric normal already in rec when the mesh has no
    vertex normals.
    """
    normal = rec.normal
    if mesh_has_normals[mesh] == 1:
        local = interpolate_normal(
            vertex_normals[i0], vertex_normals[i1], vertex_normals[i2], rec.u, rec.v
        )
        normal = tm.normalize(transform_direction(mesh_normal_matrices[mesh], local))
        if tm.dot(normal, ray_direction) > 0.0:
            normal = -normal
    return normal


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Closest-hit query against all spheres and mesh triangles.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Hits at or beyond this t are rejected.

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if no intersection was found.
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = make_sphere(sphere_centers[i], sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_record(rec, sphere_material_ids[i], int(PrimitiveKind.SPHERE), i)

    for mesh in range(num_meshes[None]):
        if _mesh_reachable(mesh, ray_origin, ray_direction, t_min, closest_t) == 1:
            for tri in range(mesh_num_indices[mesh] // 3):
                v0, v1, v2, i0, i1, i2 = _mesh_triangle(mesh, tri)
                rec = hit_triangle(ray_origin, ray_direction, v0, v1, v2, t_min, closest_t)
                if rec.hit == 1:
                    closest_t = rec.t
                    rec.normal = _shading_normal(mesh, rec, ray_direction, i0, i1, i2)
                    result = _to_scene_record(
                        rec, mesh_material_ids[mesh], int(PrimitiveKind.TRIANGLE), mesh
                    )

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Test if the ray hits anything in [t_min, t_max) (shadow ray query).

    Stops testing as soon as one primitive qualifies; closest-hit ordering is
    not needed for a visibility answer.

    Returns:
        1 if any primitive was hit, 0 otherwise.
    """
    hit_any = 0

    for i in range(num_spheres[None]):
        if hit_any == 0:
            sphere = make_sphere(sphere_centers[i], sphere_radii[i])
            rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    for mesh in range(num_meshes[None]):
        if hit_any == 0:
            if _mesh_reachable(mesh, ray_origin, ray_direction, t_min, t_max) == 1:
                for tri in range(mesh_num_indices[mesh] // 3):
                    if hit_any == 0:
                        v0, v1, v2, i0, i1, i2 = _mesh_triangle(mesh, tri)
                        rec = hit_triangle(ray_origin, ray_direction, v0, v1, v2, t_min, t_max)
                        if rec.hit == 1:
                            hit_any = 1

    return hit_any
