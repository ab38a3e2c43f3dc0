"""Scene module for geometry buffers, lights and scene assembly.

Components:
    intersection: Sphere and mesh buffers, closest-hit and any-hit queries
    lights: Point light buffers
    manager: Host-side SceneManager with validation and dict configuration
    demo: The meadow demo scene
"""

from .demo import MeadowParams, create_meadow_scene, isometric_camera
from .intersection import (
    MAX_INDICES,
    MAX_MESHES,
    MAX_SPHERES,
    MAX_VERTICES,
    PrimitiveKind,
    SceneHitRecord,
    add_mesh_buffers,
    add_sphere,
    clear_scene,
    get_mesh_count,
    get_sphere_count,
    get_triangle_count,
    intersect_scene,
    intersect_scene_any,
    set_aabb_culling,
)
from .lights import MAX_LIGHTS, add_light, clear_lights, get_light_count, set_light
from .manager import (
    LightInfo,
    MaterialInfo,
    MeshInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
)

__all__ = [
    "SceneHitRecord",
    "PrimitiveKind",
    "MAX_SPHERES",
    "MAX_MESHES",
    "MAX_VERTICES",
    "MAX_INDICES",
    "MAX_LIGHTS",
    "clear_scene",
    "add_sphere",
    "add_mesh_buffers",
    "set_aabb_culling",
    "get_sphere_count",
    "get_mesh_count",
    "get_triangle_count",
    "intersect_scene",
    "intersect_scene_any",
    "add_light",
    "set_light",
    "clear_lights",
    "get_light_count",
    "SceneManager",
    "SceneConfig",
    "MaterialInfo",
    "SphereInfo",
    "MeshInfo",
    "LightInfo",
    "MeadowParams",
    "create_meadow_scene",
    "isometric_camera",
]
