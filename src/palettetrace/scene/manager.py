"""Scene manager coordinating materials, primitives and lights.

This module provides the host-side scene API. It validates inputs, assigns
material ids, uploads spheres and meshes into the Taichi scene buffers and
keeps a Python-side record of everything it added so the scene can be
exported to and rebuilt from a plain dictionary.

For meshes the manager computes the world-space bounding box from the
transformed vertices and the normal matrix from the model transform, so every
mesh's box encloses its triangles by construction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from palettetrace.scene.manager import SceneManager
    >>> from palettetrace.geometry.mesh import make_box
    >>> scene = SceneManager()
    >>> stone = scene.add_material(albedo=(0.5, 0.5, 0.55), roughness=0.8)
    >>> scene.add_sphere(center=(0, 1, 0), radius=1.0, material_id=stone)
    >>> scene.add_mesh(make_box(), material_id=stone)
    >>> scene.add_light(position=(0, 5, 0), strength=20.0)
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi.math as tm

from palettetrace.geometry.mesh import MeshData, compute_aabb, identity, normal_matrix
from palettetrace.materials.pbr import (
    MAX_MATERIALS,
    add_material,
    clear_materials,
    get_material_count,
)
from palettetrace.scene.intersection import (
    MAX_MESHES,
    MAX_SPHERES,
    add_mesh_buffers,
    add_sphere,
    clear_scene,
    get_mesh_count,
    get_sphere_count,
    get_triangle_count,
)
from palettetrace.scene.lights import MAX_LIGHTS, add_light, clear_lights, get_light_count

logger = logging.getLogger(__name__)

vec3 = tm.vec3


@dataclass
class MaterialInfo:
    """Parameters of a registered material."""

    material_id: int
    albedo: tuple[float, float, float]
    roughness: float
    metalness: float
    emission: tuple[float, float, float]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class MeshInfo:
    """Information about a mesh in the scene.

    Attributes:
        mesh_index: The index in the mesh storage arrays.
        mesh: The host-side vertex and index data.
        material_id: The material ID assigned to the mesh.
        transform: The 4x4 model transform.
        aabb_min: World-space bounding box minimum.
        aabb_max: World-space bounding box maximum.
    """

    mesh_index: int
    mesh: MeshData
    material_id: int
    transform: npt.NDArray[np.float32]
    aabb_min: npt.NDArray[np.float32]
    aabb_max: npt.NDArray[np.float32]


@dataclass
class LightInfo:
    """Information about a point light."""

    light_index: int
    position: tuple[float, float, float]
    strength: float
    color: tuple[float, float, float]


@dataclass
class SceneConfig:
    """In-memory scene description used by to_dict / from_dict."""

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    meshes: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)


def _vec3_tuple(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Host-side API for building the scene buffers.

    Attributes:
        materials: MaterialInfo for all registered materials, by id.
        spheres: SphereInfo for all spheres in the scene.
        meshes: MeshInfo for all meshes in the scene.
        lights: LightInfo for all point lights.

    Example:
        >>> scene = SceneManager()
        >>> grass = scene.add_material(albedo=(0.3, 0.6, 0.2), roughness=0.9)
        >>> gold = scene.add_material(albedo=(1.0, 0.8, 0.3), roughness=0.2, metalness=1.0)
        >>> scene.add_sphere((0, 1, 0), 1.0, gold)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.meshes: list[MeshInfo] = []
        self.lights: list[LightInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_materials()
        clear_lights()
        self.materials.clear()
        self.spheres.clear()
        self.meshes.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (primitives, materials and lights)."""
        self._clear_all()
        logger.debug("Scene cleared")

    # =========================================================================
    # Materials
    # =========================================================================

    def add_material(
        self,
        albedo: tuple[float, float, float],
        roughness: float = 1.0,
        metalness: float = 0.0,
        emission: float | tuple[float, float, float] = 0.0,
    ) -> int:
        """Register a material.

        Args:
            albedo: Base color as (R, G, B), each in [0, 1].
            roughness: Roughness in [0, 1].
            metalness: Metalness in [0, 1].
            emission: Scalar or (R, G, B) emission strength, >= 0.

        Returns:
            The material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any parameter is outside its range.
        """
        material_id = add_material(albedo, roughness, metalness, emission)
        if isinstance(emission, (int, float)):
            emission_rgb = (float(emission),) * 3
        else:
            emission_rgb = _vec3_tuple(emission, "emission")
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                albedo=_vec3_tuple(albedo, "albedo"),
                roughness=float(roughness),
                metalness=float(metalness),
                emission=emission_rgb,
            )
        )
        return material_id

    def add_emissive_material(
        self,
        color: tuple[float, float, float],
        strength: float,
    ) -> int:
        """Register a light-source material with emission = strength."""
        if strength <= 0.0:
            raise ValueError(f"Emission strength must be positive, got {strength}")
        return self.add_material(albedo=color, roughness=1.0, metalness=0.0, emission=strength)

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def _check_material(self, material_id: int) -> None:
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Primitives
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If radius is not positive or material_id is invalid.
        """
        self._check_material(material_id)
        center = _vec3_tuple(center, "center")
        sphere_index = add_sphere(vec3(*center), float(radius), material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=float(radius),
                material_id=material_id,
            )
        )
        return sphere_index

    def add_mesh(
        self,
        mesh: MeshData,
        material_id: int,
        transform: npt.NDArray[np.float32] | None = None,
    ) -> int:
        """Add a triangle mesh with a model transform.

        Args:
            mesh: Vertex and index data (validated on construction).
            material_id: The material ID to assign to the mesh.
            transform: 4x4 model matrix. Defaults to the identity.

        Returns:
            The index of the added mesh.

        Raises:
            RuntimeError: If a mesh, vertex or index capacity is exceeded.
            ValueError: If material_id is invalid or the transform is not an
                invertible 4x4 matrix.
        """
        self._check_material(material_id)
        mesh.validate()
        matrix = identity() if transform is None else np.asarray(transform, dtype=np.float32)
        if matrix.shape != (4, 4):
            raise ValueError(f"Mesh transform must be 4x4, got shape {matrix.shape}")

        box_min, box_max = compute_aabb(mesh, matrix)
        mesh_index = add_mesh_buffers(
            mesh.vertices,
            mesh.normals,
            mesh.indices,
            material_id,
            matrix,
            normal_matrix(matrix),
            box_min,
            box_max,
        )
        self.meshes.append(
            MeshInfo(
                mesh_index=mesh_index,
                mesh=mesh,
                material_id=material_id,
                transform=matrix,
                aabb_min=box_min,
                aabb_max=box_max,
            )
        )
        logger.debug(
            "Added mesh %d: %d triangles, aabb %s..%s",
            mesh_index,
            mesh.num_triangles,
            box_min.tolist(),
            box_max.tolist(),
        )
        return mesh_index

    def add_light(
        self,
        position: tuple[float, float, float],
        strength: float,
        color: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ) -> int:
        """Add a point light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If strength is not positive.
        """
        position = _vec3_tuple(position, "position")
        color = _vec3_tuple(color, "color")
        light_index = add_light(position, float(strength), color)
        self.lights.append(
            LightInfo(
                light_index=light_index,
                position=position,
                strength=float(strength),
                color=color,
            )
        )
        return light_index

    # =========================================================================
    # Convenience Methods (add object with material in one call)
    # =========================================================================

    def add_pbr_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        roughness: float = 1.0,
        metalness: float = 0.0,
        emission: float | tuple[float, float, float] = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_material(albedo, roughness, metalness, emission)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_pbr_mesh(
        self,
        mesh: MeshData,
        albedo: tuple[float, float, float],
        roughness: float = 1.0,
        metalness: float = 0.0,
        transform: npt.NDArray[np.float32] | None = None,
    ) -> tuple[int, int]:
        """Add a mesh with a new material.

        Returns:
            Tuple of (mesh_index, material_id).
        """
        material_id = self.add_material(albedo, roughness, metalness)
        mesh_index = self.add_mesh(mesh, material_id, transform)
        return mesh_index, material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    def get_mesh_count(self) -> int:
        return get_mesh_count()

    def get_triangle_count(self) -> int:
        return get_triangle_count()

    def get_light_count(self) -> int:
        return get_light_count()

    def get_primitive_count(self) -> int:
        """Get the number of spheres plus mesh triangles."""
        return self.get_sphere_count() + self.get_triangle_count()

    # =========================================================================
    # Scene Configuration
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            config.materials.append(
                {
                    "albedo": list(mat.albedo),
                    "roughness": mat.roughness,
                    "metalness": mat.metalness,
                    "emission": list(mat.emission),
                }
            )

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for info in self.meshes:
            mesh_config: dict[str, Any] = {
                "vertices": info.mesh.vertices.tolist(),
                "indices": info.mesh.indices.tolist(),
                "material_id": info.material_id,
                "transform": info.transform.tolist(),
            }
            if info.mesh.normals is not None:
                mesh_config["normals"] = info.mesh.normals.tolist()
            config.meshes.append(mesh_config)

        for light in self.lights:
            config.lights.append(
                {
                    "position": list(light.position),
                    "strength": light.strength,
                    "color": list(light.color),
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene first. Materials are loaded before the
        primitives that reference them.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in config.materials:
            self.add_material(
                albedo=_vec3_tuple(mat_config.get("albedo", [0.5, 0.5, 0.5]), "albedo"),
                roughness=mat_config.get("roughness", 1.0),
                metalness=mat_config.get("metalness", 0.0),
                emission=mat_config.get("emission", 0.0),
            )

        for sphere_config in config.spheres:
            self.add_sphere(
                _vec3_tuple(sphere_config.get("center", [0, 0, 0]), "center"),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

        for mesh_config in config.meshes:
            if "vertices" not in mesh_config or "indices" not in mesh_config:
                raise ValueError("Mesh configuration needs 'vertices' and 'indices'")
            normals = mesh_config.get("normals")
            mesh = MeshData(
                np.array(mesh_config["vertices"]),
                np.array(mesh_config["indices"]),
                None if normals is None else np.array(normals),
            )
            transform = mesh_config.get("transform")
            self.add_mesh(
                mesh,
                mesh_config.get("material_id", 0),
                None if transform is None else np.array(transform, dtype=np.float32),
            )

        for light_config in config.lights:
            self.add_light(
                _vec3_tuple(light_config.get("position", [0, 0, 0]), "position"),
                light_config.get("strength", 1.0),
                _vec3_tuple(light_config.get("color", [1, 1, 1]), "color"),
            )

        logger.info(
            "Loaded scene: %d materials, %d spheres, %d meshes, %d lights",
            len(self.materials),
            len(self.spheres),
            len(self.meshes),
            len(self.lights),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a plain dictionary."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "meshes": config.meshes,
            "lights": config.lights,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials', 'spheres', 'meshes' and
                'lights' keys (all optional).
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            meshes=data.get("meshes", []),
            lights=data.get("lights", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_meshes() -> int:
        return MAX_MESHES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS

    @staticmethod
    def get_max_lights() -> int:
        return MAX_LIGHTS
