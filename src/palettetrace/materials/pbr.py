"""PBR material storage and the path tracer's bounce scattering.

Every surface in the scene uses the same material model: an albedo color, a
roughness and a metalness in [0, 1], and an emission. A material with any
positive emission component is a light source; its emitted radiance is
albedo * emission.

For the fixed-depth path tracer a bounce tints the path by the albedo blended
toward white by metalness, and continues along a direction blended from the
mirror reflection toward a random scatter direction by roughness:

    tint      = mix(albedo, white, metalness)
    direction = normalize(mix(reflect(d, n), scatter, roughness))

Example:
    >>> from palettetrace.materials.pbr import add_material
    >>> grass = add_material(albedo=(0.3, 0.6, 0.2), roughness=0.9)
    >>> lamp = add_material(albedo=(1.0, 0.9, 0.6), emission=4.0)
"""

import taichi as ti
import taichi.math as tm

from palettetrace.core.ray import reflect, safe_normalize
from palettetrace.core.rng import RngContext, random_in_hemisphere

# Type alias for 3D vectors
vec3 = tm.vec3
vec2 = tm.vec2


@ti.dataclass
class PbrMaterial:
    """Material properties of one surface.

    Attributes:
        albedo: Base color (RGB, each component in [0, 1]).
        roughness: 0 = mirror-like, 1 = fully scattering.
        metalness: 0 = dielectric, 1 = metal.
        emission: Emission strength per channel (non-negative).
    """

    albedo: vec3
    roughness: ti.f32
    metalness: ti.f32
    emission: vec3


# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 256

material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_roughnesses = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_metalnesses = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_emissions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def _as_emission(emission: float | tuple[float, float, float]) -> tuple[float, float, float]:
    if isinstance(emission, (int, float)):
        return (float(emission), float(emission), float(emission))
    if len(emission) != 3:
        raise ValueError(f"Emission must be a scalar or 3 components, got {len(emission)}")
    return (float(emission[0]), float(emission[1]), float(emission[2]))


def add_material(
    albedo: tuple[float, float, float],
    roughness: float = 1.0,
    metalness: float = 0.0,
    emission: float | tuple[float, float, float] = 0.0,
) -> int:
    """Add a material to the material registry.

    Args:
        albedo: Base color as (R, G, B), each component in [0, 1].
        roughness: Surface roughness in [0, 1]. Default 1 (fully diffuse).
        metalness: Metalness in [0, 1]. Default 0.
        emission: Scalar or (R, G, B) emission, all components >= 0.

    Returns:
        The id of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any parameter is outside its range.
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Albedo component {i} = {component} is outside [0, 1]")

    if roughness < 0.0 or roughness > 1.0:
        raise ValueError(f"Roughness = {roughness} is outside [0, 1]")

    if metalness < 0.0 or metalness > 1.0:
        raise ValueError(f"Metalness = {metalness} is outside [0, 1]")

    emission_rgb = _as_emission(emission)
    for i, component in enumerate(emission_rgb):
        if component < 0.0:
            raise ValueError(f"Emission component {i} = {component} is negative")

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    material_roughnesses[idx] = roughness
    material_metalnesses[idx] = metalness
    material_emissions[idx] = vec3(*emission_rgb)
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


def is_emissive_material(material_id: int) -> bool:
    """Python-side check whether a material is a light source."""
    emission = material_emissions[material_id]
    return max(float(emission[0]), float(emission[1]), float(emission[2])) > 0.0


@ti.func
def get_material(material_id: ti.i32) -> PbrMaterial:
    """Load a material from the registry inside a kernel."""
    return PbrMaterial(
        albedo=material_albedos[material_id],
        roughness=material_roughnesses[material_id],
        metalness=material_metalnesses[material_id],
        emission=material_emissions[material_id],
    )


# =============================================================================
# Shading Helpers
# =============================================================================


@ti.func
def is_emissive(material: PbrMaterial) -> ti.i32:
    """1 if the material emits light in any channel."""
    return ti.max(ti.max(material.emission.x, material.emission.y), material.emission.z) > 0.0


@ti.func
def emitted_radiance(material: PbrMaterial) -> vec3:
    """Radiance leaving an emissive surface: albedo * emission."""
    return material.albedo * material.emission


@ti.func
def bounce_tint(material: PbrMaterial) -> vec3:
    """Path throughput factor of one bounce: mix(albedo, white, metalness)."""
    return tm.mix(material.albedo, vec3(1.0, 1.0, 1.0), material.metalness)


@ti.func
def scatter_pbr(
    material: PbrMaterial,
    incident_direction: vec3,
    normal: vec3,
    rng: RngContext,
    seed: vec2,
) -> vec3:
    """Next path direction after a bounce.

    The mirror reflection is blended toward a random direction in the normal's
    hemisphere by roughness. If the blend cancels out (a rough surface whose
    random draw opposes the reflection) the normal is used instead.

    Args:
        material: The material of the hit surface.
        incident_direction: The incoming ray direction (normalized).
        normal: The surface normal facing the incoming ray.
        rng: The pixel worker's RNG context.
        seed: Seed of this bounce's random draw.

    Returns:
        The normalized scattered direction.
    """
    reflected = reflect(incident_direction, normal)
    scatter = random_in_hemisphere(rng, seed, normal)
    direction = safe_normalize(tm.mix(reflected, scatter, material.roughness))
    if tm.dot(direction, direction) == 0.0:
        direction = normal
    return direction
