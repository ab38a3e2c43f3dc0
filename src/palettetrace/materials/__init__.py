"""Material storage and shading models.

Components:
    pbr: Albedo / roughness / metalness / emission registry and the path
        tracer's bounce scattering
    cook_torrance: GGX + Smith + Schlick microfacet BRDF for direct lighting
"""

from .cook_torrance import (
    base_reflectance,
    distribution_ggx,
    eval_cook_torrance,
    fresnel_schlick,
    geometry_schlick_ggx,
    geometry_smith,
)
from .pbr import (
    MAX_MATERIALS,
    PbrMaterial,
    add_material,
    bounce_tint,
    clear_materials,
    emitted_radiance,
    get_material,
    get_material_count,
    is_emissive,
    is_emissive_material,
    scatter_pbr,
)

__all__ = [
    "PbrMaterial",
    "MAX_MATERIALS",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "is_emissive",
    "is_emissive_material",
    "emitted_radiance",
    "bounce_tint",
    "scatter_pbr",
    "distribution_ggx",
    "geometry_schlick_ggx",
    "geometry_smith",
    "fresnel_schlick",
    "base_reflectance",
    "eval_cook_torrance",
]
