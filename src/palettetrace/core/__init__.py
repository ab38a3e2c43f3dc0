"""Core rendering module.

Components:
    ray: Ray data structure and vector helpers
    rng: Stateless per-pixel random numbers
    settings: Render settings, shading and metric enums, frame clock
    integrator: Path-traced and direct-lit shading strategies
    frame: Per-pixel dispatch kernel and output surfaces
    renderer: Host-side frame loop

All compute-intensive operations are Taichi kernels with one independent
worker per output pixel.
"""

from .ray import (
    Ray,
    clamp01,
    make_ray,
    ray_at,
    reflect,
    safe_normalize,
    sanitize,
    transform_direction,
    transform_point,
    vec3,
)
from .rng import (
    RngContext,
    make_rng_context,
    make_seed,
    random,
    random01,
    random_in_hemisphere,
    random_unit_vector,
)
from .settings import (
    EnvironmentPolicy,
    FrameTime,
    LightCombine,
    PaletteMetric,
    RenderSettings,
    ShadingMode,
)

# Note: integrator, frame and renderer are NOT imported here to avoid circular imports.
# Import directly from palettetrace.core.frame or palettetrace.core.renderer when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "safe_normalize",
    "reflect",
    "clamp01",
    "sanitize",
    "transform_point",
    "transform_direction",
    "RngContext",
    "make_rng_context",
    "make_seed",
    "random",
    "random01",
    "random_unit_vector",
    "random_in_hemisphere",
    "RenderSettings",
    "ShadingMode",
    "EnvironmentPolicy",
    "LightCombine",
    "PaletteMetric",
    "FrameTime",
]
