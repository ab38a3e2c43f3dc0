"""Per-pixel shading strategies.

Two integrators share one entry point, selected by RenderSettings.mode:

Path traced
    A biased fixed-depth Monte Carlo estimator. Each of ``rays_per_pixel``
    samples follows the primary ray for up to ``bounces`` bounces. A hit tints
    the path color by mix(albedo, white, metalness), gathers the material's
    emission and continues along a roughness-weighted blend of the mirror
    reflection and a random scatter direction. A miss gathers the sky and ends
    the path. The pixel is the mean of color * light over the samples. There
    is no Russian roulette and no importance sampling.

Direct lit
    One primary hit shaded with the Cook-Torrance BRDF against every visible
    point light (shadow rays up to the light), an optional directional sun
    and an ambient term. Emissive surfaces return their emitted radiance.

Both results are clamped to [0, 1]. The settings are uploaded once per
configuration change with setup_integrator.

Example:
    >>> from palettetrace.core.integrator import setup_integrator
    >>> from palettetrace.core.settings import RenderSettings, ShadingMode
    >>> setup_integrator(RenderSettings(mode=ShadingMode.DIRECT_LIT))
"""

import math

import taichi as ti
import taichi.math as tm

from palettetrace.camera.look_at import get_primary_ray
from palettetrace.core.ray import Ray, clamp01, sanitize
from palettetrace.core.rng import RngContext, make_rng_context, make_seed
from palettetrace.core.settings import (
    EnvironmentPolicy,
    LightCombine,
    RenderSettings,
    ShadingMode,
)
from palettetrace.materials.cook_torrance import eval_cook_torrance
from palettetrace.materials.pbr import (
    bounce_tint,
    emitted_radiance,
    get_material,
    is_emissive,
    scatter_pbr,
)
from palettetrace.scene.intersection import intersect_scene, intersect_scene_any
from palettetrace.scene.lights import light_colors, light_positions, light_strengths, num_lights

# Type alias for 3D vectors
vec3 = tm.vec3

# t_min and t_max for ray intersection
T_MIN = 1e-4
T_MAX = 1e10

# Guard for the inverse-square falloff
FALLOFF_EPSILON = 1e-6

# =============================================================================
# Integrator Settings (uploaded by setup_integrator)
# =============================================================================

_mode = ti.field(dtype=ti.i32, shape=())
_bounces = ti.field(dtype=ti.i32, shape=())
_rays_per_pixel = ti.field(dtype=ti.i32, shape=())
_ambient_strength = ti.field(dtype=ti.f32, shape=())
_sky_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_sky_strength = ti.field(dtype=ti.f32, shape=())
_environment = ti.field(dtype=ti.i32, shape=())
_sun_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_sun_strength = ti.field(dtype=ti.f32, shape=())
_sun_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_light_combine = ti.field(dtype=ti.i32, shape=())
_ray_offset = ti.field(dtype=ti.f32, shape=())


def setup_integrator(settings: RenderSettings) -> None:
    """Upload the integrator part of the render settings."""
    _mode[None] = int(settings.mode)
    _bounces[None] = settings.bounces
    _rays_per_pixel[None] = settings.rays_per_pixel
    _ambient_strength[None] = settings.ambient_strength
    _sky_color[None] = list(settings.sky_color)
    _sky_strength[None] = settings.sky_strength
    _environment[None] = int(settings.environment)
    _sun_strength[None] = settings.sun_strength
    _sun_color[None] = list(settings.sun_color)
    _light_combine[None] = int(settings.light_combine)
    _ray_offset[None] = settings.ray_offset

    length = math.hypot(*settings.sun_direction)
    if length > 0.0:
        _sun_direction[None] = [c / length for c in settings.sun_direction]
    else:
        _sun_direction[None] = [0.0, -1.0, 0.0]


# =============================================================================
# Path Tracing
# =============================================================================


@ti.func
def _gather_environment(color: vec3, light: vec3):
    """Apply the environment policy to a path that escaped the scene."""
    sky = _sky_color[None]
    strength = _sky_strength[None]
    new_color = color
    new_light = light + sky * strength
    if _environment[None] == int(EnvironmentPolicy.TINT):
        new_color = color * sky
        new_light = light + vec3(strength, strength, strength)
    return new_color, new_light


@ti.func
def trace_path_traced(ray: Ray, rng: RngContext) -> vec3:
    """Fixed-depth path traced estimate for one pixel.

    Args:
        ray: The primary ray.
        rng: The pixel worker's RNG context.

    Returns:
        The mean of color * light over all samples, clamped to [0, 1].
    """
    total = vec3(0.0, 0.0, 0.0)
    samples = _rays_per_pixel[None]

    for sample in range(samples):
        origin = ray.origin
        direction = ray.direction
        color = vec3(1.0, 1.0, 1.0)
        light = vec3(0.0, 0.0, 0.0)

        # Taichi doesn't support break in ti.func loops
        active = 1

        for bounce in range(_bounces[None]):
            if active == 1:
                rec = intersect_scene(origin, direction, T_MIN, T_MAX)

                if rec.hit == 0:
                    color, light = _gather_environment(color, light)
                    active = 0
                else:
                    material = get_material(rec.material_id)
                    color *= bounce_tint(material)
                    light += material.emission

                    origin = rec.point + rec.normal * _ray_offset[None]
                    direction = scatter_pbr(
                        material, direction, rec.normal, rng, make_seed(sample, bounce, 0)
                    )

        total += color * light

    return clamp01(total / ti.cast(samples, ti.f32))


# =============================================================================
# Direct Lighting
# =============================================================================


@ti.func
def _point_lights(point: vec3, origin: vec3, normal: vec3, view_dir: vec3, material) -> vec3:
    """Cook-Torrance contribution of every unoccluded point light."""
    lit = vec3(0.0, 0.0, 0.0)
    count = num_lights[None]

    for i in range(count):
        to_light = light_positions[i] - point
        distance_sq = tm.dot(to_light, to_light)
        if distance_sq > FALLOFF_EPSILON:
            light_dir = to_light / ti.sqrt(distance_sq)
            shadow_max = tm.length(light_positions[i] - origin)
            if intersect_scene_any(origin, light_dir, T_MIN, shadow_max) == 0:
                brdf = eval_cook_torrance(
                    normal,
                    view_dir,
                    light_dir,
                    material.albedo,
                    material.roughness,
                    material.metalness,
                )
                lit += brdf * light_colors[i] * light_strengths[i] / distance_sq

    if _light_combine[None] == int(LightCombine.AVERAGE) and count > 0:
        lit /= ti.cast(count, ti.f32)
    return lit


@ti.func
def _sun_light(origin: vec3, normal: vec3, view_dir: vec3, material) -> vec3:
    lit = vec3(0.0, 0.0, 0.0)
    if _sun_strength[None] > 0.0:
        light_dir = -_sun_direction[None]
        if intersect_scene_any(origin, light_dir, T_MIN, T_MAX) == 0:
            brdf = eval_cook_torrance(
                normal,
                view_dir,
                light_dir,
                material.albedo,
                material.roughness,
                material.metalness,
            )
            lit = brdf * _sun_color[None] * _sun_strength[None]
    return lit


@ti.func
def trace_direct_lit(ray: Ray) -> vec3:
    """Cook-Torrance direct lighting of the primary hit.

    Args:
        ray: The primary ray.

    Returns:
        The shaded color clamped to [0, 1]. Misses return the sky, emissive
        surfaces their emitted radiance.
    """
    result = _sky_color[None] * _sky_strength[None]
    rec = intersect_scene(ray.origin, ray.direction, T_MIN, T_MAX)

    if rec.hit == 1:
        material = get_material(rec.material_id)
        if is_emissive(material):
            result = emitted_radiance(material)
        else:
            normal = rec.normal
            view_dir = -tm.normalize(ray.direction)
            origin = rec.point + normal * _ray_offset[None]

            lit = _point_lights(rec.point, origin, normal, view_dir, material)
            lit += _sun_light(origin, normal, view_dir, material)
            result = lit + _ambient_strength[None] * material.albedo

    return clamp01(result)


# =============================================================================
# Entry Point
# =============================================================================


@ti.func
def trace_pixel(ray: Ray, rng: RngContext) -> vec3:
    """Shade one primary ray with the configured strategy.

    NaN and infinite components are replaced by zero.
    """
    color = vec3(0.0, 0.0, 0.0)
    if _mode[None] == int(ShadingMode.DIRECT_LIT):
        color = trace_direct_lit(ray)
    else:
        color = trace_path_traced(ray, rng)
    return sanitize(color)


@ti.kernel
def _render_single_pixel(
    px: ti.f32, py: ti.f32, width: ti.i32, height: ti.i32, time: ti.f32
) -> vec3:
    ray = get_primary_ray(px, py, width, height)
    rng = make_rng_context(ti.cast(px, ti.i32), ti.cast(py, ti.i32), time)
    return trace_pixel(ray, rng)


def render_sample(
    px: float, py: float, width: int, height: int, time: float = 0.0
) -> tuple[float, float, float]:
    """Shade a single pixel position with the current camera and settings.

    Python-callable for testing. For whole frames use the frame driver,
    which processes all pixels in parallel.

    Returns:
        Tuple of (R, G, B) color values before quantization.
    """
    color = _render_single_pixel(px, py, width, height, time)
    return (float(color[0]), float(color[1]), float(color[2]))
