"""Cook-Torrance microfacet BRDF for direct lighting.

The specular lobe is D * G * F / (4 * NdotV * NdotL) with

- D: GGX / Trowbridge-Reitz normal distribution, alpha = roughness^2
- G: Smith joint shadowing-masking with the Schlick-GGX term,
  k = roughness^2 / 2
- F: Schlick's Fresnel approximation, F0 = mix(0.04, albedo, metalness)

and the diffuse lobe is kD * albedo / pi with kD = (1 - F) * (1 - metalness).
Every denominator carries a small epsilon so grazing angles and zero
roughness never produce inf or NaN.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Guard added to BRDF denominators
BRDF_EPSILON = 1e-4

# Base reflectance of dielectrics at normal incidence
DIELECTRIC_F0 = 0.04


@ti.func
def distribution_ggx(n_dot_h: ti.f32, roughness: ti.f32) -> ti.f32:
    """GGX normal distribution D."""
    alpha = roughness * roughness
    alpha2 = alpha * alpha
    denom = n_dot_h * n_dot_h * (alpha2 - 1.0) + 1.0
    return alpha2 / (tm.pi * denom * denom + BRDF_EPSILON)


@ti.func
def geometry_schlick_ggx(n_dot_x: ti.f32, k: ti.f32) -> ti.f32:
    """Schlick-GGX masking term for one direction."""
    return n_dot_x / (n_dot_x * (1.0 - k) + k + BRDF_EPSILON)


@ti.func
def geometry_smith(n_dot_v: ti.f32, n_dot_l: ti.f32, roughness: ti.f32) -> ti.f32:
    """Smith joint shadowing-masking G with k = roughness^2 / 2."""
    k = roughness * roughness / 2.0
    return geometry_schlick_ggx(n_dot_v, k) * geometry_schlick_ggx(n_dot_l, k)


@ti.func
def fresnel_schlick(cos_theta: ti.f32, f0: vec3) -> vec3:
    """Schlick's Fresnel approximation F."""
    return f0 + (1.0 - f0) * ti.pow(tm.clamp(1.0 - cos_theta, 0.0, 1.0), 5.0)


@ti.func
def base_reflectance(albedo: vec3, metalness: ti.f32) -> vec3:
    """F0 = mix(0.04, albedo, metalness)."""
    return tm.mix(vec3(DIELECTRIC_F0, DIELECTRIC_F0, DIELECTRIC_F0), albedo, metalness)


@ti.func
def eval_cook_torrance(
    normal: vec3,
    view_dir: vec3,
    light_dir: vec3,
    albedo: vec3,
    roughness: ti.f32,
    metalness: ti.f32,
) -> vec3:
    """Evaluate BRDF * cos(theta_l) for one light direction.

    Args:
        normal: Unit surface normal.
        view_dir: Unit direction from the surface toward the viewer.
        light_dir: Unit direction from the surface toward the light.
        albedo: Base color.
        roughness: Roughness in [0, 1].
        metalness: Metalness in [0, 1].

    Returns:
        (kD * albedo / pi + D * G * F / (4 * NdotV * NdotL + eps)) * NdotL,
        zero when the light is below the surface.
    """
    result = vec3(0.0, 0.0, 0.0)
    n_dot_l = tm.dot(normal, light_dir)

    if n_dot_l > 0.0:
        n_dot_v = ti.max(tm.dot(normal, view_dir), 0.0)
        half_vector = tm.normalize(view_dir + light_dir)
        n_dot_h = ti.max(tm.dot(normal, half_vector), 0.0)
        h_dot_v = ti.max(tm.dot(half_vector, view_dir), 0.0)

        d = distribution_ggx(n_dot_h, roughness)
        g = geometry_smith(n_dot_v, n_dot_l, roughness)
        f = fresnel_schlick(h_dot_v, base_reflectance(albedo, metalness))

        specular = d * g * f / (4.0 * n_dot_v * n_dot_l + BRDF_EPSILON)
        k_diffuse = (1.0 - f) * (1.0 - metalness)
        diffuse = k_diffuse * albedo / tm.pi

        result = (diffuse + specular) * n_dot_l

    return result
