"""Ray-AABB slab test used to reject whole meshes.

This is a coarse per-object culling step, not a hierarchy: the scene scan
tests every mesh box once per ray and only walks the triangles of meshes whose
box the ray can reach before the closest hit found so far.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Direction components smaller than this are treated as parallel to a slab
SLAB_EPSILON = 1e-8


@ti.func
def hit_aabb(
    ray_origin: vec3,
    ray_direction: vec3,
    box_min: vec3,
    box_max: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Slab test of a ray against an axis-aligned box.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        box_min: Minimum corner of the box.
        box_max: Maximum corner of the box.
        t_min: Start of the ray interval of interest.
        t_max: End of the ray interval of interest.

    Returns:
        1 if the ray's slab interval overlaps [t_min, t_max], 0 if it is
        empty, entirely behind t_min or entirely beyond t_max.
    """
    t_near = t_min
    t_far = t_max
    hit = 1

    for axis in ti.static(range(3)):
        o = ray_origin[axis]
        d = ray_direction[axis]
        if ti.abs(d) < SLAB_EPSILON:
            # Parallel to this slab: inside it or never
            if o < box_min[axis] or o > box_max[axis]:
                hit = 0
        else:
            inv_d = 1.0 / d
            t0 = (box_min[axis] - o) * inv_d
            t1 = (box_max[axis] - o) * inv_d
            t_near = ti.max(t_near, ti.min(t0, t1))
            t_far = ti.min(t_far, ti.max(t0, t1))

    if t_near > t_far:
        hit = 0

    return hit
