"""Stateless hash-based random numbers for per-pixel workers.

Each pixel worker builds an RngContext from its pixel coordinate and the frame
time, then asks for numbers with a caller-supplied seed. The generator keeps
no state between calls: the same (pixel, seed, time) always yields the same
bits, so any number of workers can draw concurrently without synchronization.

The hash is the classic sine/fract shader hash. It is not statistically
rigorous, but it is cheap, deterministic and good enough for the bounce
directions of a stylized low-resolution image.

Example:
    >>> @ti.kernel
    ... def draw(px: ti.i32, py: ti.i32) -> ti.f32:
    ...     ctx = make_rng_context(px, py, 0.5)
    ...     return random01(ctx, make_seed(0, 0, 0))
"""

import taichi as ti
import taichi.math as tm

vec2 = tm.vec2
vec3 = tm.vec3

# Hash constants of the sine/fract generator
HASH_DOT = vec2(12.9898, 78.233)
HASH_SCALE = 43758.5453

# Irrational strides used to spread seed components across the hash domain
SEED_STRIDE_X = 0.6180339
SEED_STRIDE_Y = 1.4142135
TIME_STRIDE = 0.7548776


@ti.dataclass
class RngContext:
    """Per-pixel random number context.

    Attributes:
        pixel: The pixel coordinate the worker is shading.
        time: The frame time the worker is rendering.
    """

    pixel: vec2
    time: ti.f32


@ti.func
def make_rng_context(pixel_x: ti.i32, pixel_y: ti.i32, time: ti.f32) -> RngContext:
    """Create the RNG context for one pixel worker."""
    return RngContext(
        pixel=vec2(ti.cast(pixel_x, ti.f32), ti.cast(pixel_y, ti.f32)),
        time=time,
    )


@ti.func
def make_seed(sample: ti.i32, bounce: ti.i32, draw: ti.i32) -> vec2:
    """Derive a seed from the sample, bounce and draw indices.

    Distinct (sample, bounce, draw) triples map to distinct seeds so every
    random decision inside one pixel gets its own stream.
    """
    return vec2(
        ti.cast(sample * 31 + bounce, ti.f32),
        ti.cast(draw * 17 + bounce * 3 + 1, ti.f32),
    )


@ti.func
def _hash(seed: vec2, pixel: vec2, time: ti.f32) -> ti.f32:
    """Sine/fract hash of seed, pixel and time into [0, 1)."""
    co = vec2(
        pixel.x + seed.x * SEED_STRIDE_X + time * TIME_STRIDE,
        pixel.y + seed.y * SEED_STRIDE_Y - time * TIME_STRIDE,
    )
    return tm.fract(ti.sin(tm.dot(co, HASH_DOT)) * HASH_SCALE)


@ti.func
def random01(ctx: RngContext, seed: vec2) -> ti.f32:
    """Draw a pseudo-random number in [0, 1)."""
    return _hash(seed, ctx.pixel, ctx.time)


@ti.func
def random(ctx: RngContext, seed: vec2) -> ti.f32:
    """Draw a pseudo-random number in [-1, 1)."""
    return random01(ctx, seed) * 2.0 - 1.0


@ti.func
def random_unit_vector(ctx: RngContext, seed: vec2) -> vec3:
    """Draw a random direction from three independent scalar samples.

    The three draws are normalized as they come. If all three are exactly
    zero the result is undefined; that case is not special-cased.
    """
    v = vec3(
        random(ctx, seed + vec2(0.0, 0.25)),
        random(ctx, seed + vec2(0.5, 0.5)),
        random(ctx, seed + vec2(0.75, 0.125)),
    )
    return tm.normalize(v)


@ti.func
def random_in_hemisphere(ctx: RngContext, seed: vec2, normal: vec3) -> vec3:
    """Draw a random direction in the hemisphere around a normal."""
    direction = random_unit_vector(ctx, seed)
    if tm.dot(direction, normal) < 0.0:
        direction = -direction
    return direction
