"""Point light storage for direct lighting.

Lights are stored in pre-allocated Taichi fields. Each light has a position,
a positive strength with inverse-square falloff and a color.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Maximum number of point lights in the scene
MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_strengths = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all point lights."""
    num_lights[None] = 0


def add_light(
    position: tuple[float, float, float],
    strength: float,
    color: tuple[float, float, float] = (1.0, 1.0, 1.0),
) -> int:
    """Add a point light.

    Args:
        position: Light position in world space.
        strength: Positive intensity; irradiance falls off as 1 / distance^2.
        color: Light color, components >= 0.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        ValueError: If strength is not positive or a color component is negative.
    """
    if strength <= 0.0:
        raise ValueError(f"Light strength must be positive, got {strength}")
    for i, component in enumerate(color):
        if component < 0.0:
            raise ValueError(f"Light color component {i} = {component} is negative")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_positions[idx] = vec3(position[0], position[1], position[2])
    light_strengths[idx] = strength
    light_colors[idx] = vec3(color[0], color[1], color[2])
    num_lights[None] = idx + 1
    return idx


def set_light(
    index: int,
    position: tuple[float, float, float],
    strength: float,
    color: tuple[float, float, float] = (1.0, 1.0, 1.0),
) -> None:
    """Update an existing light between frames (e.g. a moving sun).

    Raises:
        IndexError: If index does not name an existing light.
        ValueError: If strength is not positive.
    """
    if index < 0 or index >= num_lights[None]:
        raise IndexError(f"No light with index {index}")
    if strength <= 0.0:
        raise ValueError(f"Light strength must be positive, got {strength}")
    light_positions[index] = vec3(position[0], position[1], position[2])
    light_strengths[index] = strength
    light_colors[index] = vec3(color[0], color[1], color[2])


def get_light_count() -> int:
    """Get the number of point lights."""
    return int(num_lights[None])
