"""Meadow demo scene.

A small stylized scene used by the example script and the end-to-end tests:

- A grass ground plane
- Trees made of a box trunk and a pyramid crown, placed with model transforms
- A furnace block
- Fireflies: small emissive spheres, each with a matching point light
- A high point light standing in for the sun

The camera is the isometric orthographic look-at view of the engine
(35.264 degree elevation).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from palettetrace.scene.demo import create_meadow_scene
    >>> scene, camera = create_meadow_scene()
"""

import math
from dataclasses import dataclass, field

from palettetrace.camera.look_at import LookAtCamera, Projection
from palettetrace.geometry.mesh import (
    compose,
    make_box,
    make_plane,
    make_pyramid,
    rotation_y,
    scaling,
    translation,
)
from palettetrace.scene.manager import SceneManager

# =============================================================================
# Meadow Parameters
# =============================================================================


@dataclass
class MeadowParams:
    """Parameters for configuring the meadow scene.

    Attributes:
        ground_size: Side length of the square grass plane.
        tree_positions: (x, z) positions of the trees.
        firefly_positions: Positions of the firefly spheres.
        firefly_strength: Emission of the firefly material and strength of
            their point lights.
        sun_position: Position of the sun point light.
        sun_strength: Strength of the sun point light.
        sun_color: Color of the sun point light.
    """

    ground_size: float = 12.0
    tree_positions: list[tuple[float, float]] = field(
        default_factory=lambda: [(-2.5, -1.5), (2.0, -2.5), (-1.0, 2.5), (3.0, 1.5)]
    )
    firefly_positions: list[tuple[float, float, float]] = field(
        default_factory=lambda: [(-0.8, 1.2, 0.6), (1.2, 0.9, -0.4), (0.3, 1.6, 1.8)]
    )
    firefly_strength: float = 3.0
    sun_position: tuple[float, float, float] = (20.0, 40.0, 10.0)
    sun_strength: float = 2000.0
    sun_color: tuple[float, float, float] = (0.8, 1.0, 0.5)


GRASS_ALBEDO = (0.35, 0.62, 0.25)
TRUNK_ALBEDO = (0.45, 0.3, 0.18)
CROWN_ALBEDO = (0.16, 0.45, 0.2)
FURNACE_ALBEDO = (0.5, 0.5, 0.52)
FIREFLY_ALBEDO = (1.0, 0.95, 0.5)
ORE_ALBEDO = (0.85, 0.55, 0.3)

FIREFLY_RADIUS = 0.08
ISOMETRIC_ELEVATION = 35.264


def isometric_camera(distance: float = 5.0, zoom: float = 60.0) -> LookAtCamera:
    """The engine's isometric orthographic view of the origin."""
    return LookAtCamera(
        eye=(0.0, distance * math.tan(math.radians(ISOMETRIC_ELEVATION)), distance),
        target=(0.0, 0.5, 0.0),
        zoom=zoom,
        projection=Projection.ORTHOGRAPHIC,
    )


def create_meadow_scene(
    params: MeadowParams | None = None,
) -> tuple[SceneManager, LookAtCamera]:
    """Create the meadow demo scene.

    Args:
        params: Optional MeadowParams. If None, uses default MeadowParams().

    Returns:
        A tuple of (SceneManager, LookAtCamera).
    """
    if params is None:
        params = MeadowParams()

    scene = SceneManager()

    # =========================================================================
    # Materials
    # =========================================================================

    grass_mat = scene.add_material(albedo=GRASS_ALBEDO, roughness=0.95)
    trunk_mat = scene.add_material(albedo=TRUNK_ALBEDO, roughness=0.9)
    crown_mat = scene.add_material(albedo=CROWN_ALBEDO, roughness=0.8)
    furnace_mat = scene.add_material(albedo=FURNACE_ALBEDO, roughness=0.6, metalness=0.2)
    ore_mat = scene.add_material(albedo=ORE_ALBEDO, roughness=0.3, metalness=1.0)
    firefly_mat = scene.add_emissive_material(FIREFLY_ALBEDO, params.firefly_strength)

    # =========================================================================
    # Ground and props
    # =========================================================================

    scene.add_mesh(make_plane((params.ground_size, params.ground_size)), grass_mat)

    for i, (x, z) in enumerate(params.tree_positions):
        angle = i * 0.7
        scene.add_mesh(
            make_box((0.3, 0.8, 0.3)),
            trunk_mat,
            compose(translation((x, 0.0, z)), rotation_y(angle)),
        )
        scene.add_mesh(
            make_pyramid(base=1.4, height=1.8, sides=6),
            crown_mat,
            compose(translation((x, 0.8, z)), rotation_y(angle)),
        )

    scene.add_mesh(
        make_box(),
        furnace_mat,
        compose(translation((1.0, 0.0, 1.0)), rotation_y(0.4), scaling((0.8, 0.9, 0.8))),
    )
    scene.add_sphere(center=(-1.8, 0.25, 0.5), radius=0.25, material_id=ore_mat)

    # =========================================================================
    # Lights
    # =========================================================================

    for x, y, z in params.firefly_positions:
        scene.add_sphere(center=(x, y, z), radius=FIREFLY_RADIUS, material_id=firefly_mat)
        # The light sits just below the body so the body does not occlude it
        scene.add_light(
            position=(x, y - 2.0 * FIREFLY_RADIUS, z),
            strength=params.firefly_strength,
            color=FIREFLY_ALBEDO,
        )

    scene.add_light(
        position=params.sun_position, strength=params.sun_strength, color=params.sun_color
    )

    return scene, isometric_camera()
