"""Look-at camera for primary ray generation.

The camera is defined by an eye and a target point. Its basis is

    forward = normalize(target - eye)
    right   = normalize(cross(forward, world_up))
    up      = normalize(cross(forward, right))

so ``up`` points down the screen and pixel row 0 is the top of the image. If
forward is parallel to world_up the basis falls back to world +Z as the up
reference.

A pixel's offset from the viewport centre is divided by ``zoom`` (pixels per
world unit). With ORTHOGRAPHIC projection the offset moves the ray origin and
every ray travels along forward, the isometric look of the stylized renderer.
With PERSPECTIVE projection the offset moves a point on an image plane one
unit in front of the eye.

Example:
    >>> from palettetrace.camera.look_at import LookAtCamera, setup_camera
    >>> camera = LookAtCamera(eye=(0.0, 3.5, 5.0), target=(0.0, 0.5, 0.0), zoom=100.0)
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from palettetrace.core.ray import Ray, make_ray, vec3

# Basis fallback threshold for forward parallel to world_up
DEGENERATE_EPSILON = 1e-6

# Up reference used when forward is parallel to world_up
FALLBACK_UP = (0.0, 0.0, 1.0)


class Projection(IntEnum):
    """How pixel offsets turn into primary rays."""

    ORTHOGRAPHIC = 0
    PERSPECTIVE = 1


@dataclass
class LookAtCamera:
    """Configuration of the look-at camera.

    Attributes:
        eye: Camera position in world space.
        target: Point the camera looks at.
        zoom: Pixels per world unit on the image plane (> 0).
        projection: Orthographic or perspective primary rays.
        world_up: Up reference used to build the basis.
    """

    eye: tuple[float, float, float] = (0.0, 5.0 * math.tan(math.radians(35.264)), 5.0)
    target: tuple[float, float, float] = (0.0, 0.5, 0.0)
    zoom: float = 100.0
    projection: Projection = Projection.ORTHOGRAPHIC
    world_up: tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self) -> None:
        if self.zoom <= 0.0:
            raise ValueError(f"Camera zoom must be positive, got {self.zoom}")
        if np.allclose(self.eye, self.target):
            raise ValueError("Camera eye and target must differ")

    @staticmethod
    def zoom_for_fov(vfov: float, height: int) -> float:
        """Perspective zoom that spans vfov degrees over height pixels."""
        if not 0.0 < vfov < 180.0:
            raise ValueError(f"Vertical field of view must be in (0, 180), got {vfov}")
        return height / (2.0 * math.tan(math.radians(vfov) / 2.0))


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_zoom = ti.field(dtype=ti.f32, shape=())
_camera_projection = ti.field(dtype=ti.i32, shape=())


def compute_basis(camera: LookAtCamera) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Compute (forward, right, up) for a camera with NumPy."""
    eye = np.array(camera.eye, dtype=np.float64)
    target = np.array(camera.target, dtype=np.float64)
    world_up = np.array(camera.world_up, dtype=np.float64)

    forward = target - eye
    forward /= np.linalg.norm(forward)

    right = np.cross(forward, world_up)
    if np.linalg.norm(right) < DEGENERATE_EPSILON:
        right = np.cross(forward, np.array(FALLBACK_UP))
    right /= np.linalg.norm(right)

    up = np.cross(forward, right)
    up /= np.linalg.norm(up)
    return forward, right, up


def setup_camera(camera: LookAtCamera) -> None:
    """Upload the camera basis to the kernels.

    Must be called from Python before rendering and whenever the camera moves.
    """
    forward, right, up = compute_basis(camera)
    _camera_eye[None] = list(camera.eye)
    _camera_forward[None] = forward.tolist()
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()
    _camera_zoom[None] = camera.zoom
    _camera_projection[None] = int(camera.projection)


@ti.func
def get_primary_ray(px: ti.f32, py: ti.f32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray through a pixel position.

    Args:
        px: Horizontal pixel coordinate (0 = left edge, may be fractional).
        py: Vertical pixel coordinate (0 = top edge, may be fractional).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The primary ray with a unit direction.
    """
    offset_x = (px - ti.cast(width, ti.f32) * 0.5) / _camera_zoom[None]
    offset_y = (py - ti.cast(height, ti.f32) * 0.5) / _camera_zoom[None]
    screen_offset = _camera_right[None] * offset_x + _camera_up[None] * offset_y

    origin = _camera_eye[None]
    direction = _camera_forward[None]
    if _camera_projection[None] == int(Projection.ORTHOGRAPHIC):
        origin = origin + screen_offset
    else:
        direction = tm.normalize(direction + screen_offset)

    return make_ray(origin, direction)


def get_camera_info() -> dict[str, tuple[float, float, float] | float | int]:
    """Get the current camera state for debugging."""

    def _as_tuple(field) -> tuple[float, float, float]:
        v = field[None]
        return (float(v[0]), float(v[1]), float(v[2]))

    return {
        "eye": _as_tuple(_camera_eye),
        "forward": _as_tuple(_camera_forward),
        "right": _as_tuple(_camera_right),
        "up": _as_tuple(_camera_up),
        "zoom": float(_camera_zoom[None]),
        "projection": int(_camera_projection[None]),
    }
