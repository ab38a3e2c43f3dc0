"""Camera module for primary ray generation.

Components:
    look_at: Look-at camera with orthographic and perspective projection
"""

from .look_at import (
    LookAtCamera,
    Projection,
    compute_basis,
    get_camera_info,
    get_primary_ray,
    setup_camera,
)

__all__ = [
    "LookAtCamera",
    "Projection",
    "compute_basis",
    "setup_camera",
    "get_primary_ray",
    "get_camera_info",
]
