"""Preview module for saving and displaying rendered frames.

Components:
    export: PNG export via Pillow
    display: Matplotlib display of frames, quantization error and palettes
"""

from palettetrace.preview.display import (
    apply_gamma,
    palette_swatches,
    show_frame,
    show_palette,
    show_quantization,
)
from palettetrace.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png,
    save_png_from_array,
)

__all__ = [
    "apply_gamma",
    "palette_swatches",
    "show_frame",
    "show_palette",
    "show_quantization",
    "compute_rmse",
    "image_to_uint8",
    "save_png",
    "save_png_from_array",
]
