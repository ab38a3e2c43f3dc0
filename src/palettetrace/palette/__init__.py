"""Palette tables and nearest-color quantization."""

from .palettes import DB32, PALETTE_SIZE, Palette, hex_to_rgb
from .quantizer import (
    distance_euclidean,
    distance_perceptual,
    quantize,
    quantize_array,
    quantize_color,
    set_metric,
    setup_palette,
)

__all__ = [
    "Palette",
    "DB32",
    "PALETTE_SIZE",
    "hex_to_rgb",
    "setup_palette",
    "set_metric",
    "quantize",
    "quantize_color",
    "quantize_array",
    "distance_euclidean",
    "distance_perceptual",
]
