"""Nearest-color palette quantization.

Every shaded color is snapped to the closest entry of the uploaded 32-color
palette. The scan starts from an infinite best distance and a strictly
smaller distance replaces the best, so ties resolve to the lowest index.

Two distances are supported:

- EUCLIDEAN: ||p - c||
- PERCEPTUAL: ||p - c|| * (1 - k * (cos(p, c) + bias)), which penalizes a
  hue mismatch more than a brightness difference. The cosine term is taken
  as 0 when either color is black, so zero vectors are never normalized.

quantize_array applies the same rules to whole images in NumPy.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from palettetrace.core.ray import ZERO_LENGTH_EPSILON
from palettetrace.core.settings import PaletteMetric
from palettetrace.palette.palettes import DB32, PALETTE_SIZE, Palette

vec3 = tm.vec3

palette_colors = ti.Vector.field(3, dtype=ti.f32, shape=PALETTE_SIZE)
_metric = ti.field(dtype=ti.i32, shape=())
_perceptual_k = ti.field(dtype=ti.f32, shape=())
_perceptual_bias = ti.field(dtype=ti.f32, shape=())

# Scratch results of quantize_color
_result_index = ti.field(dtype=ti.i32, shape=())
_result_color = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_palette(palette: Palette = DB32) -> None:
    """Upload a palette to the kernels."""
    for i, color in enumerate(palette.colors):
        palette_colors[i] = list(color)


def set_metric(metric: PaletteMetric, k: float = 0.5, bias: float = 0.5) -> None:
    """Select the distance metric and its perceptual constants."""
    _metric[None] = int(metric)
    _perceptual_k[None] = k
    _perceptual_bias[None] = bias


@ti.func
def distance_euclidean(a: vec3, b: vec3) -> ti.f32:
    return tm.length(a - b)


@ti.func
def distance_perceptual(a: vec3, b: vec3, k: ti.f32, bias: ti.f32) -> ti.f32:
    """Euclidean distance weighted by hue similarity."""
    cosine = 0.0
    len_a = tm.dot(a, a)
    len_b = tm.dot(b, b)
    if len_a > ZERO_LENGTH_EPSILON and len_b > ZERO_LENGTH_EPSILON:
        cosine = tm.dot(a, b) / ti.sqrt(len_a * len_b)
    return tm.length(a - b) * (1.0 - k * (cosine + bias))


@ti.func
def palette_distance(entry: vec3, color: vec3) -> ti.f32:
    result = 0.0
    if _metric[None] == int(PaletteMetric.EUCLIDEAN):
        result = distance_euclidean(entry, color)
    else:
        result = distance_perceptual(entry, color, _perceptual_k[None], _perceptual_bias[None])
    return result


@ti.func
def quantize(color: vec3):
    """Find the nearest palette entry.

    Returns:
        Tuple (index, palette_color).
    """
    best_distance = tm.inf
    best_index = 0
    for i in range(PALETTE_SIZE):
        d = palette_distance(palette_colors[i], color)
        if d < best_distance:
            best_distance = d
            best_index = i
    return best_index, palette_colors[best_index]


@ti.kernel
def _quantize_kernel(r: ti.f32, g: ti.f32, b: ti.f32):
    index, snapped = quantize(vec3(r, g, b))
    _result_index[None] = index
    _result_color[None] = snapped


def quantize_color(color: tuple[float, float, float]) -> tuple[int, tuple[float, float, float]]:
    """Quantize a single color with the uploaded palette and metric."""
    _quantize_kernel(color[0], color[1], color[2])
    snapped = _result_color[None]
    return int(_result_index[None]), (float(snapped[0]), float(snapped[1]), float(snapped[2]))


def quantize_array(
    image: npt.NDArray[np.floating],
    palette: Palette = DB32,
    metric: PaletteMetric = PaletteMetric.PERCEPTUAL,
    k: float = 0.5,
    bias: float = 0.5,
) -> tuple[npt.NDArray[np.int32], npt.NDArray[np.float32]]:
    """Quantize an array of colors on the host.

    Args:
        image: Array of shape (..., 3).
        palette: The palette to snap to.
        metric: Distance metric.
        k: Perceptual hue weight.
        bias: Perceptual cosine bias.

    Returns:
        Tuple (indices of shape (...), colors of shape (..., 3)).
    """
    colors = np.asarray(image, dtype=np.float32)
    if colors.shape[-1] != 3:
        raise ValueError(f"Expected a trailing dimension of 3, got shape {colors.shape}")
    table = palette.to_numpy()
    flat = colors.reshape(-1, 1, 3)

    distances = np.linalg.norm(table[None, :, :] - flat, axis=-1)
    if metric == PaletteMetric.PERCEPTUAL:
        len_c = np.linalg.norm(flat, axis=-1)
        len_p = np.linalg.norm(table, axis=-1)[None, :]
        denom = len_c * len_p
        dots = np.sum(flat * table[None, :, :], axis=-1)
        nonzero = (len_c**2 > ZERO_LENGTH_EPSILON) & (len_p**2 > ZERO_LENGTH_EPSILON)
        cosine = np.where(nonzero, dots / np.where(nonzero, denom, 1.0), 0.0)
        distances = distances * (1.0 - k * (cosine + bias))

    # argmin returns the first minimum, the lowest index on ties
    indices = np.argmin(distances, axis=-1).astype(np.int32)
    return indices.reshape(colors.shape[:-1]), table[indices].reshape(colors.shape)
