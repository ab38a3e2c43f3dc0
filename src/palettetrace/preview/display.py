"""Matplotlib-based preview of rendered frames and palettes.

Example:
    >>> from palettetrace.preview.display import show_frame, show_palette
    >>> renderer.render_frame()
    >>> show_frame(renderer)
    >>> show_palette(DB32)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from palettetrace.palette.palettes import Palette
from palettetrace.preview.export import compute_rmse

if TYPE_CHECKING:
    from palettetrace.core.renderer import FrameRenderer


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Gamma encode a linear image in [0, 1] for display."""
    if gamma == 1.0:
        return image

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def palette_swatches(palette: Palette, columns: int = 8) -> npt.NDArray[np.float32]:
    """Arrange palette colors as a (rows, columns, 3) image, row-major."""
    table = palette.to_numpy()
    rows = (len(table) + columns - 1) // columns
    swatches = np.zeros((rows * columns, 3), dtype=np.float32)
    swatches[: len(table)] = table
    return swatches.reshape(rows, columns, 3)


def show_frame(
    renderer: FrameRenderer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display the renderer's last quantized frame.

    Args:
        renderer: The FrameRenderer to display.
        title: Custom title (default shows mode and frame index).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    image = renderer.get_image_numpy()

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(image, interpolation="nearest")
    ax.axis("off")

    if title is None:
        title = f"{renderer.settings.mode.name.lower()} - frame {renderer.clock.frame}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_quantization(
    renderer: FrameRenderer,
    *,
    gamma: float = 2.2,
    figsize: tuple[float, float] = (12, 6),
    block: bool = True,
) -> float:
    """Show the linear and quantized frames side by side.

    Returns:
        RMSE between the gamma-encoded linear frame and the quantized frame.
    """
    import matplotlib.pyplot as plt

    linear = apply_gamma(renderer.get_linear_numpy(), gamma)
    quantized = renderer.get_image_numpy()
    rmse = compute_rmse(linear, quantized)

    fig, axes = plt.subplots(1, 2, figsize=figsize)
    axes[0].imshow(linear, interpolation="nearest")
    axes[0].set_title("Linear")
    axes[0].axis("off")

    axes[1].imshow(quantized, interpolation="nearest")
    axes[1].set_title(f"Quantized - RMSE: {rmse:.4f}")
    axes[1].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse


def show_palette(
    palette: Palette,
    *,
    columns: int = 8,
    figsize: tuple[float, float] = (8, 4),
    block: bool = True,
) -> None:
    """Display the palette as a grid of swatches labelled with their index."""
    import matplotlib.pyplot as plt

    swatches = palette_swatches(palette, columns)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(swatches, interpolation="nearest")
    for index in range(len(palette)):
        row, col = divmod(index, columns)
        luminance = float(np.dot(palette[index], (0.2126, 0.7152, 0.0722)))
        ax.text(
            col,
            row,
            str(index),
            ha="center",
            va="center",
            color="black" if luminance > 0.5 else "white",
        )
    ax.set_title(palette.name)
    ax.axis("off")

    plt.tight_layout()
    plt.show(block=block)
