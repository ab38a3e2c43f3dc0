"""Image export utilities for rendered frames.

Quantized frames already hold display colors (palette entries), so they are
written as-is. Linear pre-quantization colors can be gamma encoded on export.
Saved frames may be enlarged by an integer factor with nearest-neighbour
sampling so the pixels stay square.

Supported formats:
    - PNG (8-bit sRGB via Pillow)

Example:
    >>> from palettetrace.preview.export import save_png
    >>> renderer.render_frame()
    >>> save_png(renderer, "frame.png", scale=4)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from palettetrace.core.renderer import FrameRenderer

Surface = Literal["rgb", "linear"]


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a float image in [0, 1] to uint8, optionally gamma encoding it."""
    result = np.clip(np.nan_to_num(image, nan=0.0, posinf=1.0, neginf=0.0), 0.0, 1.0)
    if gamma != 1.0:
        result = np.power(result, 1.0 / gamma)
    return np.round(result * 255.0).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    gamma: float = 1.0,
    scale: int = 1,
) -> None:
    """Save an (H, W, 3) float array as an 8-bit PNG.

    Raises:
        ValueError: If scale is less than 1.
    """
    if scale < 1:
        raise ValueError(f"Scale must be >= 1, got {scale}")
    image_uint8 = image_to_uint8(image, gamma=gamma)
    if scale > 1:
        # Nearest-neighbour: every pixel becomes a scale x scale square
        image_uint8 = np.repeat(np.repeat(image_uint8, scale, axis=0), scale, axis=1)
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def save_png(
    renderer: FrameRenderer,
    filepath: str,
    *,
    surface: Surface = "rgb",
    gamma: float | None = None,
    scale: int = 1,
) -> None:
    """Save the renderer's last frame as a PNG file.

    Args:
        renderer: The FrameRenderer to save.
        filepath: Output file path (should end in .png).
        surface: "rgb" for the quantized frame, "linear" for the colors
            before quantization.
        gamma: Gamma encoding. Defaults to 1.0 for "rgb" and 2.2 for "linear".
        scale: Integer nearest-neighbour upscale factor.
    """
    if surface == "rgb":
        image = renderer.get_image_numpy()
        default_gamma = 1.0
    elif surface == "linear":
        image = renderer.get_linear_numpy()
        default_gamma = 2.2
    else:
        raise ValueError(f"Unknown surface: {surface}")

    save_png_from_array(
        image,
        filepath,
        gamma=default_gamma if gamma is None else gamma,
        scale=scale,
    )


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
