"""Frame driver: the per-pixel dispatch kernel and the output surfaces.

One parallel iteration serves one ``block_size x block_size`` cell of output
pixels. It builds the primary ray through the cell centre, shades it, clamps
and quantizes the result and writes it to every pixel of the cell that lies
inside the image. Iterations share no mutable state and each writes only its
own pixels. The kernel is launched in groups of 16 x 16 = 256 threads.

Three surfaces are written per frame:

- the quantized palette color (float32 RGB in [0, 1])
- the palette index (int32)
- the linear color before quantization

Buffers are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT and indexed
[x, y] with y = 0 at the top of the image.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from palettetrace.camera.look_at import get_primary_ray
from palettetrace.core.integrator import setup_integrator, trace_pixel
from palettetrace.core.ray import clamp01
from palettetrace.core.rng import make_rng_context
from palettetrace.core.settings import DISPATCH_GROUP_SIZE, RenderSettings
from palettetrace.palette.quantizer import quantize, set_metric

vec3 = tm.vec3

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_render_target_initialized = ti.field(dtype=ti.i32, shape=())

_frame_rgb = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_frame_index = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_frame_linear = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Output layout settings uploaded by setup_frame
_block_size = ti.field(dtype=ti.i32, shape=())
_flip_x = ti.field(dtype=ti.i32, shape=())
_flip_y = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the surfaces.

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Zero all output surfaces."""
    _frame_rgb.fill(0.0)
    _frame_index.fill(0)
    _frame_linear.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def setup_frame(settings: RenderSettings) -> None:
    """Upload all render settings: integrator, quantizer metric and layout."""
    setup_integrator(settings)
    set_metric(settings.metric, settings.perceptual_k, settings.perceptual_bias)
    _block_size[None] = settings.block_size
    _flip_x[None] = 1 if settings.flip_x else 0
    _flip_y[None] = 1 if settings.flip_y else 0


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32, time: ti.f32):
    block = _block_size[None]
    cells_x = (width + block - 1) // block
    cells_y = (height + block - 1) // block

    ti.loop_config(block_dim=DISPATCH_GROUP_SIZE * DISPATCH_GROUP_SIZE)
    for cx, cy in ti.ndrange(cells_x, cells_y):
        x0 = cx * block
        y0 = cy * block
        center_x = ti.cast(x0, ti.f32) + ti.cast(block, ti.f32) * 0.5
        center_y = ti.cast(y0, ti.f32) + ti.cast(block, ti.f32) * 0.5

        ray = get_primary_ray(center_x, center_y, width, height)
        rng = make_rng_context(x0, y0, time)
        color = clamp01(trace_pixel(ray, rng))
        index, snapped = quantize(color)

        for dy in range(block):
            for dx in range(block):
                x = x0 + dx
                y = y0 + dy
                if x < width and y < height:
                    out_x = x
                    out_y = y
                    if _flip_x[None] == 1:
                        out_x = width - 1 - x
                    if _flip_y[None] == 1:
                        out_y = height - 1 - y
                    _frame_rgb[out_x, out_y] = snapped
                    _frame_index[out_x, out_y] = index
                    _frame_linear[out_x, out_y] = color


def render_frame(time: float = 0.0) -> None:
    """Render one frame into the output surfaces.

    The camera, palette, scene and settings must already be uploaded.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    if _block_size[None] < 1:
        raise RuntimeError("Render settings not set up. Call setup_frame() first.")
    width, height = get_image_dimensions()
    _render_frame(width, height, time)


def _active_region(buffer) -> np.ndarray:
    """Crop a preallocated [x, y] buffer and transpose it to [row, column]."""
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    data = buffer.to_numpy()[:width, :height]
    return np.ascontiguousarray(np.swapaxes(data, 0, 1))


def get_frame_numpy() -> npt.NDArray[np.float32]:
    """Quantized frame as a (height, width, 3) float32 array, top row first."""
    return _active_region(_frame_rgb).astype(np.float32)


def get_index_numpy() -> npt.NDArray[np.int32]:
    """Palette indices as a (height, width) int32 array, top row first."""
    return _active_region(_frame_index).astype(np.int32)


def get_linear_numpy() -> npt.NDArray[np.float32]:
    """Pre-quantization colors as a (height, width, 3) float32 array."""
    return _active_region(_frame_linear).astype(np.float32)
