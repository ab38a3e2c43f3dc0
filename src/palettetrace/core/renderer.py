"""Host-side frame loop around the frame driver.

FrameRenderer owns the render target size, the settings, the camera and the
palette, uploads them to the kernels and renders single frames or a sequence
of frames driven by a FrameTime clock.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from palettetrace.core.renderer import FrameRenderer
    >>> from palettetrace.scene.demo import create_meadow_scene
    >>>
    >>> scene, camera = create_meadow_scene()
    >>> renderer = FrameRenderer(320, 180, camera=camera)
    >>> image = renderer.render_frame()
"""

import logging
import time as _time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from palettetrace.camera.look_at import LookAtCamera, setup_camera
from palettetrace.core.frame import (
    get_frame_numpy,
    get_index_numpy,
    get_linear_numpy,
    render_frame,
    setup_frame,
    setup_render_target,
)
from palettetrace.core.settings import FrameTime, RenderSettings
from palettetrace.palette.palettes import DB32, Palette
from palettetrace.palette.quantizer import setup_palette
from palettetrace.preview.export import save_png

logger = logging.getLogger(__name__)

# Callback receives (frame_time, quantized_image)
FrameCallback = Callable[[FrameTime, npt.NDArray[np.float32]], None]


class FrameRenderer:
    """Renders palette-quantized frames of the current scene.

    The scene buffers are shared module state filled by SceneManager; the
    renderer only owns what is uploaded per frame configuration.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        settings: The active render settings.
        camera: The active camera.
        palette: The active palette.
        clock: Frame clock advanced by render_frames.
    """

    def __init__(
        self,
        width: int,
        height: int,
        settings: RenderSettings | None = None,
        camera: LookAtCamera | None = None,
        palette: Palette = DB32,
    ) -> None:
        """Initialize the renderer and upload its configuration.

        Raises:
            ValueError: If dimensions are invalid.
        """
        self._width = width
        self._height = height
        setup_render_target(width, height)

        self.clock = FrameTime()
        self.settings = settings if settings is not None else RenderSettings()
        self.camera = camera if camera is not None else LookAtCamera()
        self.palette = palette

        setup_frame(self.settings)
        setup_camera(self.camera)
        setup_palette(self.palette)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def resize(self, width: int, height: int) -> None:
        """Resize the render target (clears the surfaces)."""
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def set_settings(self, settings: RenderSettings) -> None:
        self.settings = settings
        setup_frame(settings)

    def set_camera(self, camera: LookAtCamera) -> None:
        self.camera = camera
        setup_camera(camera)

    def set_palette(self, palette: Palette) -> None:
        self.palette = palette
        setup_palette(palette)

    def render_frame(self, time: float | None = None) -> npt.NDArray[np.float32]:
        """Render one frame.

        Args:
            time: Frame time seeding the RNG. Defaults to the clock's
                elapsed time.

        Returns:
            The quantized image as (height, width, 3) float32, top row first.
        """
        frame_time = self.clock.elapsed if time is None else time
        start = _time.perf_counter()
        render_frame(frame_time)
        image = get_frame_numpy()
        logger.debug(
            "Rendered %dx%d frame at t=%.3f in %.1f ms",
            self._width,
            self._height,
            frame_time,
            (_time.perf_counter() - start) * 1000.0,
        )
        return image

    def render_frames(
        self,
        num_frames: int,
        delta: float = 1.0 / 30.0,
        callback: FrameCallback | None = None,
    ) -> Generator[tuple[FrameTime, npt.NDArray[np.float32]], None, None]:
        """Render a sequence of frames, advancing the clock by delta each time.

        Yields:
            Tuple of (frame time, quantized image).

        Example:
            >>> for frame_time, image in renderer.render_frames(10):
            ...     print(frame_time.frame, image.shape)
        """
        if delta < 0.0:
            raise ValueError(f"Frame delta must be >= 0, got {delta}")
        if num_frames <= 0:
            return

        for _ in range(num_frames):
            image = self.render_frame(self.clock.elapsed)
            snapshot = FrameTime(
                elapsed=self.clock.elapsed, delta=self.clock.delta, frame=self.clock.frame
            )
            if callback is not None:
                callback(snapshot, image)
            yield snapshot, image
            self.clock.advance(delta)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """The quantized image of the last frame."""
        return get_frame_numpy()

    def get_index_numpy(self) -> npt.NDArray[np.int32]:
        """Palette indices of the last frame."""
        return get_index_numpy()

    def get_linear_numpy(self) -> npt.NDArray[np.float32]:
        """Colors of the last frame before quantization."""
        return get_linear_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """The quantized image as 8-bit RGB."""
        return np.round(self.get_image_numpy() * 255.0).astype(np.uint8)

    def save_image(self, filepath: str, scale: int = 1) -> None:
        """Save the last frame as a PNG file."""
        save_png(self, filepath, scale=scale)

    def __repr__(self) -> str:
        return (
            f"FrameRenderer(width={self.width}, height={self.height}, "
            f"mode={self.settings.mode.name}, frame={self.clock.frame})"
        )
