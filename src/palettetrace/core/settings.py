"""Render configuration for the integrator and frame driver.

Every tunable of the core lives in one immutable RenderSettings value that is
uploaded to the kernels once per configuration change. The tagged enums select
between the shading strategies and quantization metrics that the kernels
implement side by side.

Example:
    >>> settings = RenderSettings(mode=ShadingMode.PATH_TRACED, bounces=3, rays_per_pixel=4)
    >>> direct = RenderSettings(mode=ShadingMode.DIRECT_LIT, ambient_strength=0.05)
"""

import math
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any

# Threads per side of one dispatch group (16 x 16 pixels per group)
DISPATCH_GROUP_SIZE = 16


class ShadingMode(IntEnum):
    """Integrator strategy used for every pixel."""

    PATH_TRACED = 0
    DIRECT_LIT = 1


class EnvironmentPolicy(IntEnum):
    """How a path that leaves the scene picks up sky light.

    ADD adds sky_color * sky_strength to the gathered light. TINT multiplies
    the path color by sky_color and adds sky_strength to the light.
    """

    ADD = 0
    TINT = 1


class LightCombine(IntEnum):
    """How direct-lighting contributions of several point lights combine."""

    SUM = 0
    AVERAGE = 1


class PaletteMetric(IntEnum):
    """Distance used to find the nearest palette entry."""

    EUCLIDEAN = 0
    PERCEPTUAL = 1


# Named (k, bias) pairs for the perceptual metric
PERCEPTUAL_SOFT = (0.5, 0.5)
PERCEPTUAL_HUE = (0.95, 0.0)
PERCEPTUAL_PRESETS = {"soft": PERCEPTUAL_SOFT, "hue": PERCEPTUAL_HUE}


def _check_color(name: str, color: tuple[float, float, float], upper: float | None = 1.0) -> None:
    if len(color) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0 or (upper is not None and component > upper):
            bound = f"[0, {upper}]" if upper is not None else ">= 0"
            raise ValueError(f"{name} component {i} = {component} is outside {bound}")


@dataclass(frozen=True)
class RenderSettings:
    """Configuration of the integrator, quantizer and frame driver.

    Attributes:
        mode: Shading strategy (path traced or Cook-Torrance direct lighting).
        bounces: Path depth for path-traced mode (>= 1).
        rays_per_pixel: Samples averaged per pixel in path-traced mode (>= 1).
        ambient_strength: Ambient term added to direct lighting (albedo scaled).
        sky_color: Environment color seen by rays that miss the scene.
        sky_strength: Environment intensity for missed rays.
        environment: How path-traced misses gather the environment.
        sun_direction: Direction the sun light travels (toward the scene).
        sun_strength: Directional sun intensity in direct mode; 0 disables it.
        sun_color: Directional sun color.
        light_combine: Sum or average point light contributions.
        metric: Palette distance metric.
        perceptual_k: Hue weight of the perceptual metric.
        perceptual_bias: Bias added to the cosine term of the perceptual metric.
        ray_offset: Distance along the normal used to start secondary rays.
        block_size: Side of the square block of output pixels one trace fills.
        flip_x: Mirror the written image horizontally.
        flip_y: Mirror the written image vertically.
    """

    mode: ShadingMode = ShadingMode.PATH_TRACED
    bounces: int = 4
    rays_per_pixel: int = 4
    ambient_strength: float = 0.1
    sky_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    sky_strength: float = 0.5
    environment: EnvironmentPolicy = EnvironmentPolicy.ADD
    sun_direction: tuple[float, float, float] = (-0.4, -1.0, -0.3)
    sun_strength: float = 0.0
    sun_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    light_combine: LightCombine = LightCombine.SUM
    metric: PaletteMetric = PaletteMetric.PERCEPTUAL
    perceptual_k: float = PERCEPTUAL_SOFT[0]
    perceptual_bias: float = PERCEPTUAL_SOFT[1]
    ray_offset: float = 1e-3
    block_size: int = 1
    flip_x: bool = False
    flip_y: bool = False

    def __post_init__(self) -> None:
        if self.bounces < 1:
            raise ValueError(f"bounces must be >= 1, got {self.bounces}")
        if self.rays_per_pixel < 1:
            raise ValueError(f"rays_per_pixel must be >= 1, got {self.rays_per_pixel}")
        if self.block_size < 1:
            raise ValueError(f"block_size must be >= 1, got {self.block_size}")
        if self.ambient_strength < 0.0:
            raise ValueError(f"ambient_strength must be >= 0, got {self.ambient_strength}")
        if self.sky_strength < 0.0:
            raise ValueError(f"sky_strength must be >= 0, got {self.sky_strength}")
        if self.sun_strength < 0.0:
            raise ValueError(f"sun_strength must be >= 0, got {self.sun_strength}")
        if self.ray_offset < 0.0:
            raise ValueError(f"ray_offset must be >= 0, got {self.ray_offset}")
        _check_color("sky_color", self.sky_color, upper=None)
        _check_color("sun_color", self.sun_color, upper=None)
        if self.sun_strength > 0.0 and math.hypot(*self.sun_direction) < 1e-8:
            raise ValueError("sun_direction must be non-zero when the sun is enabled")

    def with_changes(self, **changes: Any) -> "RenderSettings":
        """Return a copy with some fields replaced (validated again)."""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        """Build settings from a plain dictionary.

        Enum fields accept either the enum value or its name in any case
        (e.g. ``{"mode": "direct_lit", "metric": "euclidean"}``). The extra
        key ``perceptual_preset`` names one of PERCEPTUAL_PRESETS and fills
        perceptual_k and perceptual_bias unless those are given explicitly.

        Raises:
            ValueError: If a key is unknown or a value is invalid.
        """
        enum_fields = {
            "mode": ShadingMode,
            "environment": EnvironmentPolicy,
            "light_combine": LightCombine,
            "metric": PaletteMetric,
        }
        known = set(cls.__dataclass_fields__)
        kwargs: dict[str, Any] = {}
        data = dict(data)
        preset = data.pop("perceptual_preset", None)
        if preset is not None:
            try:
                k, bias = PERCEPTUAL_PRESETS[str(preset).lower()]
            except KeyError:
                raise ValueError(f"Unknown perceptual_preset: {preset}") from None
            data.setdefault("perceptual_k", k)
            data.setdefault("perceptual_bias", bias)
        for key, value in data.items():
            if key not in known:
                raise ValueError(f"Unknown render setting: {key}")
            if key in enum_fields and isinstance(value, str):
                try:
                    value = enum_fields[key][value.upper()]
                except KeyError:
                    raise ValueError(f"Unknown {key}: {value}") from None
            elif key in enum_fields:
                value = enum_fields[key](value)
            elif isinstance(value, list):
                value = tuple(value)
            kwargs[key] = value
        return cls(**kwargs)


@dataclass
class FrameTime:
    """Elapsed time and delta of the frame being rendered.

    Attributes:
        elapsed: Seconds since the renderer started.
        delta: Seconds between the previous frame and this one.
        frame: Index of the frame.
    """

    elapsed: float = 0.0
    delta: float = 0.0
    frame: int = 0

    def advance(self, delta: float) -> "FrameTime":
        """Step the clock forward by delta seconds.

        Raises:
            ValueError: If delta is negative.
        """
        if delta < 0.0:
            raise ValueError(f"Frame delta must be >= 0, got {delta}")
        self.elapsed += delta
        self.delta = delta
        self.frame += 1
        return self
