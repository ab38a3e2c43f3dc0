"""Fixed 32-color palettes.

A Palette is an immutable ordered table of exactly 32 RGB colors with
components in [0, 1]. The order matters: quantization ties resolve to the
lowest index.

The default palette is DawnBringer's DB32.
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

# Number of entries of every palette
PALETTE_SIZE = 32

Color = tuple[float, float, float]


def hex_to_rgb(value: str) -> Color:
    """Convert a ``"#rrggbb"`` or ``"rrggbb"`` string to RGB in [0, 1].

    Raises:
        ValueError: If the string is not six hex digits.
    """
    digits = value.strip().lstrip("#")
    if len(digits) != 6:
        raise ValueError(f"Expected 6 hex digits, got {value!r}")
    try:
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        raise ValueError(f"Invalid hex color {value!r}") from None
    return (r / 255.0, g / 255.0, b / 255.0)


@dataclass(frozen=True)
class Palette:
    """An ordered table of 32 colors.

    Attributes:
        name: Display name of the palette.
        colors: The 32 RGB entries, components in [0, 1].
    """

    name: str
    colors: tuple[Color, ...]

    def __post_init__(self) -> None:
        if len(self.colors) != PALETTE_SIZE:
            raise ValueError(
                f"A palette needs exactly {PALETTE_SIZE} colors, got {len(self.colors)}"
            )
        for i, color in enumerate(self.colors):
            if len(color) != 3:
                raise ValueError(f"Palette entry {i} must have 3 components")
            if any(c < 0.0 or c > 1.0 for c in color):
                raise ValueError(f"Palette entry {i} = {color} is outside [0, 1]")

    @classmethod
    def from_hex(cls, name: str, values: list[str]) -> "Palette":
        """Build a palette from hex color strings."""
        return cls(name=name, colors=tuple(hex_to_rgb(v) for v in values))

    def to_numpy(self) -> npt.NDArray[np.float32]:
        """The palette as a (32, 3) float32 array."""
        return np.array(self.colors, dtype=np.float32)

    def __len__(self) -> int:
        return len(self.colors)

    def __getitem__(self, index: int) -> Color:
        return self.colors[index]


DB32 = Palette.from_hex(
    "DB32",
    [
        "000000", "222034", "45283c", "663931", "8f563b", "df7126", "d9a066", "eec39a",
        "fbf236", "99e550", "6abe30", "37946e", "4b692f", "524b24", "323c39", "3f3f74",
        "306082", "5b6ee1", "639bff", "5fcde4", "cbdbfc", "ffffff", "9badb7", "847e87",
        "696a6a", "595652", "76428a", "ac3232", "d95763", "d77bba", "8f974a", "8a6f30",
    ],
)
