"""
Fixed color tables.

Rasters hold palette indices only; the table itself is attached at
encoding time.  The default is the 256-entry Plan 9 table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from multibrotgif.exceptions import ConfigError

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class Palette:
    """An ordered, immutable set of at most 256 RGB colors."""
    name: str
    colors: tuple[RGB, ...]

    def __post_init__(self) -> None:
        if not 0 < len(self.colors) <= 256:
            raise ConfigError(
                f"Palette {self.name!r} has {len(self.colors)} colors; "
                f"expected 1 to 256."
            )

    @property
    def size(self) -> int:
        return len(self.colors)

    def to_bytes(self) -> bytes:
        """Flat RGB bytes in the layout Pillow's ``putpalette`` expects."""
        return bytes(channel for color in self.colors for channel in color)


def plan9_palette() -> Palette:
    """Build the Plan 9 color map.

    The map is organized as 4 red levels x 4 value levels x 4 green x
    4 blue, with the 16 entries of each (red, value) block rotated so
    that grays land on the diagonal.
    """
    colors: list[RGB] = [(0, 0, 0)] * 256
    i = 0
    for r in range(4):
        for v in range(4):
            j = v - r
            for g in range(4):
                for b in range(4):
                    den = max(r, g, b)
                    if den == 0:
                        c = 17 * v
                        color = (c, c, c)
                    else:
                        num = 17 * (4 * den + v)
                        color = (r * num // den, g * num // den, b * num // den)
                    colors[i + (j & 0x0F)] = color
                    j += 1
            i += 16
    return Palette("plan9", tuple(colors))


def grayscale_palette(size: int = 256) -> Palette:
    """A linear black-to-white ramp of *size* entries."""
    if size == 1:
        return Palette("grayscale", ((0, 0, 0),))
    step = 255 / (size - 1)
    return Palette(
        "grayscale",
        tuple((round(k * step),) * 3 for k in range(size)),
    )


_PALETTES: dict[str, Callable[[], Palette]] = {
    "plan9": plan9_palette,
    "grayscale": grayscale_palette,
}


def available_palettes() -> list[str]:
    return sorted(_PALETTES)


def get_palette(name: str) -> Palette:
    """Look up a built-in palette by name."""
    try:
        factory = _PALETTES[name]
    except KeyError:
        raise ConfigError(
            f"Unknown palette {name!r}; choose from {available_palettes()}."
        ) from None
    return factory()
