"""
Colors and rank-breakpoint palettes.

A palette does not map divergence values to colors. Its breakpoints are
rank fractions: the share of escaping samples that should land in each
color band.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from mandelscope.errors import ConfigurationError

DEFAULT_BREAKPOINTS = (0.0, 0.75, 0.85, 0.95, 0.99, 1.0)


class Color(NamedTuple):
    """8-bit RGB color."""

    r: int
    g: int
    b: int

    @classmethod
    def gray(cls, level: float) -> "Color":
        v = int(level * 255 + 0.5)
        return cls(v, v, v)


@dataclass(frozen=True)
class Palette:
    """Breakpoints in [0, 1] paired one-to-one with colors."""

    name: str
    breakpoints: tuple[float, ...]
    colors: tuple[Color, ...]

    def __post_init__(self):
        bps = tuple(float(b) for b in self.breakpoints)
        colors = tuple(Color(*c) for c in self.colors)
        object.__setattr__(self, "breakpoints", bps)
        object.__setattr__(self, "colors", colors)

        if len(bps) < 2:
            raise ConfigurationError(
                f"Palette {self.name!r} needs at least 2 stops, got {len(bps)}"
            )
        if len(bps) != len(colors):
            raise ConfigurationError(
                f"Palette {self.name!r} has {len(bps)} breakpoints "
                f"but {len(colors)} colors"
            )
        if not all(math.isfinite(b) and 0.0 <= b <= 1.0 for b in bps):
            raise ConfigurationError(
                f"Palette {self.name!r} breakpoints must be finite values in [0, 1]: {bps}"
            )
        if bps[0] != 0.0 or bps[-1] != 1.0:
            raise ConfigurationError(
                f"Palette {self.name!r} breakpoints must start at 0.0 and end at 1.0"
            )
        for prev, cur in zip(bps, bps[1:]):
            if cur < prev or (cur == prev and cur != 0.0):
                raise ConfigurationError(
                    f"Palette {self.name!r} breakpoints must be strictly increasing "
                    f"(only a leading 0.0 may repeat): {bps}"
                )
        for c in colors:
            if any(not 0 <= channel <= 255 for channel in c):
                raise ConfigurationError(f"Palette {self.name!r} color out of range: {c}")

    @property
    def background(self) -> Color:
        """Color used for samples inside the set."""
        return self.colors[0]

    def segment_of(self, r: np.ndarray) -> np.ndarray:
        """
        Index ``i`` of the segment ``[breakpoints[i], breakpoints[i+1])``
        containing each rank fraction. A rank of exactly 1.0 falls in the
        last segment.
        """
        bps = np.asarray(self.breakpoints, dtype=np.float64)
        seg = np.searchsorted(bps, r, side="right") - 1
        return np.clip(seg, 0, len(bps) - 2)

    def interpolate_array(self, r: np.ndarray) -> np.ndarray:
        """
        Interpolate colors for an array of rank fractions.

        Args:
            r: Rank fractions in [0, 1], shape (N,).

        Returns:
            (N, 3) float64 RGB array.
        """
        r = np.asarray(r, dtype=np.float64)
        bps = np.asarray(self.breakpoints, dtype=np.float64)
        colors = np.asarray(self.colors, dtype=np.float64)

        seg = self.segment_of(r)
        lo = bps[seg]
        span = bps[seg + 1] - lo
        t = np.where(span > 0, (r - lo) / np.where(span > 0, span, 1.0), 0.0)
        t = np.clip(t, 0.0, 1.0)[..., np.newaxis]

        return colors[seg] * (1.0 - t) + colors[seg + 1] * t

    def interpolate(self, r: float) -> Color:
        """Color for a single rank fraction."""
        rgb = self.interpolate_array(np.array([r]))[0]
        return Color(*(int(v) for v in np.rint(rgb)))


PALETTES: dict[str, Palette] = {
    p.name: p
    for p in (
        Palette(
            "classic",
            DEFAULT_BREAKPOINTS,
            (
                Color.gray(0.2),
                Color.gray(0.7),
                Color(55, 118, 145),
                Color(63, 74, 132),
                Color(145, 121, 82),
                Color(250, 250, 200),
            ),
        ),
        Palette(
            "alternative",
            DEFAULT_BREAKPOINTS,
            (
                Color.gray(0.2),
                Color(0, 47, 167),
                Color(182, 120, 35),
                Color(255, 244, 141),
                Color(128, 128, 0),
                Color(231, 62, 1),
            ),
        ),
        Palette(
            "neon",
            DEFAULT_BREAKPOINTS,
            (
                Color(223, 109, 20),
                Color(223, 255, 0),
                Color(0, 255, 0),
                Color(255, 0, 255),
                Color(255, 9, 33),
                Color(108, 2, 119),
            ),
        ),
        Palette(
            "rose",
            DEFAULT_BREAKPOINTS,
            (
                Color(140, 34, 48),
                Color(177, 98, 115),
                Color(87, 23, 31),
                Color(150, 10, 30),
                Color(255, 122, 136),
                Color(177, 83, 167),
            ),
        ),
    )
}

DEFAULT_PALETTE = "classic"


def get_palette(name: str) -> Palette:
    """Look up a preset palette by name."""
    try:
        return PALETTES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown palette {name!r}; choose from {', '.join(PALETTES)}"
        ) from None
