"""
Rank-based (histogram-equalized) coloring.

All escaping samples of a frame are sorted by divergence score and each one
is colored by its rank fraction, so the palette bands cover fixed shares of
the escaping samples whatever the zoom depth does to the raw scores.
"""

from typing import Sequence

import numpy as np

from mandelscope.core.divergence import Escaped
from mandelscope.core.sampling import SubPixel
from mandelscope.palettes import Color, Palette


def rank_fractions(count: int) -> np.ndarray:
    """Rank fraction ``k / count`` for ascending ranks ``k``."""
    return np.arange(count, dtype=np.float64) / max(count, 1)


def colorize_scores(
    scores: np.ndarray,
    escaped: np.ndarray,
    palette: Palette,
) -> np.ndarray:
    """
    Color a whole frame of samples at once.

    Args:
        scores: Divergence scores, any shape. Ignored where not escaped.
        escaped: Bool mask, same shape as ``scores``.
        palette: Rank-breakpoint palette.

    Returns:
        (N, 3) float64 RGB array in flattened sample order. Bounded samples
        get ``palette.colors[0]``.
    """
    scores = np.asarray(scores, dtype=np.float64).ravel()
    escaped = np.asarray(escaped, dtype=bool).ravel()

    rgb = np.empty((scores.size, 3), dtype=np.float64)
    rgb[:] = palette.background

    esc_idx = np.flatnonzero(escaped)
    if esc_idx.size == 0:
        return rgb

    # Stable sort keeps enumeration order among equal scores
    order = np.argsort(scores[esc_idx], kind="stable")
    rgb[esc_idx[order]] = palette.interpolate_array(rank_fractions(esc_idx.size))
    return rgb


def band_fractions(escaped_count: int, palette: Palette) -> np.ndarray:
    """Share of escaping samples that land in each palette segment."""
    if escaped_count == 0:
        return np.zeros(len(palette.breakpoints) - 1, dtype=np.float64)
    seg = palette.segment_of(rank_fractions(escaped_count))
    counts = np.bincount(seg, minlength=len(palette.breakpoints) - 1)
    return counts / escaped_count


def colorize(sub_pixels: Sequence[SubPixel], palette: Palette) -> None:
    """Set ``color`` on every sub-pixel of a frame."""
    escaped = np.array([isinstance(s.divergence, Escaped) for s in sub_pixels], dtype=bool)
    scores = np.array(
        [s.divergence.score if isinstance(s.divergence, Escaped) else 0.0 for s in sub_pixels],
        dtype=np.float64,
    )
    rgb = np.rint(colorize_scores(scores, escaped, palette)).astype(np.int64)
    for sub, (r, g, b) in zip(sub_pixels, rgb):
        sub.color = Color(int(r), int(g), int(b))


class HistogramColorizer:
    """Frame-global colorizer bound to one palette."""

    def __init__(self, palette: Palette):
        self.palette = palette

    def colorize(self, sub_pixels: Sequence[SubPixel]) -> None:
        colorize(sub_pixels, self.palette)

    def colorize_scores(self, scores: np.ndarray, escaped: np.ndarray) -> np.ndarray:
        return colorize_scores(scores, escaped, self.palette)

    def band_fractions(self, escaped: np.ndarray) -> np.ndarray:
        return band_fractions(int(np.count_nonzero(escaped)), self.palette)
