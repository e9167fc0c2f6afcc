"""
Escape-time divergence for the Mandelbrot iteration z -> z^2 + c.

Scores are continuous ("smooth iteration count") so neighbouring points
that escape on different iterations do not form hard rings.
"""

import math
import sys
from dataclasses import dataclass

import numpy as np

from mandelscope.core.complex import Complex
from mandelscope.errors import ConfigurationError

DEFAULT_MAX_ITER = 100
DEFAULT_ESCAPE_RADIUS = 2.0

_LOG2 = math.log(2.0)
_EPS = 1e-12
_MAX_ABS2 = sys.float_info.max


@dataclass(frozen=True)
class Escaped:
    """The point left the escape radius; ``score`` is its smoothed count."""

    score: float


class Bounded:
    """The point stayed bounded for every iteration."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "BOUNDED"


BOUNDED = Bounded()

DivergenceSample = Escaped | Bounded


def smooth_score(n: int, abs2: float) -> float:
    """
    Continuous escape count ``n + 1 - log2(log|z|)``.

    ``|z|`` is clamped above 1 and ``log|z|`` above a small epsilon, so the
    result is finite even for magnitudes at or below the unit circle.
    An overflowed ``abs2`` is clamped to the largest finite float.
    """
    abs_z = max(math.sqrt(min(abs2, _MAX_ABS2)), 1.0 + _EPS)
    log_abs = max(math.log(abs_z), _EPS)
    return n + 1.0 - math.log(log_abs) / _LOG2


def check_escape_radius(radius: float) -> None:
    """Radius must exceed 1 and its square must still be a finite float."""
    if not (math.isfinite(radius) and radius > 1.0 and math.isfinite(radius * radius)):
        raise ConfigurationError(
            f"escape_radius must be finite and greater than 1, got {radius}"
        )


def _smooth_scores(n: int, abs2: np.ndarray) -> np.ndarray:
    abs_z = np.maximum(np.sqrt(np.minimum(abs2, _MAX_ABS2)), 1.0 + _EPS)
    log_abs = np.maximum(np.log(abs_z), _EPS)
    return n + 1.0 - np.log(log_abs) / _LOG2


class DivergenceEngine:
    """
    Runs the escape-time test for single points or whole arrays of points.

    Args:
        max_iter: Iterations before a point is declared bounded.
        escape_radius: Bail-out radius, compared squared.
    """

    def __init__(
        self,
        max_iter: int = DEFAULT_MAX_ITER,
        escape_radius: float = DEFAULT_ESCAPE_RADIUS,
    ):
        if max_iter < 1:
            raise ConfigurationError(f"max_iter must be >= 1, got {max_iter}")
        check_escape_radius(escape_radius)
        self.max_iter = int(max_iter)
        self.escape_radius = float(escape_radius)
        self._radius2 = self.escape_radius * self.escape_radius

    def divergence(self, c: Complex) -> DivergenceSample:
        """Score a single point."""
        z = Complex(0.0, 0.0)
        for n in range(1, self.max_iter + 1):
            z = z * z + c
            abs2 = z.abs2()
            if abs2 > self._radius2:
                return Escaped(smooth_score(n, abs2))
        return BOUNDED

    def divergence_field(
        self, re: np.ndarray, im: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        Score every point of a grid at once.

        Only points that are still iterating are updated on each step, so
        each point sees exactly the arithmetic ``divergence`` would do.

        Args:
            re: Real parts, any shape.
            im: Imaginary parts, same shape as ``re``.

        Returns:
            (scores, escaped) where ``scores`` is float64 and ``escaped`` is a
            bool mask of the same shape. Scores of bounded points are 0.0.
        """
        re = np.asarray(re, dtype=np.float64)
        im = np.asarray(im, dtype=np.float64)
        shape = re.shape

        c = (re + 1j * im).ravel()
        scores = np.zeros(c.size, dtype=np.float64)
        escaped = np.zeros(c.size, dtype=bool)

        # Compacted working set: indices of points still iterating
        idx = np.arange(c.size)
        cc = c.copy()
        z = np.zeros_like(cc)

        for n in range(1, self.max_iter + 1):
            if idx.size == 0:
                break
            z = z * z + cc
            # Huge |c| overflows abs2 to inf; _smooth_scores clamps it
            with np.errstate(over="ignore"):
                abs2 = z.real * z.real + z.imag * z.imag
            out = abs2 > self._radius2
            if np.any(out):
                hit = idx[out]
                scores[hit] = _smooth_scores(n, abs2[out])
                escaped[hit] = True
                keep = ~out
                idx = idx[keep]
                cc = cc[keep]
                z = z[keep]

        return scores.reshape(shape), escaped.reshape(shape)
