"""
Viewport to complex-plane projection.
"""

import math
from dataclasses import dataclass

import numpy as np

from mandelscope.core.complex import Complex
from mandelscope.errors import ConfigurationError


@dataclass(frozen=True)
class Camera:
    """
    Maps normalized viewport coordinates onto the complex plane.

    ``u`` runs left to right and ``v`` bottom to top, both in [0, 1].
    Raster rows grow downward, so callers pass ``v = 1 - row_fraction``.
    """

    center_x: float
    center_y: float
    view_width: float
    aspect_ratio: float

    def __post_init__(self):
        for name in ("center_x", "center_y", "view_width", "aspect_ratio"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"Camera {name} must be finite")
        if self.view_width <= 0:
            raise ConfigurationError(
                f"Camera view_width must be positive, got {self.view_width}"
            )
        if self.aspect_ratio <= 0:
            raise ConfigurationError(
                f"Camera aspect_ratio must be positive, got {self.aspect_ratio}"
            )

    @classmethod
    def default(cls) -> "Camera":
        """Whole-set view: centered on -0.5, three units wide, 4:3."""
        return cls(center_x=-0.5, center_y=0.0, view_width=3.0, aspect_ratio=4.0 / 3.0)

    @property
    def view_height(self) -> float:
        return self.view_width / self.aspect_ratio

    def to_complex(self, u: float, v: float) -> Complex:
        return Complex(
            self.center_x + (u - 0.5) * self.view_width,
            self.center_y + (v - 0.5) * self.view_height,
        )

    def to_complex_grid(
        self, u: np.ndarray, v: np.ndarray
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        Vectorized ``to_complex``.

        Args:
            u: Horizontal viewport coordinates, any shape.
            v: Vertical viewport coordinates, same shape as ``u``.

        Returns:
            (re, im) float64 arrays.
        """
        u = np.asarray(u, dtype=np.float64)
        v = np.asarray(v, dtype=np.float64)
        re = self.center_x + (u - 0.5) * self.view_width
        im = self.center_y + (v - 0.5) * self.view_height
        return re, im
