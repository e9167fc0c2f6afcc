"""
Render configuration.

Everything a render needs is collected and validated here, once, before any
sampling starts.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Any

from mandelscope.core.camera import Camera
from mandelscope.core.divergence import (
    DEFAULT_ESCAPE_RADIUS,
    DEFAULT_MAX_ITER,
    check_escape_radius,
)
from mandelscope.errors import ConfigurationError
from mandelscope.palettes import DEFAULT_PALETTE, Palette, get_palette

# Quality presets: supersampling grid edge and iteration cap
PROFILES: dict[str, dict[str, int]] = {
    "low": {"supersampling": 1, "max_iter": 100},
    "medium": {"supersampling": 2, "max_iter": 250},
    "high": {"supersampling": 3, "max_iter": 500},
}


def default_workers() -> int:
    return max(1, min(8, os.cpu_count() or 1))


@dataclass(frozen=True)
class RenderConfig:
    """Complete, validated parameters for one frame."""

    width: int = 640
    height: int = 480
    camera: Camera = field(default_factory=Camera.default)
    palette: Palette = field(default_factory=lambda: get_palette(DEFAULT_PALETTE))
    max_iter: int = DEFAULT_MAX_ITER
    supersampling: int = 3
    escape_radius: float = DEFAULT_ESCAPE_RADIUS
    workers: int = 1

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ConfigurationError(
                f"Output size must be positive, got {self.width}x{self.height}"
            )
        if self.supersampling < 1:
            raise ConfigurationError(
                f"supersampling must be >= 1, got {self.supersampling}"
            )
        if self.max_iter < 1:
            raise ConfigurationError(f"max_iter must be >= 1, got {self.max_iter}")
        check_escape_radius(self.escape_radius)
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")

    @classmethod
    def from_profile(cls, profile: str, **overrides: Any) -> "RenderConfig":
        """Build a config from a quality profile, then apply overrides."""
        try:
            params = dict(PROFILES[profile])
        except KeyError:
            raise ConfigurationError(
                f"Unknown profile {profile!r}; choose from {', '.join(PROFILES)}"
            ) from None
        params.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**params)

    def with_camera(self, camera: Camera) -> "RenderConfig":
        return replace(self, camera=camera)
