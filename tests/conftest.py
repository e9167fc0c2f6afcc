"""Pytest configuration and shared fixtures."""

import pytest

from mandelscope.config import RenderConfig
from mandelscope.core.camera import Camera
from mandelscope.core.divergence import DivergenceEngine
from mandelscope.palettes import Color, Palette, get_palette


@pytest.fixture
def camera() -> Camera:
    """Whole-set view: center -0.5, width 3, 4:3."""
    return Camera.default()


@pytest.fixture
def engine() -> DivergenceEngine:
    return DivergenceEngine(max_iter=100)


@pytest.fixture
def classic():
    return get_palette("classic")


@pytest.fixture
def gray_ramp() -> Palette:
    """
    Six-stop palette with strictly increasing gray levels, so the red
    channel alone identifies the band a color came from.
    """
    return Palette(
        "ramp",
        (0.0, 0.75, 0.85, 0.95, 0.99, 1.0),
        tuple(Color.gray(v / 255) for v in (0, 50, 100, 150, 200, 250)),
    )


@pytest.fixture
def black_to_white() -> Palette:
    return Palette("bw", (0.0, 1.0), (Color(0, 0, 0), Color(255, 255, 255)))


@pytest.fixture
def small_config(camera, classic) -> RenderConfig:
    return RenderConfig(
        width=12,
        height=9,
        camera=camera,
        palette=classic,
        max_iter=60,
        supersampling=2,
    )
