"""
Frame orchestrator.

Scatter: score every sub-sample (row bands, optionally threaded).
Gather: rank and color all escaping samples of the frame in one pass.
Scatter: box-filter sub-sample colors down to pixels and write them out.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from mandelscope.config import RenderConfig
from mandelscope.core.divergence import DivergenceEngine
from mandelscope.core.histogram import HistogramColorizer
from mandelscope.core.sampling import (
    FrameSamples,
    Pixel,
    SampleGrid,
    reduce_colors,
    reduce_pixel,
    to_pixels,
)
from mandelscope.io.surface import Surface
from mandelscope.palettes import Color


@dataclass
class Frame:
    """A rendered frame: (H, W, 3) uint8 pixels plus the samples behind them."""

    pixels: np.ndarray
    samples: FrameSamples
    elapsed: float

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def escaped_fraction(self) -> float:
        return self.samples.escaped_fraction

    @property
    def sample_count(self) -> int:
        return self.samples.sample_count

    def color_at(self, x: int, y: int) -> Color:
        r, g, b = self.pixels[y, x]
        return Color(int(r), int(g), int(b))


class FrameRenderer:
    """
    Renders one Mandelbrot frame from a ``RenderConfig``.

    Rendering keeps no state between calls, so the same config always gives
    the same pixels.
    """

    def __init__(self, config: RenderConfig | None = None):
        self.cfg = config or RenderConfig()
        self.engine = DivergenceEngine(self.cfg.max_iter, self.cfg.escape_radius)
        self.grid = SampleGrid(self.cfg.camera, self.engine, self.cfg.supersampling)
        self.colorizer = HistogramColorizer(self.cfg.palette)

    def sample(
        self,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> FrameSamples:
        cfg = self.cfg
        return self.grid.sample(
            cfg.width,
            cfg.height,
            workers=cfg.workers,
            progress_callback=progress_callback,
        )

    def color_samples(self, samples: FrameSamples) -> np.ndarray:
        """
        Rank-color every sub-sample of a frame.

        Samples are enumerated column by column (x outer, y inner), which
        fixes the order equal scores keep in the ranking.

        Returns:
            (H, W, sf*sf, 3) float64 RGB, rounded to whole 8-bit levels.
        """
        scores = samples.scores.transpose(1, 0, 2)
        escaped = samples.escaped.transpose(1, 0, 2)
        rgb = self.colorizer.colorize_scores(scores, escaped)
        rgb = np.rint(rgb).reshape(scores.shape + (3,))
        return rgb.transpose(1, 0, 2, 3)

    def render(
        self,
        surface: Optional[Surface] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> Frame:
        """
        Render the frame and optionally push it to a display surface.

        Args:
            surface: Receives one ``set_pixel`` call per pixel.
            progress_callback: Optional callback(current, total) per row band.

        Returns:
            The rendered ``Frame``.
        """
        t0 = time.perf_counter()

        samples = self.sample(progress_callback)
        pixels = reduce_colors(self.color_samples(samples))
        frame = Frame(pixels=pixels, samples=samples, elapsed=time.perf_counter() - t0)

        if surface is not None:
            self.write(frame, surface)
        return frame

    def write(self, frame: Frame, surface: Surface) -> None:
        for x in range(frame.width):
            for y in range(frame.height):
                surface.set_pixel(x, y, frame.color_at(x, y))

    def render_pixels(self) -> list[Pixel]:
        """
        Object-model render: every ``Pixel`` with colored ``SubPixel``s.

        Much slower than ``render``; produces the same colors.
        """
        pixels = to_pixels(self.sample())
        self.colorizer.colorize([s for pix in pixels for s in pix.sub_pixels])
        return pixels

    def render_to(self, surface: Surface) -> None:
        """Write the object-model render to a surface via ``reduce_pixel``."""
        for pix in self.render_pixels():
            surface.set_pixel(pix.x, pix.y, reduce_pixel(pix))
