"""
Supersampling grid: pixels, their sub-samples, and box-filter reduction.

Every output pixel owns an ``sf x sf`` grid of sub-samples. Sub-sample
``k = i * sf + j`` sits at horizontal offset ``i`` and vertical offset ``j``
inside the pixel.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from mandelscope.core.camera import Camera
from mandelscope.core.divergence import BOUNDED, DivergenceEngine, DivergenceSample, Escaped
from mandelscope.errors import ConfigurationError
from mandelscope.palettes import Color


@dataclass
class SubPixel:
    """One sample point of a pixel."""

    parent_x: int
    parent_y: int
    sample_index: int
    divergence: DivergenceSample
    color: Optional[Color] = None


@dataclass
class Pixel:
    """An output pixel and the sub-samples it averages."""

    x: int
    y: int
    sub_pixels: list[SubPixel] = field(default_factory=list)


@dataclass(frozen=True)
class FrameSamples:
    """Divergence scores for every sub-sample of a frame, shape (H, W, sf*sf)."""

    scores: np.ndarray
    escaped: np.ndarray
    supersampling: int

    @property
    def height(self) -> int:
        return self.scores.shape[0]

    @property
    def width(self) -> int:
        return self.scores.shape[1]

    @property
    def sample_count(self) -> int:
        return self.scores.size

    @property
    def escaped_fraction(self) -> float:
        if self.escaped.size == 0:
            return 0.0
        return float(np.count_nonzero(self.escaped)) / self.escaped.size


class SampleGrid:
    """
    Projects and scores every sub-sample of a frame.

    Args:
        camera: Viewport projection.
        engine: Escape-time scorer.
        supersampling: Sub-samples per pixel edge (1 disables anti-aliasing).
    """

    def __init__(self, camera: Camera, engine: DivergenceEngine, supersampling: int = 1):
        if supersampling < 1:
            raise ConfigurationError(f"supersampling must be >= 1, got {supersampling}")
        self.camera = camera
        self.engine = engine
        self.supersampling = int(supersampling)

    def viewport_coords(
        self,
        width: int,
        height: int,
        rows: Optional[range] = None,
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        Normalized (u, v) of every sub-sample, each of shape (rows, W, sf*sf).

        ``v`` is flipped so raster row 0 is the top of the view.
        """
        sf = self.supersampling
        if rows is None:
            rows = range(height)
        offsets = np.arange(sf)
        i = np.repeat(offsets, sf)
        j = np.tile(offsets, sf)

        xs = np.arange(width)
        ys = np.arange(rows.start, rows.stop)

        u = (sf * xs[np.newaxis, :, np.newaxis] + i) / (sf * width)
        v = 1.0 - (sf * ys[:, np.newaxis, np.newaxis] + j) / (sf * height)
        shape = (len(ys), width, sf * sf)
        return np.broadcast_to(u, shape), np.broadcast_to(v, shape)

    def _score_rows(self, width: int, height: int, rows: range) -> tuple[np.ndarray, np.ndarray]:
        u, v = self.viewport_coords(width, height, rows)
        re, im = self.camera.to_complex_grid(u, v)
        return self.engine.divergence_field(re, im)

    def sample(
        self,
        width: int,
        height: int,
        workers: int = 1,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> FrameSamples:
        """
        Score the whole frame, one band of rows per task.

        Bands are independent, so with ``workers > 1`` they run on a thread
        pool. The result does not depend on ``workers``.
        """
        sf = self.supersampling
        band = max(1, height // max(1, workers * 4))
        bands = [range(y, min(y + band, height)) for y in range(0, height, band)]

        scores = np.zeros((height, width, sf * sf), dtype=np.float64)
        escaped = np.zeros((height, width, sf * sf), dtype=bool)

        def work(rows: range):
            return rows, self._score_rows(width, height, rows)

        if workers > 1 and len(bands) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = pool.map(work, bands)
                self._collect(results, scores, escaped, len(bands), progress_callback)
        else:
            results = map(work, bands)
            self._collect(results, scores, escaped, len(bands), progress_callback)

        return FrameSamples(scores=scores, escaped=escaped, supersampling=sf)

    @staticmethod
    def _collect(results, scores, escaped, total, progress_callback):
        for done, (rows, (band_scores, band_escaped)) in enumerate(results, start=1):
            scores[rows.start:rows.stop] = band_scores
            escaped[rows.start:rows.stop] = band_escaped
            if progress_callback:
                progress_callback(done, total)

    def build_frame(self, width: int, height: int, workers: int = 1) -> list[Pixel]:
        """Object form of the frame, pixels in column-major order."""
        return to_pixels(self.sample(width, height, workers=workers))


def to_pixels(samples: FrameSamples) -> list[Pixel]:
    """Materialize ``Pixel``/``SubPixel`` objects from scored arrays."""
    pixels = []
    for x in range(samples.width):
        for y in range(samples.height):
            pix = Pixel(x, y)
            for k in range(samples.scores.shape[2]):
                if samples.escaped[y, x, k]:
                    div = Escaped(float(samples.scores[y, x, k]))
                else:
                    div = BOUNDED
                pix.sub_pixels.append(SubPixel(x, y, k, div))
            pixels.append(pix)
    return pixels


def build_frame(
    camera: Camera,
    engine: DivergenceEngine,
    width: int,
    height: int,
    supersampling: int = 1,
) -> list[Pixel]:
    return SampleGrid(camera, engine, supersampling).build_frame(width, height)


def reduce_pixel(pixel: Pixel) -> Color:
    """Box filter: channel-wise mean of the sub-pixel colors."""
    if any(s.color is None for s in pixel.sub_pixels):
        raise ValueError(f"Pixel ({pixel.x}, {pixel.y}) has uncolored sub-pixels")
    rgb = np.array([s.color for s in pixel.sub_pixels], dtype=np.float64)
    r, g, b = np.rint(rgb.mean(axis=0)).astype(np.int64)
    return Color(int(r), int(g), int(b))


def reduce_colors(rgb: np.ndarray) -> np.ndarray:
    """
    Array form of ``reduce_pixel``.

    Args:
        rgb: (H, W, sf*sf, 3) sub-sample colors.

    Returns:
        (H, W, 3) uint8 pixel colors.
    """
    return np.rint(rgb.mean(axis=2)).astype(np.uint8)
