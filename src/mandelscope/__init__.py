"""
Mandelscope: histogram-equalized Mandelbrot rendering.
"""

from mandelscope.config import RenderConfig
from mandelscope.core.camera import Camera
from mandelscope.core.complex import Complex
from mandelscope.core.divergence import BOUNDED, DivergenceEngine, Escaped
from mandelscope.core.histogram import HistogramColorizer, colorize
from mandelscope.core.sampling import Pixel, SampleGrid, SubPixel, reduce_pixel
from mandelscope.errors import ConfigurationError
from mandelscope.palettes import PALETTES, Color, Palette, get_palette
from mandelscope.renderer import Frame, FrameRenderer

__version__ = "0.1.0"
