"""
Display surfaces: rasters that accept ``set_pixel(x, y, color)``.

Origin is the top-left corner. Nothing here writes files.
"""

from typing import Protocol, runtime_checkable

import numpy as np
from PIL import Image

from mandelscope.palettes import Color


@runtime_checkable
class Surface(Protocol):
    width: int
    height: int

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        ...


class ArraySurface:
    """In-memory (H, W, 3) uint8 raster."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 3), dtype=np.uint8)

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        self.pixels[y, x] = color


class ImageSurface:
    """Pillow-backed surface, for handing the frame to an image viewer."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.image = Image.new("RGB", (width, height))
        self._access = self.image.load()

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        self._access[x, y] = tuple(color)

    def to_array(self) -> np.ndarray:
        return np.asarray(self.image, dtype=np.uint8)

    def show(self, title: str | None = None) -> None:
        self.image.show(title=title)
