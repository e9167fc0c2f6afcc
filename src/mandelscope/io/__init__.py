"""Display surfaces."""

from mandelscope.io.surface import ArraySurface, ImageSurface, Surface
