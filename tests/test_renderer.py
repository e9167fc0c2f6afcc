"""Tests for the frame orchestrator."""

import numpy as np
import pytest

from mandelscope.config import RenderConfig
from mandelscope.core.camera import Camera
from mandelscope.core.sampling import reduce_pixel
from mandelscope.io.surface import ArraySurface
from mandelscope.palettes import get_palette
from mandelscope.renderer import Frame, FrameRenderer


@pytest.fixture
def scenario_config() -> RenderConfig:
    """4x4 whole-set view, no anti-aliasing, classic palette."""
    return RenderConfig(
        width=4,
        height=4,
        camera=Camera(center_x=-0.5, center_y=0.0, view_width=3.0, aspect_ratio=4 / 3),
        palette=get_palette("classic"),
        max_iter=100,
        supersampling=1,
    )


class TestFrameRenderer:
    def test_frame_shape(self, small_config):
        frame = FrameRenderer(small_config).render()
        assert isinstance(frame, Frame)
        assert frame.pixels.shape == (9, 12, 3)
        assert frame.pixels.dtype == np.uint8
        assert frame.sample_count == 12 * 9 * 4
        assert frame.elapsed >= 0.0

    def test_top_left_pixel_is_first_color(self, scenario_config):
        frame = FrameRenderer(scenario_config).render()
        # c = -2 + 1.125i escapes fastest of the frame: rank 0
        assert frame.color_at(0, 0) == scenario_config.palette.colors[0]

    def test_inside_pixel_is_first_color(self, scenario_config):
        frame = FrameRenderer(scenario_config).render()
        # c = -0.5, inside the main cardioid
        assert frame.color_at(2, 2) == scenario_config.palette.colors[0]

    def test_slow_escape_gets_interpolated_color(self, scenario_config):
        frame = FrameRenderer(scenario_config).render()
        assert frame.color_at(0, 1) != scenario_config.palette.colors[0]
        assert frame.color_at(2, 0) != scenario_config.palette.colors[0]

    def test_idempotent(self, small_config):
        first = FrameRenderer(small_config).render()
        second = FrameRenderer(small_config).render()
        assert first.pixels.tobytes() == second.pixels.tobytes()

    def test_writes_every_pixel_to_surface(self, small_config):
        surface = ArraySurface(small_config.width, small_config.height)
        frame = FrameRenderer(small_config).render(surface=surface)
        np.testing.assert_array_equal(surface.pixels, frame.pixels)

    def test_object_model_matches_array_render(self, small_config):
        renderer = FrameRenderer(small_config)
        frame = renderer.render()
        pixels = renderer.render_pixels()
        assert len(pixels) == small_config.width * small_config.height
        for pix in pixels:
            assert reduce_pixel(pix) == frame.color_at(pix.x, pix.y)

    def test_render_to_surface_via_pixels(self, small_config):
        renderer = FrameRenderer(small_config)
        surface = ArraySurface(small_config.width, small_config.height)
        renderer.render_to(surface)
        np.testing.assert_array_equal(surface.pixels, renderer.render().pixels)

    def test_progress_callback(self, small_config):
        calls = []
        FrameRenderer(small_config).render(progress_callback=lambda c, t: calls.append((c, t)))
        assert calls[-1][0] == calls[-1][1]

    def test_palette_changes_output(self, small_config):
        from dataclasses import replace

        a = FrameRenderer(small_config).render()
        b = FrameRenderer(replace(small_config, palette=get_palette("neon"))).render()
        assert not np.array_equal(a.pixels, b.pixels)

    def test_fully_inside_view(self):
        cfg = RenderConfig(
            width=5, height=5,
            camera=Camera(-0.1, 0.0, 0.1, 1.0),
            supersampling=2,
            max_iter=50,
        )
        frame = FrameRenderer(cfg).render()
        assert frame.escaped_fraction == 0.0
        assert np.all(frame.pixels == np.array(cfg.palette.colors[0], dtype=np.uint8))

    def test_threaded_render(self, small_config):
        from dataclasses import replace

        serial = FrameRenderer(replace(small_config, workers=1)).render()
        threaded = FrameRenderer(replace(small_config, workers=3)).render()
        assert threaded.pixels.shape == (9, 12, 3)
        assert threaded.pixels.tobytes() == serial.pixels.tobytes()

    def test_default_config(self):
        renderer = FrameRenderer()
        assert renderer.cfg == RenderConfig()
        assert renderer.grid.supersampling == 3
