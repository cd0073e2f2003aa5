"""Tests for the viewport compositor: backdrop, WB overlay, subject."""

import numpy as np
import pytest

from colorsci.white_balance import subject_rgba
from engine.compositor import (
    _blend_normal,
    _blend_overlay,
    apply_wb_overlay,
    make_backdrop,
    paint_subject,
    render_viewport,
    subject_mask,
)
from lab.scenarios import BLUE_HOUR, SUNSET, get_scenario

RESOLUTION = (120, 90)


class TestBlendModes:
    def test_normal_full_opacity_replaces(self):
        base = np.full((2, 2, 3), 10.0, dtype=np.float32)
        layer = np.array([200.0, 100.0, 50.0], dtype=np.float32)
        out = _blend_normal(base, layer, 1.0)
        np.testing.assert_allclose(out[0, 0], [200.0, 100.0, 50.0])

    def test_overlay_dark_base_multiplies(self):
        """Overlay with dark base (< 128) uses multiply formula."""
        base = np.full((1, 1, 3), 64.0, dtype=np.float32)
        layer = np.full(3, 128.0, dtype=np.float32)
        out = _blend_overlay(base, layer, 1.0)
        # 2 * 64 * 128 / 255 ≈ 64.25
        assert out[0, 0, 0] == pytest.approx(64.25, abs=0.01)

    def test_overlay_bright_base_screens(self):
        base = np.full((1, 1, 3), 200.0, dtype=np.float32)
        layer = np.full(3, 255.0, dtype=np.float32)
        out = _blend_overlay(base, layer, 1.0)
        assert out[0, 0, 0] == pytest.approx(255.0)

    def test_zero_opacity_is_identity(self):
        base = np.full((1, 1, 3), 77.0, dtype=np.float32)
        layer = np.full(3, 255.0, dtype=np.float32)
        np.testing.assert_allclose(_blend_overlay(base, layer, 0.0), base)


class TestBackdrop:
    def test_gradient_endpoints(self):
        frame = make_backdrop((10, 20, 30), (210, 120, 30), RESOLUTION)
        assert frame.shape == (90, 120, 4)
        assert frame.dtype == np.uint8
        np.testing.assert_array_equal(frame[0, 0], [10, 20, 30, 255])
        np.testing.assert_array_equal(frame[-1, -1], [210, 120, 30, 255])

    def test_rows_are_uniform(self):
        frame = make_backdrop((0, 0, 0), (255, 255, 255), RESOLUTION)
        np.testing.assert_array_equal(frame[45, 0], frame[45, 119])


class TestWbOverlay:
    def test_neutral_wb_is_identity(self, solid_frame):
        frame = solid_frame(180, 90, 60)
        np.testing.assert_array_equal(apply_wb_overlay(frame, 5600), frame)

    def test_tungsten_wb_cools_scene(self, solid_frame):
        frame = solid_frame(100, 100, 100)
        out = apply_wb_overlay(frame, 3200)
        assert out[0, 0, 2] > 100
        assert out[0, 0, 0] < 100

    def test_cool_wb_warms_scene(self, solid_frame):
        frame = solid_frame(100, 100, 100)
        out = apply_wb_overlay(frame, 9000)
        assert out[0, 0, 0] > 100
        assert out[0, 0, 2] < 100

    def test_alpha_preserved(self, solid_frame):
        frame = solid_frame(128, 128, 128, a=180)
        out = apply_wb_overlay(frame, 2000)
        np.testing.assert_array_equal(out[:, :, 3], 180)

    def test_no_uint8_wrap_at_extremes(self, solid_frame):
        for k in (2000, 10000):
            out = apply_wb_overlay(solid_frame(255, 255, 255), k)
            assert out.dtype == np.uint8
            assert out.max() <= 255

    def test_empty_frame(self):
        frame = np.zeros((0, 0, 4), dtype=np.uint8)
        assert apply_wb_overlay(frame, 3200).shape == frame.shape

    def test_input_not_mutated(self, solid_frame):
        frame = solid_frame(50, 60, 70)
        before = frame.copy()
        apply_wb_overlay(frame, 2500)
        np.testing.assert_array_equal(frame, before)


class TestSubject:
    def test_mask_covers_figure_not_corners(self):
        mask = subject_mask((200, 100))
        assert mask[95, 100]  # body near the bottom edge
        assert mask[43, 100]  # head center
        assert not mask[0, 0]
        assert not mask[99, 0]

    def test_matched_wb_paints_neutral_daylight(self, solid_frame):
        frame = solid_frame(0, 0, 0)
        out = paint_subject(frame, 3200, 3200)
        r, g, b, _ = subject_rgba(5600, 5600)
        np.testing.assert_array_equal(out[95, 50, :3], [r, g, b])
        # Background untouched
        np.testing.assert_array_equal(out[0, 0], [0, 0, 0, 255])

    def test_warm_light_paints_orange(self, solid_frame):
        out = paint_subject(solid_frame(0, 0, 0), 2500, 5600)
        r, g, b = (int(c) for c in out[95, 50, :3])
        assert r > g > b

    def test_partial_opacity_blends(self, solid_frame):
        out = paint_subject(solid_frame(0, 0, 0), 5600, 5600, opacity=0.5)
        assert out[95, 50, 0] == 127


class TestRenderViewport:
    def test_shape_and_opacity(self):
        frame = render_viewport(get_scenario(SUNSET), 5600, 5600, RESOLUTION)
        assert frame.shape == (90, 120, 4)
        assert (frame[:, :, 3] == 255).all()

    def test_sky_ignores_light_temperature(self):
        """Only WB tints the background; the key light does not reach the sky."""
        scenario = get_scenario(BLUE_HOUR)
        a = render_viewport(scenario, 2000, 3200, RESOLUTION)
        b = render_viewport(scenario, 9000, 3200, RESOLUTION)
        np.testing.assert_array_equal(a[0, 0], b[0, 0])
        assert not np.array_equal(a[85, 60], b[85, 60])

    def test_tungsten_wb_deepens_blue_sky(self):
        scenario = get_scenario(BLUE_HOUR)
        neutral = render_viewport(scenario, 3200, 5600, RESOLUTION)
        tungsten = render_viewport(scenario, 3200, 3200, RESOLUTION)
        assert tungsten[:10, :, 2].mean() > neutral[:10, :, 2].mean()

    def test_deterministic(self):
        scenario = get_scenario(SUNSET)
        a = render_viewport(scenario, 4000, 7000, RESOLUTION)
        b = render_viewport(scenario, 4000, 7000, RESOLUTION)
        np.testing.assert_array_equal(a, b)
