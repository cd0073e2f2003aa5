"""Viewport compositor: backdrop, white-balance overlay, subject silhouette.

The backdrop stands in for the scene photo; only the WB setting tints it
(the key light never reaches the sky). The subject is an abstract white
figure lit by the key light and seen through the same WB.

CRITICAL: All blend math uses float32 to avoid uint8 overflow/wrap.
"""

import logging

import numpy as np

from colorsci.white_balance import subject_rgba, wb_filter_rgba

logger = logging.getLogger(__name__)

DEFAULT_RESOLUTION = (640, 360)


def _blend_normal(base: np.ndarray, layer: np.ndarray, opacity: float) -> np.ndarray:
    """Alpha-over composite with opacity."""
    return base * (1.0 - opacity) + layer * opacity


def _blend_overlay(base: np.ndarray, layer: np.ndarray, opacity: float) -> np.ndarray:
    # Conditional: multiply where base < 128, screen where base >= 128
    low = (2.0 * base * layer) / 255.0
    high = 255.0 - (2.0 * (255.0 - base) * (255.0 - layer)) / 255.0
    blended = np.where(base < 128.0, low, high)
    return base * (1.0 - opacity) + blended * opacity


BLEND_MODES = {
    "normal": _blend_normal,
    "overlay": _blend_overlay,
}


def make_backdrop(
    top: tuple[int, int, int],
    bottom: tuple[int, int, int],
    resolution: tuple[int, int] = DEFAULT_RESOLUTION,
) -> np.ndarray:
    """Vertical sky gradient as an opaque RGBA uint8 frame (H, W, 4)."""
    width, height = resolution
    t = np.linspace(0.0, 1.0, height, dtype=np.float32)[:, np.newaxis]
    top_f = np.asarray(top, dtype=np.float32)
    bottom_f = np.asarray(bottom, dtype=np.float32)
    column = top_f + (bottom_f - top_f) * t  # (H, 3)

    frame = np.empty((height, width, 4), dtype=np.uint8)
    frame[:, :, :3] = np.clip(np.rint(column), 0, 255).astype(np.uint8)[:, np.newaxis]
    frame[:, :, 3] = 255
    return frame


def apply_wb_overlay(
    frame: np.ndarray, wb_kelvin: float, blend_mode: str = "overlay"
) -> np.ndarray:
    """Tint a frame with the white-balance overlay. Alpha is preserved."""
    if frame.size == 0:
        return frame.copy()

    r, g, b, opacity = wb_filter_rgba(wb_kelvin)
    if opacity == 0.0:
        return frame.copy()

    blend_fn = BLEND_MODES.get(blend_mode, _blend_overlay)
    base = frame[:, :, :3].astype(np.float32)
    layer = np.array([r, g, b], dtype=np.float32)
    blended = blend_fn(base, layer, opacity)

    output = frame.copy()
    output[:, :, :3] = np.clip(blended, 0, 255).astype(np.uint8)
    return output


def subject_mask(resolution: tuple[int, int]) -> np.ndarray:
    """Boolean (H, W) mask of the figure: circular head above a triangle body."""
    width, height = resolution
    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    cx = width / 2.0
    unit = height * 0.65  # figure height

    # Body: apex below the head, base on the bottom edge
    body_top = height - unit * 0.68
    body_half = unit * 0.26
    progress = (ys - body_top) / max(height - body_top, 1.0)
    body = (ys >= body_top) & (np.abs(xs - cx) <= body_half * progress)

    head_r = unit * 0.15
    head_cy = body_top - head_r - unit * 0.04
    head = (xs - cx) ** 2 + (ys - head_cy) ** 2 <= head_r**2

    return head | body


def paint_subject(
    frame: np.ndarray, light_kelvin: float, wb_kelvin: float, opacity: float = 1.0
) -> np.ndarray:
    """Fill the figure with the subject color at the given opacity."""
    if frame.size == 0:
        return frame.copy()

    height, width = frame.shape[:2]
    r, g, b, alpha = subject_rgba(light_kelvin, wb_kelvin, opacity)
    mask = subject_mask((width, height))

    base = frame[:, :, :3].astype(np.float32)
    layer = np.array([r, g, b], dtype=np.float32)
    painted = _blend_normal(base[mask], layer, alpha)

    output = frame.copy()
    output[mask, :3] = np.clip(painted, 0, 255).astype(np.uint8)
    return output


def render_viewport(
    scenario: dict,
    light_kelvin: float,
    wb_kelvin: float,
    resolution: tuple[int, int] = DEFAULT_RESOLUTION,
) -> np.ndarray:
    """Render a full frame for a scenario.

    Args:
        scenario: Scenario config with a 'backdrop' {'top', 'bottom'} palette.
        light_kelvin: Key light temperature on the subject.
        wb_kelvin: Camera white balance.
        resolution: (width, height) of the output.

    Returns:
        Opaque RGBA frame as uint8 (H, W, 4).
    """
    backdrop = scenario["backdrop"]
    frame = make_backdrop(backdrop["top"], backdrop["bottom"], resolution)
    frame = apply_wb_overlay(frame, wb_kelvin)
    frame = paint_subject(frame, light_kelvin, wb_kelvin)
    logger.debug(
        "Rendered %s at light=%sK wb=%sK (%dx%d)",
        scenario.get("id", "?"),
        light_kelvin,
        wb_kelvin,
        resolution[0],
        resolution[1],
    )
    return frame
