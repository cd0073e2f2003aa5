"""White balance: background overlay tint and subject color cast.

White balance is an inverse correction: a camera set to a LOW Kelvin assumes
warm light and adds BLUE; a camera set to a HIGH Kelvin assumes cool light and
adds ORANGE. The overlay depends on the WB setting alone; the light source
never reaches the sky.
"""

from colorsci.kelvin import (
    KELVIN_MAX,
    KELVIN_MIN,
    NEUTRAL_KELVIN,
    clamp,
    format_rgba,
    kelvin_to_rgba,
    round_channel,
    to_float,
)

# Anchor palette: (r, g, b), max opacity
NEUTRAL_GRAY = (128, 128, 128)
AZURE_BLUE = (0, 80, 255)
WARM_ORANGE = (255, 140, 0)
BLUE_MAX_OPACITY = 0.9
ORANGE_MAX_OPACITY = 0.8

# Historical remap variant
REMAP_NEUTRAL_KELVIN = 6500
REMAP_OPACITY = 0.6


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def wb_filter_rgba(wb_kelvin: float) -> tuple[int, int, int, float]:
    """Overlay tint for a WB setting as (r, g, b, a).

    Interpolates from the neutral anchor (5600K, gray, alpha 0) toward deep
    azure below 5600K and toward warm orange above. The two opacity ramps are
    deliberately asymmetric (0.9 vs 0.8).
    """
    wb_kelvin = to_float(wb_kelvin)
    if wb_kelvin < NEUTRAL_KELVIN:
        t = (NEUTRAL_KELVIN - wb_kelvin) / (NEUTRAL_KELVIN - KELVIN_MIN)
        target, max_opacity = AZURE_BLUE, BLUE_MAX_OPACITY
    else:
        t = (wb_kelvin - NEUTRAL_KELVIN) / (KELVIN_MAX - NEUTRAL_KELVIN)
        target, max_opacity = WARM_ORANGE, ORANGE_MAX_OPACITY

    # Saturate at the end anchors outside the slider range
    t = clamp(t, 0.0, 1.0)

    r, g, b = (round_channel(_lerp(n, c, t)) for n, c in zip(NEUTRAL_GRAY, target))
    return r, g, b, clamp(_lerp(0.0, max_opacity, t), 0.0, 1.0)


def wb_filter_overlay(wb_kelvin: float) -> str:
    return format_rgba(wb_filter_rgba(wb_kelvin))


def wb_filter_overlay_remap(wb_kelvin: float) -> str:
    """Earlier overlay variant: remap WB onto an inverted Kelvin scale.

    2000K..5600K maps to 26500K..6500K (bluer), 5600K..10000K maps to
    6500K..2000K (warmer), rendered at a fixed 0.6 opacity. Kept for
    comparison only; wb_filter_overlay is the reference behavior.
    """
    wb_kelvin = to_float(wb_kelvin)
    if wb_kelvin < NEUTRAL_KELVIN:
        factor = (NEUTRAL_KELVIN - wb_kelvin) / (NEUTRAL_KELVIN - KELVIN_MIN)
        simulated = REMAP_NEUTRAL_KELVIN + factor * 20000
    else:
        factor = (wb_kelvin - NEUTRAL_KELVIN) / (KELVIN_MAX - NEUTRAL_KELVIN)
        simulated = REMAP_NEUTRAL_KELVIN - factor * 4500
    return format_rgba(kelvin_to_rgba(simulated, REMAP_OPACITY))


def virtual_kelvin(light_kelvin: float, wb_kelvin: float) -> float:
    """Temperature representing the net cast: light warmer than WB → lower."""
    return NEUTRAL_KELVIN + (to_float(light_kelvin) - to_float(wb_kelvin))


def subject_rgba(
    light_kelvin: float, wb_kelvin: float, opacity: float = 1.0
) -> tuple[int, int, int, float]:
    """Apparent color of a white subject as (r, g, b, a).

    Matching light and WB always yields kelvin_to_rgb(5600), whatever the
    absolute temperature.
    """
    return kelvin_to_rgba(virtual_kelvin(light_kelvin, wb_kelvin), opacity)


def subject_color(light_kelvin: float, wb_kelvin: float, opacity: float = 1.0) -> str:
    return format_rgba(subject_rgba(light_kelvin, wb_kelvin, opacity))
