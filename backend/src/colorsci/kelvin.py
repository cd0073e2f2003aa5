"""Kelvin → RGB approximation (Tanner Helland's formula).

Valid roughly from 1000K to 40000K. Every channel is clamped after the
branch logic so that out-of-domain input never yields NaN or out-of-range
values. NaN collapses to the lower bound.
"""

import math

import numpy as np

KELVIN_MIN = 2000
KELVIN_MAX = 10000
KELVIN_STEP = 100

# 5600K daylight: the point where light and WB cancel out
NEUTRAL_KELVIN = 5600


def to_float(value) -> float:
    """float(value), saturating ints too large for a float to +/-inf."""
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def clamp(val: float, lo: float, hi: float) -> float:
    """Clamp to [lo, hi]. NaN maps to lo."""
    if math.isnan(val):
        return lo
    return min(max(val, lo), hi)


def round_channel(val: float) -> int:
    """Clamp to [0, 255] and round half-up."""
    return int(math.floor(clamp(val, 0.0, 255.0) + 0.5))


def format_rgba(rgba: tuple[int, int, int, float]) -> str:
    """Serialize an (r, g, b, a) tuple as a CSS-style rgba() string.

    Alpha is written as the shortest decimal that round-trips, never in
    exponent notation.
    """
    r, g, b, a = rgba
    alpha = np.format_float_positional(float(a) + 0.0, trim="-")
    return f"rgba({r}, {g}, {b}, {alpha})"


def kelvin_to_rgb(kelvin: float) -> dict[str, float]:
    """Approximate the RGB color of a black body at the given temperature."""
    temp = to_float(kelvin) / 100.0

    if temp <= 66:
        r = 255.0
        # ln() is undefined at or below zero
        g = 99.4708025861 * math.log(temp) - 161.1195681661 if temp > 0 else 0.0
    else:
        r = 329.698727446 * math.pow(temp - 60, -0.1332047592)
        g = 288.1221695283 * math.pow(temp - 60, -0.0755148492)

    if temp >= 66:
        b = 255.0
    elif temp <= 19:
        b = 0.0
    else:
        b = 138.5177312231 * math.log(temp - 10) - 305.0447927307

    return {
        "r": clamp(r, 0.0, 255.0),
        "g": clamp(g, 0.0, 255.0),
        "b": clamp(b, 0.0, 255.0),
    }


def kelvin_to_rgba(kelvin: float, opacity: float = 1.0) -> tuple[int, int, int, float]:
    """kelvin_to_rgb with integer channels and an alpha component."""
    rgb = kelvin_to_rgb(kelvin)
    return (
        round_channel(rgb["r"]),
        round_channel(rgb["g"]),
        round_channel(rgb["b"]),
        clamp(to_float(opacity), 0.0, 1.0),
    )


def get_rgb_string(kelvin: float, opacity: float = 1.0) -> str:
    return format_rgba(kelvin_to_rgba(kelvin, opacity))
