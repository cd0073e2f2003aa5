"""Color science core: Kelvin approximation and white-balance interaction."""

from colorsci.kelvin import (  # noqa: F401
    KELVIN_MAX,
    KELVIN_MIN,
    KELVIN_STEP,
    NEUTRAL_KELVIN,
    get_rgb_string,
    kelvin_to_rgb,
    kelvin_to_rgba,
)
from colorsci.white_balance import (  # noqa: F401
    subject_color,
    subject_rgba,
    virtual_kelvin,
    wb_filter_overlay,
    wb_filter_overlay_remap,
    wb_filter_rgba,
)
