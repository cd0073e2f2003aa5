"""Teaching scenarios: scene texts, default temperatures, backdrop palette."""

import copy

from colorsci.kelvin import KELVIN_MAX, KELVIN_MIN

SUNSET = "sunset"
BLUE_HOUR = "blue_hour"

REQUIRED_KEYS = {
    "id",
    "title",
    "description",
    "target_description",
    "default_light_k",
    "default_wb_k",
    "backdrop",
}

SCENARIOS: dict[str, dict] = {
    SUNSET: {
        "id": SUNSET,
        "title": "Sonnenuntergang",
        "description": (
            "Anmoderation vor einem Sonnenuntergang. Der Himmel ist rötlich-warm."
        ),
        "target_description": (
            "Verstärken Sie das Rot des Himmels, aber halten Sie das Motiv "
            "neutralweiß. (Tipp: Licht & WB auf Tageslicht ca. 5600K-6500K "
            "oder höher)."
        ),
        "default_light_k": 5600,
        "default_wb_k": 5600,
        # Reference photo only; backdrops are synthesized, never downloaded
        "background_url": "https://images.unsplash.com/photo-1470252649378-9c29740c9fa8",
        "backdrop": {"top": (74, 58, 112), "bottom": (238, 128, 62)},
    },
    BLUE_HOUR: {
        "id": BLUE_HOUR,
        "title": "Blaue Stunde",
        "description": "Anmoderation zur 'Blauen Stunde'. Der Himmel ist tiefblau.",
        "target_description": (
            "Verstärken Sie das Blau des Himmels, bei neutralem Motiv. "
            "(Tipp: Licht & WB auf Kunstlicht ca. 3200K)."
        ),
        "default_light_k": 3200,
        "default_wb_k": 3200,
        "background_url": "https://images.unsplash.com/photo-1477959858617-67f85cf4f1df",
        "backdrop": {"top": (16, 28, 74), "bottom": (70, 96, 150)},
    },
}


def get_scenario(scenario_id: str) -> dict:
    """Return a copy of a scenario config. Raises KeyError if unknown."""
    if scenario_id not in SCENARIOS:
        raise KeyError(f"unknown scenario: {scenario_id}")
    return copy.deepcopy(SCENARIOS[scenario_id])


def list_scenarios() -> list[dict]:
    return [
        {
            "id": sid,
            "title": cfg["title"],
            "default_light_k": cfg["default_light_k"],
            "default_wb_k": cfg["default_wb_k"],
        }
        for sid, cfg in SCENARIOS.items()
    ]


def validate(config: dict) -> list[str]:
    """Validate a scenario dict. Returns list of error strings (empty = valid)."""
    errors = []

    missing = REQUIRED_KEYS - set(config.keys())
    if missing:
        errors.append(f"Missing scenario keys: {sorted(missing)}")
        return errors

    for key in ("id", "title", "description", "target_description"):
        if not isinstance(config[key], str):
            errors.append(f"'{key}' must be a string")

    for key in ("default_light_k", "default_wb_k"):
        value = config[key]
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            errors.append(f"'{key}' must be a number")
        elif not KELVIN_MIN <= value <= KELVIN_MAX:
            errors.append(f"'{key}' {value} outside {KELVIN_MIN}-{KELVIN_MAX}K")

    backdrop = config["backdrop"]
    if not isinstance(backdrop, dict) or {"top", "bottom"} - set(backdrop.keys()):
        errors.append("'backdrop' must have 'top' and 'bottom' colors")
    else:
        for edge in ("top", "bottom"):
            color = backdrop[edge]
            if (
                not isinstance(color, (tuple, list))
                or len(color) != 3
                or not all(0 <= c <= 255 for c in color)
            ):
                errors.append(f"backdrop '{edge}' must be an RGB triple in 0-255")

    return errors
