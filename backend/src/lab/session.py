"""Lab session: slider/scenario state and a dict command interface.

The engine is called fresh on every snapshot/render; the session only holds
the user's inputs.
"""

import base64
import logging
import math
import time
from dataclasses import asdict, dataclass

import sentry_sdk

from colorsci.kelvin import KELVIN_MAX, KELVIN_MIN, clamp, kelvin_to_rgb, to_float
from colorsci.white_balance import subject_color, virtual_kelvin, wb_filter_overlay
from engine.compositor import DEFAULT_RESOLUTION, render_viewport
from engine.encode import encode_png
from lab.scenarios import SUNSET, get_scenario, list_scenarios
from security import validate_resolution

logger = logging.getLogger(__name__)


@dataclass
class SimulationState:
    """User-controlled inputs. Slider values survive compare mode."""

    light_k: float
    wb_k: float
    scenario: str
    is_comparing: bool = False


def _kelvin(value) -> float:
    """Coerce a slider value to a Kelvin float within the slider range."""
    if isinstance(value, bool):
        raise TypeError(f"temperature must be a number, got {value!r}")
    k = to_float(value)
    if not math.isfinite(k):
        raise ValueError(f"temperature must be finite, got {value!r}")
    return clamp(k, KELVIN_MIN, KELVIN_MAX)


class LabSession:
    def __init__(self, scenario: str = SUNSET):
        self.start_time = time.time()
        self._initial_scenario = scenario
        self.config = get_scenario(scenario)
        self.state = SimulationState(
            light_k=self.config["default_light_k"],
            wb_k=self.config["default_wb_k"],
            scenario=scenario,
        )

    def reset_state(self):
        """Return to the initial scenario at its default temperatures."""
        self.set_scenario(self._initial_scenario)

    def set_scenario(self, scenario_id: str):
        """Switch scenario, restoring its defaults and leaving compare mode."""
        self.config = get_scenario(scenario_id)
        self.state = SimulationState(
            light_k=self.config["default_light_k"],
            wb_k=self.config["default_wb_k"],
            scenario=scenario_id,
        )
        logger.info("Scenario set to %s", scenario_id)

    def set_light_k(self, value) -> float:
        self.state.light_k = _kelvin(value)
        return self.state.light_k

    def set_wb_k(self, value) -> float:
        self.state.wb_k = _kelvin(value)
        return self.state.wb_k

    def auto_white(self) -> float:
        """Match WB to the light so the subject renders neutral."""
        self.state.wb_k = self.state.light_k
        return self.state.wb_k

    def compare_start(self):
        self.state.is_comparing = True

    def compare_end(self):
        self.state.is_comparing = False

    def active_temperatures(self) -> tuple[float, float]:
        """(light_k, wb_k) actually rendered. Scenario defaults while comparing."""
        if self.state.is_comparing:
            return self.config["default_light_k"], self.config["default_wb_k"]
        return self.state.light_k, self.state.wb_k

    def snapshot(self) -> dict:
        """Full state plus freshly computed colors for the presentation layer."""
        light_k, wb_k = self.active_temperatures()
        return {
            **asdict(self.state),
            "active_light_k": light_k,
            "active_wb_k": wb_k,
            "virtual_k": virtual_kelvin(light_k, wb_k),
            "subject_color": subject_color(light_k, wb_k, 1.0),
            "wb_overlay": wb_filter_overlay(wb_k),
            "title": self.config["title"],
            "description": self.config["description"],
            "target_description": self.config["target_description"],
        }

    def render(self, resolution: tuple[int, int] = DEFAULT_RESOLUTION):
        light_k, wb_k = self.active_temperatures()
        return render_viewport(self.config, light_k, wb_k, resolution)

    # --- Command interface ---

    def handle_message(self, message: dict) -> dict:
        cmd = message.get("cmd")
        msg_id = message.get("id")

        if cmd == "ping":
            return {
                "id": msg_id,
                "status": "alive",
                "uptime_s": round(time.time() - self.start_time, 1),
            }
        elif cmd == "state":
            return {"id": msg_id, "ok": True, **self.snapshot()}
        elif cmd == "list_scenarios":
            return {"id": msg_id, "ok": True, "scenarios": list_scenarios()}
        elif cmd == "set_scenario":
            return self._handle_set_scenario(message, msg_id)
        elif cmd == "set_light":
            return self._handle_set_temperature(message, msg_id, self.set_light_k)
        elif cmd == "set_wb":
            return self._handle_set_temperature(message, msg_id, self.set_wb_k)
        elif cmd == "auto_white":
            self.auto_white()
            return {"id": msg_id, "ok": True, **self.snapshot()}
        elif cmd == "compare_start":
            self.compare_start()
            return {"id": msg_id, "ok": True, **self.snapshot()}
        elif cmd == "compare_end":
            self.compare_end()
            return {"id": msg_id, "ok": True, **self.snapshot()}
        elif cmd == "kelvin":
            return self._handle_kelvin(message, msg_id)
        elif cmd == "render_frame":
            return self._handle_render_frame(message, msg_id)
        else:
            return {"id": msg_id, "ok": False, "error": f"unknown: {cmd}"}

    def _handle_set_scenario(self, message: dict, msg_id: str | None) -> dict:
        scenario_id = message.get("scenario")
        if not scenario_id:
            return {"id": msg_id, "ok": False, "error": "missing scenario"}
        try:
            self.set_scenario(scenario_id)
        except KeyError:
            logger.warning("Rejected unknown scenario %r", scenario_id)
            return {"id": msg_id, "ok": False, "error": f"unknown scenario: {scenario_id}"}
        return {"id": msg_id, "ok": True, **self.snapshot()}

    def _handle_set_temperature(self, message: dict, msg_id: str | None, setter) -> dict:
        value = message.get("kelvin")
        if value is None:
            return {"id": msg_id, "ok": False, "error": "missing kelvin"}
        try:
            setter(value)
        except (TypeError, ValueError, OverflowError) as e:
            logger.warning("Rejected temperature %r: %s", value, e)
            return {"id": msg_id, "ok": False, "error": f"invalid kelvin: {value!r}"}
        return {"id": msg_id, "ok": True, **self.snapshot()}

    def _handle_kelvin(self, message: dict, msg_id: str | None) -> dict:
        value = message.get("kelvin")
        if value is None:
            return {"id": msg_id, "ok": False, "error": "missing kelvin"}
        invalid = {"id": msg_id, "ok": False, "error": f"invalid kelvin: {value!r}"}
        if isinstance(value, bool):
            return invalid
        try:
            rgb = kelvin_to_rgb(to_float(value))
        except (TypeError, ValueError, OverflowError):
            return invalid
        return {"id": msg_id, "ok": True, **rgb}

    def _handle_render_frame(self, message: dict, msg_id: str | None) -> dict:
        try:
            width = int(message.get("width", DEFAULT_RESOLUTION[0]))
            height = int(message.get("height", DEFAULT_RESOLUTION[1]))
        except (TypeError, ValueError, OverflowError):
            return {"id": msg_id, "ok": False, "error": "invalid resolution"}

        errors = validate_resolution(width, height)
        if errors:
            return {"id": msg_id, "ok": False, "error": "; ".join(errors)}

        try:
            t0 = time.time()
            frame = self.render((width, height))
            frame_b64 = base64.b64encode(encode_png(frame)).decode("ascii")
            return {
                "id": msg_id,
                "ok": True,
                "frame_data": frame_b64,
                "width": width,
                "height": height,
                "render_ms": round((time.time() - t0) * 1000, 2),
            }
        except Exception as e:
            sentry_sdk.capture_exception(e)
            logger.error("Render frame handler error: %s", type(e).__name__)
            return {"id": msg_id, "ok": False, "error": "Internal processing error"}
