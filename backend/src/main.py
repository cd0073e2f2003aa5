"""CineColor Lab command line: query the color engine and render viewports.

Every command prints JSON to stdout.
"""

import argparse
import json
import os
import sys
from pathlib import Path

import sentry_sdk

from _version import __version__
from colorsci.kelvin import KELVIN_MAX, KELVIN_MIN, KELVIN_STEP, kelvin_to_rgb
from colorsci.white_balance import (
    subject_color,
    subject_rgba,
    virtual_kelvin,
    wb_filter_overlay,
    wb_filter_overlay_remap,
    wb_filter_rgba,
)
from diagnostics import init_diagnostics
from engine.encode import save_png
from lab.scenarios import SCENARIOS, list_scenarios
from lab.session import LabSession
from security import strip_pii, validate_resolution

CONSENT_PATH = "~/.cinecolor/telemetry_consent"


def init_telemetry():
    """Consent-gated Sentry init. Without consent the DSN stays empty (no-op)."""
    consent_path = os.path.expanduser(CONSENT_PATH)
    dsn = ""
    if os.path.exists(consent_path) and Path(consent_path).read_text().strip() == "yes":
        dsn = os.environ.get("SENTRY_DSN", "")

    sentry_sdk.init(
        dsn=dsn,
        release=f"cinecolor@{__version__}",
        environment=os.environ.get("SENTRY_ENV", "development"),
        traces_sample_rate=0.1,
        before_send=strip_pii,
        max_breadcrumbs=50,
    )


def cmd_kelvin(args) -> dict:
    return {"kelvin": args.kelvin, **kelvin_to_rgb(args.kelvin)}


def cmd_overlay(args) -> dict:
    if args.remap:
        return {"wb_k": args.wb, "variant": "remap", "color": wb_filter_overlay_remap(args.wb)}
    r, g, b, a = wb_filter_rgba(args.wb)
    return {
        "wb_k": args.wb,
        "variant": "anchor",
        "color": wb_filter_overlay(args.wb),
        "rgba": [r, g, b, a],
    }


def cmd_subject(args) -> dict:
    return {
        "light_k": args.light,
        "wb_k": args.wb,
        "virtual_k": virtual_kelvin(args.light, args.wb),
        "color": subject_color(args.light, args.wb, args.opacity),
        "rgba": list(subject_rgba(args.light, args.wb, args.opacity)),
    }


def cmd_table(args) -> dict:
    if args.step <= 0:
        raise ValueError("--step must be positive")
    rows = []
    k = args.start
    while k <= args.stop:
        rgb = kelvin_to_rgb(k)
        rows.append({"kelvin": k, **{c: round(v, 2) for c, v in rgb.items()}})
        k += args.step
    return {"rows": rows}


def cmd_scenarios(args) -> dict:
    return {"scenarios": list_scenarios()}


def cmd_render(args) -> dict:
    errors = validate_resolution(args.width, args.height)
    if errors:
        raise ValueError("; ".join(errors))

    session = LabSession(args.scenario)
    if args.light is not None:
        session.set_light_k(args.light)
    if args.wb is not None:
        session.set_wb_k(args.wb)
    if args.compare:
        session.compare_start()

    frame = session.render((args.width, args.height))
    path = save_png(frame, os.path.abspath(args.out))
    return {"path": path, **session.snapshot()}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cinecolor", description="Light temperature vs. white balance lab"
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--log-dir", default=None, help="Log directory (must be under ~/.cinecolor)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("kelvin", help="RGB approximation of a temperature")
    p.add_argument("kelvin", type=float)
    p.set_defaults(func=cmd_kelvin)

    p = sub.add_parser("overlay", help="White-balance overlay tint")
    p.add_argument("wb", type=float)
    p.add_argument("--remap", action="store_true", help="Historical remap variant")
    p.set_defaults(func=cmd_overlay)

    p = sub.add_parser("subject", help="Subject color under light + WB")
    p.add_argument("light", type=float)
    p.add_argument("wb", type=float)
    p.add_argument("--opacity", type=float, default=1.0)
    p.set_defaults(func=cmd_subject)

    p = sub.add_parser("table", help="Kelvin → RGB reference table")
    p.add_argument("--start", type=int, default=KELVIN_MIN)
    p.add_argument("--stop", type=int, default=KELVIN_MAX)
    p.add_argument("--step", type=int, default=KELVIN_STEP * 5)
    p.set_defaults(func=cmd_table)

    p = sub.add_parser("scenarios", help="List teaching scenarios")
    p.set_defaults(func=cmd_scenarios)

    p = sub.add_parser("render", help="Render a viewport frame to PNG")
    p.add_argument("--scenario", choices=sorted(SCENARIOS), default="sunset")
    p.add_argument("--light", type=float, default=None)
    p.add_argument("--wb", type=float, default=None)
    p.add_argument("--compare", action="store_true", help="Render scenario defaults")
    p.add_argument("--out", required=True, help="Output .png path")
    p.add_argument("--width", type=int, default=640)
    p.add_argument("--height", type=int, default=360)
    p.set_defaults(func=cmd_render)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    init_diagnostics(args.log_dir)
    init_telemetry()
    try:
        result = args.func(args)
    except (KeyError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
