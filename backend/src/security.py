"""Security gates for rendered frames: output files, frame shape, PII scrubbing."""

import os
import re
import tempfile
from pathlib import Path

import numpy as np

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
PNG_EXTENSION = ".png"

# Frame size cap for CLI/session renders
MAX_RENDER_DIMENSION = 4096


def _allowed_roots() -> list[Path]:
    """Directories a frame may be written under: the user's home and the temp dir."""
    return [Path.home().resolve(), Path(tempfile.gettempdir()).resolve()]


def validate_output_path(path: str) -> list[str]:
    """Validate where a PNG frame is about to be written. Returns errors (empty = valid).

    The target must be an absolute `.png` path under the user's home or the
    temp directory, in an existing writable directory. An existing target is
    only overwritten when it is a regular file that already holds a PNG.
    """
    errors: list[str] = []
    p = Path(path)

    if not p.is_absolute():
        return ["Output path must be absolute"]

    if "\x00" in path:
        return ["Output path contains a NUL byte"]

    resolved = p.resolve()
    if not any(resolved.is_relative_to(root) for root in _allowed_roots()):
        return ["Output path must be within the home or temp directory"]

    if p.suffix.lower() != PNG_EXTENSION:
        errors.append(f"Output extension '{p.suffix.lower()}' not allowed, frames are PNG")

    parent = resolved.parent
    if not parent.is_dir():
        errors.append(f"Output directory does not exist: {p.parent}")
    elif not os.access(parent, os.W_OK):
        errors.append(f"Output directory is not writable: {p.parent}")

    if p.is_symlink():
        errors.append("Output path is a symlink")
    elif p.exists():
        if not p.is_file():
            errors.append(f"Output path is not a regular file: {p.name}")
        elif not _has_png_signature(p):
            errors.append(f"Refusing to overwrite non-PNG file: {p.name}")

    return errors


def _has_png_signature(p: Path) -> bool:
    with open(p, "rb") as f:
        return f.read(len(PNG_SIGNATURE)) == PNG_SIGNATURE


def validate_resolution(width: int, height: int) -> list[str]:
    """Validate render dimensions. Returns list of errors."""
    errors: list[str] = []
    for label, value in (("width", width), ("height", height)):
        if value < 1:
            errors.append(f"Render {label} must be positive, got {value}")
        elif value > MAX_RENDER_DIMENSION:
            errors.append(
                f"Render {label} {value} exceeds maximum {MAX_RENDER_DIMENSION}"
            )
    return errors


def validate_frame(frame: np.ndarray) -> list[str]:
    """Check a frame is an RGBA uint8 array (H, W, 4) within the render limits."""
    if not isinstance(frame, np.ndarray):
        return [f"Frame must be a numpy array, got {type(frame).__name__}"]
    if frame.dtype != np.uint8:
        return [f"Frame dtype must be uint8, got {frame.dtype}"]
    if frame.ndim != 3 or frame.shape[2] != 4:
        return [f"Frame must have shape (H, W, 4), got {frame.shape}"]
    height, width = frame.shape[:2]
    return validate_resolution(width, height)


# --- PII stripping for Sentry and crash dumps ---

_HOME = os.path.expanduser("~")
_PATH_PATTERN = re.compile(r"/Users/[^/\s]+|/home/[^/\s]+|C:\\Users\\[^\\\s]+")
_SENSITIVE_KEYS = ("token", "auth", "key", "secret", "password", "dsn")


def _is_sensitive(key) -> bool:
    return isinstance(key, str) and any(s in key.lower() for s in _SENSITIVE_KEYS)


def _scrub(value):
    """Recursively redact home paths in strings and values under sensitive keys."""
    if isinstance(value, str):
        if _HOME and _HOME != os.sep:
            value = value.replace(_HOME, "<HOME>")
        return _PATH_PATTERN.sub("<REDACTED_PATH>", value)
    if isinstance(value, dict):
        return {
            k: "<REDACTED>" if _is_sensitive(k) else _scrub(v) for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_scrub(v) for v in value]
    return value


def strip_pii(event: dict, hint: dict) -> dict:
    """Sentry before_send hook. Also used to sanitize crash dumps."""
    return _scrub(event)
