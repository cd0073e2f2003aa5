import faulthandler
import logging
import shutil
import sys
import uuid
from pathlib import Path

import numpy as np
import pytest

from lab.session import LabSession


def make_solid_frame(r: int, g: int, b: int, a: int = 255, size: int = 100) -> np.ndarray:
    """Create a solid color RGBA frame (size x size)."""
    return np.full((size, size, 4), [r, g, b, a], dtype=np.uint8)


@pytest.fixture
def solid_frame():
    """Factory fixture for solid RGBA frames."""
    return make_solid_frame


@pytest.fixture
def session():
    """Fresh lab session on the sunset scenario."""
    return LabSession()


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    """Point ~ at a temp directory so ~/.cinecolor writes stay sandboxed."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("APP_LOG_DIR", raising=False)
    return home


@pytest.fixture
def restore_diagnostics():
    """Undo root-logger handlers, excepthook and faulthandler set by a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    hook = sys.excepthook
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    sys.excepthook = hook
    faulthandler.disable()


@pytest.fixture
def home_tmp_path():
    """tmp_path equivalent under ~/ for tests that write rendered frames."""
    base = Path.home() / ".cache" / "cinecolor" / "test-tmp"
    base.mkdir(parents=True, exist_ok=True)
    d = base / f"test_{uuid.uuid4().hex[:8]}"
    d.mkdir()
    yield d
    shutil.rmtree(d, ignore_errors=True)
