"""PNG encoding/decoding for rendered viewport frames."""

import io
import logging
from pathlib import Path

import numpy as np
from PIL import Image

from security import validate_frame, validate_output_path

logger = logging.getLogger(__name__)


def encode_png(frame: np.ndarray) -> bytes:
    """Encode an RGBA frame to PNG bytes (lossless, alpha kept)."""
    img = Image.fromarray(frame)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def decode_png(data: bytes) -> np.ndarray:
    """Decode PNG bytes back to an RGBA numpy array."""
    img = Image.open(io.BytesIO(data)).convert("RGBA")
    return np.array(img)


def save_png(frame: np.ndarray, path: str) -> str:
    """Write a frame to disk. Raises ValueError if the frame or path fails validation."""
    errors = validate_frame(frame) + validate_output_path(path)
    if errors:
        raise ValueError("; ".join(errors))
    Path(path).write_bytes(encode_png(frame))
    logger.info("Saved frame %dx%d", frame.shape[1], frame.shape[0])
    return path
