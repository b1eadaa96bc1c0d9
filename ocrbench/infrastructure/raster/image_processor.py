"""Image processing helpers for raster buffers.

Buffers are ``uint8`` numpy arrays in OpenCV's BGR channel order.
"""
from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Optional, Tuple

import cv2
import numpy as np

from ocrbench.constants import PAYLOAD_MIME
from ocrbench.domain.exceptions import RenderError
from ocrbench.domain.value_objects.bounding_box import BoundingBox

logger = logging.getLogger(__name__)

_DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


def decode_image(data: bytes) -> np.ndarray:
    """Decode encoded image bytes (PNG, JPEG, WEBP, ...) into a BGR buffer."""

    if not data:
        raise RenderError()
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        logger.warning("Unable to decode image payload of %s bytes", len(data))
        raise RenderError()
    return image


def ensure_bgr(pixels: np.ndarray) -> np.ndarray:
    """Coerce grayscale or alpha buffers into three-channel BGR."""

    if pixels.ndim == 2:
        return cv2.cvtColor(pixels, cv2.COLOR_GRAY2BGR)
    channels = pixels.shape[2]
    if channels == 1:
        return cv2.cvtColor(pixels, cv2.COLOR_GRAY2BGR)
    if channels == 4:
        return cv2.cvtColor(pixels, cv2.COLOR_BGRA2BGR)
    return pixels


def scale_image(pixels: np.ndarray, zoom: int) -> np.ndarray:
    """Resize ``pixels`` to ``zoom`` percent of its native size."""

    if zoom == 100:
        return pixels
    height, width = pixels.shape[:2]
    new_width = max(1, int(round(width * zoom / 100.0)))
    new_height = max(1, int(round(height * zoom / 100.0)))
    interpolation = cv2.INTER_AREA if zoom < 100 else cv2.INTER_LINEAR
    return cv2.resize(pixels, (new_width, new_height), interpolation=interpolation)


def encode_png(pixels: np.ndarray) -> bytes:
    """Encode a buffer losslessly as PNG."""

    ok, encoded = cv2.imencode(".png", pixels)
    if not ok:
        raise ValueError("PNG encoding failed")
    return encoded.tobytes()


def encode_base64(pixels: np.ndarray) -> str:
    """Encode a buffer as base64 PNG, the payload format for the AI service."""

    return base64.b64encode(encode_png(pixels)).decode("utf-8")


def to_data_url(payload: str, mime_type: str = PAYLOAD_MIME) -> str:
    return f"data:{mime_type};base64,{payload}"


def split_data_url(data_url: str) -> Tuple[str, str]:
    """Return ``(mime_type, base64_payload)`` for a data URL."""

    match = _DATA_URL_PATTERN.match(data_url.strip())
    if match is None:
        raise ValueError("Not a base64 data URL")
    return match.group("mime"), match.group("data")


def decode_base64(payload: str) -> Optional[bytes]:
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None


def crop_percent(pixels: np.ndarray, box: BoundingBox) -> Optional[np.ndarray]:
    """Cut the region described by a percentage box out of ``pixels``.

    The box is clipped to the buffer; ``None`` is returned when nothing of it
    remains inside.
    """

    height, width = pixels.shape[:2]
    x, y, box_width, box_height = box.to_absolute(width, height)
    x0 = max(0, min(width, x))
    y0 = max(0, min(height, y))
    x1 = max(x0, min(width, x + box_width))
    y1 = max(y0, min(height, y + box_height))
    if x1 == x0 or y1 == y0:
        return None
    return pixels[y0:y1, x0:x1].copy()
