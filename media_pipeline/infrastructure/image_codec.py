from __future__ import annotations

import io
from typing import Tuple

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from media_pipeline.errors import DecodeError


# Declared media types OpenCV can write, mapped to the suffix imencode expects.
_ENCODE_SUFFIXES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/bmp": ".bmp",
    "image/x-ms-bmp": ".bmp",
    "image/tiff": ".tiff",
    "image/webp": ".webp",
}

FALLBACK_MEDIA_TYPE = "image/png"


def decode_rgb(data: bytes, name: str = "<memory>") -> np.ndarray:
    """Decode encoded image bytes into an HxWx3 uint8 RGB array."""
    return cv2.cvtColor(decode_bgr(data, name), cv2.COLOR_BGR2RGB)


def decode_bgr(data: bytes, name: str = "<memory>") -> np.ndarray:
    """Decode encoded image bytes into an HxWx3 uint8 BGR array (OpenCV channel order)."""
    if not data:
        raise DecodeError(name, "empty buffer")
    buffer = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    except cv2.error as exc:
        raise DecodeError(name, str(exc)) from exc
    if image is not None:
        return image
    # OpenCV builds without GIF support return None; Pillow reads the first frame.
    return _decode_with_pillow(data, name)


def probe_size(data: bytes, name: str = "<memory>") -> Tuple[int, int]:
    """Return (width, height) after a one-shot decode."""
    image = decode_bgr(data, name)
    height, width = image.shape[:2]
    return int(width), int(height)


def encode_suffix(media_type: str) -> str | None:
    return _ENCODE_SUFFIXES.get((media_type or "").lower())


def encode(image_bgr: np.ndarray, media_type: str, name: str = "<memory>") -> Tuple[bytes, str]:
    """Encode a BGR array into *media_type*; returns (bytes, effective_media_type).

    Types OpenCV cannot write are encoded as PNG and reported as such.
    """
    suffix = encode_suffix(media_type)
    effective_type = media_type
    if suffix is None:
        suffix = ".png"
        effective_type = FALLBACK_MEDIA_TYPE
    ok, encoded = cv2.imencode(suffix, image_bgr)
    if not ok:
        raise DecodeError(name, f"could not encode as {effective_type}")
    return encoded.tobytes(), effective_type


def encode_png(image_bgr: np.ndarray, name: str = "<memory>") -> bytes:
    data, _ = encode(image_bgr, FALLBACK_MEDIA_TYPE, name)
    return data


def _decode_with_pillow(data: bytes, name: str) -> np.ndarray:
    try:
        with Image.open(io.BytesIO(data)) as img:
            rgb = np.asarray(img.convert("RGB"))
    except (UnidentifiedImageError, OSError) as exc:
        raise DecodeError(name, str(exc)) from exc
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
