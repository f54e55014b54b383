"""Utility helpers for moving images between base64, bytes and PIL."""

from __future__ import annotations

import base64
import binascii
import io
from typing import Tuple

from PIL import Image

_DATA_URL_PREFIX = "data:"


def strip_data_url(value: str) -> str:
    """Return the base64 payload of a ``data:`` URL, or the value unchanged."""
    if value.startswith(_DATA_URL_PREFIX) and "," in value:
        return value.split(",", 1)[1]
    return value


def image_bytes(image_base64: str) -> bytes:
    """Decode a base64 payload (or data URL) into raw bytes."""
    try:
        return base64.b64decode(strip_data_url(image_base64), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Invalid base64 image data") from exc


def decode_image(image_base64: str) -> Image.Image:
    """Open a base64 payload as a PIL image."""
    image = Image.open(io.BytesIO(image_bytes(image_base64)))
    image.load()
    return image


def generate_thumbnail(image: Image.Image, max_size: Tuple[int, int] = (256, 256)) -> Image.Image:
    """Create a thumbnail suitable for history previews."""
    thumb = image.copy()
    thumb.thumbnail(max_size)
    return thumb


def placeholder_image(size: Tuple[int, int] = (256, 256)) -> Image.Image:
    """Blank tile shown for history entries without any image."""
    return Image.new("RGB", size, "white")
