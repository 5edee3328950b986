"""Utility helpers for data-URI images."""

from __future__ import annotations

import base64
import binascii
import io
import re
from typing import Tuple

from PIL import Image

_DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<payload>.*)$", re.DOTALL)


def decode_data_uri(url: str) -> bytes:
    """Return the binary payload of a base64 data URI."""
    match = _DATA_URI_PATTERN.match(url or "")
    if match is None:
        raise ValueError("Not a base64 data URI")
    try:
        return base64.b64decode(match.group("payload"), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc


def load_image(url: str) -> Image.Image:
    """Open a data-URI image with Pillow."""
    image = Image.open(io.BytesIO(decode_data_uri(url)))
    image.load()
    return image


def generate_thumbnail(image: Image.Image, max_size: Tuple[int, int] = (256, 256)) -> Image.Image:
    """Create a thumbnail suitable for history previews."""
    thumbnail = image.copy()
    thumbnail.thumbnail(max_size)
    return thumbnail


def cover_filename(title: str, suffix: str = "_cover.png") -> str:
    """Turn a book title into a download filename."""
    stem = re.sub(r"\s+", "_", title.strip()) or "untitled"
    # Keep path separators out of the filename.
    stem = stem.replace("/", "_").replace("\\", "_")
    return f"{stem}{suffix}"
