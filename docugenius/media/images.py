"""
Embedded image handling.

Images travel through the markup as base64 data URIs. This module decodes
them into binary payloads, inspects them with Pillow and encodes package
media back into data URIs.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from ..exceptions import UnsupportedEmbed

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(?:;[^;,]*)*),(?P<data>.*)$", re.DOTALL)

MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/gif": "gif",
    "image/bmp": "bmp",
    "image/webp": "webp",
    "image/tiff": "tiff",
    "image/x-emf": "emf",
    "image/x-wmf": "wmf",
    "image/svg+xml": "svg",
}

EXTENSION_MIMES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "bmp": "image/bmp",
    "webp": "image/webp",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    "emf": "image/x-emf",
    "wmf": "image/x-wmf",
    "svg": "image/svg+xml",
}


@dataclass(slots=True)
class EmbeddedImage:
    """Decoded image payload."""

    data: bytes
    mime_type: str
    extension: str

    def pixel_size(self) -> Optional[Tuple[int, int]]:
        """Return (width, height) in pixels, or None when Pillow cannot read the data."""
        return image_pixel_size(self.data)


def decode_data_uri(uri: str) -> EmbeddedImage:
    """
    Decode a base64 image data URI.

    Args:
        uri: Value of an ``<img src>`` attribute

    Returns:
        EmbeddedImage with the binary payload

    Raises:
        UnsupportedEmbed: If the URI is not a base64 image data URI
    """
    match = _DATA_URI_RE.match(uri.strip()) if uri else None
    if not match:
        raise UnsupportedEmbed("Image source is not a data URI", (uri or "")[:40])
    mime_type = (match.group("mime") or "").lower()
    if not mime_type.startswith("image/"):
        raise UnsupportedEmbed("Data URI is not an image", mime_type or "no media type")
    if ";base64" not in match.group("params").lower():
        raise UnsupportedEmbed("Only base64 data URIs are supported", mime_type)
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise UnsupportedEmbed("Invalid base64 payload", str(exc)) from exc
    if not data:
        raise UnsupportedEmbed("Empty image payload", mime_type)
    extension = MIME_EXTENSIONS.get(mime_type, mime_type.split("/")[-1].split("+")[0])
    return EmbeddedImage(data=data, mime_type=mime_type, extension=extension)


def encode_data_uri(data: bytes, extension_or_mime: str) -> str:
    """Encode binary image data as a data URI."""
    if "/" in extension_or_mime:
        mime_type = extension_or_mime
    else:
        mime_type = EXTENSION_MIMES.get(extension_or_mime.lower().lstrip("."), "image/png")
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def image_pixel_size(data: bytes) -> Optional[Tuple[int, int]]:
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.debug(f"Cannot read image size: {exc}")
        return None


def fit_pixel_size(width: float, height: float, max_width: float) -> Tuple[float, float]:
    """Scale (width, height) down proportionally so that width does not exceed ``max_width``."""
    if width <= max_width or width <= 0:
        return width, height
    ratio = max_width / width
    return max_width, height * ratio
