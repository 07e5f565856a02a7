"""
Media module for DocuGenius.

Data URI decoding and image inspection shared by the codecs, the metrics
oracle and the PDF writer.
"""

from .images import (
    EXTENSION_MIMES,
    MIME_EXTENSIONS,
    EmbeddedImage,
    decode_data_uri,
    encode_data_uri,
    fit_pixel_size,
    image_pixel_size,
)

__all__ = [
    "EXTENSION_MIMES",
    "MIME_EXTENSIONS",
    "EmbeddedImage",
    "decode_data_uri",
    "encode_data_uri",
    "fit_pixel_size",
    "image_pixel_size",
]
