"""
Utils module for DocuGenius.

Logging setup, unit conversions and colour helpers.
"""

from .logger import get_logger, configure_logging, set_log_level
from .colors import rgb_to_hex, highlight_name, to_word_color
from .units import mm_to_twips, twips_to_mm

__all__ = [
    "get_logger",
    "configure_logging",
    "set_log_level",
    "rgb_to_hex",
    "highlight_name",
    "to_word_color",
    "mm_to_twips",
    "twips_to_mm",
]
