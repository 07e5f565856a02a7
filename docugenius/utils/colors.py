"""Colour helpers shared by the markup model and the codecs."""

from __future__ import annotations

import re
from typing import Dict, Optional

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")
_DIGITS_RE = re.compile(r"\d+(?:\.\d+)?")

# Colours accepted by w:highlight, with their RGB values.
HIGHLIGHT_COLORS: Dict[str, str] = {
    "black": "#000000",
    "blue": "#0000FF",
    "cyan": "#00FFFF",
    "green": "#00FF00",
    "magenta": "#FF00FF",
    "red": "#FF0000",
    "yellow": "#FFFF00",
    "white": "#FFFFFF",
    "darkBlue": "#000080",
    "darkCyan": "#008080",
    "darkGreen": "#008000",
    "darkMagenta": "#800080",
    "darkRed": "#800000",
    "darkYellow": "#808000",
    "darkGray": "#808080",
    "lightGray": "#C0C0C0",
}


def rgb_to_hex(value: Optional[str]) -> Optional[str]:
    """
    Convert a CSS colour (hex, rgb or rgba) to upper-case ``#RRGGBB``.

    Args:
        value: CSS colour string

    Returns:
        Hex colour, or None for invalid or transparent colours
    """
    if not value:
        return None
    value = value.strip()
    if value in ("transparent", "rgba(0, 0, 0, 0)"):
        return None
    match = _HEX_RE.match(value)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return f"#{digits.upper()}"
    if not value.lower().startswith("rgb"):
        return None
    digits = _DIGITS_RE.findall(value)
    if len(digits) < 3:
        return None
    if len(digits) > 3 and float(digits[3]) == 0:
        return None
    r, g, b = (min(255, int(float(d))) for d in digits[:3])
    return f"#{r:02X}{g:02X}{b:02X}"


def highlight_name(value: Optional[str]) -> Optional[str]:
    """Return the w:highlight name for a colour, if Word knows it by name."""
    if not value:
        return None
    for name in HIGHLIGHT_COLORS:
        if name.lower() == value.strip().lower():
            return name
    return None


def to_word_color(value: Optional[str]) -> Optional[str]:
    """Convert a CSS colour to the bare ``RRGGBB`` form used in WordML attributes."""
    hex_value = rgb_to_hex(value)
    if hex_value is None:
        named = highlight_name(value)
        if named is None:
            return None
        hex_value = HIGHLIGHT_COLORS[named]
    return hex_value[1:]
