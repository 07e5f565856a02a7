"""Unit conversion helpers for WordprocessingML and CSS measurements."""

from __future__ import annotations

import math
import re
from typing import Any, Optional, Union

TWIPS_PER_MM = 56.6929
TWIPS_PER_POINT = 20
EMU_PER_INCH = 914400
EMU_PER_PIXEL = EMU_PER_INCH // 96
PT_PER_PX = 0.75
MM_PER_PT = 25.4 / 72
LINE_SPACING_UNIT = 240  # w:line value for single spacing with lineRule="auto"

DEFAULT_MARGIN_MM = 25.4
# Largest magnitude accepted from markup or package attributes.
MAX_MEASURE = 1e6

_CSS_LENGTH_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(px|pt|mm|cm|in)?\s*$", re.IGNORECASE)


def parse_number(value: Any) -> Optional[float]:
    """Parse a finite number no larger than ``MAX_MEASURE``; anything else gives None."""
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or abs(number) > MAX_MEASURE:
        return None
    return number


def mm_to_twips(value: float) -> int:
    """Convert millimetres to twips (1/20th of a point)."""
    return int(round(value * TWIPS_PER_MM))


def twips_to_mm(value: Union[str, int, None], default: float = DEFAULT_MARGIN_MM) -> float:
    """
    Convert a twips attribute value to millimetres rounded to one decimal.

    Args:
        value: Raw attribute value (string as read from XML, or an int)
        default: Value returned when the attribute is absent or unparsable

    Returns:
        Millimetres
    """
    if value is None or value == "":
        return default
    number = parse_number(value)
    if number is None:
        return default
    number = int(number)
    return round(number / TWIPS_PER_MM, 1)


def pt_to_half_points(value: float) -> int:
    """Convert points to the half-point unit used by w:sz."""
    return int(round(value * 2))


def half_points_to_pt(value: int) -> float:
    """Convert w:sz half points to points."""
    return value / 2


def px_to_emu(value: float) -> int:
    return int(round(value * EMU_PER_PIXEL))


def emu_to_px(value: int) -> int:
    return int(round(value / EMU_PER_PIXEL))


def px_to_mm(value: float) -> float:
    return value * PT_PER_PX * MM_PER_PT


def pt_to_mm(value: float) -> float:
    return value * MM_PER_PT


def line_height_to_spacing(multiplier: float) -> int:
    """Convert a unitless CSS line-height to a w:spacing/@w:line value."""
    return int(round(multiplier * LINE_SPACING_UNIT))


def spacing_to_line_height(value: int) -> float:
    """Convert a w:spacing/@w:line value (lineRule auto) to a CSS multiplier."""
    return round(value / LINE_SPACING_UNIT, 2)


def css_length_to_pt(value: Optional[str]) -> Optional[float]:
    """
    Parse a CSS length into points.

    Unitless numbers are treated as pixels, which is what browsers assume for
    font sizes written without a unit.

    Args:
        value: CSS length such as ``"12pt"``, ``"16px"`` or ``"4mm"``

    Returns:
        Points, or None when the value is not an absolute length
    """
    if not value:
        return None
    match = _CSS_LENGTH_RE.match(value)
    if not match:
        return None
    number = parse_number(match.group(1))
    if number is None:
        return None
    unit = (match.group(2) or "px").lower()
    if unit == "pt":
        return number
    if unit == "px":
        return number * PT_PER_PX
    if unit == "mm":
        return number / MM_PER_PT
    if unit == "cm":
        return number * 10 / MM_PER_PT
    return number * 72


def format_number(value: float) -> str:
    """Format a float without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
