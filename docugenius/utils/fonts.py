"""Map CSS font families onto the standard PDF fonts bundled with reportlab."""

from __future__ import annotations

from typing import Optional

STANDARD_FONT_VARIANTS = {
    "Helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "Times-Roman": ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
    "Courier": ("Courier", "Courier-Bold", "Courier-Oblique", "Courier-BoldOblique"),
}

_SERIF_FAMILIES = {"times", "times new roman", "georgia", "garamond", "cambria", "serif", "book antiqua",
                   "palatino", "merriweather"}
_MONO_FAMILIES = {"courier", "courier new", "consolas", "monaco", "monospace", "menlo", "fira code",
                  "jetbrains mono", "source code pro"}


def base_font(family: Optional[str]) -> str:
    """Return the standard base font closest to ``family``."""
    normalized = (family or "").strip().strip("'\"").lower()
    if normalized in _MONO_FAMILIES or "mono" in normalized:
        return "Courier"
    if normalized in _SERIF_FAMILIES or (normalized.endswith("serif") and "sans" not in normalized):
        return "Times-Roman"
    return "Helvetica"


def resolve_font_variant(family: Optional[str], bold: bool = False, italic: bool = False) -> str:
    """
    Resolve a font family plus weight/style flags to a registered reportlab font.

    Args:
        family: CSS font family (first entry of the stack)
        bold: Bold flag
        italic: Italic flag

    Returns:
        Standard PDF font name such as ``Helvetica-BoldOblique``
    """
    regular, bold_name, italic_name, bold_italic = STANDARD_FONT_VARIANTS[base_font(family)]
    if bold and italic:
        return bold_italic
    if bold:
        return bold_name
    if italic:
        return italic_name
    return regular
