"""
Style attribute sets for runs and blocks.

Runs carry a partial RunStyle: only the attributes set at that scope. The
effective style of a character is obtained by merging the styles of its
ancestors, innermost last.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Dict, List, Optional, Tuple

from ..utils.colors import highlight_name, rgb_to_hex

ALIGNMENTS = ("left", "center", "right", "justify")

# Fixed declaration orders keep serialization canonical.
RUN_CSS_ORDER = (
    "font-weight",
    "font-style",
    "text-decoration",
    "color",
    "background-color",
    "font-family",
    "font-size",
    "line-height",
)
BLOCK_CSS_ORDER = ("text-align", "line-height", "text-indent")


def parse_css(style: Optional[str]) -> Dict[str, str]:
    """
    Parse an inline ``style`` attribute into a property dictionary.

    Args:
        style: Declarations such as ``"color: red; font-size: 12pt"``

    Returns:
        Lower-cased property names mapped to stripped values
    """
    declarations: Dict[str, str] = {}
    if not style:
        return declarations
    for chunk in style.split(";"):
        if ":" not in chunk:
            continue
        name, value = chunk.split(":", 1)
        name = name.strip().lower()
        value = value.strip()
        if name and value:
            declarations[name] = value
    return declarations


def format_css(declarations: List[Tuple[str, str]]) -> str:
    return " ".join(f"{name}: {value};" for name, value in declarations)


def _normalize_color(value: str) -> str:
    return rgb_to_hex(value) or value


def _normalize_highlight(value: str) -> str:
    lowered = value.strip().lower()
    if lowered in ("none", "transparent", "rgba(0, 0, 0, 0)", "initial", "inherit"):
        return "none"
    named = highlight_name(value)
    if named:
        return named
    return rgb_to_hex(value) or value


def _primary_font(value: str) -> str:
    return value.split(",")[0].strip().strip("'\"")


@dataclass(slots=True)
class RunStyle:
    """Inline style attributes; None means "inherit from the enclosing scope"."""

    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    color: Optional[str] = None
    highlight: Optional[str] = None
    font_family: Optional[str] = None
    font_size: Optional[str] = None
    line_height: Optional[str] = None

    @classmethod
    def from_css(cls, declarations: Dict[str, str]) -> "RunStyle":
        style = cls()
        weight = declarations.get("font-weight")
        if weight:
            style.bold = weight == "bold" or (weight.isdigit() and int(weight) >= 600)
        if "font-style" in declarations:
            style.italic = declarations["font-style"] == "italic"
        if "text-decoration" in declarations:
            style.underline = "underline" in declarations["text-decoration"]
        if "color" in declarations:
            style.color = _normalize_color(declarations["color"])
        background = declarations.get("background-color") or declarations.get("background")
        if background:
            style.highlight = _normalize_highlight(background)
        if "font-family" in declarations:
            style.font_family = _primary_font(declarations["font-family"])
        if "font-size" in declarations:
            style.font_size = declarations["font-size"].replace(" ", "")
        if "line-height" in declarations:
            style.line_height = declarations["line-height"]
        return style

    def css_declarations(self, implied: Tuple[str, ...] = ()) -> List[Tuple[str, str]]:
        """
        Return CSS declarations for this style in canonical order.

        Args:
            implied: Flags ("bold", "italic", "underline") already expressed by the element tag

        Returns:
            List of (property, value) pairs
        """
        values: Dict[str, str] = {}
        if self.bold is not None and "bold" not in implied:
            values["font-weight"] = "bold" if self.bold else "normal"
        if self.italic is not None and "italic" not in implied:
            values["font-style"] = "italic" if self.italic else "normal"
        if self.underline is not None and "underline" not in implied:
            values["text-decoration"] = "underline" if self.underline else "none"
        if self.color:
            values["color"] = self.color
        if self.highlight:
            values["background-color"] = "transparent" if self.highlight == "none" else self.highlight
        if self.font_family:
            values["font-family"] = self.font_family
        if self.font_size:
            values["font-size"] = self.font_size
        if self.line_height:
            values["line-height"] = self.line_height
        return [(name, values[name]) for name in RUN_CSS_ORDER if name in values]

    def merged(self, inner: "RunStyle") -> "RunStyle":
        """Return a copy of this style overridden by every attribute set on ``inner``."""
        changes = {f.name: getattr(inner, f.name) for f in fields(inner) if getattr(inner, f.name) is not None}
        return replace(self, **changes)

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass(slots=True)
class BlockStyle:
    """Paragraph-level attributes."""

    align: Optional[str] = None
    line_height: Optional[str] = None
    text_indent: Optional[str] = None

    @classmethod
    def from_css(cls, declarations: Dict[str, str]) -> "BlockStyle":
        style = cls()
        align = declarations.get("text-align", "").lower()
        if align in ALIGNMENTS:
            style.align = align
        elif align in ("start",):
            style.align = "left"
        elif align in ("end",):
            style.align = "right"
        if "line-height" in declarations:
            style.line_height = declarations["line-height"]
        if "text-indent" in declarations:
            style.text_indent = declarations["text-indent"].replace(" ", "")
        return style

    def css_declarations(self) -> List[Tuple[str, str]]:
        values = {
            "text-align": self.align,
            "line-height": self.line_height,
            "text-indent": self.text_indent,
        }
        return [(name, values[name]) for name in BLOCK_CSS_ORDER if values[name]]

    def is_empty(self) -> bool:
        return not (self.align or self.line_height or self.text_indent)
