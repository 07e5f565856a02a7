"""Page-level settings owned by the document."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping

from ..exceptions import ConfigurationError

# Keys accepted from the editor UI (camelCase) mapped to attribute names.
_UI_KEYS = {
    "marginTop": "margin_top",
    "marginBottom": "margin_bottom",
    "marginLeft": "margin_left",
    "marginRight": "margin_right",
    "firstLineIndent": "first_line_indent",
    "hasHeader": "has_header",
    "hasFooter": "has_footer",
    "headerText": "header_markup",
    "footerText": "footer_markup",
}

SESSION_HEADER = "<p>Header content...</p>"
SESSION_FOOTER = '<p style="text-align: center;"><span class="page-number"><span>#</span></span></p>'


@dataclass(slots=True)
class PageSettings:
    """
    Margins, first-line indent and header/footer configuration.

    All lengths are millimetres. Header and footer content is stored as
    markup (a block sequence in serialized form).
    """

    margin_top: float = 25.4
    margin_bottom: float = 25.4
    margin_left: float = 25.4
    margin_right: float = 25.4
    first_line_indent: float = 0.0
    has_header: bool = True
    has_footer: bool = True
    header_markup: str = ""
    footer_markup: str = ""

    @classmethod
    def session_default(cls) -> "PageSettings":
        """Settings a fresh editing session starts with."""
        return cls(header_markup=SESSION_HEADER, footer_markup=SESSION_FOOTER)

    def updated(self, changes: Mapping[str, Any]) -> "PageSettings":
        """
        Return new settings with ``changes`` applied.

        Args:
            changes: Attribute names (or the editor's camelCase keys) and values

        Returns:
            Updated PageSettings

        Raises:
            ConfigurationError: On unknown keys or negative lengths
        """
        known = {f.name for f in fields(self)}
        normalized: Dict[str, Any] = {}
        for key, value in changes.items():
            name = _UI_KEYS.get(key, key)
            if name not in known:
                raise ConfigurationError("Unknown page setting", key)
            normalized[name] = value
        result = replace(self, **normalized)
        result.validate()
        return result

    def merged(self, other: "PageSettings") -> "PageSettings":
        """Return ``other`` layered over these settings (every field of ``other`` wins)."""
        return self.updated(other.to_dict())

    def validate(self) -> None:
        for name in ("margin_top", "margin_bottom", "margin_left", "margin_right"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value < 0:
                raise ConfigurationError(f"Margin {name} must be a non-negative length", str(value))

    def content_height(self, page_height_mm: float) -> float:
        return page_height_mm - self.margin_top - self.margin_bottom

    def content_width(self, page_width_mm: float) -> float:
        return page_width_mm - self.margin_left - self.margin_right

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "PageSettings":
        return cls().updated(values)
