"""Editor options for DocuGenius."""

from typing import Any, Dict, Mapping

from .exceptions import ConfigurationError


class EditorOptions:
    """Options shared by the pagination engine, the codecs and the session."""

    def __init__(
        self,
        page_width_mm: float = 210.0,
        page_height_mm: float = 297.0,
        default_margin_mm: float = 25.4,
        overflow_epsilon: float = 1.0,
        max_pagination_ticks: int = 10_000,
        default_font_family: str = "Inter",
        default_font_size_pt: float = 12.0,
        default_line_height: float = 1.2,
        image_fallback_extent_emu: tuple = (3_000_000, 2_000_000),
        max_image_width_px: int = 600,
    ):
        """
        Initialize editor options.

        Args:
            page_width_mm: Width of one page box
            page_height_mm: Height of one page box
            default_margin_mm: Margin used when settings carry none
            overflow_epsilon: Tolerance (layout units) before a page counts as overflowing
            max_pagination_ticks: Upper bound of scheduler ticks per drain
            default_font_family: Font written to the styles part and used for metrics
            default_font_size_pt: Base font size
            default_line_height: Unitless line-height used by the text metrics oracle
            image_fallback_extent_emu: Image size written when the data cannot be measured
            max_image_width_px: Widest image extent written on export
        """
        self.page_width_mm = page_width_mm
        self.page_height_mm = page_height_mm
        self.default_margin_mm = default_margin_mm
        self.overflow_epsilon = overflow_epsilon
        self.max_pagination_ticks = max_pagination_ticks
        self.default_font_family = default_font_family
        self.default_font_size_pt = default_font_size_pt
        self.default_line_height = default_line_height
        self.image_fallback_extent_emu = tuple(image_fallback_extent_emu)
        self.max_image_width_px = max_image_width_px
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError for sizes that cannot produce a page."""
        for name in ("page_width_mm", "page_height_mm", "default_font_size_pt",
                     "default_line_height", "max_image_width_px", "max_pagination_ticks"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"Option {name} must be positive", str(getattr(self, name)))
        if self.overflow_epsilon < 0:
            raise ConfigurationError("Option overflow_epsilon must not be negative")
        if 2 * self.default_margin_mm >= min(self.page_width_mm, self.page_height_mm):
            raise ConfigurationError("Default margins leave no room for content")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "EditorOptions":
        """
        Build options from a plain mapping (e.g. parsed JSON).

        Args:
            values: Option names and values

        Returns:
            EditorOptions instance

        Raises:
            ConfigurationError: On unknown option names
        """
        known = cls().to_dict()
        unknown = sorted(set(values) - set(known))
        if unknown:
            raise ConfigurationError("Unknown editor options", ", ".join(unknown))
        return cls(**dict(values))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_width_mm": self.page_width_mm,
            "page_height_mm": self.page_height_mm,
            "default_margin_mm": self.default_margin_mm,
            "overflow_epsilon": self.overflow_epsilon,
            "max_pagination_ticks": self.max_pagination_ticks,
            "default_font_family": self.default_font_family,
            "default_font_size_pt": self.default_font_size_pt,
            "default_line_height": self.default_line_height,
            "image_fallback_extent_emu": self.image_fallback_extent_emu,
            "max_image_width_px": self.max_image_width_px,
        }
