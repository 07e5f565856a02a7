"""
Tests for unit and colour conversions.
"""

import pytest

from docugenius.utils.colors import highlight_name, rgb_to_hex, to_word_color
from docugenius.utils.units import (
    css_length_to_pt,
    format_number,
    line_height_to_spacing,
    mm_to_twips,
    parse_number,
    px_to_emu,
    spacing_to_line_height,
    twips_to_mm,
)


class TestUnits:
    """Test cases for length conversions."""

    def test_inch_margin_in_twips(self):
        """Test that a 25.4 mm margin is 1440 twips."""
        assert abs(mm_to_twips(25.4) - 1440) <= 1

    def test_twips_to_mm(self):
        """Test converting twips read from XML."""
        assert twips_to_mm("1440") == 25.4
        assert twips_to_mm(720) == pytest.approx(12.7)

    def test_twips_to_mm_default(self):
        """Test that absent or unparsable values fall back to the default."""
        assert twips_to_mm(None) == 25.4
        assert twips_to_mm("") == 25.4
        assert twips_to_mm("abc") == 25.4
        assert twips_to_mm(None, default=0.0) == 0.0

    def test_margin_round_trip(self):
        """Test mm -> twips -> mm within one decimal."""
        for value in (0.0, 10.0, 19.1, 25.4, 31.8):
            assert twips_to_mm(mm_to_twips(value)) == pytest.approx(value, abs=0.1)

    def test_a4_page_size(self):
        """Test the A4 page size in twips."""
        assert mm_to_twips(210) == 11906
        assert mm_to_twips(297) == 16838

    def test_line_spacing(self):
        """Test line-height multiplier conversions."""
        assert line_height_to_spacing(1.5) == 360
        assert line_height_to_spacing(1) == 240
        assert spacing_to_line_height(360) == 1.5

    def test_css_lengths(self):
        """Test parsing CSS lengths into points."""
        assert css_length_to_pt("12pt") == 12.0
        assert css_length_to_pt("16px") == 12.0
        assert css_length_to_pt("16") == 12.0
        assert css_length_to_pt("1in") == 72.0
        assert css_length_to_pt("25.4mm") == pytest.approx(72.0)
        assert css_length_to_pt("1.5em") is None
        assert css_length_to_pt(None) is None

    def test_non_finite_numbers_are_rejected(self):
        """Test that infinite, NaN and oversized values are not parsed."""
        assert parse_number("1.5") == 1.5
        assert parse_number("inf") is None
        assert parse_number("nan") is None
        assert parse_number("1e999") is None
        assert css_length_to_pt("9" * 400 + "pt") is None
        assert twips_to_mm("1e999") == twips_to_mm(None)

    def test_pixels_to_emu(self):
        """Test pixel to EMU conversion at 96 dpi."""
        assert px_to_emu(1) == 9525
        assert px_to_emu(96) == 914400

    def test_format_number(self):
        """Test number formatting without trailing zeros."""
        assert format_number(12.0) == "12"
        assert format_number(10.5) == "10.5"


class TestColors:
    """Test cases for colour helpers."""

    def test_rgb_to_hex(self):
        """Test CSS colour normalization."""
        assert rgb_to_hex("rgb(255, 0, 0)") == "#FF0000"
        assert rgb_to_hex("#abc") == "#AABBCC"
        assert rgb_to_hex("00ff00") == "#00FF00"

    def test_transparent_colors(self):
        """Test that transparent colours have no hex form."""
        assert rgb_to_hex("transparent") is None
        assert rgb_to_hex("rgba(10, 20, 30, 0)") is None
        assert rgb_to_hex(None) is None

    def test_highlight_name(self):
        """Test matching Word highlight names case-insensitively."""
        assert highlight_name("YELLOW") == "yellow"
        assert highlight_name("darkblue") == "darkBlue"
        assert highlight_name("#123456") is None

    def test_to_word_color(self):
        """Test conversion to the bare WordML colour form."""
        assert to_word_color("#ff0000") == "FF0000"
        assert to_word_color("rgb(0, 0, 255)") == "0000FF"
        assert to_word_color("darkBlue") == "000080"
        assert to_word_color("not-a-colour") is None
