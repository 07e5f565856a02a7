"""
Tests for the document model: styles, nodes, page settings and the document.
"""

import pytest

from docugenius.exceptions import ConfigurationError
from docugenius.models import (
    BlockStyle,
    Document,
    Node,
    NodeKind,
    PageSettings,
    RunStyle,
    parse_css,
    wrap_styled,
)


class TestStyles:
    """Test cases for run and block styles."""

    def test_parse_css(self):
        """Test parsing inline declarations."""
        result = parse_css("Color: red; font-size : 12pt;; broken")

        assert result == {"color": "red", "font-size": "12pt"}

    def test_run_style_from_css(self):
        """Test reading run attributes from CSS."""
        style = RunStyle.from_css(parse_css(
            "font-weight: 700; font-style: italic; text-decoration: underline; "
            "background-color: yellow; font-family: 'Times New Roman', serif"
        ))

        assert style.bold is True
        assert style.italic is True
        assert style.underline is True
        assert style.highlight == "yellow"
        assert style.font_family == "Times New Roman"

    def test_transparent_background_clears_highlight(self):
        """Test that a transparent background means no highlight."""
        assert RunStyle.from_css({"background-color": "transparent"}).highlight == "none"

    def test_merged_inner_wins(self):
        """Test that inner attributes override outer ones."""
        outer = RunStyle(bold=True, color="#FF0000")
        inner = RunStyle(color="#0000FF", italic=True)

        merged = outer.merged(inner)

        assert merged == RunStyle(bold=True, italic=True, color="#0000FF")

    def test_implied_flags_are_not_declared(self):
        """Test that flags expressed by the tag are left out of the style."""
        style = RunStyle(bold=True, color="#FF0000")

        assert style.css_declarations(implied=("bold",)) == [("color", "#FF0000")]

    def test_block_style_alignment(self):
        """Test alignment parsing and unknown values."""
        assert BlockStyle.from_css({"text-align": "JUSTIFY"}).align == "justify"
        assert BlockStyle.from_css({"text-align": "end"}).align == "right"
        assert BlockStyle.from_css({"text-align": "middle"}).align is None


class TestNodes:
    """Test cases for Node trees."""

    def test_effective_run_style(self):
        """Test that nested runs merge outermost first."""
        text = Node.text_node("x")
        outer = Node.run(Node.run(text, tag="b", style=RunStyle(bold=True)), style=RunStyle(color="#00FF00"))
        Node.paragraph(outer)

        assert text.effective_run_style() == RunStyle(bold=True, color="#00FF00")

    def test_top_block(self):
        """Test finding the top-level block of a leaf."""
        text = Node.text_node("x")
        paragraph = Node.paragraph(Node.run(text, tag="i", style=RunStyle(italic=True)))

        assert text.top_block() is paragraph
        assert paragraph.contains(text.node_id)

    def test_empty_placeholder(self):
        """Test recognising empty paragraphs."""
        assert Node.paragraph(Node.line_break()).is_empty_placeholder()
        assert not Node.paragraph(Node.text_node("a")).is_empty_placeholder()
        assert not Node.paragraph(Node.page_number()).is_empty_placeholder()
        assert not Node.heading(1).is_empty_placeholder()

    def test_placeholder_requires_no_text_and_single_break(self):
        """Test that whitespace text and repeated breaks are content, not placeholders."""
        assert Node.paragraph().is_empty_placeholder()
        assert not Node.paragraph(Node.text_node("   ")).is_empty_placeholder()
        assert not Node.paragraph(Node.line_break(), Node.line_break()).is_empty_placeholder()


    def test_wrap_styled_nesting(self):
        """Test that formatting nests as span > b > i > u."""
        text = Node.text_node("x")

        wrapped = wrap_styled(text, RunStyle(bold=True, italic=True, underline=True, color="#FF0000"))

        assert wrapped.tag == "span"
        assert wrapped.run_style == RunStyle(color="#FF0000")
        assert [wrapped.children[0].tag, wrapped.children[0].children[0].tag] == ["b", "i"]
        assert text.effective_run_style() == RunStyle(bold=True, italic=True, underline=True, color="#FF0000")

    def test_wrap_styled_without_style(self):
        """Test that an empty style leaves the node unwrapped."""
        text = Node.text_node("x")

        assert wrap_styled(text, RunStyle()) is text


class TestPageSettings:
    """Test cases for PageSettings."""

    def test_defaults(self):
        """Test default margins."""
        settings = PageSettings()

        assert settings.margin_top == 25.4
        assert settings.content_height(297.0) == pytest.approx(246.2)
        assert settings.content_width(210.0) == pytest.approx(159.2)

    def test_updated_with_editor_keys(self):
        """Test updates using the editor's camelCase keys."""
        settings = PageSettings().updated({"marginTop": 10, "hasHeader": False, "footerText": "<p>f</p>"})

        assert settings.margin_top == 10
        assert settings.has_header is False
        assert settings.footer_markup == "<p>f</p>"

    def test_updated_returns_new_instance(self):
        """Test that updates never mutate the original."""
        original = PageSettings()
        original.updated({"margin_left": 5})

        assert original.margin_left == 25.4

    def test_unknown_key(self):
        """Test that unknown keys are rejected."""
        with pytest.raises(ConfigurationError):
            PageSettings().updated({"gutter": 3})

    def test_negative_margin(self):
        """Test that negative margins are rejected."""
        with pytest.raises(ConfigurationError):
            PageSettings().updated({"marginBottom": -1})

    def test_merged(self):
        """Test layering settings."""
        merged = PageSettings.session_default().merged(PageSettings(margin_top=10.0))

        assert merged.margin_top == 10.0
        assert merged.header_markup == ""

    def test_dict_round_trip(self):
        """Test to_dict/from_dict."""
        settings = PageSettings(margin_left=12.5, first_line_indent=5.0)

        assert PageSettings.from_dict(settings.to_dict()) == settings


class TestDocument:
    """Test cases for Document."""

    def test_default_document(self):
        """Test the welcome document."""
        document = Document.default()

        assert document.blocks[0].kind is NodeKind.HEADING
        assert document.settings.has_header is True
        assert "page-number" in document.settings.footer_markup

    def test_character_count(self):
        """Test counting text characters."""
        document = Document.from_markup("<p>ab</p><p><b>c</b></p>")

        assert document.character_count() == 3
        assert len(document) == 2

    def test_word_count(self):
        """Test that words are counted per block and split at line breaks."""
        document = Document.from_markup(
            "<h1>Two words</h1><p>a<b>b</b> c<br/>d</p><ul><li>one</li></ul>"
            "<table><tr><td><p>x</p></td><td><p>y</p></td></tr></table><p>   </p>")

        assert document.word_count() == 2 + 3 + 1 + 2

    def test_find_and_images(self):
        """Test node lookup and image listing."""
        document = Document.from_markup('<p>x<img src="data:image/png;base64,AAAA"/></p>')
        image = document.images()[0]

        assert document.find(image.node_id) is image
        assert document.find("missing") is None
        assert document.to_markup() == '<p>x<img src="data:image/png;base64,AAAA"/></p>'
