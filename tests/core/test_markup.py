"""
Tests for the markup parser and serializer.

Covers the canonical form, list grouping, page breaks, page-number
placeholders, tables, images and tolerance for foreign markup.
"""

import pytest

from docugenius.markup import (
    PAGE_BREAK_MARKUP,
    PAGE_NUMBER_MARKUP,
    normalize_markup,
    parse_markup,
    serialize_nodes,
)
from docugenius.models import NodeKind


class TestParseMarkup:
    """Test cases for parse_markup."""

    def test_paragraph_with_bold_run(self):
        """Test parsing a paragraph with a bold run."""
        blocks = parse_markup("<p>Hello <b>World</b></p>")

        assert len(blocks) == 1
        paragraph = blocks[0]
        assert paragraph.kind is NodeKind.PARAGRAPH
        assert paragraph.text_content() == "Hello World"
        run = paragraph.children[1]
        assert run.kind is NodeKind.RUN
        assert run.tag == "b"
        assert run.run_style.bold is True

    def test_blocks_are_detached(self):
        """Test that top-level blocks have no parent."""
        blocks = parse_markup("<p>a</p><h2>b</h2>")

        assert [block.kind for block in blocks] == [NodeKind.PARAGRAPH, NodeKind.HEADING]
        assert all(block.parent is None for block in blocks)
        assert blocks[1].level == 2

    def test_list_items_carry_list_type(self):
        """Test that list items remember ordered/unordered."""
        blocks = parse_markup("<ul><li>a</li><li>b</li></ul><ol><li>c</li></ol>")

        assert [block.kind for block in blocks] == [NodeKind.LIST_ITEM] * 3
        assert [block.ordered for block in blocks] == [False, False, True]

    def test_page_break(self):
        """Test parsing the page-break marker."""
        blocks = parse_markup(f"<p>a</p>{PAGE_BREAK_MARKUP}<p>b</p>")

        assert [block.kind for block in blocks] == [
            NodeKind.PARAGRAPH, NodeKind.PAGE_BREAK, NodeKind.PARAGRAPH,
        ]

    def test_hr_without_class_is_dropped(self):
        """Test that a plain rule is not a page break."""
        blocks = parse_markup("<p>a</p><hr/><p>b</p>")

        assert all(block.kind is NodeKind.PARAGRAPH for block in blocks)

    def test_page_number_inside_paragraph(self):
        """Test that the page-number placeholder is one atomic node."""
        blocks = parse_markup(f"<p>Page {PAGE_NUMBER_MARKUP}</p>")

        kinds = [child.kind for child in blocks[0].children]
        assert kinds == [NodeKind.TEXT, NodeKind.PAGE_NUMBER]
        assert blocks[0].children[1].children == []

    def test_stray_text_is_wrapped(self):
        """Test that text outside any block gets a paragraph."""
        blocks = parse_markup("hello <b>there</b>")

        assert len(blocks) == 1
        assert blocks[0].kind is NodeKind.PARAGRAPH
        assert blocks[0].text_content() == "hello there"

    def test_whitespace_between_inline_runs_is_kept(self):
        """Test that a space between stray inline runs stays in their paragraph."""
        assert serialize_nodes(parse_markup("<b>a</b> <i>b</i>")) == "<p><b>a</b> <i>b</i></p>"
        assert serialize_nodes(parse_markup("<p>a</p> <p>b</p>")) == "<p>a</p><p>b</p>"

    def test_unknown_tags_are_transparent(self):
        """Test that unknown elements keep their content."""
        blocks = parse_markup("<div><p><custom>kept</custom></p></div>")

        assert len(blocks) == 1
        assert blocks[0].text_content() == "kept"

    def test_script_content_is_skipped(self):
        """Test that script bodies never become text."""
        blocks = parse_markup("<p>a</p><script>var x = 1;</script>")

        assert len(blocks) == 1
        assert blocks[0].text_content() == "a"

    def test_table_structure(self):
        """Test parsing a table with a header row."""
        blocks = parse_markup("<table><tbody><tr><th>H</th></tr><tr><td><p>x</p></td></tr></tbody></table>")

        table = blocks[0]
        assert table.kind is NodeKind.TABLE
        assert len(table.children) == 2
        header_cell = table.children[0].children[0]
        assert header_cell.header is True
        assert header_cell.children[0].kind is NodeKind.PARAGRAPH
        assert table.children[1].children[0].text_content() == "x"

    def test_image_attributes(self):
        """Test that image attributes are kept."""
        blocks = parse_markup('<img src="data:image/png;base64,AAAA" alt="logo" width="10" height="5"/>')

        image = blocks[0]
        assert image.kind is NodeKind.IMAGE
        assert image.attrs == {"src": "data:image/png;base64,AAAA", "alt": "logo", "width": "10", "height": "5"}

    def test_image_without_src_is_skipped(self):
        """Test that an image without a source is dropped."""
        assert parse_markup("<p><img alt='x'/></p>")[0].children == []

    def test_empty_input(self):
        """Test parsing empty input."""
        assert parse_markup("") == []
        assert parse_markup(None) == []

    def test_node_ids_are_unique(self):
        """Test that every node gets its own id."""
        blocks = parse_markup("<p>a <b>b</b></p><p>c</p>")
        ids = [node.node_id for block in blocks for node in block.walk()]

        assert len(ids) == len(set(ids))


class TestSerializeMarkup:
    """Test cases for the canonical serialization."""

    @pytest.mark.parametrize("markup", [
        "<p>Hello <b>World</b></p>",
        "<h1>Title</h1><p>Body</p>",
        "<ul><li>a</li><li>b</li></ul><ol><li>c</li></ol>",
        f"<p>a</p>{PAGE_BREAK_MARKUP}<p>b</p>",
        f"<p>{PAGE_NUMBER_MARKUP}</p>",
        PAGE_NUMBER_MARKUP,
        '<p style="text-align: center;">centred</p>',
        '<p><span style="color: #FF0000; font-size: 12pt;">x</span></p>',
        "<p>line<br/>break</p>",
        "<table><tr><th><p>H</p></th></tr><tr><td><p>x</p></td></tr></table>",
        "<p>a &amp; b &lt; c</p>",
    ])
    def test_canonical_markup_is_stable(self, markup):
        """Test that canonical markup serializes back unchanged."""
        assert normalize_markup(markup) == markup

    def test_normalization_is_idempotent(self):
        """Test that normalizing twice changes nothing."""
        messy = (
            '<div><p style="TEXT-ALIGN:justify;">a<strong>b</strong><em>c</em></p>stray'
            '<ul><li>one<li>two</ul><font color="red">f</font></div>'
        )
        once = normalize_markup(messy)

        assert normalize_markup(once) == once

    def test_strong_and_em_become_b_and_i(self):
        """Test that tag aliases are canonicalized."""
        assert normalize_markup("<p><strong>a</strong><em>b</em></p>") == "<p><b>a</b><i>b</i></p>"

    def test_span_declarations_are_ordered(self):
        """Test that run declarations are written in a fixed order."""
        result = normalize_markup('<p><span style="font-size: 12pt; color: rgb(255, 0, 0)">x</span></p>')

        assert result == '<p><span style="color: #FF0000; font-size: 12pt;">x</span></p>'

    def test_empty_span_is_dropped(self):
        """Test that a span without style leaves only its content."""
        assert normalize_markup("<p><span>x</span></p>") == "<p>x</p>"

    def test_whitespace_between_blocks_is_dropped(self):
        """Test that formatting whitespace between blocks is not content."""
        assert normalize_markup("<p>a</p>\n    <p>b</p>\n") == "<p>a</p><p>b</p>"

    def test_list_split_across_sequences_is_regrouped(self):
        """Test that consecutive items serialize inside one list."""
        first = parse_markup("<ul><li>a</li></ul>")
        second = parse_markup("<ul><li>b</li></ul>")

        assert serialize_nodes(first + second) == "<ul><li>a</li><li>b</li></ul>"
