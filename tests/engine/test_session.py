"""
Tests for EditingSession.
"""

import pytest

from docugenius import EditingSession
from docugenius.exceptions import ConfigurationError, LayoutError, MalformedPackage
from docugenius.models import Node, PageSettings
from docugenius.pagination import Selection, StaticHeightOracle, TextMetricsOracle


FIVE_PARAGRAPHS = "".join(f"<p>paragraph {index}</p>" for index in range(5))


@pytest.fixture
def oracle():
    """Every block is 40 units tall in a 100 unit box: two blocks per page."""
    return StaticHeightOracle(box_height=100.0, default_height=40.0)


@pytest.fixture
def session(oracle):
    return EditingSession(FIVE_PARAGRAPHS, oracle=oracle)


class TestEditingSession:
    """Test cases for EditingSession."""

    def test_default_session(self):
        """Test that a fresh session shows the welcome document on one page."""
        session = EditingSession()

        assert session.page_count == 1
        assert session.get_current_markup().startswith("<h1>Welcome to DocuGenius</h1>")
        assert session.settings.header_markup
        assert isinstance(session.oracle, TextMetricsOracle)

    def test_initial_pagination(self, session):
        """Test that initial content is distributed over pages."""
        assert session.page_count == 3
        assert [len(page.nodes) for page in session.layout] == [2, 2, 1]
        assert session.page_requests == [("create", 0), ("create", 1)]
        assert session.last_emitted == FIVE_PARAGRAPHS

    def test_markup_is_unchanged_by_pagination(self, session):
        """Test that page boundaries do not alter the document markup."""
        assert session.get_current_markup() == FIVE_PARAGRAPHS
        assert session.document.to_markup() == FIVE_PARAGRAPHS

    def test_insert_block_repaginates(self, session):
        """Test that inserting a block pushes content forward."""
        markup = session.insert_block(0, Node.paragraph(Node.text_node("new")), position=0)

        assert markup is not None
        assert markup.startswith("<p>new</p><p>paragraph 0</p>")
        assert session.page_count == 3
        assert [len(page.nodes) for page in session.layout] == [2, 2, 2]

    def test_remove_all_blocks_leaves_one_page(self, session):
        """Test that removing everything collapses to a single page."""
        for block in list(session.layout.blocks()):
            session.remove_block(block.node_id)

        assert session.page_count == 1
        assert session.get_current_markup() == ""

    def test_remove_unknown_block(self, session):
        """Test removing a block no page hosts."""
        with pytest.raises(LayoutError):
            session.remove_block("missing")

    def test_selection_is_clamped(self, session):
        """Test that a caret offset past the node's text is clamped."""
        text = session.layout[0].nodes[0].children[0]

        session.set_selection(Selection(text.node_id, 99))

        assert session.get_selection() == Selection(text.node_id, len("paragraph 0"))

    def test_selection_on_unknown_node_is_cleared(self, session):
        """Test that an anchor outside the document clears the selection."""
        session.set_selection(Selection("missing", 1))

        assert session.get_selection() is None

    def test_selection_survives_page_move(self, session):
        """Test that the caret anchor stays valid when its block changes page."""
        moved = session.layout[1].nodes[1]
        session.set_selection(Selection(moved.children[0].node_id, 4))

        session.insert_block(0, Node.paragraph(Node.text_node("new")), position=0)

        assert session.layout.page_index_of(moved.node_id) == 2
        assert session.get_selection() == Selection(moved.children[0].node_id, 4)

    def test_replace_content(self, session):
        """Test replacing the whole document."""
        session.set_selection(Selection(session.layout[0].nodes[0].node_id))

        session.replace_content("<h1>Only</h1>")

        assert session.page_count == 1
        assert session.get_current_markup() == "<h1>Only</h1>"
        assert session.get_selection() is None

    def test_character_count(self, session):
        """Test the status bar character count."""
        assert session.character_count() == 5 * len("paragraph 0")

    def test_word_count(self, session):
        """Test the status bar word count."""
        assert session.word_count() == 10

        session.replace_content("<p>one two three</p>")

        assert session.word_count() == 3

    def test_manual_pagination(self, oracle):
        """Test draining pagination explicitly."""
        session = EditingSession(FIVE_PARAGRAPHS, oracle=oracle, auto_paginate=False)

        assert session.page_count == 1
        session.paginate()
        assert session.page_count == 3


class TestSessionSettings:
    """Test cases for settings updates."""

    def test_apply_mapping_update(self):
        """Test applying editor keys."""
        session = EditingSession("<p>x</p>")

        settings = session.apply_settings_update({"marginTop": 10, "hasFooter": False})

        assert settings.margin_top == 10
        assert session.settings.has_footer is False
        assert session.oracle.settings is settings

    def test_apply_settings_object(self):
        """Test replacing settings wholesale."""
        session = EditingSession("<p>x</p>")
        replacement = PageSettings(margin_left=5.0)

        session.apply_settings_update(replacement)

        assert session.settings is replacement

    def test_invalid_update_keeps_settings(self):
        """Test that a rejected update changes nothing."""
        session = EditingSession("<p>x</p>")
        before = session.settings

        with pytest.raises(ConfigurationError):
            session.apply_settings_update({"marginLeft": -3})

        assert session.settings is before

    def test_larger_margins_add_pages(self):
        """Test that shrinking the content box repaginates."""
        markup = "".join(f"<p>{'word ' * 80}</p>" for _ in range(12))
        session = EditingSession(markup)
        pages = session.page_count

        session.apply_settings_update({"marginTop": 80, "marginBottom": 80})

        assert session.page_count > pages
        assert session.get_current_markup() == markup


class TestSessionCodecs:
    """Test cases for import and export through the session."""

    def test_import_failure_leaves_state_untouched(self, session):
        """Test that a malformed package does not alter the document."""
        before = session.get_current_markup()
        settings = session.settings

        with pytest.raises(MalformedPackage):
            session.import_docx(b"not a zip")

        assert session.get_current_markup() == before
        assert session.settings is settings
        assert session.page_count == 3

    def test_docx_round_trip(self):
        """Test exporting and re-importing through a session."""
        session = EditingSession("<p>Hello <b>World</b></p>")
        data = session.export_docx()

        other = EditingSession("<p>old</p>")
        markup = other.import_docx(data)

        assert markup == "<p>Hello <b>World</b></p>"

    def test_docx_import_keeps_header_content(self):
        """Test that importing keeps the current header and footer markup."""
        session = EditingSession("<p>x</p>")
        session.apply_settings_update({"headerText": "<p>Mine</p>"})
        data = EditingSession("<p>y</p>", settings=PageSettings(margin_top=10.0)).export_docx()

        session.import_docx(data)

        assert session.settings.header_markup == "<p>Mine</p>"
        assert session.settings.margin_top == pytest.approx(10.0, abs=0.1)

    def test_odt_round_trip(self):
        """Test ODT export and import through a session."""
        session = EditingSession("<h2>Title</h2><ul><li>one</li></ul>")

        other = EditingSession()
        markup = other.import_odt(session.export_odt())

        assert markup == "<h2>Title</h2><ul><li>one</li></ul>"

    def test_export_pdf(self, session):
        """Test PDF export of a paginated session."""
        data = session.export_pdf(title="Five")

        assert data.startswith(b"%PDF")
