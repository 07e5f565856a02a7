"""
Tests for the OpenDocument Text codec.
"""

import io
import zipfile

import pytest
from lxml import etree

from docugenius.exceptions import MalformedPackage
from docugenius.models import PageSettings
from docugenius.odt import MIMETYPE, OdtExporter, OdtImporter
from docugenius.odt.codec import odf_length_to_px, onq


def export_parts(markup, settings=None, options=None):
    data = OdtExporter(options).export(markup, settings)
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return archive.infolist(), {name: archive.read(name) for name in archive.namelist()}


def content_text(markup):
    _, parts = export_parts(markup)
    root = etree.fromstring(parts["content.xml"])
    return root.find(f"{onq('office:body')}/{onq('office:text')}")


class TestOdtPackage:
    """Test cases for the package layout."""

    def test_mimetype_first_and_stored(self):
        """Test that the mimetype entry leads the archive uncompressed."""
        infos, parts = export_parts("<p>x</p>")

        assert infos[0].filename == "mimetype"
        assert infos[0].compress_type == zipfile.ZIP_STORED
        assert parts["mimetype"] == MIMETYPE.encode("ascii")

    def test_required_parts(self):
        """Test that content, styles, meta and manifest are written."""
        _, parts = export_parts("<p>x</p>")

        for name in ("content.xml", "styles.xml", "meta.xml", "META-INF/manifest.xml"):
            assert name in parts

    def test_page_layout_uses_settings(self):
        """Test that margins go into the page layout."""
        _, parts = export_parts("<p>x</p>", PageSettings(margin_top=12.5, margin_left=30.0))
        root = etree.fromstring(parts["styles.xml"])
        properties = root.find(f".//{onq('style:page-layout-properties')}")

        assert properties.get(onq("fo:page-width")) == "210mm"
        assert properties.get(onq("fo:margin-top")) == "12.5mm"
        assert properties.get(onq("fo:margin-left")) == "30mm"


class TestOdtContent:
    """Test cases for content.xml."""

    def test_heading_level(self):
        """Test that headings carry their outline level."""
        text = content_text("<h3>Deep</h3>")
        heading = text.find(onq("text:h"))

        assert heading.get(onq("text:outline-level")) == "3"
        assert heading.text == "Deep"

    def test_list_grouping(self):
        """Test that consecutive items of one kind share a list."""
        text = content_text("<ul><li>a</li><li>b</li></ul><ol><li>c</li></ol>")
        lists = text.findall(onq("text:list"))

        assert [element.get(onq("text:style-name")) for element in lists] == ["L1", "L2"]
        assert len(lists[0].findall(onq("text:list-item"))) == 2

    def test_page_break_paragraph(self):
        """Test that a page break becomes an empty paragraph with the break style."""
        text = content_text('<p>a</p><hr class="page-break"/><p>b</p>')
        paragraphs = text.findall(onq("text:p"))

        assert len(paragraphs) == 3
        assert paragraphs[1].get(onq("text:style-name")) == "PageBreak"

    def test_page_number_field(self):
        """Test writing the page-number placeholder as a field."""
        text = content_text('<p>Page <span class="page-number"><span>#</span></span></p>')
        field = text.find(f"{onq('text:p')}/{onq('text:page-number')}")

        assert field is not None
        assert field.get(onq("text:select-page")) == "current"

    def test_spaces_and_tabs(self):
        """Test that runs of spaces and tabs become ODF elements."""
        text = content_text("<p>a   b\tc</p>")
        paragraph = text.find(onq("text:p"))

        assert paragraph.find(onq("text:s")).get(onq("text:c")) == "2"
        assert paragraph.find(onq("text:tab")) is not None

    def test_header_row(self):
        """Test that an all-header row goes into the header rows group."""
        text = content_text("<table><tr><th><p>H</p></th></tr><tr><td></td></tr></table>")
        table = text.find(onq("table:table"))

        assert table.find(onq("table:table-header-rows")) is not None
        assert table.find(onq("table:table-column")).get(onq("table:number-columns-repeated")) == "1"
        empty_cell = table.find(f"{onq('table:table-row')}/{onq('table:table-cell')}")
        assert empty_cell.find(onq("text:p")) is not None

    def test_image_frame(self, png_data_uri):
        """Test that images are stored under Pictures/ and listed in the manifest."""
        _, parts = export_parts(f'<img src="{png_data_uri}" alt="red" width="40" height="20"/>')
        root = etree.fromstring(parts["content.xml"])
        frame = root.find(f".//{onq('draw:frame')}")

        assert "Pictures/image1.png" in parts
        assert frame.find(onq("draw:image")).get(onq("xlink:href")) == "Pictures/image1.png"
        assert frame.find(onq("svg:title")).text == "red"
        assert b"Pictures/image1.png" in parts["META-INF/manifest.xml"]

    def test_broken_image_is_skipped(self):
        """Test that a non data URI image is dropped."""
        _, parts = export_parts('<p>a<img src="http://example.com/a.png"/></p>')

        assert not any(name.startswith("Pictures/") for name in parts)

    def test_non_finite_line_height_is_ignored(self):
        """Test that an infinite line height does not fail the export."""
        _, parts = export_parts('<p style="line-height: inf; text-align: center;">x</p>')
        root = etree.fromstring(parts["content.xml"])
        centered = [properties for properties in root.iter(onq("style:paragraph-properties"))
                    if properties.get(onq("fo:text-align")) == "center"]

        assert len(centered) == 1
        assert centered[0].get(onq("fo:line-height")) is None
        assert root.find(f".//{onq('text:p')}").text == "x"


class TestOdtImport:
    """Test cases for OdtImporter."""

    def test_not_a_zip(self):
        """Test that arbitrary bytes are rejected."""
        with pytest.raises(MalformedPackage):
            OdtImporter().parse(b"garbage")

    def test_missing_content(self, zip_factory):
        """Test that a package without content.xml is rejected."""
        with pytest.raises(MalformedPackage):
            OdtImporter().parse(zip_factory({"mimetype": MIMETYPE}))

    def test_empty_body(self, zip_factory):
        """Test a document with no office:text element."""
        content = ('<office:document-content xmlns:office="urn:oasis:names:tc:opendocument:xmlns:office:1.0">'
                   '<office:body/></office:document-content>')

        assert OdtImporter().parse(zip_factory({"content.xml": content})) == ""

    def test_odf_lengths(self):
        """Test converting ODF lengths to pixels."""
        assert odf_length_to_px("2.54cm") == 96
        assert odf_length_to_px("1in") == 96
        assert odf_length_to_px("0cm") is None
        assert odf_length_to_px("wide") is None
        assert odf_length_to_px(None) is None


class TestOdtRoundTrip:
    """Test cases for exporting and re-importing."""

    @pytest.mark.parametrize("markup", [
        "<p>Hello <b>World</b></p>",
        "<p><b><i>x</i></b> <u>y</u></p>",
        '<p><span style="color: #FF0000;">red</span></p>',
        "<h2>Title</h2><ul><li>one</li></ul><ol><li>two</li></ol>",
        '<p>a</p><hr class="page-break"/><p>b</p>',
        '<p style="text-align: center;">mid</p>',
        "<p>a<br/>b</p>",
        "<table><tr><th><p>H</p></th></tr><tr><td><p>v</p></td></tr></table>",
    ])
    def test_round_trip(self, markup):
        """Test that supported markup survives an ODT round trip."""
        data = OdtExporter().export(markup)

        assert OdtImporter().parse(data) == markup

    def test_image_round_trip(self, png_data_uri):
        """Test that an image keeps its payload, alt text and size."""
        markup = f'<img src="{png_data_uri}" alt="red" width="40" height="20"/>'

        assert OdtImporter().parse(OdtExporter().export(markup)) == markup
