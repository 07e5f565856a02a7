"""
Tests for ZIP package access, relationship tables and field-code tracking.
"""

import io
import zipfile

import pytest
from lxml import etree

from docugenius.archive import PackageReader, PackageWriter
from docugenius.docx.fields import ComplexFieldTracker, detect_field_type, is_page_field, page_field_runs
from docugenius.docx.namespaces import RT_IMAGE, RT_STYLES, qn
from docugenius.docx.relationships import RelationshipTable, relationships_part, resolve_target
from docugenius.exceptions import MalformedPackage


class TestPackageReader:
    """Test cases for PackageReader."""

    def test_rejects_non_zip(self):
        """Test that non-ZIP bytes raise MalformedPackage."""
        with pytest.raises(MalformedPackage):
            PackageReader(b"plain text")

    def test_read_parts(self, zip_factory):
        """Test part lookup and reads."""
        data = zip_factory({"a/b.xml": "<root><child/></root>", "c.bin": b"\x00\x01"})

        with PackageReader(data) as package:
            assert package.part_names == ["a/b.xml", "c.bin"]
            assert package.has_part("/a/b.xml")
            assert package.read_part("c.bin") == b"\x00\x01"
            assert package.read_part("missing") is None
            assert package.read_xml("a/b.xml").tag == "root"

    def test_malformed_xml_part(self, zip_factory):
        """Test that a broken XML part reads as None."""
        with PackageReader(zip_factory({"x.xml": "<open>"})) as package:
            assert package.read_xml("x.xml") is None


class TestPackageWriter:
    """Test cases for PackageWriter."""

    def test_insertion_order_and_compression(self):
        """Test that parts keep their order and stored parts are not compressed."""
        writer = PackageWriter()
        writer.add_part("mimetype", b"application/x-test", compress=False)
        writer.add_part("content.xml", "<x/>")

        with zipfile.ZipFile(io.BytesIO(writer.to_bytes())) as archive:
            infos = archive.infolist()
            assert [info.filename for info in infos] == ["mimetype", "content.xml"]
            assert infos[0].compress_type == zipfile.ZIP_STORED
            assert infos[1].compress_type == zipfile.ZIP_DEFLATED
            assert archive.read("content.xml") == b"<x/>"

    def test_add_xml(self):
        """Test serializing an element with an XML declaration."""
        writer = PackageWriter()
        writer.add_xml("a.xml", etree.Element("root"))

        with zipfile.ZipFile(io.BytesIO(writer.to_bytes())) as archive:
            content = archive.read("a.xml")
        assert content.startswith(b"<?xml")
        assert writer.has_part("a.xml")


class TestRelationshipTable:
    """Test cases for RelationshipTable."""

    def test_next_id_skips_taken_ids(self):
        """Test numbered id allocation."""
        table = RelationshipTable("word/document.xml")
        table.add(RT_STYLES, "styles.xml", rel_id="rId1")

        entry = table.add(RT_IMAGE, "media/image1.png")

        assert entry.rel_id == "rId2"
        assert entry.is_image
        assert len(table) == 2
        assert "rId1" in table

    def test_duplicate_id(self):
        """Test that duplicate ids are rejected."""
        table = RelationshipTable()
        table.add(RT_STYLES, "styles.xml", rel_id="rIdStyles")

        with pytest.raises(ValueError):
            table.add(RT_STYLES, "other.xml", rel_id="rIdStyles")

    def test_xml_round_trip(self):
        """Test writing and parsing a relationships part."""
        table = RelationshipTable("word/document.xml")
        table.add(RT_IMAGE, "media/image1.png")
        table.add(RT_IMAGE, "https://example.com/a.png", external=True)

        parsed = RelationshipTable.parse(table.to_xml(), "word/document.xml")

        assert [entry.rel_id for entry in parsed] == ["rId1", "rId2"]
        assert parsed.get("rId2").external is True
        assert parsed.resolve(parsed.get("rId1")) == "word/media/image1.png"
        assert len(parsed.images()) == 2
        assert parsed.by_type(RT_STYLES) == []

    def test_parse_none(self):
        """Test that a missing part gives an empty table."""
        assert len(RelationshipTable.parse(None)) == 0

    def test_part_paths(self):
        """Test relationship part naming and target resolution."""
        assert relationships_part("word/document.xml") == "word/_rels/document.xml.rels"
        assert relationships_part("") == "_rels/.rels"
        assert resolve_target("word/document.xml", "../customXml/item1.xml") == "customXml/item1.xml"
        assert resolve_target("word/document.xml", "/word/media/a.png") == "word/media/a.png"


class TestFieldCodes:
    """Test cases for PAGE field handling."""

    def test_detect_field_type(self):
        """Test reading the field keyword."""
        assert detect_field_type(" page \\* MERGEFORMAT ") == "PAGE"
        assert detect_field_type("") == "unknown"
        assert is_page_field(" PAGE ")
        assert not is_page_field(" NUMPAGES ")

    def test_page_field_runs(self):
        """Test the five-run field sequence."""
        properties = etree.Element(qn("w:rPr"))
        etree.SubElement(properties, qn("w:b"))

        runs = page_field_runs(properties)

        assert len(runs) == 5
        assert all(run.find(qn("w:rPr")) is not None for run in runs)
        assert runs[3].find(qn("w:t")).text == "1"

    def test_tracker_page_field(self):
        """Test that a PAGE field emits one placeholder at the separator."""
        tracker = ComplexFieldTracker()
        tracker.begin()
        tracker.add_instruction(" PAGE ")

        assert tracker.suppresses_text()
        assert tracker.separate() is True
        assert tracker.suppresses_text()
        assert tracker.end() is False
        assert not tracker.active

    def test_tracker_field_without_separator(self):
        """Test that a PAGE field without result still yields its placeholder at the end."""
        tracker = ComplexFieldTracker()
        tracker.begin()
        tracker.add_instruction("PAGE")

        assert tracker.end() is True

    def test_tracker_nested_fields(self):
        """Test nesting of a PAGE field inside another field's result."""
        tracker = ComplexFieldTracker()
        tracker.begin()
        tracker.add_instruction(" IF ")
        tracker.separate()
        assert not tracker.suppresses_text()
        tracker.begin()
        tracker.add_instruction(" PAGE ")

        assert tracker.separate() is True
        assert tracker.end() is False
        assert tracker.active
        assert tracker.end() is False

    def test_unbalanced_markers(self):
        """Test that stray separators and ends are ignored."""
        tracker = ComplexFieldTracker()

        assert tracker.separate() is False
        assert tracker.end() is False
