"""
DOCX export: canonical markup + page settings -> package bytes.

Relationship ids of the fixed parts are reserved (``rIdStyles``,
``rIdNumbering``, ``rIdHeader``, ``rIdFooter``); image relationships take
numbered ids from the owning part's table.
"""

from __future__ import annotations

import logging
from typing import Optional

from lxml import etree

from ..config import EditorOptions
from ..markup import parse_markup
from ..models.settings import PageSettings
from ..utils.units import mm_to_twips
from .namespaces import (
    CT_DOCUMENT,
    CT_FOOTER,
    CT_HEADER,
    CT_NUMBERING,
    CT_STYLES,
    DOCUMENT_PART,
    FOOTER_PART,
    HEADER_PART,
    NUMBERING_PART,
    RT_FOOTER,
    RT_HEADER,
    RT_NUMBERING,
    RT_OFFICE_DOCUMENT,
    RT_STYLES,
    STYLES_PART,
    qn,
)
from .package import DocxPackageWriter, media_target
from .relationships import RelationshipTable
from .styles import build_numbering_xml, build_styles_xml
from .wordml import PART_NSMAP, MediaRegistry, WordMLWriter

logger = logging.getLogger(__name__)

STYLES_REL_ID = "rIdStyles"
NUMBERING_REL_ID = "rIdNumbering"
HEADER_REL_ID = "rIdHeader"
FOOTER_REL_ID = "rIdFooter"
HEADER_FOOTER_DISTANCE_TWIPS = 720


class DocxExporter:
    """Exports markup to DOCX packages."""

    def __init__(self, options: Optional[EditorOptions] = None):
        self.options = options or EditorOptions()

    def export(self, markup: str, settings: Optional[PageSettings] = None) -> bytes:
        """
        Export a document.

        Images whose data URI cannot be decoded are left out.

        Args:
            markup: Canonical (or any well-formed) markup
            settings: Page settings; defaults when omitted

        Returns:
            DOCX package bytes
        """
        settings = settings or PageSettings()
        package = DocxPackageWriter()
        media = MediaRegistry(package)
        content_width_px = settings.content_width(self.options.page_width_mm) * 96 / 25.4

        package.root_relationships.add(RT_OFFICE_DOCUMENT, DOCUMENT_PART, rel_id="rId1")
        document_rels = RelationshipTable(DOCUMENT_PART)
        document_rels.add(RT_STYLES, media_target(STYLES_PART, DOCUMENT_PART), rel_id=STYLES_REL_ID)
        document_rels.add(RT_NUMBERING, media_target(NUMBERING_PART, DOCUMENT_PART), rel_id=NUMBERING_REL_ID)

        if settings.has_header:
            self._write_margin_part(package, media, "w:hdr", HEADER_PART, CT_HEADER,
                                    settings.header_markup, content_width_px)
            document_rels.add(RT_HEADER, media_target(HEADER_PART, DOCUMENT_PART), rel_id=HEADER_REL_ID)
        if settings.has_footer:
            self._write_margin_part(package, media, "w:ftr", FOOTER_PART, CT_FOOTER,
                                    settings.footer_markup, content_width_px)
            document_rels.add(RT_FOOTER, media_target(FOOTER_PART, DOCUMENT_PART), rel_id=FOOTER_REL_ID)

        document = etree.Element(qn("w:document"), nsmap=PART_NSMAP)
        body = etree.SubElement(document, qn("w:body"))
        writer = WordMLWriter(DOCUMENT_PART, document_rels, media, self.options, content_width_px)
        count = writer.write_blocks(parse_markup(markup), body)
        body.append(self._section_properties(settings))

        package.add_xml_part(DOCUMENT_PART, document, CT_DOCUMENT, document_rels)
        package.add_xml_part(STYLES_PART, build_styles_xml(settings, self.options), CT_STYLES)
        package.add_xml_part(NUMBERING_PART, build_numbering_xml(), CT_NUMBERING)
        data = package.to_bytes()
        logger.info(f"Exported DOCX: {count} body elements, {len(document_rels.images())} images, {len(data)} bytes")
        return data

    def _write_margin_part(self, package: DocxPackageWriter, media: MediaRegistry, root_tag: str,
                           part_name: str, content_type: str, markup: str, content_width_px: float) -> None:
        """Write a header or footer part with its own relationship table."""
        root = etree.Element(qn(root_tag), nsmap=PART_NSMAP)
        relationships = RelationshipTable(part_name)
        writer = WordMLWriter(part_name, relationships, media, self.options, content_width_px)
        if not writer.write_blocks(parse_markup(markup or ""), root):
            # A header or footer part must hold at least one paragraph.
            etree.SubElement(root, qn("w:p"))
        package.add_xml_part(part_name, root, content_type, relationships)

    def _section_properties(self, settings: PageSettings) -> etree._Element:
        section = etree.Element(qn("w:sectPr"))
        if settings.has_header:
            reference = etree.SubElement(section, qn("w:headerReference"))
            reference.set(qn("w:type"), "default")
            reference.set(qn("r:id"), HEADER_REL_ID)
        if settings.has_footer:
            reference = etree.SubElement(section, qn("w:footerReference"))
            reference.set(qn("w:type"), "default")
            reference.set(qn("r:id"), FOOTER_REL_ID)
        size = etree.SubElement(section, qn("w:pgSz"))
        size.set(qn("w:w"), str(mm_to_twips(self.options.page_width_mm)))
        size.set(qn("w:h"), str(mm_to_twips(self.options.page_height_mm)))
        margins = etree.SubElement(section, qn("w:pgMar"))
        for name, value in (
            ("top", mm_to_twips(settings.margin_top)),
            ("right", mm_to_twips(settings.margin_right)),
            ("bottom", mm_to_twips(settings.margin_bottom)),
            ("left", mm_to_twips(settings.margin_left)),
            ("header", HEADER_FOOTER_DISTANCE_TWIPS),
            ("footer", HEADER_FOOTER_DISTANCE_TWIPS),
            ("gutter", 0),
        ):
            margins.set(qn(f"w:{name}"), str(value))
        return section
