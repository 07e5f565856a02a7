"""DOCX package assembly: parts, relationships and the content-types manifest."""

from __future__ import annotations

import logging
import posixpath
from typing import Dict, Optional

from lxml import etree

from ..archive import PackageWriter, xml_bytes
from ..media import EXTENSION_MIMES
from .namespaces import (
    CONTENT_TYPES_NS,
    CONTENT_TYPES_PART,
    CT_RELATIONSHIPS,
    CT_XML,
    ROOT_RELS_PART,
)
from .relationships import RelationshipTable, relationships_part

logger = logging.getLogger(__name__)


class DocxPackageWriter:
    """
    Collects DOCX parts and writes the package.

    Content types are tracked per part as parts are added; the manifest is
    written first, followed by the root relationships, the parts and their
    relationship tables.
    """

    def __init__(self):
        self._writer = PackageWriter()
        self._parts: Dict[str, bytes] = {}
        self._overrides: Dict[str, str] = {}
        self._defaults: Dict[str, str] = {"rels": CT_RELATIONSHIPS, "xml": CT_XML}
        self._relationships: Dict[str, RelationshipTable] = {}
        self.root_relationships = RelationshipTable("")

    def add_xml_part(self, name: str, root: etree._Element, content_type: str,
                     relationships: Optional[RelationshipTable] = None) -> None:
        self._parts[name] = xml_bytes(root)
        self._overrides[name] = content_type
        if relationships is not None and len(relationships):
            self._relationships[name] = relationships

    def add_media(self, name: str, data: bytes, extension: str) -> None:
        self._parts[name] = data
        self._defaults.setdefault(extension, EXTENSION_MIMES.get(extension, f"image/{extension}"))

    def content_types_xml(self) -> etree._Element:
        root = etree.Element(f"{{{CONTENT_TYPES_NS}}}Types", nsmap={None: CONTENT_TYPES_NS})
        for extension, content_type in self._defaults.items():
            element = etree.SubElement(root, f"{{{CONTENT_TYPES_NS}}}Default")
            element.set("Extension", extension)
            element.set("ContentType", content_type)
        for part_name, content_type in self._overrides.items():
            element = etree.SubElement(root, f"{{{CONTENT_TYPES_NS}}}Override")
            element.set("PartName", f"/{part_name}")
            element.set("ContentType", content_type)
        return root

    def to_bytes(self) -> bytes:
        self._writer.add_xml(CONTENT_TYPES_PART, self.content_types_xml())
        self._writer.add_xml(ROOT_RELS_PART, self.root_relationships.to_xml())
        for name, content in self._parts.items():
            self._writer.add_part(name, content)
        for name, table in self._relationships.items():
            self._writer.add_xml(relationships_part(name), table.to_xml())
        logger.debug(f"DOCX package parts: {', '.join(self._writer.part_names)}")
        return self._writer.to_bytes()


def media_target(part_name: str, source_part: str) -> str:
    """Relationship target of ``part_name`` as seen from ``source_part``."""
    return posixpath.relpath(part_name, posixpath.dirname(source_part))
