"""
In-memory ZIP package access.

Both DOCX and ODT files are ZIP containers of named parts. The reader and
writer here never touch the filesystem: the editor receives uploads as byte
streams and offers exports as byte streams.
"""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from typing import Dict, List, Optional, Set

from lxml import etree

from .exceptions import MalformedPackage

logger = logging.getLogger(__name__)


class PackageReader:
    """
    Read-only view of a ZIP package held in memory.

    Handles part lookup, binary reads and XML parsing.
    """

    def __init__(self, data: bytes):
        """
        Open a package.

        Args:
            data: Raw ZIP bytes

        Raises:
            MalformedPackage: If the bytes are not a ZIP archive
        """
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, ValueError, TypeError) as exc:
            raise MalformedPackage("Not a ZIP package", str(exc)) from exc
        self._names = {info.filename for info in self._zip.infolist() if not info.is_dir()}
        logger.debug(f"Opened package with {len(self._names)} parts")

    def __enter__(self) -> "PackageReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._zip.close()

    @property
    def part_names(self) -> List[str]:
        return sorted(self._names)

    def has_part(self, name: str) -> bool:
        return name.lstrip("/") in self._names

    def read_part(self, name: str) -> Optional[bytes]:
        name = name.lstrip("/")
        if name not in self._names:
            return None
        try:
            return self._zip.read(name)
        except (zipfile.BadZipFile, KeyError, OSError, zlib.error) as exc:
            logger.warning(f"Cannot read part {name}: {exc}")
            return None

    def read_xml(self, name: str) -> Optional[etree._Element]:
        """
        Parse an XML part.

        Returns:
            Root element, or None when the part is absent or not well-formed
        """
        content = self.read_part(name)
        if content is None:
            return None
        try:
            return etree.fromstring(content, parser=_xml_parser())
        except etree.XMLSyntaxError as exc:
            logger.warning(f"Part {name} is not well-formed XML: {exc}")
            return None


class PackageWriter:
    """Collects parts and writes them into a ZIP archive in insertion order."""

    def __init__(self):
        self._parts: Dict[str, bytes] = {}
        self._stored: Set[str] = set()

    def add_part(self, name: str, content: bytes, compress: bool = True) -> None:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._parts[name.lstrip("/")] = content
        if not compress:
            self._stored.add(name.lstrip("/"))

    def add_xml(self, name: str, root: etree._Element) -> None:
        self.add_part(name, xml_bytes(root))

    def has_part(self, name: str) -> bool:
        return name.lstrip("/") in self._parts

    @property
    def part_names(self) -> List[str]:
        return list(self._parts)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for name, content in self._parts.items():
                compression = zipfile.ZIP_STORED if name in self._stored else zipfile.ZIP_DEFLATED
                archive.writestr(name, content, compress_type=compression)
        logger.debug(f"Wrote package with {len(self._parts)} parts")
        return buffer.getvalue()


def xml_bytes(root: etree._Element) -> bytes:
    """Serialize an element as a standalone UTF-8 XML part."""
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)


def _xml_parser() -> etree.XMLParser:
    # External entities are never resolved for uploaded packages.
    return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
