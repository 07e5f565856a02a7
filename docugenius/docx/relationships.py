"""
Relationship tables for DOCX packages.

A table maps relationship ids to targets (and, for images on export, the
binary payload written beside the part). Tables are built fresh for every
export and parsed into a lookup on every import.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from lxml import etree

from .namespaces import PACKAGE_REL_NS, RT_IMAGE

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RelationshipEntry:
    """One ``<Relationship>`` of a part."""

    rel_id: str
    rel_type: str
    target: str
    payload: Optional[bytes] = None
    external: bool = False

    @property
    def is_image(self) -> bool:
        return self.rel_type == RT_IMAGE


class RelationshipTable:
    """Relationships of a single source part."""

    def __init__(self, source_part: str = ""):
        """
        Initialize an empty table.

        Args:
            source_part: Part owning the relationships (e.g. ``word/document.xml``)
        """
        self.source_part = source_part
        self._entries: Dict[str, RelationshipEntry] = {}
        self._counter = 0

    def __iter__(self) -> Iterator[RelationshipEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, rel_id: str) -> bool:
        return rel_id in self._entries

    def next_id(self) -> str:
        """Next free ``rIdN`` identifier."""
        while True:
            self._counter += 1
            candidate = f"rId{self._counter}"
            if candidate not in self._entries:
                return candidate

    def add(self, rel_type: str, target: str, rel_id: Optional[str] = None,
            payload: Optional[bytes] = None, external: bool = False) -> RelationshipEntry:
        rel_id = rel_id or self.next_id()
        if rel_id in self._entries:
            raise ValueError(f"Duplicate relationship id {rel_id}")
        entry = RelationshipEntry(rel_id, rel_type, target, payload, external)
        self._entries[rel_id] = entry
        return entry

    def get(self, rel_id: str) -> Optional[RelationshipEntry]:
        return self._entries.get(rel_id)

    def by_type(self, rel_type: str) -> List[RelationshipEntry]:
        return [entry for entry in self._entries.values() if entry.rel_type == rel_type]

    def images(self) -> List[RelationshipEntry]:
        return [entry for entry in self._entries.values() if entry.is_image]

    def resolve(self, entry: RelationshipEntry) -> str:
        """Package part name a (relative) target points to."""
        return resolve_target(self.source_part, entry.target)

    # ------------------------------------------------------------------
    def to_xml(self) -> etree._Element:
        root = etree.Element(f"{{{PACKAGE_REL_NS}}}Relationships", nsmap={None: PACKAGE_REL_NS})
        for entry in self._entries.values():
            element = etree.SubElement(root, f"{{{PACKAGE_REL_NS}}}Relationship")
            element.set("Id", entry.rel_id)
            element.set("Type", entry.rel_type)
            element.set("Target", entry.target)
            if entry.external:
                element.set("TargetMode", "External")
        return root

    @classmethod
    def parse(cls, root: Optional[etree._Element], source_part: str = "") -> "RelationshipTable":
        """
        Build a table from a parsed ``.rels`` part.

        Args:
            root: Root element, or None for a part without relationships
            source_part: Part owning the relationships

        Returns:
            RelationshipTable (empty when ``root`` is None)
        """
        table = cls(source_part)
        if root is None:
            return table
        for element in root.iter(f"{{{PACKAGE_REL_NS}}}Relationship"):
            rel_id = element.get("Id")
            if not rel_id or rel_id in table:
                logger.debug(f"Skipping relationship without unique id in {source_part}")
                continue
            table.add(
                element.get("Type", ""),
                element.get("Target", ""),
                rel_id=rel_id,
                external=element.get("TargetMode") == "External",
            )
        return table


def relationships_part(part_name: str) -> str:
    """``word/document.xml`` -> ``word/_rels/document.xml.rels``."""
    directory, filename = posixpath.split(part_name)
    return posixpath.join(directory, "_rels", f"{filename}.rels")


def resolve_target(source_part: str, target: str) -> str:
    """Resolve a relationship target relative to its source part."""
    if target.startswith("/"):
        return target.lstrip("/")
    base = posixpath.dirname(source_part)
    return posixpath.normpath(posixpath.join(base, target))
