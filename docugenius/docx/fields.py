"""
Field codes.

Only the PAGE field is interpreted: on export a page-number placeholder
becomes the begin/instruction/separate/cached-value/end run sequence, on
import both complex fields (``w:fldChar``) and simple fields
(``w:fldSimple``) whose instruction is PAGE turn back into the placeholder.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from lxml import etree

from .namespaces import XML_NS, qn

logger = logging.getLogger(__name__)

PAGE_INSTRUCTION = " PAGE "
CACHED_PAGE_VALUE = "1"


def detect_field_type(instruction: Optional[str]) -> str:
    """
    Detect field type from an instruction.

    Args:
        instruction: Field instruction such as ``" PAGE \\* MERGEFORMAT "``

    Returns:
        Upper-case field keyword, or "unknown"
    """
    tokens = (instruction or "").strip().split()
    if not tokens:
        return "unknown"
    return tokens[0].upper()


def is_page_field(instruction: Optional[str]) -> bool:
    return detect_field_type(instruction) == "PAGE"


def page_field_runs(run_properties: Optional[etree._Element] = None) -> List[etree._Element]:
    """
    Build the run sequence of a live page-number field.

    Args:
        run_properties: ``w:rPr`` copied into every run (optional)

    Returns:
        Five ``w:r`` elements
    """
    runs = []

    def run() -> etree._Element:
        element = etree.Element(qn("w:r"))
        if run_properties is not None and len(run_properties):
            element.append(_copy(run_properties))
        runs.append(element)
        return element

    etree.SubElement(run(), qn("w:fldChar")).set(qn("w:fldCharType"), "begin")
    instruction = etree.SubElement(run(), qn("w:instrText"))
    instruction.set(f"{{{XML_NS}}}space", "preserve")
    instruction.text = PAGE_INSTRUCTION
    etree.SubElement(run(), qn("w:fldChar")).set(qn("w:fldCharType"), "separate")
    cached = etree.SubElement(run(), qn("w:t"))
    cached.text = CACHED_PAGE_VALUE
    etree.SubElement(run(), qn("w:fldChar")).set(qn("w:fldCharType"), "end")
    return runs


def _copy(element: etree._Element) -> etree._Element:
    return etree.fromstring(etree.tostring(element))


class _OpenField:
    __slots__ = ("instruction", "in_result", "emitted")

    def __init__(self):
        self.instruction = ""
        self.in_result = False
        self.emitted = False

    @property
    def is_page(self) -> bool:
        return is_page_field(self.instruction)


class ComplexFieldTracker:
    """
    Follows ``w:fldChar`` begin/separate/end markers across the runs of a paragraph.

    Fields nest, so the tracker keeps a stack. Text inside an instruction is
    never content; text inside the cached result of a PAGE field is replaced
    by the placeholder.
    """

    def __init__(self):
        self._stack: List[_OpenField] = []

    @property
    def active(self) -> bool:
        return bool(self._stack)

    def begin(self) -> None:
        self._stack.append(_OpenField())

    def add_instruction(self, text: Optional[str]) -> None:
        if self._stack and not self._stack[-1].in_result:
            self._stack[-1].instruction += text or ""

    def separate(self) -> bool:
        """Enter the result part. Returns True when a page-number placeholder should be emitted."""
        if not self._stack:
            logger.debug("Field separator without a field")
            return False
        field = self._stack[-1]
        field.in_result = True
        if field.is_page and not field.emitted:
            field.emitted = True
            return True
        return False

    def end(self) -> bool:
        """Close the innermost field. Returns True when a placeholder is still owed."""
        if not self._stack:
            logger.debug("Field end without a field")
            return False
        field = self._stack.pop()
        return field.is_page and not field.emitted

    def suppresses_text(self) -> bool:
        """True while text belongs to an instruction or to a PAGE field's cached result."""
        for field in self._stack:
            if not field.in_result or field.is_page:
                return True
        return False
