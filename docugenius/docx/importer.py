"""
DOCX import: package -> canonical markup + page settings.

The main document part is located through the package relationships, its
body is walked into a Node tree and serialized. Element handling follows a
tag dispatch: paragraphs, tables and content controls are understood, any
other element is treated as a transparent wrapper whose children are read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

from lxml import etree

from ..archive import PackageReader
from ..config import EditorOptions
from ..exceptions import MalformedPackage
from ..markup import serialize_nodes
from ..media import encode_data_uri
from ..models.nodes import Node, NodeKind, wrap_styled
from ..models.settings import PageSettings
from ..models.styles import BlockStyle, RunStyle
from ..utils.colors import highlight_name
from ..utils.units import emu_to_px, format_number, spacing_to_line_height, twips_to_mm
from .fields import ComplexFieldTracker, is_page_field
from .namespaces import DOCUMENT_PART, NS, RT_OFFICE_DOCUMENT, ROOT_RELS_PART, local_name, qn
from .relationships import RelationshipTable, relationships_part, resolve_target
from .styles import (
    BULLET_STYLE,
    NUMBER_STYLE,
    first_line_indent,
    heading_level,
    ordered_lists,
    style_names,
    twips_to_css_pt,
)

logger = logging.getLogger(__name__)

JC_TO_ALIGNMENT = {
    "left": "left",
    "start": "left",
    "center": "center",
    "right": "right",
    "end": "right",
    "both": "justify",
    "distribute": "justify",
}
FALSE_VALUES = ("0", "false", "off")

# Elements that carry properties or annotations rather than content.
_IGNORED = frozenset({
    "pPr", "rPr", "sectPr", "tblPr", "tblGrid", "trPr", "tcPr", "sdtPr", "sdtEndPr",
    "bookmarkStart", "bookmarkEnd", "proofErr", "commentRangeStart", "commentRangeEnd",
    "commentReference", "lastRenderedPageBreak", "del", "moveFrom", "footnoteReference",
    "endnoteReference", "permStart", "permEnd",
})


@dataclass(slots=True)
class ImportResult:
    """Markup and page settings read from a package (settings None without section properties)."""

    markup: str
    settings: Optional[PageSettings]


def _flag(element: Optional[etree._Element]) -> Optional[bool]:
    if element is None:
        return None
    return element.get(qn("w:val"), "true").lower() not in FALSE_VALUES


def read_run_style(properties: Optional[etree._Element]) -> RunStyle:
    """
    Read ``w:rPr`` into a RunStyle.

    Args:
        properties: Run properties element (may be None)

    Returns:
        RunStyle with only the attributes the element sets
    """
    style = RunStyle()
    if properties is None:
        return style
    style.bold = _flag(properties.find(qn("w:b")))
    style.italic = _flag(properties.find(qn("w:i")))
    underline = properties.find(qn("w:u"))
    if underline is not None:
        style.underline = underline.get(qn("w:val"), "single") != "none"
    color = properties.find(qn("w:color"))
    if color is not None and color.get(qn("w:val"), "auto") != "auto":
        style.color = f"#{color.get(qn('w:val')).upper()}"
    size = properties.find(qn("w:sz"))
    if size is not None:
        try:
            style.font_size = f"{format_number(int(size.get(qn('w:val'))) / 2)}pt"
        except (TypeError, ValueError, OverflowError):
            logger.debug("Ignoring unparsable w:sz")
    fonts = properties.find(qn("w:rFonts"))
    if fonts is not None:
        style.font_family = fonts.get(qn("w:ascii")) or fonts.get(qn("w:hAnsi"))
    highlight = properties.find(qn("w:highlight"))
    if highlight is not None and highlight.get(qn("w:val"), "none") != "none":
        style.highlight = highlight_name(highlight.get(qn("w:val"))) or highlight.get(qn("w:val"))
    shading = properties.find(qn("w:shd"))
    if style.highlight is None and shading is not None:
        fill = shading.get(qn("w:fill"), "auto")
        if fill and fill.lower() != "auto":
            style.highlight = f"#{fill.upper()}"
    return style


def read_block_style(properties: Optional[etree._Element]) -> BlockStyle:
    """Read alignment, line spacing and first-line indent from ``w:pPr``."""
    style = BlockStyle()
    if properties is None:
        return style
    justification = properties.find(qn("w:jc"))
    if justification is not None:
        style.align = JC_TO_ALIGNMENT.get(justification.get(qn("w:val"), ""))
    spacing = properties.find(qn("w:spacing"))
    if spacing is not None and spacing.get(qn("w:line")):
        rule = spacing.get(qn("w:lineRule"), "auto")
        if rule == "auto":
            try:
                style.line_height = format_number(spacing_to_line_height(int(spacing.get(qn("w:line")))))
            except (ValueError, OverflowError):
                logger.debug("Ignoring unparsable w:spacing/@w:line")
        else:
            style.line_height = twips_to_css_pt(spacing.get(qn("w:line")))
    indent = properties.find(qn("w:ind"))
    if indent is not None and indent.get(qn("w:firstLine")):
        style.text_indent = twips_to_css_pt(indent.get(qn("w:firstLine")))
    return style


class _ParagraphBuilder:
    """
    Collects the blocks one ``w:p`` turns into.

    A page break inside the paragraph closes the current block, emits a page
    break block and continues in a fresh block with the same properties.
    """

    def __init__(self, factory: Callable[[], Node]):
        self._factory = factory
        self.current = factory()
        self.blocks: List[Node] = [self.current]
        self.split_happened = False
        self._last_style: Optional[RunStyle] = None
        self._last_text: Optional[Node] = None

    def add(self, node: Node, style: RunStyle) -> None:
        self.current.add_child(wrap_styled(node, style))
        self._last_style = None
        self._last_text = None

    def add_text(self, text: str, style: RunStyle) -> None:
        if not text:
            return
        # Adjacent runs with identical formatting share one text node.
        if self._last_text is not None and self._last_style == style:
            self._last_text.text += text
            return
        text_node = Node.text_node(text)
        self.current.add_child(wrap_styled(text_node, style))
        self._last_style = style
        self._last_text = text_node

    def page_break(self) -> None:
        self.blocks.append(Node.page_break())
        self.current = self._factory()
        self.blocks.append(self.current)
        self.split_happened = True
        self._last_style = None
        self._last_text = None

    def finish(self) -> List[Node]:
        blocks = self.blocks
        if self.split_happened:
            blocks = [block for block in blocks if block.kind is NodeKind.PAGE_BREAK or block.children]
        return [_promote(block) for block in blocks]


def _promote(block: Node) -> Node:
    """A plain paragraph holding only an image or a page number becomes that block."""
    if block.kind is not NodeKind.PARAGRAPH or not block.block_style.is_empty():
        return block
    if len(block.children) != 1:
        return block
    only = block.children[0]
    if only.kind in (NodeKind.IMAGE, NodeKind.PAGE_NUMBER):
        block.remove_child(only)
        return only
    return block


class DocxPartReader:
    """Reads the block content of one WordML part."""

    def __init__(self, package: PackageReader, relationships: RelationshipTable,
                 names: Optional[Dict[str, str]] = None, list_kinds: Optional[Dict[str, bool]] = None):
        self.package = package
        self.relationships = relationships
        self.names = names or {}
        self.list_kinds = list_kinds or {}
        self._images: Dict[str, Optional[str]] = {}
        self.block_handlers = {
            "p": self.read_paragraph,
            "tbl": self.read_table,
            "sdt": self._read_content_control,
        }

    def read_blocks(self, container: etree._Element) -> List[Node]:
        blocks: List[Node] = []
        for child in container:
            name = local_name(child.tag)
            if not name or name in _IGNORED:
                continue
            handler = self.block_handlers.get(name)
            if handler is not None:
                blocks.extend(handler(child))
            else:
                blocks.extend(self.read_blocks(child))
        return blocks

    def _read_content_control(self, element: etree._Element) -> List[Node]:
        content = element.find(qn("w:sdtContent"))
        return self.read_blocks(content) if content is not None else []

    # ------------------------------------------------------------------
    # Paragraphs
    def read_paragraph(self, element: etree._Element) -> List[Node]:
        properties = element.find(qn("w:pPr"))
        block_style = read_block_style(properties)
        style_id = None
        num_id = None
        if properties is not None:
            style_element = properties.find(qn("w:pStyle"))
            if style_element is not None:
                style_id = style_element.get(qn("w:val"))
            num_element = properties.find(f"{qn('w:numPr')}/{qn('w:numId')}")
            if num_element is not None:
                num_id = num_element.get(qn("w:val"))

        level = heading_level(style_id, self.names)
        ordered = self._list_kind(style_id, num_id)

        def factory() -> Node:
            style = replace(block_style)
            if level:
                return Node.heading(level, style=style)
            if ordered is not None:
                return Node.list_item(ordered=ordered, style=style)
            return Node.paragraph(style=style)

        builder = _ParagraphBuilder(factory)
        self._read_inline(element, builder, ComplexFieldTracker())
        return builder.finish()

    def _list_kind(self, style_id: Optional[str], num_id: Optional[str]) -> Optional[bool]:
        """True for numbered, False for bulleted, None when the paragraph is not a list item."""
        if num_id is not None:
            if num_id == "0":
                return None
            return self.list_kinds.get(num_id, style_id == NUMBER_STYLE)
        if style_id == NUMBER_STYLE:
            return True
        if style_id == BULLET_STYLE:
            return False
        return None

    def _read_inline(self, element: etree._Element, builder: _ParagraphBuilder,
                     fields: ComplexFieldTracker) -> None:
        for child in element:
            name = local_name(child.tag)
            if not name or name in _IGNORED:
                continue
            if name == "r":
                self._read_run(child, builder, fields)
            elif name == "fldSimple":
                if is_page_field(child.get(qn("w:instr"))):
                    style = read_run_style(child.find(f"{qn('w:r')}/{qn('w:rPr')}"))
                    builder.add(Node.page_number(), style)
                else:
                    self._read_inline(child, builder, fields)
            else:
                # hyperlink, ins, smartTag, customXml, sdt/sdtContent ...
                self._read_inline(child, builder, fields)

    def _read_run(self, run: etree._Element, builder: _ParagraphBuilder,
                  fields: ComplexFieldTracker) -> None:
        style = read_run_style(run.find(qn("w:rPr")))
        self._read_run_content(run, style, builder, fields)

    def _read_run_content(self, container: etree._Element, style: RunStyle,
                          builder: _ParagraphBuilder, fields: ComplexFieldTracker) -> None:
        for child in container:
            name = local_name(child.tag)
            if name == "fldChar":
                field_type = child.get(qn("w:fldCharType"))
                if field_type == "begin":
                    fields.begin()
                elif field_type == "separate" and fields.separate():
                    builder.add(Node.page_number(), style)
                elif field_type == "end" and fields.end():
                    builder.add(Node.page_number(), style)
            elif name == "instrText":
                fields.add_instruction(child.text)
            elif fields.suppresses_text() or name == "rPr":
                continue
            elif name == "t":
                builder.add_text(child.text or "", style)
            elif name == "tab":
                builder.add_text("\t", style)
            elif name == "noBreakHyphen":
                builder.add_text("-", style)
            elif name == "br":
                if child.get(qn("w:type")) == "page":
                    builder.page_break()
                else:
                    builder.add(Node.line_break(), style)
            elif name == "cr":
                builder.add(Node.line_break(), style)
            elif name in ("drawing", "pict", "object"):
                image = self._read_image(child)
                if image is not None:
                    builder.add(image, style)
            elif name == "AlternateContent":
                branch = child.find(f"{{{NS['mc']}}}Choice")
                if branch is None:
                    branch = child.find(f"{{{NS['mc']}}}Fallback")
                if branch is not None:
                    self._read_run_content(branch, style, builder, fields)

    # ------------------------------------------------------------------
    # Images
    def _read_image(self, element: etree._Element) -> Optional[Node]:
        blip = element.find(f".//{qn('a:blip')}")
        if blip is not None:
            rel_id = blip.get(qn("r:embed")) or blip.get(qn("r:link"))
        else:
            image_data = element.find(f".//{{{NS['v']}}}imagedata")
            rel_id = image_data.get(qn("r:id")) if image_data is not None else None
        if not rel_id:
            logger.debug("Drawing without an image reference")
            return None
        source = self.image_source(rel_id)
        if source is None:
            return None

        node = Node(NodeKind.IMAGE, attrs={"src": source})
        properties = element.find(f".//{qn('wp:docPr')}")
        if properties is not None and properties.get("descr"):
            node.attrs["alt"] = properties.get("descr")
        extent = element.find(f".//{qn('wp:extent')}")
        if extent is not None:
            try:
                width = emu_to_px(int(extent.get("cx")))
                height = emu_to_px(int(extent.get("cy")))
            except (TypeError, ValueError, OverflowError):
                logger.debug("Ignoring unparsable wp:extent")
            else:
                if width > 0 and height > 0:
                    node.attrs["width"] = str(width)
                    node.attrs["height"] = str(height)
        return node

    def image_source(self, rel_id: str) -> Optional[str]:
        """Data URI of the image behind ``rel_id`` (None when it cannot be resolved)."""
        if rel_id in self._images:
            return self._images[rel_id]
        entry = self.relationships.get(rel_id)
        source = None
        if entry is None or not entry.is_image or entry.external:
            logger.warning(f"Image relationship {rel_id} not found in {self.relationships.source_part}")
        else:
            part_name = self.relationships.resolve(entry)
            data = self.package.read_part(part_name)
            if data:
                source = encode_data_uri(data, part_name.rsplit(".", 1)[-1])
            else:
                logger.warning(f"Image part {part_name} is missing")
        self._images[rel_id] = source
        return source

    # ------------------------------------------------------------------
    # Tables
    def read_table(self, element: etree._Element) -> List[Node]:
        table = Node.table()
        for row_element in element.findall(qn("w:tr")):
            header = row_element.find(f"{qn('w:trPr')}/{qn('w:tblHeader')}") is not None
            row = table.add_child(Node.row())
            for cell_element in row_element.findall(qn("w:tc")):
                cell = row.add_child(Node.cell(header=header))
                for block in self.read_blocks(cell_element):
                    cell.add_child(block)
                if not cell.children:
                    cell.add_child(Node.paragraph())
        return [table]


class DocxImporter:
    """Imports DOCX packages."""

    def __init__(self, options: Optional[EditorOptions] = None):
        self.options = options or EditorOptions()

    def parse(self, data: bytes) -> ImportResult:
        """
        Import a DOCX package.

        Args:
            data: Package bytes

        Returns:
            ImportResult with canonical markup and page settings

        Raises:
            MalformedPackage: If the bytes are not a ZIP archive or the main
                document part is missing or not well-formed
        """
        with PackageReader(data) as package:
            main_part = self._main_part(package)
            root = package.read_xml(main_part)
            if root is None:
                raise MalformedPackage("Main document part is missing or unreadable", main_part)
            body = root.find(qn("w:body"))
            if body is None:
                raise MalformedPackage("Main document part has no body", main_part)

            relationships = RelationshipTable.parse(
                package.read_xml(relationships_part(main_part)), main_part
            )
            styles_root = self._related_xml(package, relationships, "styles")
            numbering_root = self._related_xml(package, relationships, "numbering")
            reader = DocxPartReader(package, relationships, style_names(styles_root), ordered_lists(numbering_root))
            blocks = reader.read_blocks(body)
            settings = self._read_settings(body, styles_root)

        markup = serialize_nodes(blocks)
        logger.info(f"Imported DOCX: {len(blocks)} blocks, {len(relationships.images())} image relationships")
        return ImportResult(markup=markup, settings=settings)

    @staticmethod
    def _main_part(package: PackageReader) -> str:
        root_rels = RelationshipTable.parse(package.read_xml(ROOT_RELS_PART), "")
        for entry in root_rels.by_type(RT_OFFICE_DOCUMENT):
            part_name = resolve_target("", entry.target)
            if package.has_part(part_name):
                return part_name
        return DOCUMENT_PART

    @staticmethod
    def _related_xml(package: PackageReader, relationships: RelationshipTable,
                     kind: str) -> Optional[etree._Element]:
        for entry in relationships:
            if entry.rel_type.endswith(f"/{kind}"):
                return package.read_xml(relationships.resolve(entry))
        return None

    @staticmethod
    def _read_settings(body: etree._Element, styles_root: Optional[etree._Element]) -> Optional[PageSettings]:
        section = body.find(qn("w:sectPr"))
        if section is None:
            sections = body.findall(f"{qn('w:p')}/{qn('w:pPr')}/{qn('w:sectPr')}")
            section = sections[-1] if sections else None
        if section is None:
            return None
        margins = section.find(qn("w:pgMar"))
        if margins is None:
            return None
        return PageSettings(
            margin_top=abs(twips_to_mm(margins.get(qn("w:top")))),
            margin_bottom=abs(twips_to_mm(margins.get(qn("w:bottom")))),
            margin_left=abs(twips_to_mm(margins.get(qn("w:left")))),
            margin_right=abs(twips_to_mm(margins.get(qn("w:right")))),
            first_line_indent=first_line_indent(styles_root),
            has_header=section.find(qn("w:headerReference")) is not None,
            has_footer=section.find(qn("w:footerReference")) is not None,
        )
