"""
Node tree -> WordprocessingML.

The same transform produces the body, header and footer parts. Each part
owns its relationship table; images are written once per package through
the shared MediaRegistry.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from lxml import etree

from ..config import EditorOptions
from ..exceptions import UnsupportedEmbed
from ..media import EmbeddedImage, decode_data_uri, fit_pixel_size
from ..models.nodes import Node, NodeKind
from ..models.styles import RunStyle
from ..utils.colors import highlight_name, to_word_color
from ..utils.units import (
    TWIPS_PER_POINT,
    css_length_to_pt,
    line_height_to_spacing,
    parse_number,
    pt_to_half_points,
    px_to_emu,
)
from .fields import page_field_runs
from .namespaces import NS, PICTURE_URI, RT_IMAGE, XML_NS, qn
from .package import DocxPackageWriter, media_target
from .relationships import RelationshipTable
from .styles import BULLET_NUM_ID, BULLET_STYLE, NUMBER_NUM_ID, NUMBER_STYLE

logger = logging.getLogger(__name__)

TWIPS_PER_PIXEL = 15
PART_NSMAP = {prefix: NS[prefix] for prefix in ("w", "r", "wp", "a", "pic")}
ALIGNMENT_TO_JC = {"left": "left", "center": "center", "right": "right", "justify": "both"}


def _w(element: etree._Element, **attributes) -> etree._Element:
    for name, value in attributes.items():
        element.set(qn(f"w:{name}"), str(value))
    return element


def _sub(parent: etree._Element, tag: str, **attributes) -> etree._Element:
    element = etree.SubElement(parent, qn(tag))
    for name, value in attributes.items():
        element.set(qn(name) if ":" in name else name, str(value))
    return element


class MediaRegistry:
    """Assigns package names to exported images (one file per distinct source)."""

    def __init__(self, package: DocxPackageWriter):
        self.package = package
        self._by_source: Dict[str, str] = {}
        self._drawing_id = 0

    def register(self, source: str, image: EmbeddedImage) -> str:
        part_name = self._by_source.get(source)
        if part_name is None:
            part_name = f"word/media/image{len(self._by_source) + 1}.{image.extension}"
            self.package.add_media(part_name, image.data, image.extension)
            self._by_source[source] = part_name
        return part_name

    def next_drawing_id(self) -> int:
        self._drawing_id += 1
        return self._drawing_id


class WordMLWriter:
    """Writes blocks of one part (body, header or footer)."""

    def __init__(self, part_name: str, relationships: RelationshipTable, media: MediaRegistry,
                 options: Optional[EditorOptions] = None, content_width_px: Optional[float] = None):
        """
        Initialize the writer.

        Args:
            part_name: Package part being written (relationship targets are relative to it)
            relationships: Relationship table of that part
            media: Package-wide image registry
            options: Editor options
            content_width_px: Text width; wider images are scaled down to it
        """
        self.part_name = part_name
        self.relationships = relationships
        self.media = media
        self.options = options or EditorOptions()
        max_width = float(self.options.max_image_width_px)
        self.content_width_px = content_width_px or max_width
        self.max_image_width_px = min(max_width, content_width_px) if content_width_px else max_width

    # ------------------------------------------------------------------
    # Blocks
    def write_blocks(self, blocks: Iterable[Node], parent: etree._Element) -> int:
        """
        Append the WordML of ``blocks`` to ``parent``.

        Returns:
            Number of block elements written
        """
        count = 0
        for node in blocks:
            for element in self.block(node):
                parent.append(element)
                count += 1
        return count

    def block(self, node: Node) -> List[etree._Element]:
        kind = node.kind
        if kind is NodeKind.PARAGRAPH:
            return [self._paragraph(node)]
        if kind is NodeKind.HEADING:
            return [self._paragraph(node, style_id=f"Heading{node.level}")]
        if kind is NodeKind.LIST_ITEM:
            if node.ordered:
                return [self._paragraph(node, style_id=NUMBER_STYLE, num_id=NUMBER_NUM_ID)]
            return [self._paragraph(node, style_id=BULLET_STYLE, num_id=BULLET_NUM_ID)]
        if kind is NodeKind.TABLE:
            return [self._table(node)]
        if kind is NodeKind.PAGE_BREAK:
            paragraph = etree.Element(qn("w:p"))
            _w(_sub(_sub(paragraph, "w:r"), "w:br"), type="page")
            return [paragraph]
        if kind is NodeKind.IMAGE:
            run = self._drawing_run(node, RunStyle())
            if run is None:
                return []
            paragraph = etree.Element(qn("w:p"))
            paragraph.append(run)
            return [paragraph]
        if kind is NodeKind.PAGE_NUMBER:
            paragraph = etree.Element(qn("w:p"))
            paragraph.extend(page_field_runs())
            return [paragraph]
        if kind is NodeKind.FRAGMENT:
            elements: List[etree._Element] = []
            for child in node.children:
                elements.extend(self.block(child))
            return elements
        logger.debug(f"No block mapping for {kind.name}")
        return []

    def _paragraph(self, node: Node, style_id: Optional[str] = None,
                   num_id: Optional[str] = None) -> etree._Element:
        paragraph = etree.Element(qn("w:p"))
        properties = self._paragraph_properties(node, style_id, num_id)
        if properties is not None:
            paragraph.append(properties)
        self._inline(node, RunStyle(), paragraph)
        return paragraph

    def _paragraph_properties(self, node: Node, style_id: Optional[str],
                              num_id: Optional[str]) -> Optional[etree._Element]:
        properties = etree.Element(qn("w:pPr"))
        if style_id:
            _w(_sub(properties, "w:pStyle"), val=style_id)
        if num_id:
            numbering = _sub(properties, "w:numPr")
            _w(_sub(numbering, "w:ilvl"), val=0)
            _w(_sub(numbering, "w:numId"), val=num_id)
        style = node.block_style
        if style.line_height:
            spacing = self._line_spacing(style.line_height)
            if spacing is not None:
                _w(_sub(properties, "w:spacing"), line=spacing[0], lineRule=spacing[1])
        if style.text_indent:
            indent = css_length_to_pt(style.text_indent)
            if indent is not None:
                _w(_sub(properties, "w:ind"), firstLine=int(round(indent * TWIPS_PER_POINT)))
        if style.align in ALIGNMENT_TO_JC:
            _w(_sub(properties, "w:jc"), val=ALIGNMENT_TO_JC[style.align])
        return properties if len(properties) else None

    @staticmethod
    def _line_spacing(value: str) -> Optional[Tuple[int, str]]:
        multiplier = parse_number(value)
        if multiplier is not None:
            return line_height_to_spacing(multiplier), "auto"
        points = css_length_to_pt(value)
        if points is None:
            return None
        return int(round(points * TWIPS_PER_POINT)), "exact"

    def _table(self, node: Node) -> etree._Element:
        table = etree.Element(qn("w:tbl"))
        properties = _sub(table, "w:tblPr")
        _w(_sub(properties, "w:tblStyle"), val="TableGrid")
        _w(_sub(properties, "w:tblW"), w=0, type="auto")
        columns = max((len(row.children) for row in node.children), default=0)
        grid = _sub(table, "w:tblGrid")
        column_width = int(self.content_width_px * TWIPS_PER_PIXEL / columns) if columns else 0
        for _ in range(columns):
            _w(_sub(grid, "w:gridCol"), w=column_width)
        for row in node.children:
            table_row = _sub(table, "w:tr")
            if row.children and all(cell.header for cell in row.children):
                _sub(_sub(table_row, "w:trPr"), "w:tblHeader")
            for cell in row.children:
                table_cell = _sub(table_row, "w:tc")
                _w(_sub(_sub(table_cell, "w:tcPr"), "w:tcW"), w=column_width, type="dxa")
                self.write_blocks(cell.children, table_cell)
                # A cell must end with a paragraph.
                if table_cell[-1].tag != qn("w:p"):
                    _sub(table_cell, "w:p")
        return table

    # ------------------------------------------------------------------
    # Runs
    def _inline(self, node: Node, style: RunStyle, paragraph: etree._Element) -> None:
        for child in node.children:
            kind = child.kind
            if kind is NodeKind.TEXT:
                if child.text:
                    paragraph.append(self._text_run(child.text, style))
            elif kind is NodeKind.LINE_BREAK:
                run = self._run(style)
                _sub(run, "w:br")
                paragraph.append(run)
            elif kind is NodeKind.IMAGE:
                run = self._drawing_run(child, style)
                if run is not None:
                    paragraph.append(run)
            elif kind is NodeKind.PAGE_NUMBER:
                paragraph.extend(page_field_runs(self.run_properties(style)))
            elif kind is NodeKind.RUN:
                self._inline(child, style.merged(child.run_style), paragraph)
            else:
                logger.debug(f"Ignoring {kind.name} inside a paragraph")

    def _run(self, style: RunStyle) -> etree._Element:
        run = etree.Element(qn("w:r"))
        properties = self.run_properties(style)
        if properties is not None:
            run.append(properties)
        return run

    def _text_run(self, text: str, style: RunStyle) -> etree._Element:
        run = self._run(style)
        element = _sub(run, "w:t")
        element.set(f"{{{XML_NS}}}space", "preserve")
        element.text = text
        return run

    def run_properties(self, style: RunStyle) -> Optional[etree._Element]:
        """
        Build ``w:rPr`` for an effective run style.

        Args:
            style: Merged style of the run

        Returns:
            ``w:rPr`` element, or None when the style sets nothing
        """
        properties = etree.Element(qn("w:rPr"))
        if style.font_family:
            family = style.font_family
            _w(_sub(properties, "w:rFonts"), ascii=family, hAnsi=family, cs=family)
        if style.bold is not None:
            bold = _sub(properties, "w:b")
            if not style.bold:
                _w(bold, val=0)
        if style.italic is not None:
            italic = _sub(properties, "w:i")
            if not style.italic:
                _w(italic, val=0)
        color = to_word_color(style.color)
        if color:
            _w(_sub(properties, "w:color"), val=color)
        size = css_length_to_pt(style.font_size)
        if size:
            _w(_sub(properties, "w:sz"), val=pt_to_half_points(size))
        shading = None
        if style.highlight:
            named = "none" if style.highlight == "none" else highlight_name(style.highlight)
            if named:
                _w(_sub(properties, "w:highlight"), val=named)
            else:
                shading = to_word_color(style.highlight)
        if style.underline is not None:
            _w(_sub(properties, "w:u"), val="single" if style.underline else "none")
        if shading:
            _w(_sub(properties, "w:shd"), val="clear", color="auto", fill=shading)
        return properties if len(properties) else None

    # ------------------------------------------------------------------
    # Images
    def _drawing_run(self, node: Node, style: RunStyle) -> Optional[etree._Element]:
        source = node.attrs.get("src", "")
        try:
            image = decode_data_uri(source)
        except UnsupportedEmbed as exc:
            logger.warning(f"Skipping image: {exc}")
            return None
        part_name = self.media.register(source, image)
        entry = self.relationships.add(RT_IMAGE, media_target(part_name, self.part_name))
        cx, cy = self._extent(node, image)
        drawing_id = self.media.next_drawing_id()
        name = f"Picture {drawing_id}"

        run = self._run(style)
        inline = _sub(_sub(run, "w:drawing"), "wp:inline", distT=0, distB=0, distL=0, distR=0)
        _sub(inline, "wp:extent", cx=cx, cy=cy)
        doc_properties = _sub(inline, "wp:docPr", id=drawing_id, name=name)
        if node.attrs.get("alt"):
            doc_properties.set("descr", node.attrs["alt"])
        _sub(_sub(inline, "wp:cNvGraphicFramePr"), "a:graphicFrameLocks", noChangeAspect=1)
        graphic_data = _sub(_sub(inline, "a:graphic"), "a:graphicData", uri=PICTURE_URI)
        picture = _sub(graphic_data, "pic:pic")
        non_visual = _sub(picture, "pic:nvPicPr")
        _sub(non_visual, "pic:cNvPr", id=drawing_id, name=name)
        _sub(non_visual, "pic:cNvPicPr")
        fill = _sub(picture, "pic:blipFill")
        _sub(fill, "a:blip", **{"r:embed": entry.rel_id})
        _sub(_sub(fill, "a:stretch"), "a:fillRect")
        shape = _sub(picture, "pic:spPr")
        transform = _sub(shape, "a:xfrm")
        _sub(transform, "a:off", x=0, y=0)
        _sub(transform, "a:ext", cx=cx, cy=cy)
        _sub(_sub(shape, "a:prstGeom", prst="rect"), "a:avLst")
        return run

    def _extent(self, node: Node, image: EmbeddedImage) -> Tuple[int, int]:
        """Image extent in EMU from the markup attributes, the pixel data or the fallback."""
        width = _number(node.attrs.get("width"))
        height = _number(node.attrs.get("height"))
        if width is None or height is None:
            pixels = image.pixel_size()
            if pixels and pixels[0] and pixels[1]:
                if width is None and height is None:
                    width, height = float(pixels[0]), float(pixels[1])
                elif width is None:
                    width = height * pixels[0] / pixels[1]
                else:
                    height = width * pixels[1] / pixels[0]
        if not width or not height:
            return self.options.image_fallback_extent_emu
        width, height = fit_pixel_size(width, height, self.max_image_width_px)
        return px_to_emu(width), px_to_emu(height)


def _number(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    number = parse_number(str(value).strip().removesuffix("px"))
    return number if number and number > 0 else None


__all__ = ["MediaRegistry", "WordMLWriter", "PART_NSMAP"]
