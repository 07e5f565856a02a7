"""
OpenDocument Text codec.

Import reads ``content.xml`` (paragraphs, headings, lists, spans with their
automatic text styles, tables, frames holding images and page-number
fields). Export writes a minimal package: a stored ``mimetype`` entry first,
the manifest, and the content, styles and meta parts.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import Dict, List, Optional, Tuple

from lxml import etree

from ..archive import PackageReader, PackageWriter
from ..config import EditorOptions
from ..exceptions import MalformedPackage, UnsupportedEmbed
from ..markup import parse_markup, serialize_nodes
from ..media import decode_data_uri, encode_data_uri, fit_pixel_size
from ..models.nodes import Node, NodeKind, wrap_styled
from ..models.settings import PageSettings
from ..models.styles import BlockStyle, RunStyle
from ..utils.colors import rgb_to_hex
from ..utils.units import css_length_to_pt, format_number, parse_number

logger = logging.getLogger(__name__)

MIMETYPE = "application/vnd.oasis.opendocument.text"
ODF_VERSION = "1.2"

ODF_NS = {
    "office": "urn:oasis:names:tc:opendocument:xmlns:office:1.0",
    "style": "urn:oasis:names:tc:opendocument:xmlns:style:1.0",
    "text": "urn:oasis:names:tc:opendocument:xmlns:text:1.0",
    "table": "urn:oasis:names:tc:opendocument:xmlns:table:1.0",
    "draw": "urn:oasis:names:tc:opendocument:xmlns:drawing:1.0",
    "fo": "urn:oasis:names:tc:opendocument:xmlns:xsl-fo-compatible:1.0",
    "xlink": "http://www.w3.org/1999/xlink",
    "svg": "urn:oasis:names:tc:opendocument:xmlns:svg-compatible:1.0",
    "meta": "urn:oasis:names:tc:opendocument:xmlns:meta:1.0",
    "dc": "http://purl.org/dc/elements/1.1/",
}
MANIFEST_NS = "urn:oasis:names:tc:opendocument:xmlns:manifest:1.0"

BULLET_LIST_STYLE = "L1"
NUMBER_LIST_STYLE = "L2"
PAGE_BREAK_STYLE = "PageBreak"
TEXT_FLAG_STYLES = {"bold": "Bold", "italic": "Italic", "underline": "Underline"}

_ODF_LENGTH_RE = re.compile(r"^\s*(-?\d+(?:\.\d+)?)\s*(cm|mm|in|pt|pc|px)?\s*$", re.IGNORECASE)
_PX_PER_UNIT = {"cm": 96 / 2.54, "mm": 96 / 25.4, "in": 96.0, "pt": 96 / 72, "pc": 16.0, "px": 1.0}


def onq(tag: str) -> str:
    """``"text:p"`` -> Clark notation in the ODF namespaces."""
    prefix, local = tag.split(":", 1)
    return f"{{{ODF_NS[prefix]}}}{local}"


def odf_length_to_px(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    match = _ODF_LENGTH_RE.match(value)
    if not match:
        return None
    number = parse_number(match.group(1))
    if number is None:
        return None
    pixels = number * _PX_PER_UNIT[(match.group(2) or "px").lower()]
    return int(round(pixels)) if pixels > 0 else None


# ----------------------------------------------------------------------
# Import
class OdtImporter:
    """Imports ODT packages into canonical markup."""

    def __init__(self, options: Optional[EditorOptions] = None):
        self.options = options or EditorOptions()
        self._package: Optional[PackageReader] = None
        self._text_styles: Dict[str, RunStyle] = {}
        self._paragraph_styles: Dict[str, Tuple[BlockStyle, bool]] = {}
        self._ordered_lists: Dict[str, bool] = {}

    def parse(self, data: bytes) -> str:
        """
        Import an ODT package.

        Args:
            data: Package bytes

        Returns:
            Canonical markup

        Raises:
            MalformedPackage: If the bytes are not a ZIP archive or
                ``content.xml`` is missing or not well-formed
        """
        with PackageReader(data) as package:
            root = package.read_xml("content.xml")
            if root is None:
                raise MalformedPackage("Invalid ODT package: content.xml not found or unreadable")
            self._package = package
            self._text_styles, self._paragraph_styles, self._ordered_lists = {}, {}, {}
            self._read_styles(package.read_xml("styles.xml"))
            self._read_styles(root)
            text = root.find(f"{onq('office:body')}/{onq('office:text')}")
            blocks = self._read_blocks(text) if text is not None else []
            self._package = None
        markup = serialize_nodes(blocks)
        logger.info(f"Imported ODT: {len(blocks)} blocks")
        return markup

    # ------------------------------------------------------------------
    # Styles
    def _read_styles(self, root: Optional[etree._Element]) -> None:
        if root is None:
            return
        for style in root.iter(onq("style:style")):
            name = style.get(onq("style:name"))
            family = style.get(onq("style:family"))
            if not name:
                continue
            if family == "text":
                self._text_styles[name] = self._run_style(style.find(onq("style:text-properties")))
            elif family == "paragraph":
                self._paragraph_styles[name] = self._paragraph_style(style)
        for list_style in root.iter(onq("text:list-style")):
            name = list_style.get(onq("style:name"))
            if name:
                first = next(iter(list_style), None)
                self._ordered_lists[name] = first is not None and etree.QName(first).localname == "list-level-style-number"

    @staticmethod
    def _run_style(properties: Optional[etree._Element]) -> RunStyle:
        style = RunStyle()
        if properties is None:
            return style
        weight = properties.get(onq("fo:font-weight"))
        if weight:
            style.bold = weight == "bold" or (weight.isdigit() and int(weight) >= 600)
        font_style = properties.get(onq("fo:font-style"))
        if font_style:
            style.italic = font_style == "italic"
        underline = properties.get(onq("style:text-underline-style"))
        if underline:
            style.underline = underline != "none"
        style.color = rgb_to_hex(properties.get(onq("fo:color")))
        background = properties.get(onq("fo:background-color"))
        if background and background != "transparent":
            style.highlight = rgb_to_hex(background)
        size = properties.get(onq("fo:font-size"))
        if size and css_length_to_pt(size):
            style.font_size = f"{format_number(round(css_length_to_pt(size), 2))}pt"
        family = properties.get(onq("style:font-name")) or properties.get(onq("fo:font-family"))
        if family:
            style.font_family = family.strip("'\"")
        return style

    @staticmethod
    def _paragraph_style(style: etree._Element) -> Tuple[BlockStyle, bool]:
        block = BlockStyle()
        properties = style.find(onq("style:paragraph-properties"))
        if properties is None:
            return block, False
        align = {"start": "left", "end": "right"}.get(properties.get(onq("fo:text-align"), ""),
                                                      properties.get(onq("fo:text-align")))
        if align in ("left", "center", "right", "justify"):
            block.align = align
        line_height = properties.get(onq("fo:line-height"))
        if line_height and line_height.endswith("%"):
            percent = parse_number(line_height[:-1])
            if percent is None:
                logger.debug(f"Ignoring line height {line_height}")
            else:
                block.line_height = format_number(round(percent / 100, 2))
        indent = properties.get(onq("fo:text-indent"))
        if indent and css_length_to_pt(indent):
            block.text_indent = f"{format_number(round(css_length_to_pt(indent), 2))}pt"
        return block, properties.get(onq("fo:break-before")) == "page"

    # ------------------------------------------------------------------
    # Blocks
    def _read_blocks(self, container: etree._Element, list_ordered: Optional[bool] = None) -> List[Node]:
        blocks: List[Node] = []
        for child in container:
            if not isinstance(child.tag, str):
                continue
            name = etree.QName(child).localname
            if name in ("p", "h"):
                style, page_break = self._paragraph_styles.get(child.get(onq("text:style-name"), ""),
                                                               (BlockStyle(), False))
                if page_break:
                    blocks.append(Node.page_break())
                    if child.get(onq("text:style-name")) == PAGE_BREAK_STYLE and not len(child) and not child.text:
                        continue
                blocks.extend(self._read_paragraph(child, name, style, list_ordered))
            elif name == "list":
                ordered = self._ordered_lists.get(child.get(onq("text:style-name"), ""), False)
                if list_ordered is not None and child.get(onq("text:style-name")) is None:
                    ordered = list_ordered
                blocks.extend(self._read_blocks(child, ordered))
            elif name in ("list-item", "list-header"):
                blocks.extend(self._read_blocks(child, list_ordered))
            elif name == "table":
                blocks.append(self._read_table(child))
            elif name in ("sequence-decls", "tracked-changes", "table-columns", "table-column",
                          "soft-page-break", "variable-decls", "user-field-decls"):
                continue
            else:
                blocks.extend(self._read_blocks(child, list_ordered))
        return blocks

    def _read_paragraph(self, element: etree._Element, name: str, style: BlockStyle,
                        list_ordered: Optional[bool]) -> List[Node]:
        if list_ordered is not None:
            block = Node.list_item(ordered=list_ordered, style=BlockStyle(style.align, style.line_height,
                                                                            style.text_indent))
        elif name == "h":
            try:
                level = min(6, max(1, int(element.get(onq("text:outline-level"), "1"))))
            except ValueError:
                level = 1
            block = Node.heading(level, style=BlockStyle(style.align, style.line_height, style.text_indent))
        else:
            block = Node.paragraph(style=BlockStyle(style.align, style.line_height, style.text_indent))
        self._read_inline(element, block, RunStyle())
        if block.kind is NodeKind.PARAGRAPH and block.block_style.is_empty() and len(block.children) == 1:
            only = block.children[0]
            if only.kind in (NodeKind.IMAGE, NodeKind.PAGE_NUMBER):
                block.remove_child(only)
                return [only]
        return [block]

    def _read_inline(self, element: etree._Element, block: Node, style: RunStyle) -> None:
        if element.text:
            block.add_child(wrap_styled(Node.text_node(element.text), style))
        for child in element:
            if isinstance(child.tag, str):
                name = etree.QName(child).localname
                if name == "span":
                    inner = style.merged(self._text_styles.get(child.get(onq("text:style-name"), ""), RunStyle()))
                    self._read_inline(child, block, inner)
                elif name == "line-break":
                    block.add_child(wrap_styled(Node.line_break(), style))
                elif name == "tab":
                    block.add_child(wrap_styled(Node.text_node("\t"), style))
                elif name == "s":
                    count = int(parse_number(child.get(onq("text:c"), "1")) or 1)
                    block.add_child(wrap_styled(Node.text_node(" " * count), style))
                elif name == "page-number":
                    block.add_child(wrap_styled(Node.page_number(), style))
                elif name == "frame":
                    image = self._read_frame(child)
                    if image is not None:
                        block.add_child(wrap_styled(image, style))
                elif name in ("note", "annotation", "bookmark", "bookmark-start", "bookmark-end",
                              "soft-page-break"):
                    pass
                else:
                    self._read_inline(child, block, style)
            if child.tail:
                block.add_child(wrap_styled(Node.text_node(child.tail), style))

    def _read_frame(self, frame: etree._Element) -> Optional[Node]:
        image = frame.find(onq("draw:image"))
        if image is None or self._package is None:
            return None
        href = image.get(onq("xlink:href"), "")
        data = self._package.read_part(href) if href and not href.startswith(("http:", "https:")) else None
        if not data:
            logger.warning(f"ODT image {href!r} is missing or external")
            return None
        node = Node(NodeKind.IMAGE, attrs={"src": encode_data_uri(data, posixpath.splitext(href)[1] or "png")})
        title = frame.find(onq("svg:title"))
        if title is None:
            title = frame.find(onq("svg:desc"))
        if title is not None and title.text:
            node.attrs["alt"] = title.text
        width = odf_length_to_px(frame.get(onq("svg:width")))
        height = odf_length_to_px(frame.get(onq("svg:height")))
        if width and height:
            node.attrs["width"] = str(width)
            node.attrs["height"] = str(height)
        return node

    def _read_table(self, element: etree._Element) -> Node:
        table = Node.table()
        for row_element, header in self._table_rows(element):
            row = table.add_child(Node.row())
            for cell_element in row_element:
                if not isinstance(cell_element.tag, str) or etree.QName(cell_element).localname != "table-cell":
                    continue
                cell = row.add_child(Node.cell(header=header))
                for block in self._read_blocks(cell_element):
                    cell.add_child(block)
                if not cell.children:
                    cell.add_child(Node.paragraph())
        return table

    @staticmethod
    def _table_rows(element: etree._Element) -> List[Tuple[etree._Element, bool]]:
        rows = []
        for child in element:
            if not isinstance(child.tag, str):
                continue
            name = etree.QName(child).localname
            if name == "table-row":
                rows.append((child, False))
            elif name in ("table-header-rows", "table-rows", "table-row-group"):
                header = name == "table-header-rows"
                rows.extend((row, header) for row in child.iter(onq("table:table-row")))
        return rows


# ----------------------------------------------------------------------
# Export
class _AutomaticStyles:
    """Automatic styles generated while writing content."""

    def __init__(self, root: etree._Element):
        self.root = root
        self._text: Dict[Tuple, str] = {}
        self._paragraph: Dict[Tuple, str] = {}
        self._frame_style = False

    def text_style(self, style: RunStyle) -> Optional[str]:
        key = (style.color, style.highlight, style.font_family, style.font_size)
        if not any(key):
            return None
        if key not in self._text:
            name = f"T{len(self._text) + 1}"
            element = etree.SubElement(self.root, onq("style:style"))
            element.set(onq("style:name"), name)
            element.set(onq("style:family"), "text")
            properties = etree.SubElement(element, onq("style:text-properties"))
            if style.color:
                properties.set(onq("fo:color"), rgb_to_hex(style.color) or style.color)
            if style.highlight and style.highlight != "none":
                properties.set(onq("fo:background-color"), rgb_to_hex(style.highlight) or style.highlight)
            if style.font_family:
                properties.set(onq("style:font-name"), style.font_family)
            size = css_length_to_pt(style.font_size)
            if size:
                properties.set(onq("fo:font-size"), f"{format_number(size)}pt")
            self._text[key] = name
        return self._text[key]

    def paragraph_style(self, style: BlockStyle) -> Optional[str]:
        if style.is_empty():
            return None
        key = (style.align, style.line_height, style.text_indent)
        if key not in self._paragraph:
            name = f"P{len(self._paragraph) + 1}"
            element = etree.SubElement(self.root, onq("style:style"))
            element.set(onq("style:name"), name)
            element.set(onq("style:family"), "paragraph")
            element.set(onq("style:parent-style-name"), "Standard")
            properties = etree.SubElement(element, onq("style:paragraph-properties"))
            if style.align:
                properties.set(onq("fo:text-align"), style.align)
            if style.line_height:
                multiplier = parse_number(style.line_height)
                if multiplier is not None:
                    properties.set(onq("fo:line-height"), f"{format_number(round(multiplier * 100))}%")
                else:
                    points = css_length_to_pt(style.line_height)
                    if points:
                        properties.set(onq("fo:line-height"), f"{format_number(points)}pt")
            indent = css_length_to_pt(style.text_indent)
            if indent is not None:
                properties.set(onq("fo:text-indent"), f"{format_number(indent)}pt")
            self._paragraph[key] = name
        return self._paragraph[key]


class OdtExporter:
    """Exports markup to ODT packages."""

    def __init__(self, options: Optional[EditorOptions] = None):
        self.options = options or EditorOptions()
        self._pictures: Dict[str, str] = {}
        self._picture_data: List[Tuple[str, bytes, str]] = []
        self._table_count = 0
        self._styles: Optional[_AutomaticStyles] = None

    def export(self, markup: str, settings: Optional[PageSettings] = None) -> bytes:
        """
        Export markup as an ODT package.

        Args:
            markup: Canonical (or any well-formed) markup
            settings: Page settings for the page layout (optional)

        Returns:
            ODT package bytes
        """
        settings = settings or PageSettings()
        writer = PackageWriter()
        self._pictures = {}
        self._picture_data = []
        self._table_count = 0
        writer.add_part("mimetype", MIMETYPE.encode("ascii"), compress=False)

        content = etree.Element(onq("office:document-content"), nsmap=ODF_NS)
        content.set(onq("office:version"), ODF_VERSION)
        font_faces = etree.SubElement(content, onq("office:font-face-decls"))
        font_face = etree.SubElement(font_faces, onq("style:font-face"))
        font_face.set(onq("style:name"), self.options.default_font_family)
        font_face.set(onq("svg:font-family"), self.options.default_font_family)
        automatic = etree.SubElement(content, onq("office:automatic-styles"))
        self._write_fixed_styles(automatic)
        self._styles = _AutomaticStyles(automatic)
        text = etree.SubElement(etree.SubElement(content, onq("office:body")), onq("office:text"))
        blocks = parse_markup(markup)
        self._write_blocks(blocks, text)

        writer.add_xml("content.xml", content)
        writer.add_xml("styles.xml", self._styles_xml(settings))
        writer.add_xml("meta.xml", self._meta_xml())
        for path, data, _ in self._picture_data:
            writer.add_part(path, data)
        writer.add_xml("META-INF/manifest.xml", self._manifest_xml())
        data = writer.to_bytes()
        self._styles = None
        logger.info(f"Exported ODT: {len(blocks)} blocks, {len(self._pictures)} pictures, {len(data)} bytes")
        return data

    # ------------------------------------------------------------------
    def _write_fixed_styles(self, automatic: etree._Element) -> None:
        flags = (
            ("Bold", {"fo:font-weight": "bold", "style:font-weight-asian": "bold",
                      "style:font-weight-complex": "bold"}),
            ("Italic", {"fo:font-style": "italic", "style:font-style-asian": "italic",
                        "style:font-style-complex": "italic"}),
            ("Underline", {"style:text-underline-style": "solid", "style:text-underline-width": "auto",
                           "style:text-underline-color": "font-color"}),
        )
        for name, attributes in flags:
            style = etree.SubElement(automatic, onq("style:style"))
            style.set(onq("style:name"), name)
            style.set(onq("style:family"), "text")
            properties = etree.SubElement(style, onq("style:text-properties"))
            for attribute, value in attributes.items():
                properties.set(onq(attribute), value)

        page_break = etree.SubElement(automatic, onq("style:style"))
        page_break.set(onq("style:name"), PAGE_BREAK_STYLE)
        page_break.set(onq("style:family"), "paragraph")
        page_break.set(onq("style:parent-style-name"), "Standard")
        etree.SubElement(page_break, onq("style:paragraph-properties")).set(onq("fo:break-before"), "page")

        for name, numbered in ((BULLET_LIST_STYLE, False), (NUMBER_LIST_STYLE, True)):
            list_style = etree.SubElement(automatic, onq("text:list-style"))
            list_style.set(onq("style:name"), name)
            level = etree.SubElement(
                list_style, onq("text:list-level-style-number" if numbered else "text:list-level-style-bullet")
            )
            level.set(onq("text:level"), "1")
            if numbered:
                level.set(onq("style:num-format"), "1")
                level.set(onq("style:num-suffix"), ".")
            else:
                level.set(onq("text:bullet-char"), "•")

    def _write_blocks(self, blocks: List[Node], parent: etree._Element) -> None:
        open_list: Optional[etree._Element] = None
        open_ordered: Optional[bool] = None
        for node in blocks:
            if node.kind is NodeKind.LIST_ITEM:
                if open_list is None or open_ordered != node.ordered:
                    open_list = etree.SubElement(parent, onq("text:list"))
                    open_list.set(onq("text:style-name"), NUMBER_LIST_STYLE if node.ordered else BULLET_LIST_STYLE)
                    open_ordered = node.ordered
                item = etree.SubElement(open_list, onq("text:list-item"))
                self._write_paragraph(node, etree.SubElement(item, onq("text:p")))
                continue
            open_list = None
            open_ordered = None
            if node.kind is NodeKind.PARAGRAPH:
                self._write_paragraph(node, etree.SubElement(parent, onq("text:p")))
            elif node.kind is NodeKind.HEADING:
                heading = etree.SubElement(parent, onq("text:h"))
                heading.set(onq("text:outline-level"), str(node.level))
                self._write_paragraph(node, heading)
            elif node.kind is NodeKind.PAGE_BREAK:
                etree.SubElement(parent, onq("text:p")).set(onq("text:style-name"), PAGE_BREAK_STYLE)
            elif node.kind in (NodeKind.IMAGE, NodeKind.PAGE_NUMBER):
                paragraph = etree.Element(onq("text:p"))
                self._write_inline([node], paragraph)
                if len(paragraph):
                    parent.append(paragraph)
            elif node.kind is NodeKind.TABLE:
                self._write_table(node, parent)

    def _write_paragraph(self, node: Node, element: etree._Element) -> None:
        style_name = self._styles.paragraph_style(node.block_style)
        if style_name:
            element.set(onq("text:style-name"), style_name)
        self._write_inline(node.children, element)

    def _write_inline(self, nodes: List[Node], parent: etree._Element) -> None:
        for node in nodes:
            if node.kind is NodeKind.TEXT:
                _append_text(parent, node.text)
            elif node.kind is NodeKind.LINE_BREAK:
                etree.SubElement(parent, onq("text:line-break"))
            elif node.kind is NodeKind.PAGE_NUMBER:
                field = etree.SubElement(parent, onq("text:page-number"))
                field.set(onq("text:select-page"), "current")
                field.text = "1"
            elif node.kind is NodeKind.IMAGE:
                frame = self._frame(node)
                if frame is not None:
                    parent.append(frame)
            elif node.kind is NodeKind.RUN:
                target = parent
                for flag, name in TEXT_FLAG_STYLES.items():
                    if getattr(node.run_style, flag):
                        target = etree.SubElement(target, onq("text:span"))
                        target.set(onq("text:style-name"), name)
                extra = self._styles.text_style(RunStyle(color=node.run_style.color,
                                                         highlight=node.run_style.highlight,
                                                         font_family=node.run_style.font_family,
                                                         font_size=node.run_style.font_size))
                if extra:
                    target = etree.SubElement(target, onq("text:span"))
                    target.set(onq("text:style-name"), extra)
                self._write_inline(node.children, target)

    def _frame(self, node: Node) -> Optional[etree._Element]:
        source = node.attrs.get("src", "")
        try:
            image = decode_data_uri(source)
        except UnsupportedEmbed as exc:
            logger.warning(f"Skipping image: {exc}")
            return None
        path = self._pictures.get(source)
        if path is None:
            path = f"Pictures/image{len(self._pictures) + 1}.{image.extension}"
            self._pictures[source] = path
            self._picture_data.append((path, image.data, image.mime_type))

        width = _positive(node.attrs.get("width"))
        height = _positive(node.attrs.get("height"))
        if width is None or height is None:
            pixels = image.pixel_size() or (400, 300)
            width, height = float(pixels[0]), float(pixels[1])
        width, height = fit_pixel_size(width, height, float(self.options.max_image_width_px))

        frame = etree.Element(onq("draw:frame"))
        frame.set(onq("draw:name"), posixpath.basename(path))
        frame.set(onq("text:anchor-type"), "as-char")
        frame.set(onq("svg:width"), f"{width * 2.54 / 96:.3f}cm")
        frame.set(onq("svg:height"), f"{height * 2.54 / 96:.3f}cm")
        picture = etree.SubElement(frame, onq("draw:image"))
        picture.set(onq("xlink:href"), path)
        picture.set(onq("xlink:type"), "simple")
        picture.set(onq("xlink:show"), "embed")
        picture.set(onq("xlink:actuate"), "onLoad")
        if node.attrs.get("alt"):
            etree.SubElement(frame, onq("svg:title")).text = node.attrs["alt"]
        return frame

    def _write_table(self, node: Node, parent: etree._Element) -> None:
        table = etree.SubElement(parent, onq("table:table"))
        self._table_count += 1
        table.set(onq("table:name"), f"Table{self._table_count}")
        columns = max((len(row.children) for row in node.children), default=0)
        if columns:
            column = etree.SubElement(table, onq("table:table-column"))
            column.set(onq("table:number-columns-repeated"), str(columns))
        header_rows = None
        for row in node.children:
            target = table
            if row.children and all(cell.header for cell in row.children):
                if header_rows is None:
                    header_rows = etree.SubElement(table, onq("table:table-header-rows"))
                target = header_rows
            row_element = etree.SubElement(target, onq("table:table-row"))
            for cell in row.children:
                cell_element = etree.SubElement(row_element, onq("table:table-cell"))
                cell_element.set(onq("office:value-type"), "string")
                self._write_blocks(cell.children, cell_element)
                if not len(cell_element):
                    etree.SubElement(cell_element, onq("text:p"))

    def _styles_xml(self, settings: PageSettings) -> etree._Element:
        root = etree.Element(onq("office:document-styles"), nsmap=ODF_NS)
        root.set(onq("office:version"), ODF_VERSION)
        styles = etree.SubElement(root, onq("office:styles"))
        default = etree.SubElement(styles, onq("style:default-style"))
        default.set(onq("style:family"), "paragraph")
        text_properties = etree.SubElement(default, onq("style:text-properties"))
        text_properties.set(onq("style:font-name"), self.options.default_font_family)
        text_properties.set(onq("fo:font-size"), f"{format_number(self.options.default_font_size_pt)}pt")
        standard = etree.SubElement(styles, onq("style:style"))
        standard.set(onq("style:name"), "Standard")
        standard.set(onq("style:family"), "paragraph")
        if settings.first_line_indent:
            etree.SubElement(standard, onq("style:paragraph-properties")).set(
                onq("fo:text-indent"), f"{format_number(settings.first_line_indent)}mm"
            )

        automatic = etree.SubElement(root, onq("office:automatic-styles"))
        layout = etree.SubElement(automatic, onq("style:page-layout"))
        layout.set(onq("style:name"), "pm1")
        properties = etree.SubElement(layout, onq("style:page-layout-properties"))
        properties.set(onq("fo:page-width"), f"{format_number(self.options.page_width_mm)}mm")
        properties.set(onq("fo:page-height"), f"{format_number(self.options.page_height_mm)}mm")
        for side in ("top", "bottom", "left", "right"):
            properties.set(onq(f"fo:margin-{side}"), f"{format_number(getattr(settings, f'margin_{side}'))}mm")
        master_styles = etree.SubElement(root, onq("office:master-styles"))
        master = etree.SubElement(master_styles, onq("style:master-page"))
        master.set(onq("style:name"), "Standard")
        master.set(onq("style:page-layout-name"), "pm1")
        return root

    @staticmethod
    def _meta_xml() -> etree._Element:
        root = etree.Element(onq("office:document-meta"), nsmap=ODF_NS)
        root.set(onq("office:version"), ODF_VERSION)
        meta = etree.SubElement(root, onq("office:meta"))
        etree.SubElement(meta, onq("meta:generator")).text = "DocuGenius"
        return root

    def _manifest_xml(self) -> etree._Element:
        root = etree.Element(f"{{{MANIFEST_NS}}}manifest", nsmap={"manifest": MANIFEST_NS})
        root.set(f"{{{MANIFEST_NS}}}version", ODF_VERSION)
        entries = [("/", MIMETYPE), ("content.xml", "text/xml"), ("styles.xml", "text/xml"),
                   ("meta.xml", "text/xml")]
        entries.extend((path, mime_type) for path, _, mime_type in self._picture_data)
        for path, media_type in entries:
            entry = etree.SubElement(root, f"{{{MANIFEST_NS}}}file-entry")
            entry.set(f"{{{MANIFEST_NS}}}full-path", path)
            entry.set(f"{{{MANIFEST_NS}}}media-type", media_type)
        return root


def _append_text(parent: etree._Element, text: str) -> None:
    """Append text, writing tabs and runs of spaces as ODF elements."""
    for index, chunk in enumerate(re.split(r"(\t| {2,})", text)):
        if not chunk:
            continue
        if index % 2 == 0:
            _append_plain(parent, chunk)
        elif chunk == "\t":
            etree.SubElement(parent, onq("text:tab"))
        else:
            _append_plain(parent, " ")
            etree.SubElement(parent, onq("text:s")).set(onq("text:c"), str(len(chunk) - 1))


def _append_plain(parent: etree._Element, text: str) -> None:
    if len(parent):
        parent[-1].tail = (parent[-1].tail or "") + text
    else:
        parent.text = (parent.text or "") + text


def _positive(value: Optional[str]) -> Optional[float]:
    number = parse_number(value)
    return number if number and number > 0 else None
