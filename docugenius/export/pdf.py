"""
PDF writer for a paginated document.

Every page of the layout becomes one PDF page of the configured physical
size. The blocks a page hosts are drawn into the content frame inside the
margins; header and footer content is drawn into the margin areas with the
page-number placeholder replaced by the page's number. Content that does not
fit a frame is clipped, as on screen.
"""

from __future__ import annotations

import io
import logging
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Flowable, Frame, Image, Paragraph, Spacer, Table, TableStyle

from ..config import EditorOptions
from ..exceptions import UnsupportedEmbed
from ..markup import parse_markup
from ..media import decode_data_uri
from ..models.nodes import Node, NodeKind
from ..models.settings import PageSettings
from ..models.styles import BlockStyle
from ..pagination.oracle import HEADING_SCALE, LIST_INDENT_MM
from ..pagination.page import PageLayout
from ..utils.colors import to_word_color
from ..utils.fonts import base_font, resolve_font_variant
from ..utils.units import PT_PER_PX, css_length_to_pt, parse_number

logger = logging.getLogger(__name__)

ALIGNMENTS = {"left": TA_LEFT, "center": TA_CENTER, "right": TA_RIGHT, "justify": TA_JUSTIFY}
HEADER_FOOTER_DISTANCE_MM = 10.0
PARAGRAPH_SPACING_PT = 4.0
TAB_MARKUP = "&nbsp;" * 4


def _css_color(value: Optional[str]) -> Optional[str]:
    word_color = to_word_color(value)
    return f"#{word_color}" if word_color else None


class PdfExporter:
    """Draws a PageLayout with reportlab."""

    def __init__(self, options: Optional[EditorOptions] = None):
        self.options = options or EditorOptions()

    def export(self, layout: PageLayout, settings: Optional[PageSettings] = None,
               title: Optional[str] = None) -> bytes:
        """
        Render all pages.

        Args:
            layout: Paginated document
            settings: Margins and header/footer configuration
            title: Document title for the PDF metadata

        Returns:
            PDF bytes
        """
        settings = settings or PageSettings()
        page_size = (self.options.page_width_mm * mm, self.options.page_height_mm * mm)
        buffer = io.BytesIO()
        canvas = Canvas(buffer, pagesize=page_size)
        canvas.setCreator("DocuGenius")
        if title:
            canvas.setTitle(title)

        header_blocks = parse_markup(settings.header_markup) if settings.has_header else []
        footer_blocks = parse_markup(settings.footer_markup) if settings.has_footer else []
        for index, page in enumerate(layout):
            page_number = index + 1
            self._draw_body(canvas, page.nodes, settings, page_number)
            if header_blocks:
                self._draw_header(canvas, header_blocks, settings, page_number)
            if footer_blocks:
                self._draw_footer(canvas, footer_blocks, settings, page_number)
            canvas.showPage()
        canvas.save()
        data = buffer.getvalue()
        logger.info(f"Exported PDF: {len(layout)} pages, {len(data)} bytes")
        return data

    # ------------------------------------------------------------------
    # Frames
    def _frame(self, x_mm: float, y_mm: float, width_mm: float, height_mm: float, frame_id: str) -> Frame:
        return Frame(x_mm * mm, y_mm * mm, max(width_mm, 0.0) * mm, max(height_mm, 0.0) * mm,
                     leftPadding=0, rightPadding=0, topPadding=0, bottomPadding=0, id=frame_id)

    def _draw_body(self, canvas: Canvas, blocks: List[Node], settings: PageSettings, page_number: int) -> None:
        width = settings.content_width(self.options.page_width_mm)
        height = settings.content_height(self.options.page_height_mm)
        frame = self._frame(settings.margin_left, settings.margin_bottom, width, height, f"body{page_number}")
        self._fill(canvas, frame, blocks, settings, page_number, width, height)

    def _draw_header(self, canvas: Canvas, blocks: List[Node], settings: PageSettings, page_number: int) -> None:
        height = settings.margin_top - HEADER_FOOTER_DISTANCE_MM
        if height <= 0:
            return
        width = settings.content_width(self.options.page_width_mm)
        y = self.options.page_height_mm - settings.margin_top
        frame = self._frame(settings.margin_left, y, width, height, f"header{page_number}")
        self._fill(canvas, frame, blocks, settings, page_number, width, height, first_line_indent=False)

    def _draw_footer(self, canvas: Canvas, blocks: List[Node], settings: PageSettings, page_number: int) -> None:
        height = settings.margin_bottom - HEADER_FOOTER_DISTANCE_MM
        if height <= 0:
            return
        width = settings.content_width(self.options.page_width_mm)
        frame = self._frame(settings.margin_left, HEADER_FOOTER_DISTANCE_MM, width, height, f"footer{page_number}")
        self._fill(canvas, frame, blocks, settings, page_number, width, height, first_line_indent=False)

    def _fill(self, canvas: Canvas, frame: Frame, blocks: List[Node], settings: PageSettings, page_number: int,
              width_mm: float, height_mm: float, first_line_indent: bool = True) -> None:
        builder = FlowableBuilder(self.options, settings, page_number, width_mm * mm, height_mm * mm,
                                  first_line_indent=first_line_indent)
        flowables = builder.build(blocks)
        frame.addFromList(flowables, canvas)
        if flowables:
            logger.debug(f"Frame {frame.id}: {len(flowables)} flowables clipped")


class FlowableBuilder:
    """Converts blocks into platypus flowables."""

    def __init__(self, options: EditorOptions, settings: PageSettings, page_number: int,
                 width: float, height: float, first_line_indent: bool = True):
        self.options = options
        self.settings = settings
        self.page_number = page_number
        self.width = width
        self.height = height
        self.first_line_indent = first_line_indent
        self._list_counter = 0

    def build(self, blocks: List[Node]) -> List[Flowable]:
        flowables: List[Flowable] = []
        for node in blocks:
            if node.kind is NodeKind.LIST_ITEM and node.ordered:
                self._list_counter += 1
            elif node.kind is not NodeKind.LIST_ITEM:
                self._list_counter = 0
            flowables.extend(self.block(node))
        return flowables

    def block(self, node: Node) -> List[Flowable]:
        kind = node.kind
        if kind in (NodeKind.PARAGRAPH, NodeKind.HEADING, NodeKind.LIST_ITEM):
            return self._paragraph(node)
        if kind is NodeKind.IMAGE:
            image = self.image(node)
            return [image] if image is not None else []
        if kind is NodeKind.PAGE_NUMBER:
            return [Paragraph(str(self.page_number), self.paragraph_style(node))]
        if kind is NodeKind.TABLE:
            return [self._table(node)]
        if kind is NodeKind.PAGE_BREAK:
            return []
        logger.debug(f"No flowable for {kind.name}")
        return []

    # ------------------------------------------------------------------
    def paragraph_style(self, node: Node) -> ParagraphStyle:
        block: BlockStyle = node.block_style
        size = float(self.options.default_font_size_pt)
        font = base_font(self.options.default_font_family)
        if node.kind is NodeKind.HEADING:
            size *= HEADING_SCALE.get(node.level or 1, 1.0)
            font = resolve_font_variant(self.options.default_font_family, bold=True)
        line_height = self.options.default_line_height
        if block.line_height:
            multiplier = parse_number(block.line_height)
            if multiplier is not None:
                line_height = multiplier
            else:
                points = css_length_to_pt(block.line_height)
                if points:
                    line_height = points / size
        indent = 0.0
        if block.text_indent:
            indent = css_length_to_pt(block.text_indent) or 0.0
        elif self.first_line_indent and node.kind is NodeKind.PARAGRAPH and self.settings.first_line_indent:
            indent = self.settings.first_line_indent * mm
        style = ParagraphStyle(
            name=f"{node.kind.name.lower()}{node.level or ''}",
            fontName=font,
            fontSize=size,
            leading=size * line_height,
            alignment=ALIGNMENTS.get(block.align or "left", TA_LEFT),
            firstLineIndent=indent,
            spaceAfter=PARAGRAPH_SPACING_PT,
        )
        if node.kind is NodeKind.LIST_ITEM:
            style.leftIndent = LIST_INDENT_MM * mm
            style.bulletIndent = LIST_INDENT_MM * mm / 3
        return style

    def _paragraph(self, node: Node) -> List[Flowable]:
        text, images = self.inline_markup(node.children)
        style = self.paragraph_style(node)
        flowables: List[Flowable] = []
        if node.kind is NodeKind.LIST_ITEM:
            bullet = f"{self._list_counter}." if node.ordered else "•"
            flowables.append(Paragraph(text or "&nbsp;", style, bulletText=bullet))
        elif text.strip() or not images:
            flowables.append(Paragraph(text or "&nbsp;", style))
        for image_node in images:
            image = self.image(image_node)
            if image is not None:
                flowables.append(image)
        return flowables

    def inline_markup(self, nodes: List[Node]) -> Tuple[str, List[Node]]:
        """
        Build reportlab paragraph markup for inline content.

        Inline images cannot flow with text; they are returned separately and
        drawn below the paragraph.

        Returns:
            (markup, image nodes)
        """
        parts: List[str] = []
        images: List[Node] = []
        for node in nodes:
            kind = node.kind
            if kind is NodeKind.TEXT:
                parts.append(escape(node.text).replace("\t", TAB_MARKUP))
            elif kind is NodeKind.LINE_BREAK:
                parts.append("<br/>")
            elif kind is NodeKind.PAGE_NUMBER:
                parts.append(str(self.page_number))
            elif kind is NodeKind.IMAGE:
                images.append(node)
            elif kind is NodeKind.RUN:
                inner, nested = self.inline_markup(node.children)
                images.extend(nested)
                parts.append(self._wrap_run(node, inner))
        return "".join(parts), images

    @staticmethod
    def _wrap_run(node: Node, inner: str) -> str:
        style = node.run_style
        if style.bold:
            inner = f"<b>{inner}</b>"
        if style.italic:
            inner = f"<i>{inner}</i>"
        if style.underline:
            inner = f"<u>{inner}</u>"
        attributes = []
        color = _css_color(style.color)
        if color:
            attributes.append(f'color="{color}"')
        background = _css_color(style.highlight) if style.highlight != "none" else None
        if background:
            attributes.append(f'backColor="{background}"')
        if style.font_family:
            attributes.append(f'face="{base_font(style.font_family)}"')
        size = css_length_to_pt(style.font_size)
        if size:
            attributes.append(f'size="{size:g}"')
        if attributes:
            inner = f"<font {' '.join(attributes)}>{inner}</font>"
        return inner

    def image(self, node: Node) -> Optional[Image]:
        try:
            embedded = decode_data_uri(node.attrs.get("src", ""))
        except UnsupportedEmbed as exc:
            logger.warning(f"Skipping image: {exc}")
            return None
        width = _pixels(node.attrs.get("width"))
        height = _pixels(node.attrs.get("height"))
        if width is None or height is None:
            size = embedded.pixel_size()
            if size is None:
                logger.warning("Skipping image Pillow cannot read")
                return None
            width, height = float(size[0]), float(size[1])
        # px -> pt, then fit the frame keeping the aspect ratio
        width, height = width * PT_PER_PX, height * PT_PER_PX
        scale = min(1.0, self.width / width if width else 1.0, self.height / height if height else 1.0)
        return Image(io.BytesIO(embedded.data), width=width * scale, height=height * scale)

    def _table(self, node: Node) -> Table:
        columns = max((len(row.children) for row in node.children), default=1) or 1
        column_width = self.width / columns
        cell_builder = FlowableBuilder(self.options, self.settings, self.page_number,
                                       column_width - 4, self.height, first_line_indent=False)
        data = []
        header_rows = []
        for row_index, row in enumerate(node.children):
            cells = [cell_builder.build(cell.children) or [Spacer(1, 1)] for cell in row.children]
            cells.extend([Spacer(1, 1)] for _ in range(columns - len(cells)))
            data.append(cells)
            if row.children and all(cell.header for cell in row.children):
                header_rows.append(row_index)
        commands = [
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
        for row_index in header_rows:
            commands.append(("BACKGROUND", (0, row_index), (-1, row_index), colors.whitesmoke))
        table = Table(data or [[Spacer(1, 1)]], colWidths=[column_width] * columns)
        table.setStyle(TableStyle(commands))
        return table


def _pixels(value: Optional[str]) -> Optional[float]:
    number = parse_number(value)
    return number if number and number > 0 else None
