"""
Measurement oracles.

The pagination engine never computes text metrics itself: it asks an oracle
for the rendered content height of a page and for the height of the page
box. A browser host answers from its live layout; the headless oracles here
serve tests, the editing session and the PDF writer.

All heights are millimetres.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from reportlab.pdfbase import pdfmetrics

from ..config import EditorOptions
from ..exceptions import UnsupportedEmbed
from ..media import decode_data_uri, fit_pixel_size
from ..models.nodes import Node, NodeKind
from ..models.settings import PageSettings
from ..models.styles import RunStyle
from ..utils.fonts import resolve_font_variant
from ..utils.units import MM_PER_PT, css_length_to_pt, parse_number, px_to_mm
from .page import Page

logger = logging.getLogger(__name__)

# Browser default heading sizes relative to the body font.
HEADING_SCALE = {1: 2.0, 2: 1.5, 3: 1.17, 4: 1.0, 5: 0.83, 6: 0.67}
CELL_PADDING_MM = 2.0
LIST_INDENT_MM = 10.0

_TOKEN_RE = re.compile(r"\S+\s*|\s+")


class MeasurementOracle(ABC):
    """Reports rendered heights of page containers."""

    @abstractmethod
    def measure_rendered_height(self, page: Page) -> float:
        """Height of the content currently hosted by ``page``."""

    @abstractmethod
    def measure_box_height(self, page: Page) -> float:
        """Height available for content inside ``page``."""

    def overflow(self, page: Page) -> float:
        return self.measure_rendered_height(page) - self.measure_box_height(page)


class StaticHeightOracle(MeasurementOracle):
    """
    Oracle backed by known block heights.

    Used when the host has already laid the blocks out and reports their
    heights, and in tests where heights are chosen directly.
    """

    def __init__(self, box_height: float = 297.0,
                 heights: Optional[Mapping[str, float]] = None,
                 default_height: Union[float, Callable[[Node], float]] = 0.0):
        self.box_height = box_height
        self.heights: Dict[str, float] = dict(heights or {})
        self.default_height = default_height

    def set_height(self, node: Node, height: float) -> None:
        self.heights[node.node_id] = height

    def block_height(self, node: Node) -> float:
        if node.node_id in self.heights:
            return self.heights[node.node_id]
        if callable(self.default_height):
            return self.default_height(node)
        return self.default_height

    def measure_rendered_height(self, page: Page) -> float:
        return sum(self.block_height(node) for node in page.nodes)

    def measure_box_height(self, page: Page) -> float:
        return self.box_height


class TextMetricsOracle(MeasurementOracle):
    """
    Headless height estimate built from reportlab font metrics.

    Text is wrapped greedily word by word against the page's content width
    using ``pdfmetrics.stringWidth``; images use their declared (or decoded)
    pixel size scaled to the content width.
    """

    def __init__(self, settings: Optional[PageSettings] = None, options: Optional[EditorOptions] = None):
        self.options = options or EditorOptions()
        self.settings = settings or PageSettings()
        self._image_cache: Dict[str, Tuple[float, float]] = {}

    @property
    def content_width(self) -> float:
        return self.settings.content_width(self.options.page_width_mm)

    def measure_box_height(self, page: Page) -> float:
        return self.settings.content_height(self.options.page_height_mm)

    def measure_rendered_height(self, page: Page) -> float:
        return sum(self.block_height(node) for node in page.nodes)

    # ------------------------------------------------------------------
    def block_height(self, node: Node, width: Optional[float] = None) -> float:
        """
        Estimate the height of one block.

        Args:
            node: Block node
            width: Available width in mm (defaults to the page content width)

        Returns:
            Height in mm
        """
        width = self.content_width if width is None else width
        kind = node.kind
        if kind is NodeKind.PAGE_BREAK:
            return 0.0
        if kind is NodeKind.IMAGE:
            return self.image_size(node, width)[1]
        if kind is NodeKind.PAGE_NUMBER:
            return self._line_height_mm(self._base_style(node), None)
        if kind is NodeKind.TABLE:
            return sum(self._row_height(row, width) for row in node.children)
        if kind is NodeKind.LIST_ITEM:
            return self._inline_height(node, width - LIST_INDENT_MM)
        if kind in (NodeKind.PARAGRAPH, NodeKind.HEADING):
            return self._inline_height(node, width)
        return 0.0

    def image_size(self, node: Node, max_width: float) -> Tuple[float, float]:
        """Return the displayed (width, height) of an image in mm."""
        width_px, height_px = self._image_pixels(node)
        width_mm, height_mm = px_to_mm(width_px), px_to_mm(height_px)
        return fit_pixel_size(width_mm, height_mm, max_width)

    def _image_pixels(self, node: Node) -> Tuple[float, float]:
        width = parse_number(node.attrs.get("width"))
        height = parse_number(node.attrs.get("height"))
        if width is not None and height is not None:
            return width, height
        src = node.attrs.get("src", "")
        cached = self._image_cache.get(src)
        if cached is not None:
            return cached
        size: Tuple[float, float] = (0.0, 0.0)
        try:
            pixels = decode_data_uri(src).pixel_size()
            if pixels:
                size = (float(pixels[0]), float(pixels[1]))
        except UnsupportedEmbed as exc:
            logger.debug(f"Image not measured: {exc}")
        self._image_cache[src] = size
        return size

    def _row_height(self, row: Node, width: float) -> float:
        cells = row.children
        if not cells:
            return 0.0
        cell_width = max(width / len(cells) - 2 * CELL_PADDING_MM, 1.0)
        tallest = 0.0
        for cell in cells:
            content = sum(self.block_height(child, cell_width) for child in cell.children)
            tallest = max(tallest, content)
        return tallest + 2 * CELL_PADDING_MM

    def _base_style(self, block: Node) -> RunStyle:
        size = self.options.default_font_size_pt
        if block.kind is NodeKind.HEADING:
            size *= HEADING_SCALE.get(block.level or 1, 1.0)
        return RunStyle(
            bold=block.kind is NodeKind.HEADING or None,
            font_family=self.options.default_font_family,
            font_size=f"{size:g}pt",
            line_height=block.block_style.line_height,
        )

    def _line_height_mm(self, style: RunStyle, line_height: Optional[str]) -> float:
        size = css_length_to_pt(style.font_size) or self.options.default_font_size_pt
        multiplier = self._multiplier(line_height or style.line_height, size)
        return size * multiplier * MM_PER_PT

    def _multiplier(self, value: Optional[str], font_size_pt: float) -> float:
        if not value:
            return self.options.default_line_height
        multiplier = parse_number(value)
        if multiplier is not None:
            return multiplier
        absolute = css_length_to_pt(value)
        if absolute:
            return absolute / font_size_pt
        return self.options.default_line_height

    def _inline_height(self, block: Node, width: float) -> float:
        base = self._base_style(block)
        width_pt = max(width, 1.0) / MM_PER_PT
        indent_pt = css_length_to_pt(block.block_style.text_indent) or 0.0
        lines: List[float] = []
        line_width = indent_pt
        line_height = 0.0

        def break_line():
            nonlocal line_width, line_height
            lines.append(line_height or self._line_height_mm(base, block.block_style.line_height))
            line_width, line_height = 0.0, 0.0

        for leaf in block.walk():
            if leaf is block:
                continue
            if leaf.kind is NodeKind.LINE_BREAK:
                break_line()
                continue
            if leaf.kind is NodeKind.IMAGE:
                image_width, image_height = self.image_size(leaf, width)
                image_width_pt = image_width / MM_PER_PT
                if line_width and line_width + image_width_pt > width_pt:
                    break_line()
                line_width += image_width_pt
                line_height = max(line_height, image_height)
                continue
            if leaf.kind not in (NodeKind.TEXT, NodeKind.PAGE_NUMBER):
                continue
            style = base.merged(leaf.effective_run_style())
            text = leaf.text if leaf.kind is NodeKind.TEXT else "#"
            font = resolve_font_variant(style.font_family, bool(style.bold), bool(style.italic))
            size = css_length_to_pt(style.font_size) or self.options.default_font_size_pt
            height = self._line_height_mm(style, block.block_style.line_height)
            for token in _TOKEN_RE.findall(text):
                token_width = pdfmetrics.stringWidth(token, font, size)
                if line_width and line_width + pdfmetrics.stringWidth(token.rstrip(), font, size) > width_pt:
                    break_line()
                    if not token.strip():
                        continue
                line_width += token_width
                line_height = max(line_height, height)
        break_line()
        return sum(lines)
