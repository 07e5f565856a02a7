"""
Markup parser - turns the editor's HTML markup into a node tree.

Handles:
- Paragraphs, headings, list items and tables
- Inline formatting (b/strong, i/em, u, styled spans)
- Images, page breaks and page-number fields
- Unknown tags as transparent containers
"""

from __future__ import annotations

import logging
import re
from html.parser import HTMLParser
from typing import Dict, List, Optional, Tuple

from ..models.nodes import BLOCK_CONTAINERS, INLINE_CONTAINERS, Node, NodeKind
from ..models.styles import BlockStyle, RunStyle, parse_css

logger = logging.getLogger(__name__)

VOID_TAGS = frozenset({"br", "img", "hr", "meta", "link", "input", "wbr", "col", "area", "base", "source"})
SKIPPED_TAGS = frozenset({"script", "style", "head", "title", "template"})
HEADING_RE = re.compile(r"^h([1-6])$")
PAGE_NUMBER_CLASS = "page-number"
PAGE_BREAK_CLASS = "page-break"

# Opening one of these closes any paragraph or heading left open.
_BLOCK_OPENERS = frozenset({"p", "ul", "ol", "table", "hr", "div"}) | {f"h{n}" for n in range(1, 7)}


class _Frame:
    """An open element; ``node`` is None for transparent containers."""

    __slots__ = ("tag", "node", "ordered")

    def __init__(self, tag: str, node: Optional[Node] = None, ordered: Optional[bool] = None):
        self.tag = tag
        self.node = node
        self.ordered = ordered


class MarkupContentParser(HTMLParser):
    """Streaming parser that builds Node trees under a FRAGMENT root."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.root = Node(NodeKind.FRAGMENT)
        self.stack: List[_Frame] = [_Frame("#root", self.root)]
        self._implicit: Dict[str, Node] = {}  # block container id -> open implicit paragraph
        self._skip_depth = 0
        self._skip_tag: Optional[str] = None

    # ------------------------------------------------------------------
    def handle_starttag(self, tag: str, attrs: list) -> None:
        tag = tag.lower()
        if self._skip_tag is not None:
            if tag == self._skip_tag and tag not in VOID_TAGS:
                self._skip_depth += 1
            return
        if tag in SKIPPED_TAGS:
            self._begin_skip(tag)
            return

        attributes = {name.lower(): (value or "") for name, value in attrs}
        if tag in VOID_TAGS:
            self._handle_void(tag, attributes)
            return

        if tag in _BLOCK_OPENERS:
            self._close_open_paragraphs()
            self._implicit.pop(self._block_container().node_id, None)

        heading = HEADING_RE.match(tag)
        block_style = BlockStyle.from_css(parse_css(attributes.get("style")))
        classes = attributes.get("class", "").split()

        if tag == "p":
            self._push_block(tag, Node.paragraph(style=block_style))
        elif heading:
            self._push_block(tag, Node.heading(int(heading.group(1)), style=block_style))
        elif tag in ("ul", "ol"):
            self.stack.append(_Frame(tag, None, ordered=(tag == "ol")))
        elif tag == "li":
            self._close_open_list_item()
            self._push_block(tag, Node.list_item(ordered=self._list_ordered(), style=block_style))
        elif tag == "table":
            self._push_block(tag, Node.table())
        elif tag == "tr":
            self._push_structural(tag, Node.row(), NodeKind.TABLE, closes=("tr", "td", "th"))
        elif tag in ("td", "th"):
            self._push_structural(tag, Node.cell(header=(tag == "th")), NodeKind.TABLE_ROW, closes=("td", "th"))
        elif tag == "span" and PAGE_NUMBER_CLASS in classes:
            self._attach(Node.page_number())
            self._begin_skip(tag)
        elif tag in ("b", "strong"):
            self._push_inline(tag, Node.run(tag="b", style=self._run_style(attributes, bold=True)))
        elif tag in ("i", "em"):
            self._push_inline(tag, Node.run(tag="i", style=self._run_style(attributes, italic=True)))
        elif tag == "u":
            self._push_inline(tag, Node.run(tag="u", style=self._run_style(attributes, underline=True)))
        elif tag in ("span", "font"):
            style = self._run_style(attributes)
            if tag == "font" and attributes.get("color") and style.color is None:
                style.color = RunStyle.from_css({"color": attributes["color"]}).color
            if style.is_empty():
                self.stack.append(_Frame(tag))
            else:
                self._push_inline(tag, Node.run(tag="span", style=style))
        else:
            # Unknown tag: transparent container
            self.stack.append(_Frame(tag))

    def handle_startendtag(self, tag: str, attrs: list) -> None:
        tag = tag.lower()
        if tag in VOID_TAGS:
            self.handle_starttag(tag, attrs)
        else:
            self.handle_starttag(tag, attrs)
            self.handle_endtag(tag)

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        if self._skip_tag is not None:
            if tag == self._skip_tag:
                self._skip_depth -= 1
                if self._skip_depth == 0:
                    self._skip_tag = None
            return
        if tag in VOID_TAGS:
            return
        alias = {"strong": "b", "em": "i"}.get(tag, tag)
        for index in range(len(self.stack) - 1, 0, -1):
            if self.stack[index].tag in (tag, alias):
                self._pop_to(index)
                if tag in _BLOCK_OPENERS:
                    self._implicit.pop(self._block_container().node_id, None)
                return
        logger.debug(f"Ignoring unmatched end tag </{tag}>")

    def handle_data(self, data: str) -> None:
        if self._skip_tag is not None or not data:
            return
        target = self._current_node()
        if target.kind in INLINE_CONTAINERS:
            target.add_child(Node.text_node(data))
            return
        if not data.strip():
            # Whitespace between blocks is formatting; inside an open implicit paragraph it is text.
            paragraph = self._implicit.get(target.node_id)
            if paragraph is not None:
                paragraph.add_child(Node.text_node(data))
            return
        if target.kind in BLOCK_CONTAINERS:
            self._implicit_paragraph(target).add_child(Node.text_node(data))
        else:
            logger.debug(f"Dropping text inside {target.kind.name}: {data[:20]!r}")

    def close(self) -> None:
        super().close()
        self._pop_to(1)

    # ------------------------------------------------------------------
    def _handle_void(self, tag: str, attributes: Dict[str, str]) -> None:
        if tag == "br":
            self._attach(Node.line_break())
        elif tag == "img":
            src = attributes.get("src", "")
            if not src:
                logger.debug("Skipping <img> without src")
                return
            node = Node(NodeKind.IMAGE, attrs={"src": src})
            for name in ("alt", "width", "height"):
                if name in attributes:
                    node.attrs[name] = attributes[name]
            self._attach(node)
        elif tag == "hr":
            if PAGE_BREAK_CLASS in attributes.get("class", "").split():
                self._close_open_paragraphs()
                self._attach_block(Node.page_break())

    def _begin_skip(self, tag: str) -> None:
        self._skip_tag = tag
        self._skip_depth = 1

    def _run_style(self, attributes: Dict[str, str], **flags: bool) -> RunStyle:
        style = RunStyle.from_css(parse_css(attributes.get("style")))
        for name, value in flags.items():
            setattr(style, name, value)
        return style

    def _list_ordered(self) -> bool:
        for frame in reversed(self.stack):
            if frame.ordered is not None:
                return frame.ordered
        return False

    def _current_node(self) -> Node:
        for frame in reversed(self.stack):
            if frame.node is not None:
                return frame.node
        return self.root

    def _block_container(self) -> Node:
        for frame in reversed(self.stack):
            if frame.node is not None and frame.node.kind in BLOCK_CONTAINERS:
                return frame.node
        return self.root

    def _implicit_paragraph(self, container: Node) -> Node:
        paragraph = self._implicit.get(container.node_id)
        if paragraph is None:
            paragraph = container.add_child(Node.paragraph())
            self._implicit[container.node_id] = paragraph
        return paragraph

    def _attach(self, node: Node) -> None:
        """Attach an inline-capable node at the current insertion point."""
        target = self._current_node()
        if target.kind in INLINE_CONTAINERS:
            target.add_child(node)
        elif target.kind in BLOCK_CONTAINERS:
            if node.kind in (NodeKind.IMAGE, NodeKind.PAGE_NUMBER):
                self._attach_block(node)
            else:
                self._implicit_paragraph(target).add_child(node)
        else:
            logger.debug(f"Dropping {node.kind.name} inside {target.kind.name}")

    def _attach_block(self, node: Node) -> None:
        container = self._block_container()
        self._implicit.pop(container.node_id, None)
        container.add_child(node)

    def _push_block(self, tag: str, node: Node) -> None:
        self._attach_block(node)
        self.stack.append(_Frame(tag, node))

    def _push_inline(self, tag: str, node: Node) -> None:
        target = self._current_node()
        if target.kind in INLINE_CONTAINERS:
            target.add_child(node)
        elif target.kind in BLOCK_CONTAINERS:
            self._implicit_paragraph(target).add_child(node)
        else:
            self.stack.append(_Frame(tag))
            return
        self.stack.append(_Frame(tag, node))

    def _push_structural(self, tag: str, node: Node, parent_kind: NodeKind, closes: Tuple[str, ...]) -> None:
        # Close siblings left open (e.g. <td>a<td>b) before opening the next one.
        cut = None
        for index in range(len(self.stack) - 1, 0, -1):
            frame = self.stack[index]
            if frame.node is not None and frame.node.kind is parent_kind:
                break
            if frame.tag in closes:
                cut = index
        if cut is not None:
            self._pop_to(cut)
        parent = self._current_node()
        if parent.kind is not parent_kind:
            self.stack.append(_Frame(tag))
            return
        parent.add_child(node)
        self.stack.append(_Frame(tag, node))

    def _close_open_paragraphs(self) -> None:
        for index in range(len(self.stack) - 1, 0, -1):
            node = self.stack[index].node
            if node is None:
                continue
            if node.kind in (NodeKind.PARAGRAPH, NodeKind.HEADING):
                self._pop_to(index)
                return
            if node.kind in BLOCK_CONTAINERS or node.kind in (NodeKind.LIST_ITEM, NodeKind.TABLE,
                                                                NodeKind.TABLE_ROW):
                return

    def _close_open_list_item(self) -> None:
        for index in range(len(self.stack) - 1, 0, -1):
            frame = self.stack[index]
            if frame.ordered is not None:
                return
            if frame.node is not None and frame.node.kind is NodeKind.LIST_ITEM:
                self._pop_to(index)
                return

    def _pop_to(self, index: int) -> None:
        while len(self.stack) > index:
            frame = self.stack.pop()
            if frame.node is not None and frame.node.kind in BLOCK_CONTAINERS:
                self._implicit.pop(frame.node.node_id, None)


def parse_markup(markup: str) -> List[Node]:
    """
    Parse markup into a list of top-level block nodes.

    Args:
        markup: HTML fragment as produced by the editor

    Returns:
        Detached top-level nodes in document order
    """
    parser = MarkupContentParser()
    parser.feed(markup or "")
    parser.close()
    blocks = list(parser.root.children)
    for block in blocks:
        parser.root.remove_child(block)
    return blocks
