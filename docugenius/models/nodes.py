"""
Node tree for the rich-text document model.

Every node kind the editor understands is listed in NodeKind; codecs and the
markup serializer match on it exhaustively. Nodes keep a stable identifier
for their whole lifetime so that caret positions can be stored as
(node id, offset) pairs and survive moves between page containers.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from enum import Enum
from typing import Dict, Iterator, List, Optional

from .styles import BlockStyle, RunStyle


class NodeKind(Enum):
    """Closed set of node kinds."""

    FRAGMENT = "fragment"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST_ITEM = "list_item"
    TABLE = "table"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    IMAGE = "image"
    PAGE_BREAK = "page_break"
    PAGE_NUMBER = "page_number"
    RUN = "run"
    TEXT = "text"
    LINE_BREAK = "line_break"


# Kinds that may stand on their own in a block sequence.
BLOCK_KINDS = frozenset({
    NodeKind.PARAGRAPH,
    NodeKind.HEADING,
    NodeKind.LIST_ITEM,
    NodeKind.TABLE,
    NodeKind.IMAGE,
    NodeKind.PAGE_BREAK,
    NodeKind.PAGE_NUMBER,
})

# Kinds whose children are inline content.
INLINE_CONTAINERS = frozenset({
    NodeKind.PARAGRAPH,
    NodeKind.HEADING,
    NodeKind.LIST_ITEM,
    NodeKind.RUN,
})

# Kinds whose children are blocks.
BLOCK_CONTAINERS = frozenset({NodeKind.FRAGMENT, NodeKind.TABLE_CELL})

ATOMIC_KINDS = frozenset({
    NodeKind.IMAGE,
    NodeKind.PAGE_BREAK,
    NodeKind.PAGE_NUMBER,
    NodeKind.TEXT,
    NodeKind.LINE_BREAK,
})


class Node:
    """A node of the document tree with parent pointers and a stable id."""

    __slots__ = ("node_id", "kind", "parent", "children", "text", "level", "ordered",
                 "header", "tag", "block_style", "run_style", "attrs")

    def __init__(self, kind: NodeKind, text: str = "", level: Optional[int] = None,
                 ordered: bool = False, header: bool = False, tag: Optional[str] = None,
                 block_style: Optional[BlockStyle] = None, run_style: Optional[RunStyle] = None,
                 attrs: Optional[Dict[str, str]] = None, children: Optional[List["Node"]] = None):
        self.node_id: str = uuid.uuid4().hex
        self.kind = kind
        self.parent: Optional[Node] = None
        self.children: List[Node] = []
        self.text = text
        self.level = level
        self.ordered = ordered
        self.header = header
        self.tag = tag
        self.block_style = block_style or BlockStyle()
        self.run_style = run_style or RunStyle()
        self.attrs: Dict[str, str] = dict(attrs or {})
        for child in children or []:
            self.add_child(child)

    def __repr__(self) -> str:
        if self.kind is NodeKind.TEXT:
            return f"Node(TEXT, {self.text!r})"
        return f"Node({self.kind.name}, id={self.node_id[:8]}, children={len(self.children)})"

    # ------------------------------------------------------------------
    # Factories
    @classmethod
    def paragraph(cls, *children: "Node", style: Optional[BlockStyle] = None) -> "Node":
        return cls(NodeKind.PARAGRAPH, block_style=style, children=list(children))

    @classmethod
    def heading(cls, level: int, *children: "Node", style: Optional[BlockStyle] = None) -> "Node":
        if not 1 <= level <= 6:
            raise ValueError(f"Heading level must be 1-6, got {level}")
        return cls(NodeKind.HEADING, level=level, block_style=style, children=list(children))

    @classmethod
    def list_item(cls, *children: "Node", ordered: bool = False,
                  style: Optional[BlockStyle] = None) -> "Node":
        return cls(NodeKind.LIST_ITEM, ordered=ordered, block_style=style, children=list(children))

    @classmethod
    def table(cls, *rows: "Node") -> "Node":
        return cls(NodeKind.TABLE, children=list(rows))

    @classmethod
    def row(cls, *cells: "Node") -> "Node":
        return cls(NodeKind.TABLE_ROW, children=list(cells))

    @classmethod
    def cell(cls, *children: "Node", header: bool = False) -> "Node":
        return cls(NodeKind.TABLE_CELL, header=header, children=list(children))

    @classmethod
    def image(cls, src: str, alt: Optional[str] = None, width: Optional[int] = None,
              height: Optional[int] = None) -> "Node":
        attrs = {"src": src}
        if alt is not None:
            attrs["alt"] = alt
        if width is not None:
            attrs["width"] = str(width)
        if height is not None:
            attrs["height"] = str(height)
        return cls(NodeKind.IMAGE, attrs=attrs)

    @classmethod
    def page_break(cls) -> "Node":
        return cls(NodeKind.PAGE_BREAK)

    @classmethod
    def page_number(cls) -> "Node":
        return cls(NodeKind.PAGE_NUMBER)

    @classmethod
    def run(cls, *children: "Node", tag: str = "span", style: Optional[RunStyle] = None) -> "Node":
        return cls(NodeKind.RUN, tag=tag, run_style=style, children=list(children))

    @classmethod
    def text_node(cls, text: str) -> "Node":
        return cls(NodeKind.TEXT, text=text)

    @classmethod
    def line_break(cls) -> "Node":
        return cls(NodeKind.LINE_BREAK)

    # ------------------------------------------------------------------
    # Tree helpers
    def add_child(self, child: "Node") -> "Node":
        if child.parent is not None:
            child.parent.remove_child(child)
        child.parent = self
        self.children.append(child)
        return child

    def remove_child(self, child: "Node") -> None:
        self.children.remove(child)
        child.parent = None

    def walk(self) -> Iterator["Node"]:
        """Depth-first pre-order traversal including this node."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, node_id: str) -> Optional["Node"]:
        for node in self.walk():
            if node.node_id == node_id:
                return node
        return None

    def contains(self, node_id: str) -> bool:
        return self.find(node_id) is not None

    def top_block(self) -> "Node":
        """Return the outermost ancestor (the block hosted directly by a page)."""
        node = self
        while node.parent is not None and node.parent.kind is not NodeKind.FRAGMENT:
            node = node.parent
        return node

    def text_content(self) -> str:
        if self.kind is NodeKind.TEXT:
            return self.text
        if self.kind is NodeKind.LINE_BREAK:
            return "\n"
        return "".join(child.text_content() for child in self.children)

    def effective_run_style(self) -> RunStyle:
        """Merge the run styles of all RUN ancestors (and self), outermost first."""
        chain: List[RunStyle] = []
        node: Optional[Node] = self
        while node is not None:
            if node.kind is NodeKind.RUN:
                chain.append(node.run_style)
            node = node.parent
        style = RunStyle()
        for scope in reversed(chain):
            style = style.merged(scope)
        return style

    @property
    def is_block(self) -> bool:
        return self.kind in BLOCK_KINDS

    def is_empty_placeholder(self) -> bool:
        """True for ``<p></p>`` or ``<p><br/></p>``: no text at all and at most one line break."""
        if self.kind is not NodeKind.PARAGRAPH:
            return False
        breaks = 0
        for node in self.walk():
            if node.kind in (NodeKind.TEXT, NodeKind.IMAGE, NodeKind.PAGE_NUMBER):
                return False
            if node.kind is NodeKind.LINE_BREAK:
                breaks += 1
        return breaks <= 1


def wrap_styled(node: Node, style: RunStyle) -> Node:
    """
    Wrap an inline node in run nodes expressing ``style``.

    Formatting nests as ``span(style) > b > i > u > node``; attributes other
    than the three flags go on the outer span.
    """
    wrapped = node
    rest = replace(style)
    if style.underline:
        wrapped = Node.run(wrapped, tag="u", style=RunStyle(underline=True))
        rest.underline = None
    if style.italic:
        wrapped = Node.run(wrapped, tag="i", style=RunStyle(italic=True))
        rest.italic = None
    if style.bold:
        wrapped = Node.run(wrapped, tag="b", style=RunStyle(bold=True))
        rest.bold = None
    if not rest.is_empty():
        wrapped = Node.run(wrapped, tag="span", style=rest)
    return wrapped
