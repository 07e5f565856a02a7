"""
Markup serializer - writes node trees back to the editor's HTML markup.

Output is canonical: fixed CSS declaration order, normalized tag names and
self-closed void elements, so that parsing and re-serializing markup produced
here yields the same string.
"""

from __future__ import annotations

from html import escape
from typing import Iterable, List, Sequence

from ..models.nodes import Node, NodeKind
from ..models.styles import format_css

PAGE_NUMBER_MARKUP = '<span class="page-number"><span>#</span></span>'
PAGE_BREAK_MARKUP = '<hr class="page-break"/>'
IMAGE_ATTRIBUTE_ORDER = ("src", "alt", "width", "height")

_RUN_TAG_FLAGS = {"b": ("bold",), "i": ("italic",), "u": ("underline",)}


def _style_attribute(declarations) -> str:
    if not declarations:
        return ""
    return f' style="{escape(format_css(declarations))}"'


def serialize_nodes(nodes: Sequence[Node]) -> str:
    """
    Serialize a block sequence, grouping consecutive list items into lists.

    Args:
        nodes: Top-level (or table-cell) blocks in order

    Returns:
        Markup string
    """
    parts: List[str] = []
    open_list = None
    for node in nodes:
        if node.kind is NodeKind.LIST_ITEM:
            wanted = "ol" if node.ordered else "ul"
            if open_list != wanted:
                if open_list:
                    parts.append(f"</{open_list}>")
                parts.append(f"<{wanted}>")
                open_list = wanted
        elif open_list:
            parts.append(f"</{open_list}>")
            open_list = None
        parts.append(serialize_node(node))
    if open_list:
        parts.append(f"</{open_list}>")
    return "".join(parts)


def _serialize_children(children: Iterable[Node]) -> str:
    return "".join(serialize_node(child) for child in children)


def serialize_node(node: Node) -> str:
    """Serialize one node and its subtree."""
    kind = node.kind
    if kind is NodeKind.TEXT:
        return escape(node.text, quote=False)
    if kind is NodeKind.LINE_BREAK:
        return "<br/>"
    if kind is NodeKind.PARAGRAPH:
        return f"<p{_style_attribute(node.block_style.css_declarations())}>{_serialize_children(node.children)}</p>"
    if kind is NodeKind.HEADING:
        tag = f"h{node.level}"
        return f"<{tag}{_style_attribute(node.block_style.css_declarations())}>{_serialize_children(node.children)}</{tag}>"
    if kind is NodeKind.LIST_ITEM:
        return f"<li{_style_attribute(node.block_style.css_declarations())}>{_serialize_children(node.children)}</li>"
    if kind is NodeKind.TABLE:
        return f"<table>{_serialize_children(node.children)}</table>"
    if kind is NodeKind.TABLE_ROW:
        return f"<tr>{_serialize_children(node.children)}</tr>"
    if kind is NodeKind.TABLE_CELL:
        tag = "th" if node.header else "td"
        return f"<{tag}>{serialize_nodes(node.children)}</{tag}>"
    if kind is NodeKind.IMAGE:
        attributes = "".join(
            f' {name}="{escape(node.attrs[name])}"' for name in IMAGE_ATTRIBUTE_ORDER if name in node.attrs
        )
        return f"<img{attributes}/>"
    if kind is NodeKind.PAGE_BREAK:
        return PAGE_BREAK_MARKUP
    if kind is NodeKind.PAGE_NUMBER:
        return PAGE_NUMBER_MARKUP
    if kind is NodeKind.RUN:
        tag = node.tag or "span"
        declarations = node.run_style.css_declarations(implied=_RUN_TAG_FLAGS.get(tag, ()))
        inner = _serialize_children(node.children)
        if tag == "span" and not declarations:
            return inner
        return f"<{tag}{_style_attribute(declarations)}>{inner}</{tag}>"
    if kind is NodeKind.FRAGMENT:
        return serialize_nodes(node.children)
    raise ValueError(f"Unhandled node kind: {kind}")
