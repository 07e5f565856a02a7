"""
Markup module - the tagged HTML form of a document.

The markup string is the interchange format between the pagination engine,
the codecs and the host.
"""

from .parser import MarkupContentParser, parse_markup
from .serializer import PAGE_BREAK_MARKUP, PAGE_NUMBER_MARKUP, serialize_node, serialize_nodes


def normalize_markup(markup: str) -> str:
    """Return the canonical form of ``markup``."""
    return serialize_nodes(parse_markup(markup))


__all__ = [
    "MarkupContentParser",
    "parse_markup",
    "serialize_node",
    "serialize_nodes",
    "normalize_markup",
    "PAGE_BREAK_MARKUP",
    "PAGE_NUMBER_MARKUP",
]
