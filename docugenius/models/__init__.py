"""
Models module for the DocuGenius document model.

Node tree, style attribute sets, page settings and the document itself.
"""

from .nodes import BLOCK_KINDS, Node, NodeKind, wrap_styled
from .styles import BlockStyle, RunStyle, parse_css
from .settings import PageSettings
from .document import DEFAULT_CONTENT, Document

__all__ = [
    "BLOCK_KINDS",
    "Node",
    "NodeKind",
    "wrap_styled",
    "BlockStyle",
    "RunStyle",
    "parse_css",
    "PageSettings",
    "Document",
    "DEFAULT_CONTENT",
]
