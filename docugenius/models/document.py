"""Document model: the ordered block sequence plus page settings."""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

from .nodes import Node, NodeKind
from .settings import PageSettings

logger = logging.getLogger(__name__)

DEFAULT_CONTENT = """
<h1>Welcome to DocuGenius</h1>
<p>This is a <b>rich text editor</b> that runs entirely in your browser.</p>
<p>You can:</p>
<ul>
  <li>Open <b>.docx</b> files locally</li>
  <li>Edit text with formatting options</li>
  <li>Use AI to help you write</li>
  <li>Export your document to <b>PDF</b></li>
</ul>
<p>Start typing or load a file to begin!</p>
"""


class Document:
    """
    Single logical document.

    Holds the top-level blocks in order and the page settings. Pages never
    own blocks; they host references to the nodes held here.
    """

    def __init__(self, blocks: Optional[List[Node]] = None, settings: Optional[PageSettings] = None):
        self.blocks: List[Node] = list(blocks or [])
        self.settings = settings or PageSettings()

    @classmethod
    def from_markup(cls, markup: str, settings: Optional[PageSettings] = None) -> "Document":
        from ..markup import parse_markup

        return cls(parse_markup(markup), settings)

    @classmethod
    def default(cls) -> "Document":
        return cls.from_markup(DEFAULT_CONTENT, PageSettings.session_default())

    def to_markup(self) -> str:
        from ..markup import serialize_nodes

        return serialize_nodes(self.blocks)

    def iter_nodes(self) -> Iterator[Node]:
        for block in self.blocks:
            yield from block.walk()

    def find(self, node_id: str) -> Optional[Node]:
        for node in self.iter_nodes():
            if node.node_id == node_id:
                return node
        return None

    def text_content(self) -> str:
        return "".join(block.text_content() for block in self.blocks)

    def character_count(self) -> int:
        """Number of text characters, as shown in the editor's status bar."""
        return sum(len(node.text) for node in self.iter_nodes() if node.kind is NodeKind.TEXT)

    def word_count(self) -> int:
        """Number of whitespace-separated words; words never run across blocks or line breaks."""
        return sum(len(node.text_content().split()) for node in self.iter_nodes()
                   if node.kind in (NodeKind.PARAGRAPH, NodeKind.HEADING, NodeKind.LIST_ITEM))

    def images(self) -> List[Node]:
        return [node for node in self.iter_nodes() if node.kind is NodeKind.IMAGE]

    def __len__(self) -> int:
        return len(self.blocks)
