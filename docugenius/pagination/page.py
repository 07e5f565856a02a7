"""
Page containers for the pagination engine.

A page hosts a contiguous slice of the document's top-level blocks. Pages
never own blocks: moving a node between pages only changes which page lists
it, the node object (and its id) stays the same.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional

from ..exceptions import LayoutError
from ..models.nodes import Node, NodeKind

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Page:
    """One fixed-size page box and the blocks it currently hosts."""

    nodes: List[Node] = field(default_factory=list)
    page_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def first(self) -> Optional[Node]:
        return self.nodes[0] if self.nodes else None

    @property
    def last(self) -> Optional[Node]:
        return self.nodes[-1] if self.nodes else None

    def is_empty(self) -> bool:
        return not self.nodes

    def is_blank(self) -> bool:
        """True when the page hosts nothing or a single empty placeholder paragraph."""
        if not self.nodes:
            return True
        return len(self.nodes) == 1 and self.nodes[0].is_empty_placeholder()

    def ends_with_break(self) -> bool:
        return bool(self.nodes) and self.nodes[-1].kind is NodeKind.PAGE_BREAK

    def forced_split(self) -> Optional[int]:
        """
        Index of the first node that a page break pushes to the next page.

        Returns:
            Position right after the first page break that has content after it,
            or None when the page has no such break
        """
        for index, node in enumerate(self.nodes[:-1]):
            if node.kind is NodeKind.PAGE_BREAK:
                return index + 1
        return None

    def contains(self, node_id: str) -> bool:
        return any(node.contains(node_id) for node in self.nodes)

    def to_markup(self) -> str:
        from ..markup import serialize_nodes

        return serialize_nodes(self.nodes)


class PageLayout:
    """Ordered page set of the rendered surface."""

    def __init__(self, pages: Optional[Iterable[Page]] = None):
        self.pages: List[Page] = list(pages or [])
        if not self.pages:
            self.pages.append(Page())

    @classmethod
    def from_blocks(cls, blocks: Iterable[Node]) -> "PageLayout":
        """Single page hosting every block, the starting point after an import."""
        return cls([Page(list(blocks))])

    @classmethod
    def from_markup(cls, markup: str) -> "PageLayout":
        from ..markup import parse_markup

        return cls.from_blocks(parse_markup(markup))

    def reset(self, blocks: Iterable[Node]) -> None:
        self.pages = [Page(list(blocks))]

    def __len__(self) -> int:
        return len(self.pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self.pages)

    def __getitem__(self, index: int) -> Page:
        return self.pages[index]

    # ------------------------------------------------------------------
    # Page set
    def append_page(self) -> Page:
        page = Page()
        self.pages.append(page)
        logger.debug(f"Page {len(self.pages) - 1} created")
        return page

    def remove_page(self, index: int) -> Page:
        if index == 0:
            raise LayoutError("The first page cannot be removed")
        page = self.pages.pop(index)
        logger.debug(f"Page {index} removed ({len(page.nodes)} nodes)")
        return page

    # ------------------------------------------------------------------
    # Node moves
    def page_index_of(self, node_id: str) -> Optional[int]:
        for index, page in enumerate(self.pages):
            if page.contains(node_id):
                return index
        return None

    def _detach(self, node: Node) -> None:
        for page in self.pages:
            for position, hosted in enumerate(page.nodes):
                if hosted is node:
                    del page.nodes[position]
                    return
        raise LayoutError("Node is not hosted by any page", node.node_id)

    def move_to_front(self, node: Node, page: Page) -> None:
        self._detach(node)
        page.nodes.insert(0, node)

    def move_to_end(self, node: Node, page: Page) -> None:
        self._detach(node)
        page.nodes.append(node)

    # ------------------------------------------------------------------
    # Content
    def blocks(self) -> List[Node]:
        """Concatenation of every page's hosted blocks in page order."""
        return [node for page in self.pages for node in page.nodes]

    def to_markup(self) -> str:
        from ..markup import serialize_nodes

        # Serialized as one sequence so a list split across pages stays one list.
        return serialize_nodes(self.blocks())

    def text_content(self) -> str:
        return "".join(node.text_content() for node in self.blocks())
