"""Interface the rendering surface offers to the pagination engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .selection import Selection


class PaginationHost(ABC):
    """
    Rendering surface that hosts the page containers.

    Page creation and destruction are requests: the surface materializes a
    new container during its next render step, after which the page can be
    measured and pagination continues from page 0.
    """

    @abstractmethod
    def request_page_creation(self, after_index: int) -> None:
        """Ask for a new page container after page ``after_index``."""

    @abstractmethod
    def request_page_destruction(self, index: int) -> None:
        """Ask for the trailing page container at ``index`` to be removed."""

    @abstractmethod
    def get_selection(self) -> Optional[Selection]:
        """Current caret anchor, if any."""

    @abstractmethod
    def set_selection(self, selection: Optional[Selection]) -> None:
        """Re-apply a caret anchor."""

    def scroll_into_view(self, node_id: str) -> None:
        """Bring the node carrying the caret into view."""

    def content_emitted(self, markup: str) -> None:
        """Receive the consolidated markup after a rebalance that changed something."""
