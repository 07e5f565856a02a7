"""
Pagination engine.

Keeps the page set showing exactly the document's blocks with no page
overflowing its box and no page left under-filled while content from the
next page would fit. Each invocation runs:

1. a forward pass pushing the last node of an overflowing page to the front
   of the next page (requesting a new trailing page when there is none and
   halting; the scheduler re-runs once the page has been materialized),
2. a backward pass pulling the first node of the next page into a page for
   as long as it fits,
3. trailing-page cleanup, requesting removal of a blank, unfocused last page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from ..config import EditorOptions
from ..exceptions import OverflowUnresolvable
from ..models.nodes import Node, NodeKind
from .host import PaginationHost
from .oracle import MeasurementOracle
from .page import Page, PageLayout
from .selection import Selection

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BalanceOutcome:
    """What one engine invocation did."""

    start_index: int
    moves: int = 0
    page_requested: Optional[int] = None
    page_released: Optional[int] = None
    accepted_overflows: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.moves > 0

    @property
    def halted(self) -> bool:
        """True when the forward pass stopped to wait for a new page."""
        return self.page_requested is not None


class PaginationEngine:
    """Two-pass balancing of blocks across fixed-height pages."""

    def __init__(self, oracle: MeasurementOracle, options: Optional[EditorOptions] = None):
        self.oracle = oracle
        self.options = options or EditorOptions()
        self._accepted: Set[str] = set()

    @property
    def epsilon(self) -> float:
        return self.options.overflow_epsilon

    def overflows(self, page: Page) -> bool:
        return self.oracle.overflow(page) > self.epsilon

    def balance(self, layout: PageLayout, start_index: int = 0,
                host: Optional[PaginationHost] = None) -> BalanceOutcome:
        """
        Run one balancing invocation.

        Args:
            layout: Page set to rebalance in place
            start_index: Page where the forward pass starts (the edited page)
            host: Surface receiving page requests and selection updates

        Returns:
            BalanceOutcome describing moves and page requests
        """
        start_index = max(0, min(start_index, len(layout) - 1))
        outcome = BalanceOutcome(start_index)
        if self._forward_pass(layout, start_index, host, outcome):
            self._backward_pass(layout, host, outcome)
            self._release_trailing_page(layout, host, outcome)
        logger.debug(
            f"Balanced from page {start_index}: {outcome.moves} moves, {len(layout)} pages"
            + (f", page requested after {outcome.page_requested}" if outcome.halted else "")
        )
        return outcome

    # ------------------------------------------------------------------
    # Passes
    def _forward_pass(self, layout: PageLayout, start_index: int,
                      host: Optional[PaginationHost], outcome: BalanceOutcome) -> bool:
        """Push overflow forward. Returns False when halted for a page request."""
        for index in range(start_index, len(layout)):
            page = layout[index]
            while True:
                forced = page.forced_split() is not None
                if not forced:
                    if not self.overflows(page):
                        break
                    try:
                        self._ensure_movable(page)
                    except OverflowUnresolvable as exc:
                        self._accept_overflow(exc, outcome)
                        break
                if index + 1 >= len(layout):
                    outcome.page_requested = index
                    if host is not None:
                        host.request_page_creation(index)
                    return False
                self._push_forward(layout, page.last, layout[index + 1], host)
                outcome.moves += 1
        return True

    def _backward_pass(self, layout: PageLayout, host: Optional[PaginationHost],
                       outcome: BalanceOutcome) -> None:
        for index in range(len(layout) - 1):
            page, successor = layout[index], layout[index + 1]
            while successor.nodes and not page.ends_with_break():
                node = successor.first
                was_empty = page.is_empty()
                layout.move_to_end(node, page)
                if self.overflows(page) and not was_empty:
                    layout.move_to_front(node, successor)
                    break
                outcome.moves += 1
                self._reanchor(host, node)

    def _release_trailing_page(self, layout: PageLayout, host: Optional[PaginationHost],
                               outcome: BalanceOutcome) -> None:
        # The first page is never released.
        if len(layout) <= 1:
            return
        index = len(layout) - 1
        last = layout[index]
        if not last.is_blank():
            return
        selection = host.get_selection() if host is not None else None
        if selection is not None and last.contains(selection.node_id):
            return
        outcome.page_released = index
        if host is not None:
            host.request_page_destruction(index)

    # ------------------------------------------------------------------
    # Helpers
    def _ensure_movable(self, page: Page) -> None:
        """Raise OverflowUnresolvable when moving nodes cannot make ``page`` fit."""
        movable = [node for node in page.nodes if node.kind is not NodeKind.PAGE_BREAK]
        if len(movable) <= 1:
            node = movable[0] if movable else page.first
            raise OverflowUnresolvable(node.node_id, self.oracle.overflow(page))

    def _accept_overflow(self, exc: OverflowUnresolvable, outcome: BalanceOutcome) -> None:
        outcome.accepted_overflows.append(exc.node_id)
        if exc.node_id not in self._accepted:
            self._accepted.add(exc.node_id)
            logger.warning(f"Accepting overflow: {exc}")

    def _push_forward(self, layout: PageLayout, node: Node, destination: Page,
                      host: Optional[PaginationHost]) -> None:
        selection = host.get_selection() if host is not None else None
        layout.move_to_front(node, destination)
        logger.debug(f"Pushed {node.kind.name} {node.node_id[:8]} to the next page")
        if selection is not None and selection.within(node):
            self._restore_selection(host, selection)

    def _reanchor(self, host: Optional[PaginationHost], node: Node) -> None:
        selection = host.get_selection() if host is not None else None
        if selection is not None and selection.within(node):
            self._restore_selection(host, selection)

    @staticmethod
    def _restore_selection(host: PaginationHost, selection: Selection) -> None:
        # Same node object under a new page: the anchor stays valid.
        host.set_selection(selection)
        host.scroll_into_view(selection.node_id)
