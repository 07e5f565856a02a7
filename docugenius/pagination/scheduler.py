"""
Continuation queue for pagination work.

Page creation cannot complete inside an engine invocation: the new container
must be materialized by a render step before it can be measured. The
scheduler keeps pending work items in receipt order, performs the render
step for requested pages, re-runs the engine from page 0 after every page
count change and emits the consolidated markup once the queue is idle.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterable, Optional

from ..config import EditorOptions
from ..exceptions import LayoutError
from ..models.nodes import Node
from .engine import BalanceOutcome, PaginationEngine
from .host import PaginationHost
from .page import PageLayout

logger = logging.getLogger(__name__)


class WorkReason(Enum):
    CONTENT_CHANGED = "content_changed"
    PAGES_CHANGED = "pages_changed"
    REPLACED = "replaced"
    CREATE_PAGE = "create_page"
    DESTROY_PAGE = "destroy_page"


@dataclass(frozen=True, slots=True)
class PendingWork:
    reason: WorkReason
    page_index: int = 0


class PaginationScheduler:
    """Drives the engine from a queue of pending work items."""

    def __init__(self, layout: PageLayout, engine: PaginationEngine,
                 host: Optional[PaginationHost] = None, options: Optional[EditorOptions] = None):
        self.layout = layout
        self.engine = engine
        self.host = host
        self.options = options or engine.options
        self.last_outcome: Optional[BalanceOutcome] = None
        self._queue: Deque[PendingWork] = deque()
        self._dirty = False
        self._last_emitted: Optional[str] = None

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def idle(self) -> bool:
        return not self._queue

    # ------------------------------------------------------------------
    # Triggers
    def notify_content_changed(self, page_index: int) -> None:
        self._queue.append(PendingWork(WorkReason.CONTENT_CHANGED, page_index))

    def notify_pages_changed(self) -> None:
        self._queue.append(PendingWork(WorkReason.PAGES_CHANGED, 0))

    def replace_content(self, blocks: Iterable[Node]) -> None:
        """Discard all pages and pending work; one page hosts the new content."""
        self.layout.reset(blocks)
        self._queue.clear()
        self._dirty = False
        self._last_emitted = None
        self._queue.append(PendingWork(WorkReason.REPLACED, 0))

    # ------------------------------------------------------------------
    # Draining
    def tick(self) -> bool:
        """
        Process one pending work item.

        Returns:
            False when the queue was already empty
        """
        if not self._queue:
            return False
        work = self._queue.popleft()
        if work.reason is WorkReason.CREATE_PAGE:
            self._materialize_page(work.page_index)
        elif work.reason is WorkReason.DESTROY_PAGE:
            self._release_page(work.page_index)
        else:
            outcome = self.engine.balance(self.layout, work.page_index, self.host)
            self.last_outcome = outcome
            if outcome.changed:
                self._dirty = True
            if outcome.page_requested is not None:
                self._queue.append(PendingWork(WorkReason.CREATE_PAGE, outcome.page_requested))
            if outcome.page_released is not None:
                self._queue.append(PendingWork(WorkReason.DESTROY_PAGE, outcome.page_released))
        return True

    def run_until_idle(self) -> Optional[str]:
        """
        Drain the queue and emit markup if anything changed.

        Returns:
            The emitted markup, or None when nothing was emitted

        Raises:
            LayoutError: If the queue does not drain within the tick bound
        """
        ticks = 0
        while self._queue:
            if ticks >= self.options.max_pagination_ticks:
                self._queue.clear()
                raise LayoutError("Pagination did not converge", f"{ticks} ticks, {len(self.layout)} pages")
            self.tick()
            ticks += 1
        if ticks:
            logger.debug(f"Pagination idle after {ticks} ticks with {len(self.layout)} pages")
        return self._emit()

    # ------------------------------------------------------------------
    # Render steps
    def _materialize_page(self, after_index: int) -> None:
        if after_index == len(self.layout) - 1:
            self.layout.append_page()
            self._dirty = True
        else:
            logger.debug(f"Page after {after_index} already exists")
        self.notify_pages_changed()

    def _release_page(self, index: int) -> None:
        if index == 0 or index != len(self.layout) - 1:
            logger.debug(f"Skipping stale removal of page {index}")
            return
        page = self.layout[index]
        selection = self.host.get_selection() if self.host is not None else None
        if not page.is_blank() or (selection is not None and page.contains(selection.node_id)):
            return
        self.layout.remove_page(index)
        self._dirty = True
        self.notify_pages_changed()

    def _emit(self) -> Optional[str]:
        if not self._dirty:
            return None
        self._dirty = False
        markup = self.layout.to_markup()
        if markup == self._last_emitted:
            return None
        self._last_emitted = markup
        if self.host is not None:
            self.host.content_emitted(markup)
        return markup
