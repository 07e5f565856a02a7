"""
Editing session.

The session owns the single logical Document, the page set showing it and
the pagination machinery, and acts as the pagination host. Edits are applied
to the nodes the pages host and reported with ``notify_content_changed``;
imports replace the whole content, exports read the current state.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Tuple, Union

from .config import EditorOptions
from .docx import DocxExporter, DocxImporter
from .exceptions import LayoutError, MalformedPackage
from .export import PdfExporter
from .markup import parse_markup
from .models.document import Document
from .models.nodes import Node
from .models.settings import PageSettings
from .odt import OdtExporter, OdtImporter
from .pagination import (
    MeasurementOracle,
    PageLayout,
    PaginationEngine,
    PaginationHost,
    PaginationScheduler,
    Selection,
    TextMetricsOracle,
)
from .pagination.selection import clamp_offset

logger = logging.getLogger(__name__)

# Header/footer content is not read from imported packages, only the flags.
_IMPORT_KEPT_SETTINGS = ("header_markup", "footer_markup")


class EditingSession(PaginationHost):
    """
    In-memory editing session.

    Example:
        >>> session = EditingSession()
        >>> session.replace_content("<p>Hello</p>")
        >>> data = session.export_docx()
    """

    def __init__(self, markup: Optional[str] = None, settings: Optional[PageSettings] = None,
                 options: Optional[EditorOptions] = None, oracle: Optional[MeasurementOracle] = None,
                 auto_paginate: bool = True):
        """
        Start a session.

        Args:
            markup: Initial content (the welcome document when omitted)
            settings: Initial page settings (session defaults when omitted)
            options: Editor options
            oracle: Measurement oracle; a TextMetricsOracle over the session settings by default
            auto_paginate: Drain pagination work after every notification
        """
        self.options = options or EditorOptions()
        if markup is None:
            self.document = Document.default()
        else:
            self.document = Document.from_markup(markup, PageSettings.session_default())
        if settings is not None:
            settings.validate()
            self.document.settings = settings
        self.oracle = oracle or TextMetricsOracle(self.document.settings, self.options)
        self.layout = PageLayout()
        self.engine = PaginationEngine(self.oracle, self.options)
        self.scheduler = PaginationScheduler(self.layout, self.engine, self, self.options)
        self.auto_paginate = auto_paginate
        self.page_requests: List[Tuple[str, int]] = []
        self._selection: Optional[Selection] = None
        self._emitted: Optional[str] = None
        self._load(self.document.blocks)

    # ------------------------------------------------------------------
    # PaginationHost
    def request_page_creation(self, after_index: int) -> None:
        logger.debug(f"Page requested after page {after_index}")
        self.page_requests.append(("create", after_index))

    def request_page_destruction(self, index: int) -> None:
        logger.debug(f"Removal of page {index} requested")
        self.page_requests.append(("destroy", index))

    def get_selection(self) -> Optional[Selection]:
        return self._selection

    def set_selection(self, selection: Optional[Selection]) -> None:
        """
        Place the caret.

        The offset is clamped to the text length of the anchor node; an
        anchor on a node the document does not contain clears the selection.
        """
        if selection is None:
            self._selection = None
            return
        node = self.find_node(selection.node_id)
        if node is None:
            logger.debug(f"Selection anchor {selection.node_id[:8]} not in document")
            self._selection = None
            return
        offset = clamp_offset(node, selection.offset)
        self._selection = selection if offset == selection.offset else Selection(selection.node_id, offset)

    def content_emitted(self, markup: str) -> None:
        self._emitted = markup
        self.document.blocks = self.layout.blocks()
        logger.debug(f"Content emitted ({len(markup)} characters, {len(self.layout)} pages)")

    # ------------------------------------------------------------------
    # Notifications
    def notify_content_changed(self, page_index: int) -> Optional[str]:
        """
        Report an edit on page ``page_index``.

        Returns:
            Emitted markup when pagination ran and changed the page set
        """
        self.scheduler.notify_content_changed(page_index)
        return self._maybe_paginate()

    def notify_pages_changed(self) -> Optional[str]:
        self.scheduler.notify_pages_changed()
        return self._maybe_paginate()

    def paginate(self) -> Optional[str]:
        """
        Drain pending pagination work in receipt order.

        Returns:
            Emitted markup, or None when nothing changed

        Raises:
            LayoutError: If pagination does not converge within the tick bound
        """
        try:
            return self.scheduler.run_until_idle()
        finally:
            self.document.blocks = self.layout.blocks()

    def _maybe_paginate(self) -> Optional[str]:
        return self.paginate() if self.auto_paginate else None

    # ------------------------------------------------------------------
    # Content
    @property
    def settings(self) -> PageSettings:
        return self.document.settings

    @property
    def page_count(self) -> int:
        return len(self.layout)

    @property
    def last_emitted(self) -> Optional[str]:
        return self._emitted

    def get_current_markup(self) -> str:
        """Canonical serialization of the document as currently paginated."""
        return self.layout.to_markup()

    def character_count(self) -> int:
        return self.document.character_count()

    def word_count(self) -> int:
        return self.document.word_count()

    def find_node(self, node_id: str) -> Optional[Node]:
        for block in self.layout.blocks():
            node = block.find(node_id)
            if node is not None:
                return node
        return None

    def replace_content(self, markup: str) -> Optional[str]:
        """
        Replace the whole document content.

        All pages are discarded; one page hosts the new blocks and pagination
        runs from there.
        """
        return self._load(parse_markup(markup))

    def insert_block(self, page_index: int, node: Node, position: Optional[int] = None) -> Optional[str]:
        """Insert a block into a page (at ``position``, default the end) and repaginate."""
        page = self.layout[page_index]
        page.nodes.insert(len(page.nodes) if position is None else position, node)
        return self.notify_content_changed(page_index)

    def remove_block(self, node_id: str) -> Optional[str]:
        """Remove a top-level block from its page and repaginate."""
        index = self.layout.page_index_of(node_id)
        if index is None:
            raise LayoutError("Block is not hosted by any page", node_id)
        page = self.layout[index]
        page.nodes[:] = [node for node in page.nodes if not node.contains(node_id)]
        if self._selection is not None and self.find_node(self._selection.node_id) is None:
            self._selection = None
        return self.notify_content_changed(index)

    def _load(self, blocks: List[Node]) -> Optional[str]:
        self._selection = None
        self.document.blocks = list(blocks)
        self.scheduler.replace_content(blocks)
        return self._maybe_paginate()

    # ------------------------------------------------------------------
    # Settings
    def apply_settings_update(self, update: Union[PageSettings, Mapping[str, Any]]) -> PageSettings:
        """
        Replace or update the page settings and repaginate.

        Args:
            update: Complete PageSettings, or a mapping of changed fields
                (attribute names or the editor's camelCase keys)

        Returns:
            The settings now in effect

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        if isinstance(update, PageSettings):
            update.validate()
            settings = update
        else:
            settings = self.document.settings.updated(update)
        self.document.settings = settings
        if isinstance(self.oracle, TextMetricsOracle):
            self.oracle.settings = settings
        logger.info("Page settings updated")
        self.notify_pages_changed()
        return settings

    # ------------------------------------------------------------------
    # Import / export
    def import_docx(self, data: bytes) -> str:
        """
        Import a DOCX package, replacing the document.

        Settings found in the package are merged over the current settings.
        On failure the session is left untouched.

        Raises:
            MalformedPackage: If the package cannot be read
        """
        try:
            result = DocxImporter(self.options).parse(data)
        except MalformedPackage:
            logger.error("DOCX import failed, keeping the current document")
            raise
        if result.settings is not None:
            imported = {
                key: value for key, value in result.settings.to_dict().items()
                if key not in _IMPORT_KEPT_SETTINGS
            }
            self.document.settings = self.document.settings.updated(imported)
            if isinstance(self.oracle, TextMetricsOracle):
                self.oracle.settings = self.document.settings
        self.replace_content(result.markup)
        return self.get_current_markup()

    def export_docx(self) -> bytes:
        return DocxExporter(self.options).export(self.get_current_markup(), self.document.settings)

    def import_odt(self, data: bytes) -> str:
        """
        Import an ODT package, replacing the document content.

        Raises:
            MalformedPackage: If the package cannot be read
        """
        try:
            markup = OdtImporter(self.options).parse(data)
        except MalformedPackage:
            logger.error("ODT import failed, keeping the current document")
            raise
        self.replace_content(markup)
        return self.get_current_markup()

    def export_odt(self) -> bytes:
        return OdtExporter(self.options).export(self.get_current_markup(), self.document.settings)

    def export_pdf(self, title: Optional[str] = None) -> bytes:
        return PdfExporter(self.options).export(self.layout, self.document.settings, title=title)
