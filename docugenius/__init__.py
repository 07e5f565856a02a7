"""
DocuGenius - paginated rich-text document core.

This package provides the headless core of a paginated document editor:

- Document model: node tree, run/block styles and page settings
- Markup: the editor's tagged HTML form of a document (parse/serialize)
- Pagination: fixed-height page boxes balanced by a two-pass engine
- DOCX and ODT codecs working on in-memory packages
- PDF output of a paginated document
- EditingSession tying the pieces together

Main Components:
- EditingSession: Session controller and pagination host
- PaginationEngine / PaginationScheduler: Page balancing
- DocxImporter / DocxExporter: WordprocessingML codec
- OdtImporter / OdtExporter: OpenDocument Text codec
- PdfExporter: reportlab based PDF writer
"""

from .exceptions import (
    ConfigurationError,
    DocuGeniusError,
    LayoutError,
    MalformedPackage,
    OverflowUnresolvable,
    UnsupportedEmbed,
)
from .config import EditorOptions
from .models import Document, Node, NodeKind, PageSettings
from .markup import normalize_markup, parse_markup, serialize_nodes
from .pagination import (
    PageLayout,
    PaginationEngine,
    PaginationHost,
    PaginationScheduler,
    Selection,
    StaticHeightOracle,
    TextMetricsOracle,
)
from .docx import DocxExporter, DocxImporter, ImportResult
from .odt import OdtExporter, OdtImporter
from .export import PdfExporter
from .session import EditingSession

__version__ = "1.0.0"
__author__ = "DocuGenius Team"

__all__ = [
    "DocuGeniusError",
    "MalformedPackage",
    "UnsupportedEmbed",
    "OverflowUnresolvable",
    "LayoutError",
    "ConfigurationError",
    "EditorOptions",
    "Document",
    "Node",
    "NodeKind",
    "PageSettings",
    "normalize_markup",
    "parse_markup",
    "serialize_nodes",
    "PageLayout",
    "PaginationEngine",
    "PaginationHost",
    "PaginationScheduler",
    "Selection",
    "StaticHeightOracle",
    "TextMetricsOracle",
    "DocxExporter",
    "DocxImporter",
    "ImportResult",
    "OdtExporter",
    "OdtImporter",
    "PdfExporter",
    "EditingSession",
]
