"""
DOCX codec.

Reads and writes WordprocessingML packages in memory.
"""

from .exporter import DocxExporter
from .importer import DocxImporter, DocxPartReader, ImportResult, read_block_style, read_run_style
from .relationships import RelationshipEntry, RelationshipTable
from .wordml import MediaRegistry, WordMLWriter

__all__ = [
    "DocxExporter",
    "DocxImporter",
    "DocxPartReader",
    "ImportResult",
    "MediaRegistry",
    "RelationshipEntry",
    "RelationshipTable",
    "WordMLWriter",
    "read_block_style",
    "read_run_style",
]
