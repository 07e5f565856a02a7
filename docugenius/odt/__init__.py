"""
ODT codec.

OpenDocument Text import and export for the editor's markup.
"""

from .codec import MIMETYPE, OdtExporter, OdtImporter

__all__ = ["MIMETYPE", "OdtExporter", "OdtImporter"]
