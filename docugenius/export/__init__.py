"""
Export module for DocuGenius.

PDF output for a paginated document.
"""

from .pdf import FlowableBuilder, PdfExporter

__all__ = ["FlowableBuilder", "PdfExporter"]
