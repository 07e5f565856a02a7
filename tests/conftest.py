"""
Pytest configuration for DocuGenius
"""

import base64
import io
import logging
import sys
import zipfile

import pytest
from PIL import Image


W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

ROOT_RELS = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId1" '
    'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" '
    'Target="word/document.xml"/>'
    '</Relationships>'
)


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(name)s - %(levelname)s - %(message)s'))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def png_bytes():
    """A small 40x20 PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), "red").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_data_uri(png_bytes):
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


def make_document_xml(body: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:document xmlns:w="{W_NS}" xmlns:r="{R_NS}" '
        'xmlns:wp="http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing" '
        'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
        'xmlns:pic="http://schemas.openxmlformats.org/drawingml/2006/picture">'
        f'<w:body>{body}</w:body></w:document>'
    )


def make_relationships(entries) -> str:
    """``entries``: iterable of (id, type suffix, target)."""
    items = "".join(
        f'<Relationship Id="{rel_id}" Type="{R_NS}/{rel_type}" Target="{target}"/>'
        for rel_id, rel_type, target in entries
    )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">{items}</Relationships>'
    )


def build_package(parts) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, content in parts.items():
            archive.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def docx_factory():
    """
    Build an in-memory DOCX package.

    Usage: ``docx_factory(body_xml, relationships=[...], parts={...}, styles=...)``.
    """

    def factory(body, relationships=(), parts=None, styles=None, numbering=None, root_rels=True):
        package = {"word/document.xml": make_document_xml(body)}
        if root_rels:
            package["_rels/.rels"] = ROOT_RELS
        entries = list(relationships)
        if styles is not None:
            package["word/styles.xml"] = styles
            entries.append(("rIdStyles", "styles", "styles.xml"))
        if numbering is not None:
            package["word/numbering.xml"] = numbering
            entries.append(("rIdNumbering", "numbering", "numbering.xml"))
        if entries:
            package["word/_rels/document.xml.rels"] = make_relationships(entries)
        package.update(parts or {})
        return build_package(package)

    return factory


@pytest.fixture
def zip_factory():
    return build_package
