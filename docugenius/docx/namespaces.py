"""WordprocessingML namespaces, part names, content types and relationship types."""

from __future__ import annotations

NS = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "wp": "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "pic": "http://schemas.openxmlformats.org/drawingml/2006/picture",
    "v": "urn:schemas-microsoft-com:vml",
    "mc": "http://schemas.openxmlformats.org/markup-compatibility/2006",
}

PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
XML_NS = "http://www.w3.org/XML/1998/namespace"

PICTURE_URI = NS["pic"]

# Part names
DOCUMENT_PART = "word/document.xml"
STYLES_PART = "word/styles.xml"
NUMBERING_PART = "word/numbering.xml"
HEADER_PART = "word/header1.xml"
FOOTER_PART = "word/footer1.xml"
ROOT_RELS_PART = "_rels/.rels"
CONTENT_TYPES_PART = "[Content_Types].xml"

# Relationship types
_RT = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
RT_OFFICE_DOCUMENT = f"{_RT}/officeDocument"
RT_STYLES = f"{_RT}/styles"
RT_NUMBERING = f"{_RT}/numbering"
RT_HEADER = f"{_RT}/header"
RT_FOOTER = f"{_RT}/footer"
RT_IMAGE = f"{_RT}/image"

# Content types
CT_RELATIONSHIPS = "application/vnd.openxmlformats-package.relationships+xml"
CT_XML = "application/xml"
CT_DOCUMENT = "application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"
CT_STYLES = "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"
CT_NUMBERING = "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"
CT_HEADER = "application/vnd.openxmlformats-officedocument.wordprocessingml.header+xml"
CT_FOOTER = "application/vnd.openxmlformats-officedocument.wordprocessingml.footer+xml"


def qn(tag: str) -> str:
    """
    Expand a prefixed tag name to Clark notation.

    Args:
        tag: Name such as ``"w:p"``

    Returns:
        ``"{namespace}p"``
    """
    prefix, local = tag.split(":", 1)
    return f"{{{NS[prefix]}}}{local}"


def local_name(tag) -> str:
    """Strip the namespace from an element tag (comments and PIs yield "")."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]
