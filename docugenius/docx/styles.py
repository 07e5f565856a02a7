"""
Styles and numbering parts.

Export writes a fixed style sheet: document defaults (font, size and the
first-line indent), the Normal style, Heading1-6, the two list paragraph
styles and a table grid, plus a numbering part with one bullet and one
decimal list. Import reads back heading levels, list kinds and the
first-line indent.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from lxml import etree

from ..config import EditorOptions
from ..models.settings import PageSettings
from ..utils.units import TWIPS_PER_POINT, mm_to_twips, parse_number, pt_to_half_points, twips_to_mm
from .namespaces import NS, qn

logger = logging.getLogger(__name__)

HEADING_SIZES_PT = {1: 24, 2: 18, 3: 14, 4: 12, 5: 10, 6: 8}
BULLET_STYLE = "ListBullet"
NUMBER_STYLE = "ListNumber"
BULLET_NUM_ID = "1"
NUMBER_NUM_ID = "2"
LIST_INDENT_TWIPS = 720
LIST_HANGING_TWIPS = 360

_HEADING_RE = re.compile(r"^heading\s*([1-6])$", re.IGNORECASE)


def _set(element: etree._Element, **attributes: str) -> etree._Element:
    for name, value in attributes.items():
        element.set(qn(f"w:{name}"), str(value))
    return element


def _sub(parent: etree._Element, tag: str, **attributes: str) -> etree._Element:
    return _set(etree.SubElement(parent, qn(tag)), **attributes)


def _style(root: etree._Element, style_id: str, name: str, kind: str = "paragraph",
           based_on: Optional[str] = "Normal") -> etree._Element:
    style = _sub(root, "w:style", type=kind, styleId=style_id)
    _sub(style, "w:name", val=name)
    if based_on:
        _sub(style, "w:basedOn", val=based_on)
    return style


def build_styles_xml(settings: PageSettings, options: Optional[EditorOptions] = None) -> etree._Element:
    """
    Build the ``word/styles.xml`` root.

    Args:
        settings: Page settings (the first-line indent goes into the paragraph defaults)
        options: Editor options (default font and size)

    Returns:
        ``w:styles`` element
    """
    options = options or EditorOptions()
    root = etree.Element(qn("w:styles"), nsmap={"w": NS["w"]})

    defaults = _sub(root, "w:docDefaults")
    run_defaults = _sub(_sub(defaults, "w:rPrDefault"), "w:rPr")
    family = options.default_font_family
    _sub(run_defaults, "w:rFonts", ascii=family, hAnsi=family, cs=family, eastAsia=family)
    _sub(run_defaults, "w:sz", val=pt_to_half_points(options.default_font_size_pt))
    paragraph_defaults = _sub(_sub(defaults, "w:pPrDefault"), "w:pPr")
    if settings.first_line_indent:
        _sub(paragraph_defaults, "w:ind", firstLine=mm_to_twips(settings.first_line_indent))

    normal = _style(root, "Normal", "Normal", based_on=None)
    _set(normal, default="1")
    _sub(normal, "w:qFormat")

    for level, size in HEADING_SIZES_PT.items():
        heading = _style(root, f"Heading{level}", f"heading {level}")
        _sub(heading, "w:next", val="Normal")
        _sub(heading, "w:qFormat")
        paragraph = _sub(heading, "w:pPr")
        _sub(paragraph, "w:keepNext")
        _sub(paragraph, "w:spacing", before=240, after=60)
        _sub(paragraph, "w:outlineLvl", val=level - 1)
        run = _sub(heading, "w:rPr")
        _sub(run, "w:b")
        _sub(run, "w:sz", val=pt_to_half_points(size))

    for style_id, name, num_id in ((BULLET_STYLE, "List Bullet", BULLET_NUM_ID),
                                   (NUMBER_STYLE, "List Number", NUMBER_NUM_ID)):
        list_style = _style(root, style_id, name)
        paragraph = _sub(list_style, "w:pPr")
        numbering = _sub(paragraph, "w:numPr")
        _sub(numbering, "w:numId", val=num_id)
        _sub(paragraph, "w:ind", left=LIST_INDENT_TWIPS, hanging=LIST_HANGING_TWIPS)

    table = _style(root, "TableGrid", "Table Grid", kind="table", based_on=None)
    borders = _sub(_sub(table, "w:tblPr"), "w:tblBorders")
    for side in ("top", "left", "bottom", "right", "insideH", "insideV"):
        _sub(borders, f"w:{side}", val="single", sz=4, space=0, color="auto")
    return root


def build_numbering_xml() -> etree._Element:
    """Build ``word/numbering.xml`` with a bullet list (numId 1) and a decimal list (numId 2)."""
    root = etree.Element(qn("w:numbering"), nsmap={"w": NS["w"]})
    for abstract_id, (fmt, text) in enumerate((("bullet", "•"), ("decimal", "%1."))):
        abstract = _sub(root, "w:abstractNum", abstractNumId=abstract_id)
        _sub(abstract, "w:multiLevelType", val="singleLevel")
        level = _sub(abstract, "w:lvl", ilvl=0)
        _sub(level, "w:start", val=1)
        _sub(level, "w:numFmt", val=fmt)
        _sub(level, "w:lvlText", val=text)
        _sub(level, "w:lvlJc", val="left")
        _sub(_sub(level, "w:pPr"), "w:ind", left=LIST_INDENT_TWIPS, hanging=LIST_HANGING_TWIPS)
    for num_id, abstract_id in ((BULLET_NUM_ID, 0), (NUMBER_NUM_ID, 1)):
        _sub(_sub(root, "w:num", numId=num_id), "w:abstractNumId", val=abstract_id)
    return root


# ----------------------------------------------------------------------
# Import side
def heading_level(style_id: Optional[str], style_names: Optional[Dict[str, str]] = None) -> Optional[int]:
    """
    Heading level of a paragraph style.

    Args:
        style_id: ``w:pStyle/@w:val``
        style_names: Style id -> display name, from the styles part

    Returns:
        1-6, or None for non-heading styles
    """
    if not style_id:
        return None
    if style_id.lower() == "title":
        return 1
    for candidate in (style_id, (style_names or {}).get(style_id, "")):
        match = _HEADING_RE.match(candidate.strip())
        if match:
            return int(match.group(1))
    return None


def style_names(styles_root: Optional[etree._Element]) -> Dict[str, str]:
    names: Dict[str, str] = {}
    if styles_root is None:
        return names
    for style in styles_root.iter(qn("w:style")):
        name = style.find(qn("w:name"))
        style_id = style.get(qn("w:styleId"))
        if style_id and name is not None:
            names[style_id] = name.get(qn("w:val"), "")
    return names


def first_line_indent(styles_root: Optional[etree._Element]) -> float:
    """First-line indent (mm) from the paragraph defaults, 0 when absent."""
    if styles_root is None:
        return 0.0
    indent = styles_root.find(f"{qn('w:docDefaults')}/{qn('w:pPrDefault')}/{qn('w:pPr')}/{qn('w:ind')}")
    if indent is None:
        return 0.0
    return twips_to_mm(indent.get(qn("w:firstLine")), default=0.0)


def ordered_lists(numbering_root: Optional[etree._Element]) -> Dict[str, bool]:
    """Map numId -> True for numbered lists, False for bullets."""
    result: Dict[str, bool] = {}
    if numbering_root is None:
        return result
    abstract_formats: Dict[str, str] = {}
    for abstract in numbering_root.iter(qn("w:abstractNum")):
        fmt = abstract.find(f"{qn('w:lvl')}/{qn('w:numFmt')}")
        abstract_formats[abstract.get(qn("w:abstractNumId"), "")] = (
            fmt.get(qn("w:val"), "bullet") if fmt is not None else "bullet"
        )
    for num in numbering_root.iter(qn("w:num")):
        abstract_ref = num.find(qn("w:abstractNumId"))
        if abstract_ref is None:
            continue
        fmt = abstract_formats.get(abstract_ref.get(qn("w:val"), ""), "bullet")
        result[num.get(qn("w:numId"), "")] = fmt not in ("bullet", "none")
    return result


def twips_to_css_pt(value: Optional[str]) -> Optional[str]:
    """Twips attribute -> CSS point length (``"18pt"``)."""
    number = parse_number(value)
    if number is None:
        return None
    points = int(number) / TWIPS_PER_POINT
    return f"{points:g}pt"
