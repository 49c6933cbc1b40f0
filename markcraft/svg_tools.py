"""
svg_tools.py — SVG document checks and the export-time monochrome transform.

  is_well_formed_svg(svg)      → True if svg is one complete <svg>…</svg> XML document
  to_monochrome(svg, color)    → same document with every paint set to one flat color

The transform is always applied to the ORIGINAL generated/refined document.
Re-applying it to its own output is allowed but never needed: switching
colors means transforming the stored original again.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from typing import List

from .errors import NoVectorDocumentFound

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# Serialise as <svg xmlns="…"> instead of <ns0:svg xmlns:ns0="…">
ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

_OPEN_TAG_RE = re.compile(r"^<svg[\s>/]", re.IGNORECASE)
_PAINT_REF_RE = re.compile(r"\s*url\(", re.IGNORECASE)

# Paint servers and their containers — a flat color cannot represent them
PAINT_SERVER_TAGS = {"defs", "linearGradient", "radialGradient", "pattern"}
PAINT_ATTRS = ("fill", "stroke")
OPACITY_ATTRS = ("fill-opacity", "stroke-opacity")

MONOCHROME_PRESETS = {
    "black": "#000000",
    "white": "#ffffff",
    "brand": "#6366f1",
}


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def is_well_formed_svg(svg) -> bool:
    """Opening <svg> root tag, closing </svg>, and parseable as XML."""
    if not isinstance(svg, str):
        return False
    text = svg.strip()
    if not _OPEN_TAG_RE.match(text) or not text.endswith("</svg>"):
        return False
    try:
        root = ET.fromstring(text)
    except ET.ParseError:
        return False
    return _local_name(root.tag) == "svg"


def resolve_color(value: str) -> str:
    """Map a preset name (black / white / brand) to its hex value; pass anything else through."""
    key = (value or "").strip()
    return MONOCHROME_PRESETS.get(key.lower(), key)


# ── Monochrome transform ──────────────────────────────────────────────────────

def _strip_paint_servers(root: ET.Element) -> int:
    removed = 0
    for parent in list(root.iter()):
        for child in list(parent):
            if _local_name(child.tag) in PAINT_SERVER_TAGS:
                parent.remove(child)
                removed += 1
    return removed


def _recolor_style(style: str, color: str) -> str:
    """Apply the attribute rules to an inline style="prop: value; …" string."""
    declarations: List[str] = []
    for chunk in style.split(";"):
        if ":" not in chunk:
            continue
        prop, value = (part.strip() for part in chunk.split(":", 1))
        name = prop.lower()
        if name in OPACITY_ATTRS:
            continue
        if name in PAINT_ATTRS and value.lower() != "none":
            value = color
        declarations.append(f"{prop}:{value}")
    return ";".join(declarations)


def to_monochrome(svg: str, color: str) -> str:
    """
    Rewrite every drawable element of ``svg`` to a single color.

    Rules, per element (root included):
      - fill="none"          → element untouched (keeps holes / outline-only shapes),
                               except a url(#…) stroke, whose paint server is gone,
                               which becomes color
      - fill present         → fill = color
      - stroke present       → stroke = color
      - fill-/stroke-opacity → removed (flat recolor implies full opacity)

    Gradient, pattern and <defs> elements are removed first; together with
    the stroke exception above, no url(#…) reference survives in a fill or
    stroke attribute. A fill="none" element keeps its stroke-opacity.

    Raises:
        ValueError: color is empty
        NoVectorDocumentFound: svg is not a parseable <svg> document
    """
    color = (color or "").strip()
    if not color:
        raise ValueError("A color value is required for the monochrome transform")

    try:
        root = ET.fromstring((svg or "").strip())
    except ET.ParseError as exc:
        raise NoVectorDocumentFound(svg or "", f"Cannot parse SVG: {exc}") from exc
    if _local_name(root.tag) != "svg":
        raise NoVectorDocumentFound(svg, "Root element is not <svg>")

    removed = _strip_paint_servers(root)

    for el in root.iter():
        if el.get("fill", "").strip() == "none":
            if _PAINT_REF_RE.match(el.get("stroke", "")):
                el.set("stroke", color)
            continue
        for attr in PAINT_ATTRS:
            if attr in el.attrib:
                el.set(attr, color)
        for attr in OPACITY_ATTRS:
            el.attrib.pop(attr, None)
        style = el.get("style")
        if style is not None:
            recolored = _recolor_style(style, color)
            if recolored:
                el.set("style", recolored)
            else:
                del el.attrib["style"]

    logger.debug("Monochrome %s: removed %d paint server element(s)", color, removed)
    return ET.tostring(root, encoding="unicode")
