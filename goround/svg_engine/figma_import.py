"""Turn externally authored SVG documents into CustomLayout templates.

The document's markup becomes the layout's HTML template (inline SVG), with
slide fields and colors replaced by ``{{placeholder}}`` tokens:

1. Documents exported by goround carry a metadata block; its field ->
   element table says exactly which elements and attributes to replace.
2. Otherwise element ids (which design tools derive from layer names) are
   matched against field names, e.g. ``Title``, ``body-text``,
   ``{{quote}}``, ``Background``, ``accent_bar``.
3. Tokens the designer already typed into text (``{{title}}``) are kept.

Fonts and a color palette are collected along the way.
"""

import logging
import re
from collections import Counter
from typing import Optional

from lxml import etree

from goround.errors import NotReconstructibleError
from goround.schemas.carousel_schema import COLOR_FIELDS, TEXT_FIELDS
from goround.schemas.layout_schema import CustomLayout
from goround.svg_engine.markup import GOROUND_NS, SVG_NS

logger = logging.getLogger(__name__)

_G = f"{{{GOROUND_NS}}}"

_TOKEN_RE = re.compile(r"\{\{\s*([a-zA-Z_]+)\s*\}\}")
_STYLE_FONT_RE = re.compile(r"font-family\s*:\s*([^;}\"]+)")
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

_GENERIC_FAMILIES = {"serif", "sans-serif", "monospace", "cursive", "fantasy", "system-ui"}

# Normalized element id -> slide field
_FIELD_ALIASES = {
    "title": "title",
    "heading": "title",
    "headline": "title",
    "attribution": "title",
    "subtitle": "subtitle",
    "subheading": "subtitle",
    "body": "body_text",
    "body_text": "body_text",
    "description": "body_text",
    "callout": "body_text",
    "quote": "quote",
}

_COLOR_ALIASES = {
    "background": "background_color",
    "bg": "background_color",
    "accent": "accent_color",
    "accent_element": "accent_color",
    "accent_bar": "accent_color",
}

DEFAULT_CSS = "svg { display: block; width: 100%; height: 100%; }"


# -----------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------


def _normalize_id(element_id: str) -> str:
    name = re.sub(r"[^a-z0-9]+", "_", element_id.lower()).strip("_")
    if name.endswith("_text") and name != "body_text":
        name = name[: -len("_text")]
    return name


def _normalize_color(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = value.strip()
    if not _HEX_RE.match(value):
        return None
    digits = value[1:].lower()
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits}"


def _first_family(value: str) -> Optional[str]:
    family = value.split(",")[0].strip().strip("'\"").strip()
    if not family or family.lower() in _GENERIC_FAMILIES or "{{" in family:
        return None
    return family


def _set_placeholder_text(element: etree._Element, field: str) -> None:
    """Replace an element's content with a single ``{{field}}`` token."""
    for child in list(element):
        element.remove(child)
    element.text = f"{{{{{field}}}}}"


def _paint_attr(element: etree._Element) -> Optional[str]:
    """The attribute carrying the element's visible color."""
    for attr in ("fill", "stroke"):
        if _normalize_color(element.get(attr)):
            return attr
    return None


class _Findings:
    """Mutable accumulator for what the import detects in one document."""

    def __init__(self):
        self.fields: dict[str, str] = {}
        self.colors: dict[str, str] = {}
        self.palette: Counter[str] = Counter()
        self.fonts: list[str] = []

    def add_font(self, family: Optional[str]) -> None:
        if family and family not in self.fonts:
            self.fonts.append(family)


# -----------------------------------------------------------------------
# Detection passes
# -----------------------------------------------------------------------


def _apply_metadata(root: etree._Element, block: etree._Element, found: _Findings) -> None:
    """Use a goround metadata block's mapping table."""
    known = set(TEXT_FIELDS + COLOR_FIELDS)
    for var in block.iter(f"{_G}var"):
        name, element_id = var.get("name"), var.get("element")
        if name not in known or not element_id or name in found.fields:
            continue
        matches = root.xpath("//*[@id=$id]", id=element_id)
        if not matches:
            continue
        element = matches[0]
        attr = var.get("attr")
        if attr:
            color = _normalize_color(element.get(attr))
            if color:
                found.colors[name] = color
            element.set(attr, f"{{{{{name}}}}}")
        else:
            if element.tag == f"{{{SVG_NS}}}g":
                texts = [t for t in element.iter(f"{{{SVG_NS}}}text")]
                if texts:
                    _set_placeholder_text(texts[0], name)
                    for extra in texts[1:]:
                        extra.getparent().remove(extra)
            else:
                _set_placeholder_text(element, name)
        found.fields[name] = element_id


def _apply_element_ids(root: etree._Element, found: _Findings) -> None:
    """Match element ids (layer names) against field and color names."""
    text_fill: Optional[str] = None
    for element in list(root.iter()):
        if not isinstance(element.tag, str):
            continue
        element_id = element.get("id")
        if not element_id:
            continue
        key = _normalize_id(element_id)

        field = _FIELD_ALIASES.get(key)
        if field and field not in found.fields:
            fill = _normalize_color(element.get("fill"))
            if fill and text_fill is None:
                text_fill = fill
                found.colors.setdefault("font_color", fill)
            if fill and fill == text_fill:
                element.set("fill", "{{font_color}}")
            _set_placeholder_text(element, field)
            found.fields[field] = element_id
            continue

        color_field = _COLOR_ALIASES.get(key) or ("accent_color" if key.startswith("accent") else None)
        if color_field and color_field not in found.colors:
            attr = _paint_attr(element)
            if attr:
                found.colors[color_field] = _normalize_color(element.get(attr))
                element.set(attr, f"{{{{{color_field}}}}}")
                found.fields[color_field] = element_id


def _collect_tokens(root: etree._Element, found: _Findings) -> None:
    """Record ``{{field}}`` tokens already present in text or attributes."""
    known = set(TEXT_FIELDS + COLOR_FIELDS)
    for element in root.iter():
        if not isinstance(element.tag, str):
            continue
        values = [element.text or ""] + list(element.attrib.values())
        for value in values:
            for token in _TOKEN_RE.findall(value):
                if token in known:
                    found.fields.setdefault(token, element.get("id") or element.tag)


def _collect_fonts_and_palette(root: etree._Element, found: _Findings) -> None:
    for element in root.iter():
        if not isinstance(element.tag, str):
            continue
        family = element.get("font-family")
        if family:
            found.add_font(_first_family(family))
        style = element.get("style") or ""
        if element.tag.endswith("}style") or element.tag == "style":
            style += " " + (element.text or "")
        for match in _STYLE_FONT_RE.findall(style):
            found.add_font(_first_family(match))
        for attr in ("fill", "stroke", "stop-color"):
            color = _normalize_color(element.get(attr))
            if color:
                found.palette[color] += 1


# -----------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------


def parse_external_svg(content: str | bytes, name: str, max_palette: int = 8) -> CustomLayout:
    """Build a CustomLayout candidate from one SVG document.

    Raises:
        NotReconstructibleError: The document is not well-formed XML or its
            root is not an ``<svg>`` element.
    """
    if isinstance(content, str):
        raw = content.encode("utf-8")
        original = content
    else:
        raw = content
        original = content.decode("utf-8", errors="replace")

    parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)
    try:
        root = etree.fromstring(raw, parser=parser)
    except etree.XMLSyntaxError as e:
        raise NotReconstructibleError(f"{name}: not a well-formed SVG document", cause=e)
    if root is None or etree.QName(root).localname != "svg":
        raise NotReconstructibleError(f"{name}: root element is not <svg>")

    found = _Findings()
    # Fonts and palette come from the untouched document.
    _collect_fonts_and_palette(root, found)

    block = root.find(f".//{_G}slide")
    if block is not None:
        _apply_metadata(root, block, found)
        metadata = block.getparent()
        container = metadata if etree.QName(metadata).localname == "metadata" else block
        container.getparent().remove(container)
    _apply_element_ids(root, found)
    _collect_tokens(root, found)

    if not found.fields:
        logger.warning(f"{name}: no placeholders or named layers detected, importing as a static layout")

    # Scale with the frame it is rendered into.
    if root.get("viewBox") is None and root.get("width") and root.get("height"):
        root.set("viewBox", f"0 0 {root.get('width')} {root.get('height')}")
    root.set("width", "100%")
    root.set("height", "100%")

    detected_colors = dict(found.colors)
    role_colors = set(detected_colors.values())
    extras = [c for c, _ in found.palette.most_common() if c not in role_colors]
    for i, color in enumerate(extras[:max_palette], start=1):
        detected_colors[f"color_{i}"] = color

    fields = ", ".join(sorted(found.fields)) or "none"
    return CustomLayout(
        name=name,
        description=f"Imported from {name}.svg (fields: {fields})",
        html_template=etree.tostring(root, encoding="unicode"),
        css_template=DEFAULT_CSS,
        is_from_figma=True,
        original_svg=original,
        detected_fonts=found.fonts,
        detected_colors=detected_colors,
    )
