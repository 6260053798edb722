"""Document codec: slides to SVG documents and back.

encode() renders a slide through the layout registry and wraps it in an SVG
document with embedded font CSS and, optionally, a ``goround`` metadata
block. The metadata block records the layout id, carousel id, slide number
and a field -> element mapping table; decode() uses it to read each field
fresh from the (possibly hand-edited) document. Fields a layout does not
render are stored in the table as literal values.

Encoding is deterministic: the same slide, preset, font settings and font
set always produce byte-identical output.
"""

import logging
from typing import Iterable, Optional

from lxml import etree

from goround.errors import NotReconstructibleError
from goround.schemas.carousel_schema import COLOR_FIELDS, TEXT_FIELDS, Slide
from goround.schemas.export_schema import DecodedSlide, ExportPreset
from goround.schemas.font_schema import CustomFont, FontSettings
from goround.schemas.layout_schema import CustomLayout
from goround.svg_engine.composers import FieldBinding, RenderedLayout, render_layout
from goround.svg_engine.fonts import generate_embedded_font_css
from goround.svg_engine.markup import GOROUND_NS, SVG_NS, XLINK_NS, escape_attr, escape_xml
from goround.utils.file_utils import sanitize_name

logger = logging.getLogger(__name__)

_G = f"{{{GOROUND_NS}}}"
_SVG_GROUP = f"{{{SVG_NS}}}g"
_SVG_TEXT = f"{{{SVG_NS}}}text"

# Element ids the built-in layouts use; decode() falls back to these when a
# document has no metadata block.
WELL_KNOWN_BINDINGS: tuple[FieldBinding, ...] = (
    FieldBinding("title", "title-text"),
    FieldBinding("title", "attribution-text"),
    FieldBinding("subtitle", "subtitle-text"),
    FieldBinding("body_text", "body-text"),
    FieldBinding("body_text", "callout-text"),
    FieldBinding("quote", "quote-text"),
    FieldBinding("background_color", "background", "fill"),
    FieldBinding("font_color", "title-text", "fill"),
    FieldBinding("accent_color", "accent-element", "fill"),
    FieldBinding("accent_color", "accent-element", "stroke"),
)


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------


def generate_metadata(slide: Slide, rendered: RenderedLayout) -> str:
    """Metadata block for re-importing the slide.

    Every non-None field gets one ``goround:var`` entry: bound fields point
    at their element (and attribute), unbound ones carry the value itself.
    """
    first_binding: dict[str, FieldBinding] = {}
    for binding in rendered.bindings:
        first_binding.setdefault(binding.name, binding)

    variables = []
    for name in TEXT_FIELDS + COLOR_FIELDS:
        value = getattr(slide, name)
        if value is None:
            continue
        binding = first_binding.get(name)
        if binding is not None:
            attr = f' attr="{binding.attr}"' if binding.attr else ""
            variables.append(f'<goround:var name="{name}" element="{binding.element}"{attr}/>')
        else:
            variables.append(f'<goround:var name="{name}" value="{escape_attr(value)}"/>')

    var_lines = "\n        ".join(variables)
    return f"""
  <metadata>
    <goround:slide>
      <goround:layout>{escape_xml(slide.layout_type)}</goround:layout>
      <goround:carousel_id>{escape_xml(slide.carousel_id)}</goround:carousel_id>
      <goround:slide_number>{slide.slide_number}</goround:slide_number>
      <goround:variables>
        {var_lines}
      </goround:variables>
    </goround:slide>
  </metadata>"""


def encode(
    slide: Slide,
    preset: ExportPreset,
    font_settings: FontSettings,
    custom_fonts: Iterable[CustomFont] = (),
    custom_layouts: Iterable[CustomLayout] = (),
    include_metadata: bool = True,
) -> str:
    """Generate a complete SVG document for a slide.

    Args:
        slide: The slide to render.
        preset: Target geometry; becomes the root width/height/viewBox.
        font_settings: Active heading/body/accent fonts.
        custom_fonts: Uploaded fonts; those the settings use are embedded.
        custom_layouts: Known custom layouts for ``custom-<id>`` references.
        include_metadata: Append the goround metadata block.
    """
    width, height = preset.width, preset.height
    font_css = generate_embedded_font_css(font_settings, custom_fonts)
    rendered = render_layout(slide, width, height, font_settings, list(custom_layouts))
    metadata = generate_metadata(slide, rendered) if include_metadata else ""

    return f"""<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="{SVG_NS}"
     xmlns:xlink="{XLINK_NS}"
     xmlns:goround="{GOROUND_NS}"
     width="{width}" height="{height}"
     viewBox="0 0 {width} {height}">

  <defs>
    <style type="text/css">
      <![CDATA[
        {font_css}

        /* Default styles */
        text {{
          dominant-baseline: hanging;
        }}
      ]]>
    </style>
  </defs>
{metadata}

    {rendered.markup}

</svg>
"""


def encode_bytes(*args, **kwargs) -> bytes:
    """encode() as UTF-8 bytes."""
    return encode(*args, **kwargs).encode("utf-8")


def generate_slide_filename(slide: Slide, carousel_name: str, format: str = "svg") -> str:
    """``<carousel>-slide-<NNN>.<format>`` with the carousel name sanitized."""
    return f"{sanitize_name(carousel_name)}-slide-{slide.slide_number:03d}.{format}"


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------


def _parse(document: str | bytes) -> etree._Element:
    if isinstance(document, str):
        document = document.encode("utf-8")
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(document, parser=parser)
    except etree.XMLSyntaxError as e:
        raise NotReconstructibleError("Document is not well-formed XML", cause=e)
    if root is None:
        raise NotReconstructibleError("Document is empty")
    return root


def _find_by_id(root: etree._Element, element_id: str) -> Optional[etree._Element]:
    matches = root.xpath("//*[@id=$id]", id=element_id)
    return matches[0] if matches else None


def _read_text(element: etree._Element) -> str:
    """Text content of an element; groups join their text lines with newlines."""
    if element.tag == _SVG_GROUP:
        return "\n".join(_read_text(child) for child in element.iter(_SVG_TEXT))
    return etree.tostring(element, method="text", encoding="unicode", with_tail=False)


def _read_binding(root: etree._Element, element_id: str, attr: Optional[str]) -> Optional[str]:
    element = _find_by_id(root, element_id)
    if element is None:
        return None
    if attr:
        return element.get(attr)
    return _read_text(element)


def _decode_with_metadata(root: etree._Element, block: etree._Element) -> DecodedSlide:
    decoded = DecodedSlide(has_metadata=True)
    decoded.layout_type = block.findtext(f"{_G}layout")
    decoded.carousel_id = block.findtext(f"{_G}carousel_id")

    number_text = (block.findtext(f"{_G}slide_number") or "").strip()
    try:
        decoded.slide_number = int(number_text)
    except ValueError:
        logger.warning(f"Unreadable slide number in metadata: {number_text!r}")

    known = set(TEXT_FIELDS + COLOR_FIELDS)
    for var in block.iter(f"{_G}var"):
        name = var.get("name")
        if name not in known:
            continue
        value = None
        if var.get("element"):
            value = _read_binding(root, var.get("element"), var.get("attr"))
        if value is None:
            value = var.get("value")
        setattr(decoded, name, value)
    return decoded


def _decode_best_effort(root: etree._Element) -> DecodedSlide:
    decoded = DecodedSlide(has_metadata=False)
    found = False
    for binding in WELL_KNOWN_BINDINGS:
        if getattr(decoded, binding.name) is not None:
            continue
        value = _read_binding(root, binding.element, binding.attr)
        if value is not None:
            setattr(decoded, binding.name, value)
            found = True
    if not found:
        raise NotReconstructibleError(
            "Document has no goround metadata block and no recognizable slide elements"
        )
    return decoded


def decode(document: str | bytes) -> DecodedSlide:
    """Recover slide fields from an SVG document.

    Mapped elements are read fresh, so external edits to their content are
    picked up. Without a metadata block the well-known element ids are
    tried; if none match, NotReconstructibleError is raised.
    """
    root = _parse(document)
    block = root.find(f".//{_G}slide")
    if block is not None:
        return _decode_with_metadata(root, block)
    logger.debug("No goround metadata block, matching element ids")
    return _decode_best_effort(root)


__all__ = [
    "encode",
    "encode_bytes",
    "decode",
    "generate_metadata",
    "generate_slide_filename",
    "WELL_KNOWN_BINDINGS",
]
