"""SVG markup primitives.

Provides escaping, color helpers, number formatting and element builders
for rectangles, lines, text runs and XHTML text blocks. Builders return
markup strings; composers concatenate them into a layout.
"""

import logging
import re

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XHTML_NS = "http://www.w3.org/1999/xhtml"
GOROUND_NS = "https://goround.dev/schema"

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)

_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


# ---------------------------------------------------------------------------
# Escaping and formatting
# ---------------------------------------------------------------------------


def escape_xml(text: str) -> str:
    """Escape the five reserved markup characters and carriage returns.

    ``&`` is replaced first so already-produced entities are not re-escaped.
    A literal ``\r`` would be folded into ``\n`` by XML end-of-line handling,
    so it is written as a character reference.
    """
    for char, entity in _XML_ESCAPES:
        text = text.replace(char, entity)
    return text.replace("\r", "&#13;")


def escape_attr(text: str) -> str:
    """Escape a value for a double-quoted attribute, keeping line breaks and tabs.

    XML parsers normalize literal whitespace characters in attribute values
    to spaces, so they are written as character references.
    """
    return (
        escape_xml(text)
        .replace("\n", "&#10;")
        .replace("\t", "&#9;")
    )


def fmt(value: float) -> str:
    """Format a coordinate with at most three decimals and no trailing zeros."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


# ---------------------------------------------------------------------------
# Color helpers
# ---------------------------------------------------------------------------


def hex_to_rgb(hex_color: str) -> tuple[int, int, int] | None:
    """Convert '#rrggbb' (or 'rrggbb') to an (r, g, b) tuple. None if malformed."""
    match = _HEX_RE.match(hex_color.strip()) if hex_color else None
    if not match:
        return None
    return tuple(int(group, 16) for group in match.groups())


def luminance(hex_color: str) -> float | None:
    """Perceived luminance in [0, 1] using the 0.299/0.587/0.114 weights."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return None
    r, g, b = rgb
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def contrast_color(bg_color: str) -> str:
    """Black on light backgrounds, white on dark ones (and on unparseable input)."""
    value = luminance(bg_color)
    if value is None:
        return "#ffffff"
    return "#000000" if value > 0.5 else "#ffffff"


# ---------------------------------------------------------------------------
# Element builders
# ---------------------------------------------------------------------------


def _attrs(**attributes) -> str:
    """Render keyword attributes; underscores become hyphens, None is skipped."""
    parts = []
    for name, value in attributes.items():
        if value is None:
            continue
        if isinstance(value, float):
            value = fmt(value)
        parts.append(f'{name.rstrip("_").replace("_", "-")}="{escape_attr(str(value))}"')
    return " ".join(parts)


def add_rect(
    left: float,
    top: float,
    width: float,
    height: float,
    fill: str,
    element_id: str | None = None,
    **extra,
) -> str:
    """Add a filled rectangle.

    Args:
        left, top, width, height: Position and size in px.
        fill: Fill color.
        element_id: Optional id used by the metadata field mapping.
    """
    return (
        f"<rect {_attrs(id=element_id, x=float(left), y=float(top), width=float(width), height=float(height), fill=fill, **extra)}/>"
    )


def add_background(width: float, height: float, fill: str) -> str:
    """Full-bleed background rectangle with the well-known ``background`` id."""
    return f"<rect {_attrs(id='background', width=float(width), height=float(height), fill=fill)}/>"


def add_line(
    start_x: float,
    start_y: float,
    end_x: float,
    end_y: float,
    color: str,
    width: float,
    element_id: str | None = None,
) -> str:
    """Add a straight line."""
    return (
        f"<line {_attrs(id=element_id, x1=float(start_x), y1=float(start_y), x2=float(end_x), y2=float(end_y), stroke=color, stroke_width=float(width))}/>"
    )


def add_text(
    text: str,
    left: float,
    top: float,
    font_name: str,
    font_size: float,
    font_color: str,
    element_id: str | None = None,
    bold: bool = False,
    italic: bool = False,
    alignment: str = "left",
    fallback_family: str = "sans-serif",
    **extra,
) -> str:
    """Add a single-line text element.

    Args:
        text: Raw text content; escaped here.
        left, top: Anchor position in px.
        font_name: Font family name.
        font_size: Font size in px.
        font_color: Fill color.
        element_id: Optional id used by the metadata field mapping.
        alignment: "left", "center" or "right" (mapped to text-anchor).
    """
    anchor = {"left": None, "center": "middle", "right": "end"}.get(alignment)
    attrs = _attrs(
        id=element_id,
        x=float(left),
        y=float(top),
        font_family=f"{font_name}, {fallback_family}",
        font_size=float(font_size),
        font_weight="bold" if bold else None,
        font_style="italic" if italic else None,
        text_anchor=anchor,
        fill=font_color,
        **extra,
    )
    return f"<text {attrs}>{escape_xml(text)}</text>"


def add_labeled_text(
    prefix: str,
    text: str,
    left: float,
    top: float,
    font_name: str,
    font_size: float,
    font_color: str,
    element_id: str,
    alignment: str = "left",
) -> str:
    """Text element whose content is ``prefix`` plus a separately addressable run.

    The run carries ``<element_id>-text`` so the prefix is never read back as
    part of the field value.
    """
    anchor = {"left": None, "center": "middle", "right": "end"}.get(alignment)
    attrs = _attrs(
        id=element_id,
        x=float(left),
        y=float(top),
        font_family=f"{font_name}, sans-serif",
        font_size=float(font_size),
        text_anchor=anchor,
        fill=font_color,
    )
    return (
        f"<text {attrs}><tspan>{escape_xml(prefix)}</tspan>"
        f'<tspan id="{element_id}-text">{escape_xml(text)}</tspan></text>'
    )


def add_text_block(
    text: str,
    left: float,
    top: float,
    width: float,
    height: float,
    font_name: str,
    font_size: float,
    font_color: str,
    element_id: str | None = None,
    italic: bool = False,
    alignment: str = "left",
    line_height: float = 1.6,
    fallback_family: str = "sans-serif",
) -> str:
    """Add a wrapping text block (XHTML div inside a foreignObject).

    Line breaks in ``text`` are kept (``white-space: pre-wrap``).
    """
    style = [
        f"font-family: {font_name}, {fallback_family}",
        f"font-size: {fmt(font_size)}px",
        f"color: {font_color}",
        f"line-height: {fmt(line_height)}",
        "white-space: pre-wrap",
        "margin: 0",
    ]
    if italic:
        style.append("font-style: italic")
    if alignment != "left":
        style.append(f"text-align: {alignment}")
    frame = _attrs(x=float(left), y=float(top), width=float(max(width, 0.0)), height=float(max(height, 0.0)))
    div = _attrs(xmlns=XHTML_NS, id=element_id, style="; ".join(style) + ";")
    return f"<foreignObject {frame}><div {div}>{escape_xml(text)}</div></foreignObject>"


def add_group(children: list[str], element_id: str | None = None) -> str:
    """Wrap child markup in a ``<g>`` element."""
    body = "\n      ".join(child for child in children if child)
    return f"<g {_attrs(id=element_id)}>\n      {body}\n    </g>" if element_id else f"<g>\n      {body}\n    </g>"
