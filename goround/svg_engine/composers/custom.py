"""Custom layout composer.

Renders a user-authored CustomLayout by literal ``{{placeholder}}``
substitution across its HTML and CSS templates. Slide text is escaped the
same way the built-in composers escape it; the HTML template is normalized
to well-formed XHTML so the surrounding SVG stays parseable. Elements whose
whole text is one text-field token are bound to that field, so decode() reads
edits to them back.
"""

import logging

from bs4 import BeautifulSoup
from lxml import etree

from goround.schemas.carousel_schema import TEXT_FIELDS, Slide
from goround.schemas.font_schema import FontSettings
from goround.schemas.layout_schema import CustomLayout
from goround.svg_engine.composers.base import BaseComposer, FieldBinding, RenderedLayout
from goround.svg_engine.markup import XHTML_NS, contrast_color, escape_xml, fmt

logger = logging.getLogger(__name__)


def normalize_html(html: str) -> str:
    """Re-serialize an HTML fragment as well-formed markup (void tags closed, attributes quoted).

    Fragments that already parse as XML (such as imported inline SVG) are
    returned unchanged so case-sensitive names like ``viewBox`` survive.
    """
    if not html.strip():
        return ""
    try:
        etree.fromstring(f"<div>{html}</div>")
        return html
    except etree.XMLSyntaxError:
        pass
    soup = BeautifulSoup(html, "html.parser")
    return soup.decode(formatter="minimal")


def setting_values(slide: Slide, fonts: FontSettings) -> dict[str, str]:
    """Placeholder values shared by the HTML and CSS templates."""
    return {
        "background_color": slide.background_color,
        "font_color": slide.font_color,
        "accent_color": slide.accent_color,
        "contrast_color": contrast_color(slide.background_color),
        "heading_font": fonts.heading_font,
        "body_font": fonts.body_font,
        "accent_font": fonts.accent_font,
    }


def bind_text_fields(html: str, fields: list[str]) -> tuple[str, list[FieldBinding]]:
    """Give elements whose whole text is a field token an id, and bind the field to it.

    Only leaf elements whose content is exactly ``{{field}}`` (surrounding
    whitespace aside) are bound; an element keeps its existing id. Each field
    binds to its first such element. Markup that does not parse as XML is
    returned unchanged with no bindings.
    """
    if not html or not fields:
        return html, []
    try:
        wrapper = etree.fromstring(f"<wrapper>{html}</wrapper>")
    except etree.XMLSyntaxError:
        return html, []

    tokens = {f"{{{{{name}}}}}": name for name in fields}
    bindings: list[FieldBinding] = []
    for element in wrapper.iter():
        if element is wrapper or not isinstance(element.tag, str) or len(element):
            continue
        name = tokens.pop((element.text or "").strip(), None)
        if name is None:
            continue
        element.text = f"{{{{{name}}}}}"
        if element.get("id") is None:
            element.set("id", f"custom-{name.replace('_', '-')}")
        bindings.append(FieldBinding(name, element.get("id")))

    if not bindings:
        return html, []
    markup = etree.tostring(wrapper, encoding="unicode")
    return markup[len("<wrapper>"):-len("</wrapper>")], bindings


def substitute(template: str, values: dict[str, str]) -> str:
    for name, value in values.items():
        template = template.replace(f"{{{{{name}}}}}", value)
    return template


class CustomLayoutComposer(BaseComposer):
    """Compose a slide from a CustomLayout's templates."""

    def __init__(self, layout: CustomLayout):
        self.layout = layout

    def compose(self, slide: Slide, width: float, height: float, fonts: FontSettings) -> RenderedLayout:
        settings = setting_values(slide, fonts)
        text_values = {name: escape_xml(getattr(slide, name) or "") for name in TEXT_FIELDS}

        # Empty fields stay unbound so they decode as absent, not as "".
        filled = [name for name in TEXT_FIELDS if getattr(slide, name)]
        html, text_bindings = bind_text_fields(normalize_html(self.layout.html_template), filled)
        html = substitute(html, {**text_values, **settings})
        css = substitute(self.layout.css_template, settings)

        bindings: list[FieldBinding] = []
        background = self.background(slide, width, height, bindings)
        bindings.extend(text_bindings)
        frame = (
            f'<foreignObject x="0" y="0" width="{fmt(width)}" height="{fmt(height)}">\n'
            f'      <div xmlns="{XHTML_NS}">\n'
            f"        <style><![CDATA[{css}]]></style>\n"
            f"        {html}\n"
            f"      </div>\n"
            f"    </foreignObject>"
        )
        logger.debug(f"Rendered custom layout {self.layout.id} for slide {slide.slide_number}")
        return RenderedLayout(self.assemble([background, frame]), bindings)
