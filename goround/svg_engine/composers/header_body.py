"""Header/body composer, the default layout.

Centered bold title, a short accent bar, then centered body text.
"""

from goround.schemas.carousel_schema import Slide
from goround.schemas.font_schema import FontSettings
from goround.svg_engine.composers.base import BaseComposer, FieldBinding, RenderedLayout
from goround.svg_engine.markup import add_rect, add_text, add_text_block


class HeaderBodyComposer(BaseComposer):
    """Compose a header/body slide."""

    def compose(self, slide: Slide, width: float, height: float, fonts: FontSettings) -> RenderedLayout:
        unit = self.base_unit(width, height)
        padding = unit * 0.08
        title_size = unit * 0.1
        body_size = unit * 0.04
        bindings: list[FieldBinding] = []

        background = self.background(slide, width, height, bindings)
        parts = []

        if slide.title:
            parts.append(add_text(
                slide.title,
                left=width / 2,
                top=height * 0.35,
                font_name=fonts.heading_font,
                font_size=title_size,
                font_color=slide.font_color,
                element_id="title-text",
                bold=True,
                alignment="center",
            ))
            bindings.append(FieldBinding("title", "title-text"))
            bindings.append(FieldBinding("font_color", "title-text", "fill"))

        bar_width = unit * 0.1
        parts.append(add_rect(
            width / 2 - bar_width / 2,
            height * 0.42,
            bar_width,
            unit * 0.004,
            fill=slide.accent_color,
            element_id="accent-element",
        ))
        bindings.append(FieldBinding("accent_color", "accent-element", "fill"))

        if slide.body_text:
            parts.append(add_text_block(
                slide.body_text,
                left=padding,
                top=height * 0.48,
                width=width - padding * 2,
                height=height * 0.4,
                font_name=fonts.body_font,
                font_size=body_size,
                font_color=slide.font_color,
                element_id="body-text",
                alignment="center",
            ))
            bindings.append(FieldBinding("body_text", "body-text"))

        return RenderedLayout(self.assemble([background, self.content_group(parts)]), bindings)
