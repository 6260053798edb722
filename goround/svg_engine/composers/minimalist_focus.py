"""Minimalist focus composer.

A thin vertical accent bar with the title and body text set beside it.
"""

from goround.schemas.carousel_schema import Slide
from goround.schemas.font_schema import FontSettings
from goround.svg_engine.composers.base import BaseComposer, FieldBinding, RenderedLayout
from goround.svg_engine.markup import add_rect, add_text, add_text_block


class MinimalistFocusComposer(BaseComposer):
    """Compose a minimalist focus slide."""

    def compose(self, slide: Slide, width: float, height: float, fonts: FontSettings) -> RenderedLayout:
        unit = self.base_unit(width, height)
        padding = unit * 0.1
        title_size = unit * 0.06
        body_size = unit * 0.035
        gap = unit * 0.02
        bindings: list[FieldBinding] = []

        background = self.background(slide, width, height, bindings)

        parts = [add_rect(
            padding,
            height * 0.4,
            unit * 0.004,
            height * 0.2,
            fill=slide.accent_color,
            element_id="accent-element",
        )]
        bindings.append(FieldBinding("accent_color", "accent-element", "fill"))

        if slide.title:
            parts.append(add_text(
                slide.title,
                left=padding + gap,
                top=height * 0.45,
                font_name=fonts.heading_font,
                font_size=title_size,
                font_color=slide.font_color,
                element_id="title-text",
                bold=True,
            ))
            bindings.append(FieldBinding("title", "title-text"))
            bindings.append(FieldBinding("font_color", "title-text", "fill"))

        if slide.body_text:
            parts.append(add_text_block(
                slide.body_text,
                left=padding + gap,
                top=height * 0.5,
                width=width - padding * 2 - gap,
                height=height * 0.3,
                font_name=fonts.body_font,
                font_size=body_size,
                font_color=slide.font_color,
                element_id="body-text",
            ))
            bindings.append(FieldBinding("body_text", "body-text"))

        return RenderedLayout(self.assemble([background, self.content_group(parts)]), bindings)
