"""Dictionary entry composer.

Title as the headword, an italic accent-colored subtitle beneath it, a
full-width accent rule, then the body text as the definition.
"""

from goround.schemas.carousel_schema import Slide
from goround.schemas.font_schema import FontSettings
from goround.svg_engine.composers.base import BaseComposer, FieldBinding, RenderedLayout
from goround.svg_engine.markup import add_line, add_text, add_text_block


class DictionaryEntryComposer(BaseComposer):
    """Compose a dictionary-entry slide."""

    def compose(self, slide: Slide, width: float, height: float, fonts: FontSettings) -> RenderedLayout:
        unit = self.base_unit(width, height)
        padding = unit * 0.06
        title_size = unit * 0.08
        body_size = unit * 0.035
        subtitle_size = unit * 0.025
        bindings: list[FieldBinding] = []

        background = self.background(slide, width, height, bindings)
        parts = []

        # 1. Headword
        if slide.title:
            parts.append(add_text(
                slide.title,
                left=padding,
                top=padding + title_size,
                font_name=fonts.heading_font,
                font_size=title_size,
                font_color=slide.font_color,
                element_id="title-text",
                bold=True,
            ))
            bindings.append(FieldBinding("title", "title-text"))
            bindings.append(FieldBinding("font_color", "title-text", "fill"))

        # 2. Part-of-speech style subtitle
        if slide.subtitle:
            parts.append(add_text(
                slide.subtitle,
                left=padding,
                top=padding + title_size + subtitle_size + unit * 0.01,
                font_name=fonts.body_font,
                font_size=subtitle_size,
                font_color=slide.accent_color,
                element_id="subtitle-text",
                italic=True,
            ))
            bindings.append(FieldBinding("subtitle", "subtitle-text"))

        # 3. Accent rule
        rule_y = padding + title_size + subtitle_size + unit * 0.03
        parts.append(add_line(
            padding, rule_y, width - padding, rule_y,
            color=slide.accent_color,
            width=unit * 0.002,
            element_id="accent-element",
        ))
        bindings.append(FieldBinding("accent_color", "accent-element", "stroke"))

        # 4. Definition
        if slide.body_text:
            parts.append(add_text_block(
                slide.body_text,
                left=padding,
                top=padding + title_size + subtitle_size + unit * 0.05,
                width=width - padding * 2,
                height=height - padding * 2 - title_size - subtitle_size - unit * 0.06,
                font_name=fonts.body_font,
                font_size=body_size,
                font_color=slide.font_color,
                element_id="body-text",
            ))
            bindings.append(FieldBinding("body_text", "body-text"))

        return RenderedLayout(self.assemble([background, self.content_group(parts)]), bindings)
