"""Quote highlight composer.

Large translucent quotation mark, the quote (or body text) in italics, and
the title as a right-aligned attribution.
"""

from goround.schemas.carousel_schema import Slide
from goround.schemas.font_schema import FontSettings
from goround.svg_engine.composers.base import BaseComposer, FieldBinding, RenderedLayout
from goround.svg_engine.markup import add_labeled_text, add_text, add_text_block


class QuoteHighlightComposer(BaseComposer):
    """Compose a quote slide."""

    def compose(self, slide: Slide, width: float, height: float, fonts: FontSettings) -> RenderedLayout:
        unit = self.base_unit(width, height)
        padding = unit * 0.1
        quote_size = unit * 0.05
        mark_size = unit * 0.15
        inset = unit * 0.02
        bindings: list[FieldBinding] = []

        background = self.background(slide, width, height, bindings)

        # 1. Decorative quotation mark
        parts = [add_text(
            "“",
            left=padding,
            top=height * 0.25,
            font_name="Georgia",
            font_size=mark_size,
            font_color=slide.accent_color,
            element_id="accent-element",
            fallback_family="serif",
            opacity="0.3",
        )]
        bindings.append(FieldBinding("accent_color", "accent-element", "fill"))

        # 2. Quote text
        source = "quote" if slide.quote else "body_text" if slide.body_text else None
        if source:
            parts.append(add_text_block(
                getattr(slide, source),
                left=padding + inset,
                top=height * 0.3,
                width=width - padding * 2 - inset * 2,
                height=height * 0.4,
                font_name=fonts.accent_font,
                font_size=quote_size,
                font_color=slide.font_color,
                element_id="quote-text",
                italic=True,
                line_height=1.5,
                fallback_family="serif",
            ))
            bindings.append(FieldBinding(source, "quote-text"))

        # 3. Attribution
        if slide.title:
            parts.append(add_labeled_text(
                "— ",
                slide.title,
                left=width - padding,
                top=height * 0.8,
                font_name=fonts.body_font,
                font_size=quote_size * 0.6,
                font_color=slide.accent_color,
                element_id="attribution",
                alignment="right",
            ))
            bindings.append(FieldBinding("title", "attribution-text"))

        return RenderedLayout(self.assemble([background, self.content_group(parts)]), bindings)
