"""Bold callout composer.

Centers the body text (or the title when there is no body) in large bold
lines, one ``<text>`` per line of input.
"""

from goround.schemas.carousel_schema import Slide
from goround.schemas.font_schema import FontSettings
from goround.svg_engine.composers.base import BaseComposer, FieldBinding, RenderedLayout
from goround.svg_engine.markup import add_group, add_text


class BoldCalloutComposer(BaseComposer):
    """Compose a bold callout slide."""

    def compose(self, slide: Slide, width: float, height: float, fonts: FontSettings) -> RenderedLayout:
        unit = self.base_unit(width, height)
        text_size = unit * 0.06
        bindings: list[FieldBinding] = []

        background = self.background(slide, width, height, bindings)

        source = "body_text" if slide.body_text else "title" if slide.title else None
        if source is None:
            return RenderedLayout(self.assemble([background, self.content_group([])]), bindings)

        lines = getattr(slide, source).split("\n")
        line_height = text_size * 1.4
        start_y = (height - len(lines) * line_height) / 2 + text_size

        texts = [
            add_text(
                line,
                left=width / 2,
                top=start_y + i * line_height,
                font_name=fonts.heading_font,
                font_size=text_size,
                font_color=slide.font_color,
                element_id=f"callout-line-{i}",
                bold=True,
                alignment="center",
            )
            for i, line in enumerate(lines)
        ]
        bindings.append(FieldBinding(source, "callout-text"))
        bindings.append(FieldBinding("font_color", "callout-line-0", "fill"))

        group = add_group(texts, element_id="callout-text")
        return RenderedLayout(self.assemble([background, self.content_group([group])]), bindings)
