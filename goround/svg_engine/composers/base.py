"""Base composer providing shared geometry and binding helpers.

All layout composers inherit from BaseComposer and implement compose() to
build their markup. Every geometric quantity a built-in composer emits is
a fraction of the slide width, height or ``min(width, height)``, so
rendering at twice the size doubles every coordinate and font size.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from goround.schemas.carousel_schema import Slide
from goround.schemas.font_schema import FontSettings
from goround.svg_engine.markup import add_background

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldBinding:
    """Where a slide field lives in the rendered document."""

    name: str
    element: str
    attr: Optional[str] = None


@dataclass
class RenderedLayout:
    """Layout markup plus the field bindings it actually emitted."""

    markup: str
    bindings: list[FieldBinding] = field(default_factory=list)

    def bound_fields(self) -> set[str]:
        return {b.name for b in self.bindings}


class BaseComposer(ABC):
    """Abstract base for all layout composers.

    Subclasses implement compose() for one layout. Optional text fields
    (title, subtitle, body_text, quote) are omitted from the markup when
    empty; a composer never fails because a field is missing.
    """

    @abstractmethod
    def compose(
        self,
        slide: Slide,
        width: float,
        height: float,
        fonts: FontSettings,
    ) -> RenderedLayout:
        """Build the layout markup.

        Args:
            slide: The slide to render.
            width, height: Document size in px.
            fonts: Active font settings.
        """
        ...

    # ------------------------------------------------------------------
    # Shared pieces
    # ------------------------------------------------------------------

    @staticmethod
    def base_unit(width: float, height: float) -> float:
        """The length every proportional size is derived from."""
        return min(width, height)

    @staticmethod
    def background(slide: Slide, width: float, height: float, bindings: list[FieldBinding]) -> str:
        bindings.append(FieldBinding("background_color", "background", "fill"))
        return add_background(width, height, slide.background_color)

    @staticmethod
    def content_group(parts: list[str]) -> str:
        body = "\n".join(f"      {part}" for part in parts if part)
        return f'<g id="content">\n{body}\n    </g>'

    @staticmethod
    def assemble(parts: list[str]) -> str:
        return "\n\n    ".join(part for part in parts if part)
