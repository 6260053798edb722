"""Layout variant registry.

Resolves a slide's ``layout_type`` string into a tagged variant:

- ``BuiltinVariant`` for one of the LayoutType values,
- ``CustomVariant`` for ``custom-<id>`` when that CustomLayout exists,
- ``FallbackVariant`` for anything else (unknown ids, deleted custom
  layouts). It renders with the default built-in layout while the
  requested identifier is kept for the document metadata.

Use render_layout() to go from a slide to markup in one call.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Union

from goround.schemas.carousel_schema import CUSTOM_LAYOUT_PREFIX, DEFAULT_LAYOUT, LayoutType, Slide
from goround.schemas.font_schema import FontSettings
from goround.schemas.layout_schema import CustomLayout

from .base import BaseComposer, FieldBinding, RenderedLayout
from .dictionary_entry import DictionaryEntryComposer
from .bold_callout import BoldCalloutComposer
from .header_body import HeaderBodyComposer
from .quote_highlight import QuoteHighlightComposer
from .minimalist_focus import MinimalistFocusComposer
from .custom import CustomLayoutComposer

logger = logging.getLogger(__name__)

# Built-in composers are stateless, so one instance each is fine.
COMPOSERS: dict[LayoutType, BaseComposer] = {
    LayoutType.DICTIONARY_ENTRY: DictionaryEntryComposer(),
    LayoutType.BOLD_CALLOUT: BoldCalloutComposer(),
    LayoutType.HEADER_BODY: HeaderBodyComposer(),
    LayoutType.QUOTE_HIGHLIGHT: QuoteHighlightComposer(),
    LayoutType.MINIMALIST_FOCUS: MinimalistFocusComposer(),
}


@dataclass(frozen=True)
class BuiltinVariant:
    tag: LayoutType


@dataclass(frozen=True)
class CustomVariant:
    layout: CustomLayout


@dataclass(frozen=True)
class FallbackVariant:
    requested: str
    default: LayoutType = DEFAULT_LAYOUT


LayoutVariant = Union[BuiltinVariant, CustomVariant, FallbackVariant]


def resolve_variant(layout_type: str | None, custom_layouts: Iterable[CustomLayout] = ()) -> LayoutVariant:
    """Map a ``layout_type`` string to its variant. Never raises."""
    layout_type = layout_type or ""
    try:
        return BuiltinVariant(LayoutType(layout_type))
    except ValueError:
        pass

    if layout_type.startswith(CUSTOM_LAYOUT_PREFIX):
        layout_id = layout_type[len(CUSTOM_LAYOUT_PREFIX):]
        for layout in custom_layouts:
            if layout.id == layout_id:
                return CustomVariant(layout)

    logger.debug(f"No layout for '{layout_type}', using {DEFAULT_LAYOUT.value}")
    return FallbackVariant(layout_type)


def get_composer(variant: LayoutVariant) -> BaseComposer:
    """Look up the composer that renders a variant."""
    if isinstance(variant, BuiltinVariant):
        return COMPOSERS[variant.tag]
    if isinstance(variant, CustomVariant):
        return CustomLayoutComposer(variant.layout)
    return COMPOSERS[variant.default]


def render_layout(
    slide: Slide,
    width: float,
    height: float,
    fonts: FontSettings,
    custom_layouts: Iterable[CustomLayout] = (),
) -> RenderedLayout:
    """Resolve the slide's layout and render it."""
    variant = resolve_variant(slide.layout_type, custom_layouts)
    return get_composer(variant).compose(slide, width, height, fonts)


__all__ = [
    "BaseComposer",
    "FieldBinding",
    "RenderedLayout",
    "DictionaryEntryComposer",
    "BoldCalloutComposer",
    "HeaderBodyComposer",
    "QuoteHighlightComposer",
    "MinimalistFocusComposer",
    "CustomLayoutComposer",
    "BuiltinVariant",
    "CustomVariant",
    "FallbackVariant",
    "LayoutVariant",
    "resolve_variant",
    "get_composer",
    "render_layout",
    "COMPOSERS",
]
