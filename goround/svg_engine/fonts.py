"""Font-face CSS for embedding fonts into exported documents."""

import logging
from typing import Iterable

from goround.schemas.font_schema import CustomFont, FontSettings

logger = logging.getLogger(__name__)


def generate_font_face_css(font: CustomFont) -> str:
    """Inline ``@font-face`` declaration for a custom font."""
    return (
        "@font-face {\n"
        f"  font-family: '{font.family}';\n"
        f"  src: url('{font.base64_data}') format('{font.format.css_format}');\n"
        "  font-display: swap;\n"
        "}"
    )


def generate_embedded_font_css(settings: FontSettings, custom_fonts: Iterable[CustomFont]) -> str:
    """CSS for the fonts the active settings reference.

    Custom fonts used by a role are embedded inline. External (Google)
    families are only annotated; fetching and re-encoding them is not done
    here. Fonts no role references are skipped, so orphaned uploads never
    affect output.
    """
    used = set(settings.used_families())
    css = ""

    for font in custom_fonts:
        if font.family in used:
            css += generate_font_face_css(font) + "\n"

    for family in settings.google_fonts:
        if family in used:
            css += f"/* Google Font: {family} - Load via CSS link */\n"

    return css
