from .codec import decode, encode, encode_bytes, generate_slide_filename
from .composers import resolve_variant, render_layout
from .figma_import import parse_external_svg
from .markup import contrast_color, escape_xml, hex_to_rgb

__all__ = [
    "encode",
    "encode_bytes",
    "decode",
    "generate_slide_filename",
    "resolve_variant",
    "render_layout",
    "parse_external_svg",
    "contrast_color",
    "escape_xml",
    "hex_to_rgb",
]
