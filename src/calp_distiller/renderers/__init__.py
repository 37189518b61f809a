"""Renderers for synthesized page content."""

from .fonts import FontHandle, RenderContext, resolve_font
from .placeholder_renderer import PlaceholderRenderer
from .text_layout import PlacedLine, TextBlock, draw_lines, find_urls, layout_blocks

__all__ = [
    "FontHandle",
    "PlacedLine",
    "PlaceholderRenderer",
    "RenderContext",
    "TextBlock",
    "draw_lines",
    "find_urls",
    "layout_blocks",
    "resolve_font",
]
