"""Centered, word-wrapped text layout with clickable URLs.

Generated pages (missing-page notices, the colophon) are laid out as a
stack of text blocks centered on the page both ways. Every URL found in
the text becomes a link region covering exactly the URL's glyphs.
"""

import re
from dataclasses import dataclass, field

import fitz  # PyMuPDF

from .fonts import FontHandle, RenderContext

URL_PATTERN = re.compile(r"https?://[^\s<>\"']+")

LINE_SPACING = 1.25


@dataclass(frozen=True)
class TextBlock:
    """A paragraph of text drawn at a single font size.

    Attributes:
        text: Paragraph text; wrapped to the page width
        fontsize: Font size in points
        gap_after: Vertical space below the block, in points
    """

    text: str
    fontsize: float
    gap_after: float = 0


@dataclass
class PlacedLine:
    """A wrapped line with its position on the page.

    Attributes:
        text: Line text
        fontsize: Font size in points
        rect: Bounding box of the line
        links: (rect, uri) pairs for every URL on the line
    """

    text: str
    fontsize: float
    rect: fitz.Rect
    links: list[tuple[fitz.Rect, str]] = field(default_factory=list)


def find_urls(text: str) -> list[str]:
    """Return every URL substring of *text*, in order."""
    return URL_PATTERN.findall(text)


def _tokenize(text: str) -> list[tuple[str, str | None]]:
    """Split text into words, tagging each word that is a URL."""
    tokens: list[tuple[str, str | None]] = []
    for word in text.split():
        match = URL_PATTERN.search(word)
        tokens.append((word, match.group(0) if match else None))
    return tokens


def _split_long_word(
    word: str, font: FontHandle, fontsize: float, width: float
) -> list[str]:
    pieces: list[str] = []
    current = ""
    for char in word:
        if current and font.text_length(current + char, fontsize) > width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def wrap_words(
    text: str, font: FontHandle, fontsize: float, width: float
) -> list[list[tuple[str, str | None]]]:
    """Greedily wrap text into lines no wider than *width*.

    Words wider than a whole line (long URLs) are broken between
    characters; every piece keeps the link of the word it came from.

    Returns:
        Lines as lists of (word, link) pairs
    """
    lines: list[list[tuple[str, str | None]]] = []
    current: list[tuple[str, str | None]] = []
    space = font.text_length(" ", fontsize)
    current_width = 0.0

    for word, link in _tokenize(text):
        pieces = [word]
        if font.text_length(word, fontsize) > width:
            pieces = _split_long_word(word, font, fontsize, width)

        for piece in pieces:
            piece_width = font.text_length(piece, fontsize)
            needed = piece_width if not current else current_width + space + piece_width
            if current and needed > width:
                lines.append(current)
                current = []
                needed = piece_width
            current.append((piece, link))
            current_width = needed

    if current:
        lines.append(current)
    return lines


def wrap_text(text: str, font: FontHandle, fontsize: float, width: float) -> list[str]:
    """Wrap text and return the plain line strings."""
    return [
        " ".join(word for word, _ in line)
        for line in wrap_words(text, font, fontsize, width)
    ]


def layout_blocks(blocks: list[TextBlock], context: RenderContext) -> list[PlacedLine]:
    """Place text blocks as one group centered on the page.

    Each line is centered horizontally; the whole stack of blocks is
    centered vertically.

    Args:
        blocks: Blocks in top-to-bottom order
        context: Rendering context providing the font and page size

    Returns:
        Placed lines in drawing order
    """
    font = context.font
    page = context.page_rect
    width = page.width - 2 * context.margin

    wrapped = [
        (block, wrap_words(block.text, font, block.fontsize, width)) for block in blocks
    ]

    total_height = 0.0
    for index, (block, lines) in enumerate(wrapped):
        total_height += len(lines) * block.fontsize * LINE_SPACING
        if index < len(wrapped) - 1:
            total_height += block.gap_after

    y = page.y0 + max(0.0, (page.height - total_height) / 2)
    space = font.text_length(" ", 1)
    placed: list[PlacedLine] = []

    for block, lines in wrapped:
        line_height = block.fontsize * LINE_SPACING
        for words in lines:
            text = " ".join(word for word, _ in words)
            line_width = font.text_length(text, block.fontsize)
            x0 = page.x0 + (page.width - line_width) / 2
            rect = fitz.Rect(x0, y, x0 + line_width, y + line_height)

            links: list[tuple[fitz.Rect, str]] = []
            cursor = x0
            for position, (word, link) in enumerate(words):
                if position:
                    cursor += space * block.fontsize
                word_width = font.text_length(word, block.fontsize)
                if link is not None:
                    links.append(
                        (fitz.Rect(cursor, y, cursor + word_width, y + line_height), link)
                    )
                cursor += word_width

            placed.append(PlacedLine(text, block.fontsize, rect, links))
            y += line_height
        y += block.gap_after

    return placed


def draw_lines(
    page: fitz.Page,
    lines: list[PlacedLine],
    context: RenderContext,
    with_links: bool = True,
) -> int:
    """Draw placed lines onto a page.

    Args:
        page: Target page
        lines: Output of layout_blocks
        context: Rendering context
        with_links: Add URI link annotations over URLs

    Returns:
        Number of links inserted
    """
    inserted = 0
    for line in lines:
        leading = (line.rect.height - line.fontsize) / 2
        baseline = fitz.Point(line.rect.x0, line.rect.y0 + leading + line.fontsize * 0.8)
        context.font.insert_text(
            page, baseline, line.text, line.fontsize, context.text_color
        )
        if not with_links:
            continue
        for rect, uri in line.links:
            page.insert_link({"kind": fitz.LINK_URI, "from": rect, "uri": uri})
            inserted += 1
    return inserted
