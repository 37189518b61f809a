"""Placeholder pages for pages the archive does not have.

A placeholder names the missing page and the URL it was expected at.
It is either rasterized to an A4-sized PNG, so it can be placed like any
scanned page, or kept as text blocks that the PDF compiler draws directly
onto the output page with a clickable URL.
"""

import logging
from pathlib import Path

import fitz  # PyMuPDF

from schemas.content import RasterPage
from schemas.publication import Publication, page_token

from .fonts import RenderContext
from .text_layout import TextBlock, draw_lines, layout_blocks

logger = logging.getLogger(__name__)

DEFAULT_MISSING_PAGE_MESSAGE = "Stránka {index} nebyla v archivu nalezena."
DEFAULT_EMPTY_PUBLICATION_MESSAGE = "Publikace '{title}' neobsahuje žádné listy."


class PlaceholderRenderer:
    """Synthesize stand-in pages for missing page indices.

    The PlaceholderRenderer:
    1. Builds two text blocks: the localized notice and the source URL
    2. Lays them out centered on an A4 page using the shared RenderContext
    3. Either rasterizes the page to a 595x842 PNG in the work directory,
       or returns the blocks for the PDF compiler to draw as text

    Rendering the same index and URL twice yields the same blocks.

    Attributes:
        context: Shared fonts and page geometry
        missing_page_message: Notice template, formatted with ``index``
        empty_publication_message: Notice template, formatted with ``title``
        extension: Extension used when constructing the source URL
    """

    def __init__(
        self,
        context: RenderContext,
        missing_page_message: str = DEFAULT_MISSING_PAGE_MESSAGE,
        empty_publication_message: str = DEFAULT_EMPTY_PUBLICATION_MESSAGE,
        extension: str = ".gif",
    ) -> None:
        self.context = context
        self.missing_page_message = missing_page_message
        self.empty_publication_message = empty_publication_message
        self.extension = extension

    def source_url(self, publication: Publication, index: int) -> str:
        """URL the page at *index* was expected at."""
        return publication.page_url(page_token(index), self.extension)

    def missing_page_blocks(self, index: int, url: str) -> list[TextBlock]:
        """Text blocks describing a missing page."""
        return [
            TextBlock(
                self.missing_page_message.format(index=index),
                self.context.message_size,
                gap_after=self.context.message_size,
            ),
            TextBlock(f"URL: {url}", self.context.url_size),
        ]

    def render_missing_page(
        self, publication: Publication, index: int, work_dir: Path
    ) -> RasterPage:
        """Rasterize a placeholder for a missing page.

        Args:
            publication: Publication the page belongs to
            index: Missing page index
            work_dir: Publication work directory receiving the PNG

        Returns:
            RasterPage pointing at the synthesized image
        """
        url = self.source_url(publication, index)
        output_path = work_dir / f"{page_token(index)}_missing.png"
        self._rasterize(self.missing_page_blocks(index, url), output_path)
        logger.debug(f"Rendered placeholder for page {index} of {publication.slug}")
        return RasterPage(index=index, path=output_path, synthesized=True)

    def render_empty_publication(
        self, publication: Publication, work_dir: Path
    ) -> RasterPage:
        """Rasterize a notice that a publication has no pages at all."""
        blocks = [
            TextBlock(
                self.empty_publication_message.format(title=publication.title),
                self.context.message_size,
                gap_after=self.context.message_size,
            ),
            TextBlock(f"URL: {publication.url}", self.context.url_size),
        ]
        output_path = work_dir / "empty-document.png"
        self._rasterize(blocks, output_path)
        return RasterPage(index=0, path=output_path, synthesized=True)

    def _rasterize(self, blocks: list[TextBlock], output_path: Path) -> Path:
        """Draw blocks on a blank page and save it as PNG at 72 DPI."""
        output_path.parent.mkdir(parents=True, exist_ok=True)

        doc = fitz.open()
        try:
            page = doc.new_page(
                width=self.context.page_width, height=self.context.page_height
            )
            page.draw_rect(page.rect, color=None, fill=self.context.background)
            draw_lines(
                page, layout_blocks(blocks, self.context), self.context, with_links=False
            )
            pix = page.get_pixmap()
            pix.save(str(output_path))
        finally:
            doc.close()

        return output_path
