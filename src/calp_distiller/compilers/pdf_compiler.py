"""PDF Compiler for laying out a publication's pages as one PDF.

Places every content unit on its own A4 page using PyMuPDF: scanned and
synthesized images are scaled to fit and centered, missing pages are set
as text with a clickable source URL, and a colophon closes the document.
"""

import logging
import re
from pathlib import Path

import fitz  # PyMuPDF

from calp_distiller.renderers import (
    PlaceholderRenderer,
    RenderContext,
    TextBlock,
    draw_lines,
    layout_blocks,
)
from schemas.content import DeferredTextPage, PageSequence, RasterPage
from schemas.publication import Publication

from .compiler import Compiler, EmptyPublicationError, ImageDecodeError

logger = logging.getLogger(__name__)

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_filename(title: str, fallback: str = "publication") -> str:
    """Turn a publication title into a safe file name stem.

    Characters that are invalid in file names are replaced with "-",
    the "»" separator used by the archive is removed, and surrounding
    whitespace and dots are trimmed.
    """
    name = INVALID_FILENAME_CHARS.sub("-", title).replace("»", "")
    name = " ".join(name.split()).strip(" .")
    return name or fallback


def fit_rect(
    image_width: int, image_height: int, page_width: float, page_height: float
) -> fitz.Rect:
    """Scale an image uniformly to fit the page and center it.

    Returns:
        Rectangle the image occupies on the page
    """
    ratio = min(page_width / image_width, page_height / image_height)
    width = image_width * ratio
    height = image_height * ratio
    x = (page_width - width) / 2
    y = (page_height - height) / 2
    return fitz.Rect(x, y, x + width, y + height)


class PDFCompiler(Compiler):
    """Compile a publication's content units into a single PDF.

    The PDFCompiler:
    1. Adds one A4 page per content unit, in sequence order
       a. RasterPage: decodes the image and draws it scaled to fit, centered
       b. DeferredTextPage: draws the missing-page notice and a linked URL
    2. Appends the colophon page with every URL linked (optional)
    3. Saves to a temporary file and renames it to
       ``{output_dir}/{sanitized title}.pdf``

    An image that cannot be decoded aborts the publication with
    ImageDecodeError; no partial PDF is left behind.

    Attributes:
        context: Shared fonts and page geometry
        renderer: Provides the text of missing-page notices
        output_dir: Directory receiving finished PDFs
        include_colophon: Whether to append the colophon page
        colophon_lines: Static colophon text; the publication URL follows
    """

    def __init__(
        self,
        context: RenderContext,
        renderer: PlaceholderRenderer,
        output_dir: Path,
        include_colophon: bool = True,
        colophon_lines: list[str] | None = None,
    ):
        self.context = context
        self.renderer = renderer
        self.output_dir = output_dir
        self.include_colophon = include_colophon
        self.colophon_lines = list(colophon_lines or [])
        self._written: dict[Path, str] = {}

    def output_path(self, publication: Publication) -> Path:
        """Location of the PDF for a publication.

        A title whose file name was already written for another
        publication in this run gets the folder name appended, so
        publications sharing a title never overwrite each other.
        """
        stem = sanitize_filename(publication.title, fallback=publication.slug)
        path = self.output_dir / f"{stem}.pdf"
        owner = self._written.get(path)
        if owner is not None and owner != publication.url:
            path = self.output_dir / f"{stem} ({publication.slug}).pdf"
        return path

    def compile(self, sequence: PageSequence) -> Path:
        """Lay out and write the PDF of one publication.

        Args:
            sequence: Assembled content units

        Returns:
            Path of the written PDF

        Raises:
            EmptyPublicationError: If the sequence has no content units
            ImageDecodeError: If a page image cannot be decoded
        """
        publication = sequence.publication
        if sequence.is_empty:
            raise EmptyPublicationError(
                f"Publication {publication.title} has no pages: {publication.url}"
            )

        pdf_path = self.output_path(publication)
        pdf_path.parent.mkdir(parents=True, exist_ok=True)
        partial_path = pdf_path.with_name(pdf_path.name + ".part")

        doc = fitz.open()
        try:
            for unit in sequence.units:
                if isinstance(unit, RasterPage):
                    self._add_raster_page(doc, unit)
                elif isinstance(unit, DeferredTextPage):
                    self._add_text_page(doc, unit)

            if self.include_colophon:
                self._add_colophon(doc, publication)

            page_count = len(doc)
            try:
                doc.save(str(partial_path), garbage=3, deflate=True)
                partial_path.replace(pdf_path)
                self._written[pdf_path] = publication.url
            finally:
                partial_path.unlink(missing_ok=True)
        finally:
            doc.close()

        logger.debug(f"Wrote {page_count} pages to {pdf_path}")
        return pdf_path

    def _new_page(self, doc: fitz.Document) -> fitz.Page:
        return doc.new_page(
            width=self.context.page_width, height=self.context.page_height
        )

    def _add_raster_page(self, doc: fitz.Document, unit: RasterPage) -> None:
        """Draw an image scaled to fit and centered on a new page."""
        try:
            pixmap = fitz.Pixmap(str(unit.path))
        except Exception as e:
            raise ImageDecodeError(unit.path, str(e)) from e

        if pixmap.width <= 0 or pixmap.height <= 0:
            raise ImageDecodeError(unit.path, "image has no pixels")

        page = self._new_page(doc)
        rect = fit_rect(
            pixmap.width,
            pixmap.height,
            self.context.page_width,
            self.context.page_height,
        )
        page.insert_image(rect, pixmap=pixmap)

    def _add_text_page(self, doc: fitz.Document, unit: DeferredTextPage) -> None:
        """Set a missing-page notice as text with a linked URL."""
        page = self._new_page(doc)
        blocks = self.renderer.missing_page_blocks(unit.index, unit.url)
        draw_lines(page, layout_blocks(blocks, self.context), self.context)

    def _add_colophon(self, doc: fitz.Document, publication: Publication) -> None:
        """Append the colophon; every URL in it becomes a link."""
        page = self._new_page(doc)
        size = self.context.url_size
        blocks = [
            TextBlock(line, size, gap_after=size / 2) for line in self.colophon_lines
        ]
        blocks.append(TextBlock(publication.url, size))
        draw_lines(page, layout_blocks(blocks, self.context), self.context)
