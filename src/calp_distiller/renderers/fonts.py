"""Font resolution and the shared rendering context.

Generated pages carry Czech text, so the font used for them has to cover
the full character set of the messages. Fonts are resolved once per run
and handed to every renderer through a RenderContext.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)

SYSTEM_FONT_FILES = [
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
    Path("/usr/share/fonts/dejavu/DejaVuSans.ttf"),
    Path("/usr/share/fonts/TTF/DejaVuSans.ttf"),
    Path("/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf"),
    Path("/usr/share/fonts/liberation-sans/LiberationSans-Regular.ttf"),
    Path("/Library/Fonts/Arial.ttf"),
    Path("/System/Library/Fonts/Supplemental/Arial.ttf"),
    Path("C:/Windows/Fonts/arial.ttf"),
]

BUILTIN_FONT = "helv"
EMBEDDED_FONT_NAME = "calpfont"

A4_WIDTH = 595
A4_HEIGHT = 842


@dataclass(frozen=True)
class FontHandle:
    """A resolved font usable both for measuring and for drawing.

    Attributes:
        name: Font name used when inserting text into a page
        font: PyMuPDF font object used for glyph metrics
        file: Font file to embed, or None for a built-in font
    """

    name: str
    font: fitz.Font
    file: Path | None = None

    def text_length(self, text: str, fontsize: float) -> float:
        return self.font.text_length(text, fontsize=fontsize)

    def covers(self, text: str) -> bool:
        """Check that every non-space character of *text* has a glyph."""
        return all(
            self.font.has_glyph(ord(char)) for char in set(text) if not char.isspace()
        )

    def insert_text(
        self,
        page: fitz.Page,
        point: fitz.Point,
        text: str,
        fontsize: float,
        color: tuple[float, float, float],
    ) -> None:
        kwargs = {"fontsize": fontsize, "fontname": self.name, "color": color}
        if self.file is not None:
            kwargs["fontfile"] = str(self.file)
        page.insert_text(point, text, **kwargs)


def _candidate_files(preferred: Path | None) -> list[Path]:
    candidates: list[Path] = []
    if preferred is not None:
        candidates.append(preferred)
    candidates.extend(SYSTEM_FONT_FILES)
    return candidates


def resolve_font(preferred: Path | None = None, sample_text: str = "") -> FontHandle:
    """Resolve the font for generated pages.

    Tries the preferred font file, then common system fonts, and finally
    PyMuPDF's built-in Helvetica.
    A file font is accepted only if it loads and covers *sample_text*.
    Never raises.

    Args:
        preferred: Optional font file to try first
        sample_text: Text the font must be able to render

    Returns:
        The first usable FontHandle
    """
    for path in _candidate_files(preferred):
        if not path.is_file():
            if path == preferred:
                logger.warning(f"Font file {path} not found, falling back")
            continue

        try:
            font = fitz.Font(fontfile=str(path))
        except Exception as e:
            logger.warning(f"Cannot load font {path}: {e}")
            continue

        handle = FontHandle(name=EMBEDDED_FONT_NAME, font=font, file=path)
        if sample_text and not handle.covers(sample_text):
            logger.debug(f"Font {path.name} lacks glyphs for generated text, skipping")
            continue

        logger.debug(f"Using font {path}")
        return handle

    logger.warning(
        f"No font file available, using built-in {BUILTIN_FONT}; "
        "some characters may not render"
    )
    return FontHandle(name=BUILTIN_FONT, font=fitz.Font(BUILTIN_FONT))


@dataclass(frozen=True)
class RenderContext:
    """Fonts and page geometry shared by all page renderers.

    Created once at startup and passed to the placeholder renderer and
    the PDF compiler.

    Attributes:
        font: Font for all generated text
        page_width: Output page width in points (A4)
        page_height: Output page height in points (A4)
        margin: Horizontal margin for wrapped text
        message_size: Font size of missing-page notices
        url_size: Font size of URLs and colophon text
        text_color: RGB color of text
        background: RGB fill of synthesized pages
    """

    font: FontHandle
    page_width: float = A4_WIDTH
    page_height: float = A4_HEIGHT
    margin: float = 20
    message_size: float = 24
    url_size: float = 12
    text_color: tuple[float, float, float] = (0, 0, 0)
    background: tuple[float, float, float] = (1, 1, 1)

    @classmethod
    def create(
        cls, font_path: Path | None = None, sample_text: str = ""
    ) -> "RenderContext":
        """Resolve fonts and build the context."""
        return cls(font=resolve_font(font_path, sample_text))

    @property
    def page_rect(self) -> fitz.Rect:
        return fitz.Rect(0, 0, self.page_width, self.page_height)
