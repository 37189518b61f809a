"""Tests for the PlaceholderRenderer class."""

import fitz  # PyMuPDF

from calp_distiller.renderers import PlaceholderRenderer
from calp_distiller.renderers.placeholder_renderer import (
    DEFAULT_EMPTY_PUBLICATION_MESSAGE,
    DEFAULT_MISSING_PAGE_MESSAGE,
)

from helpers import PUBLICATION_URL


class TestSourceUrl:
    """Tests for the expected page URL."""

    def test_default_extension(self, renderer, publication):
        assert renderer.source_url(publication, 12) == f"{PUBLICATION_URL}img/pg_012.gif"

    def test_custom_extension(self, render_context, publication):
        renderer = PlaceholderRenderer(render_context, extension=".jpg")

        assert renderer.source_url(publication, 0) == f"{PUBLICATION_URL}img/pg_000a.jpg"


class TestMissingPageBlocks:
    """Tests for the placeholder text blocks."""

    def test_message_and_url(self, renderer):
        url = f"{PUBLICATION_URL}img/pg_004.gif"

        blocks = renderer.missing_page_blocks(4, url)

        assert [b.text for b in blocks] == ["Page 4 not found.", f"URL: {url}"]
        assert [b.fontsize for b in blocks] == [24, 12]

    def test_idempotent(self, renderer):
        url = f"{PUBLICATION_URL}img/pg_004.gif"

        assert renderer.missing_page_blocks(4, url) == renderer.missing_page_blocks(4, url)

    def test_default_messages_are_czech(self):
        assert DEFAULT_MISSING_PAGE_MESSAGE.format(index=7) == (
            "Stránka 7 nebyla v archivu nalezena."
        )
        assert DEFAULT_EMPTY_PUBLICATION_MESSAGE.format(title="X") == (
            "Publikace 'X' neobsahuje žádné listy."
        )


class TestRenderMissingPage:
    """Tests for rasterized placeholders."""

    def test_writes_a4_png(self, renderer, publication, tmp_path):
        unit = renderer.render_missing_page(publication, 3, tmp_path)

        assert unit.index == 3
        assert unit.synthesized
        assert unit.path == tmp_path / "pg_003_missing.png"
        pix = fitz.Pixmap(str(unit.path))
        assert (pix.width, pix.height) == (595, 842)

    def test_rendering_twice_is_identical(self, renderer, publication, tmp_path):
        first = renderer.render_missing_page(publication, 3, tmp_path / "a")
        second = renderer.render_missing_page(publication, 3, tmp_path / "b")

        assert first.path.read_bytes() == second.path.read_bytes()

    def test_page_is_not_blank(self, renderer, publication, tmp_path):
        unit = renderer.render_missing_page(publication, 3, tmp_path)

        pix = fitz.Pixmap(str(unit.path))
        assert pix.color_count() > 1


class TestRenderEmptyPublication:
    """Tests for the no-pages notice."""

    def test_writes_cover_position_image(self, renderer, publication, tmp_path):
        unit = renderer.render_empty_publication(publication, tmp_path)

        assert unit.index == 0
        assert unit.synthesized
        assert unit.path == tmp_path / "empty-document.png"
        assert unit.path.exists()
