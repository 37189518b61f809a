"""Tests for the PDFCompiler class."""

import fitz  # PyMuPDF
import pytest

from calp_distiller.compilers import (
    EmptyPublicationError,
    ImageDecodeError,
    PDFCompiler,
    fit_rect,
    sanitize_filename,
)
from schemas.content import DeferredTextPage, PageSequence, RasterPage
from schemas.publication import Publication

from helpers import BASE_URL, PUBLICATION_URL, make_image_bytes

COLOPHON = ["Scanned by the CALP project.", "Archive: https://atari8.cz/calp/"]


@pytest.fixture
def compiler(render_context, renderer, tmp_path):
    """PDFCompiler writing into tmp_path/out."""
    return PDFCompiler(
        render_context, renderer, tmp_path / "out", colophon_lines=COLOPHON
    )


def _image(tmp_path, name: str, width: int = 40, height: int = 60):
    path = tmp_path / name
    path.write_bytes(make_image_bytes(width, height))
    return path


class TestSanitizeFilename:
    """Tests for turning titles into file names."""

    def test_plain_title(self):
        assert sanitize_filename("Atari Magazín 1") == "Atari Magazín 1"

    def test_invalid_characters_replaced(self):
        assert sanitize_filename('Počítačové hry 91/4: "best"?') == (
            "Počítačové hry 91-4- -best--"
        )

    def test_separator_removed(self):
        assert sanitize_filename("Časopisy » Zpravodaj 3") == "Časopisy Zpravodaj 3"

    def test_empty_uses_fallback(self):
        assert sanitize_filename(" ... ", fallback="pha_91_4") == "pha_91_4"


class TestFitRect:
    """Tests for uniform scaling."""

    def test_tall_image(self):
        rect = fit_rect(100, 200, 595, 842)

        assert rect.height == pytest.approx(842)
        assert rect.width == pytest.approx(421)
        assert rect.x0 == pytest.approx((595 - 421) / 2)
        assert rect.y0 == pytest.approx(0)

    def test_wide_image(self):
        rect = fit_rect(1190, 100, 595, 842)

        assert rect.width == pytest.approx(595)
        assert rect.height == pytest.approx(50)
        assert rect.y0 == pytest.approx((842 - 50) / 2)

    def test_small_image_is_upscaled(self):
        rect = fit_rect(10, 10, 595, 842)

        assert rect.width == pytest.approx(595)
        assert (rect.y0 + rect.y1) / 2 == pytest.approx(421)


class TestCompile:
    """Tests for PDFCompiler.compile."""

    def test_one_page_per_unit_plus_colophon(self, compiler, publication, tmp_path):
        sequence = PageSequence(
            publication=publication,
            units=[
                RasterPage(index=0, path=_image(tmp_path, "pg_000a.png")),
                DeferredTextPage(index=1, url=f"{PUBLICATION_URL}img/pg_001.gif"),
                RasterPage(index=2, path=_image(tmp_path, "pg_002.png")),
            ],
        )

        pdf_path = compiler.compile(sequence)

        assert pdf_path == tmp_path / "out" / "Počítačové hry 91-4.pdf"
        with fitz.open(pdf_path) as doc:
            assert len(doc) == 4
            for page in doc:
                assert (page.rect.width, page.rect.height) == (595, 842)

    def test_without_colophon(self, render_context, renderer, publication, tmp_path):
        compiler = PDFCompiler(
            render_context, renderer, tmp_path / "out", include_colophon=False
        )
        sequence = PageSequence(
            publication=publication,
            units=[RasterPage(index=1, path=_image(tmp_path, "pg_001.png"))],
        )

        with fitz.open(compiler.compile(sequence)) as doc:
            assert len(doc) == 1

    def test_image_is_fitted_and_centered(self, compiler, publication, tmp_path):
        sequence = PageSequence(
            publication=publication,
            units=[RasterPage(index=1, path=_image(tmp_path, "pg_001.png", 100, 200))],
        )

        with fitz.open(compiler.compile(sequence)) as doc:
            bbox = fitz.Rect(doc[0].get_image_info()[0]["bbox"])

        expected = fit_rect(100, 200, 595, 842)
        assert bbox.x0 == pytest.approx(expected.x0, abs=0.5)
        assert bbox.x1 == pytest.approx(expected.x1, abs=0.5)
        assert bbox.height == pytest.approx(842, abs=0.5)

    def test_text_placeholder_has_link(self, compiler, publication, tmp_path):
        url = f"{PUBLICATION_URL}img/pg_001.gif"
        sequence = PageSequence(
            publication=publication,
            units=[DeferredTextPage(index=1, url=url)],
        )

        with fitz.open(compiler.compile(sequence)) as doc:
            page = doc[0]
            assert "Page 1 not found." in page.get_text()
            assert [link["uri"] for link in page.get_links()] == [url]

    def test_colophon_links_every_url(self, compiler, publication, tmp_path):
        sequence = PageSequence(
            publication=publication,
            units=[RasterPage(index=1, path=_image(tmp_path, "pg_001.png"))],
        )

        with fitz.open(compiler.compile(sequence)) as doc:
            colophon = doc[-1]
            text = colophon.get_text()
            uris = [link["uri"] for link in colophon.get_links()]

        assert "Scanned by the CALP project." in text
        assert uris == ["https://atari8.cz/calp/", PUBLICATION_URL]

    def test_empty_sequence_raises(self, compiler, publication, tmp_path):
        with pytest.raises(EmptyPublicationError):
            compiler.compile(PageSequence(publication=publication))

        assert not (tmp_path / "out").exists() or not any((tmp_path / "out").iterdir())

    def test_undecodable_image_leaves_no_pdf(self, compiler, publication, tmp_path):
        broken = tmp_path / "pg_002.gif"
        broken.write_bytes(b"this is not an image")
        sequence = PageSequence(
            publication=publication,
            units=[
                RasterPage(index=1, path=_image(tmp_path, "pg_001.png")),
                RasterPage(index=2, path=broken),
            ],
        )

        with pytest.raises(ImageDecodeError) as exc_info:
            compiler.compile(sequence)

        assert exc_info.value.path == broken
        assert str(broken) in exc_info.value.message
        assert list((tmp_path / "out").glob("*.pdf*")) == []

    def test_overwrites_existing_pdf(self, compiler, publication, tmp_path):
        sequence = PageSequence(
            publication=publication,
            units=[RasterPage(index=1, path=_image(tmp_path, "pg_001.png"))],
        )
        first = compiler.compile(sequence)
        second = compiler.compile(sequence)

        assert first == second
        assert list((tmp_path / "out").iterdir()) == [first]

    def test_title_falls_back_to_slug(self, compiler, tmp_path):
        publication = Publication(url=PUBLICATION_URL, title="???")
        sequence = PageSequence(
            publication=publication,
            units=[RasterPage(index=1, path=_image(tmp_path, "pg_001.png"))],
        )

        assert compiler.compile(sequence).name == "---.pdf"
        assert compiler.output_path(Publication(url=PUBLICATION_URL, title="")).name == (
            "pha_91_4.pdf"
        )

    def test_shared_title_gets_distinct_files(self, compiler, tmp_path):
        """Two publications with one title each keep their own PDF."""
        first = Publication(url=f"{BASE_URL}data/a/", title="Same")
        second = Publication(url=f"{BASE_URL}data/b/", title="Same")
        image = _image(tmp_path, "pg_001.png")

        first_path = compiler.compile(
            PageSequence(publication=first, units=[RasterPage(index=1, path=image)])
        )
        second_path = compiler.compile(
            PageSequence(publication=second, units=[RasterPage(index=1, path=image)])
        )

        assert first_path.name == "Same.pdf"
        assert second_path.name == "Same (b).pdf"
        assert sorted(p.name for p in (tmp_path / "out").iterdir()) == [
            "Same (b).pdf",
            "Same.pdf",
        ]
