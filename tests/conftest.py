"""Pytest fixtures for CALP Distiller tests."""

import fitz  # PyMuPDF
import pytest

from calp_distiller.clients import CalpClient
from calp_distiller.renderers import FontHandle, PlaceholderRenderer, RenderContext
from schemas.config import HarvestConfig
from schemas.publication import Publication

from helpers import BASE_URL, PUBLICATION_URL, FakeArchive


@pytest.fixture
def archive():
    """An empty fake archive site."""
    return FakeArchive()


@pytest.fixture
def calp_client(archive):
    """CalpClient wired to the fake archive, without retry delays."""
    return CalpClient(
        {"base_url": BASE_URL, "retry_delay": 0},
        transport=archive.transport,
    )


@pytest.fixture
def publication():
    """A sample publication."""
    return Publication(url=PUBLICATION_URL, title="Počítačové hry 91/4")


@pytest.fixture
def render_context():
    """Rendering context using PyMuPDF's built-in Helvetica."""
    return RenderContext(font=FontHandle(name="helv", font=fitz.Font("helv")))


@pytest.fixture
def renderer(render_context):
    """Placeholder renderer with ASCII messages."""
    return PlaceholderRenderer(
        render_context,
        missing_page_message="Page {index} not found.",
        empty_publication_message="Publication '{title}' has no pages.",
    )


@pytest.fixture
def harvest_config(tmp_path):
    """HarvestConfig writing into tmp_path with ASCII generated text."""
    return HarvestConfig(
        base_url=BASE_URL,
        output_dir=tmp_path / "out",
        work_dir=tmp_path / "work",
        parallelism=2,
        missing_page_message="Page {index} not found.",
        empty_publication_message="Publication '{title}' has no pages.",
        colophon_lines=["Scanned by the CALP project.", "Archive: https://atari8.cz/calp/"],
    )
