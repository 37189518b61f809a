"""Tests for schema models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from schemas import (
    COVER_TOKEN,
    DeferredTextPage,
    HarvestConfig,
    PageSequence,
    Publication,
    PublicationResult,
    RasterPage,
    page_token,
)

from helpers import BASE_URL, PUBLICATION_URL


class TestPageToken:
    """Tests for page file name stems."""

    def test_cover(self):
        assert page_token(0) == COVER_TOKEN == "pg_000a"

    def test_padded(self):
        assert page_token(1) == "pg_001"
        assert page_token(42) == "pg_042"

    def test_beyond_three_digits(self):
        assert page_token(1000) == "pg_1000"


class TestPublication:
    """Tests for the Publication model."""

    def test_slug_and_page_url(self):
        publication = Publication(url=PUBLICATION_URL, title="x")

        assert publication.slug == "pha_91_4"
        assert publication.page_url("pg_001", ".gif") == f"{PUBLICATION_URL}img/pg_001.gif"

    def test_title_is_mutable(self):
        publication = Publication(url=PUBLICATION_URL, title="From catalog")

        publication.title = "From detail page"

        assert publication.title == "From detail page"


class TestPageSequence:
    """Tests for the PageSequence container."""

    def test_empty(self):
        sequence = PageSequence(publication=Publication(url=PUBLICATION_URL, title="x"))

        assert sequence.is_empty
        assert len(sequence) == 0
        assert not sequence.has_cover

    def test_has_cover(self):
        sequence = PageSequence(
            publication=Publication(url=PUBLICATION_URL, title="x"),
            units=[RasterPage(index=0, path=Path("pg_000a.gif"))],
        )

        assert sequence.has_cover

    def test_synthesized_notice_is_not_cover(self):
        sequence = PageSequence(
            publication=Publication(url=PUBLICATION_URL, title="x"),
            units=[RasterPage(index=0, path=Path("empty-document.png"), synthesized=True)],
        )

        assert not sequence.has_cover

    def test_placeholder_at_zero_is_not_cover(self):
        sequence = PageSequence(
            publication=Publication(url=PUBLICATION_URL, title="x"),
            units=[DeferredTextPage(index=0, url="u")],
        )

        assert not sequence.has_cover

    def test_units_are_frozen(self):
        unit = RasterPage(index=1, path=Path("pg_001.gif"))

        with pytest.raises(AttributeError):
            unit.index = 2


class TestHarvestConfig:
    """Tests for the HarvestConfig model."""

    def test_defaults(self):
        config = HarvestConfig()

        assert config.base_url == BASE_URL
        assert config.parallelism == 5
        assert config.probe_ceiling == 999
        assert config.miss_threshold == 2
        assert config.extensions == (".gif", ".jpg", ".png")
        assert config.placeholder_mode == "text"
        assert config.retrieval_mode == "pages"
        assert config.encoding == "windows-1250"

    def test_rejects_zero_parallelism(self):
        with pytest.raises(ValidationError):
            HarvestConfig(parallelism=0)

    def test_rejects_unknown_mode(self):
        with pytest.raises(ValidationError):
            HarvestConfig(retrieval_mode="torrent")

    def test_client_config(self):
        config = HarvestConfig(timeout=5, user_agent="test-agent")

        client_config = config.client_config()

        assert client_config["base_url"] == BASE_URL
        assert client_config["timeout"] == 5
        assert client_config["headers"] == {"User-Agent": "test-agent"}
        assert client_config["encoding"] == "windows-1250"

    def test_colophon_lines_not_shared(self):
        first = HarvestConfig()
        first.colophon_lines.append("extra")

        assert "extra" not in HarvestConfig().colophon_lines


class TestPublicationResult:
    """Tests for the PublicationResult model."""

    def test_ok(self):
        result = PublicationResult(url=PUBLICATION_URL, title="x", status="completed")

        assert result.ok
        assert result.page_count == 0

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            PublicationResult(url=PUBLICATION_URL, title="x", status="partial")
