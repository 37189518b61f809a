"""Sequence assembler for turning a remote page set into content units."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from calp_distiller.renderers import PlaceholderRenderer
from schemas.content import (
    COVER_INDEX,
    ContentUnit,
    DeferredTextPage,
    PageSequence,
    RasterPage,
)
from schemas.publication import Publication

from .page_fetcher import PageFetcher

logger = logging.getLogger(__name__)

DEFAULT_PROBE_CEILING = 999
DEFAULT_MISS_THRESHOLD = 2


@dataclass
class PageRangeState:
    """Counters tracked while walking the page indices of one publication.

    Attributes:
        total_known: Whether total_pages came from the page counter
        total_pages: Authoritative count, or the probing ceiling
        consecutive_misses: Length of the current run of missing pages
        last_miss: Index of the most recent missing page
    """

    total_known: bool
    total_pages: int
    consecutive_misses: int = 0
    last_miss: int | None = None

    def record_hit(self) -> None:
        self.consecutive_misses = 0

    def record_miss(self, index: int) -> None:
        if self.last_miss is not None and self.last_miss == index - 1:
            self.consecutive_misses += 1
        else:
            self.consecutive_misses = 1
        self.last_miss = index

    def exhausted(self, miss_threshold: int) -> bool:
        """True once an unknown-length probe has hit its end-of-document signal."""
        return not self.total_known and self.consecutive_misses >= miss_threshold


class SequenceAssembler:
    """Walks the page indices of a publication and collects content units.

    The SequenceAssembler:
    1. Fetches the cover (``pg_000a``); if present it becomes unit 0
    2. With a known page count, fetches every index 1..total and fills
       each gap with a placeholder
    3. With an unknown page count, probes 1..probe_ceiling and stops at
       the first run of miss_threshold missing pages, then drops trailing
       text placeholders since they do not stand for real pages

    Pages are fetched strictly in index order; the miss counting depends
    on it.

    Example:
        assembler = SequenceAssembler(fetcher, renderer)
        sequence = await assembler.assemble(publication, total_pages, work_dir)
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        renderer: PlaceholderRenderer,
        placeholder_mode: Literal["image", "text"] = "text",
        probe_ceiling: int = DEFAULT_PROBE_CEILING,
        miss_threshold: int = DEFAULT_MISS_THRESHOLD,
    ):
        """Initialize the sequence assembler.

        Args:
            fetcher: Page fetcher used for every index
            renderer: Placeholder renderer for missing pages in image mode
            placeholder_mode: "image" rasterizes placeholders now,
                              "text" defers them to the PDF compiler
            probe_ceiling: Highest index probed when the count is unknown
            miss_threshold: Consecutive misses ending an unknown-length probe
        """
        self.fetcher = fetcher
        self.renderer = renderer
        self.placeholder_mode = placeholder_mode
        self.probe_ceiling = probe_ceiling
        self.miss_threshold = miss_threshold

    async def assemble(
        self,
        publication: Publication,
        total_pages: int,
        work_dir: Path,
    ) -> PageSequence:
        """Build the ordered content units of a publication.

        Args:
            publication: Publication to assemble
            total_pages: Count from the page locator, 0 if unknown
            work_dir: Publication work directory for downloaded images

        Returns:
            PageSequence; empty if neither cover nor any page was found
        """
        total_known = total_pages > 0
        sequence = PageSequence(publication=publication, total_known=total_known)

        cover = await self.fetcher.fetch(publication, COVER_INDEX, work_dir)
        if cover is not None:
            sequence.units.append(RasterPage(index=COVER_INDEX, path=cover.path))
        else:
            logger.debug(f"Publication {publication.slug} has no cover page")

        state = PageRangeState(
            total_known=total_known,
            total_pages=total_pages if total_known else self.probe_ceiling,
        )

        found = 0
        for index in range(1, state.total_pages + 1):
            page = await self.fetcher.fetch(publication, index, work_dir)
            if page is not None:
                sequence.units.append(RasterPage(index=index, path=page.path))
                state.record_hit()
                found += 1
                continue

            sequence.units.append(self._placeholder(publication, index, work_dir))
            state.record_miss(index)

            if state.exhausted(self.miss_threshold):
                logger.debug(
                    f"Stopping {publication.slug} after {state.consecutive_misses} "
                    f"missing pages at index {index}"
                )
                break

        if not total_known:
            self._drop_trailing_text_placeholders(sequence)

        if found == 0 and cover is None:
            sequence.units.clear()

        logger.info(
            f"Assembled {publication.slug}: {found} pages found, "
            f"{len(sequence)} content units"
        )
        return sequence

    def _placeholder(
        self, publication: Publication, index: int, work_dir: Path
    ) -> ContentUnit:
        if self.placeholder_mode == "image":
            return self.renderer.render_missing_page(publication, index, work_dir)
        return DeferredTextPage(
            index=index, url=self.renderer.source_url(publication, index)
        )

    def _drop_trailing_text_placeholders(self, sequence: PageSequence) -> None:
        while sequence.units and isinstance(sequence.units[-1], DeferredTextPage):
            dropped = sequence.units.pop()
            logger.debug(f"Dropped trailing placeholder for page {dropped.index}")
