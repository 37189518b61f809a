"""Pipeline orchestrator for turning catalog publications into PDFs.

Wires the archive client, page aggregators, renderers and the PDF compiler
together and runs many publications with bounded concurrency.
"""

import asyncio
import logging
import shutil
from pathlib import Path

from calp_distiller.aggregators import (
    ArchiveUnpacker,
    PageFetcher,
    PageLocator,
    SequenceAssembler,
)
from calp_distiller.clients import CalpClient
from calp_distiller.compilers import (
    CompilerError,
    EmptyPublicationError,
    PDFCompiler,
)
from calp_distiller.renderers import PlaceholderRenderer, RenderContext
from schemas.config import HarvestConfig
from schemas.content import PageSequence
from schemas.publication import Publication
from schemas.result import PublicationResult

logger = logging.getLogger(__name__)


def sample_text(config: HarvestConfig) -> str:
    """All generated text, used to pick a font that covers it."""
    return " ".join(
        [
            config.missing_page_message.format(index=0),
            config.empty_publication_message.format(title=""),
            *config.colophon_lines,
        ]
    )


class Orchestrator:
    """End-to-end harvest orchestrator.

    For each publication: reads the real title, determines the page count,
    assembles the content units (or unpacks the archive in archive mode),
    compiles the PDF and removes the work directory. At most
    ``config.parallelism`` publications are in flight at once; pages within
    one publication are always fetched one after another.

    A failing publication never affects the others: every outcome is
    reported as a PublicationResult.

    Attributes:
        config: Run configuration
        client: Archive client shared by all publications
        context: Fonts and page geometry, resolved once per run
    """

    def __init__(
        self,
        config: HarvestConfig,
        client: CalpClient,
        context: RenderContext | None = None,
    ):
        self.config = config
        self.client = client
        self.context = context or RenderContext.create(
            config.font_path, sample_text(config)
        )

        self.renderer = PlaceholderRenderer(
            self.context,
            missing_page_message=config.missing_page_message,
            empty_publication_message=config.empty_publication_message,
            extension=config.extensions[0],
        )
        self.locator = PageLocator(client)
        self.fetcher = PageFetcher(client, config.extensions)
        self.assembler = SequenceAssembler(
            self.fetcher,
            self.renderer,
            placeholder_mode=config.placeholder_mode,
            probe_ceiling=config.probe_ceiling,
            miss_threshold=config.miss_threshold,
        )
        self.unpacker = ArchiveUnpacker(client, self.renderer, config.extensions)
        self.compiler = PDFCompiler(
            self.context,
            self.renderer,
            config.output_dir,
            include_colophon=config.include_colophon,
            colophon_lines=config.colophon_lines,
        )

    async def run(self, publications: list[Publication]) -> list[PublicationResult]:
        """Process publications concurrently and wait for all of them.

        Args:
            publications: Publications to process

        Returns:
            One PublicationResult per publication, in input order
        """
        semaphore = asyncio.Semaphore(self.config.parallelism)

        async def admit(publication: Publication) -> PublicationResult:
            async with semaphore:
                return await self.process_publication(publication)

        logger.info(
            f"Processing {len(publications)} publications, "
            f"{self.config.parallelism} at a time"
        )
        results = await asyncio.gather(*(admit(p) for p in publications))

        completed = sum(1 for r in results if r.status == "completed")
        skipped = sum(1 for r in results if r.status == "skipped")
        failed = sum(1 for r in results if r.status == "failed")
        logger.info(
            f"All publications processed: {completed} completed, "
            f"{skipped} skipped, {failed} failed"
        )
        return list(results)

    async def process_publication(self, publication: Publication) -> PublicationResult:
        """Process one publication, converting every failure into a result."""
        try:
            return await self._process(publication)
        except EmptyPublicationError as e:
            logger.warning(f"Skipping {publication.title}: {e.message}")
            return self._result(publication, "skipped", message=e.message)
        except CompilerError as e:
            logger.error(
                f"Failed to compile {publication.title} ({publication.url}): {e.message}"
            )
            return self._result(publication, "failed", message=e.message)
        except Exception as e:
            logger.error(f"Failed to process {publication.title} ({publication.url}): {e}")
            return self._result(publication, "failed", message=str(e))
        finally:
            self._cleanup(publication)

    async def _process(self, publication: Publication) -> PublicationResult:
        title = await self.client.fetch_title(publication)
        if title:
            publication.title = title

        work_dir = self.config.work_dir / publication.slug
        work_dir.mkdir(parents=True, exist_ok=True)

        sequence = await self._retrieve(publication, work_dir)
        pdf_path = self.compiler.compile(sequence)

        page_count = len(sequence) + (1 if self.config.include_colophon else 0)
        logger.info(f"Completed: {publication.title}")
        return self._result(
            publication,
            "completed",
            output_path=str(pdf_path),
            page_count=page_count,
        )

    async def _retrieve(self, publication: Publication, work_dir: Path) -> PageSequence:
        if self.config.retrieval_mode == "archive":
            return await self.unpacker.retrieve(publication, work_dir)

        total_pages = await self.locator.locate(publication)
        return await self.assembler.assemble(publication, total_pages, work_dir)

    def _cleanup(self, publication: Publication) -> None:
        if self.config.keep_work_files:
            return
        shutil.rmtree(self.config.work_dir / publication.slug, ignore_errors=True)

    def _result(
        self, publication: Publication, status: str, **kwargs
    ) -> PublicationResult:
        return PublicationResult(
            url=publication.url, title=publication.title, status=status, **kwargs
        )
