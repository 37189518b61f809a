"""Archive retrieval mode: download and unpack a publication's .cbz file."""

import asyncio
import logging
import zipfile
from pathlib import Path

from calp_distiller.clients import CalpClient, ClientError
from calp_distiller.renderers import PlaceholderRenderer
from schemas.content import COVER_INDEX, PageSequence, RasterPage
from schemas.publication import COVER_TOKEN, Publication

from .page_fetcher import DEFAULT_EXTENSIONS

logger = logging.getLogger(__name__)


def sort_pages(paths: list[Path]) -> list[Path]:
    """Order extracted files: the cover first, the rest by name ignoring case."""
    return sorted(
        paths,
        key=lambda p: (p.stem.lower() != COVER_TOKEN, p.stem.lower(), p.name.lower()),
    )


def extract_archive(archive_path: Path, target_dir: Path) -> list[Path]:
    """Extract every non-empty entry of a zip archive flat into *target_dir*.

    Entry directories are discarded, so ``scans/pg_001.gif`` lands at
    ``target_dir/pg_001.gif``.

    Args:
        archive_path: The .cbz (zip) file
        target_dir: Directory receiving the files

    Returns:
        Extracted paths, cover first, then case-insensitive by name

    Raises:
        zipfile.BadZipFile: If the archive is not a valid zip file
    """
    target_dir.mkdir(parents=True, exist_ok=True)
    extracted: list[Path] = []

    with zipfile.ZipFile(archive_path) as archive:
        for entry in archive.infolist():
            if entry.is_dir() or entry.compress_size <= 0:
                continue
            name = Path(entry.filename).name
            if not name:
                continue
            destination = target_dir / name
            destination.write_bytes(archive.read(entry))
            extracted.append(destination)

    return sort_pages(extracted)


class ArchiveUnpacker:
    """Retrieves a publication as its packaged ``down/{slug}.cbz`` archive.

    This is the older retrieval mode: instead of probing page images one
    by one, the whole page set is downloaded at once and unpacked. Files
    that are not page images (the archives sometimes carry .php files)
    are ignored. A publication without any page image gets a single
    "no pages" notice so its document still records the gap.

    Example:
        unpacker = ArchiveUnpacker(client, renderer)
        sequence = await unpacker.retrieve(publication, work_dir)
    """

    def __init__(
        self,
        client: CalpClient,
        renderer: PlaceholderRenderer,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ):
        self.client = client
        self.renderer = renderer
        self.extensions = tuple(ext.lower() for ext in extensions)

    def archive_url(self, publication: Publication) -> str:
        return f"{publication.url}down/{publication.slug}.cbz"

    async def retrieve(self, publication: Publication, work_dir: Path) -> PageSequence:
        """Download, unpack and sequence a publication archive.

        Args:
            publication: Publication to retrieve
            work_dir: Publication work directory

        Returns:
            PageSequence of the archive's page images
        """
        url = self.archive_url(publication)
        archive_path = work_dir / f"{publication.slug}.cbz"
        files: list[Path] = []

        try:
            content = await self.client.fetch_bytes(url, retry=True)
        except ClientError as e:
            logger.error(f"Cannot download archive {url}: {e.message}")
        else:
            await asyncio.to_thread(self._write_file, archive_path, content)
            try:
                files = await asyncio.to_thread(extract_archive, archive_path, work_dir)
            except zipfile.BadZipFile as e:
                logger.error(f"Error extracting archive {archive_path}: {e}")
            finally:
                archive_path.unlink(missing_ok=True)

        images = [f for f in files if f.suffix.lower() in self.extensions]
        sequence = PageSequence(publication=publication, total_known=True)

        if not images:
            logger.error(
                f"No images found for {publication.title}, cannot create document. {url}"
            )
            sequence.units.append(
                self.renderer.render_empty_publication(publication, work_dir)
            )
            return sequence

        start = COVER_INDEX if images[0].stem.lower() == COVER_TOKEN else 1
        sequence.units.extend(
            RasterPage(index=index, path=path)
            for index, path in enumerate(images, start=start)
        )
        logger.info(f"Unpacked {len(images)} pages for {publication.slug}")
        return sequence

    def _write_file(self, destination: Path, content: bytes) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(content)
