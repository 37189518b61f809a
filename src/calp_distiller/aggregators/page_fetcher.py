"""Page fetcher for downloading scanned page images from the archive."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from calp_distiller.clients import APIError, CalpClient, ClientError, NotFoundError
from schemas.publication import Publication, page_token

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".gif", ".jpg", ".png")


@dataclass(frozen=True)
class FetchedPage:
    """A page image downloaded from the archive.

    Attributes:
        index: Page index (0 for the cover)
        url: URL the image was served from
        extension: Extension that matched, including the dot
        path: Local file the image was written to
        content: Raw image bytes
    """

    index: int
    url: str
    extension: str
    path: Path
    content: bytes


class PageFetcher:
    """Downloads a single page image, trying each known extension.

    The archive stores pages as ``img/pg_NNN.<ext>`` with the extension
    varying between publications. Each candidate URL is requested once;
    any non-2xx response means the page is not stored under that
    extension. Nothing is retried.

    Example:
        fetcher = PageFetcher(client)
        page = await fetcher.fetch(publication, 3, work_dir)
    """

    def __init__(
        self,
        client: CalpClient,
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ):
        """Initialize the page fetcher.

        Args:
            client: Archive client used for the downloads
            extensions: Candidate extensions in the order they are tried
        """
        self.client = client
        self.extensions = extensions

    def build_page_urls(self, publication: Publication, index: int) -> list[str]:
        """Build candidate URLs for a page, in the order they are tried."""
        token = page_token(index)
        return [publication.page_url(token, extension) for extension in self.extensions]

    async def fetch(
        self, publication: Publication, index: int, work_dir: Path
    ) -> FetchedPage | None:
        """Download the image of one page.

        Args:
            publication: Publication the page belongs to
            index: Page index, 0 for the cover
            work_dir: Publication work directory receiving the file

        Returns:
            FetchedPage for the first extension that exists, None otherwise
        """
        token = page_token(index)

        for extension, url in zip(
            self.extensions, self.build_page_urls(publication, index)
        ):
            try:
                content = await self.client.fetch_bytes(url)
            except NotFoundError:
                continue
            except APIError as e:
                logger.debug(f"Page {url} returned HTTP {e.status_code}")
                continue
            except ClientError as e:
                logger.info(f"Failed to download {url}: {e.message}")
                continue

            local_path = work_dir / f"{token}{extension}"
            await asyncio.to_thread(self._write_file, local_path, content)
            logger.debug(f"Downloaded {url}")
            return FetchedPage(
                index=index,
                url=url,
                extension=extension,
                path=local_path,
                content=content,
            )

        logger.debug(f"Page {token} of {publication.slug} not found")
        return None

    def _write_file(self, destination: Path, content: bytes) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(content)
