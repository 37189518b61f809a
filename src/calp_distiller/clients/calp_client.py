"""CALP archive client for the atari8.cz publication library."""

import logging
from urllib.parse import urljoin

from lxml import html

from schemas.publication import Publication

from .client import Client
from .exceptions import ClientError

logger = logging.getLogger(__name__)


class CalpClient(Client):
    """Client for the CALP (Czech Atari Library of Publications) web archive.

    The archive serves plain HTML pages encoded as windows-1250 and one
    image file per scanned page. The catalog lists every publication as a
    link into ``data/{slug}/``.

    Example:
        config = {"base_url": "https://atari8.cz/calp/"}
        async with CalpClient(config) as client:
            publications = await client.fetch_catalog()
    """

    CATALOG_PATH = "list.php"
    PUBLICATION_PREFIX = "data/"
    TITLE_PAGE = "index.php?c=0"
    COUNTER_PAGE = "index.php?c=1"

    @property
    def encoding(self) -> str:
        return str(self._config.get("encoding", "windows-1250"))

    @property
    def catalog_path(self) -> str:
        return str(self._config.get("catalog_path", self.CATALOG_PATH))

    @property
    def publication_prefix(self) -> str:
        return str(self._config.get("publication_prefix", self.PUBLICATION_PREFIX))

    async def fetch(self) -> list[Publication]:
        """Fetch the publication catalog."""
        return await self.fetch_catalog()

    async def fetch_catalog(self) -> list[Publication]:
        """Fetch the catalog page and list its publications.

        Only links inside ``div#content`` whose href starts with the
        publication prefix are taken. Publications are de-duplicated by
        URL, keeping the order in which they first appear.

        Returns:
            List of Publication objects with the link text as title

        Raises:
            APIError: If the catalog page returns a non-2xx response
            ConnectionError: If the network connection fails
        """
        response = await self.get(self.catalog_path)
        catalog_url = str(response.url)
        return self.parse_catalog(self._decode(response.content), catalog_url)

    def parse_catalog(self, content: str, catalog_url: str) -> list[Publication]:
        """Extract publications from catalog HTML.

        Args:
            content: Decoded catalog page
            catalog_url: URL the page was served from, for resolving links

        Returns:
            Publications in first-seen order
        """
        if not content.strip():
            return []

        root = html.fromstring(content)
        links = root.xpath(
            "//div[@id='content']//a[starts-with(@href, $prefix)]",
            prefix=self.publication_prefix,
        )

        publications: list[Publication] = []
        seen: set[str] = set()

        for link in links:
            url = urljoin(catalog_url, link.get("href", ""))
            if not url.endswith("/"):
                url += "/"
            if url in seen:
                continue
            seen.add(url)

            title = " ".join(link.text_content().split())
            publication = Publication(url=url, title=title)
            if not publication.title:
                publication.title = publication.slug
            publications.append(publication)

        logger.debug(f"Catalog lists {len(publications)} publications")
        return publications

    async def fetch_title(self, publication: Publication) -> str | None:
        """Read the real title from the publication's detail page.

        Args:
            publication: Publication whose detail page is read

        Returns:
            The ``<h1>`` text, or None if the page has no heading or
            cannot be loaded
        """
        url = publication.url + self.TITLE_PAGE
        try:
            response = await self.get(url)
        except ClientError as e:
            logger.info(f"Cannot load page {url}: {e.message}")
            return None

        content = self._decode(response.content)
        if not content.strip():
            return None

        headings = html.fromstring(content).xpath("//h1")
        if not headings:
            return None

        title = " ".join(headings[0].text_content().split())
        return title or None

    async def fetch_counter_page(self, publication: Publication) -> str:
        """Fetch the page viewer that displays the "current/total" counter.

        Raises:
            ClientError: If the page cannot be loaded
        """
        response = await self.get(publication.url + self.COUNTER_PAGE)
        return self._decode(response.content)

    async def fetch_bytes(self, url: str, retry: bool = False) -> bytes:
        """Download a resource in a single request.

        Args:
            url: Absolute URL of the resource
            retry: Retry transient network failures (default: False)

        Returns:
            Response body

        Raises:
            NotFoundError: If the resource does not exist
            APIError: For any other non-2xx response
            ConnectionError: If the network connection fails
        """
        attempts = None if retry else 1
        response = await self.get(url, attempts=attempts)
        return response.content

    def _decode(self, content: bytes) -> str:
        return content.decode(self.encoding, errors="replace")
