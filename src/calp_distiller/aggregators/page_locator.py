"""Page locator for finding how many pages a publication has."""

import logging
import re

from lxml import etree, html

from calp_distiller.clients import CalpClient, ClientError
from schemas.publication import Publication

logger = logging.getLogger(__name__)

COUNTER_PATTERN = re.compile(r"(?<!\d)(\d+)\s*/\s*(\d+)(?!\d)")

UNKNOWN_PAGE_COUNT = 0


class PageLocator:
    """Reads the page count from a publication's page viewer.

    The viewer page shows a "current/total" counter such as ``1/48``.
    When the counter is missing, malformed, or the page cannot be loaded
    the count is reported as unknown (0) and the caller probes instead.

    Example:
        locator = PageLocator(client)
        total = await locator.locate(publication)
    """

    def __init__(self, client: CalpClient):
        self.client = client

    async def locate(self, publication: Publication) -> int:
        """Determine the number of content pages.

        Args:
            publication: Publication to inspect

        Returns:
            Total page count, or 0 if it cannot be determined
        """
        try:
            content = await self.client.fetch_counter_page(publication)
        except ClientError as e:
            logger.info(
                f"Page counter unavailable for {publication.slug}: {e.message}"
            )
            return UNKNOWN_PAGE_COUNT

        total = self.parse_counter(content)
        if total == UNKNOWN_PAGE_COUNT:
            logger.info(f"No page counter found for {publication.slug}, probing")
        else:
            logger.debug(f"Publication {publication.slug} has {total} pages")
        return total

    def parse_counter(self, content: str) -> int:
        """Extract the total from the first "current/total" token.

        Only the visible text is searched, so numbers in markup such as
        dates in URLs do not match. Text nodes are joined with spaces so
        digits in neighbouring elements never extend the token.
        """
        if not content.strip():
            return UNKNOWN_PAGE_COUNT

        try:
            text = " ".join(html.fromstring(content).itertext())
        except (etree.ParserError, ValueError):
            text = content

        match = COUNTER_PATTERN.search(text)
        if match is None:
            return UNKNOWN_PAGE_COUNT

        current, total = int(match.group(1)), int(match.group(2))
        if total <= 0 or current > total:
            return UNKNOWN_PAGE_COUNT
        return total
