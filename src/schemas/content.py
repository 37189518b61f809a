"""Content units of an assembled publication.

The sequence assembler turns the remote page set of a publication into an
ordered list of content units; the PDF compiler turns each unit into one
output page.
"""

from dataclasses import dataclass, field
from pathlib import Path

from .publication import Publication

COVER_INDEX = 0


@dataclass(frozen=True)
class RasterPage:
    """A page backed by an image file on disk.

    Attributes:
        index: Page index (0 for the cover)
        path: Local path of the fetched or synthesized image
        synthesized: True when the image is a rendered placeholder
    """

    index: int
    path: Path
    synthesized: bool = False


@dataclass(frozen=True)
class DeferredTextPage:
    """A missing page rendered as text at layout time.

    Attributes:
        index: Page index that could not be fetched
        url: Source URL the page was expected at
    """

    index: int
    url: str


ContentUnit = RasterPage | DeferredTextPage


@dataclass
class PageSequence:
    """Ordered content units of one publication.

    Attributes:
        publication: The publication the units belong to
        units: Content units, cover first, then ascending page index
        total_known: Whether the page count came from the counter page
    """

    publication: Publication
    units: list[ContentUnit] = field(default_factory=list)
    total_known: bool = False

    def __len__(self) -> int:
        return len(self.units)

    @property
    def is_empty(self) -> bool:
        return not self.units

    @property
    def has_cover(self) -> bool:
        if not self.units:
            return False
        first = self.units[0]
        return (
            isinstance(first, RasterPage)
            and first.index == COVER_INDEX
            and not first.synthesized
        )
