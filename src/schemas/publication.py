"""Publication schema.

A publication is one item of the CALP catalog: a folder on the archive
site holding the scanned page images of a magazine issue, manual or
book.

    https://atari8.cz/calp/data/{slug}/
    ├── index.php?c=0        # detail page, <h1> carries the real title
    ├── index.php?c=1        # page viewer, shows the "1/48" counter
    ├── img/
    │   ├── pg_000a.gif      # cover
    │   ├── pg_001.gif
    │   └── ...
    └── down/{slug}.cbz      # packaged page set
"""

from pydantic import BaseModel, field_validator

COVER_TOKEN = "pg_000a"


def page_token(index: int) -> str:
    """File name stem of a page in the archive (``pg_000a`` for the cover)."""
    if index == 0:
        return COVER_TOKEN
    return f"pg_{index:03d}"


class Publication(BaseModel):
    """A publication discovered in the catalog.

    Attributes:
        url: Absolute URL of the publication folder (always ends with "/")
        title: Display title; starts as the catalog link text and is
               replaced once the detail page has been read
    """

    url: str
    title: str

    @field_validator("url")
    @classmethod
    def ensure_trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"

    @property
    def slug(self) -> str:
        """Folder name of the publication, e.g. ``pha_91_4``."""
        return self.url.rstrip("/").rsplit("/", 1)[-1]

    def page_url(self, token: str, extension: str) -> str:
        """Build the image URL for a page token such as ``pg_001``."""
        return f"{self.url}img/{token}{extension}"
