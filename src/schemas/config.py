"""Run configuration for a harvest."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://atari8.cz/calp/"
DEFAULT_USER_AGENT = "calp-distiller/1.0"

DEFAULT_COLOPHON_LINES = [
    "Tento dokument byl sestaven ze skenů uložených v archivu CALP",
    "(Czech Atari Library of Publications).",
    "Archiv: https://atari8.cz/calp/",
    "Zdrojová publikace:",
]


class HarvestConfig(BaseModel):
    """Settings shared by every component of a harvest run.

    Attributes:
        base_url: Root of the CALP archive
        catalog_path: Catalog listing page, relative to base_url
        publication_prefix: Href prefix of publication links in the catalog
        output_dir: Directory receiving the finished PDFs
        work_dir: Scratch directory, one subdirectory per publication
        parallelism: Maximum number of publications processed at once
        timeout: Timeout in seconds for every HTTP request
        retry_attempts: Attempts for catalog and detail page requests
        probe_ceiling: Highest page index probed when the count is unknown
        miss_threshold: Consecutive misses that end an unknown-length probe
        extensions: Image extensions tried for each page, in order
        placeholder_mode: "image" renders a raster, "text" defers to layout
        include_colophon: Append the colophon page to every document
        keep_work_files: Keep downloaded images after the PDF is written
        retrieval_mode: "pages" probes images, "archive" unpacks the .cbz
        font_path: Preferred font file for generated pages
        encoding: Character encoding of the archive's HTML pages
        user_agent: User-Agent header sent with every request
        missing_page_message: Notice for a missing page, formatted with index
        empty_publication_message: Notice for a publication without pages
        colophon_lines: Static colophon text; the publication URL is appended
    """

    base_url: str = DEFAULT_BASE_URL
    catalog_path: str = "list.php"
    publication_prefix: str = "data/"
    output_dir: Path = Path("./Downloads")
    work_dir: Path = Path("./Downloads/work")
    parallelism: int = Field(default=5, ge=1)
    timeout: float = Field(default=30.0, gt=0)
    retry_attempts: int = Field(default=3, ge=1)
    probe_ceiling: int = Field(default=999, ge=1)
    miss_threshold: int = Field(default=2, ge=1)
    extensions: tuple[str, ...] = (".gif", ".jpg", ".png")
    placeholder_mode: Literal["image", "text"] = "text"
    include_colophon: bool = True
    keep_work_files: bool = False
    retrieval_mode: Literal["pages", "archive"] = "pages"
    font_path: Path | None = None
    encoding: str = "windows-1250"
    user_agent: str = DEFAULT_USER_AGENT
    missing_page_message: str = "Stránka {index} nebyla v archivu nalezena."
    empty_publication_message: str = "Publikace '{title}' neobsahuje žádné listy."
    colophon_lines: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COLOPHON_LINES)
    )

    def client_config(self) -> dict:
        """Build the dict config consumed by the HTTP clients."""
        return {
            "base_url": self.base_url,
            "timeout": self.timeout,
            "retry_attempts": self.retry_attempts,
            "headers": {"User-Agent": self.user_agent},
            "encoding": self.encoding,
            "catalog_path": self.catalog_path,
            "publication_prefix": self.publication_prefix,
        }
