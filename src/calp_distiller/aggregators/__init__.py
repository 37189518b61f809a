"""Aggregators for gathering the pages of a publication."""

from .archive_unpacker import ArchiveUnpacker, extract_archive, sort_pages
from .page_fetcher import FetchedPage, PageFetcher
from .page_locator import PageLocator
from .sequence_assembler import PageRangeState, SequenceAssembler

__all__ = [
    "ArchiveUnpacker",
    "FetchedPage",
    "PageFetcher",
    "PageLocator",
    "PageRangeState",
    "SequenceAssembler",
    "extract_archive",
    "sort_pages",
]
