"""Schema definitions for CALP Distiller."""

from .config import HarvestConfig
from .content import COVER_INDEX, ContentUnit, DeferredTextPage, PageSequence, RasterPage
from .publication import COVER_TOKEN, Publication, page_token
from .result import PublicationResult

__all__ = [
    "COVER_INDEX",
    "COVER_TOKEN",
    "ContentUnit",
    "DeferredTextPage",
    "HarvestConfig",
    "PageSequence",
    "Publication",
    "PublicationResult",
    "RasterPage",
    "page_token",
]
