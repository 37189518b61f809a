"""Outcome of processing one publication."""

from typing import Literal

from pydantic import BaseModel


class PublicationResult(BaseModel):
    """Tagged result reported back to the orchestrator.

    Attributes:
        url: Publication URL
        title: Final display title
        status: "completed" when a PDF was written, "skipped" when nothing
                could be fetched, "failed" when processing raised
        output_path: Path of the written PDF, if any
        page_count: Number of pages in the written PDF
        message: Human-readable reason for a skip or failure
    """

    url: str
    title: str
    status: Literal["completed", "skipped", "failed"]
    output_path: str | None = None
    page_count: int = 0
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "completed"
