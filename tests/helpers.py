"""Shared helpers for CALP Distiller tests."""

import asyncio

import fitz  # PyMuPDF
import httpx

BASE_URL = "https://atari8.cz/calp/"
PUBLICATION_URL = f"{BASE_URL}data/pha_91_4/"


def run(coro):
    """Drive a coroutine to completion from a synchronous test."""
    return asyncio.run(coro)


def make_image_bytes(width: int = 40, height: int = 60) -> bytes:
    """Encode a solid grey RGB image of the given size as PNG."""
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(200)
    return pix.tobytes("png")


class FakeArchive:
    """In-memory stand-in for the CALP web site.

    Routes map absolute URLs to (status, body); anything else is a 404.
    Every requested URL is recorded in order.
    """

    def __init__(self):
        self.routes: dict[str, tuple[int, bytes]] = {}
        self.requests: list[str] = []

    def add(self, url: str, content: bytes | str = b"", status: int = 200) -> None:
        if isinstance(content, str):
            content = content.encode("windows-1250")
        self.routes[url] = (status, content)

    def add_page(self, publication_url: str, token: str, extension: str = ".png",
                 width: int = 40, height: int = 60) -> None:
        self.add(f"{publication_url}img/{token}{extension}", make_image_bytes(width, height))

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        status, content = self.routes.get(url, (404, b"Not Found"))
        return httpx.Response(status, content=content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)
