"""Base client for network requests."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from .exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


class Client(ABC):
    """Base class for asynchronous network clients.

    Provides a lazy-initialized httpx.AsyncClient with async context manager
    support, configurable timeout, retries, and headers via dict config.

    Config keys:
        base_url (required): Base URL for all requests
        timeout: Request timeout in seconds (default: 30)
        retry_attempts: Number of attempts for transient failures (default: 3)
        retry_delay: Delay between retries in seconds (default: 1)
        headers: Additional headers to include in requests
    """

    def __init__(
        self,
        config: dict,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if "base_url" not in config:
            raise ValueError("config must include 'base_url'")

        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return str(self._config["base_url"])

    @property
    def timeout(self) -> float:
        return float(self._config.get("timeout", 30))

    @property
    def retry_attempts(self) -> int:
        return int(self._config.get("retry_attempts", 3))

    @property
    def retry_delay(self) -> float:
        return float(self._config.get("retry_delay", 1))

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._config.get("headers", {}))

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-initialized httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Map HTTP errors to exceptions.

        Args:
            response: The HTTP response to check

        Returns:
            The response if successful

        Raises:
            NotFoundError: For 404 responses
            RateLimitError: For 429 responses
            APIError: For other non-2xx responses
        """
        if response.is_success:
            return response

        status_code = response.status_code
        url = str(response.url)

        if status_code == 404:
            raise NotFoundError(f"Resource not found: {url}", url=url)
        elif status_code == 429:
            raise RateLimitError(f"Rate limit exceeded: {url}", url=url)
        else:
            raise APIError(
                f"API error {status_code}: {url}",
                status_code=status_code,
                url=url,
            )

    async def _request(
        self,
        method: str,
        path: str,
        attempts: int | None = None,
        **kwargs,
    ) -> httpx.Response:
        """Make a request with retry logic for transient failures.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: URL path (appended to base_url) or absolute URL
            attempts: Overrides retry_attempts; 1 disables retries
            **kwargs: Additional arguments passed to httpx.request

        Returns:
            The HTTP response

        Raises:
            ConnectionError: If all attempts fail due to network issues
            APIError: If the server returns a non-2xx response
        """
        attempts = attempts or self.retry_attempts
        last_exception: Exception | None = None

        for attempt in range(attempts):
            try:
                response = await self.client.request(method, path, **kwargs)
                return self._handle_response(response)
            except httpx.ConnectError as e:
                last_exception = e
                logger.warning(
                    f"Connection error (attempt {attempt + 1}/{attempts}): {e}"
                )
            except httpx.TimeoutException as e:
                last_exception = e
                logger.warning(f"Timeout (attempt {attempt + 1}/{attempts}): {e}")
            except httpx.TransportError as e:
                last_exception = e
                logger.warning(
                    f"Transport error (attempt {attempt + 1}/{attempts}): {e}"
                )

            if attempt < attempts - 1:
                await asyncio.sleep(self.retry_delay)

        msg = f"Connection failed after {attempts} attempts: {path}"
        raise ConnectionError(msg, url=path) from last_exception

    async def get(self, path: str, **kwargs) -> httpx.Response:
        """Convenience method for GET requests.

        Args:
            path: URL path (appended to base_url) or absolute URL
            **kwargs: Additional arguments passed to _request

        Returns:
            The HTTP response
        """
        return await self._request("GET", path, **kwargs)

    @abstractmethod
    async def fetch(self, *args, **kwargs) -> Any:
        """Fetch data from the remote source. Must be implemented by subclasses."""
        pass
