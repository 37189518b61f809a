"""Custom exceptions for network clients."""


class ClientError(Exception):
    """Base exception for all client errors.

    Attributes:
        message: Human-readable description
        url: The URL that was being requested, if known
    """

    def __init__(self, message: str, url: str | None = None):
        self.message = message
        self.url = url
        super().__init__(message)


class ConnectionError(ClientError):
    """Raised when a request fails at the network level (refused, timed out)."""

    pass


class APIError(ClientError):
    """Raised when the archive answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int, url: str | None = None):
        self.status_code = status_code
        super().__init__(message, url=url)


class RateLimitError(APIError):
    """Raised on 429; the archive is asking us to slow down."""

    def __init__(self, message: str = "Rate limit exceeded", url: str | None = None):
        super().__init__(message, status_code=429, url=url)


class NotFoundError(APIError):
    """Raised on 404, the normal answer for a page index that does not exist."""

    def __init__(self, message: str = "Resource not found", url: str | None = None):
        super().__init__(message, status_code=404, url=url)
