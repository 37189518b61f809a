"""Network clients for the CALP archive."""

from .calp_client import CalpClient
from .client import Client
from .exceptions import (
    APIError,
    ClientError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
)

__all__ = [
    "Client",
    "CalpClient",
    "ClientError",
    "ConnectionError",
    "APIError",
    "RateLimitError",
    "NotFoundError",
]
