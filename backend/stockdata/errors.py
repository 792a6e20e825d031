"""Exception types raised by the stock data cache.

Each carries the HTTP status the API layer should answer with.
"""

from typing import Optional


class StockDataError(Exception):
    """Base class for request-scoped failures."""

    status_code = 500


class InvalidRequestError(StockDataError):
    """Missing or malformed symbol / range input."""

    status_code = 400


class ConfigError(StockDataError):
    """Required configuration (DSN, API key) is absent."""


class UpstreamError(StockDataError):
    """Market data provider failed or answered with an error document."""

    def __init__(self, message: str, attempt: Optional[int] = None):
        super().__init__(message)
        self.attempt = attempt


class StorageError(StockDataError):
    """Database query or write failed."""
