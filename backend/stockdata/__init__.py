"""
Stock price cache module.

Keeps daily OHLCV data from Alpha Vantage in a local SQL table.
"""

from .db import init_db, get_connection, get_db_stats, resolve_db_path
from .manager import StockDataManager, normalize_symbol
from .ranges import TimeRange
from .errors import (
    StockDataError,
    InvalidRequestError,
    ConfigError,
    UpstreamError,
    StorageError,
)

__all__ = [
    'init_db',
    'get_connection',
    'get_db_stats',
    'resolve_db_path',
    'StockDataManager',
    'normalize_symbol',
    'TimeRange',
    'StockDataError',
    'InvalidRequestError',
    'ConfigError',
    'UpstreamError',
    'StorageError',
]
