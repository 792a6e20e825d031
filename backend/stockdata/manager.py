"""Stock data manager: upstream reconciliation and cached range reads."""

from datetime import date, datetime
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Optional
import logging
import re
import sqlite3

from .client import fetch_daily_series
from .db import get_connection, init_db
from .errors import ConfigError, InvalidRequestError, StorageError, UpstreamError
from .parser import DailyBar, parse_daily_series
from .ranges import TimeRange

logger = logging.getLogger(__name__)

SYMBOL_PATTERN = re.compile(r'^[A-Z0-9.\-^=]{1,15}$')

UPSERT_SQL = """
    INSERT INTO stock_data (date, symbol, open, high, low, close, volume)
    VALUES (?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(date, symbol) DO UPDATE SET
        open = excluded.open,
        high = excluded.high,
        low = excluded.low,
        close = excluded.close,
        volume = excluded.volume,
        last_updated = CURRENT_TIMESTAMP
"""


def normalize_symbol(symbol: Optional[str]) -> str:
    """Upper-case and validate a ticker symbol."""
    if not symbol or not symbol.strip():
        raise InvalidRequestError("Symbol is required")
    normalized = symbol.strip().upper()
    if not SYMBOL_PATTERN.match(normalized):
        raise InvalidRequestError(f"Invalid symbol: {symbol}")
    return normalized


class StockDataManager:
    """
    Keeps the stock_data table in step with the market data provider.

    - fetch_and_store() pulls the latest series and upserts every date
      newer than what is already stored
    - get_range() reads a named range, pulling from the provider first
      when nothing is stored for the symbol yet
    """

    def __init__(
        self,
        db_path: Path,
        api_key: str,
        fetch_func: Callable = None,
        output_size: str = 'compact'
    ):
        """
        Initialize stock data manager.

        Args:
            db_path: SQLite database file
            api_key: Alpha Vantage API key (may be empty; checked per refresh)
            fetch_func: fetch(symbol, api_key, output_size) -> payload dict
                (for dependency injection)
            output_size: Provider output size hint
        """
        self.db_path = db_path
        self.api_key = api_key
        self.output_size = output_size
        self._fetch_func = fetch_func or fetch_daily_series
        init_db(db_path)

    @classmethod
    def from_config(cls, config, db_path: Path, fetch_func: Callable = None) -> 'StockDataManager':
        """Build a manager using the retry and timeout settings from Config."""
        if fetch_func is None:
            fetch_func = partial(
                fetch_daily_series,
                max_attempts=config.API_MAX_RETRIES,
                timeout=config.REQUEST_TIMEOUT
            )
        return cls(
            db_path,
            config.ALPHA_VANTAGE_API_KEY,
            fetch_func=fetch_func,
            output_size=config.OUTPUT_SIZE
        )

    def count_records(self, symbol: str) -> int:
        """Number of stored rows for a symbol."""
        try:
            with get_connection(self.db_path) as conn:
                row = conn.execute(
                    "SELECT COUNT(*) FROM stock_data WHERE symbol = ?", (symbol,)
                ).fetchone()
                return row[0]
        except sqlite3.Error as e:
            raise StorageError(f"Database error: {e}") from e

    def get_latest_date(self, symbol: str) -> Optional[date]:
        """The watermark: newest stored date for a symbol, or None."""
        try:
            with get_connection(self.db_path) as conn:
                row = conn.execute(
                    "SELECT MAX(date) FROM stock_data WHERE symbol = ?", (symbol,)
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"failed to query latest date: {e}") from e

        if row is None or row[0] is None:
            return None
        return self._parse_date(row[0])

    def _parse_date(self, d) -> date:
        """Parse a date from various formats."""
        if isinstance(d, datetime):
            return d.date()
        if isinstance(d, date):
            return d
        if isinstance(d, str):
            return date.fromisoformat(d[:10])
        raise ValueError(f"Cannot parse date: {d}")

    def fetch_and_store(self, symbol: str) -> int:
        """
        Pull the latest series for a symbol and upsert dates past the watermark.

        Args:
            symbol: Stock symbol

        Returns:
            Count of records written

        Raises:
            ConfigError: API key not configured
            UpstreamError: provider unreachable or returned an error
            StorageError: watermark query failed
        """
        symbol = normalize_symbol(symbol)

        if not self.api_key:
            raise ConfigError("missing API key configuration")

        try:
            payload = self._fetch_func(symbol, self.api_key, self.output_size)
        except UpstreamError as e:
            raise UpstreamError(f"failed to fetch stock data: {e}", attempt=e.attempt) from e

        latest_date = self.get_latest_date(symbol)
        bars = parse_daily_series(payload)

        new_bars = [
            bar for bar_date, bar in bars.items()
            if latest_date is None or bar_date > latest_date
        ]

        written = self._store_bars(symbol, new_bars)
        failed = len(new_bars) - written

        logger.info(
            f"Refreshed {symbol}: {written} written, {len(bars) - len(new_bars)} at or before "
            f"watermark {latest_date}, {failed} failed"
        )
        return written

    def _store_bars(self, symbol: str, bars: List[DailyBar]) -> int:
        """Upsert bars one at a time; a failed write is logged and skipped."""
        written = 0
        with get_connection(self.db_path) as conn:
            for bar in bars:
                try:
                    conn.execute(UPSERT_SQL, (
                        bar.date.isoformat(),
                        symbol,
                        bar.open,
                        bar.high,
                        bar.low,
                        bar.close,
                        bar.volume
                    ))
                    conn.commit()
                except sqlite3.Error as e:
                    conn.rollback()
                    logger.warning(f"Failed to insert data for {symbol} {bar.date}: {e}")
                    continue
                written += 1
        return written

    def get_range(
        self,
        symbol: str,
        range_name: str,
        today: date = None
    ) -> List[Dict]:
        """
        Get stored daily records for a symbol over a named range.

        Args:
            symbol: Stock symbol
            range_name: One of 'week', 'month', '6month', 'year'
            today: Reference date for calendar ranges (defaults to date.today())

        Returns:
            List of {date, open, high, low, close, volume} dicts, newest first
        """
        symbol = normalize_symbol(symbol)
        time_range = TimeRange.parse(range_name)

        if self.count_records(symbol) == 0:
            logger.info(f"No cached data for {symbol}, fetching from API")
            self.fetch_and_store(symbol)

        return self._get_from_cache(symbol, time_range, today or date.today())

    def _get_from_cache(self, symbol: str, time_range: TimeRange, today: date) -> List[Dict]:
        """Run the bounded read for a parsed range."""
        query = """
            SELECT date, open, high, low, close, volume
            FROM stock_data
            WHERE symbol = ?
        """
        params = [symbol]

        cutoff = time_range.cutoff(today)
        if cutoff is not None:
            query += " AND date >= ?"
            params.append(cutoff.isoformat())

        query += " ORDER BY date DESC"

        if time_range.row_limit is not None:
            query += " LIMIT ?"
            params.append(time_range.row_limit)

        try:
            with get_connection(self.db_path) as conn:
                rows = conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Database error: {e}") from e

        return [
            {
                'date': self._parse_date(row['date']).isoformat(),
                'open': row['open'],
                'high': row['high'],
                'low': row['low'],
                'close': row['close'],
                'volume': row['volume']
            }
            for row in rows
        ]
