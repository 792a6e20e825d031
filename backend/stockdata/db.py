"""Database connection and schema initialization for the stock data table."""

import sqlite3
from pathlib import Path
from contextlib import contextmanager
from typing import Generator
import logging

from .errors import ConfigError, StorageError

logger = logging.getLogger(__name__)

SQLITE_SCHEME = "sqlite:///"


def resolve_db_path(dsn: str) -> Path:
    """
    Turn a DSN into a database file path, creating its parent directory.

    Accepts 'sqlite:///data/stocks.db', 'sqlite:////abs/path.db' or a bare path.
    """
    if not dsn:
        raise ConfigError("Missing database DSN")

    if dsn.startswith(SQLITE_SCHEME):
        path_part = dsn[len(SQLITE_SCHEME):]
    elif '://' in dsn:
        raise ConfigError(f"Unsupported database DSN scheme: {dsn.split('://')[0]}")
    else:
        path_part = dsn

    if not path_part:
        raise ConfigError(f"Database DSN has no path: {dsn}")

    db_path = Path(path_part)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return db_path


@contextmanager
def get_connection(db_path: Path) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.

    Args:
        db_path: Path to database file

    Yields:
        SQLite connection with Row factory enabled
    """
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Path) -> None:
    """
    Initialize database schema if tables don't exist.

    Args:
        db_path: Path to database file
    """
    try:
        with get_connection(db_path) as conn:
            cursor = conn.cursor()

            # One row per (date, symbol); refreshes overwrite in place
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS stock_data (
                    date DATE NOT NULL,
                    symbol TEXT NOT NULL,
                    open REAL,
                    high REAL,
                    low REAL,
                    close REAL,
                    volume INTEGER,
                    last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (date, symbol)
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_stock_data_symbol_date
                ON stock_data(symbol, date)
            """)

            conn.commit()
            logger.info(f"Database schema initialized at {db_path}")
    except sqlite3.Error as e:
        raise StorageError(f"Failed to create table: {e}") from e


def get_db_stats(db_path: Path) -> dict:
    """
    Get database statistics.

    Returns:
        Dict with total_symbols, total_records, database_size_mb
    """
    try:
        with get_connection(db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("SELECT COUNT(DISTINCT symbol) FROM stock_data")
            total_symbols = cursor.fetchone()[0]

            cursor.execute("SELECT COUNT(*) FROM stock_data")
            total_records = cursor.fetchone()[0]
    except sqlite3.Error as e:
        raise StorageError(f"Database error: {e}") from e

    size_mb = 0
    if db_path.exists():
        size_mb = round(db_path.stat().st_size / (1024 * 1024), 2)

    return {
        'total_symbols': total_symbols,
        'total_records': total_records,
        'database_size_mb': size_mb
    }
