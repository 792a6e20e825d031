#!/usr/bin/env python3
"""Script to refresh cached daily data for one or more symbols."""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from config import Config
from stockdata import StockDataManager, resolve_db_path
from stockdata.errors import StockDataError


def main(argv=None):
    parser = argparse.ArgumentParser(description="Refresh cached daily stock data from Alpha Vantage")
    parser.add_argument('symbols', nargs='+', help="Symbols to refresh (e.g. AAPL MSFT)")
    args = parser.parse_args(argv)

    try:
        config = Config.from_env()
        logging.basicConfig(level=config.LOG_LEVEL, format='%(levelname)s: %(message)s')

        db_path = resolve_db_path(config.DATABASE_DSN)
        manager = StockDataManager.from_config(config, db_path)
    except StockDataError as e:
        print(f"Error: {e}")
        return 1

    print(f"\nCache refresh settings:")
    print(f"  Database: {db_path}")
    print(f"  Output size: {config.OUTPUT_SIZE}")
    print(f"  Symbols to refresh: {len(args.symbols)}")

    failed = []
    for symbol in args.symbols:
        try:
            count = manager.fetch_and_store(symbol)
            print(f"  {symbol.upper()}: {count} new records")
        except StockDataError as e:
            print(f"  {symbol.upper()}: FAILED - {e}")
            failed.append(symbol.upper())

    print(f"\nCache refresh complete!")
    print(f"  Successful: {len(args.symbols) - len(failed)}")
    print(f"  Failed: {len(failed)}")
    if failed:
        print(f"  Failed symbols: {', '.join(failed)}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
