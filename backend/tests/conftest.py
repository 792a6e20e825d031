"""Shared fixtures: temp database, canned payload, stock data manager."""

import os
import sys
from datetime import date

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stockdata import StockDataManager
from tests.fakes import FakeFetch, daily_bars, make_payload


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "stock_data_test.db"


@pytest.fixture
def today():
    return date(2024, 6, 14)


@pytest.fixture
def payload(today):
    return make_payload('AAPL', daily_bars(today, 100))


@pytest.fixture
def fake_fetch(payload):
    return FakeFetch(payload)


@pytest.fixture
def manager(db_path, fake_fetch):
    return StockDataManager(db_path, 'test-key', fetch_func=fake_fetch)
