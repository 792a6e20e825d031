"""
Tests for environment configuration, DSN resolution and the refresh script.

Run with: python -m tests.test_config
From the backend directory.
"""

import sys
import os

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import refresh_cache
from config import Config
from stockdata import resolve_db_path
from stockdata.errors import ConfigError, UpstreamError
from stockdata.manager import StockDataManager

ENV_VARS = [
    'DATABASE_DSN', 'ALPHA_VANTAGE_API_KEY', 'PORT', 'ALLOWED_ORIGINS',
    'API_MAX_RETRIES', 'REQUEST_TIMEOUT', 'OUTPUT_SIZE', 'DEBUG', 'LOG_LEVEL',
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return tmp_path / "missing.env"


def test_defaults(monkeypatch, clean_env):
    monkeypatch.setenv('DATABASE_DSN', 'sqlite:///data/stocks.db')

    config = Config.from_env(clean_env)

    assert config.DATABASE_DSN == 'sqlite:///data/stocks.db'
    assert config.ALPHA_VANTAGE_API_KEY == ''
    assert config.PORT == 8080
    assert config.ALLOWED_ORIGINS == ['*']
    assert config.API_MAX_RETRIES == 3
    assert config.OUTPUT_SIZE == 'compact'
    assert config.DEBUG is False


def test_overrides(monkeypatch, clean_env):
    monkeypatch.setenv('DATABASE_DSN', 'stocks.db')
    monkeypatch.setenv('ALPHA_VANTAGE_API_KEY', 'abc123')
    monkeypatch.setenv('PORT', '9000')
    monkeypatch.setenv('ALLOWED_ORIGINS', 'http://localhost:3000, https://example.com')
    monkeypatch.setenv('DEBUG', 'true')
    monkeypatch.setenv('LOG_LEVEL', 'debug')

    config = Config.from_env(clean_env)

    assert config.ALPHA_VANTAGE_API_KEY == 'abc123'
    assert config.PORT == 9000
    assert config.ALLOWED_ORIGINS == ['http://localhost:3000', 'https://example.com']
    assert config.DEBUG is True
    assert config.LOG_LEVEL == 'DEBUG'


def test_missing_dsn_raises(clean_env):
    with pytest.raises(ConfigError, match='DATABASE_DSN'):
        Config.from_env(clean_env)


def test_resolve_sqlite_dsn(tmp_path):
    target = tmp_path / "nested" / "stocks.db"

    assert resolve_db_path(f"sqlite:///{target}") == target
    assert target.parent.is_dir()


def test_resolve_bare_path(tmp_path):
    target = tmp_path / "stocks.db"
    assert resolve_db_path(str(target)) == target


@pytest.mark.parametrize('dsn', ['', 'postgresql://user@host/db', 'sqlite:///'])
def test_resolve_rejects_unusable_dsn(dsn):
    with pytest.raises(ConfigError):
        resolve_db_path(dsn)


def test_refresh_script_reports_failures(monkeypatch, clean_env, tmp_path, capsys):
    monkeypatch.setenv('DATABASE_DSN', str(tmp_path / "cli.db"))
    monkeypatch.setenv('ALPHA_VANTAGE_API_KEY', 'k')

    def fake_fetch_and_store(self, symbol):
        if symbol == 'BAD':
            raise UpstreamError("attempt 3: API error: 503 Service Unavailable", attempt=3)
        return 5

    monkeypatch.setattr(StockDataManager, 'fetch_and_store', fake_fetch_and_store)

    assert refresh_cache.main(['GOOD', 'BAD']) == 1

    out = capsys.readouterr().out
    assert 'GOOD: 5 new records' in out
    assert 'BAD: FAILED' in out


def test_refresh_script_without_dsn(clean_env, capsys):
    assert refresh_cache.main(['AAPL']) == 1
    assert 'DATABASE_DSN' in capsys.readouterr().out


def test_refresh_script_with_unsupported_dsn(monkeypatch, clean_env, capsys):
    monkeypatch.setenv('DATABASE_DSN', 'postgresql://u@h/db')

    assert refresh_cache.main(['AAPL']) == 1
    out = capsys.readouterr().out
    assert 'Error:' in out
    assert 'Unsupported' in out


def test_refresh_script_when_schema_cannot_be_created(monkeypatch, clean_env, tmp_path, capsys):
    # A directory cannot be opened as a database file
    monkeypatch.setenv('DATABASE_DSN', str(tmp_path))

    assert refresh_cache.main(['AAPL']) == 1
    assert 'Error: Failed to create table' in capsys.readouterr().out


if __name__ == "__main__":
    exit(pytest.main([__file__, '-v']))
