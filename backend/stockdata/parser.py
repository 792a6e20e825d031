"""Decode Alpha Vantage daily time series documents into typed bars."""

from datetime import date, datetime
from typing import Dict, NamedTuple
import math
import logging

from .errors import UpstreamError

logger = logging.getLogger(__name__)

SERIES_KEY = 'Time Series (Daily)'
META_KEY = 'Meta Data'

# Provider field name -> DailyBar attribute
PRICE_FIELDS = {
    '1. open': 'open',
    '2. high': 'high',
    '3. low': 'low',
    '4. close': 'close',
}
VOLUME_FIELD = '5. volume'
DATE_FORMAT = '%Y-%m-%d'


class DailyBar(NamedTuple):
    date: date
    open: float
    high: float
    low: float
    close: float
    volume: int


def _parse_price(raw) -> float:
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"non-finite price {raw!r}")
    return value


def _parse_volume(raw) -> int:
    text = str(raw)
    if not (text.isascii() and text.isdigit()):
        raise ValueError(f"invalid volume {raw!r}")
    return int(text)


def parse_bar(date_str: str, fields: Dict) -> DailyBar:
    """
    Convert one provider entry to a DailyBar.

    Raises:
        ValueError: naming the first field that failed to parse
    """
    try:
        bar_date = datetime.strptime(date_str, DATE_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise ValueError(f"date: {e}") from e
    # strptime tolerates unpadded fields such as 2024-6-1
    if bar_date.isoformat() != date_str:
        raise ValueError(f"date: {date_str!r} is not YYYY-MM-DD")

    values = {}
    for field, attr in PRICE_FIELDS.items():
        try:
            values[attr] = _parse_price(fields[field])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"{attr}: {e}") from e

    try:
        volume = _parse_volume(fields[VOLUME_FIELD])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"volume: {e}") from e

    return DailyBar(date=bar_date, volume=volume, **values)


def parse_daily_series(payload: Dict) -> Dict[date, DailyBar]:
    """
    Decode a TIME_SERIES_DAILY document.

    A date whose fields fail to parse is skipped and logged; the rest of the
    series is still returned.

    Args:
        payload: Decoded JSON body from the provider

    Returns:
        Dict of date -> DailyBar in ascending date order

    Raises:
        UpstreamError: if the document is a provider error or has no series
    """
    if not isinstance(payload, dict):
        raise UpstreamError(f"Unexpected response type from API: {type(payload).__name__}")

    if 'Error Message' in payload:
        raise UpstreamError(f"API error: {payload['Error Message']}")

    series = payload.get(SERIES_KEY)
    if series is None:
        notice = payload.get('Note') or payload.get('Information')
        if notice:
            raise UpstreamError(f"API notice: {notice}")
        raise UpstreamError(f"Response has no '{SERIES_KEY}' section")
    if not isinstance(series, dict):
        raise UpstreamError(f"Malformed '{SERIES_KEY}' section: {type(series).__name__}")

    meta = payload.get(META_KEY) or {}
    if not isinstance(meta, dict):
        raise UpstreamError(f"Malformed '{META_KEY}' section: {type(meta).__name__}")
    symbol = meta.get('2. Symbol', '?')

    bars = {}
    for date_str, fields in series.items():
        try:
            bar = parse_bar(date_str, fields)
        except ValueError as e:
            logger.warning(f"Skipping {symbol} {date_str}: failed to parse {e}")
            continue
        bars[bar.date] = bar

    return dict(sorted(bars.items()))
