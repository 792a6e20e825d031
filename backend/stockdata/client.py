"""Alpha Vantage daily time series client."""

from typing import Callable, Dict
import time
import logging

import requests

from .errors import UpstreamError
from .retry import retry_call, linear_backoff, DEFAULT_MAX_ATTEMPTS

logger = logging.getLogger(__name__)

ALPHA_VANTAGE_URL = "https://www.alphavantage.co/query"


def fetch_daily_series(
    symbol: str,
    api_key: str,
    output_size: str = 'compact',
    session=None,
    sleep: Callable[[float], None] = time.sleep,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    timeout: float = 30,
    base_url: str = ALPHA_VANTAGE_URL
) -> Dict:
    """
    Fetch the TIME_SERIES_DAILY document for a symbol.

    Args:
        symbol: Stock symbol (e.g., 'AAPL')
        api_key: Alpha Vantage API key
        output_size: 'compact' (~100 latest trading days) or 'full'
        session: Object with a requests-style get(); defaults to the requests module
        sleep: Sleep function used between attempts
        max_attempts: Attempts before giving up
        timeout: Per-request timeout in seconds
        base_url: Provider endpoint

    Returns:
        The decoded JSON body

    Raises:
        UpstreamError: if every attempt failed; wraps the last failure
    """
    http = session if session is not None else requests
    params = {
        'function': 'TIME_SERIES_DAILY',
        'symbol': symbol,
        'apikey': api_key,
        'outputsize': output_size
    }

    def attempt_fetch(attempt: int) -> Dict:
        try:
            response = http.get(base_url, params=params, timeout=timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"attempt {attempt}: failed to get stock data: {e}", attempt=attempt) from e

        if not response.ok:
            raise UpstreamError(
                f"attempt {attempt}: API error: {response.status_code} {response.reason}",
                attempt=attempt
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"attempt {attempt}: invalid JSON from API: {e}", attempt=attempt) from e

    logger.debug(f"Requesting {output_size} daily series for {symbol}")
    return retry_call(
        attempt_fetch,
        max_attempts=max_attempts,
        backoff=linear_backoff,
        sleep=sleep,
        retry_on=(UpstreamError,)
    )
