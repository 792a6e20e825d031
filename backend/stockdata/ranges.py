"""Named time ranges accepted by the stock data endpoint."""

from datetime import date
from enum import Enum
from typing import Optional

import pandas as pd

from .errors import InvalidRequestError


class TimeRange(Enum):
    """Range tokens and how each bounds the read."""
    WEEK = "week"          # 7 most recent stored rows
    MONTH = "month"        # 30 most recent stored rows
    SIX_MONTHS = "6month"  # trailing 6 calendar months
    YEAR = "year"          # trailing calendar year

    @classmethod
    def parse(cls, token: Optional[str]) -> 'TimeRange':
        """Map a query-string token to a TimeRange, rejecting anything else."""
        if not token:
            raise InvalidRequestError("Range parameter is required")
        try:
            return cls(token)
        except ValueError:
            raise InvalidRequestError(f"Invalid time range specified: {token}") from None

    @property
    def row_limit(self) -> Optional[int]:
        """Row cap for count-based ranges, None for calendar ranges."""
        return _ROW_LIMITS.get(self)

    def cutoff(self, today: date) -> Optional[date]:
        """Earliest date included for calendar ranges, None for count-based ones."""
        offset = _CALENDAR_OFFSETS.get(self)
        if offset is None:
            return None
        return (pd.Timestamp(today) - offset).date()


_ROW_LIMITS = {
    TimeRange.WEEK: 7,
    TimeRange.MONTH: 30,
}

_CALENDAR_OFFSETS = {
    TimeRange.SIX_MONTHS: pd.DateOffset(months=6),
    TimeRange.YEAR: pd.DateOffset(years=1),
}
